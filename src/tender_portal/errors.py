"""Error taxonomy for record fetches and attachment actions."""

from typing import Optional


class PortalError(Exception):
    """Base class for all portal client errors."""

    user_message = "Something went wrong. Please try again."
    retryable = True


class MalformedResponse(PortalError):
    """No tender-like object could be located in a payload."""

    user_message = "Unable to load tender details. Please try again."


class AuthExpired(PortalError):
    """The backend rejected the credential (HTTP 401)."""

    user_message = "Authentication failed. Please login again."
    retryable = False

    def __init__(self, message: str = "Authentication expired", login_url: str = "/login"):
        super().__init__(message)
        self.login_url = login_url


class NotFound(PortalError):
    """HTTP 404 on the primary record fetch."""

    user_message = "Tender not found. It may have been deleted."


class Forbidden(PortalError):
    """HTTP 403 on the primary record fetch."""

    user_message = "You do not have permission to view this tender."


class RecordFetchFailed(PortalError):
    """Any other HTTP or transport failure on the primary record fetch."""

    user_message = "Unable to load tender details. Please try again."

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResourceUnavailable(PortalError):
    """Every candidate URL for an attachment failed its probe."""

    def __init__(self, display_name: str, tried: Optional[list[str]] = None):
        super().__init__(f"No reachable URL for {display_name!r}")
        self.display_name = display_name
        self.tried = tried or []

    @property
    def user_message(self) -> str:  # type: ignore[override]
        name = self.display_name or "attachment"
        return (
            f"Unable to access file: {name}. "
            "The file may be missing or inaccessible."
        )


class ActionCancelled(PortalError):
    """The owner of an in-flight action went away; its result is discarded."""

    retryable = False
