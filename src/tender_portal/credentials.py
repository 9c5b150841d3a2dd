"""Bearer credential sources.

The portal client never stores or refreshes tokens itself. It asks a
CredentialProvider for the current token and tells it to forget the token
when the backend answers 401.
"""

import os
from typing import Optional, Protocol


class CredentialProvider(Protocol):
    """Opaque source of an optional bearer token."""

    def get_token(self) -> Optional[str]:
        ...

    def clear(self) -> None:
        ...


class MemoryCredentialStore:
    """Holds a token in memory for the lifetime of the process."""

    def __init__(self, token: Optional[str] = None):
        self._token = token or None

    def get_token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token or None

    def clear(self) -> None:
        self._token = None


class EnvCredentialStore:
    """Reads the token from TENDER_PORTAL_TOKEN; clearing masks it for this process."""

    ENV_VAR = "TENDER_PORTAL_TOKEN"

    def __init__(self, env_var: Optional[str] = None):
        self._env_var = env_var or self.ENV_VAR
        self._cleared = False

    def get_token(self) -> Optional[str]:
        if self._cleared:
            return None
        return (os.environ.get(self._env_var) or "").strip() or None

    def clear(self) -> None:
        self._cleared = True


def auth_headers(credentials: Optional[CredentialProvider]) -> dict[str, str]:
    """Authorization header for the current token, or nothing."""
    token = credentials.get_token() if credentials else None
    return {"Authorization": f"Bearer {token}"} if token else {}
