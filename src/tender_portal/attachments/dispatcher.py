"""Action dispatcher: perform the side effect once a URL is known to work."""

import logging
import webbrowser
from pathlib import Path
from typing import Optional, Protocol

import httpx

from tender_portal.credentials import CredentialProvider, auth_headers
from tender_portal.models.attachment import Intent

logger = logging.getLogger(__name__)


class BrowserCapabilities(Protocol):
    """The two host effects an attachment action needs."""

    def open_in_browsing_context(self, url: str) -> None:
        """Open url in a new, unnamed context with no reference back to the caller."""
        ...

    def trigger_save(self, url: str, suggested_name: str) -> None:
        """Save the resource at url under suggested_name, keeping no handle afterwards."""
        ...


class DesktopCapabilities:
    """
    Default host: the system web browser for viewing, a streamed HTTP GET
    into download_dir for saving.
    """

    def __init__(
        self,
        client: httpx.Client,
        download_dir: str | Path,
        credentials: Optional[CredentialProvider] = None,
    ):
        self._client = client
        self._download_dir = Path(download_dir)
        self._credentials = credentials

    def open_in_browsing_context(self, url: str) -> None:
        webbrowser.open_new_tab(url)

    def trigger_save(self, url: str, suggested_name: str) -> Path:
        """Stream url to a non-clashing file named after suggested_name."""
        self._download_dir.mkdir(parents=True, exist_ok=True)
        target = _free_path(self._download_dir, safe_filename(suggested_name))
        try:
            with self._client.stream("GET", url, headers=auth_headers(self._credentials)) as resp:
                resp.raise_for_status()
                with target.open("wb") as fh:
                    for chunk in resp.iter_bytes():
                        fh.write(chunk)
        except (httpx.HTTPError, OSError):
            target.unlink(missing_ok=True)
            raise
        logger.info("Saved %s to %s", url, target)
        return target


class ActionDispatcher:
    """Routes a confirmed URL to the capability for its intent."""

    def __init__(self, capabilities: BrowserCapabilities):
        self._capabilities = capabilities

    def dispatch(self, url: str, intent: Intent | str, display_name: str) -> None:
        intent = Intent(intent)
        if intent == Intent.VIEW:
            self._capabilities.open_in_browsing_context(url)
        else:
            self._capabilities.trigger_save(url, display_name)


def safe_filename(name: str) -> str:
    """Strip directories and characters file systems reject."""
    name = (name or "").replace("\\", "/").split("/")[-1]
    cleaned = "".join("_" if c in '<>:"|?*' or ord(c) < 32 else c for c in name).strip(" .")
    return cleaned or "download"


def _free_path(directory: Path, name: str) -> Path:
    target = directory / name
    stem, suffix = target.stem, target.suffix
    n = 1
    while target.exists():
        target = directory / f"{stem} ({n}){suffix}"
        n += 1
    return target
