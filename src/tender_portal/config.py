"""Portal endpoint settings loaded from the environment or a YAML file."""

import os
from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for settings loading. Run: poetry install"
    ) from e
import httpx
from pydantic import BaseModel, Field, model_validator

DEFAULT_API_BASE = "http://localhost:3001/api"
DEFAULT_LEGACY_STATIC_ROOT = "http://localhost:3001"

DEFAULT_HEADERS = {
    "User-Agent": "tender-portal/0.1 (procurement portal client)",
    "Accept": "application/json, */*;q=0.8",
}

_ENV_KEYS = {
    "api_base": "TENDER_PORTAL_API_BASE",
    "privileged_base": "TENDER_PORTAL_PRIVILEGED_BASE",
    "static_root": "TENDER_PORTAL_STATIC_ROOT",
    "legacy_static_root": "TENDER_PORTAL_LEGACY_STATIC_ROOT",
    "login_url": "TENDER_PORTAL_LOGIN_URL",
    "timeout": "TENDER_PORTAL_TIMEOUT",
    "download_dir": "TENDER_PORTAL_DOWNLOAD_DIR",
}


class PortalSettings(BaseModel):
    """Where the backend lives and how to talk to it."""

    api_base: str = DEFAULT_API_BASE
    privileged_base: Optional[str] = Field(
        default=None,
        description="Base for the admin endpoints; defaults to <api_base>/admin",
    )
    static_root: Optional[str] = Field(
        default=None,
        description="Root serving /uploads; defaults to api_base without /api",
    )
    legacy_static_root: str = Field(
        default=DEFAULT_LEGACY_STATIC_ROOT,
        description="Second static root for deployments without the /api rewrite",
    )
    login_url: str = "/login"
    elevated_roles: list[str] = Field(default_factory=lambda: ["admin"])
    timeout: float = 30.0
    download_dir: Path = Field(default_factory=lambda: Path.cwd())

    @model_validator(mode="after")
    def _fill_derived(self) -> "PortalSettings":
        self.api_base = self.api_base.rstrip("/")
        if not self.privileged_base:
            self.privileged_base = f"{self.api_base}/admin"
        self.privileged_base = self.privileged_base.rstrip("/")
        if not self.static_root:
            root = self.api_base
            if root.endswith("/api"):
                root = root[: -len("/api")]
            self.static_root = root
        self.static_root = self.static_root.rstrip("/")
        self.legacy_static_root = self.legacy_static_root.rstrip("/")
        return self

    def is_elevated(self, role: Optional[str]) -> bool:
        """True when the role may use the privileged endpoints."""
        if not role:
            return False
        return role.lower() in {r.lower() for r in self.elevated_roles}

    @classmethod
    def from_env(cls) -> "PortalSettings":
        """Build settings from TENDER_PORTAL_* environment variables."""
        values: dict = {}
        for field, env_var in _ENV_KEYS.items():
            value = os.environ.get(env_var)
            if value:
                values[field] = value
        roles = os.environ.get("TENDER_PORTAL_ELEVATED_ROLES")
        if roles:
            values["elevated_roles"] = [r.strip() for r in roles.split(",") if r.strip()]
        return cls.model_validate(values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "PortalSettings":
        """Load settings from YAML. Supports a nested `portal:` section or flat keys."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        section = data.get("portal") or data
        return cls.model_validate({k: v for k, v in section.items() if v is not None})


def build_client(settings: PortalSettings) -> httpx.Client:
    """Shared HTTP client. Credentials are applied per request, not here."""
    return httpx.Client(
        timeout=settings.timeout,
        follow_redirects=True,
        headers=DEFAULT_HEADERS,
    )
