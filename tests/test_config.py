"""Tests for portal settings."""

from pathlib import Path

import httpx

from tender_portal.config import DEFAULT_HEADERS, PortalSettings, build_client


class TestPortalSettings:
    """Derived defaults and loaders."""

    def test_defaults(self) -> None:
        settings = PortalSettings()
        assert settings.api_base == "http://localhost:3001/api"
        assert settings.privileged_base == "http://localhost:3001/api/admin"
        assert settings.static_root == "http://localhost:3001"
        assert settings.legacy_static_root == "http://localhost:3001"
        assert settings.login_url == "/login"

    def test_trailing_slashes_stripped(self) -> None:
        settings = PortalSettings(api_base="https://tenders.example/api/", legacy_static_root="https://old.example/")
        assert settings.api_base == "https://tenders.example/api"
        assert settings.static_root == "https://tenders.example"
        assert settings.legacy_static_root == "https://old.example"

    def test_explicit_bases_kept(self) -> None:
        settings = PortalSettings(
            api_base="https://a.example/v2",
            privileged_base="https://admin.example/",
            static_root="https://cdn.example",
        )
        assert settings.privileged_base == "https://admin.example"
        assert settings.static_root == "https://cdn.example"

    def test_api_base_without_api_suffix(self) -> None:
        assert PortalSettings(api_base="https://a.example").static_root == "https://a.example"

    def test_is_elevated(self) -> None:
        settings = PortalSettings(elevated_roles=["admin", "Auditor"])
        assert settings.is_elevated("ADMIN")
        assert settings.is_elevated("auditor")
        assert not settings.is_elevated("vendor")
        assert not settings.is_elevated(None)

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("TENDER_PORTAL_API_BASE", "https://env.example/api")
        monkeypatch.setenv("TENDER_PORTAL_TIMEOUT", "5")
        monkeypatch.setenv("TENDER_PORTAL_ELEVATED_ROLES", "admin, reviewer,")
        monkeypatch.delenv("TENDER_PORTAL_LOGIN_URL", raising=False)
        settings = PortalSettings.from_env()
        assert settings.api_base == "https://env.example/api"
        assert settings.timeout == 5.0
        assert settings.elevated_roles == ["admin", "reviewer"]
        assert settings.login_url == "/login"

    def test_from_yaml_nested(self, tmp_path: Path) -> None:
        path = tmp_path / "portal.yaml"
        path.write_text(
            "portal:\n"
            "  api_base: https://yaml.example/api\n"
            "  download_dir: /tmp/tenders\n"
            "  login_url: null\n"
        )
        settings = PortalSettings.from_yaml(path)
        assert settings.api_base == "https://yaml.example/api"
        assert settings.download_dir == Path("/tmp/tenders")
        assert settings.login_url == "/login"

    def test_from_yaml_flat_and_empty(self, tmp_path: Path) -> None:
        flat = tmp_path / "flat.yaml"
        flat.write_text("timeout: 12\n")
        assert PortalSettings.from_yaml(flat).timeout == 12.0
        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        assert PortalSettings.from_yaml(empty).api_base == "http://localhost:3001/api"

    def test_from_yaml_null_portal_section(self, tmp_path: Path) -> None:
        """An empty `portal:` key falls back to defaults instead of failing."""
        path = tmp_path / "null.yaml"
        path.write_text("portal:\n")
        settings = PortalSettings.from_yaml(path)
        assert settings.api_base == "http://localhost:3001/api"
        assert settings.login_url == "/login"


class TestBuildClient:
    def test_client_settings(self) -> None:
        client = build_client(PortalSettings(timeout=7))
        try:
            assert isinstance(client, httpx.Client)
            assert client.timeout.read == 7
            assert client.follow_redirects is True
            assert client.headers["User-Agent"] == DEFAULT_HEADERS["User-Agent"]
        finally:
            client.close()
