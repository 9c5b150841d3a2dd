"""Tests for the action dispatcher and the attachment action pipeline."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from tender_portal.attachments import (
    ActionDispatcher,
    AttachmentActions,
    DesktopCapabilities,
    ResourceLocator,
    format_file_size,
)
from tender_portal.attachments.dispatcher import safe_filename
from tender_portal.models.attachment import Intent, ResolvedAttachment
from tender_portal.sources.envelopes import normalize

from conftest import API, STATIC


class FakeCapabilities:
    """Records effects instead of touching a browser or the disk."""

    def __init__(self) -> None:
        self.opened: list[str] = []
        self.saved: list[tuple[str, str]] = []

    def open_in_browsing_context(self, url: str) -> None:
        self.opened.append(url)

    def trigger_save(self, url: str, suggested_name: str) -> None:
        self.saved.append((url, suggested_name))


@pytest.fixture
def capabilities() -> FakeCapabilities:
    return FakeCapabilities()


@pytest.fixture
def notices() -> list[str]:
    return []


@pytest.fixture
def actions(http_client, settings, credentials, capabilities, notices) -> AttachmentActions:
    return AttachmentActions(
        ResourceLocator(http_client, settings, credentials),
        ActionDispatcher(capabilities),
        notify=notices.append,
    )


@pytest.fixture
def record(tender_data):
    return normalize("standard", tender_data)


class TestActionDispatcher:
    def test_view_opens(self, capabilities) -> None:
        ActionDispatcher(capabilities).dispatch("http://x.test/a.pdf", Intent.VIEW, "A.pdf")
        assert capabilities.opened == ["http://x.test/a.pdf"]
        assert capabilities.saved == []

    def test_download_saves_with_display_name(self, capabilities) -> None:
        ActionDispatcher(capabilities).dispatch("http://x.test/a.pdf", "download", "Spec.pdf")
        assert capabilities.saved == [("http://x.test/a.pdf", "Spec.pdf")]
        assert capabilities.opened == []


class TestDesktopCapabilities:
    def test_view_uses_new_tab(self, http_client, tmp_path) -> None:
        caps = DesktopCapabilities(http_client, tmp_path)
        with patch("tender_portal.attachments.dispatcher.webbrowser.open_new_tab") as mock_open:
            caps.open_in_browsing_context("http://x.test/a.pdf")
        mock_open.assert_called_once_with("http://x.test/a.pdf")

    def test_save_writes_file(self, http_client, portal, tmp_path) -> None:
        portal.add("GET", f"{STATIC}/uploads/file-1-2.pdf", content=b"%PDF-1.4 data")
        caps = DesktopCapabilities(http_client, tmp_path / "dl")
        path = caps.trigger_save("http://portal.test/uploads/file-1-2.pdf", "Spec.pdf")
        assert path == tmp_path / "dl" / "Spec.pdf"
        assert path.read_bytes() == b"%PDF-1.4 data"

    def test_save_does_not_overwrite(self, http_client, portal, tmp_path) -> None:
        portal.add("GET", f"{STATIC}/uploads/file-1-2.pdf", content=b"new")
        (tmp_path / "Spec.pdf").write_bytes(b"old")
        path = DesktopCapabilities(http_client, tmp_path).trigger_save(
            "http://portal.test/uploads/file-1-2.pdf", "Spec.pdf"
        )
        assert path.name == "Spec (1).pdf"
        assert (tmp_path / "Spec.pdf").read_bytes() == b"old"

    def test_failed_save_leaves_nothing(self, http_client, tmp_path) -> None:
        with pytest.raises(httpx.HTTPStatusError):
            DesktopCapabilities(http_client, tmp_path).trigger_save(
                "http://portal.test/uploads/missing.pdf", "Missing.pdf"
            )
        assert list(tmp_path.iterdir()) == []

    def test_safe_filename(self) -> None:
        assert safe_filename("../../etc/passwd") == "passwd"
        assert safe_filename('bad:name?.pdf') == "bad_name_.pdf"
        assert safe_filename("") == "download"


class TestAttachmentActions:
    """End-to-end: resolve, probe, dispatch."""

    def test_download_generated_attachment(self, actions, portal, record, capabilities) -> None:
        portal.add("HEAD", f"{API}/upload/download/file-1690000000-123.pdf")
        assert actions.perform(record, 0, "download") is True
        url, name = capabilities.saved[0]
        assert name == "Specification.pdf"
        assert url.endswith("/upload/download/file-1690000000-123.pdf?original=Specification.pdf")

    def test_view_document_uses_nested_name_without_lookup(
        self, actions, portal, record, capabilities
    ) -> None:
        portal.add("HEAD", f"{API}/upload/view/file-1690000001-456.docx")
        assert actions.perform(record, 0, Intent.VIEW, kind="documents") is True
        assert capabilities.opened == [f"http://{API}/upload/view/file-1690000001-456.docx"]
        assert portal.paths("GET") == []

    def test_plain_name_triggers_files_lookup(self, actions, portal, record, capabilities) -> None:
        portal.add(
            "GET",
            f"{API}/tenders/42/files",
            json={"files": [{"filename": "file-1-1.pdf"}, {"filename": "file-5-6.docx"}]},
        )
        portal.add("HEAD", f"{API}/upload/view/file-5-6.docx")
        assert actions.perform(record, 1, "view") is True
        assert capabilities.opened == [f"http://{API}/upload/view/file-5-6.docx"]

    def test_unreachable_notifies_once(self, actions, record, notices, capabilities) -> None:
        assert actions.perform(record, 0, "download") is False
        assert notices == [
            "Unable to access file: Specification.pdf. The file may be missing or inaccessible."
        ]
        assert capabilities.saved == []

    def test_save_failure_reported_like_missing_file(self, http_client, settings, portal, record, notices) -> None:
        portal.add("HEAD", f"{API}/upload/download/file-1690000000-123.pdf")
        caps = MagicMock()
        caps.trigger_save.side_effect = OSError("disk full")
        acts = AttachmentActions(
            ResourceLocator(http_client, settings), ActionDispatcher(caps), notify=notices.append
        )
        assert acts.perform(record, 0, "download") is False
        assert "Specification.pdf" in notices[0]

    def test_unretrievable_descriptor(self, actions, notices, portal) -> None:
        assert actions.run(ResolvedAttachment(), "view") is False
        assert len(notices) == 1
        assert portal.requests == []

    def test_cancelled_action_is_silent(self, actions, portal, record, notices, capabilities) -> None:
        portal.add("HEAD", f"{API}/upload/view/file-1690000000-123.pdf")
        assert actions.perform(record, 0, "view", should_continue=lambda: False) is False
        assert notices == []
        assert capabilities.opened == []

    def test_bad_index(self, actions, record) -> None:
        with pytest.raises(IndexError):
            actions.perform(record, 5, "view")

    def test_every_click_probes_again(self, actions, portal, record) -> None:
        portal.add("HEAD", f"{API}/upload/view/file-1690000000-123.pdf")
        actions.perform(record, 0, "view")
        actions.perform(record, 0, "view")
        assert len(portal.paths("HEAD")) == 2


class TestFormatFileSize:
    @pytest.mark.parametrize(
        "size,expected",
        [
            (None, "Unknown size"),
            (0, "Unknown size"),
            (500, "500 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5 MB"),
            (3 * 1024 ** 4, "3072 GB"),
        ],
    )
    def test_format(self, size, expected) -> None:
        assert format_file_size(size) == expected
