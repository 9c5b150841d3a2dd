"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="tender-portal", description="Procurement portal client")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML (default: TENDER_PORTAL_* environment variables)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # show
    show_parser = subparsers.add_parser("show", help="Print one tender as JSON")
    show_parser.add_argument("tender_id", help="Tender ID")
    show_parser.add_argument(
        "--role",
        type=str,
        default=None,
        help="Caller role; elevated roles (admin) try the privileged endpoint first",
    )

    # attachments
    att_parser = subparsers.add_parser("attachments", help="List resolved attachment names")
    att_parser.add_argument("tender_id", help="Tender ID")
    att_parser.add_argument("--role", type=str, default=None)
    att_parser.add_argument(
        "--documents",
        action="store_true",
        help="List the documents column instead of attachments",
    )

    # view / download
    for name, help_text in (
        ("view", "Open an attachment in the browser"),
        ("download", "Save an attachment under its original name"),
    ):
        action_parser = subparsers.add_parser(name, help=help_text)
        action_parser.add_argument("tender_id", help="Tender ID")
        action_parser.add_argument("index", type=int, help="Attachment position (0-based)")
        action_parser.add_argument("--role", type=str, default=None)
        action_parser.add_argument("--documents", action="store_true")
        if name == "download":
            action_parser.add_argument(
                "--dir",
                type=Path,
                default=None,
                help="Download directory (default: settings download_dir)",
            )

    # search
    search_parser = subparsers.add_parser("search", help="List tenders")
    search_parser.add_argument("query", nargs="?", default=None, help="Search text")
    search_parser.add_argument("--status", type=str, default=None, help="e.g. open, closed")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from tender_portal.errors import PortalError

    try:
        if args.command == "show":
            _run_show(args)
        elif args.command == "attachments":
            _run_attachments(args)
        elif args.command in ("view", "download"):
            _run_action(args)
        elif args.command == "search":
            _run_search(args)
        else:
            parser.print_help()
    except PortalError as e:
        print(e.user_message, file=sys.stderr)
        raise SystemExit(1)


def _settings(args: argparse.Namespace):
    from tender_portal.config import PortalSettings

    if args.config:
        return PortalSettings.from_yaml(args.config)
    return PortalSettings.from_env()


def _fetcher(args: argparse.Namespace):
    from tender_portal.credentials import EnvCredentialStore
    from tender_portal.sources import TenderFetcher

    def _login_hint(login_url: str) -> None:
        print(f"Session expired. Log in again at {login_url} and refresh TENDER_PORTAL_TOKEN.", file=sys.stderr)

    return TenderFetcher(
        _settings(args),
        credentials=EnvCredentialStore(),
        on_reauthenticate=_login_hint,
    )


def _run_show(args: argparse.Namespace) -> None:
    """Run show command."""
    record = _fetcher(args).fetch(args.tender_id, role=args.role)
    data = record.model_dump(mode="json", exclude={"raw"})
    data["deadline_passed"] = record.deadline_passed()
    data["days_remaining"] = record.days_remaining()
    data["biddable"] = record.is_biddable(args.role)
    print(json.dumps(data, indent=2, default=str))


def _run_attachments(args: argparse.Namespace) -> None:
    """Run attachments command."""
    from tender_portal.attachments import format_file_size, looks_generated, resolve

    record = _fetcher(args).fetch(args.tender_id, role=args.role)
    kind = "documents" if args.documents else "attachments"
    descriptors = record.attachment_list(kind)
    if not descriptors:
        print(f"No {kind} on tender {record.id}.")
        return
    for i, descriptor in enumerate(descriptors):
        resolved = resolve(descriptor)
        marker = "" if looks_generated(resolved.storage_name) else " (unverified name)"
        details = format_file_size(descriptor.size_bytes)
        if descriptor.mime_type:
            details += f", {descriptor.mime_type}"
        print(
            f"  {i}. {resolved.display_name or '(unnamed)'} [{details}] -> {resolved.storage_name or '-'}{marker}"
        )


def _run_action(args: argparse.Namespace) -> None:
    """Run view or download command."""
    from tender_portal.attachments import (
        ActionDispatcher,
        AttachmentActions,
        DesktopCapabilities,
        ResourceLocator,
    )

    fetcher = _fetcher(args)
    settings = fetcher.settings
    record = fetcher.fetch(args.tender_id, role=args.role)

    download_dir = getattr(args, "dir", None) or settings.download_dir
    capabilities = DesktopCapabilities(fetcher.client, download_dir, fetcher.credentials)
    failures: list[str] = []
    actions = AttachmentActions(
        ResourceLocator(fetcher.client, settings, fetcher.credentials),
        ActionDispatcher(capabilities),
        notify=failures.append,
    )
    kind = "documents" if args.documents else "attachments"
    try:
        ok = actions.perform(record, args.index, args.command, kind=kind)
    except IndexError as e:
        raise SystemExit(str(e))
    if not ok:
        for message in failures:
            print(message, file=sys.stderr)
        raise SystemExit(1)


def _run_search(args: argparse.Namespace) -> None:
    """Run search command."""
    filters = {"status": args.status} if args.status else {}
    records = _fetcher(args).list_tenders(search=args.query, **filters)
    if not records:
        print("No tenders found.")
        return
    for record in records:
        print(f"  [{record.status or '?'}] {record.id}: {record.title} ({_deadline_label(record)})")


def _deadline_label(record) -> str:
    """e.g. 'deadline 2030-01-15, 5 days left' or 'deadline 2024-03-01, closed'."""
    if record.deadline is None:
        return "no deadline"
    label = f"deadline {record.deadline.date().isoformat()}"
    if record.deadline_passed():
        return f"{label}, closed"
    days = record.days_remaining()
    return f"{label}, {days} day{'' if days == 1 else 's'} left"


if __name__ == "__main__":
    main()
