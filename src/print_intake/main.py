"""Command-line entry point for the kiosk and the operator dashboard."""

import argparse
import asyncio
import sys
from pathlib import Path

from print_intake.app_logging import configure_logging
from print_intake.config import ClientSettings
from print_intake.containers import ClientContainer, build_client_container
from print_intake.errors import EncodingError
from print_intake.services.frames import load_image_file


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="print-intake",
        description="Print Intake: capture customer photos and manage submissions.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Capture a photo and upload it")
    submit.add_argument("--email", required=True)
    submit.add_argument("--folder-number", required=True)
    submit.add_argument(
        "--image", type=Path, help="Upload this image file instead of the camera"
    )

    for name, help_text in (
        ("list", "List stored submissions"),
        ("delete", "Delete a stored submission"),
        ("draft", "Generate an email draft for a submission"),
    ):
        command = sub.add_parser(name, help=help_text)
        if name != "list":
            command.add_argument("record_id")
        command.add_argument("--password", help="Dashboard password")
    return parser


async def _submit(container: ClientContainer, args: argparse.Namespace) -> int:
    intake = container.intake
    if args.image is not None:
        try:
            intake.use_image(load_image_file(args.image))
        except EncodingError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    elif await intake.capture() is None:
        print(f"Error: {intake.error}", file=sys.stderr)
        return 1
    receipt = await intake.submit(args.email, args.folder_number)
    if receipt is None:
        print(f"Submission failed: {intake.error}", file=sys.stderr)
        return 1
    print(f"Submitted {receipt.name} ({receipt.record_id})")
    return 0


async def _dashboard(container: ClientContainer, args: argparse.Namespace) -> int:
    dashboard = container.dashboard
    password = args.password or container.settings.dashboard_password or ""
    if not await dashboard.gate.login(password):
        print("Incorrect password. Please try again.", file=sys.stderr)
        return 1
    if dashboard.error is None and args.command == "list":
        for entry in dashboard.submissions:
            print(f"{entry.id}\t{entry.email}\t{entry.folder_number}\t{entry.photo_ref}")
    elif dashboard.error is None and args.command == "delete":
        await dashboard.delete(args.record_id)
    elif dashboard.error is None and args.command == "draft":
        body = await dashboard.generate_draft(args.record_id)
        if body is None and dashboard.error is None:
            dashboard.error = f"No submission with id {args.record_id}"
        if body is not None:
            print(body)
    if dashboard.error is not None:
        print(f"Error: {dashboard.error}", file=sys.stderr)
        return 1
    return 0


async def _run(args: argparse.Namespace, settings: ClientSettings | None) -> int:
    container = build_client_container(settings)
    try:
        if args.command == "submit":
            return await _submit(container, args)
        return await _dashboard(container, args)
    finally:
        await container.close_resources()


def main(argv: list[str] | None = None, settings: ClientSettings | None = None) -> int:
    """Run the command line interface and return an exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
