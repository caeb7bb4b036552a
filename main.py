import argparse
import json
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load .env before reading settings
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from synodhub.auth.session import SessionController
from synodhub.models.user import User, UserRole
from synodhub.services.sync_client import SyncClient
from synodhub.utils.config import ConfigManager
from synodhub.utils.exceptions import SynodHubError
from synodhub.utils.logger import setup_logger


def _unhandled_exception(exc_type, exc_value, exc_tb):
    """Print unhandled exceptions with their traceback before exiting."""
    if exc_type is KeyboardInterrupt:
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    msg = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    print("Unhandled exception:\n" + msg, file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="synodhub", description="SynodHub data administration")
    parser.add_argument("--settings", help="Path to settings.yaml")
    parser.add_argument("--as", dest="actor_email", help="Administrator email for admin commands")
    parser.add_argument("--password", help="Administrator password")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Load data and report backend mode and session status")
    sub.add_parser("users", help="List users with status and grace hours")

    approve = sub.add_parser("approve", help="Approve a pending or rejected user")
    approve.add_argument("user_id")
    approve.add_argument("--role", default=UserRole.PASTOR.value, choices=[r.value for r in UserRole])
    approve.add_argument("--district")

    reject = sub.add_parser("reject", help="Reject a pending user")
    reject.add_argument("user_id")

    delete = sub.add_parser("delete", help="Delete a user")
    delete.add_argument("user_id")

    sub.add_parser("purge-expired", help="Delete rejected users whose grace period has run out")

    export = sub.add_parser("export", help="Export the local store as JSON")
    export.add_argument("file", nargs="?", help="Output file (stdout if omitted)")

    import_ = sub.add_parser("import", help="Import a JSON export into the local store")
    import_.add_argument("file")

    reset = sub.add_parser("reset", help="Factory reset the local store")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    api_url = sub.add_parser("set-api-url", help='Set the remote API URL ("" for local mode)')
    api_url.add_argument("url")
    return parser


def _actor(controller: SessionController, args: argparse.Namespace) -> User:
    if not args.actor_email or args.password is None:
        raise SystemExit("This command needs --as EMAIL --password PASSWORD")
    return controller.client.login(args.actor_email, args.password)


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config_manager = ConfigManager(args.settings) if args.settings else ConfigManager()
    settings = config_manager.load_settings()
    setup_logger(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        file_path=settings.logging.file_path,
        max_bytes=settings.logging.max_bytes,
        backup_count=settings.logging.backup_count,
    )

    if args.command == "set-api-url":
        settings = config_manager.set_api_url(args.url)
        print(f"Remote mode: {settings.api_url}" if settings.api_url else "Local mode")
        return 0

    client = SyncClient.from_settings(settings)

    if args.command == "export":
        data = client.export_data()
        if args.file:
            Path(args.file).write_text(data, encoding="utf-8")
            print(f"Exported to {args.file}")
        else:
            print(data)
        return 0

    if args.command == "import":
        count = client.import_data(Path(args.file).read_text(encoding="utf-8"))
        print(f"Imported {count} collections. Reload to apply.")
        return 0

    if args.command == "reset":
        if not args.yes:
            print("Refusing to reset without --yes", file=sys.stderr)
            return 1
        client.reset()
        print("Local store cleared.")
        return 0

    controller = SessionController(client)
    current = controller.initialize()

    if args.command == "init":
        mode = f"remote ({client.api_url})" if client.is_remote else "local"
        print(f"Backend: {mode}")
        print(f"Users: {len(controller.users)}  Announcements: {len(controller.announcements)}  "
              f"Locations: {len(controller.locations)}")
        print(f"Session: {current.email if current else 'logged out'}")
        return 0

    if args.command == "users":
        for user in controller.users:
            status = user.status.value if user.status else "-"
            line = f"{user.id}\t{user.email}\t{user.role.value}\t{status}"
            if user.rejection_date:
                line += f"\t{client.remaining_grace_hours(user):.1f}h left"
            print(line)
        return 0

    actor = _actor(controller, args)
    if args.command == "approve":
        client.approve_user(actor, args.user_id, UserRole(args.role), args.district)
        print(f"Approved {args.user_id}")
    elif args.command == "reject":
        client.reject_user(actor, args.user_id)
        print(f"Rejected {args.user_id}")
    elif args.command == "delete":
        client.delete_user(actor, args.user_id)
        print(f"Deleted {args.user_id}")
    elif args.command == "purge-expired":
        removed = client.purge_expired_rejections(actor)
        print(json.dumps({"removed": removed}))
    return 0


def main() -> None:
    sys.excepthook = _unhandled_exception
    try:
        sys.exit(run())
    except SynodHubError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
