"""CLI for PawLink — create tables, seed profiles, inspect reports."""

from __future__ import annotations

import argparse
import asyncio
import sys


async def cmd_init_db(args):
    """Create all tables in the configured database."""
    from pawlink.config import get_settings
    from pawlink.db.engine import create_tables

    await create_tables()
    print(f"Tables created in {get_settings().database_url}")


async def cmd_add_profile(args):
    """Insert a profile so the identity header resolves to a role."""
    from pawlink.db.engine import async_session_factory
    from pawlink.db.store import RecordStore
    from pawlink.errors import StoreError
    from pawlink.services.identity import Role

    role = Role.parse(args.role)
    if role.value != args.role.strip().lower() and args.role.strip().lower() != "user":
        print(f"Unknown role '{args.role}'. Use one of: {', '.join(r.value for r in Role)}")
        sys.exit(1)

    record = {"full_name": args.name, "role": role.value}
    if args.id:
        record["id"] = args.id
    if args.avatar_url:
        record["avatar_url"] = args.avatar_url

    store = RecordStore(async_session_factory)
    try:
        rows = await store.insert("profiles", [record])
    except StoreError as e:
        print(f"Could not create profile: {e.message}")
        sys.exit(1)
    print(f"Profile created: {rows[0]['full_name']} (id={rows[0]['id']}, role={rows[0]['role']})")


async def cmd_list_reports(args):
    """Print reports newest-first, optionally only those assigned to one responder."""
    from pawlink.db.engine import async_session_factory
    from pawlink.db.store import RecordStore
    from pawlink.services.report_repository import ReportFilter, ReportRepository
    from pawlink.time_utils import format_iso_z

    repo = ReportRepository(RecordStore(async_session_factory))
    report_filter = ReportFilter.assigned(args.rescuer) if args.rescuer else ReportFilter.all()
    reports = await repo.fetch_all(report_filter)
    if not reports:
        print("No reports.")
        return
    for r in reports:
        pickup = format_iso_z(r.expected_pickup_time) or "-"
        print(
            f"{r.id}  {r.status.value:<9} {r.urgency.value:<8} pickup={pickup}  "
            f"reporter={r.reporter_name or r.user_id}  {r.location or '(map pin)'}"
        )


def main():
    parser = argparse.ArgumentParser(description="PawLink CLI")
    subparsers = parser.add_subparsers(dest="command")

    # init-db
    subparsers.add_parser("init-db", help="Create database tables")

    # add-profile
    ap = subparsers.add_parser("add-profile", help="Create a profile (citizen, rescuer, shelter, vet, admin)")
    ap.add_argument("--name", required=True, help="Full name")
    ap.add_argument("--role", required=True, help="Role")
    ap.add_argument("--id", default="", help="Identity provider user id (generated if omitted)")
    ap.add_argument("--avatar-url", default="", help="Avatar URL")

    # list-reports
    lr = subparsers.add_parser("list-reports", help="List reports newest-first")
    lr.add_argument("--rescuer", default="", help="Only reports assigned to this responder id")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "add-profile":
        asyncio.run(cmd_add_profile(args))
    elif args.command == "list-reports":
        asyncio.run(cmd_list_reports(args))


if __name__ == "__main__":
    main()
