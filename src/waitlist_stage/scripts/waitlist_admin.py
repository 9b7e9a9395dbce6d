"""Inspect the configured waitlist store from the command line.

Usage:
  python -m waitlist_stage.scripts.waitlist_admin count
  python -m waitlist_stage.scripts.waitlist_admin list --limit 20
  python -m waitlist_stage.scripts.waitlist_admin verify

Exit code is 1 when the store is unreachable or ``verify`` finds the total
out of line with the seed plus the number of registered emails.
"""

from __future__ import annotations

import argparse
import sys

from waitlist_stage.core.settings import settings
from waitlist_stage.services.errors import StorageUnavailableError
from waitlist_stage.services.store import SignupStore, build_store


def say(msg: str) -> None:
    print(f"[waitlist] {msg}")


def fail(msg: str) -> None:
    print(f"[waitlist][FAIL] {msg}", file=sys.stderr)


def show_count(store: SignupStore) -> int:
    say(f"count={store.get_count()}")
    return 0


def show_signups(store: SignupStore, limit: int | None) -> int:
    records = store.list_signups()
    for record in records[:limit]:
        print(f"{record.submitted_at.isoformat()}\t{record.email}")
    say(f"{len(records)} signups")
    return 0


def verify(store: SignupStore) -> int:
    snapshot = store.snapshot()
    expected = store.seed_count + len(snapshot.emails)
    if snapshot.total_count != expected:
        fail(f"totalCount={snapshot.total_count} but seed+emails={expected}")
        return 1
    say(f"ok: totalCount={snapshot.total_count} ({len(snapshot.emails)} emails)")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect the waitlist store")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("count", help="Print the current count")
    listing = sub.add_parser("list", help="List signups, most recent first")
    listing.add_argument("--limit", type=int, default=None)
    sub.add_parser("verify", help="Check totalCount == seed + number of emails")
    args = parser.parse_args(argv)

    try:
        store = build_store(settings)
    except StorageUnavailableError as exc:
        fail(str(exc))
        return 1

    try:
        if args.command == "count":
            return show_count(store)
        if args.command == "list":
            return show_signups(store, args.limit)
        return verify(store)
    except StorageUnavailableError as exc:
        fail(str(exc))
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
