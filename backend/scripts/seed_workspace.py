#!/usr/bin/env python
"""Idempotent bootstrap for a fresh workspace.

Developers can only be created by other developers, so the first account has
to come from here.

Usage:
    python backend/scripts/seed_workspace.py                # ensure the developer account
    python backend/scripts/seed_workspace.py --show-roles   # also print role -> flag counts
    python backend/scripts/seed_workspace.py --export-json  # dump role presets as JSON to stdout
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from fieldops import create_app, get_workspace  # type: ignore
from fieldops.constants.permissions import ALL_PERMISSION_FLAGS, ROLE_PRESETS, default_permissions_for


def summarize_role_presets():
    rows = []
    for role in ROLE_PRESETS:
        granted = sorted(flag for flag, on in default_permissions_for(role).items() if on)
        rows.append((role, len(granted), granted[:8]))
    return rows


def print_role_summary():
    rows = summarize_role_presets()
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, cnt, sample in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(5)} | {', '.join(sample)}")
    print(f"[INFO] {len(ALL_PERMISSION_FLAGS)} flags known")


def build_role_permission_map():
    return {role: sorted(f for f, on in default_permissions_for(role).items() if on) for role in ROLE_PRESETS}


def seed_developer(workspace, name: str, email: str) -> dict:
    existing = workspace.users.find_by_email(email)
    user = workspace.users.ensure_developer(name, email)
    if existing:
        print(f"[INFO] Developer {email} already present ({user['role']}).")
    else:
        print(f"[INFO] Created developer account {email}.")
    return user


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Seed the first developer account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_workspace.py\n  show roles: seed_workspace.py --show-roles\n""")
    )
    p.add_argument('--email', default=os.getenv('SEED_DEVELOPER_EMAIL', 'dev@example.com'), help='Developer e-mail')
    p.add_argument('--name', default=os.getenv('SEED_DEVELOPER_NAME', 'Developer'), help='Developer display name')
    p.add_argument('--show-roles', action='store_true', help='Print role flag counts after seeding')
    p.add_argument('--export-json', action='store_true', help='Print role -> flags JSON to stdout')
    return p.parse_args(argv)


def main(argv=None, app=None):
    args = parse_args(argv)
    app = app or create_app()
    with app.app_context():
        seed_developer(get_workspace(), args.name, args.email)
    if args.show_roles:
        print_role_summary()
    if args.export_json:
        print(json.dumps(build_role_permission_map(), indent=2, sort_keys=True))
    return 0


if __name__ == '__main__':
    sys.exit(main())
