#!/usr/bin/env python3
"""
Print which stored investments match which SODA3 fund.

Walks the latest position of every investment whose country is the configured
match country and reports the fund the prefix matcher picks (or none). Useful
when a fund gets renamed upstream or a new share class starts shadowing the
one we hold.
"""

from __future__ import annotations

import argparse
import os
import sys

# Ensure repo root on sys.path before importing app.*
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.infra.db import SessionLocal  # noqa: E402
from app.infra.settings import settings  # noqa: E402
from app.services.fund_matcher import match_fund  # noqa: E402
from app.services.funds import fetch_latest_records  # noqa: E402
from app.services.queries import get_snapshots  # noqa: E402
from app.services.rollups import latest_positions  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Report SODA3 fund matches for stored investments.")
    parser.add_argument(
        "--prefix-len",
        type=int,
        default=settings.soda3_match_prefix_len,
        help=f"Name prefix length used by the matcher (default: {settings.soda3_match_prefix_len})",
    )
    parser.add_argument(
        "--country",
        type=str,
        default=settings.soda3_match_country,
        help=f"Only report investments in this country (default: {settings.soda3_match_country})",
    )
    args = parser.parse_args()

    records = fetch_latest_records()
    if not records:
        print("[match] no SODA3 records available")
        return 1

    with SessionLocal() as db:
        positions = latest_positions(get_snapshots(db))

    matched = 0
    checked = 0
    for p in positions:
        inv = p.investment
        if inv is None or inv.country != args.country:
            continue
        checked += 1
        rec = match_fund(inv.name, records, prefix_len=args.prefix_len)
        if rec is None:
            print(f"  -  {inv.name}: no match")
            continue
        matched += 1
        print(f"  +  {inv.name} -> {rec.fund_name} ({rec.entity_name}) apy={rec.annual_return}")

    print(f"[match] {matched}/{checked} investments matched against {len(records)} SODA3 rows")
    return 0


if __name__ == "__main__":
    sys.exit(main())
