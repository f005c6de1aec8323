#!/usr/bin/env python3
"""
Revenue Share Engine End-to-End Demo

Demonstrates both payout models through the API:
1. Start the API (in-process via Flask test client)
2. Browse the preset catalog
3. Allocate e-book revenue with a standard scheme
4. Validate a broken scheme and show the suggested fix
5. Simulate a buy-to-earn campaign and estimate a token's payback

Usage:
    python demo.py
"""

import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from api import create_app
from engine_config import EngineConfig


def section(title):
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}\n")


def pretty(data):
    print(json.dumps(data, indent=2, default=str))


def main():
    print("Revenue Share Engine: End-to-End Demo")
    print("=" * 60)

    # ──────────────────────────────────────────────────────────
    # Step 0: Create the app and test client
    # ──────────────────────────────────────────────────────────
    section("Step 0: Initialize")

    app = create_app(EngineConfig())
    client = app.test_client()

    resp = client.get("/health")
    print(f"Health: {resp.get_json().get('status', 'unknown')}")

    # ──────────────────────────────────────────────────────────
    # Step 1: Preset catalog
    # ──────────────────────────────────────────────────────────
    section("Step 1: Preset Schemes")

    catalog = client.get("/schemes").get_json()
    print(f"{catalog['count']} presets available")
    for entry in catalog["schemes"]:
        print(f"  [{entry['category']}] {entry['id']}: {entry.get('description', '')}")

    # ──────────────────────────────────────────────────────────
    # Step 2: Standard allocation
    # ──────────────────────────────────────────────────────────
    section("Step 2: Allocate E-book Revenue (EARLY_SUPPORTERS, 2000 sales at $9.99)")

    resp = client.post("/payouts/allocate", json={
        "scheme_name": "EARLY_SUPPORTERS",
        "unit_price": 9.99,
        "sales_count": 2000,
    })
    payouts = resp.get_json()
    print(f"Author:   ${payouts['author']:,.2f}")
    print(f"Platform: ${payouts['platform']:,.2f}")
    buyers = payouts["buyers"]
    print(f"Buyer 1 (early):    ${buyers['buyer1']:,.2f}")
    print(f"Buyer 2000 (late):  ${buyers['buyer2000']:,.2f}")

    # ──────────────────────────────────────────────────────────
    # Step 3: Scheme validation
    # ──────────────────────────────────────────────────────────
    section("Step 3: Validate an Over-allocated Scheme")

    resp = client.post("/schemes/validate", json={
        "scheme": {"author": {"percentage": 80}, "platform": {"percentage": 40}},
        "strict": True,
    })
    pretty(resp.get_json())

    # ──────────────────────────────────────────────────────────
    # Step 4: Buy-to-earn simulation
    # ──────────────────────────────────────────────────────────
    section("Step 4: Buy-to-Earn Campaign (STANDARD, $500, 3000 sales, token 100)")

    resp = client.post("/payouts/buy-to-earn/simulate", json={
        "preset": "STANDARD",
        "unit_price": 500,
        "sales_count": 3000,
        "tracked_token": 100,
    })
    result = resp.get_json()
    print(f"Prepayers:     {result['prepayers_count']}")
    print(f"Payback goal:  ${result['payback_goal']:,.2f}")
    print(f"Creator total: ${result['creator']:,.2f}")
    print(f"Token 100 earned: ${result['buyer']:,.2f}")
    if result["payback_point"] is None:
        print("Token 100 has not paid back yet.")
    else:
        print(f"Token 100 paid back at sale {result['payback_point']}")

    # ──────────────────────────────────────────────────────────
    # Step 5: Payback estimate
    # ──────────────────────────────────────────────────────────
    section("Step 5: Estimate Token 100 Payback")

    resp = client.post("/payouts/buy-to-earn/estimate", json={
        "token_number": 100,
        "token_price": 500,
        "payback_ratio": 2,
        "non_payback_pool_percent": 0.6,
        "buyers_share": 0.7,
    })
    pretty(resp.get_json())

    section("Done")
    print("Metrics collected during this demo are available at /metrics.")


if __name__ == "__main__":
    main()
