"""
Revenue Share Engine

Computes how the revenue of a product is paid out to its author, platform,
promotion budget and buyers.

Core Components:
    - payout_calculator: Standard scheme allocation (percentages, groups, remainder)
    - buy_to_earn: Prepayment phase plus dual-pool payback simulation
    - payback_estimator: Closed-form payback forecast for one token
    - revenue_sharing: Per-product facade with sales ledger and audit trail

Infrastructure:
    - monitoring: Metrics and structured logging
    - api: Flask blueprints for the HTTP API

Usage:
    from revenue_sharing import RevenueSharing

    product = RevenueSharing("E-book", 9.99, scheme="EARLY_SUPPORTERS")
    product.add_sale("alice@example.com")
    payouts = product.calculate_payouts()
"""
