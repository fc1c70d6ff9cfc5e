"""
Execution layer — credential resolution, CLOB sessions, and order normalization.

SRP split:
  credentials.py       — request -> Default / Explicit credentials
  session_registry.py  — per-pair cache of authenticated CLOB clients
  market_resolver.py   — tick size lookup / market existence
  order_normalizer.py  — request body -> LimitOrder / MarketOrder
  order_models.py      — order enums, dataclasses, response envelope
  polymarket_client.py — py_clob_client construction and calls
  errors.py            — error taxonomy with HTTP status
"""
