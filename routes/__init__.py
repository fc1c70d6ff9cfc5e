"""
HTTP routes.

  orders.py  — order submission endpoints under /api/orders
  health.py  — liveness and Prometheus metrics
"""
