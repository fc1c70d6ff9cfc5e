"""Monitoring — Prometheus metrics for the order path."""
