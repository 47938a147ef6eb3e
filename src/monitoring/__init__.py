"""
Monitoring helpers for the clustering API.

This package provides:
- API performance metrics collection (latency percentiles, error rates)
"""
