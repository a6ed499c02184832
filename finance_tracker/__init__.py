"""
Finance Tracker - Source Package

Personal-finance tracking backend: transactions, banks, categories,
spending limits and savings goals over a swappable table store.

DESIGN PRINCIPLES:
1. Derived values are computed, never stored
2. Validate before touching storage
3. Failures become notifications, never crashes
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
