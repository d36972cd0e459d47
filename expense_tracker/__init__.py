"""
Expense Tracker - Source Package

A personal finance ledger that records income and expense entries,
persists them, and derives the totals and chart data a UI needs.

DESIGN PRINCIPLES:
1. One ledger per session, owned by the session controller
2. Fail early, fail visibly
3. No silent resets of stored data
4. Every mutation re-persists the whole ledger
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
