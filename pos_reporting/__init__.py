"""
POS Reporting Service

Read-only sales reporting over a point-of-sale database.
"""

__version__ = "1.0.0"
