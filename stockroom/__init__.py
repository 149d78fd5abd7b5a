"""
Stockroom: single-operator inventory tracker with a sales ledger and action history.
"""

__version__ = "0.1.0"
