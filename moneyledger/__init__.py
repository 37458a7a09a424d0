"""
Money Ledger

Personal-finance ledger data store: users, multi-currency sources,
categories and categorized entries with running balances.
"""

__version__ = "0.2.0"
