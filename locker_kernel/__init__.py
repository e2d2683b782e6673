"""
Locker Kernel

A time-locked custody ledger with:
- One receipt asset per lock position, pegged 1:1 to the locked balance
- Atomic lock/release transactions
- Dense position ids with two lookup indexes
- Hash-chained lock event trail
"""

__version__ = "0.1.0"
