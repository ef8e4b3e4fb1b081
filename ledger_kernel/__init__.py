"""
Ledger Kernel - MultiPOS financial core

Append-only subject ledger and voucher lifecycle with:
- A single balance formula shared by every read path
- Race-free voucher numbering via locked counter rows
- Compare-and-set approval with a complete history log
- Role-derived scope filtering on every store query
"""

__version__ = "0.1.0"
