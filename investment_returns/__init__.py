"""
Investment Returns - Source Package

Annualized return calculations for a personal finance tracker:
investments, SIPs, deposits and other holdings recorded as dated
cash flows.

DESIGN PRINCIPLES:
1. The XIRR solver is a pure function: data in, rate out
2. A rate that cannot be computed is shown as N/A, never as zero
3. No silent corrections (inputs are never re-sorted or patched)
4. Every calculation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Investment Returns Team"
