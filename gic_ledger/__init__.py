"""
GIC Ledger

Per-account cash ledger with month-end interest accrual over a
piecewise-constant timeline of annual rates. All amounts use Decimal.
"""

__version__ = "1.0.0"
