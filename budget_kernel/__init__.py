"""
Budget Kernel

Permission-scoped expense and budget tracking with:
- Role/ownership permission checks on every read and write
- Budget status and alert levels from integer-cent arithmetic
- Period rollover of surpluses and deficits
- Field-level audit trail of every mutation
"""

__version__ = "0.1.0"
