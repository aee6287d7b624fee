"""
Dark Pool Kernel

Shared core of the private intake queue:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Decimal-exact storage types and ORM models
- Fee calculation and lifecycle DTOs
- Read-only selectors for status, batch, and stats lookups
"""

__version__ = "0.1.0"
