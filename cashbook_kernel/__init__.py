"""
Cashbook Kernel

Shared foundation for the multi-store cashbook statement engine:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Immutable input records (transactions, stores, categories)
- Injectable clock and calendar-month helpers
"""

__version__ = "0.1.0"
