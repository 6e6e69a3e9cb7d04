"""
Tax Kernel - shared foundations for cross-border tax classification.

Provides:
- Immutable transaction DTOs consumed by the engines
- Structured JSON logging
- Typed exception hierarchy with machine-readable codes
"""

__version__ = "0.1.0"
