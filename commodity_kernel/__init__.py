"""
Commodity Kernel

Shared foundations for the commodity trade calculation engines:
- Typed, coded exceptions
- Structured JSON logging with request-scoped context
- Injectable clock
- Decimal/date coercion and currency rounding
- Trade-term and payment-term value objects
"""

__version__ = "0.1.0"
