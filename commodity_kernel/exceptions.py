"""
Typed Exception Hierarchy for the Commodity Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Charge and interest amounts end up on invoices and debit notes. Callers
(invoice workflows, settlement screens, batch jobs) must be able to tell a
bad input apart from a bad configuration without parsing message text:

    try:
        charge = carrying_charge(...)
    except InvalidArgumentError as e:
        api_response(code=e.code, field=e.argument)

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (survives JSON logging)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CommodityEngineError (base)
    |
    +-- InvalidArgumentError
    |
    +-- TermConfigurationError
        +-- InvalidTermConfigurationError
        +-- TermNotFoundError
        +-- PaymentTermsNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                        | When Raised
----------------------------|-----------------------------------------------
INVALID_ARGUMENT            | Negative amount/day count, NaN, malformed date
INVALID_TERM_CONFIGURATION  | Term violates tier/limit/percentage invariants
TERM_NOT_FOUND              | No trade-term regime effective on a date
PAYMENT_TERMS_NOT_FOUND     | Unknown named payment-term profile

Insufficient moisture samples is NOT an exception: callers branch on a
``SampleValidation`` result instead.
"""


class CommodityEngineError(Exception):
    """
    Base exception for all commodity kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COMMODITY_ENGINE_ERROR"


class InvalidArgumentError(CommodityEngineError):
    """An engine input is negative, non-finite, or malformed."""

    code: str = "INVALID_ARGUMENT"

    def __init__(self, argument: str, value: object, reason: str):
        self.argument = argument
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid {argument}={value!r}: {reason}")


# Term configuration exceptions


class TermConfigurationError(CommodityEngineError):
    """Base exception for trade-term configuration errors."""

    code: str = "TERM_CONFIGURATION_ERROR"


class InvalidTermConfigurationError(TermConfigurationError):
    """Trade-term configuration violates its structural invariants."""

    code: str = "INVALID_TERM_CONFIGURATION"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid trade-term configuration ({field}): {reason}")


class TermNotFoundError(TermConfigurationError):
    """No trade-term regime is effective on the requested date."""

    code: str = "TERM_NOT_FOUND"

    def __init__(self, as_of_date: str):
        self.as_of_date = as_of_date
        super().__init__(f"No trade-term configuration effective on {as_of_date}")


class PaymentTermsNotFoundError(TermConfigurationError):
    """Named payment-term profile does not exist."""

    code: str = "PAYMENT_TERMS_NOT_FOUND"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Payment terms profile not found: {name}")
