"""
Custom exceptions for CashPlan.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all CashPlan modules. All exceptions inherit from CashPlanError,
enabling catch-all handling when needed.

Only structurally invalid input raises. Degenerate financial states
(zero income, negative balances, no goals, overdue goals) are valid
forecast inputs and flow through as ordinary data.

Exception Hierarchy
-------------------
CashPlanError (base)
├── ConfigurationError - Invalid application or CLI configuration
└── ValidationError - Malformed records or forecast parameters
    └── TimeIndexError - Unparseable dates or year-month keys

Usage
-----
>>> from cashplan.exceptions import ValidationError
>>>
>>> raise ValidationError("months must be positive, got 0")
>>>
>>> try:
...     result = generate_forecast(plan, config)
... except CashPlanError as e:
...     print(f"CashPlan error: {e}")
"""


class CashPlanError(Exception):
    """
    Base exception for all CashPlan errors.

    Examples
    --------
    >>> try:
    ...     generate_forecast(plan, config)
    ... except CashPlanError as e:
    ...     logger.error(f"Forecast failed: {e}")
    """
    pass


class ConfigurationError(CashPlanError):
    """
    Invalid application configuration.

    Raised for problems outside a single forecast call, such as:
    - Unreadable plan files
    - Unsupported CLI option combinations

    Examples
    --------
    >>> raise ConfigurationError(f"Plan file {path} is not valid JSON")
    """
    pass


class ValidationError(CashPlanError):
    """
    Structural validation failures.

    Raised when input data cannot be forecast at all, such as:
    - Non-positive horizon length
    - Negative income or expense amounts
    - Installment expense without a positive month count

    Examples
    --------
    >>> raise ValidationError(
    ...     f"months must be positive, got {months}. "
    ...     f"Use months >= 1 for a forecast horizon."
    ... )
    """
    pass


class TimeIndexError(ValidationError):
    """
    Date and year-month parsing errors.

    Raised when a date field cannot be interpreted:
    - Malformed ISO date in start_date, due_date or target_date
    - Installment start month not in YYYY-MM form
    - End date before start date

    Examples
    --------
    >>> raise TimeIndexError(
    ...     f"installment_start_month must be YYYY-MM, got {value!r}"
    ... )
    """
    pass
