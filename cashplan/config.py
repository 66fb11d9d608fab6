"""
Configuration management module for CashPlan.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization: the forecast run configuration,
schemas for JSON plan files, suggestion settings and environment-driven
application settings.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Fresh defaults: ``default_config()`` builds a new value on every call and
  ``merge_config()`` returns a new validated model instead of mutating
- Lenient plan files: record schemas accept snake_case or camelCase keys
  and ignore bookkeeping fields such as ``createdAt``

Example
-------
>>> from datetime import date
>>> from cashplan.config import default_config, merge_config
>>> cfg = default_config(date(2024, 3, 15), months=24)
>>> cfg.months
24
>>> merge_config(cfg, {"conservative_mode": True}).conservative_mode
True
"""

from __future__ import annotations
from typing import Any, List, Literal, Mapping, Optional
import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_MONTHS, MAX_MONTHS
from .exceptions import TimeIndexError, ValidationError
from .expenses import Expense
from .goals import Goal
from .income import Income
from .plan import UserPlan
from .utils import parse_date

__all__ = [
    "ForecastConfig",
    "default_config",
    "merge_config",
    "coerce_config",
    "IncomeConfig",
    "ExpenseConfig",
    "GoalConfig",
    "PlanConfig",
    "SuggestionConfig",
    "AppSettings",
]


def _lenient_date(value: Any) -> Any:
    """Accept ISO strings with a time part (``2024-01-01T00:00:00.000Z``)."""
    if value is None or isinstance(value, datetime.date):
        return value
    try:
        return parse_date(value)
    except TimeIndexError as exc:
        raise ValueError(str(exc)) from exc


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Forecast Configuration
# ---------------------------------------------------------------------------

class ForecastConfig(BaseModel):
    """
    Configuration of a single forecast run.

    Attributes
    ----------
    months : int
        Horizon length (1-600 months).
    starting_balance : float, optional
        Opening balance. If None, the plan's ``current_balance`` is used.
    start_date : date
        Reference date of the run. Also serves as "now" for completion
        estimates; the engine never reads the clock.
    include_goal_contributions : bool
        Route surplus to goals.
    conservative_mode : bool
        Stress test: income x0.9, expenses x1.1.
    anchor : {"january", "start"}
        ``"january"`` starts the horizon on January 1 of ``start_date``'s
        year; ``"start"`` starts on the month containing ``start_date``.

    Examples
    --------
    >>> cfg = ForecastConfig(start_date="2024-06-10", anchor="start")
    >>> cfg.months
    12
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    months: int = Field(
        default=DEFAULT_MONTHS,
        ge=1,
        le=MAX_MONTHS,
        description="Forecast horizon (months)"
    )
    starting_balance: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Opening balance; plan balance when omitted"
    )
    start_date: datetime.date = Field(
        description="Reference date of the run"
    )
    include_goal_contributions: bool = Field(
        default=True,
        description="Allocate monthly surplus to goals"
    )
    conservative_mode: bool = Field(
        default=False,
        description="Scale income down and expenses up by 10%"
    )
    anchor: Literal["january", "start"] = Field(
        default="january",
        description="First projected month: January of the start year, or the start month"
    )

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v):
        """Accept ISO strings with a trailing time part."""
        return _lenient_date(v)


def default_config(start_date: Any, **overrides: Any) -> ForecastConfig:
    """
    Build a fresh forecast configuration.

    Parameters
    ----------
    start_date : date or str
        Reference date of the run.
    **overrides
        Any other ``ForecastConfig`` field.

    Returns
    -------
    ForecastConfig

    Raises
    ------
    ValidationError
        If a value is out of range or malformed.
    """
    return coerce_config({"start_date": start_date, **overrides})


def merge_config(base: ForecastConfig, overrides: Mapping[str, Any]) -> ForecastConfig:
    """
    Return a new configuration with *overrides* applied on top of *base*.

    *base* is left untouched. The merged values are re-validated.
    """
    return coerce_config({**base.model_dump(), **dict(overrides)})


def coerce_config(config: Any) -> ForecastConfig:
    """Validate a ``ForecastConfig`` or a mapping of its fields."""
    if isinstance(config, ForecastConfig):
        return config
    try:
        return ForecastConfig.model_validate(dict(config))
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid forecast config: {_format_errors(exc)}") from exc


# ---------------------------------------------------------------------------
# Plan File Schemas
# ---------------------------------------------------------------------------

_RECORD_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


class IncomeConfig(BaseModel):
    """
    Income record as stored in a plan file.

    Examples
    --------
    >>> IncomeConfig.model_validate(
    ...     {"id": "i1", "name": "Salary", "amount": 5000,
    ...      "frequency": "monthly", "startDate": "2024-01-01T00:00:00.000Z"}
    ... ).to_record().start_date
    datetime.date(2024, 1, 1)
    """

    model_config = _RECORD_CONFIG

    id: str
    name: str
    amount: float = Field(ge=0, allow_inf_nan=False)
    frequency: str = "monthly"
    start_date: datetime.date
    end_date: Optional[datetime.date] = None
    is_active: bool = True
    description: str = ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _lenient_date(v)

    def to_record(self) -> Income:
        return Income(**self.model_dump())


class ExpenseConfig(BaseModel):
    """Expense record as stored in a plan file."""

    model_config = _RECORD_CONFIG

    id: str
    name: str
    amount: float = Field(ge=0, allow_inf_nan=False)
    due_date: datetime.date
    category: str = "miscellaneous"
    recurring: Optional[bool] = None
    frequency: Optional[str] = None
    priority: str = "medium"
    is_active: bool = True
    is_installment: bool = False
    installment_months: Optional[int] = None
    installment_start_month: Optional[str] = None
    description: str = ""

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _lenient_date(v)

    def to_record(self) -> Expense:
        return Expense(**self.model_dump())


class GoalConfig(BaseModel):
    """Goal record as stored in a plan file."""

    model_config = _RECORD_CONFIG

    id: str
    name: str
    target_amount: float = Field(ge=0, allow_inf_nan=False)
    target_date: datetime.date
    current_amount: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    category: str = "other"
    priority: str = "medium"
    priority_order: Optional[int] = None
    goal_type: str = "fixed_amount"
    is_active: bool = True
    description: str = ""

    @field_validator("target_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _lenient_date(v)

    def to_record(self) -> Goal:
        return Goal(**self.model_dump())


class PlanConfig(BaseModel):
    """
    Complete plan as stored in a JSON file.

    Attributes
    ----------
    id : str, optional
    income, expenses, goals : list
        Record schemas.
    current_balance : float
        Cash on hand.
    """

    model_config = _RECORD_CONFIG

    id: Optional[str] = None
    income: List[IncomeConfig] = Field(default_factory=list)
    expenses: List[ExpenseConfig] = Field(default_factory=list)
    goals: List[GoalConfig] = Field(default_factory=list)
    current_balance: float = Field(default=0.0, allow_inf_nan=False)

    def to_plan(self) -> UserPlan:
        """Build the immutable engine snapshot."""
        return UserPlan(
            income=[i.to_record() for i in self.income],
            expenses=[e.to_record() for e in self.expenses],
            goals=[g.to_record() for g in self.goals],
            current_balance=self.current_balance,
            id=self.id,
        )


# ---------------------------------------------------------------------------
# Suggestion Configuration
# ---------------------------------------------------------------------------

class SuggestionConfig(BaseModel):
    """
    Settings of the suggestion generator.

    Attributes
    ----------
    max_suggestions : int
        Maximum number of suggestions returned (1-50).
    min_impact_threshold : float
        Suggestions whose absolute impact is below this are dropped.
    focus_areas : list of str
        Categories to keep ("income", "expense", "goal", "general").
        Empty keeps all.
    conservative_mode : bool
        Run the underlying forecast in conservative mode.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_suggestions: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum number of suggestions"
    )
    min_impact_threshold: float = Field(
        default=10.0,
        ge=0,
        description="Minimum absolute impact to report"
    )
    focus_areas: List[Literal["income", "expense", "goal", "general"]] = Field(
        default_factory=list,
        description="Suggestion categories to keep (empty = all)"
    )
    conservative_mode: bool = Field(
        default=False,
        description="Evaluate suggestions against a conservative forecast"
    )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    should be prefixed with CASHPLAN_ (e.g., CASHPLAN_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode with verbose logging
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    currency_symbol : str
        Symbol used by the command line when formatting amounts

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'
    """

    model_config = SettingsConfigDict(
        env_prefix="CASHPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    currency_symbol: str = Field(
        default="$",
        description="Currency symbol for display"
    )
