"""
Input records consumed by the statement engine.

Responsibility:
    Frozen value objects for the three collections the engine is fed --
    transactions, stores and categories -- plus the enums that classify
    them.  Records are produced by the capture and storage subsystems
    (outside this package) and are never mutated by the engine.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    * All monetary fields are ``Decimal`` and finite -- NEVER ``float``.
    * Transaction amounts are non-negative; direction comes from ``type``.
    * Dates are calendar days (``date``), never ``datetime``.

Failure modes:
    * Ill-typed fields raise ``InvalidRecordError`` at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, TypeVar

from cashbook_kernel.exceptions import InvalidRecordError

_E = TypeVar("_E", bound=Enum)


# =========================================================================
# Enums
# =========================================================================


class TransactionType(str, Enum):
    """Direction of a cash movement."""

    INCOME = "income"
    EXPENSE = "expense"


class CashFlowActivity(str, Enum):
    """Why cash moved."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class TransactionNature(str, Enum):
    """Whether a transaction belongs to core operating profit."""

    OPERATING = "operating"
    NON_OPERATING = "non_operating"
    INCOME_TAX = "income_tax"


class FlowDirection(str, Enum):
    """Cash-flow statement side."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"

    @classmethod
    def of(cls, transaction_type: TransactionType) -> FlowDirection:
        if transaction_type == TransactionType.INCOME:
            return cls.INFLOW
        return cls.OUTFLOW


# =========================================================================
# Field helpers
# =========================================================================


def _coerce_enum(
    enum_cls: type[_E], value: Any, record_type: str, field: str,
) -> _E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidRecordError(
            record_type, field, value,
            f"expected one of {[m.value for m in enum_cls]}",
        ) from None


def _check_decimal(
    value: Any, record_type: str, field: str, *, non_negative: bool,
) -> None:
    if not isinstance(value, Decimal):
        raise InvalidRecordError(
            record_type, field, value, "monetary values must be Decimal",
        )
    if not value.is_finite():
        raise InvalidRecordError(record_type, field, value, "must be finite")
    if non_negative and value < 0:
        raise InvalidRecordError(record_type, field, value, "must be >= 0")


def _check_date(value: Any, record_type: str, field: str) -> None:
    # datetime is a subclass of date; a time component is not allowed
    if not isinstance(value, date) or isinstance(value, datetime):
        raise InvalidRecordError(
            record_type, field, value, "expected a calendar date",
        )


def parse_decimal(value: Any, record_type: str, field: str) -> Decimal:
    """Parse a Decimal from a string, int or Decimal payload value."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (bool, float)):
        raise InvalidRecordError(
            record_type, field, value, "floats are not accepted for money",
        )
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise InvalidRecordError(
            record_type, field, value, "not a decimal number",
        ) from None


def parse_date(value: Any, record_type: str, field: str) -> date:
    """Parse a calendar date from an ISO string or a date object."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise InvalidRecordError(record_type, field, value, "not an ISO date")


# =========================================================================
# Records
# =========================================================================


@dataclass(frozen=True)
class Transaction:
    """
    A single recorded cash movement.

    ``cash_flow_activity``, ``transaction_nature`` and
    ``include_in_profit_loss`` are optional: they are filled in at capture
    time when the transaction's category carries them, and left ``None``
    for legacy records.
    """

    id: str
    type: TransactionType
    category: str
    amount: Decimal
    date: date
    store_id: str | None = None
    category_id: str | None = None
    description: str | None = None
    cash_flow_activity: CashFlowActivity | None = None
    transaction_nature: TransactionNature | None = None
    include_in_profit_loss: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "type",
            _coerce_enum(TransactionType, self.type, "Transaction", "type"),
        )
        if self.cash_flow_activity is not None:
            object.__setattr__(
                self, "cash_flow_activity",
                _coerce_enum(
                    CashFlowActivity, self.cash_flow_activity,
                    "Transaction", "cash_flow_activity",
                ),
            )
        if self.transaction_nature is not None:
            object.__setattr__(
                self, "transaction_nature",
                _coerce_enum(
                    TransactionNature, self.transaction_nature,
                    "Transaction", "transaction_nature",
                ),
            )
        _check_decimal(self.amount, "Transaction", "amount", non_negative=True)
        _check_date(self.date, "Transaction", "date")

    @property
    def signed_amount(self) -> Decimal:
        """+amount for income, -amount for expense."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transaction:
        """Build a Transaction from a primitive (JSON-like) payload."""
        return cls(
            id=str(data["id"]),
            type=data["type"],
            category=data["category"],
            amount=parse_decimal(data["amount"], "Transaction", "amount"),
            date=parse_date(data["date"], "Transaction", "date"),
            store_id=data.get("store_id"),
            category_id=data.get("category_id"),
            description=data.get("description"),
            cash_flow_activity=data.get("cash_flow_activity") or None,
            transaction_nature=data.get("transaction_nature") or None,
            include_in_profit_loss=data.get("include_in_profit_loss"),
        )


@dataclass(frozen=True)
class Category:
    """Classification rule for transactions of ``(type, name)``."""

    id: str
    type: TransactionType
    name: str
    cash_flow_activity: CashFlowActivity
    transaction_nature: TransactionNature | None = None
    include_in_profit_loss: bool = True
    is_system: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "type",
            _coerce_enum(TransactionType, self.type, "Category", "type"),
        )
        object.__setattr__(
            self, "cash_flow_activity",
            _coerce_enum(
                CashFlowActivity, self.cash_flow_activity,
                "Category", "cash_flow_activity",
            ),
        )
        if self.transaction_nature is not None:
            object.__setattr__(
                self, "transaction_nature",
                _coerce_enum(
                    TransactionNature, self.transaction_nature,
                    "Category", "transaction_nature",
                ),
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Category:
        include = data.get("include_in_profit_loss")
        return cls(
            id=str(data["id"]),
            type=data["type"],
            name=data["name"],
            cash_flow_activity=data.get("cash_flow_activity") or "operating",
            transaction_nature=data.get("transaction_nature") or None,
            include_in_profit_loss=True if include is None else bool(include),
            is_system=bool(data.get("is_system", False)),
        )


@dataclass(frozen=True)
class Store:
    """
    One accounting entity.

    ``initial_balance_date`` is the day the store's books start.  When it is
    ``None`` the store has no trackable opening balance: it contributes
    nothing to a consolidated beginning balance and is never "new".
    """

    id: str
    name: str
    status: str = "active"
    initial_balance: Decimal = Decimal("0")
    initial_balance_date: date | None = None

    def __post_init__(self) -> None:
        _check_decimal(
            self.initial_balance, "Store", "initial_balance", non_negative=False,
        )
        if self.initial_balance_date is not None:
            _check_date(self.initial_balance_date, "Store", "initial_balance_date")

    @property
    def tracks_opening_balance(self) -> bool:
        return self.initial_balance_date is not None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Store:
        raw_date = data.get("initial_balance_date")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            status=data.get("status", "active"),
            initial_balance=parse_decimal(
                data.get("initial_balance", 0), "Store", "initial_balance",
            ),
            initial_balance_date=(
                parse_date(raw_date, "Store", "initial_balance_date")
                if raw_date else None
            ),
        )
