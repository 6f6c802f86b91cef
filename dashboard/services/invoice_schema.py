# dashboard/services/invoice_schema.py
"""
Field rules for invoice forms.

A schema is a read-only mapping of form field name -> FieldRule. Each rule
coerces the raw string and then runs its checks in order; the first failing
check contributes that field's message. Schemas are built once at import time
and never mutated: omit() returns a new schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from dashboard.models import InvoiceStatus, INVOICE_STATUS_VALUES


CUSTOMER_MESSAGE = "Please select a customer"
AMOUNT_MESSAGE = "Please enter an amount greater than 0"
STATUS_MESSAGE = "Please select an invoice status"

# Amounts are stored as integer cents: the smallest amount must round to 1 cent
# and the largest must fit a 32-bit INTEGER column.
MIN_AMOUNT = Decimal("0.005")
MAX_AMOUNT = Decimal("21474836.47")

# Sentinel for values that could not be coerced.
_INVALID = object()

Check = Tuple[Callable[[Any], bool], str]


@dataclass(frozen=True)
class InvoiceInput:
    customer_id: str
    amount: Decimal
    status: InvoiceStatus


@dataclass(frozen=True)
class FieldRule:
    coerce: Callable[[Any], Any]
    checks: Tuple[Check, ...]

    def apply(self, raw: Any) -> Tuple[Any, Optional[str]]:
        value = self.coerce(raw)
        for predicate, message in self.checks:
            if value is _INVALID or not predicate(value):
                return None, message
        return value, None


# =========================
# Coercions
# =========================
def _as_text(raw: Any) -> Any:
    if raw is None:
        return _INVALID
    return str(raw).strip()


def _as_decimal(raw: Any) -> Any:
    """Number coercion: blank, non-numeric and non-finite input is invalid."""
    text = _as_text(raw)
    if text is _INVALID or text == "":
        return _INVALID
    try:
        value = Decimal(text)
    except InvalidOperation:
        return _INVALID
    if not value.is_finite():
        return _INVALID
    return value


def _as_status(raw: Any) -> Any:
    text = _as_text(raw)
    if text not in INVOICE_STATUS_VALUES:
        return _INVALID
    return InvoiceStatus(text)


def _as_iso_date(raw: Any) -> Any:
    text = _as_text(raw)
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        return _INVALID


# =========================
# Schema
# =========================
class InvoiceSchema:
    def __init__(self, fields: Mapping[str, FieldRule]):
        self.fields = MappingProxyType(dict(fields))

    def omit(self, *names: str) -> "InvoiceSchema":
        return InvoiceSchema({k: v for k, v in self.fields.items() if k not in names})

    def parse(self, form: Mapping[str, Any]) -> Tuple[Optional[InvoiceInput], dict]:
        """
        Returns (data, errors). Exactly one of them is meaningful:
        data is None whenever errors is non-empty.
        """
        values: dict[str, Any] = {}
        errors: dict[str, list[str]] = {}

        for name, rule in self.fields.items():
            value, message = rule.apply(form.get(name))
            if message:
                errors.setdefault(name, []).append(message)
            else:
                values[name] = value

        if errors:
            return None, errors

        return (
            InvoiceInput(
                customer_id=values["customerId"],
                amount=values["amount"],
                status=values["status"],
            ),
            {},
        )


INVOICE_SCHEMA = InvoiceSchema(
    {
        "id": FieldRule(_as_text, ((lambda s: s != "", "Invoice id is required."),)),
        "customerId": FieldRule(_as_text, ((lambda s: s != "", CUSTOMER_MESSAGE),)),
        "amount": FieldRule(
            _as_decimal,
            (
                (lambda n: n > 0, AMOUNT_MESSAGE),
                (lambda n: n >= MIN_AMOUNT, AMOUNT_MESSAGE),
                (lambda n: n <= MAX_AMOUNT, AMOUNT_MESSAGE),
            ),
        ),
        "date": FieldRule(_as_iso_date, ((lambda d: True, "Please enter a valid date."),)),
        "status": FieldRule(_as_status, ((lambda s: True, STATUS_MESSAGE),)),
    }
)

# Identity comes from storage (create) or the URL (update); date is set on create only.
CREATE_INVOICE_SCHEMA = INVOICE_SCHEMA.omit("id", "date")
UPDATE_INVOICE_SCHEMA = INVOICE_SCHEMA.omit("id", "date")
