# dashboard/services/invoice_actions.py
"""
Invoice form actions: create, update, delete.

Each action validates (create/update), converts the amount to cents, issues a
single statement and reports back through an ActionState. Validation and
database failures never raise to the caller; create and update end the
request with a redirect to the listing on success.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

import sqlalchemy as sa
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from dashboard.extensions import db
from dashboard.models import Invoice
from dashboard.services.invoice_schema import CREATE_INVOICE_SCHEMA, UPDATE_INVOICE_SCHEMA
from dashboard.services.revalidation import revalidate_path, transfer_to


INVOICES_PATH = "/dashboard/invoices"


@dataclass(frozen=True)
class ActionState:
    message: Optional[str] = None
    errors: dict = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _execute(statement) -> None:
    db.session.execute(statement)
    db.session.commit()


# =========================================================
# Create
# =========================================================
def create_invoice(form: Mapping[str, Any]) -> ActionState:
    data, errors = CREATE_INVOICE_SCHEMA.parse(form)
    if errors:
        return ActionState(message="Missing Fields. Failed to Create Invoice.", errors=errors)

    amount_in_cents = to_cents(data.amount)
    invoice_date = today_utc()

    try:
        _execute(
            sa.insert(Invoice).values(
                customer_id=data.customer_id,
                amount=amount_in_cents,
                status=data.status.value,
                date=invoice_date,
            )
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Create invoice failed")
        return ActionState(message="Database Error: Failed to Create Invoice.")

    current_app.logger.info(
        "Invoice created for customer %s (%d cents, %s)",
        data.customer_id,
        amount_in_cents,
        data.status.value,
    )

    revalidate_path(INVOICES_PATH)
    transfer_to(INVOICES_PATH)


# =========================================================
# Update
# =========================================================
def update_invoice(invoice_id: str, form: Mapping[str, Any]) -> ActionState:
    data, errors = UPDATE_INVOICE_SCHEMA.parse(form)
    if errors:
        return ActionState(message="Missing Fields. Failed to Update Invoice", errors=errors)

    amount_in_cents = to_cents(data.amount)

    # date and id are left alone
    try:
        _execute(
            sa.update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                customer_id=data.customer_id,
                amount=amount_in_cents,
                status=data.status.value,
            )
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Update invoice %s failed", invoice_id)
        return ActionState(message="Database Error: Failed to Update Invoice.")

    current_app.logger.info("Invoice %s updated", invoice_id)

    revalidate_path(INVOICES_PATH)
    transfer_to(INVOICES_PATH)


# =========================================================
# Delete
# =========================================================
def delete_invoice(invoice_id: str) -> ActionState:
    try:
        _execute(sa.delete(Invoice).where(Invoice.id == invoice_id))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Delete invoice %s failed", invoice_id)
        return ActionState(message="Database Error: Failed to Delete Invoice.")

    current_app.logger.info("Invoice %s deleted", invoice_id)

    revalidate_path(INVOICES_PATH)
    return ActionState(message="Deleted Invoice.")
