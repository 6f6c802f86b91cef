# dashboard/services/invoice_queries.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

import sqlalchemy as sa
from flask import current_app
from sqlalchemy import or_

from dashboard.extensions import db, page_cache
from dashboard.models import Customer, Invoice, InvoiceStatus
from dashboard.services.invoice_actions import INVOICES_PATH


@dataclass(frozen=True)
class InvoiceRow:
    id: str
    customer_id: str
    name: str
    email: str
    image_url: Optional[str]
    amount: int
    date: date
    status: str


@dataclass(frozen=True)
class InvoicePage:
    rows: List[InvoiceRow]
    page: int
    pages: int
    total: int


@dataclass(frozen=True)
class CardData:
    number_of_invoices: int
    number_of_customers: int
    total_paid: int
    total_pending: int


def _row(inv: Invoice) -> InvoiceRow:
    return InvoiceRow(
        id=inv.id,
        customer_id=inv.customer_id,
        name=inv.customer.name,
        email=inv.customer.email,
        image_url=inv.customer.image_url,
        amount=inv.amount,
        date=inv.date,
        status=inv.status,
    )


def _filtered(query: str):
    qry = Invoice.query.join(Customer, Invoice.customer_id == Customer.id)

    q = (query or "").strip().lower()
    if q:
        like = f"%{q}%"
        qry = qry.filter(
            or_(
                db.func.lower(Customer.name).like(like),
                db.func.lower(Customer.email).like(like),
                sa.cast(Invoice.amount, sa.String).like(like),
                sa.cast(Invoice.date, sa.String).like(like),
                db.func.lower(Invoice.status).like(like),
            )
        )

    return qry.order_by(Invoice.date.desc(), Invoice.id)


def fetch_filtered_invoices(query: str = "", page: int = 1) -> InvoicePage:
    """
    One page of invoices matching ``query`` (customer name/email, amount,
    date or status), newest first. Results are cached under the listing path
    until the next write revalidates it.
    """
    per_page = current_app.config.get("INVOICES_PER_PAGE", 6)
    page = max(page or 1, 1)
    key = ((query or "").strip().lower(), page, per_page)

    def load() -> InvoicePage:
        pagination = _filtered(query).paginate(page=page, per_page=per_page, error_out=False)
        return InvoicePage(
            rows=[_row(inv) for inv in pagination.items],
            page=page,
            pages=pagination.pages,
            total=pagination.total or 0,
        )

    return page_cache.fetch(INVOICES_PATH, key, load)


def fetch_latest_invoices(limit: int = 5) -> List[InvoiceRow]:
    def load() -> List[InvoiceRow]:
        invoices = Invoice.query.order_by(Invoice.date.desc()).limit(limit).all()
        return [_row(inv) for inv in invoices]

    return page_cache.fetch(INVOICES_PATH, ("latest", limit), load)


def fetch_card_data() -> CardData:
    def load() -> CardData:
        totals = dict(
            db.session.execute(
                sa.select(Invoice.status, db.func.coalesce(db.func.sum(Invoice.amount), 0))
                .group_by(Invoice.status)
            ).all()
        )
        return CardData(
            number_of_invoices=db.session.scalar(sa.select(db.func.count(Invoice.id))) or 0,
            number_of_customers=db.session.scalar(sa.select(db.func.count(Customer.id))) or 0,
            total_paid=int(totals.get(InvoiceStatus.PAID.value, 0)),
            total_pending=int(totals.get(InvoiceStatus.PENDING.value, 0)),
        )

    return page_cache.fetch(INVOICES_PATH, "cards", load)


def fetch_invoice_by_id(invoice_id: str) -> Optional[Invoice]:
    return db.session.get(Invoice, invoice_id)


def fetch_customers() -> List[Customer]:
    return Customer.query.order_by(Customer.name.asc()).all()
