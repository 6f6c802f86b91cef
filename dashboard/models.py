# dashboard/models.py
from __future__ import annotations

import enum
import uuid
from datetime import datetime

from flask_login import UserMixin

from .extensions import db


# Naive UTC everywhere: DB columns are "timestamp without time zone".
def utcnow_naive() -> datetime:
    return datetime.utcnow()


def new_id() -> str:
    return str(uuid.uuid4())


# =========================================================
# User model (Authentication)
# =========================================================
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # Werkzeug scrypt hash, never the plaintext
    password = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    __table_args__ = (
        db.UniqueConstraint("email", name="users_email_key"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


# =========================================================
# Customer
# =========================================================
class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    image_url = db.Column(db.String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer {self.id} {self.name}>"


# =========================================================
# Invoice Status (Enum)
# =========================================================
class InvoiceStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"


INVOICE_STATUS_VALUES = tuple(s.value for s in InvoiceStatus)


# =========================================================
# Invoice
# =========================================================
class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    customer_id = db.Column(
        db.String(36),
        db.ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer = db.relationship("Customer", foreign_keys=[customer_id], lazy="joined")

    # Minor currency units (cents)
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=InvoiceStatus.PENDING.value)
    date = db.Column(db.Date, nullable=False, index=True)

    __table_args__ = (
        db.CheckConstraint("status IN ('pending', 'paid')", name="ck_invoices_status"),
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.id} {self.amount} {self.status}>"
