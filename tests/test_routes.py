from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from dashboard.extensions import db
from dashboard.models import Invoice
from dashboard.services import invoice_actions


USER_EMAIL = "user@nextmail.com"
USER_PASSWORD = "123456"


# ======================
# Middleware
# ======================
def test_dashboard_redirects_anonymous_users_to_login(client):
    resp = client.get("/dashboard/invoices")
    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/login?next=")
    assert "dashboard" in resp.headers["Location"]


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/dashboard"),
        ("get", "/dashboard/invoices"),
        ("get", "/dashboard/invoices/create"),
        ("post", "/dashboard/invoices/create"),
        ("get", "/dashboard/invoices/some-id/edit"),
        ("post", "/dashboard/invoices/some-id/delete"),
    ],
)
def test_every_dashboard_route_is_gated_by_the_sign_in_hook(app, client, method, path):
    resp = getattr(client, method)(path)

    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/login?next=")
    with app.app_context():
        assert Invoice.query.count() == 0


def test_png_paths_skip_the_auth_check(client):
    assert client.get("/dashboard/logo.png").status_code == 404


def test_signed_in_user_visiting_login_goes_to_dashboard(auth_client):
    resp = auth_client.get("/login")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/dashboard"


def test_home_is_public(client):
    assert client.get("/").status_code == 200


# ======================
# Login / Logout
# ======================
def test_login_with_wrong_password_shows_message(client, user_id):
    resp = client.post("/login", data={"email": USER_EMAIL, "password": "not-it-at-all"})
    assert resp.status_code == 200
    assert b"Invalid credentials." in resp.data


def test_login_honours_safe_next(client, user_id):
    resp = client.post(
        "/login",
        data={"email": USER_EMAIL, "password": USER_PASSWORD, "next": "/dashboard/invoices"},
    )
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/dashboard/invoices"


def test_login_ignores_offsite_next(client, user_id):
    resp = client.post(
        "/login",
        data={"email": USER_EMAIL, "password": USER_PASSWORD, "next": "https://evil.example/"},
    )
    assert resp.headers["Location"] == "/dashboard"


def test_logout_ends_the_session(auth_client):
    resp = auth_client.post("/logout")
    assert resp.status_code == 302

    assert auth_client.get("/dashboard").status_code == 302


# ======================
# Dashboard
# ======================
def test_dashboard_shows_card_totals(auth_client, customer_id, make_invoice):
    make_invoice(customer_id, amount=4500, status="pending")
    make_invoice(customer_id, amount=1000, status="paid")

    resp = auth_client.get("/dashboard")
    assert resp.status_code == 200
    assert b"Collected: $10.00" in resp.data
    assert b"Pending: $45.00" in resp.data
    assert b"Total Invoices: 2" in resp.data


# ======================
# Listing
# ======================
def test_listing_searches_by_customer(auth_client, customer_id, other_customer_id, make_invoice):
    make_invoice(customer_id, amount=4500)
    make_invoice(other_customer_id, amount=2000)

    resp = auth_client.get("/dashboard/invoices?query=lee")
    assert b"Lee Robinson" in resp.data
    assert b"Delba de Oliveira" not in resp.data


def test_listing_paginates(auth_client, customer_id, make_invoice):
    for day in range(1, 9):
        make_invoice(customer_id, amount=100 * day, on=date(2023, 1, day))

    first = auth_client.get("/dashboard/invoices")
    second = auth_client.get("/dashboard/invoices?page=2")

    # newest first, six per page
    assert b"$8.00" in first.data and b"$3.00" in first.data
    assert b"$2.00" not in first.data
    assert b"$2.00" in second.data and b"$1.00" in second.data


# ======================
# Create
# ======================
def test_create_redirects_and_new_invoice_is_listed(auth_client, customer_id):
    # prime the listing cache with an empty page
    assert b"No invoices found." in auth_client.get("/dashboard/invoices").data

    resp = auth_client.post(
        "/dashboard/invoices/create",
        data={"customerId": customer_id, "amount": "45.00", "status": "pending"},
    )
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/dashboard/invoices"

    listing = auth_client.get("/dashboard/invoices")
    assert b"$45.00" in listing.data


def test_create_with_invalid_form_rerenders_with_errors(app, auth_client):
    resp = auth_client.post("/dashboard/invoices/create", data={"amount": "0"})
    assert resp.status_code == 400
    assert b"Missing Fields. Failed to Create Invoice." in resp.data
    assert b"Please select a customer" in resp.data
    assert b"Please enter an amount greater than 0" in resp.data
    assert b"Please select an invoice status" in resp.data

    with app.app_context():
        assert Invoice.query.count() == 0


def test_create_database_error_is_shown(auth_client, customer_id, monkeypatch):
    def storage_down(statement):
        raise OperationalError("INSERT", {}, Exception("down"))

    monkeypatch.setattr(invoice_actions, "_execute", storage_down)

    resp = auth_client.post(
        "/dashboard/invoices/create",
        data={"customerId": customer_id, "amount": "45.00", "status": "pending"},
    )
    assert resp.status_code == 200
    assert b"Database Error: Failed to Create Invoice." in resp.data


# ======================
# Edit
# ======================
def test_edit_form_is_prefilled(auth_client, customer_id, make_invoice):
    invoice_id = make_invoice(customer_id, amount=4550)

    resp = auth_client.get(f"/dashboard/invoices/{invoice_id}/edit")
    assert resp.status_code == 200
    assert b'value="45.50"' in resp.data


def test_edit_unknown_invoice_is_404(auth_client):
    assert auth_client.get("/dashboard/invoices/nope/edit").status_code == 404


def test_edit_submit_updates_and_redirects(app, auth_client, customer_id, make_invoice):
    invoice_id = make_invoice(customer_id, amount=4550, status="pending", on=date(2022, 6, 5))

    resp = auth_client.post(
        f"/dashboard/invoices/{invoice_id}/edit",
        data={"customerId": customer_id, "amount": "12", "status": "paid"},
    )
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/dashboard/invoices"

    with app.app_context():
        invoice = db.session.get(Invoice, invoice_id)
        assert (invoice.amount, invoice.status, invoice.date) == (1200, "paid", date(2022, 6, 5))


def test_edit_submit_with_bad_status(auth_client, customer_id, make_invoice):
    invoice_id = make_invoice(customer_id)

    resp = auth_client.post(
        f"/dashboard/invoices/{invoice_id}/edit",
        data={"customerId": customer_id, "amount": "12", "status": "overdue"},
    )
    assert resp.status_code == 400
    assert b"Missing Fields. Failed to Update Invoice" in resp.data


# ======================
# Delete
# ======================
def test_delete_flashes_and_returns_to_listing(app, auth_client, customer_id, make_invoice):
    invoice_id = make_invoice(customer_id)

    resp = auth_client.post(f"/dashboard/invoices/{invoice_id}/delete", follow_redirects=True)
    assert resp.status_code == 200
    assert b"Deleted Invoice." in resp.data
    assert b"No invoices found." in resp.data

    with app.app_context():
        assert db.session.get(Invoice, invoice_id) is None
