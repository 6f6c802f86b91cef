# dashboard/routes.py
from __future__ import annotations

from datetime import datetime

from flask import (
    Blueprint,
    abort,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from dashboard.models import INVOICE_STATUS_VALUES
from dashboard.services.invoice_actions import (
    ActionState,
    create_invoice,
    delete_invoice,
    update_invoice,
)
from dashboard.services.invoice_queries import (
    fetch_card_data,
    fetch_customers,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_latest_invoices,
)

main = Blueprint("main", __name__)


# ======================
# Parsers
# ======================
def _parse_int(val):
    try:
        if val is None or str(val).strip() == "":
            return None
        return int(val)
    except (TypeError, ValueError):
        return None


def _render_invoice_form(template: str, state: ActionState, status: int = 200, **context):
    return (
        render_template(
            template,
            state=state,
            customers=fetch_customers(),
            statuses=INVOICE_STATUS_VALUES,
            current_year=datetime.utcnow().year,
            **context,
        ),
        status,
    )


# ======================
# Public
# ======================
@main.route("/")
def home():
    return render_template("home.html", current_year=datetime.utcnow().year)


# ======================
# Dashboard overview
# ======================
@main.route("/dashboard")
def dashboard():
    return render_template(
        "dashboard.html",
        cards=fetch_card_data(),
        latest_invoices=fetch_latest_invoices(),
        current_year=datetime.utcnow().year,
    )


# ======================
# Invoices listing
# ======================
@main.route("/dashboard/invoices")
def invoices():
    """
    URL examples:
      /dashboard/invoices
      /dashboard/invoices?query=lee
      /dashboard/invoices?query=pending&page=2
    """
    query = (request.args.get("query") or "").strip()
    page = _parse_int(request.args.get("page")) or 1

    result = fetch_filtered_invoices(query, page)

    return render_template(
        "invoices/list.html",
        invoices=result.rows,
        page=result.page,
        pages=result.pages,
        total=result.total,
        query=query,
        current_year=datetime.utcnow().year,
    )


# ======================
# Create
# ======================
@main.route("/dashboard/invoices/create", methods=["GET", "POST"])
def create():
    if request.method == "POST":
        # Redirects to the listing on success; otherwise we get the state back.
        state = create_invoice(request.form)
        return _render_invoice_form(
            "invoices/create.html",
            state,
            status=400 if state.has_errors else 200,
            form=request.form,
        )

    return _render_invoice_form("invoices/create.html", ActionState(), form={})


# ======================
# Edit
# ======================
@main.route("/dashboard/invoices/<invoice_id>/edit", methods=["GET", "POST"])
def edit(invoice_id: str):
    if request.method == "POST":
        state = update_invoice(invoice_id, request.form)
        return _render_invoice_form(
            "invoices/edit.html",
            state,
            status=400 if state.has_errors else 200,
            invoice_id=invoice_id,
            form=request.form,
        )

    invoice = fetch_invoice_by_id(invoice_id)
    if invoice is None:
        abort(404)

    form = {
        "customerId": invoice.customer_id,
        "amount": f"{invoice.amount / 100:.2f}",
        "status": invoice.status,
    }
    return _render_invoice_form("invoices/edit.html", ActionState(), invoice_id=invoice_id, form=form)


# ======================
# Delete
# ======================
@main.route("/dashboard/invoices/<invoice_id>/delete", methods=["POST"])
def delete(invoice_id: str):
    state = delete_invoice(invoice_id)
    category = "danger" if state.message and state.message.startswith("Database Error") else "success"
    flash(state.message, category)
    return redirect(url_for("main.invoices"))
