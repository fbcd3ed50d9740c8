"""Read-only Account endpoints proxied to the Salesforce REST API."""
from __future__ import annotations

from flask import Blueprint, jsonify

from sf_proxy.api.auth import ensure_authenticated
from sf_proxy.core.validators import validate_record_id

bp = Blueprint("accounts", __name__)

ACCOUNTS_SOQL = "SELECT Id, Name, BillingCity FROM Account LIMIT 10"


@bp.route("/accounts")
def list_accounts():
    """Return the first Account records as a JSON array."""
    api = ensure_authenticated()
    return jsonify(api.query(ACCOUNTS_SOQL))


@bp.route("/accounts/<record_id>")
def get_account(record_id: str):
    """Return one Account record."""
    record_id = validate_record_id(record_id)
    api = ensure_authenticated()
    return jsonify(api.get_record("Account", record_id))
