"""Tests for error handlers (JSON for API clients, HTML for browsers)."""
import pytest

from sf_proxy.core.salesforce import DownstreamError, NoRefreshToken, TokenExchangeFailed, Unauthenticated

JSON = {"Accept": "application/json"}
HTML = {"Accept": "text/html"}


@pytest.fixture()
def raising_app(app):
    """App with extra routes that raise typed and untyped errors."""

    def _raise(exc):
        def view():
            raise exc
        return view

    app.add_url_rule("/boom", "boom", _raise(RuntimeError("database password is hunter2")))
    app.add_url_rule("/unauthenticated", "unauthenticated", _raise(Unauthenticated()))
    app.add_url_rule("/no-refresh", "no_refresh", _raise(NoRefreshToken()))
    app.add_url_rule(
        "/token-failed",
        "token_failed",
        _raise(TokenExchangeFailed(None, "Token endpoint unreachable", "refresh_token")),
    )
    app.add_url_rule(
        "/unreachable",
        "unreachable",
        _raise(DownstreamError(None, "Salesforce API unreachable", "/services/data/v60.0/query/")),
    )
    return app


@pytest.fixture()
def raising_client(raising_app):
    with raising_app.test_client() as client:
        yield client


def test_unhandled_exception_json(raising_client):
    response = raising_client.get("/boom", headers=JSON)
    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal Server Error", "message": "An unexpected error occurred"}


def test_unhandled_exception_html(raising_client):
    response = raising_client.get("/boom", headers=HTML)
    assert response.status_code == 500
    body = response.get_data(as_text=True)
    assert "Internal Server Error" in body
    assert "hunter2" not in body


def test_unauthenticated_json_points_to_login(raising_client):
    response = raising_client.get("/unauthenticated", headers=JSON)
    assert response.status_code == 401
    assert response.get_json() == {
        "error": "Authentication required",
        "message": "Not authenticated with Salesforce. Log in at /auth/login.",
        "login_url": "/auth/login",
    }


def test_unauthenticated_html_offers_login(raising_client):
    response = raising_client.get("/unauthenticated", headers=HTML)
    assert response.status_code == 401
    body = response.get_data(as_text=True)
    assert "Authentication required" in body
    assert 'href="/auth/login"' in body


def test_no_refresh_token(raising_client):
    response = raising_client.get("/no-refresh", headers=JSON)
    assert response.status_code == 401
    assert response.get_json()["error"] == "No Refresh Token"


def test_token_endpoint_unreachable(raising_client):
    response = raising_client.get("/token-failed", headers=JSON)
    assert response.status_code == 502
    payload = response.get_json()
    assert payload["status"] is None
    assert payload["details"] == "Token endpoint unreachable"


def test_downstream_transport_error_is_bad_gateway(raising_client):
    response = raising_client.get("/unreachable", headers=JSON)
    assert response.status_code == 502
    assert response.get_json()["error"] == "Salesforce request failed"


def test_not_found_json_under_accounts(client):
    response = client.get("/accounts/001000000000001AAA/contacts")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not Found", "message": "Resource not found"}


def test_not_found_html(client):
    response = client.get("/nope", headers=HTML)
    assert response.status_code == 404
    assert "does not exist" in response.get_data(as_text=True)
