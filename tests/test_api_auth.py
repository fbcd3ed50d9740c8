"""Tests for the login redirect and the OAuth callback."""
from urllib.parse import parse_qs, urlparse

import pytest

from sf_proxy.core.pkce import compute_challenge


def _login(client):
    response = client.get("/auth/login")
    assert response.status_code == 302
    location = response.headers["Location"]
    return location, {key: values[0] for key, values in parse_qs(urlparse(location).query).items()}


def test_login_redirects_to_salesforce_with_pkce(client):
    location, query = _login(client)

    assert location.startswith("https://login.example.com/services/oauth2/authorize?")
    assert query["response_type"] == "code"
    assert query["client_id"] == "test-client-id"
    assert query["redirect_uri"] == "http://localhost:5000/oauth/callback"
    assert query["code_challenge_method"] == "S256"
    assert query["scope"] == "api refresh_token"
    assert query["code_challenge"]
    assert query["state"]
    assert "test-client-secret" not in location


def test_each_login_gets_its_own_state_and_challenge(client, services):
    _, first = _login(client)
    _, second = _login(client)
    assert first["state"] != second["state"]
    assert first["code_challenge"] != second["code_challenge"]
    assert len(services.pending) == 2


def test_pending_verifier_matches_challenge(client, services):
    _, query = _login(client)
    verifier = services.pending.consume(query["state"])
    assert compute_challenge(verifier) == query["code_challenge"]


def test_callback_exchanges_code(client, services, fake_salesforce):
    _, query = _login(client)
    fake_salesforce.queue_token({"access_token": "tok1", "refresh_token": "ref1", "instance_url": "https://inst.example"})

    response = client.get(f"/oauth/callback?code=abc123&state={query['state']}")

    assert response.status_code == 200
    assert "Connected to inst.example" in response.get_data(as_text=True)
    (call,) = fake_salesforce.token_calls
    assert call.data["code"] == "abc123"
    assert compute_challenge(call.data["code_verifier"]) == query["code_challenge"]
    assert services.store.get().access_token == "tok1"
    assert len(services.pending) == 0


def test_callback_without_prior_login(client, fake_salesforce):
    response = client.get("/oauth/callback?code=abc123&state=forged", headers={"Accept": "text/html"})

    assert response.status_code == 400
    body = response.get_data(as_text=True)
    assert "Invalid Login State" in body
    assert 'href="/auth/login"' in body
    assert fake_salesforce.calls == []


def test_callback_state_cannot_be_replayed(client, services, fake_salesforce):
    _, query = _login(client)
    fake_salesforce.queue_token({"access_token": "tok1", "instance_url": "https://inst.example"})
    assert client.get(f"/oauth/callback?code=abc123&state={query['state']}").status_code == 200

    replay = client.get(f"/oauth/callback?code=abc123&state={query['state']}")
    assert replay.status_code == 400
    assert len(fake_salesforce.token_calls) == 1


def test_callback_without_code(client, services):
    _, query = _login(client)

    response = client.get(f"/oauth/callback?state={query['state']}", headers={"Accept": "application/json"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "No Authorization Code"
    assert len(services.pending) == 0


def test_callback_with_salesforce_error(client, services):
    _, query = _login(client)

    response = client.get(
        f"/oauth/callback?error=access_denied&error_description=end-user+denied+authorization&state={query['state']}"
    )

    assert response.status_code == 400
    assert "end-user denied authorization" in response.get_data(as_text=True)
    assert services.store.get() is None
    assert len(services.pending) == 0


def test_callback_with_rejected_code(client, services, fake_salesforce):
    _, query = _login(client)
    fake_salesforce.queue_token({"error": "invalid_grant", "error_description": "expired authorization code"}, status_code=400)

    response = client.get(
        f"/oauth/callback?code=stale&state={query['state']}", headers={"Accept": "application/json"}
    )

    assert response.status_code == 502
    payload = response.get_json()
    assert payload["error"] == "Token Exchange Failed"
    assert payload["status"] == 400
    assert payload["details"]["error"] == "invalid_grant"
    assert services.store.get() is None


@pytest.fixture()
def password_config(make_config):
    return make_config(
        salesforce_auth_flow="password",
        salesforce_redirect_uri="",
        salesforce_username="u@example.com",
        salesforce_password="p",
        salesforce_security_token="t",
    )


def test_password_flow_login(password_config, fake_salesforce):
    from sf_proxy.flask_app import create_app

    app = create_app(password_config)
    fake_salesforce.queue_token({"access_token": "tok1", "instance_url": "https://inst.example"})

    with app.test_client() as client:
        response = client.get("/auth/login")

    assert response.status_code == 302
    assert urlparse(response.headers["Location"]).path == "/"
    assert fake_salesforce.token_calls[0].data["password"] == "pt"
    assert app.extensions["salesforce"].store.is_authenticated()
