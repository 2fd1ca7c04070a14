import pytest
import stripe
from fastapi.testclient import TestClient
from jose import jwt

import fireshop.auth
from fireshop.admins import hash_code
from fireshop.main import create_app


@pytest.fixture
def fastapi_app(settings, tree, sink, mailer):
    application = create_app(settings, tree=tree)
    application.state.reporter.sink = sink
    application.state.mailer = mailer
    return application


@pytest.fixture
def client(fastapi_app):
    # Bypass auth verification for tests
    fastapi_app.dependency_overrides[fireshop.auth.verify_token] = lambda: {"sub": "u1", "email": "ops@example.com"}
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def test_charge_event_is_processed(client, tree, mocker):
    tree.set("stripe_customers/u1/customer_id", "cus_123")
    tree.set("stripe_customers/u1/charges/c1", {"amount": 500})
    create = mocker.patch("fireshop.charges.stripe_service.create_charge", return_value={"id": "ch_1"})

    response = client.post("/events/database", json={
        "path": "stripe_customers/u1/charges/c1",
        "before": None,
        "after": {"amount": 500},
    })

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert create.call_args.kwargs["idempotency_key"] == "c1"
    assert tree.get("stripe_customers/u1/charges/c1") == {"amount": 500, "id": "ch_1"}


def test_stripe_charge_response_is_recorded_over_http(client, tree, mocker):
    tree.set("stripe_customers/u1/customer_id", "cus_123")
    tree.set("stripe_customers/u1/charges/c2", {"amount": 900})
    mocker.patch(
        "fireshop.stripe_service.stripe.Charge.create",
        return_value=stripe.Charge.construct_from(
            {"id": "ch_2", "object": "charge", "amount": 900, "outcome": {"type": "authorized"}}, "sk_test"
        ),
    )

    response = client.post("/events/database", json={
        "path": "stripe_customers/u1/charges/c2",
        "after": {"amount": 900},
    })

    assert response.status_code == 200
    assert tree.get("stripe_customers/u1/charges/c2") == {
        "id": "ch_2", "object": "charge", "amount": 900, "outcome": {"type": "authorized"}
    }


def test_charge_error_is_reported_with_function_name(client, tree, sink, mocker):
    tree.set("stripe_customers/u1/charges/c1", {"amount": 500})

    response = client.post("/events/database", json={
        "path": "stripe_customers/u1/charges/c1",
        "after": {"amount": 500},
    })

    assert response.status_code == 200
    assert sink.entries[0]["serviceContext"]["service"] == "create_charge"


def test_unroutable_event_returns_404(client):
    response = client.post("/events/database", json={"path": "carts/u1", "after": {}})
    assert response.status_code == 404


def test_account_lifecycle_over_http(client, tree, mocker):
    mocker.patch("fireshop.stripe_service.stripe.Customer.create", return_value={"id": "cus_77"})
    delete = mocker.patch("fireshop.stripe_service.stripe.Customer.delete", return_value={"deleted": True})

    created = client.post("/events/auth", json={
        "event_type": "account.created",
        "account": {"uid": "u1", "email": "ada@example.com"},
    })
    assert created.status_code == 200
    assert tree.get("stripe_customers/u1/customer_id") == "cus_77"

    deleted = client.post("/events/auth", json={"event_type": "account.deleted", "account": {"uid": "u1"}})
    assert deleted.status_code == 200
    delete.assert_called_once_with("cus_77")
    assert tree.get("stripe_customers/u1") is None


def test_unknown_auth_event_is_rejected(client):
    response = client.post("/events/auth", json={"event_type": "account.renamed", "account": {"uid": "u1"}})
    assert response.status_code == 422


def test_order_created_sends_mail(client, tree, mailer):
    tree.set("users/u1", {"email": "ada@example.com", "orders": {"o1": {"total": 10}}})

    response = client.post("/events/database", json={
        "path": "users/u1/orders/o1",
        "before": None,
        "after": {"total": 10},
    })

    assert response.status_code == 200
    assert mailer.sent[0]["subject"] == "Order Confirmation"


def test_admin_session_for_authorized_admin(client, tree):
    tree.set(f"admins/{hash_code('ops@example.com')}", {"email": "ops@example.com"})
    tree.set("admins/u1", {"role": "owner", "active": True})

    response = client.get("/admin/session")

    assert response.status_code == 200
    assert response.json()["role"] == "owner"


def test_admin_session_rejects_non_admin(client):
    response = client.get("/admin/session")
    assert response.status_code == 403
    assert response.json()["detail"] == "You are not an authorized administrator"


def test_index_page_is_rendered(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "<app-root>FireShop</app-root>" in response.text
    assert response.headers["content-type"].startswith("text/html")


def test_index_render_failure_returns_500(client, settings):
    settings.index_path.unlink()
    response = client.get("/")
    assert response.status_code == 500


def test_events_require_a_valid_token(fastapi_app, settings):
    with TestClient(fastapi_app) as c:
        missing = c.post("/events/database", json={"path": "carts/u1"})
        wrong = c.post("/events/database", json={"path": "carts/u1"}, headers={"Authorization": "Bearer nope"})
        token = jwt.encode({"sub": "event-bus"}, settings.jwt_secret, algorithm="HS256")
        valid = c.post("/events/database", json={"path": "carts/u1"}, headers={"Authorization": f"Bearer {token}"})

    assert missing.status_code == 422
    assert wrong.status_code == 401
    assert valid.status_code == 404


def test_sink_failure_surfaces_as_server_error(fastapi_app, tree, mocker):
    fastapi_app.dependency_overrides[fireshop.auth.verify_token] = lambda: {}
    mocker.patch.object(fastapi_app.state.reporter.sink, "write", side_effect=ConnectionError("sink down"))
    tree.set("stripe_customers/u1/charges/c1", {"amount": 500})

    with TestClient(fastapi_app, raise_server_exceptions=False) as c:
        response = c.post("/events/database", json={"path": "stripe_customers/u1/charges/c1", "after": {"amount": 500}})

    assert response.status_code == 500
    assert tree.get("stripe_customers/u1/charges/c1/error") is not None
