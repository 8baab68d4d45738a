"""
Tests for LitegoClient operations and the public helpers
"""
import pytest
from conftest import StubConnection, StubHttpTransport, StubWebSocketTransport, reply

from litego_payments import (
    AuthenticationError,
    LitegoClient,
    LitegoConfig,
    SubscriptionError,
    create_client,
    wait_for_payment,
)
from litego_payments import api
from litego_payments.core.results import Failure, Success
from litego_payments.core.subscription import Topic

TOKENS = {"auth_token": "A", "refresh_token": "R"}
CHARGE = {
    "id": "c1",
    "merchant_id": "m1",
    "description": "coffee",
    "amount": 0.0001,
    "amount_satoshi": 10000,
    "payment_request": "lntb100u1...",
    "paid": False,
    "created": 1538000000,
    "expiry_seconds": 3600,
    "object": "charge",
}
PAGE = {"data": [CHARGE], "page": 1, "page_size": 10, "object": "list", "count": 1}


def make_client(config, *responses, connection=None):
    http = StubHttpTransport(reply(200, TOKENS), *responses)
    websocket = StubWebSocketTransport(connection)
    client = LitegoClient(config, http=http, websocket=websocket)
    return client, http, websocket


class TestAuthorization:
    def test_first_call_authenticates_and_uses_bearer(self, config):
        client, http, _ = make_client(config, reply(200, {"id": "m1", "name": "Shop"}))

        result = client.get_merchant()

        assert result.ok
        assert result["name"] == "Shop"
        assert http.paths() == ["/api/v1/merchant/authenticate", "/api/v1/merchant/me"]
        assert http.requests[1].headers == {"Authorization": "Bearer A"}
        assert http.requests[1].timeout == 5

    def test_explicit_auth_token_skips_session(self, config):
        http = StubHttpTransport(reply(200, {"id": "m1"}))
        client = LitegoClient(config, http=http, websocket=StubWebSocketTransport())

        client.get_merchant(auth_token="T")

        assert http.paths() == ["/api/v1/merchant/me"]
        assert http.requests[0].headers == {"Authorization": "Bearer T"}

    def test_failed_authentication_raises(self, config):
        http = StubHttpTransport(reply(401, {"name": "Unauthorized", "detail": "bad key"}))
        client = LitegoClient(config, http=http, websocket=StubWebSocketTransport())

        with pytest.raises(AuthenticationError):
            client.get_merchant()

    def test_api_failure_is_returned_not_raised(self, config):
        client, _, _ = make_client(
            config, reply(401, {"name": "Unauthorized", "detail": "token expired"})
        )

        result = client.get_merchant()

        assert isinstance(result, Failure)
        assert result.error_message == "token expired"

    def test_tokenless_authentication_reply_never_sends_a_bearer(self, config):
        http = StubHttpTransport(reply(200, "<html>ok</html>"))
        client = LitegoClient(config, http=http, websocket=StubWebSocketTransport())

        with pytest.raises(AuthenticationError):
            client.get_merchant()

        assert http.paths() == ["/api/v1/merchant/authenticate"]

    def test_explicit_timeout_is_not_replaced_by_default(self, config):
        client, http, _ = make_client(config, reply(200, {"id": "m1"}))

        client.get_merchant(timeout=0)

        assert [request.timeout for request in http.requests] == [0, 0]


class TestCharges:
    def test_create_charge(self, config):
        client, http, _ = make_client(config, reply(200, CHARGE))

        result = client.create_charge("coffee", 10000)

        assert result.value == CHARGE
        request = http.requests[1]
        assert (request.method, request.path) == ("POST", "/api/v1/charges")
        assert request.data == {"description": "coffee", "amount_satoshi": 10000}

    def test_list_charges_passes_filters_for_the_query(self, config):
        client, http, _ = make_client(config, reply(200, PAGE))

        result = client.list_charges({"page": 1, "pageSize": 10})

        assert result.value == PAGE
        request = http.requests[1]
        assert request.method == "GET"
        assert request.data == {"page": 1, "pageSize": 10}

    def test_get_charge_is_repeatable(self, config):
        client, http, _ = make_client(config, reply(200, CHARGE), reply(200, CHARGE))

        first = client.get_charge("c1")
        second = client.get_charge("c1")

        assert first == second == Success(value=CHARGE)
        assert http.paths()[1:] == ["/api/v1/charges/c1", "/api/v1/charges/c1"]
        assert http.paths().count("/api/v1/merchant/authenticate") == 1

    def test_get_charge_requires_id(self, config):
        client, _, _ = make_client(config)
        with pytest.raises(ValueError):
            client.get_charge("")


class TestWithdrawals:
    def test_set_withdrawal_address(self, config):
        client, http, _ = make_client(
            config, reply(200, {"type": "regular", "value": "2N3o", "object": "withdrawal_address"})
        )

        result = client.set_withdrawal_address("regular", "2N3o")

        assert result.value == {
            "type": "regular",
            "value": "2N3o",
            "xpub_key": None,
            "object": "withdrawal_address",
        }
        assert http.requests[1].data == {"type": "regular", "value": "2N3o"}

    def test_set_withdrawal_address_rejects_unknown_type(self, config):
        client, _, _ = make_client(config)
        with pytest.raises(ValueError):
            client.set_withdrawal_address("segwit", "bc1...")

    def test_trigger_withdrawal_is_bodyless_put(self, config):
        client, http, _ = make_client(
            config, reply(200, {"transaction_id": "t1", "merchantId": "m1", "status": "created"})
        )

        result = client.trigger_withdrawal()

        assert result["transaction_id"] == "t1"
        assert result["merchantId"] == "m1"
        request = http.requests[1]
        assert (request.method, request.path, request.data) == (
            "PUT",
            "/api/v1/merchant/me/withdrawal/manual",
            None,
        )

    def test_list_withdrawals(self, config):
        client, http, _ = make_client(config, reply(200, PAGE))

        client.list_withdrawals({"status": "confirmed"})

        assert http.requests[1].path == "/api/v1/merchant/me/withdrawals"
        assert http.requests[1].data == {"status": "confirmed"}

    def test_withdrawal_settings_fields(self, config):
        client, _, _ = make_client(
            config,
            reply(
                200,
                {"withdrawal_fee": 0.01, "withdrawal_manual_fee": 1000, "withdrawal_min_amount": 50000},
            ),
        )

        result = client.get_withdrawal_settings()

        assert result.value == {
            "withdrawal_fee": 0.01,
            "withdrawal_manual_fee": 1000,
            "withdrawal_min_amount": 50000,
        }


class TestWebhooksAndReferrals:
    def test_set_notification_url(self, config):
        client, http, _ = make_client(
            config, reply(200, {"url": "https://shop.example/hook", "object": "notification_url"})
        )

        result = client.set_notification_url("https://shop.example/hook")

        assert result["url"] == "https://shop.example/hook"
        assert http.requests[1].data == {"url": "https://shop.example/hook"}

    def test_list_webhook_responses(self, config):
        client, http, _ = make_client(config, reply(200, PAGE))

        client.list_webhook_responses({"page": 2})

        assert http.requests[1].path == "/api/v1/merchant/me/notification-responses"

    def test_list_referral_payments_returns_page(self, config):
        client, http, _ = make_client(config, reply(200, PAGE))

        result = client.list_referral_payments()

        assert result.value == PAGE
        assert http.requests[1].path == "/api/v1/merchant/me/referral-payments"


class TestSubscriptions:
    def test_subscribe_payments_uses_session_token(self, config):
        connection = StubConnection(frames=["", '{"id":"c1"}'])
        client, _, websocket = make_client(config, connection=connection)

        message = client.subscribe_payments()

        assert message == '{"id":"c1"}'
        assert websocket.connects[0]["headers"] == {"Authorization": "Bearer A"}
        assert websocket.connects[0]["timeout"] == 5

    def test_subscribe_charge_payment(self, config):
        connection = StubConnection(frames=['{"id":"c7","paid":true}'])
        client, _, websocket = make_client(config, connection=connection)

        client.subscribe_charge_payment("c7", timeout=2)

        assert websocket.connects[0]["path"] == "/api/v1/payments/subscribe/c7"
        assert websocket.connects[0]["timeout"] == 2

    def test_zero_timeout_is_rejected_before_connecting(self, config):
        client, http, websocket = make_client(config)

        with pytest.raises(ValueError):
            client.open_subscription(Topic.all_payments(), timeout=0)

        assert http.requests == []
        assert websocket.connects == []


class TestHelpers:
    def test_create_client_from_parameters(self):
        client = create_client(env_file=None, base={}, merchant_id="m1", secret_key="s1", mode="test")

        assert client.config.service_url == "https://sandbox.litego.io:9000"
        assert client.http.base_url == "https://sandbox.litego.io:9000"
        assert client.websocket.base_url == "wss://sandbox.litego.io:9000"

    def test_create_client_rejects_config_and_parameters(self, config):
        with pytest.raises(ValueError):
            create_client(config=config, merchant_id="other")

    def test_create_client_with_config(self, config):
        assert create_client(config=config).config is config

    def test_wait_for_payment_decodes_event(self, config):
        connection = StubConnection(frames=['{"id":"c1","paid":true}'])
        client, _, _ = make_client(config, connection=connection)

        event = wait_for_payment("c1", client=client)

        assert event == {"id": "c1", "paid": True}

    def test_wait_for_payment_rejects_invalid_json(self, config):
        connection = StubConnection(frames=["not json"])
        client, _, _ = make_client(config, connection=connection)

        with pytest.raises(SubscriptionError):
            wait_for_payment(client=client)

    def test_wait_for_payment_closes_the_client_it_creates(self, config, monkeypatch):
        connection = StubConnection(frames=['{"id":"c1"}'])
        client, http, _ = make_client(config, connection=connection)
        monkeypatch.setattr(api, "create_client", lambda **options: client)

        event = wait_for_payment("c1", merchant_id="m1", secret_key="s1")

        assert event == {"id": "c1"}
        assert http.closed

    def test_wait_for_payment_leaves_a_given_client_open(self, config):
        connection = StubConnection(frames=['{"id":"c1"}'])
        client, http, _ = make_client(config, connection=connection)

        wait_for_payment("c1", client=client)

        assert not http.closed

    def test_context_manager_closes_transport(self, config):
        client, http, _ = make_client(config)
        with client:
            pass
        assert http.closed


def test_for_mode_builds_live_config():
    config = LitegoConfig.for_mode("m1", "s1")
    assert config.service_url == "https://api.litego.io:9000"
