import pytest
from conftest import auth_headers

from gateway.services.payments import PaystackError, PaystackRejected


def _init(client, body, token="token-u1"):
    return client.post("/initializePayment", json=body, headers=auth_headers(token))


def test_donation_initializes_transaction(client, paystack):
    r = _init(client, {"amount": 5000, "email": "giver@example.com"})
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "authorization_url": "https://checkout.paystack.com/abc123",
        "access_code": "abc123",
        "reference": "ref_abc123",
    }

    call = paystack.calls[0]
    assert call["email"] == "giver@example.com"
    assert call["amount_kobo"] == 500000
    assert call["metadata"] == {"userId": "u1", "purpose": "supporter_donation"}


def test_fractional_amount_is_converted_to_kobo(client, paystack):
    _init(client, {"amount": 150.5})
    assert paystack.calls[0]["amount_kobo"] == 15050


def test_minimum_amount_is_accepted(client, paystack):
    assert _init(client, {"amount": 100}).status_code == 200


@pytest.mark.parametrize("amount", [None, 99, 99.99, 0, -500, "5000", True, [100]])
def test_invalid_amount_is_400(client, paystack, amount):
    r = _init(client, {"amount": amount})
    assert r.status_code == 400
    assert r.json()["code"] == "INVALID_INPUT"
    assert paystack.calls == []


def test_email_falls_back_to_signed_in_user(client, paystack):
    _init(client, {"amount": 1000})
    assert paystack.calls[0]["email"] == "u1@example.com"


def test_missing_email_is_400(client, paystack):
    r = _init(client, {"amount": 1000}, token="token-noemail")
    assert r.status_code == 400
    assert r.json()["error"] == "Email required for payment."
    assert paystack.calls == []


def test_callback_url_defaults_from_settings(client, paystack, settings):
    _init(client, {"amount": 1000})
    assert paystack.calls[0]["callback_url"] == settings.paystack_callback_url


def test_callback_url_from_request(client, paystack):
    _init(client, {"amount": 1000, "callbackUrl": "https://example.com/done"})
    assert paystack.calls[0]["callback_url"] == "https://example.com/done"


@pytest.mark.parametrize("plan,price", [("monthly", 150000), ("quarterly", 350000), ("yearly", 1000000)])
def test_plan_uses_plan_price(client, paystack, plan, price):
    r = _init(client, {"plan": plan, "amount": 1})
    assert r.status_code == 200
    call = paystack.calls[0]
    assert call["amount_kobo"] == price
    assert call["metadata"] == {"userId": "u1", "purpose": "premium_subscription", "plan": plan}


@pytest.mark.parametrize("plan", ["weekly", "", 3])
def test_unknown_plan_is_400(client, paystack, plan):
    r = _init(client, {"plan": plan})
    assert r.status_code == 400
    assert paystack.calls == []


def test_rejection_message_is_forwarded(client, paystack):
    paystack.error = PaystackRejected("Invalid Email Address Passed")
    r = _init(client, {"amount": 1000, "email": "nope"})
    assert r.status_code == 400
    assert r.json()["code"] == "PAYMENT_REJECTED"
    assert r.json()["error"] == "Invalid Email Address Passed"


def test_transport_failure_is_generic_500(client, paystack):
    paystack.error = PaystackError("Paystack request failed: ConnectTimeout: sk_live_leak")
    r = _init(client, {"amount": 1000})
    assert r.status_code == 500
    assert r.json()["error"] == "Payment service temporarily unavailable"
    assert "sk_live_leak" not in r.text


def test_requires_auth(client, paystack):
    r = client.post("/initializePayment", json={"amount": 1000})
    assert r.status_code == 401
    assert paystack.calls == []
