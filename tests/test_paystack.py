import hashlib
import hmac

import pytest
import requests

from booking_core.errors import GatewayError, InvalidSignature
from booking_core.paystack import PaystackClient, verify_signature

SECRET = "sk_test_secret"
BODY = b'{"event":"charge.success","data":{"amount":35000}}'


def _sign(body, secret=SECRET):
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def test_valid_signature_passes():
    verify_signature(BODY, _sign(BODY), SECRET)
    verify_signature(BODY.decode(), _sign(BODY).upper(), SECRET)


@pytest.mark.parametrize(
    "signature",
    [
        None,
        "",
        "deadbeef",
        hmac.new(b"other", BODY, hashlib.sha512).hexdigest(),
        "\u00e9" * 128,
        "\u00e9" + _sign(BODY)[1:],
    ],
)
def test_bad_signature_is_rejected(signature):
    with pytest.raises(InvalidSignature):
        verify_signature(BODY, signature, SECRET)


def test_signature_covers_exact_bytes():
    reformatted = b'{"event": "charge.success", "data": {"amount": 35000}}'
    with pytest.raises(InvalidSignature):
        verify_signature(reformatted, _sign(BODY), SECRET)


class StubResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json, headers, timeout):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


def test_initialize_transaction_posts_amount_and_metadata():
    session = StubSession(
        StubResponse(
            200,
            {
                "status": True,
                "message": "Authorization URL created",
                "data": {
                    "authorization_url": "https://checkout.paystack.com/0peioxfhpn",
                    "access_code": "0peioxfhpn",
                    "reference": "7PVGX8MEk85tgeEpVDtD",
                },
            },
        )
    )
    client = PaystackClient(SECRET, callback_url="https://salon.example/paid", session=session)

    data = client.initialize_transaction("a@b.com", 35000, {"bookingId": "bk-1"})

    assert data["authorization_url"] == "https://checkout.paystack.com/0peioxfhpn"
    call = session.calls[0]
    assert call["url"] == "https://api.paystack.co/transaction/initialize"
    assert call["headers"]["Authorization"] == f"Bearer {SECRET}"
    assert call["json"] == {
        "email": "a@b.com",
        "amount": 35000,
        "metadata": {"bookingId": "bk-1"},
        "callback_url": "https://salon.example/paid",
    }
    assert call["timeout"] == 15


@pytest.mark.parametrize(
    "session",
    [
        StubSession(error=requests.ConnectionError("no route")),
        StubSession(StubResponse(401, {"status": False, "message": "Invalid key"})),
        StubSession(StubResponse(502, ValueError("not json"))),
        StubSession(StubResponse(200, {"status": True, "data": {}})),
    ],
)
def test_initialize_transaction_failures_raise_gateway_error(session):
    client = PaystackClient(SECRET, session=session)
    with pytest.raises(GatewayError):
        client.initialize_transaction("a@b.com", 35000, {"bookingId": "bk-1"})
