import logging

from order_mailer.delivery import GENERIC_ERROR, DeliveryGateway, Failed, Sent, describe_delivery_error
from order_mailer.email_mailersend import ProviderResponse
from order_mailer.errors import DeliveryError, DeliveryTimeoutError
from tests.fakes import FakeEmailSender


def _send(gateway):
    return gateway.send("from@x.com", "Shop", "a@b.com", "Alice", "Order", "<p>hi</p>", "hi")


def test_success_passes_provider_body_through():
    body = {"id": "abc", "nested": [1, 2]}
    sender = FakeEmailSender(response=ProviderResponse(status_code=202, body=body))
    result = _send(DeliveryGateway(sender))

    assert result == Sent(provider_status=202, provider_response_body=body)
    msg = sender.sent[0]
    assert msg.from_email == "from@x.com"
    assert msg.reply_to == "from@x.com"
    assert (msg.to_email, msg.to_name) == ("a@b.com", "Alice")
    assert (msg.html, msg.text) == ("<p>hi</p>", "hi")


def test_structured_provider_error_uses_message_and_errors(caplog):
    errors = {"to.0.email": ["The to.0.email must be a valid email address."]}
    exc = DeliveryError("HTTP 422", status_code=422, response_body={"message": "Invalid recipient", "errors": errors})
    with caplog.at_level(logging.ERROR):
        result = _send(DeliveryGateway(FakeEmailSender(error=exc)))

    assert isinstance(result, Failed)
    assert result.error_message == "Invalid recipient"
    assert result.error_details == errors
    assert result.kind == "provider"
    assert result.http_status == 500
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_body_without_errors_is_the_details():
    body = {"message": "Unauthenticated."}
    assert describe_delivery_error(DeliveryError("x", status_code=401, response_body=body)) == ("Unauthenticated.", body)


def test_falls_back_to_raw_message_then_generic():
    assert describe_delivery_error(DeliveryError("connection refused")) == ("connection refused", "connection refused")
    assert describe_delivery_error(DeliveryError()) == (GENERIC_ERROR, None)


def test_timeout_is_a_distinct_failure_kind():
    result = _send(DeliveryGateway(FakeEmailSender(error=DeliveryTimeoutError("timed out"))))
    assert isinstance(result, Failed)
    assert result.kind == "timeout"
    assert result.error_message == "timed out"


def test_unexpected_sender_error_does_not_escape():
    result = _send(DeliveryGateway(FakeEmailSender(error=RuntimeError("boom"))))
    assert isinstance(result, Failed)
    assert result.kind == "internal"
    assert result.error_message == "boom"


def test_empty_errors_object_is_kept_as_details():
    body = {"message": "Invalid recipient", "errors": {}}
    exc = DeliveryError("x", status_code=422, response_body=body)
    assert describe_delivery_error(exc) == ("Invalid recipient", {})

    body = {"message": "Invalid recipient", "errors": None}
    exc = DeliveryError("x", status_code=422, response_body=body)
    assert describe_delivery_error(exc) == ("Invalid recipient", body)
