# order_mailer/delivery.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, Tuple, Union

from .email_mailersend import OutboundEmail, ProviderResponse
from .errors import DeliveryError, DeliveryTimeoutError

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Network or internal server error."

FailureKind = Literal["provider", "network", "timeout", "internal"]


class EmailSender(Protocol):
    def send(self, msg: OutboundEmail) -> ProviderResponse:
        ...


@dataclass(frozen=True)
class Sent:
    provider_status: int
    provider_response_body: Any = None


@dataclass(frozen=True)
class Failed:
    error_message: str
    error_details: Any = None
    kind: FailureKind = "provider"
    provider_status: Optional[int] = None

    # every delivery failure surfaces as a server error
    http_status: int = 500


DeliveryResult = Union[Sent, Failed]


def describe_delivery_error(exc: DeliveryError) -> Tuple[str, Any]:
    """
    Returns (message, details) for a failed provider call.

    Precedence: the provider's structured body {"message", "errors"}, then the
    raw error message, then a generic message.
    """
    raw = exc.message or str(exc)
    body = exc.response_body

    if isinstance(body, dict):
        details = body["errors"] if body.get("errors") is not None else body
        if body.get("message"):
            return str(body["message"]), details
        return raw or GENERIC_ERROR, details
    if raw:
        return raw, body if body is not None else raw
    return GENERIC_ERROR, body


def _failure_kind(exc: DeliveryError) -> FailureKind:
    if isinstance(exc, DeliveryTimeoutError):
        return "timeout"
    if exc.status_code is not None:
        return "provider"
    return "network"


class DeliveryGateway:
    def __init__(self, sender: EmailSender):
        self.sender = sender

    def send(
        self,
        sender_address: str,
        sender_display_name: str,
        recipient_address: str,
        recipient_display_name: str,
        subject: str,
        html: str,
        text: str,
    ) -> DeliveryResult:
        msg = OutboundEmail(
            from_email=sender_address,
            from_name=sender_display_name,
            to_email=recipient_address,
            to_name=recipient_display_name,
            subject=subject,
            html=html,
            text=text,
            reply_to=sender_address,
        )

        logger.info("Sending email to=%s (%s) subject=%r", recipient_address, recipient_display_name, subject)
        try:
            response = self.sender.send(msg)
        except DeliveryError as e:
            message, details = describe_delivery_error(e)
            kind = _failure_kind(e)
            logger.error(
                "Email delivery failed kind=%s status=%s error=%s details=%s",
                kind, e.status_code, message, details,
            )
            return Failed(error_message=message, error_details=details, kind=kind, provider_status=e.status_code)
        except Exception as e:
            logger.exception("Unexpected error while sending email to=%s", recipient_address)
            return Failed(error_message=str(e) or GENERIC_ERROR, error_details=str(e) or None, kind="internal")

        logger.info("Email accepted by provider status=%s message_id=%s", response.status_code, response.message_id)
        return Sent(provider_status=response.status_code, provider_response_body=response.body)
