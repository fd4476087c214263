# order_mailer/email_mailersend.py
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .errors import ConfigurationError, DeliveryError, DeliveryTimeoutError

MAILERSEND_API_URL = "https://api.mailersend.com/v1/email"


@dataclass(frozen=True)
class OutboundEmail:
    from_email: str
    from_name: str
    to_email: str
    to_name: str
    subject: str
    html: str
    text: str
    reply_to: Optional[str] = None


@dataclass(frozen=True)
class ProviderResponse:
    status_code: int
    body: Any = None
    message_id: Optional[str] = None


def _response_body(r: requests.Response) -> Any:
    # MailerSend answers 202 with an empty body; errors are JSON
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        return r.text


class MailerSendEmailClient:
    def __init__(self, api_key: str, *, api_url: str = MAILERSEND_API_URL, timeout: float = 15.0):
        if not api_key:
            raise ConfigurationError("MAILERSEND_API_KEY is missing.")
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    def build_payload(self, msg: OutboundEmail) -> dict:
        payload: dict = {
            "from": {"email": msg.from_email, "name": msg.from_name},
            "to": [{"email": msg.to_email, "name": msg.to_name}],
            "subject": msg.subject,
            "html": msg.html,
            "text": msg.text,
        }
        if msg.reply_to:
            payload["reply_to"] = {"email": msg.reply_to, "name": msg.from_name}
        return payload

    def send(self, msg: OutboundEmail) -> ProviderResponse:
        try:
            r = requests.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    "X-Requested-With": "XMLHttpRequest",
                },
                json=self.build_payload(msg),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise DeliveryTimeoutError(f"MailerSend did not respond within {self.timeout:g}s.") from e
        except requests.RequestException as e:
            raise DeliveryError(str(e)) from e

        body = _response_body(r)
        if not r.ok:
            raise DeliveryError(
                f"MailerSend responded with HTTP {r.status_code}.",
                status_code=r.status_code,
                response_body=body,
            )
        return ProviderResponse(
            status_code=r.status_code,
            body=body,
            message_id=r.headers.get("X-Message-Id"),
        )
