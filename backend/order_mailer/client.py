# order_mailer/client.py
"""
Caller-side helper for services that hand emails to the relay over HTTP.
Failures never raise; they come back as RelayResult(success=False, ...).
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

CONNECT_ERROR = "Could not connect to the email service. Check your backend URL or server status."


@dataclass(frozen=True)
class RelayResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    details: Any = None


class EmailRelayClient:
    def __init__(self, base_url: str, *, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def send_email(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_content: Optional[str] = None,
        text_content: Optional[str] = None,
    ) -> RelayResult:
        data = {
            "toEmail": to_email,
            "toName": to_name,
            "subject": subject,
            "htmlContent": html_content,
            "textContent": text_content,
        }
        return self._post("/send-email", {k: v for k, v in data.items() if v is not None})

    def send_order_confirmation(
        self,
        to_email: str,
        to_name: str,
        subject: str,
        purchase_details: Iterable[Mapping[str, Any]],
        total_price: float,
    ) -> RelayResult:
        return self._post(
            "/send-confirmation-email",
            {
                "toEmail": to_email,
                "toName": to_name,
                "subject": subject,
                "purchaseDetails": [dict(item) for item in purchase_details],
                "totalPrice": total_price,
            },
        )

    def _post(self, path: str, payload: dict) -> RelayResult:
        url = f"{self.base_url}{path}"
        logger.info("Sending POST request to %s", url)
        try:
            r = self.session.post(url, json=payload, timeout=self.timeout)
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Network error sending email via relay: %s", e)
            return RelayResult(success=False, error=CONNECT_ERROR)

        if r.ok:
            return RelayResult(success=True, message=data.get("message"))

        logger.error("Relay rejected email: %s %s", data.get("error"), data.get("details"))
        return RelayResult(success=False, error=data.get("error"), details=data.get("details"))
