# order_mailer/main.py
import logging
import math
from typing import Any, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, load_settings
from .delivery import DeliveryGateway, EmailSender, Failed
from .email_mailersend import MailerSendEmailClient
from .email_templates import render_order_confirmation
from .errors import ConfigurationError, PayloadValidationError
from .schemas import ErrorResponse, OrderConfirmationRequest, PrerenderedEmailRequest, QueuedResponse

logger = logging.getLogger(__name__)

QUEUED_MESSAGE = "Email successfully queued."
CONFIRMATION_INVALID = "Missing or invalid required email fields or purchase details."
PRERENDERED_INVALID = "Missing or invalid required email fields (toEmail, subject, htmlContent or textContent)."

VALIDATION_MESSAGES = {
    "/send-confirmation-email": CONFIRMATION_INVALID,
    "/send-email": PRERENDERED_INVALID,
}

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _json_safe(value: Any) -> Any:
    # NaN and Infinity are accepted on input but have no strict JSON form
    if isinstance(value, float) and not math.isfinite(value):
        return str(value).replace("inf", "Infinity").replace("nan", "NaN")
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def error_response(status_code: int, error: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": _json_safe(jsonable_encoder(details))},
    )


async def request_body(request: Request) -> Any:
    """The JSON body as received. FastAPI has already read and cached it."""
    return await request.json()


def create_app(settings: Settings, email_sender: Optional[EmailSender] = None) -> FastAPI:
    """
    Builds the API around one immutable Settings instance.
    email_sender defaults to the MailerSend client; tests pass a fake.
    """
    if email_sender is None:
        email_sender = MailerSendEmailClient(
            settings.mailersend_api_key,
            api_url=settings.mailersend_api_url,
            timeout=settings.provider_timeout,
        )
    gateway = DeliveryGateway(email_sender)

    app = FastAPI(title=settings.service_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_origin_regex=settings.allowed_origin_regex,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Inject shared config and gateway for endpoints
    @app.middleware("http")
    async def inject_clients(request: Request, call_next):
        request.state.settings = settings
        request.state.gateway = gateway
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def on_request_validation_error(request: Request, exc: RequestValidationError):
        message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request body.")
        logger.error("Validation error on %s: %s", request.url.path, exc.errors())
        return error_response(400, message, exc.body)

    @app.exception_handler(PayloadValidationError)
    async def on_payload_validation_error(request: Request, exc: PayloadValidationError):
        logger.error("Validation error on %s: %s", request.url.path, exc.message)
        return error_response(400, exc.message, exc.details)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return f"{settings.service_name} is running!"

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/send-confirmation-email", response_model=QueuedResponse, responses=ERROR_RESPONSES)
    def send_confirmation_email(
        payload: OrderConfirmationRequest,
        request: Request,
        raw_body: Any = Depends(request_body),
    ):
        settings: Settings = request.state.settings
        gateway: DeliveryGateway = request.state.gateway

        logger.info(
            "POST /send-confirmation-email to=%s name=%s subject=%r items=%d total=%s",
            payload.to_email, payload.to_name, payload.subject,
            len(payload.purchase_details), payload.total_price,
        )

        if not payload.purchase_details:
            logger.warning("Purchase details are empty; email will be sent without item breakdown.")
        else:
            computed = payload.items_total()
            if not math.isclose(computed, payload.total_price, abs_tol=0.005):
                if settings.total_mismatch_policy == "reject":
                    raise PayloadValidationError(
                        "totalPrice does not match the sum of purchase line items.",
                        details=raw_body,
                    )
                logger.warning(
                    "totalPrice %.2f does not match line items total %.2f; sending as given.",
                    payload.total_price, computed,
                )

        rendered = render_order_confirmation(
            subject=payload.subject,
            to_name=payload.to_name,
            items=payload.purchase_details,
            total_price=payload.total_price,
            app_name=settings.app_name,
            currency=settings.currency_symbol,
            primary_color=settings.primary_color,
        )
        return _deliver(settings, gateway, payload.to_email, payload.to_name, rendered.subject, rendered.html, rendered.text)

    @app.post("/send-email", response_model=QueuedResponse, responses=ERROR_RESPONSES)
    def send_email(payload: PrerenderedEmailRequest, request: Request):
        settings: Settings = request.state.settings
        gateway: DeliveryGateway = request.state.gateway

        logger.info(
            "POST /send-email to=%s name=%s subject=%r html=%s text=%s",
            payload.to_email, payload.to_name, payload.subject,
            bool(payload.html_content), bool(payload.text_content),
        )
        return _deliver(
            settings,
            gateway,
            payload.to_email,
            payload.to_name,
            payload.subject,
            payload.html_content or "",
            payload.text_content or "",
        )

    return app


def _deliver(settings: Settings, gateway: DeliveryGateway, to_email, to_name, subject, html, text):
    result = gateway.send(
        settings.sender_email,
        settings.sender_name,
        to_email,
        to_name,
        subject,
        html,
        text,
    )
    if isinstance(result, Failed):
        logger.error("Error processing email send request: %s", result.error_message)
        return error_response(result.http_status, result.error_message, result.error_details)

    logger.info("Email successfully queued (provider status %s).", result.provider_status)
    return QueuedResponse(message=QUEUED_MESSAGE, mailerSendResponse=result.provider_response_body)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def serve() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("ERROR: %s", e)
        raise SystemExit(1)

    configure_logging(settings.log_level)
    logger.info("Starting %s...", settings.service_name)
    logger.info("MailerSend API key (masked): %s", settings.masked_api_key)
    logger.info("Default SENDER_EMAIL configured: %s", settings.sender_email)

    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
