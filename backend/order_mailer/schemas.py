# order_mailer/schemas.py
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LineItem(CamelModel):
    name: NonEmptyStr
    quantity: int = Field(ge=0)
    price: float = Field(ge=0, allow_inf_nan=False)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class OrderConfirmationRequest(CamelModel):
    to_email: EmailStr = Field(alias="toEmail")
    to_name: NonEmptyStr = Field(alias="toName")
    subject: NonEmptyStr
    purchase_details: List[LineItem] = Field(alias="purchaseDetails")
    # strict: "20" is not a number
    total_price: float = Field(alias="totalPrice", strict=True, allow_inf_nan=False)

    def items_total(self) -> float:
        return sum(item.subtotal for item in self.purchase_details)


class PrerenderedEmailRequest(CamelModel):
    to_email: EmailStr = Field(alias="toEmail")
    to_name: Optional[str] = Field(default=None, alias="toName")
    subject: NonEmptyStr
    html_content: Optional[str] = Field(default=None, alias="htmlContent")
    text_content: Optional[str] = Field(default=None, alias="textContent")

    @model_validator(mode="after")
    def needs_content(self):
        if not (self.html_content or self.text_content):
            raise ValueError("Provide 'htmlContent' or 'textContent'.")
        if not (self.to_name and self.to_name.strip()):
            self.to_name = self.to_email
        return self


class QueuedResponse(BaseModel):
    message: str = "Email successfully queued."
    mailerSendResponse: Any = None


class ErrorResponse(BaseModel):
    error: str
    details: Any = None
