# order_mailer/email_templates.py
from dataclasses import dataclass
from html import escape
from typing import Sequence

from .schemas import LineItem

NO_ITEMS_SENTENCE = "No specific item details were provided for this order."

_CELL = "padding: 10px; border: 1px solid #ddd;"
_TOTAL_CELL = f"{_CELL} text-align: right; font-weight: bold; background-color:#f2f2f2;"


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    html: str
    text: str


def money(value: float, currency: str) -> str:
    return f"{currency}{value:.2f}"


def render_item_line(item: LineItem, currency: str) -> str:
    return (
        f"- {item.name} (x{item.quantity}) @ "
        f"{money(item.price, currency)} = {money(item.subtotal, currency)}"
    )


def _items_html(items: Sequence[LineItem], total_price: float, currency: str) -> str:
    if not items:
        return f"<p>{NO_ITEMS_SENTENCE}</p>"

    rows = "".join(
        "<tr>"
        f'<td style="{_CELL}">{escape(item.name)}</td>'
        f'<td style="{_CELL}">{item.quantity}</td>'
        f'<td style="{_CELL} text-align: right;">{money(item.price, currency)}</td>'
        f'<td style="{_CELL} text-align: right;">{money(item.subtotal, currency)}</td>'
        "</tr>\n"
        for item in items
    )
    return (
        '<h2 style="color:#333;">Purchase Details:</h2>\n'
        '<table style="width:100%; border-collapse: collapse; margin-bottom: 20px;">\n'
        "<thead>\n"
        '<tr style="background-color:#f8f8f8;">'
        f'<th style="{_CELL} text-align: left;">Product</th>'
        f'<th style="{_CELL} text-align: left;">Qty</th>'
        f'<th style="{_CELL} text-align: right;">Price</th>'
        f'<th style="{_CELL} text-align: right;">Subtotal</th>'
        "</tr>\n"
        "</thead>\n"
        f"<tbody>\n{rows}</tbody>\n"
        "<tfoot>\n"
        "<tr>"
        f'<td colspan="3" style="{_TOTAL_CELL}">Total Payable:</td>'
        f'<td style="{_TOTAL_CELL}">{money(total_price, currency)}</td>'
        "</tr>\n"
        "</tfoot>\n"
        "</table>"
    )


def _items_text(items: Sequence[LineItem], currency: str) -> str:
    if not items:
        return NO_ITEMS_SENTENCE
    return "\n".join(render_item_line(item, currency) for item in items)


def render_order_confirmation(
    *,
    subject: str,
    to_name: str,
    items: Sequence[LineItem],
    total_price: float,
    app_name: str,
    currency: str,
    primary_color: str,
) -> RenderedMessage:
    """
    Builds the HTML and plain-text bodies of an order confirmation.
    User-supplied strings are escaped in the HTML body only.
    total_price is rendered as given; it is not recomputed from the items.
    """
    total = money(total_price, currency)

    html = (
        '<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">\n'
        f'<h1 style="color: {escape(primary_color)};">{escape(app_name)} - Order Confirmation</h1>\n'
        f"<p>Dear {escape(to_name)},</p>\n"
        f"<p>Thank you for your recent purchase with {escape(app_name)}! "
        "Your order has been successfully placed and confirmed.</p>\n"
        f"<p><strong>Order Total: {total}</strong></p>\n"
        f"{_items_html(items, total_price, currency)}\n"
        "<p>We appreciate your business and look forward to serving you again.</p>\n"
        "<p>Best regards,</p>\n"
        f"<p><strong>The {escape(app_name)} Team</strong></p>\n"
        '<hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">\n'
        '<p style="font-size: 0.8em; color: #777;">This is an automated email, please do not reply.</p>\n'
        "</div>\n"
    )

    text = (
        f"Dear {to_name},\n\n"
        f"Thank you for your recent purchase with {app_name}! "
        "Your order has been successfully placed and confirmed.\n\n"
        f"Order Total: {total}\n\n"
        "Purchase Details:\n"
        f"{_items_text(items, currency)}\n\n"
        "We appreciate your business and look forward to serving you again.\n\n"
        "Best regards,\n"
        f"The {app_name} Team\n\n"
        "---\n"
        "This is an automated email, please do not reply.\n"
    )
    return RenderedMessage(subject=subject, html=html, text=text)
