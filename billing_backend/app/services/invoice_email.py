"""Send an invoice to its customer by email."""

from sqlalchemy.orm import Session

from billing_backend.app.core.exceptions import ValidationError
from billing_backend.app.models.invoice import Invoice
from billing_backend.app.schemas.email import EmailSendResult, InvoiceEmailRequest
from billing_backend.app.services.invoice_render import (
    default_subject,
    render_invoice_html,
    render_invoice_text,
)
from billing_backend.app.services.invoices import mark_sent
from billing_backend.app.services.mailer import Mailer, OutgoingEmail
from billing_backend.app.services.validation import is_valid_email


def send_invoice_email(db: Session, invoice: Invoice, mailer: Mailer, request: InvoiceEmailRequest) -> EmailSendResult:
    business = invoice.business
    to = (request.to or invoice.customer_email or "").strip()
    if not to:
        raise ValidationError("Recipient email is required", field="to")
    if not is_valid_email(to):
        raise ValidationError("Invalid email format", field="to")

    email = OutgoingEmail(
        to=to,
        subject=request.subject or default_subject(invoice, business),
        html_body=render_invoice_html(invoice, business, message=request.message),
        text_body=render_invoice_text(invoice, business, message=request.message),
    )
    message_id = mailer.send(email)
    invoice = mark_sent(db, invoice)
    return EmailSendResult(
        success=True,
        message_id=message_id,
        message="Email sent successfully",
        status=invoice.status,
    )
