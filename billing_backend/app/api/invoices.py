"""Invoice routes: editing, line items, status, email and print/PDF output."""

from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from billing_backend.app.db.session import get_db
from billing_backend.app.dependencies.auth import get_current_user
from billing_backend.app.models.user import User
from billing_backend.app.schemas.email import EmailSendResult, InvoiceEmailRequest
from billing_backend.app.schemas.invoice import InvoiceRead, InvoiceStatusChange, InvoiceUpdate
from billing_backend.app.schemas.invoice_item import LineItemAdd, LineItemFieldUpdate
from billing_backend.app.services import invoices as invoice_service
from billing_backend.app.services import pdf as pdf_service
from billing_backend.app.services.invoice_email import send_invoice_email
from billing_backend.app.services.invoice_render import render_invoice_html
from billing_backend.app.services.mailer import Mailer, get_mailer

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/", response_model=List[InvoiceRead])
async def list_invoices(
    status: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return invoice_service.list_invoices(db, current_user.id, status=status, search=search)


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return invoice_service.get_owned_invoice(db, invoice_id, current_user.id)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
async def update_invoice(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.update_invoice(db, invoice, invoice_in)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    invoice_service.delete_invoice(db, invoice)


@router.post("/{invoice_id}/status", response_model=InvoiceRead)
async def change_invoice_status(
    invoice_id: int,
    payload: InvoiceStatusChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.change_status(db, invoice, payload.status)


@router.post("/{invoice_id}/approve", response_model=InvoiceRead)
async def approve_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.approve_invoice(db, invoice)


@router.post("/{invoice_id}/items", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def add_item(
    invoice_id: int,
    payload: LineItemAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.add_invoice_item(db, invoice, product_id=payload.product_id)


@router.patch("/{invoice_id}/items/{index}", response_model=InvoiceRead)
async def update_item(
    invoice_id: int,
    index: int,
    payload: LineItemFieldUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.update_invoice_item(db, invoice, index, payload.field, payload.value)


@router.delete("/{invoice_id}/items/{index}", response_model=InvoiceRead)
async def remove_item(
    invoice_id: int,
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return invoice_service.remove_invoice_item(db, invoice, index)


@router.post("/{invoice_id}/email", response_model=EmailSendResult)
def email_invoice(
    invoice_id: int,
    payload: InvoiceEmailRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: Mailer = Depends(get_mailer),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return send_invoice_email(db, invoice, mailer, payload)


@router.get("/{invoice_id}/html", response_class=HTMLResponse)
async def invoice_html(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    return HTMLResponse(render_invoice_html(invoice, invoice.business))


@router.get("/{invoice_id}/pdf")
def invoice_pdf(
    invoice_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    html = render_invoice_html(invoice, invoice.business)
    content = pdf_service.render_invoice_pdf(html, invoice, invoice.business, base_url=str(request.base_url))
    return _pdf_response(content, pdf_service.pdf_filename(invoice))


@router.post("/{invoice_id}/pdf/raster")
async def invoice_pdf_from_snapshot(
    invoice_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invoice = invoice_service.get_owned_invoice(db, invoice_id, current_user.id)
    content = pdf_service.paginate_raster(await file.read())
    return _pdf_response(content, pdf_service.pdf_filename(invoice))
