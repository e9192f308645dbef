"""Invoice PDF generation.

Two paths produce ``invoice-<number>.pdf``:

* server-side: the printable HTML rendered by WeasyPrint on A4 with 20px
  margins. When WeasyPrint is unavailable or fails, a short fpdf2 summary
  (invoice number, business, customer, total) is returned instead.
* raster: a client-side snapshot image of the rendered invoice is laid out at
  A4 width and split across as many pages as its height needs.
"""

from io import BytesIO
from typing import List, Optional

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from PIL import Image, UnidentifiedImageError

from billing_backend.app.core.exceptions import ValidationError
from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.money import format_plain
from billing_backend.app.models.business import Business
from billing_backend.app.models.invoice import Invoice

logger = get_logger(__name__)

A4_WIDTH_MM = 210
PAGE_HEIGHT_MM = 295

PRINT_CSS = "@page { size: A4; margin: 20px; } body { -weasy-print-background: exact; }"


def pdf_filename(invoice: Invoice) -> str:
    return f"invoice-{invoice.invoice_number or 'invoice'}.pdf"


def _latin1(text: Optional[str]) -> str:
    return (text or "").encode("latin-1", "replace").decode("latin-1")


def render_fallback_pdf(invoice: Invoice, business: Business) -> bytes:
    pdf = FPDF(unit="mm", format="A4")
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    for line in (
        f"Invoice: {invoice.invoice_number or ''}",
        f"Business: {business.name or ''}",
        f"Customer: {invoice.customer_name or ''}",
        f"Total: {format_plain(invoice.total, business.currency)}",
    ):
        pdf.set_x(20)
        pdf.cell(0, 10, _latin1(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())


def render_html_pdf(html: str, base_url: Optional[str] = None) -> bytes:
    from weasyprint import CSS, HTML

    return HTML(string=html, base_url=base_url).write_pdf(stylesheets=[CSS(string=PRINT_CSS)])


def render_invoice_pdf(html: str, invoice: Invoice, business: Business, base_url: Optional[str] = None) -> bytes:
    try:
        return render_html_pdf(html, base_url=base_url)
    except Exception as exc:
        logger.warning("pdf_renderer_fallback", invoice_id=invoice.id, error=str(exc))
        return render_fallback_pdf(invoice, business)


def page_offsets(image_height: float, page_height: float = PAGE_HEIGHT_MM) -> List[float]:
    """Vertical offsets (mm) at which to place the image on each page.

    The first page shows the top of the image; each further page shifts the
    image up by one page height.
    """
    offsets = [0.0]
    height_left = image_height - page_height
    while height_left > 0:
        offsets.append(height_left - image_height)
        height_left -= page_height
    return offsets


def paginate_raster(image_bytes: bytes) -> bytes:
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("Snapshot must be a PNG or JPEG image", field="file") from exc
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    width_px, height_px = image.size
    image_height = height_px * A4_WIDTH_MM / width_px

    pdf = FPDF(unit="mm", format="A4")
    pdf.set_auto_page_break(False)
    for offset in page_offsets(image_height):
        pdf.add_page()
        pdf.image(image, x=0, y=offset, w=A4_WIDTH_MM, h=image_height)
    return bytes(pdf.output())
