from billing_backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from billing_backend.app.models.user import User  # noqa: F401
from billing_backend.app.models.business import Business  # noqa: F401
from billing_backend.app.models.product import Product  # noqa: F401
from billing_backend.app.models.price_history import PriceHistory  # noqa: F401
from billing_backend.app.models.invoice import Invoice  # noqa: F401
from billing_backend.app.models.invoice_item import InvoiceItem  # noqa: F401
