from typing import Optional

from pydantic import BaseModel


class InvoiceEmailRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class EmailSendResult(BaseModel):
    success: bool
    message_id: str
    message: str
    status: str
