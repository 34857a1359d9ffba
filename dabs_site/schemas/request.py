from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

NOT_PROVIDED = "Not provided"


class ProductRequestSubmission(BaseModel):
    """Body posted by the "request Dabs at your store" form.

    Every field is optional at the schema level; required fields are checked
    by the submission service so the caller gets a single 400 message.
    """

    city: Optional[str] = None
    store: Optional[str] = None
    product: Optional[str] = None
    email: Optional[str] = None
    instagram: Optional[str] = None
    timestamp: Optional[str] = None
    date: Optional[str] = None


class RequestRecord(BaseModel):
    timestamp: str = ""
    city: str = ""
    store: str = ""
    product: str = ""
    email: str = NOT_PROVIDED
    instagram: str = NOT_PROVIDED
    date: str = ""
    status: str = "New"


class SubmissionResponse(BaseModel):
    success: bool = True
