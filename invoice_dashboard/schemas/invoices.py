"""
Pydantic schemas for invoice form actions and invoice read endpoints.

The create and edit forms post the same three fields (customerId, amount,
status). The invoice id comes from the URL and the date is set on the
server, so neither is part of InvoiceForm.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

InvoiceStatus = Literal["pending", "paid"]
INVOICE_STATUSES = ("pending", "paid")

# Plain decimal or exponent notation; no underscores, hex or words
AMOUNT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

# Form field name for each model field, used when flattening errors
FORM_FIELD_NAMES = {
    "customer_id": "customerId",
    "amount": "amount",
    "status": "status",
}


# --- Form models ---

class InvoiceForm(BaseModel):
    """
    Validated create/edit invoice form.

    ``amount`` is entered in dollars and coerced from the raw form string,
    so a missing or blank amount becomes 0 and fails the "> $0" rule. It
    stays a Decimal, and must round to at least one cent.
    """
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId", description="UUID of the invoiced customer")
    amount: Decimal = Field(..., description="Invoice amount in dollars")
    status: InvoiceStatus = Field(..., description="'pending' or 'paid'")

    @field_validator("customer_id", mode="before")
    @classmethod
    def require_customer(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("customer_required", "Please select a customer")
        return value.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value):
        if value is None:
            return Decimal(0)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return Decimal(0)
            if not AMOUNT_PATTERN.match(value):
                raise PydanticCustomError("amount_type", "Amount must be a number")
        elif isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise PydanticCustomError("amount_type", "Amount must be a number")
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise PydanticCustomError("amount_type", "Amount must be a number")
        if not amount.is_finite():
            raise PydanticCustomError("amount_type", "Amount must be a number")
        return amount

    @field_validator("amount")
    @classmethod
    def require_positive_amount(cls, value: Decimal) -> Decimal:
        # Stored in whole cents, so anything that rounds below one cent is $0
        try:
            cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise PydanticCustomError("amount_type", "Amount must be a number")
        if cents < 1:
            raise PydanticCustomError("amount_too_small", "Amount must be greater than $0")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def require_status(cls, value):
        if value not in INVOICE_STATUSES:
            raise PydanticCustomError("status_required", "Please select an invoice status")
        return value


class InvoiceFormErrors(BaseModel):
    """Per-field error messages, keyed by form field name."""
    customerId: Optional[List[str]] = None
    amount: Optional[List[str]] = None
    status: Optional[List[str]] = None


class InvoiceFormState(BaseModel):
    """
    State handed back to the invoice form when an action does not redirect.

    ``errors`` is set only for validation failures; database failures carry
    just a ``message``.
    """
    errors: Optional[InvoiceFormErrors] = None
    message: Optional[str] = None


def flatten_field_errors(error: ValidationError) -> Dict[str, List[str]]:
    """
    Group validation messages by form field name.

    Errors not tied to a known field are dropped; the form has nowhere to
    show them.
    """
    field_errors: Dict[str, List[str]] = {}
    for item in error.errors():
        location = item.get("loc") or ()
        if not location:
            continue
        field = FORM_FIELD_NAMES.get(str(location[0]), str(location[0]))
        if field not in FORM_FIELD_NAMES.values():
            continue
        field_errors.setdefault(field, []).append(item["msg"])
    return field_errors


# --- Customer models ---

class CustomerField(BaseModel):
    """Customer option for the invoice form's customer select."""
    id: str = Field(..., description="Customer UUID")
    name: str = Field(..., description="Customer display name")


class CustomerListResponse(BaseModel):
    """Response for GET /dashboard/invoices/create."""
    customers: List[CustomerField] = Field(..., description="Customers ordered by name")


# --- Invoice read models ---

class InvoiceTableRow(BaseModel):
    """
    One row of the invoices table.

    ``amount`` is in cents, as stored.
    """
    id: str = Field(..., description="Invoice UUID")
    customer_id: str = Field(..., description="Customer UUID")
    name: Optional[str] = Field(None, description="Customer name")
    email: Optional[str] = Field(None, description="Customer email")
    image_url: Optional[str] = Field(None, description="Customer avatar URL")
    date: str = Field(..., description="Invoice date (YYYY-MM-DD)")
    amount: int = Field(..., description="Amount in cents")
    status: InvoiceStatus = Field(..., description="'pending' or 'paid'")


class InvoiceListResponse(BaseModel):
    """Response for GET /dashboard/invoices."""
    invoices: List[InvoiceTableRow] = Field(..., description="Invoices on the requested page")
    query: str = Field("", description="Customer name filter that was applied")
    current_page: int = Field(..., description="1-based page number")
    total_pages: int = Field(..., description="Number of pages for this filter")


class InvoiceFormValues(BaseModel):
    """Values used to prefill the edit form."""
    id: str
    customer_id: str
    amount: float = Field(..., description="Amount in dollars")
    status: InvoiceStatus


class InvoiceEditResponse(BaseModel):
    """
    Response for GET /dashboard/invoices/{invoice_id}/edit.

    ``invoice.amount`` is converted back to dollars to prefill the form.
    """
    invoice: InvoiceFormValues
    customers: List[CustomerField]


class InvoiceDeleteResponse(BaseModel):
    """Response for POST /dashboard/invoices/{invoice_id}/delete."""
    message: str = Field(..., examples=["Deleted Invoice"])
