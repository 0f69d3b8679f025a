"""
Invoice dashboard endpoints.

Form actions (browser form posts, multipart or urlencoded):
1. POST /dashboard/invoices/create            - Validate, insert, revalidate, redirect
2. POST /dashboard/invoices/{invoice_id}/edit - Validate, update, revalidate, redirect
3. POST /dashboard/invoices/{invoice_id}/delete - Delete, revalidate

Reads backing the pages those actions return to:
4. GET /dashboard/invoices                    - Paginated list (served from the route cache)
5. GET /dashboard/invoices/create             - Customers for the create form
6. GET /dashboard/invoices/{invoice_id}/edit  - Invoice + customers for the edit form

Failed actions answer with an InvoiceFormState body instead of raising, so
the form can render field errors and the message next to the inputs.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from invoice_dashboard.auth.dependencies import AuthenticatedUser, get_authenticated_user
from invoice_dashboard.config import settings
from invoice_dashboard.db.client import get_supabase_client
from invoice_dashboard.schemas.invoices import (
    CustomerField,
    CustomerListResponse,
    InvoiceDeleteResponse,
    InvoiceEditResponse,
    InvoiceForm,
    InvoiceFormErrors,
    InvoiceFormState,
    InvoiceFormValues,
    InvoiceListResponse,
    InvoiceTableRow,
    flatten_field_errors,
)
from invoice_dashboard.services import (
    create_invoice,
    delete_invoice,
    dollars_to_cents,
    fetch_customers,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    today_iso,
    update_invoice,
)
from invoice_dashboard.utils.route_cache import revalidate_path, route_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/invoices", tags=["invoices"])

CREATE_VALIDATION_MESSAGE = "Missing Fields: Failed to Create Invoice"
CREATE_DATABASE_MESSAGE = "Database Error: Failed to Create Invoice"
UPDATE_VALIDATION_MESSAGE = "Missing Fields: Failed to Update Invoice"
UPDATE_DATABASE_MESSAGE = "Database Error: Failed to Update Invoice"
DELETE_SUCCESS_MESSAGE = "Deleted Invoice"
DELETE_DATABASE_MESSAGE = "Database Error: Failed to Delete Invoice"


def _form_state_response(status_code: int, message: str, errors: Optional[dict] = None) -> JSONResponse:
    state = InvoiceFormState(
        errors=InvoiceFormErrors(**errors) if errors is not None else None,
        message=message,
    )
    return JSONResponse(status_code=status_code, content=state.model_dump(exclude_none=True))


def _validate_invoice_form(
    customer_id: Optional[str],
    amount: Optional[str],
    invoice_status: Optional[str],
) -> InvoiceForm:
    return InvoiceForm.model_validate(
        {"customerId": customer_id, "amount": amount, "status": invoice_status}
    )


def _redirect_to_invoices() -> RedirectResponse:
    return RedirectResponse(url=settings.INVOICES_PATH, status_code=status.HTTP_303_SEE_OTHER)


# --- Form actions ---

@router.post(
    "/create",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Submit the create invoice form",
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": InvoiceFormState},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": InvoiceFormState},
    },
)
async def create_invoice_action(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    customer_id: Annotated[Optional[str], Form(alias="customerId")] = None,
    amount: Annotated[Optional[str], Form()] = None,
    invoice_status: Annotated[Optional[str], Form(alias="status")] = None,
):
    """
    Create an invoice from the form.

    Validate -> convert dollars to cents, stamp today's date -> insert ->
    revalidate the invoices list -> 303 to the invoices list.
    """
    try:
        form = _validate_invoice_form(customer_id, amount, invoice_status)
    except ValidationError as e:
        logger.info(f"Create invoice form rejected for user {auth_user.user_id}")
        return _form_state_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            CREATE_VALIDATION_MESSAGE,
            flatten_field_errors(e),
        )

    amount_in_cents = dollars_to_cents(form.amount)
    date = today_iso()

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await create_invoice(
            supabase_client=supabase_client,
            customer_id=form.customer_id,
            amount_in_cents=amount_in_cents,
            status=form.status,
            date=date,
        )
    except Exception as e:
        logger.error(f"Failed to create invoice: {e}", exc_info=True)
        return _form_state_response(status.HTTP_500_INTERNAL_SERVER_ERROR, CREATE_DATABASE_MESSAGE)

    revalidate_path(settings.INVOICES_PATH)
    return _redirect_to_invoices()


@router.post(
    "/{invoice_id}/edit",
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Submit the edit invoice form",
    responses={
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": InvoiceFormState},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": InvoiceFormState},
    },
)
async def update_invoice_action(
    invoice_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    customer_id: Annotated[Optional[str], Form(alias="customerId")] = None,
    amount: Annotated[Optional[str], Form()] = None,
    invoice_status: Annotated[Optional[str], Form(alias="status")] = None,
):
    """
    Update an invoice from the edit form.

    The invoice id comes from the path only. The stored date is not changed.
    """
    try:
        form = _validate_invoice_form(customer_id, amount, invoice_status)
    except ValidationError as e:
        logger.info(f"Edit form for invoice {invoice_id} rejected")
        return _form_state_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            UPDATE_VALIDATION_MESSAGE,
            flatten_field_errors(e),
        )

    amount_in_cents = dollars_to_cents(form.amount)

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await update_invoice(
            supabase_client=supabase_client,
            invoice_id=invoice_id,
            customer_id=form.customer_id,
            amount_in_cents=amount_in_cents,
            status=form.status,
        )
    except Exception as e:
        logger.error(f"Failed to update invoice {invoice_id}: {e}", exc_info=True)
        return _form_state_response(status.HTTP_500_INTERNAL_SERVER_ERROR, UPDATE_DATABASE_MESSAGE)

    revalidate_path(settings.INVOICES_PATH)
    return _redirect_to_invoices()


@router.post(
    "/{invoice_id}/delete",
    response_model=InvoiceDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete an invoice",
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": InvoiceDeleteResponse},
    },
)
async def delete_invoice_action(
    invoice_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
):
    """
    Delete an invoice and revalidate the list. No redirect: the list page
    that issued the delete stays where it is and re-reads.
    """
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await delete_invoice(supabase_client=supabase_client, invoice_id=invoice_id)
    except Exception as e:
        logger.error(f"Failed to delete invoice {invoice_id}: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=InvoiceDeleteResponse(message=DELETE_DATABASE_MESSAGE).model_dump(),
        )

    revalidate_path(settings.INVOICES_PATH)
    logger.info(f"Invoice {invoice_id} deleted by user {auth_user.user_id}")

    return InvoiceDeleteResponse(message=DELETE_SUCCESS_MESSAGE)


# --- Reads ---

@router.get(
    "",
    response_model=InvoiceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List invoices",
)
async def list_invoices(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    query: Annotated[str, Query(max_length=200)] = "",
    page: Annotated[int, Query(ge=1)] = 1,
) -> InvoiceListResponse:
    """
    One page of invoices filtered by customer name.

    Served from the route cache until a form action revalidates it.
    """
    cache_key = (auth_user.user_id, query, page)
    cached = route_cache.get(settings.INVOICES_PATH, cache_key)
    if cached is not None:
        logger.debug(f"Invoice list served from cache for user {auth_user.user_id}")
        return cached

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        rows, total_pages = await fetch_filtered_invoices(
            supabase_client=supabase_client,
            query=query,
            current_page=page,
        )
    except Exception as e:
        logger.error(f"Failed to fetch invoices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to fetch invoices"
            }
        )

    response = InvoiceListResponse(
        invoices=[InvoiceTableRow(**row) for row in rows],
        query=query,
        current_page=page,
        total_pages=total_pages,
    )
    route_cache.set(settings.INVOICES_PATH, cache_key, response)

    return response


@router.get(
    "/create",
    response_model=CustomerListResponse,
    status_code=status.HTTP_200_OK,
    summary="Data for the create invoice form",
)
async def get_create_form(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> CustomerListResponse:
    """Customers for the create form's select."""
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        customers = await fetch_customers(supabase_client)
    except Exception as e:
        logger.error(f"Failed to fetch customers: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to fetch customers"
            }
        )

    return CustomerListResponse(customers=[CustomerField(**c) for c in customers])


@router.get(
    "/{invoice_id}/edit",
    response_model=InvoiceEditResponse,
    status_code=status.HTTP_200_OK,
    summary="Data for the edit invoice form",
)
async def get_edit_form(
    invoice_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> InvoiceEditResponse:
    """
    The invoice (amount in dollars) plus customers for the edit form.

    Raises:
        HTTPException 404: If the invoice does not exist
    """
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        invoice = await fetch_invoice_by_id(supabase_client, invoice_id)
        customers = await fetch_customers(supabase_client) if invoice else []
    except Exception as e:
        logger.error(f"Failed to fetch invoice {invoice_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "fetch_error",
                "details": "Failed to fetch invoice"
            }
        )

    if invoice is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": "not_found",
                "details": f"Invoice {invoice_id} not found"
            }
        )

    return InvoiceEditResponse(
        invoice=InvoiceFormValues(**invoice),
        customers=[CustomerField(**c) for c in customers],
    )
