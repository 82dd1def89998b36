"""Invoice routes."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from carebook.api.auth import get_current_user, get_gateway
from carebook.api.responses import error_response, internal_error_response, json_response
from carebook.api.schemas import InvoiceCreate, InvoiceGenerate
from carebook.exceptions import MissingFieldError, ServiceError, UpstreamStoreError, format_error_for_api
from carebook.record_store import RecordStoreGateway, Row
from carebook.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def get_invoice_service(gateway: RecordStoreGateway = Depends(get_gateway)) -> InvoiceService:
    return InvoiceService(gateway)


@router.post("")
def create_invoice(
    payload: InvoiceCreate,
    user: Row = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """
    Save invoice metadata.

    Returns:
        201 with the stored record
    """
    try:
        record = service.save_invoice(
            owner_id=user["id"],
            invoice_number=payload.invoiceNumber,
            carer_id=payload.carerId,
            client_id=payload.clientId,
            date_from=payload.dateFrom,
            date_to=payload.dateTo,
            invoice_date=payload.invoiceDate,
            file_name=payload.fileName,
            file_path=payload.filePath
        )
        return json_response({"success": True, "data": record}, status_code=201)

    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to save invoice: {e}")
        return internal_error_response()


@router.post("/generate")
def generate_invoice(
    payload: InvoiceGenerate,
    user: Row = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """
    Aggregate shifts, build the invoice document and save its record.

    Returns:
        The stored record, the live total and the encoded document
    """
    try:
        generated = service.generate_invoice(
            owner_id=user["id"],
            invoice_number=payload.invoiceNumber,
            carer_ids=payload.resolved_carer_ids(),
            client_id=payload.clientId,
            invoice_date=payload.invoiceDate,
            date_from=payload.dateFrom,
            date_to=payload.dateTo,
            utc_offset_minutes=payload.utcOffsetMinutes
        )
        return json_response({
            "success": True,
            "data": {**generated.record, "total_amount": generated.total_cost},
            "file": generated.artifact.to_dict(),
        })

    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to generate invoice: {e}")
        return internal_error_response()


@router.get("")
def list_invoices(
    user: Row = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """List the user's invoices with totals recomputed from current shifts."""
    try:
        return json_response({"success": True, "data": service.list_invoices(user["id"])})
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to list invoices: {e}")
        return internal_error_response()


@router.delete("")
def delete_invoice(
    invoice_id: Optional[str] = Query(None, alias="id"),
    user: Row = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Delete one of the user's invoices."""
    try:
        deleted = service.delete_invoice(invoice_id, user["id"])
        return json_response({"success": True, "data": {"id": deleted["id"]}})
    except UpstreamStoreError as e:
        # Deletes report every store failure as a rejected request
        return JSONResponse(status_code=400, content=format_error_for_api(e))
    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to delete invoice {invoice_id}: {e}")
        return internal_error_response()


@router.get("/download")
def download_invoice(
    number: Optional[str] = Query(None),
    invoice_date: Optional[date] = Query(None, alias="date"),
    user: Row = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """
    Regenerate an invoice document from its stored parameters.

    Returns:
        The document as ``{name, data, mimeType}`` with base64 data
    """
    try:
        if not number:
            raise MissingFieldError("invoice_number")
        if invoice_date is None:
            raise MissingFieldError("invoice_date")

        artifact = service.download_invoice(number, invoice_date, owner_id=user["id"])
        return json_response({"success": True, "file": artifact.to_dict()})

    except ServiceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Failed to download invoice {number}: {e}")
        return internal_error_response()
