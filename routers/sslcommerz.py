# routers/sslcommerz.py
"""
SSLCommerz hosted checkout.

POST /api/sslcommerz/init              (authenticated) -> {"url": GatewayPageURL, "tran_id": ...}
POST /api/sslcommerz/success|fail|cancel (gateway, form-encoded) -> 303 redirect to the SPA
POST /api/sslcommerz/ipn               (gateway, server-to-server) -> 200 "OK"
GET  /api/sslcommerz/transactions/{tran_id} (authenticated) -> transaction status

Browser callbacks always end in a redirect, never in an error page.
"""
import logging
from typing import Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_app_url, require_capability
from models import SSLTransactionStatus
from permissions import Capability, Principal
from schemas.payment import GatewayInitRequest, GatewayInitResponse, SSLTransactionResponse
from services import gateway_service
from services.sslcommerz import SSLCommerzClient, get_gateway_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sslcommerz", tags=["sslcommerz"])


def _redirect(app_url: str, path: str, **params) -> RedirectResponse:
     query = urlencode({k: v for k, v in params.items() if v is not None})
     url = f"{app_url}{path}"
     if query:
          url = f"{url}?{query}"
     return RedirectResponse(url=url, status_code=303)


def _lookup_candidate_id(db: Session, tran_id: Optional[str]) -> Optional[int]:
     try:
          return gateway_service.candidate_id_for(db, tran_id)
     except SQLAlchemyError:
          logger.exception("Could not look up candidate for %s", tran_id)
          db.rollback()
          return None


def _finish_callback(
     request: Request,
     db: Session,
     client: SSLCommerzClient,
     tran_id: Optional[str],
     val_id: Optional[str],
     outcome: SSLTransactionStatus,
) -> RedirectResponse:
     app_url = get_app_url(request)
     try:
          result = gateway_service.process_callback(db, tran_id, outcome, val_id=val_id, client=client)
     except Exception:
          logger.exception("Gateway %s callback failed for %s", outcome.value, tran_id)
          return _redirect(
               app_url, "/payment/fail", msg="Server Error",
               tran_id=tran_id, candidate_id=_lookup_candidate_id(db, tran_id),
          )

     if not result.found:
          return _redirect(app_url, "/payment/fail", msg="Transaction Not Found", tran_id=tran_id)

     # Redirect on the stored status so a late or duplicate callback lands on the right page.
     if result.status == SSLTransactionStatus.SUCCESS:
          return _redirect(app_url, f"/payment/success/{quote(result.tran_id)}", candidate_id=result.candidate_id)
     if result.status == SSLTransactionStatus.CANCELLED:
          return _redirect(app_url, "/payment/cancel", candidate_id=result.candidate_id)
     if result.status == SSLTransactionStatus.FAILED:
          return _redirect(app_url, "/payment/fail", msg="Payment Failed", candidate_id=result.candidate_id)
     return _redirect(
          app_url, "/payment/fail", msg="Payment Verification Pending",
          tran_id=result.tran_id, candidate_id=result.candidate_id,
     )


@router.post(
     "/init",
     response_model=GatewayInitResponse,
     summary="Start an SSLCommerz payment",
)
def init_payment(
     body: GatewayInitRequest,
     request: Request,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.INITIATE_GATEWAY_PAYMENT)),
     client: SSLCommerzClient = Depends(get_gateway_client),
):
     """
     Creates a pending transaction, then opens a gateway session.
     Redirect the browser to the returned url.
     """
     return gateway_service.initiate_payment(db, principal, body, get_app_url(request), client=client)


@router.post("/success", summary="Gateway success callback")
def payment_success(
     request: Request,
     tran_id: Optional[str] = Form(None),
     val_id: Optional[str] = Form(None),
     db: Session = Depends(get_session),
     client: SSLCommerzClient = Depends(get_gateway_client),
):
     return _finish_callback(request, db, client, tran_id, val_id, SSLTransactionStatus.SUCCESS)


@router.post("/fail", summary="Gateway failure callback")
def payment_fail(
     request: Request,
     tran_id: Optional[str] = Form(None),
     db: Session = Depends(get_session),
     client: SSLCommerzClient = Depends(get_gateway_client),
):
     return _finish_callback(request, db, client, tran_id, None, SSLTransactionStatus.FAILED)


@router.post("/cancel", summary="Gateway cancel callback")
def payment_cancel(
     request: Request,
     tran_id: Optional[str] = Form(None),
     db: Session = Depends(get_session),
     client: SSLCommerzClient = Depends(get_gateway_client),
):
     return _finish_callback(request, db, client, tran_id, None, SSLTransactionStatus.CANCELLED)


@router.post("/ipn", response_class=PlainTextResponse, summary="Gateway instant payment notification")
def payment_ipn(
     tran_id: Optional[str] = Form(None),
     ipn_status: Optional[str] = Form(None, alias="status"),
     val_id: Optional[str] = Form(None),
     db: Session = Depends(get_session),
     client: SSLCommerzClient = Depends(get_gateway_client),
):
     gateway_service.process_ipn(
          db,
          {"tran_id": tran_id, "status": ipn_status, "val_id": val_id},
          client=client,
     )
     return PlainTextResponse("OK")


@router.get(
     "/transactions/{tran_id}",
     response_model=SSLTransactionResponse,
     summary="Get gateway transaction status",
)
def get_transaction(
     tran_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_PAYMENTS)),
):
     return gateway_service.get_transaction(db, principal, tran_id)
