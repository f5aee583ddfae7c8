# routers/payments.py
"""
Payment ledger API.

POST /api/payments: record a manual (cash) payment; inserts the Payment row and
updates the candidate's total_paid / due_amount in one transaction.
GET  /api/payments/candidate/{id}: payment history of a candidate.
GET  /api/payments/transaction/{transaction_id}: receipt lookup.
GET  /api/payments/reconcile: compare cached balances with the ledger.
"""
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import require_capability
from permissions import Capability, Principal
from schemas.payment import (
     PaymentCreate,
     PaymentResponse,
     PaymentRecordedResponse,
     ReceiptResponse,
     ReconciliationReport,
)
from services import ledger_service

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post(
     "",
     response_model=PaymentRecordedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a manual payment",
)
def create_payment(
     body: PaymentCreate,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.RECORD_PAYMENT)),
):
     """
     Record a payment against a candidate.

     Agents may only record against their own candidates. A transaction_id that
     is already on another payment is rejected with 409.
     """
     payment = ledger_service.record_payment(db, principal, body)
     candidate = payment.candidate
     return PaymentRecordedResponse(
          payment=PaymentResponse.model_validate(payment),
          total_paid=candidate.total_paid,
          due_amount=candidate.due_amount,
     )


@router.get(
     "/candidate/{candidate_id}",
     response_model=List[PaymentResponse],
     summary="List payments of a candidate",
)
def get_candidate_payments(
     candidate_id: int,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_PAYMENTS)),
):
     return ledger_service.list_candidate_payments(db, principal, candidate_id)


@router.get(
     "/transaction/{transaction_id}",
     response_model=ReceiptResponse,
     summary="Get a payment receipt by transaction ID",
)
def get_receipt(
     transaction_id: str,
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.VIEW_PAYMENTS)),
):
     return ledger_service.get_receipt(db, principal, transaction_id)


@router.get(
     "/reconcile",
     response_model=ReconciliationReport,
     summary="Check candidate balances against the payment ledger",
)
def reconcile(
     fix: bool = Query(False, description="Rewrite drifted balances from the ledger"),
     db: Session = Depends(get_session),
     principal: Principal = Depends(require_capability(Capability.RECONCILE_LEDGER)),
):
     return ledger_service.reconcile_balances(db, fix=fix)
