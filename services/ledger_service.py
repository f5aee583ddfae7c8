# services/ledger_service.py
"""
Payment Ledger Service - append-only payment records and the candidate balance cache.

Every money-in event is one Payment row. A candidate's total_paid and
due_amount are a cached snapshot of those rows:

     due_amount == package_amount - total_paid

The cache is written ONLY by the helpers in this module (recompute_due,
apply_payment_to_balance). Manual entries (record_payment) and gateway
credits (credit_gateway_payment) both go through apply_payment_to_balance,
inside the same database transaction as the Payment insert.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import Candidate, Payment, PaymentMethod, SSLTransaction
from permissions import Principal, ensure_candidate_access
from services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
GATEWAY_PAYMENT_NOTE = "SSLCommerz Online Payment"


def to_money(value) -> Decimal:
     """Normalize any numeric input to a 2-decimal Decimal (never float arithmetic)."""
     if value is None:
          value = 0
     if not isinstance(value, Decimal):
          value = Decimal(str(value))
     return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Balance cache
# ---------------------------------------------------------------------------

def recompute_due(candidate: Candidate) -> None:
     """Re-derive due_amount from package_amount and total_paid."""
     candidate.package_amount = to_money(candidate.package_amount)
     candidate.total_paid = to_money(candidate.total_paid)
     candidate.due_amount = candidate.package_amount - candidate.total_paid


def apply_payment_to_balance(db: Session, candidate: Candidate, amount: Decimal) -> None:
     """
     Add one payment to the candidate's cached balance.

     Must be called inside the transaction that inserts the Payment row;
     the caller commits (or rolls back) both together.
     """
     candidate.total_paid = to_money(candidate.total_paid) + to_money(amount)
     recompute_due(candidate)
     db.flush()


def check_overpayment(candidate: Candidate, amount: Decimal) -> None:
     """Reject amounts above the current due when ALLOW_OVERPAYMENT is off."""
     if settings.ALLOW_OVERPAYMENT:
          return
     due = to_money(candidate.due_amount)
     if to_money(amount) > due:
          raise ValidationError(f"Payment amount exceeds the due amount ({due})")


def lock_candidate(db: Session, candidate_id: int, include_deleted: bool = False) -> Optional[Candidate]:
     """
     Load a candidate with a row lock (SELECT ... FOR UPDATE) for a balance write.

     populate_existing overwrites an instance already in the session, so the
     caller always sees the total_paid committed before the lock was taken.
     """
     query = db.query(Candidate).filter(Candidate.id == candidate_id)
     if not include_deleted:
          query = query.filter(Candidate.is_deleted.is_(False))
     return query.with_for_update().populate_existing().first()


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def record_payment(db: Session, principal: Principal, data) -> Payment:
     """
     Record a manual (typically cash) payment and update the balance cache atomically.

     Args:
          db: SQLAlchemy session
          principal: authenticated caller (role already checked by the router)
          data: PaymentCreate

     Returns:
          The persisted Payment

     Raises:
          ValidationError: non-positive amount, or overpayment when disallowed
          NotFoundError: candidate missing or soft-deleted
          PermissionDenied: agent recording against another agent's candidate
          ConflictError: transaction_id already used by another payment
     """
     amount = to_money(data.amount)
     if amount <= 0:
          raise ValidationError("Amount must be greater than 0")

     candidate = lock_candidate(db, data.candidate_id)
     if candidate is None:
          raise NotFoundError("Candidate not found")
     ensure_candidate_access(principal, candidate)
     check_overpayment(candidate, amount)

     payment_type = getattr(data.payment_type, "value", data.payment_type)
     try:
          payment = Payment(
               candidate_id=candidate.id,
               amount=amount,
               payment_type=payment_type,
               payment_method=data.payment_method,
               transaction_id=data.transaction_id,
               notes=data.notes,
               recorded_by=principal.id,
          )
          db.add(payment)
          db.flush()
          apply_payment_to_balance(db, candidate, amount)
          db.commit()
     except IntegrityError:
          db.rollback()
          logger.warning("Duplicate transaction_id %s rejected for candidate %s", data.transaction_id, candidate.id)
          raise ConflictError("A payment with this transaction ID already exists")
     except Exception:
          db.rollback()
          raise

     logger.info(
          "Payment %s recorded: candidate=%s amount=%s method=%s by user %s",
          payment.id, candidate.id, amount, payment.payment_method.value, principal.id,
     )
     return payment


def credit_gateway_payment(db: Session, transaction: SSLTransaction) -> Payment:
     """
     Insert the Payment for a successful gateway transaction and update the balance.

     Does not commit: the caller owns the transaction that also flipped the
     SSLTransaction status. A second credit for the same tran_id fails on the
     unique payments.transaction_id column with IntegrityError.
     """
     candidate = lock_candidate(db, transaction.candidate_id, include_deleted=True)
     if candidate is None:
          raise NotFoundError("Candidate not found")

     payment = Payment(
          candidate_id=candidate.id,
          amount=to_money(transaction.amount),
          payment_type=transaction.payment_type,
          payment_method=PaymentMethod.SSLCOMMERZ,
          transaction_id=transaction.tran_id,
          notes=GATEWAY_PAYMENT_NOTE,
          recorded_by=transaction.initiated_by,
     )
     db.add(payment)
     db.flush()
     apply_payment_to_balance(db, candidate, transaction.amount)
     return payment


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_candidate_payments(db: Session, principal: Principal, candidate_id: int) -> List[Payment]:
     candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
     if candidate is None:
          raise NotFoundError("Candidate not found")
     ensure_candidate_access(principal, candidate)
     return (
          db.query(Payment)
          .filter(Payment.candidate_id == candidate_id)
          .order_by(Payment.created_at.desc(), Payment.id.desc())
          .all()
     )


def get_receipt(db: Session, principal: Principal, transaction_id: str) -> dict:
     """Payment looked up by its external reference, joined with candidate details."""
     payment = db.query(Payment).filter(Payment.transaction_id == transaction_id).first()
     if payment is None:
          raise NotFoundError("Transaction not found")
     candidate = payment.candidate
     ensure_candidate_access(principal, candidate)
     return {
          "id": payment.id,
          "candidate_id": payment.candidate_id,
          "amount": payment.amount,
          "payment_type": payment.payment_type,
          "payment_method": payment.payment_method,
          "transaction_id": payment.transaction_id,
          "notes": payment.notes,
          "created_at": payment.created_at,
          "candidate_name": candidate.name,
          "candidate_phone": candidate.phone,
          "candidate_email": candidate.email,
          "candidate_passport_number": candidate.passport_number,
          "package_amount": candidate.package_amount,
          "total_paid": candidate.total_paid,
          "due_amount": candidate.due_amount,
     }


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def reconcile_balances(db: Session, fix: bool = False) -> dict:
     """
     Compare each candidate's cached balance with the sum of its Payment rows.

     Args:
          fix: when True, rewrite drifted caches from the ledger and commit

     Returns:
          dict with candidates_checked, drifted (list of per-candidate details) and repaired
     """
     sums = dict(
          db.query(Payment.candidate_id, func.coalesce(func.sum(Payment.amount), 0))
          .group_by(Payment.candidate_id)
          .all()
     )

     drifted = []
     candidates = db.query(Candidate).order_by(Candidate.id).all()
     for candidate in candidates:
          ledger_total = to_money(sums.get(candidate.id, 0))
          cached_total = to_money(candidate.total_paid)
          cached_due = to_money(candidate.due_amount)
          expected_due = to_money(candidate.package_amount) - ledger_total
          if ledger_total == cached_total and expected_due == cached_due:
               continue
          drifted.append({
               "candidate_id": candidate.id,
               "cached_total_paid": cached_total,
               "ledger_total_paid": ledger_total,
               "cached_due_amount": cached_due,
               "expected_due_amount": expected_due,
          })
          if fix:
               candidate.total_paid = ledger_total
               recompute_due(candidate)

     if drifted:
          logger.warning("Balance drift found on %d candidate(s)", len(drifted))
     if fix and drifted:
          db.commit()
          logger.info("Repaired %d candidate balance(s) from the payment ledger", len(drifted))

     return {
          "candidates_checked": len(candidates),
          "drifted": drifted,
          "repaired": bool(fix and drifted),
     }
