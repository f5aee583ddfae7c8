# services/gateway_service.py
"""
SSLCommerz payment flow: initiation and the transaction state machine.

     pending ──success──▶ success   (credits the ledger exactly once)
     pending ──fail─────▶ failed
     pending ──cancel───▶ cancelled
     failed / cancelled ──success──▶ success   (late success from the gateway)

Nothing leaves success. Every transition is a conditional UPDATE
(... WHERE tran_id = ? AND status IN (allowed sources)); only the caller
whose UPDATE changed a row performs the side effect, so duplicate or
concurrent callbacks and IPNs for one tran_id credit at most once. The
unique payments.transaction_id column is the second line of defence.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import Candidate, SSLTransaction, SSLTransactionStatus
from permissions import Principal, ensure_candidate_access
from services import ledger_service
from services.errors import GatewayError, NotFoundError, ValidationError
from services.sslcommerz import SSLCommerzClient, VALID_STATUSES

logger = logging.getLogger(__name__)

TRAN_ID_PREFIX = "SSLC_"

# target status -> statuses it may be reached from
TRANSITIONS: Dict[SSLTransactionStatus, FrozenSet[SSLTransactionStatus]] = {
     SSLTransactionStatus.SUCCESS: frozenset({
          SSLTransactionStatus.PENDING,
          SSLTransactionStatus.FAILED,
          SSLTransactionStatus.CANCELLED,
     }),
     SSLTransactionStatus.FAILED: frozenset({SSLTransactionStatus.PENDING}),
     SSLTransactionStatus.CANCELLED: frozenset({SSLTransactionStatus.PENDING}),
}

# IPN "status" field -> our outcome. Anything else is acknowledged and ignored.
IPN_STATUS_MAP = {
     "VALID": SSLTransactionStatus.SUCCESS,
     "VALIDATED": SSLTransactionStatus.SUCCESS,
     "FAILED": SSLTransactionStatus.FAILED,
     "CANCELLED": SSLTransactionStatus.CANCELLED,
}


@dataclass
class CallbackResult:
     """Outcome of one callback/IPN delivery."""
     tran_id: str
     candidate_id: Optional[int] = None
     status: Optional[SSLTransactionStatus] = None
     applied: bool = False
     credited: bool = False

     @property
     def found(self) -> bool:
          return self.candidate_id is not None


def generate_tran_id() -> str:
     return f"{TRAN_ID_PREFIX}{uuid.uuid4().hex.upper()}"


# ---------------------------------------------------------------------------
# Initiation
# ---------------------------------------------------------------------------

def initiate_payment(
     db: Session,
     principal: Principal,
     data,
     app_url: str,
     client: Optional[SSLCommerzClient] = None,
) -> dict:
     """
     Create a pending SSLTransaction and open a gateway checkout session.

     The pending row is committed before the gateway is contacted, so a
     callback can never arrive for a tran_id we do not know. If the gateway
     call fails the row simply stays pending.

     Returns:
          {"url": hosted payment page, "tran_id": generated id}
     """
     client = client or SSLCommerzClient()

     amount = ledger_service.to_money(data.amount)
     if amount <= 0:
          raise ValidationError("Amount must be greater than 0")

     candidate = (
          db.query(Candidate)
          .filter(Candidate.id == data.candidate_id, Candidate.is_deleted.is_(False))
          .first()
     )
     if candidate is None:
          raise NotFoundError("Candidate not found")
     ensure_candidate_access(principal, candidate)
     ledger_service.check_overpayment(candidate, amount)

     payment_type = getattr(data.payment_type, "value", data.payment_type)
     transaction = SSLTransaction(
          candidate_id=candidate.id,
          amount=amount,
          payment_type=payment_type,
          tran_id=generate_tran_id(),
          status=SSLTransactionStatus.PENDING,
          initiated_by=principal.id,
     )
     db.add(transaction)
     db.commit()
     logger.info(
          "Gateway transaction %s created: candidate=%s amount=%s by user %s",
          transaction.tran_id, candidate.id, amount, principal.id,
     )

     payload = client.build_init_payload(transaction.tran_id, amount, payment_type, candidate, app_url)
     try:
          url = client.init_session(payload)
     except GatewayError:
          logger.error("Gateway session not opened for %s; left pending", transaction.tran_id)
          raise

     return {"url": url, "tran_id": transaction.tran_id}


# ---------------------------------------------------------------------------
# Callbacks / IPN
# ---------------------------------------------------------------------------

def _confirm_with_gateway(client: SSLCommerzClient, transaction: SSLTransaction, val_id: Optional[str]) -> Optional[bool]:
     """
     Server-side check of a success report.

     Returns True (confirmed), False (rejected) or None (gateway unreachable).
     """
     if not val_id:
          logger.warning("Success for %s arrived without val_id", transaction.tran_id)
          return False
     try:
          data = client.validate(val_id)
     except GatewayError:
          return None

     if data.get("status") not in VALID_STATUSES:
          logger.warning("val_id %s for %s not valid: %s", val_id, transaction.tran_id, data.get("status"))
          return False
     if data.get("tran_id") != transaction.tran_id:
          logger.warning("val_id %s belongs to %s, not %s", val_id, data.get("tran_id"), transaction.tran_id)
          return False
     try:
          paid = ledger_service.to_money(data.get("amount"))
     except ArithmeticError:
          return False
     if paid != ledger_service.to_money(transaction.amount):
          logger.warning("Amount mismatch for %s: gateway %s, expected %s", transaction.tran_id, paid, transaction.amount)
          return False
     return True


def process_callback(
     db: Session,
     tran_id: Optional[str],
     outcome: SSLTransactionStatus,
     val_id: Optional[str] = None,
     client: Optional[SSLCommerzClient] = None,
) -> CallbackResult:
     """
     Apply a success/fail/cancel report for tran_id.

     Safe to call any number of times, concurrently, for the same tran_id:
     the status flip and (for success) the Payment insert plus balance
     update commit together, and only when the conditional UPDATE matched.

     Unknown tran_ids are logged and reported back with found == False;
     nothing is written.
     """
     result = CallbackResult(tran_id=tran_id or "")
     if not tran_id:
          logger.warning("Gateway %s callback without tran_id", outcome.value)
          return result

     transaction = db.query(SSLTransaction).filter(SSLTransaction.tran_id == tran_id).first()
     if transaction is None:
          logger.warning("Gateway %s callback for unknown tran_id %s", outcome.value, tran_id)
          return result
     result.candidate_id = transaction.candidate_id
     result.status = transaction.status

     if outcome == SSLTransactionStatus.SUCCESS and settings.SSL_VALIDATE_PAYMENTS:
          if transaction.status == SSLTransactionStatus.SUCCESS:
               return result
          confirmed = _confirm_with_gateway(client or SSLCommerzClient(), transaction, val_id)
          if confirmed is None:
               logger.warning("Could not validate %s; leaving status %s", tran_id, transaction.status.value)
               return result
          if not confirmed:
               outcome = SSLTransactionStatus.FAILED

     allowed = TRANSITIONS[outcome]
     try:
          values = {"status": outcome}
          if val_id:
               values["val_id"] = val_id
          updated = db.execute(
               update(SSLTransaction)
               .where(SSLTransaction.tran_id == tran_id, SSLTransaction.status.in_(sorted(allowed)))
               .values(**values)
               .execution_options(synchronize_session=False)
          )
          if updated.rowcount == 0:
               db.rollback()
               db.refresh(transaction)
               result.status = transaction.status
               logger.info(
                    "Ignoring %s for %s: already %s", outcome.value, tran_id, transaction.status.value
               )
               return result

          if outcome == SSLTransactionStatus.SUCCESS:
               payment = ledger_service.credit_gateway_payment(db, transaction)
               result.credited = True
          db.commit()
     except IntegrityError:
          # Another delivery inserted the Payment for this tran_id first.
          db.rollback()
          db.refresh(transaction)
          result.status = transaction.status
          result.credited = False
          logger.warning("Duplicate credit for %s blocked by the ledger", tran_id)
          return result
     except Exception:
          db.rollback()
          raise

     db.refresh(transaction)
     result.status = transaction.status
     result.applied = True
     if result.credited:
          logger.info(
               "Gateway payment %s credited: payment=%s candidate=%s amount=%s",
               tran_id, payment.id, transaction.candidate_id, transaction.amount,
          )
     else:
          logger.info("Gateway transaction %s marked %s", tran_id, outcome.value)
     return result


def process_ipn(db: Session, form: dict, client: Optional[SSLCommerzClient] = None) -> Optional[CallbackResult]:
     """
     Server-to-server notification. Mapped onto the same transitions as the
     browser callbacks; unknown statuses are only logged.
     """
     tran_id = form.get("tran_id")
     gateway_status = (form.get("status") or "").upper()
     logger.info("IPN received: tran_id=%s status=%s", tran_id, gateway_status)

     outcome = IPN_STATUS_MAP.get(gateway_status)
     if outcome is None:
          logger.info("IPN status %s for %s acknowledged without action", gateway_status or "<empty>", tran_id)
          return None
     return process_callback(db, tran_id, outcome, val_id=form.get("val_id"), client=client)


def get_transaction(db: Session, principal: Principal, tran_id: str) -> SSLTransaction:
     transaction = db.query(SSLTransaction).filter(SSLTransaction.tran_id == tran_id).first()
     if transaction is None:
          raise NotFoundError("Transaction not found")
     ensure_candidate_access(principal, transaction.candidate)
     return transaction


def candidate_id_for(db: Session, tran_id: Optional[str]) -> Optional[int]:
     """Candidate behind tran_id, or None. Used to build redirects after a failed callback."""
     if not tran_id:
          return None
     return (
          db.query(SSLTransaction.candidate_id)
          .filter(SSLTransaction.tran_id == tran_id)
          .scalar()
     )
