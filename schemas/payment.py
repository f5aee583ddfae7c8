# schemas/payment.py
"""
Pydantic schemas for the payment ledger and the SSLCommerz gateway API.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from models.payment import PaymentMethod, PaymentType
from models.ssl_transaction import SSLTransactionStatus


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments (manual ledger entry)."""

     candidate_id: int = Field(..., gt=0, description="Candidate the payment belongs to")
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Amount received")
     payment_type: PaymentType = Field(..., description="Payment category")
     payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)
     transaction_id: Optional[str] = Field(None, max_length=255, description="External reference, e.g. receipt number")
     notes: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "candidate_id": 1,
                    "amount": 30000.00,
                    "payment_type": "visa",
                    "payment_method": "cash",
                    "transaction_id": "CASH-0001",
                    "notes": "Paid at head office",
               }
          }
     )

     @field_validator("transaction_id")
     @classmethod
     def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
          # Blank references would collide on the unique transaction_id column.
          if value is None:
               return None
          value = value.strip()
          return value or None


class PaymentResponse(BaseModel):
     id: int
     candidate_id: int
     amount: Decimal
     payment_type: str
     payment_method: PaymentMethod
     transaction_id: Optional[str] = None
     notes: Optional[str] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class PaymentRecordedResponse(BaseModel):
     """Response for POST /api/payments."""

     message: str = "Payment recorded successfully"
     payment: PaymentResponse
     total_paid: Decimal
     due_amount: Decimal


class ReceiptResponse(PaymentResponse):
     """Payment joined with the candidate identity needed to print a receipt."""

     candidate_name: str
     candidate_phone: Optional[str] = None
     candidate_email: Optional[str] = None
     candidate_passport_number: Optional[str] = None
     package_amount: Decimal
     total_paid: Decimal
     due_amount: Decimal


class GatewayInitRequest(BaseModel):
     """Request body for POST /api/sslcommerz/init."""

     candidate_id: int = Field(..., gt=0)
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     payment_type: PaymentType

     model_config = ConfigDict(
          json_schema_extra={
               "example": {"candidate_id": 1, "amount": 5000.00, "payment_type": "service"}
          }
     )


class GatewayInitResponse(BaseModel):
     url: str = Field(..., description="Hosted payment page to redirect the browser to")
     tran_id: str


class SSLTransactionResponse(BaseModel):
     id: int
     candidate_id: int
     amount: Decimal
     payment_type: str
     tran_id: str
     status: SSLTransactionStatus
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class BalanceDrift(BaseModel):
     candidate_id: int
     cached_total_paid: Decimal
     ledger_total_paid: Decimal
     cached_due_amount: Decimal
     expected_due_amount: Decimal


class ReconciliationReport(BaseModel):
     candidates_checked: int
     drifted: List[BalanceDrift]
     repaired: bool = False
