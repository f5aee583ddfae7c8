# schemas/__init__.py
from .payment import (
     PaymentCreate,
     PaymentResponse,
     PaymentRecordedResponse,
     ReceiptResponse,
     GatewayInitRequest,
     GatewayInitResponse,
     SSLTransactionResponse,
     ReconciliationReport,
)
from .candidate import (
     CandidateCreate,
     CandidateUpdate,
     CandidateResponse,
     CandidateListResponse,
)

__all__ = [
     "PaymentCreate",
     "PaymentResponse",
     "PaymentRecordedResponse",
     "ReceiptResponse",
     "GatewayInitRequest",
     "GatewayInitResponse",
     "SSLTransactionResponse",
     "ReconciliationReport",
     "CandidateCreate",
     "CandidateUpdate",
     "CandidateResponse",
     "CandidateListResponse",
]
