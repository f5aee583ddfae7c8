from .errors import (
     ServiceError,
     ValidationError,
     PermissionDenied,
     NotFoundError,
     ConflictError,
     GatewayError,
)

__all__ = [
     "ServiceError",
     "ValidationError",
     "PermissionDenied",
     "NotFoundError",
     "ConflictError",
     "GatewayError",
]
