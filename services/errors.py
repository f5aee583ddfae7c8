# services/errors.py
"""
Domain exceptions raised by the service layer.

Routers do not translate these one by one: main.py installs a single handler
that turns any ServiceError into a JSON body with the matching status code.
"""
from fastapi import status


class ServiceError(Exception):
     status_code = status.HTTP_400_BAD_REQUEST
     default_message = "Request could not be processed"

     def __init__(self, message: str = None):
          self.message = message or self.default_message
          super().__init__(self.message)


class ValidationError(ServiceError):
     status_code = status.HTTP_400_BAD_REQUEST
     default_message = "Invalid request"


class PermissionDenied(ServiceError):
     # The message stays generic; the reason is only logged.
     status_code = status.HTTP_403_FORBIDDEN
     default_message = "Forbidden: You do not have permission to perform this action."


class NotFoundError(ServiceError):
     status_code = status.HTTP_404_NOT_FOUND
     default_message = "Resource not found"


class ConflictError(ServiceError):
     status_code = status.HTTP_409_CONFLICT
     default_message = "Resource already exists"


class GatewayError(ServiceError):
     """The payment gateway was unreachable or refused the request."""
     status_code = status.HTTP_502_BAD_GATEWAY
     default_message = "Failed to initialize payment"
