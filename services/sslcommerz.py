# services/sslcommerz.py
"""
SSLCommerz hosted-checkout client.

Thin wrapper around the two gateway endpoints we use:
- session API (gwprocess/v4/api.php): returns GatewayPageURL for the browser
- validation API (validationserverAPI.php): confirms a val_id server-side

Calls are form-encoded POST/GET via requests with an explicit timeout.
"""
import logging
from decimal import Decimal
from typing import Optional

import requests

from config import settings
from services.errors import GatewayError

logger = logging.getLogger(__name__)

CURRENCY = "BDT"

# Placeholders sent when the candidate record lacks the field; the gateway
# rejects sessions without customer details.
DEFAULT_CUSTOMER = {
     "cus_name": "Customer",
     "cus_email": "customer@example.com",
     "cus_phone": "01700000000",
     "cus_add1": "Dhaka",
     "cus_city": "Dhaka",
     "cus_country": "Bangladesh",
}

VALID_STATUSES = {"VALID", "VALIDATED"}


class SSLCommerzClient:
     def __init__(
          self,
          store_id: Optional[str] = None,
          store_password: Optional[str] = None,
          api_url: Optional[str] = None,
          validation_url: Optional[str] = None,
          timeout: Optional[float] = None,
     ):
          self.store_id = store_id or settings.SSL_STORE_ID
          self.store_password = store_password or settings.SSL_STORE_PASSWORD
          self.api_url = api_url or settings.ssl_api_url
          self.validation_url = validation_url or settings.ssl_validation_url
          self.timeout = timeout or settings.SSL_TIMEOUT_SECONDS

     def build_init_payload(
          self,
          tran_id: str,
          amount: Decimal,
          payment_type: Optional[str],
          candidate,
          app_url: str,
     ) -> dict:
          """Form fields for a new checkout session; callbacks point back at /api/sslcommerz/*."""
          base = app_url.rstrip("/")
          return {
               "store_id": self.store_id,
               "store_passwd": self.store_password,
               "total_amount": f"{Decimal(amount):.2f}",
               "currency": CURRENCY,
               "tran_id": tran_id,
               "success_url": f"{base}/api/sslcommerz/success",
               "fail_url": f"{base}/api/sslcommerz/fail",
               "cancel_url": f"{base}/api/sslcommerz/cancel",
               "ipn_url": f"{base}/api/sslcommerz/ipn",
               "shipping_method": "NO",
               "product_name": payment_type or "Service Payment",
               "product_category": "Service",
               "product_profile": "general",
               "cus_name": candidate.name or DEFAULT_CUSTOMER["cus_name"],
               "cus_email": candidate.email or DEFAULT_CUSTOMER["cus_email"],
               "cus_phone": candidate.phone or DEFAULT_CUSTOMER["cus_phone"],
               "cus_add1": DEFAULT_CUSTOMER["cus_add1"],
               "cus_city": DEFAULT_CUSTOMER["cus_city"],
               "cus_country": DEFAULT_CUSTOMER["cus_country"],
               "value_a": str(candidate.id),
          }

     def init_session(self, payload: dict) -> str:
          """
          Open a checkout session and return the hosted payment page URL.

          Raises:
               GatewayError: network failure, unreadable response, or a non-SUCCESS status
          """
          try:
               response = requests.post(self.api_url, data=payload, timeout=self.timeout)
               data = response.json()
          except requests.RequestException as e:
               logger.error("SSLCommerz init request failed for %s: %s", payload.get("tran_id"), e)
               raise GatewayError()
          except ValueError:
               logger.error("SSLCommerz init returned a non-JSON body (HTTP %s)", response.status_code)
               raise GatewayError()

          if data.get("status") == "SUCCESS" and data.get("GatewayPageURL"):
               return data["GatewayPageURL"]

          reason = data.get("failedreason") or "Failed to initialize payment"
          logger.warning("SSLCommerz refused session %s: %s", payload.get("tran_id"), reason)
          raise GatewayError(reason)

     def validate(self, val_id: str) -> dict:
          """
          Ask the gateway to confirm a val_id. Returns the gateway's JSON body.

          Raises:
               GatewayError: the validation API could not be reached or answered garbage
          """
          params = {
               "val_id": val_id,
               "store_id": self.store_id,
               "store_passwd": self.store_password,
               "format": "json",
          }
          try:
               response = requests.get(self.validation_url, params=params, timeout=self.timeout)
               return response.json()
          except requests.RequestException as e:
               logger.error("SSLCommerz validation request failed for val_id %s: %s", val_id, e)
               raise GatewayError("Payment validation failed")
          except ValueError:
               logger.error("SSLCommerz validation returned a non-JSON body for val_id %s", val_id)
               raise GatewayError("Payment validation failed")


def get_gateway_client() -> SSLCommerzClient:
     """FastAPI dependency; tests override it with a stub client."""
     return SSLCommerzClient()
