import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from payments.exceptions import (
    ConfigurationError,
    GatewayError,
    PaymentValidationError,
    ProtocolError,
    TransportError,
)
from payments.services.gateway_config import GatewayConfig
from payments.services.payment_request_builder import build_payment_request
from payments.user_messages import ERROR_MESSAGES
from payments.utils.logging import redact_headers

logger = logging.getLogger('eazzpay_client')

ENDPOINTS = {
    'INIT': 'payments/initiate',
    'VERIFY': 'verify-payment',
}

SECRET_HEADER = 'eazzpay-client-secret'

# Methods that carry a JSON body
BODY_METHODS = ('POST',)


@dataclass
class PaymentResponse:
    """
    Uniform result of every call to the EazzPay API.

    Transport, parse and processor failures all end up as success=False with
    a message; callers only ever look at `success`.
    """
    success: bool
    message: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, message):
        return cls(success=False, message=message, raw={'success': False, 'message': message})

    @classmethod
    def from_body(cls, body):
        data = body.get('data')
        return cls(
            success=bool(body.get('success', True)),
            message=body.get('message'),
            data=data if isinstance(data, dict) else None,
            raw=body,
        )

    def get(self, key, default=None):
        """Looks a key up in `data` first, then in the raw body."""
        if self.data and key in self.data:
            return self.data[key]
        return self.raw.get(key, default)


class EazzPayClient:
    def __init__(self, config: Optional[GatewayConfig] = None):
        self.config = config or GatewayConfig.from_settings()

    def _log(self, message, level=logging.DEBUG):
        if self.config.debug:
            logger.log(level, message)

    def validate_credentials(self):
        if not self.config.has_credentials():
            raise ConfigurationError(ERROR_MESSAGES['credentials_not_configured'])

    def build_api_url(self, endpoint: str) -> str:
        if endpoint not in ENDPOINTS:
            raise ConfigurationError(ERROR_MESSAGES['invalid_endpoint'])
        return f"{self.config.api_url.rstrip('/')}/{ENDPOINTS[endpoint]}"

    def build_headers(self) -> Dict[str, str]:
        return {
            SECRET_HEADER: self.config.secret_key,
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

    def send_request(self, params=None, method='POST', endpoint='INIT') -> PaymentResponse:
        """
        Sends a request to the EazzPay API.

        Args:
            params: Request body (sent as JSON for POST)
            method: HTTP method
            endpoint: Endpoint name from ENDPOINTS

        Returns:
            PaymentResponse; never raises
        """
        try:
            self.validate_credentials()
            url = self.build_api_url(endpoint)
            headers = self.build_headers()
            method = method.upper()

            kwargs = {'headers': headers, 'timeout': self.config.timeout}
            if method in BODY_METHODS:
                kwargs['json'] = params or {}

            self._log(f"EazzPay request: {method} {url}, headers={redact_headers(headers)}, params={redact_headers(params)}")

            try:
                response = requests.request(method, url, **kwargs)
            except requests.RequestException as e:
                raise TransportError(str(e))

            try:
                body = response.json()
            except ValueError:
                raise ProtocolError(ERROR_MESSAGES['invalid_json'])
            if not isinstance(body, dict):
                raise ProtocolError(ERROR_MESSAGES['invalid_json'])

            self._log(f"EazzPay response: HTTP {response.status_code}, body={body}")

            return PaymentResponse.from_body(body)
        except GatewayError as e:
            self._log(f"EazzPay request to {endpoint} failed: {e}", logging.ERROR)
            return PaymentResponse.failure(str(e))

    def create_payment(self, amount, currency, customer_name, success_url, cancel_url=None,
                       notify_url=None, notify_method=None, metadata=None, exchange_rate=None) -> PaymentResponse:
        """
        Requests a hosted payment page for the given amount.

        Returns:
            PaymentResponse whose data carries `redirect_url` on success
        """
        try:
            payment_request = build_payment_request(
                amount,
                currency,
                customer_name,
                success_url,
                cancel_url,
                notify_url,
                notify_method or self.config.ipn_method,
                metadata,
                exchange_rate if exchange_rate is not None else self.config.exchange_rate,
                self.config.settlement_currency,
            )
        except PaymentValidationError as e:
            self._log(str(e), logging.ERROR)
            return PaymentResponse.failure(str(e))

        return self.send_request(payment_request.to_payload(), 'POST', 'INIT')

    def verify_payment(self, invoice_id) -> PaymentResponse:
        if not invoice_id:
            self._log(ERROR_MESSAGES['invoice_id_required'], logging.ERROR)
            return PaymentResponse.failure(ERROR_MESSAGES['invoice_id_required'])

        return self.send_request({'invoice_id': str(invoice_id).strip()}, 'POST', 'VERIFY')

    def get_payment_status(self, invoice_id) -> str:
        result = self.verify_payment(invoice_id)
        if not result.success:
            return 'UNKNOWN'
        return result.get('status') or 'UNKNOWN'
