"""
Error taxonomy for the EazzPay integration.

Client-facing operations catch GatewayError and turn it into a
{'success': False, 'message': ...} result; only webhook validation
escapes to the view layer.
"""


class GatewayError(Exception):
    """Base class for every failure raised inside the payment integration."""


class ConfigurationError(GatewayError):
    """Credentials or endpoint registry are not usable."""


class PaymentValidationError(GatewayError):
    """Request data is missing or malformed (currency, invoice id, amount)."""


class InvalidNotificationError(PaymentValidationError):
    """IPN body is not a JSON object or lacks the order reference."""


class TransportError(GatewayError):
    """DNS, connection or timeout failure talking to the remote API."""


class ProtocolError(GatewayError):
    """Remote API answered with a body that is not a JSON object."""


class DomainError(GatewayError):
    """Processor reported a failure or omitted an expected field."""
