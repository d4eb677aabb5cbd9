"""
Immutable EazzPay gateway configuration.

Built once from Django settings and handed to the client, the adapter and the
reconciler, so no component reads mutable global state at request time.
"""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from payments.exceptions import ConfigurationError

SANDBOX_API_URL = 'https://sandbox.eazzpay.com/api'
LIVE_API_URL = 'https://pay.eazzpay.com/api'

DEFAULT_TIMEOUT_S = 45

IPN_METHODS = ('GET', 'POST')


def default_api_url(sandbox):
    """Fixed API URL used when no explicit base URL is configured."""
    return SANDBOX_API_URL if sandbox else LIVE_API_URL


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = ''
    secret_key: str = ''
    sandbox: bool = False
    exchange_rate: Decimal = Decimal('120')
    settlement_currency: str = 'BDT'
    debug: bool = False
    timeout: int = DEFAULT_TIMEOUT_S
    ipn_method: str = 'POST'
    physical_product_status: str = 'processing'
    digital_product_status: str = 'completed'
    verify_on_return: bool = True
    verify_ipn_secret: bool = False

    @classmethod
    def from_settings(cls):
        """
        Raises:
            ConfigurationError: EAZZPAY_IPN_METHOD is neither GET nor POST
        """
        ipn_method = str(getattr(settings, 'EAZZPAY_IPN_METHOD', 'POST') or 'POST').upper()
        if ipn_method not in IPN_METHODS:
            raise ConfigurationError(f"Unsupported EAZZPAY_IPN_METHOD: {ipn_method}")

        return cls(
            base_url=getattr(settings, 'EAZZPAY_BASE_URL', '') or '',
            secret_key=getattr(settings, 'EAZZPAY_CLIENT_SECRET', '') or '',
            sandbox=getattr(settings, 'EAZZPAY_SANDBOX', False),
            exchange_rate=Decimal(str(getattr(settings, 'EAZZPAY_EXCHANGE_RATE', '120'))),
            settlement_currency=getattr(settings, 'EAZZPAY_SETTLEMENT_CURRENCY', 'BDT'),
            debug=getattr(settings, 'EAZZPAY_DEBUG', False),
            timeout=getattr(settings, 'PAYMENT_API_TIMEOUT_S', DEFAULT_TIMEOUT_S),
            ipn_method=ipn_method,
            physical_product_status=getattr(settings, 'EAZZPAY_PHYSICAL_PRODUCT_STATUS', 'processing'),
            digital_product_status=getattr(settings, 'EAZZPAY_DIGITAL_PRODUCT_STATUS', 'completed'),
            verify_on_return=getattr(settings, 'EAZZPAY_VERIFY_ON_RETURN', True),
            verify_ipn_secret=getattr(settings, 'EAZZPAY_VERIFY_IPN_SECRET', False),
        )

    @property
    def api_url(self):
        """Explicit base URL, or the sandbox/live URL selected by the sandbox flag."""
        return self.base_url or default_api_url(self.sandbox)

    def has_credentials(self):
        return bool(self.api_url and self.secret_key)

    def post_payment_status(self, order):
        """
        Status an order moves to once its payment is confirmed.

        Orders with at least one shippable item use the physical product
        status, everything else (downloads, services, empty orders) the
        digital one.
        """
        from payments.models import Order

        status = self.physical_product_status if order.needs_processing() else self.digital_product_status
        if status not in Order.POST_PAYMENT_STATUSES:
            return Order.STATUS_COMPLETED
        return status
