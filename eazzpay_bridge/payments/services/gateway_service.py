import logging
from typing import Optional
from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse

from payments.exceptions import DomainError
from payments.models import Order, PaymentNotification
from payments.services.eazzpay_client import EazzPayClient, PaymentResponse
from payments.services.gateway_config import GatewayConfig
from payments.services.status_reconciler import (
    STATUS_COMPLETED,
    Notification,
    OrderStatusReconciler,
)
from payments.user_messages import ERROR_MESSAGES

logger = logging.getLogger('eazzpay_gateway')


def build_absolute_url(view_name, **query):
    url = f"https://{settings.BASE_URL}{reverse(view_name)}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


def payment_page_from_response(response: PaymentResponse):
    """
    Extracts the hosted payment page from an INIT response.

    Returns:
        tuple: (redirect_url, invoice_id or None)

    Raises:
        DomainError: processor refused the payment or sent no redirect_url
    """
    if not response.success:
        raise DomainError(response.message or ERROR_MESSAGES['payment_creation_failed'])

    redirect_url = response.data.get('redirect_url') if response.data else None
    if not redirect_url:
        raise DomainError(ERROR_MESSAGES['payment_url_missing'])
    return redirect_url, response.data.get('invoice_id')


def verified_notification(order: Order, response: PaymentResponse) -> Notification:
    """
    Builds a notification from a VERIFY response for the order's stored invoice.

    Raises:
        DomainError: the response names another invoice or another order
    """
    invoice_id = response.get('invoice_id')
    if invoice_id and str(invoice_id) != order.payment_reference_id:
        raise DomainError(ERROR_MESSAGES['invoice_mismatch'])

    metadata = response.get('metadata')
    if isinstance(metadata, dict) and metadata.get('order_id') not in (None, ''):
        if str(metadata['order_id']) != str(order.pk):
            raise DomainError(ERROR_MESSAGES['invoice_mismatch'])

    transaction_id = response.get('transaction_id')
    return Notification(
        reference=str(order.pk),
        status=str(response.get('status') or '').upper(),
        invoice_id=order.payment_reference_id,
        transaction_id=str(transaction_id) if transaction_id else None,
    )


class EazzPayGatewayService:
    """
    Order-facing façade of the EazzPay integration.

    Starts payments for orders and turns the three outcome channels
    (success redirect, cancel redirect, IPN) into order status changes.
    """

    def __init__(self, config: Optional[GatewayConfig] = None, client: Optional[EazzPayClient] = None,
                 reconciler: Optional[OrderStatusReconciler] = None):
        self.config = config or GatewayConfig.from_settings()
        self.client = client or EazzPayClient(self.config)
        self.reconciler = reconciler or OrderStatusReconciler(self.config)

    def initiate(self, order: Order) -> dict:
        """
        Requests a payment page for the order.

        Returns:
            dict: {'success': True, 'redirect_url': ...} or {'success': False, 'message': ...}
        """
        logger.info(
            f"Initiating EazzPay payment for order {order.pk}: "
            f"total={order.total} {order.currency}, status={order.status}"
        )

        response = self.client.create_payment(
            amount=order.total,
            currency=order.currency,
            customer_name=order.customer_name,
            success_url=build_absolute_url('eazzpay_success', order_id=order.pk),
            cancel_url=build_absolute_url('eazzpay_cancel', order_id=order.pk),
            notify_url=build_absolute_url('eazzpay_ipn'),
            notify_method=self.config.ipn_method,
            metadata={'order_id': str(order.pk)},
            exchange_rate=self.config.exchange_rate,
        )

        try:
            redirect_url, invoice_id = payment_page_from_response(response)
        except DomainError as e:
            logger.error(f"EazzPay payment creation failed for order {order.pk}: {e}, response={response.raw}")
            return {'success': False, 'message': str(e)}

        if invoice_id:
            order.payment_reference_id = str(invoice_id)
        old_status = order.status
        order.status = Order.STATUS_PENDING
        order.save(update_fields=['status', 'payment_reference_id', 'updated_at'])

        logger.info(
            f"Order {order.pk} status changed: {old_status} → pending, "
            f"invoice_id={invoice_id or '-'}; redirecting to payment page"
        )
        return {'success': True, 'redirect_url': redirect_url}

    def handle_success(self, order: Order, invoice_id=None):
        """
        Processes the browser returning from the payment page.

        With verification on, only the invoice stored at initiation is
        verified, and the order is only completed when the VERIFY endpoint
        confirms it; otherwise it waits for the IPN. The redirect's own
        invoice_id is never trusted beyond matching the stored one.
        """
        stored_invoice_id = order.payment_reference_id
        if invoice_id and stored_invoice_id and invoice_id != stored_invoice_id:
            logger.warning(
                f"Order {order.pk}: success redirect carries invoice {invoice_id}, "
                f"expected {stored_invoice_id}; ignoring"
            )
            return None

        if not self.config.verify_on_return:
            logger.info(f"Order {order.pk}: success redirect accepted without verification")
            return self.reconciler.reconcile(
                Notification(
                    reference=str(order.pk),
                    status=STATUS_COMPLETED,
                    invoice_id=stored_invoice_id or invoice_id,
                ),
                order=order,
                source=PaymentNotification.SOURCE_RETURN,
            )

        if not stored_invoice_id:
            logger.warning(f"Order {order.pk}: no stored invoice to verify, waiting for IPN")
            return None

        response = self.client.verify_payment(stored_invoice_id)
        if not response.success:
            logger.warning(
                f"Order {order.pk}: verification of invoice {stored_invoice_id} failed "
                f"({response.message}), waiting for IPN"
            )
            return None

        try:
            notification = verified_notification(order, response)
        except DomainError as e:
            logger.error(f"Order {order.pk}: verification of invoice {stored_invoice_id} rejected: {e}")
            return None

        logger.info(f"Order {order.pk}: invoice {stored_invoice_id} verified with status {notification.status or '-'}")
        return self.reconciler.reconcile(
            notification,
            order=order,
            source=PaymentNotification.SOURCE_RETURN,
            payload=response.raw,
        )

    def handle_cancel(self, order: Order):
        old_status = order.update_status(Order.STATUS_CANCELLED)
        logger.info(f"Order {order.pk} status changed: {old_status} → cancelled (customer cancelled payment)")
        return old_status

    def handle_notification(self, payload):
        """
        Raises:
            InvalidNotificationError: payload has no reference
            Order.DoesNotExist: reference does not match an order
        """
        notification = Notification.from_payload(payload)
        return self.reconciler.reconcile(notification, source=PaymentNotification.SOURCE_IPN, payload=payload)
