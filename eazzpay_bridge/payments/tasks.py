"""
Celery tasks for background payment verification.
"""

import logging
from datetime import timedelta
from celery import shared_task
from django.conf import settings
from django.utils import timezone
from payments.exceptions import DomainError
from payments.models import Order, PaymentNotification
from payments.services.eazzpay_client import EazzPayClient
from payments.services.gateway_config import GatewayConfig
from payments.services.gateway_service import verified_notification
from payments.services.status_reconciler import OrderStatusReconciler

logger = logging.getLogger('verify_pending_payments')


def pending_orders_to_verify(older_than_s=None, limit=None):
    older_than_s = settings.VERIFY_PENDING_AFTER_S if older_than_s is None else older_than_s
    limit = settings.VERIFY_PENDING_BATCH_SIZE if limit is None else limit
    cutoff = timezone.now() - timedelta(seconds=older_than_s)

    return Order.objects.filter(
        status=Order.STATUS_PENDING,
        payment_reference_id__isnull=False,
        updated_at__lte=cutoff,
    ).exclude(payment_reference_id='').order_by('updated_at')[:limit]


def verify_order_payment(order, client, reconciler):
    """
    Asks EazzPay for the invoice status of one order and reconciles it.

    Returns:
        ReconcileResult or None when the verification call failed or was rejected
    """
    response = client.verify_payment(order.payment_reference_id)
    if not response.success:
        logger.warning(f"Order {order.pk}: verification failed: {response.message}")
        return None

    try:
        notification = verified_notification(order, response)
    except DomainError as e:
        logger.error(f"Order {order.pk}: verification of invoice {order.payment_reference_id} rejected: {e}")
        return None

    logger.info(f"Order {order.pk}: invoice {order.payment_reference_id} reported as {notification.status or '-'}")

    return reconciler.reconcile(
        notification,
        order=order,
        source=PaymentNotification.SOURCE_VERIFY,
        payload=response.raw,
    )


@shared_task
def verify_pending_payments(older_than_s=None, limit=None):
    """
    Background task verifying orders that stayed in 'pending' without an IPN.
    Runs periodically based on CELERY_BEAT_SCHEDULE configuration.
    """
    logger.info("Starting verify_pending_payments task")

    config = GatewayConfig.from_settings()
    client = EazzPayClient(config)
    reconciler = OrderStatusReconciler(config)

    orders = list(pending_orders_to_verify(older_than_s, limit))
    logger.info(f"Found {len(orders)} pending orders to verify")

    for order in orders:
        verify_order_payment(order, client, reconciler)

    logger.info(f"Completed verify_pending_payments task, processed {len(orders)} orders")
    return len(orders)
