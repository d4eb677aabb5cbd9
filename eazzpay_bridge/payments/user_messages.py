"""
Centralized messages for the payment system.
Texts returned to API callers and shown to customers are defined here.
"""

ERROR_MESSAGES = {
    'credentials_not_configured': 'API credentials not configured',
    'invalid_endpoint': 'Invalid endpoint type',
    'invalid_json': 'Invalid JSON response',
    'currency_required': 'Currency required',
    'invoice_id_required': 'Invoice ID required',
    'invalid_exchange_rate': 'Exchange rate must be positive',
    'invalid_amount': 'Invalid amount value',
    'payment_url_missing': 'Payment URL not received',
    'payment_creation_failed': 'Payment could not be created. Please try again later.',
    'invalid_notification': 'Invalid notification',
    'invalid_ipn': 'Invalid IPN data',
    'unauthorized_ipn': 'Unauthorized',
    'invalid_request': 'Invalid request. Please try again.',
    'missing_order_id': 'Order identifier is missing.',
    'order_not_found': 'Order not found',
    'order_not_payable': 'Order can no longer be paid.',
    'invoice_mismatch': 'Invoice does not belong to this order',
}

INFO_MESSAGES = {
    'ipn_processed': 'IPN processed',
}
