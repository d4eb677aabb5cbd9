import json
from django.conf import settings
from django.http import HttpResponseNotAllowed, HttpResponseRedirect, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from payments.exceptions import InvalidNotificationError
from payments.models import Order
from payments.services.eazzpay_client import SECRET_HEADER
from payments.services.gateway_config import GatewayConfig
from payments.services.gateway_service import EazzPayGatewayService
from payments.services.status_reconciler import get_order
from payments.user_messages import ERROR_MESSAGES, INFO_MESSAGES
from payments.utils.logging import log_debug, log_error, log_info


def render_error_page(message, status_code):
    """
    Renders an error page with the given message and HTTP status code.

    Args:
        message (str): User-friendly error message from ERROR_MESSAGES
        status_code (int): HTTP status code (400, 404, 502, etc.)

    Returns:
        HttpResponse: Rendered error page
    """
    log_error(f"Error page displayed: {message}", 'render_error_page', 'ERROR')

    context = {
        'error_message': message,
        'status_code': status_code,
    }
    return render(None, 'payments/error_page.html', context, status=status_code)


def get_gateway_service():
    return EazzPayGatewayService(GatewayConfig.from_settings())


def _parse_request_data(request):
    if request.content_type == 'application/json':
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise ValueError('JSON body must be an object')
        return data
    return request.POST


@csrf_exempt
@require_POST
def initiate_payment(request):
    """
    Starts an EazzPay payment for an order.

    Args:
        request: HttpRequest with `order_id` in form or JSON data

    Returns:
        JsonResponse: {'redirect_url': ...} on success or {'error': ...} on failure
    """
    try:
        data = _parse_request_data(request)
    except ValueError:
        log_error("Failed to parse JSON request body", 'initiate_payment', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['invalid_request']}, status=400)

    order_id = data.get('order_id')
    if not order_id:
        log_error("Missing order_id parameter in payment initiation request", 'initiate_payment', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['missing_order_id']}, status=400)

    try:
        order = get_order(order_id)
    except Order.DoesNotExist:
        log_error(f"Order not found: {order_id}", 'initiate_payment', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['order_not_found']}, status=404)

    if order.status not in (Order.STATUS_PENDING, Order.STATUS_FAILED):
        log_error(f"Order {order.pk} cannot be paid in status {order.status}", 'initiate_payment', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['order_not_payable']}, status=400)

    result = get_gateway_service().initiate(order)
    if not result['success']:
        log_error(f"Payment initiation failed for order {order.pk}: {result['message']}", 'initiate_payment', 'ERROR')
        return JsonResponse({'error': result['message']}, status=502)

    log_info(f"Payment initiated for order {order.pk}", 'initiate_payment')
    return JsonResponse({'redirect_url': result['redirect_url']}, status=200)


@require_GET
def payment_success(request):
    """
    Browser return from the EazzPay payment page after a successful payment.
    """
    order_id = request.GET.get('order_id')
    invoice_id = request.GET.get('invoice_id')

    if not order_id:
        return render_error_page(ERROR_MESSAGES['missing_order_id'], 400)

    try:
        order = get_order(order_id)
    except Order.DoesNotExist:
        log_error(f"Order not found on success redirect: {order_id}", 'payment_success', 'ERROR')
        return render_error_page(ERROR_MESSAGES['order_not_found'], 404)

    log_info(f"Success redirect for order {order.pk}, invoice_id={invoice_id or '-'}", 'payment_success')
    get_gateway_service().handle_success(order, invoice_id=invoice_id)

    return HttpResponseRedirect(f"{settings.EAZZPAY_THANK_YOU_URL}?order_id={order.pk}")


@require_GET
def payment_cancel(request):
    """
    Browser return from the EazzPay payment page after the customer cancelled.
    """
    order_id = request.GET.get('order_id')
    if not order_id:
        return render_error_page(ERROR_MESSAGES['missing_order_id'], 400)

    try:
        order = get_order(order_id)
    except Order.DoesNotExist:
        log_error(f"Order not found on cancel redirect: {order_id}", 'payment_cancel', 'ERROR')
        return render_error_page(ERROR_MESSAGES['order_not_found'], 404)

    get_gateway_service().handle_cancel(order)
    return HttpResponseRedirect(settings.EAZZPAY_CANCEL_URL)


def _parse_ipn_payload(request):
    if request.method == 'GET':
        return request.GET.dict()
    return json.loads(request.body)


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def eazzpay_ipn(request):
    """
    IPN callback. Accepts only the method advertised to EazzPay as `ipn_method`:
    a JSON body for POST, query parameters for GET.
    """
    log_info(f'Processing EazzPay IPN ({request.method})', 'eazzpay_ipn')
    config = GatewayConfig.from_settings()

    if request.method != config.ipn_method:
        log_error(f"IPN rejected: {request.method} received, {config.ipn_method} expected", 'eazzpay_ipn', 'ERROR')
        return HttpResponseNotAllowed([config.ipn_method])

    if config.verify_ipn_secret and request.headers.get(SECRET_HEADER) != config.secret_key:
        log_error("IPN rejected: missing or wrong client secret header", 'eazzpay_ipn', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['unauthorized_ipn']}, status=401)

    try:
        payload = _parse_ipn_payload(request)
        log_debug(f"IPN payload: {payload}", 'eazzpay_ipn')
        result = EazzPayGatewayService(config).handle_notification(payload)
    except (ValueError, InvalidNotificationError):
        log_error(
            f"Invalid IPN data: {request.get_full_path()} body={request.body[:500]!r}", 'eazzpay_ipn', 'ERROR'
        )
        return JsonResponse({'error': ERROR_MESSAGES['invalid_ipn']}, status=400)
    except Order.DoesNotExist as e:
        log_error(f"IPN for unknown order: {e}", 'eazzpay_ipn', 'ERROR')
        return JsonResponse({'error': ERROR_MESSAGES['order_not_found']}, status=404)

    log_info(
        f"IPN processed for order {result.order.pk}: {result.old_status} → {result.new_status}, "
        f"applied={result.applied} {result.reason}".rstrip(),
        'eazzpay_ipn'
    )
    return JsonResponse({'message': INFO_MESSAGES['ipn_processed']}, status=200)
