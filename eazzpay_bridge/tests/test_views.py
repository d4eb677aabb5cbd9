"""
Tests for the EazzPay HTTP endpoints: initiation, browser returns and IPN.
"""
import json
from unittest.mock import patch

from django.test import Client, TestCase, override_settings
from django.urls import reverse

from payments.models import Order, PaymentNotification
from tests.factories import TEST_BASE_URL, TEST_SECRET, create_order, mock_response

REQUEST_TARGET = 'payments.services.eazzpay_client.requests.request'

GATEWAY_SETTINGS = {
    'EAZZPAY_BASE_URL': TEST_BASE_URL,
    'EAZZPAY_CLIENT_SECRET': TEST_SECRET,
    'BASE_URL': 'shop.example.com',
}


@override_settings(**GATEWAY_SETTINGS)
class IpnViewTestCase(TestCase):

    def setUp(self):
        self.client = Client()
        self.url = reverse('eazzpay_ipn')

    def post_json(self, body, **extra):
        return self.client.post(self.url, data=json.dumps(body), content_type='application/json', **extra)

    def test_completed_notification_marks_order_paid(self):
        order = create_order(id=123)

        response = self.post_json({'reference': '123', 'status': 'COMPLETED'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'message': 'IPN processed'})
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        self.assertIsNotNone(order.paid_at)

    def test_redelivered_notification_is_acknowledged_once(self):
        order = create_order(id=123)
        body = {'reference': '123', 'status': 'COMPLETED', 'invoice_id': 'INV-1'}

        first = self.post_json(body)
        second = self.post_json(body)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(PaymentNotification.objects.filter(order=order).count(), 1)

    def test_failed_notification_marks_order_failed(self):
        order = create_order()

        self.post_json({'reference': str(order.pk), 'status': 'FAILED'})

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_FAILED)

    def test_unknown_status_is_acknowledged_without_change(self):
        order = create_order()

        response = self.post_json({'reference': str(order.pk), 'status': 'REFUNDED'})

        self.assertEqual(response.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_missing_reference_is_rejected(self):
        order = create_order()

        response = self.post_json({'status': 'COMPLETED'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Invalid IPN data'})
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_malformed_json_is_rejected(self):
        response = self.client.post(self.url, data='{not json', content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Invalid IPN data'})

    def test_non_object_body_is_rejected(self):
        response = self.post_json(['reference', 'status'])

        self.assertEqual(response.status_code, 400)

    def test_unknown_order_returns_not_found(self):
        response = self.post_json({'reference': '999999', 'status': 'COMPLETED'})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Order not found'})

    def test_get_is_not_allowed(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 405)

    @override_settings(EAZZPAY_IPN_METHOD='GET')
    def test_get_notification_when_ipn_method_is_get(self):
        order = create_order()

        response = self.client.get(self.url, {'reference': order.pk, 'status': 'COMPLETED', 'invoice_id': 'INV-1'})

        self.assertEqual(response.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        self.assertEqual(PaymentNotification.objects.get(order=order).nonce, 'INV-1')

    @override_settings(EAZZPAY_IPN_METHOD='GET')
    def test_get_notification_without_reference_is_rejected(self):
        response = self.client.get(self.url, {'status': 'COMPLETED'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Invalid IPN data'})

    @override_settings(EAZZPAY_IPN_METHOD='GET')
    def test_post_is_not_allowed_when_ipn_method_is_get(self):
        order = create_order()

        response = self.post_json({'reference': str(order.pk), 'status': 'COMPLETED'})

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response['Allow'], 'GET')
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_other_methods_are_not_allowed(self):
        self.assertEqual(self.client.put(self.url).status_code, 405)

    @override_settings(EAZZPAY_VERIFY_IPN_SECRET=True)
    def test_secret_header_is_required_when_enabled(self):
        order = create_order()
        body = {'reference': str(order.pk), 'status': 'COMPLETED'}

        missing = self.post_json(body)
        wrong = self.post_json(body, HTTP_EAZZPAY_CLIENT_SECRET='guess')

        self.assertEqual(missing.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

        accepted = self.post_json(body, HTTP_EAZZPAY_CLIENT_SECRET=TEST_SECRET)

        self.assertEqual(accepted.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)


@override_settings(**GATEWAY_SETTINGS)
class InitiatePaymentViewTestCase(TestCase):

    def setUp(self):
        self.client = Client()
        self.url = reverse('eazzpay_initiate')

    @patch(REQUEST_TARGET)
    def test_returns_redirect_url(self, mock_request):
        mock_request.return_value = mock_response({
            'success': True,
            'data': {'redirect_url': 'https://pay.eazzpay.test/checkout/INV-7', 'invoice_id': 'INV-7'},
        })
        order = create_order()

        response = self.client.post(self.url, {'order_id': order.pk})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'redirect_url': 'https://pay.eazzpay.test/checkout/INV-7'})
        order.refresh_from_db()
        self.assertEqual(order.payment_reference_id, 'INV-7')

    @patch(REQUEST_TARGET)
    def test_accepts_json_body(self, mock_request):
        mock_request.return_value = mock_response({'success': True, 'data': {'redirect_url': 'https://pay'}})
        order = create_order()

        response = self.client.post(self.url, data=json.dumps({'order_id': order.pk}),
                                    content_type='application/json')

        self.assertEqual(response.status_code, 200)

    def test_missing_order_id(self):
        response = self.client.post(self.url, {})

        self.assertEqual(response.status_code, 400)

    def test_malformed_json(self):
        response = self.client.post(self.url, data='{', content_type='application/json')

        self.assertEqual(response.status_code, 400)

    def test_unknown_order(self):
        response = self.client.post(self.url, {'order_id': 999999})

        self.assertEqual(response.status_code, 404)

    @patch(REQUEST_TARGET)
    def test_paid_order_cannot_be_paid_again(self, mock_request):
        order = create_order(status=Order.STATUS_COMPLETED)

        response = self.client.post(self.url, {'order_id': order.pk})

        self.assertEqual(response.status_code, 400)
        mock_request.assert_not_called()

    @patch(REQUEST_TARGET)
    def test_processor_failure_is_bad_gateway(self, mock_request):
        mock_request.return_value = mock_response({'success': False, 'message': 'Invalid client secret'})
        order = create_order()

        response = self.client.post(self.url, {'order_id': order.pk})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {'error': 'Invalid client secret'})

    @override_settings(EAZZPAY_CLIENT_SECRET='')
    @patch(REQUEST_TARGET)
    def test_unconfigured_gateway(self, mock_request):
        order = create_order()

        response = self.client.post(self.url, {'order_id': order.pk})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {'error': 'API credentials not configured'})
        mock_request.assert_not_called()

    def test_get_is_not_allowed(self):
        self.assertEqual(self.client.get(self.url).status_code, 405)


@override_settings(**GATEWAY_SETTINGS, EAZZPAY_THANK_YOU_URL='/thanks/', EAZZPAY_CANCEL_URL='/cart/')
class ReturnViewsTestCase(TestCase):

    def setUp(self):
        self.client = Client()

    @patch(REQUEST_TARGET)
    def test_success_verifies_and_redirects_to_thank_you_page(self, mock_request):
        mock_request.return_value = mock_response({'invoice_id': 'INV-1', 'status': 'COMPLETED'})
        order = create_order(payment_reference_id='INV-1')

        response = self.client.get(reverse('eazzpay_success'), {'order_id': order.pk, 'invoice_id': 'INV-1'})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], f'/thanks/?order_id={order.pk}')
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)

    @patch(REQUEST_TARGET)
    def test_success_with_another_orders_invoice_does_not_complete_order(self, mock_request):
        mock_request.return_value = mock_response({
            'invoice_id': 'INV-PAID', 'status': 'COMPLETED', 'metadata': {'order_id': '999'},
        })
        order = create_order(payment_reference_id='INV-UNPAID')

        response = self.client.get(reverse('eazzpay_success'), {'order_id': order.pk, 'invoice_id': 'INV-PAID'})

        self.assertEqual(response.status_code, 302)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertFalse(PaymentNotification.objects.exists())
        mock_request.assert_not_called()

    @patch(REQUEST_TARGET)
    def test_success_redirects_even_when_verification_fails(self, mock_request):
        mock_request.return_value = mock_response({'success': False, 'message': 'Invoice not found'})
        order = create_order(payment_reference_id='INV-1')

        response = self.client.get(reverse('eazzpay_success'), {'order_id': order.pk})

        self.assertEqual(response.status_code, 302)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    @override_settings(EAZZPAY_VERIFY_ON_RETURN=False)
    @patch(REQUEST_TARGET)
    def test_success_without_verification(self, mock_request):
        order = create_order()

        self.client.get(reverse('eazzpay_success'), {'order_id': order.pk})

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        mock_request.assert_not_called()

    def test_success_without_order_id(self):
        response = self.client.get(reverse('eazzpay_success'))

        self.assertEqual(response.status_code, 400)
        self.assertContains(response, 'Order identifier is missing.', status_code=400)

    def test_success_for_unknown_order(self):
        response = self.client.get(reverse('eazzpay_success'), {'order_id': 999999})

        self.assertEqual(response.status_code, 404)
        self.assertContains(response, 'Order not found', status_code=404)

    def test_cancel_marks_order_cancelled_and_redirects(self):
        order = create_order()

        response = self.client.get(reverse('eazzpay_cancel'), {'order_id': order.pk})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/cart/')
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_CANCELLED)

    def test_cancel_for_unknown_order(self):
        response = self.client.get(reverse('eazzpay_cancel'), {'order_id': 999999})

        self.assertEqual(response.status_code, 404)

    def test_return_views_reject_post(self):
        self.assertEqual(self.client.post(reverse('eazzpay_success')).status_code, 405)
        self.assertEqual(self.client.post(reverse('eazzpay_cancel')).status_code, 405)
