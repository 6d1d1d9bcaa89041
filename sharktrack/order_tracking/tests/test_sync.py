"""
Tests for order synchronization and the commerce platform adapter.
"""

import json
from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO

import mock
import requests
from django.core.management import call_command
from django.test import TestCase, override_settings

from ..adapters.order_source import (
    ShopifyOrderSource, MockOrderSource, classify_response,
    switch_to_mock_order_source, switch_to_real_order_source,
)
from ..adapters.shipment_tracking import Ship24Client
from ..exceptions import (
    ConfigurationException, UpstreamAuthException, UpstreamException, UpstreamInvalidResponseException,
    UpstreamRateLimitException, UpstreamServerException,
)
from ..models import Order
from ..services import OrderSyncService, SyncSummary, trailing_window, calendar_month_window
from ..tasks import sync_recent_orders
from .helpers import NOW, RegistryMixin, shopify_order, shopify_line_item

WINDOW = (NOW - timedelta(days=30), NOW)


def build_page(start, size):
    return [
        shopify_order(
            order_id=start + i, name=f'#{start + i}',
            line_items=[shopify_line_item(item_id=(start + i) * 10)],
        )
        for i in range(size)
    ]


def build_response(status_code=200, payload=None, headers=None, url='https://sharktest.myshopify.com/admin/api/2023-01/orders.json'):
    """A real requests.Response with the given status, body and headers."""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(payload if payload is not None else {}).encode('utf-8')
    response.headers.update(headers or {})
    response.url = url
    response.encoding = 'utf-8'
    return response


def build_html_response(status_code=200, url='https://sharktest.myshopify.com/admin/api/2023-01/orders.json'):
    response = build_response(status_code, url=url)
    response._content = b'<html>maintenance</html>'
    return response


def mocked_shopify_source(responses):
    session = requests.Session()
    session.get = mock.Mock(side_effect=responses)
    return ShopifyOrderSource('sharktest.myshopify.com', 'shpat_test', session=session, sleep=mock.Mock())


class SyncWindowTest(RegistryMixin, TestCase):
    """Test OrderSyncService.sync_window."""

    def tearDown(self):
        switch_to_real_order_source()
        super().tearDown()

    def test_pages_until_exhausted(self):
        """Every page is fetched and every order processed."""
        source = MockOrderSource([build_page(1, 250), build_page(1000, 250), build_page(2000, 10)])

        summary = OrderSyncService.sync_window(*WINDOW, source, self.registry, now=NOW)

        self.assertEqual(summary.pages, 3)
        self.assertEqual(summary.fetched, 510)
        self.assertEqual(summary.processed, 510)
        self.assertEqual(summary.created, 510)
        self.assertIsNone(summary.stopped_at_page)
        self.assertEqual(Order.objects.count(), 510)
        self.assertEqual(source.requests, [{'created_at_min': WINDOW[0], 'created_at_max': WINDOW[1]}])

    def test_second_run_is_unchanged(self):
        pages = [build_page(1, 3)]
        OrderSyncService.sync_window(*WINDOW, MockOrderSource(pages), self.registry, now=NOW)

        summary = OrderSyncService.sync_window(*WINDOW, MockOrderSource(pages), self.registry, now=NOW)
        self.assertEqual(summary.unchanged, 3)
        self.assertEqual(summary.processed, 3)
        self.assertEqual(summary.created + summary.updated, 0)

    def test_later_page_failure_keeps_earlier_pages(self):
        """A failing later page stops paging without losing processed orders."""
        source = MockOrderSource(
            [build_page(1, 5), build_page(100, 5), build_page(200, 5)],
            fail_on_page=2,
            error=UpstreamRateLimitException("Too many requests", 429, retry_after=2),
        )

        summary = OrderSyncService.sync_window(*WINDOW, source, self.registry, now=NOW)

        self.assertEqual(summary.pages, 1)
        self.assertEqual(summary.processed, 5)
        self.assertEqual(summary.stopped_at_page, 2)
        self.assertEqual(summary.stop_reason, 'rate_limit')
        self.assertEqual(Order.objects.count(), 5)

    def test_first_page_failure_raises(self):
        source = MockOrderSource([build_page(1, 5)], fail_on_page=1)
        with self.assertRaises(UpstreamServerException):
            OrderSyncService.sync_window(*WINDOW, source, self.registry, now=NOW)
        self.assertFalse(Order.objects.exists())

    def test_maintenance_page_stops_paging(self):
        """An HTML body on a later page is classified and earlier orders are kept."""
        next_url = 'https://sharktest.myshopify.com/admin/api/2023-01/orders.json?page_info=abc&limit=250'
        source = mocked_shopify_source([
            build_response(200, {'orders': build_page(1, 2)}, {'Link': f'<{next_url}>; rel="next"'}),
            build_html_response(url=next_url),
        ])

        summary = OrderSyncService.sync_window(*WINDOW, source, self.registry, now=NOW)

        self.assertEqual(summary.pages, 1)
        self.assertEqual(summary.stopped_at_page, 2)
        self.assertEqual(summary.stop_reason, 'invalid_response')
        self.assertEqual(Order.objects.count(), 2)

    def test_maintenance_first_page_raises(self):
        source = mocked_shopify_source([build_html_response()])
        with self.assertRaises(UpstreamInvalidResponseException) as ctx:
            OrderSyncService.sync_window(*WINDOW, source, self.registry, now=NOW)
        self.assertEqual(ctx.exception.code, 'UPSTREAM_INVALID_RESPONSE')
        self.assertEqual(ctx.exception.details['body'], '<html>maintenance</html>')
        self.assertFalse(Order.objects.exists())

    def test_failing_order_does_not_stop_batch(self):
        """One invalid order is counted and the rest of the page is stored."""
        page = build_page(1, 3)
        page[1]['line_items'][0]['quantity'] = 'two'

        summary = OrderSyncService.sync_window(*WINDOW, MockOrderSource([page]), self.registry, now=NOW)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.created, 2)
        self.assertEqual(
            sorted(Order.objects.values_list('shopify_order_id', flat=True)), ['1', '3']
        )

    def test_summary_as_dict(self):
        summary = SyncSummary(created=2, updated=1, unchanged=4, failed=1)
        data = summary.as_dict()
        self.assertEqual(data['processed'], 7)
        self.assertEqual(data['failed'], 1)

    def test_scheduled_task(self):
        switch_to_mock_order_source([build_page(1, 2)])
        result = sync_recent_orders.delay(7).get()
        self.assertEqual(result['created'], 2)
        self.assertEqual(result['processed'], 2)

    def test_management_command(self):
        switch_to_mock_order_source([build_page(1, 2)])
        out = StringIO()
        call_command('sync_orders', '--days', '3', stdout=out)
        self.assertEqual(Order.objects.count(), 2)
        self.assertIn('2 orders processed', out.getvalue())


class WindowTest(TestCase):
    """Test sync windows."""

    def test_trailing_window(self):
        start, end = trailing_window(7, NOW)
        self.assertEqual(end, NOW)
        self.assertEqual(end - start, timedelta(days=7))

    @override_settings(TIME_ZONE='UTC')
    def test_calendar_month_window(self):
        start, end = calendar_month_window(datetime(2024, 3, 15, 12, 0, tzinfo=dt_timezone.utc))
        self.assertEqual((start.year, start.month, start.day, start.hour), (2024, 2, 1, 0))
        self.assertEqual((end.month, end.day, end.hour, end.minute), (3, 31, 23, 59))

    @override_settings(TIME_ZONE='UTC')
    def test_calendar_month_window_in_january(self):
        start, end = calendar_month_window(datetime(2024, 1, 10, tzinfo=dt_timezone.utc))
        self.assertEqual((start.year, start.month), (2023, 12))
        self.assertEqual((end.year, end.month, end.day), (2024, 1, 31))


class ClassifyResponseTest(TestCase):
    """Test upstream error classification."""

    def test_success(self):
        self.assertIsNone(classify_response(build_response(200)))

    def test_categories(self):
        self.assertIsInstance(classify_response(build_response(401)), UpstreamAuthException)
        self.assertIsInstance(classify_response(build_response(403)), UpstreamAuthException)
        self.assertIsInstance(classify_response(build_response(503)), UpstreamServerException)
        self.assertEqual(classify_response(build_response(404)).details['category'], 'not_found')
        self.assertEqual(classify_response(build_response(418)).details['category'], 'unknown')

    def test_rate_limit_retry_after(self):
        error = classify_response(build_response(429, headers={'Retry-After': '4'}))
        self.assertIsInstance(error, UpstreamRateLimitException)
        self.assertEqual(error.retry_after, 4.0)

    def test_message_names_source(self):
        self.assertIn('Commerce platform', classify_response(build_response(401)).message)
        error = classify_response(build_response(401), 'Shipment tracking provider')
        self.assertEqual(error.message, 'Shipment tracking provider rejected credentials (401)')


class ShopifyOrderSourceTest(TestCase):
    """Test the Shopify orders feed over a mocked session."""

    def _source(self, responses, **kwargs):
        session = requests.Session()
        session.get = mock.Mock(side_effect=responses)
        self.sleep = mock.Mock()
        return ShopifyOrderSource('sharktest.myshopify.com', 'shpat_test', session=session,
                                  sleep=self.sleep, **kwargs)

    def test_follows_link_header(self):
        next_url = 'https://sharktest.myshopify.com/admin/api/2023-01/orders.json?page_info=abc&limit=250'
        source = self._source([
            build_response(200, {'orders': build_page(1, 2)}, {'Link': f'<{next_url}>; rel="next"'}),
            build_response(200, {'orders': build_page(10, 1)}, url=next_url),
        ])

        pages = list(source.iter_pages(*WINDOW))

        self.assertEqual([len(page) for page in pages], [2, 1])
        first_call, second_call = source.session.get.call_args_list
        self.assertEqual(first_call.kwargs['params']['status'], 'any')
        self.assertEqual(first_call.kwargs['params']['limit'], 250)
        self.assertEqual(first_call.kwargs['params']['created_at_min'], WINDOW[0].isoformat())
        self.assertEqual(second_call.args[0], next_url)
        self.assertIsNone(second_call.kwargs['params'])
        self.assertEqual(source.session.headers['X-Shopify-Access-Token'], 'shpat_test')

    def test_retries_rate_limit(self):
        source = self._source([
            build_response(429, headers={'Retry-After': '1.5'}),
            build_response(200, {'orders': []}),
        ])
        self.assertEqual(list(source.iter_pages(*WINDOW)), [[]])
        self.sleep.assert_called_once_with(1.5)

    def test_gives_up_after_max_retries(self):
        source = self._source([build_response(502)] * 3, max_retries=2)
        with self.assertRaises(UpstreamServerException):
            list(source.iter_pages(*WINDOW))
        self.assertEqual(self.sleep.call_count, 2)

    def test_transport_error_is_retried(self):
        source = self._source([requests.ConnectionError('reset'), build_response(200, {'orders': []})])
        self.assertEqual(list(source.iter_pages(*WINDOW)), [[]])

    def test_auth_failure_is_not_retried(self):
        source = self._source([build_response(401)])
        with self.assertRaises(UpstreamException) as ctx:
            list(source.iter_pages(*WINDOW))
        self.assertEqual(ctx.exception.details['category'], 'auth')
        self.sleep.assert_not_called()

    def test_missing_credentials(self):
        with self.assertRaises(ConfigurationException):
            ShopifyOrderSource('', 'token')


class Ship24ClientTest(TestCase):
    """Test the shipment tracking client over a mocked session."""

    def _client(self, response):
        session = requests.Session()
        session.request = mock.Mock(return_value=response)
        return Ship24Client('ship24-key', session=session)

    def test_create_tracker(self):
        client = self._client(build_response(201, {'data': {'tracker': {'trackerId': 'trk-1'}}}))

        tracker = client.create_tracker('CR123', 'costa-rica-post')

        self.assertEqual(tracker, {'trackerId': 'trk-1'})
        client.session.request.assert_called_once_with(
            'post', 'https://api.ship24.com/public/v1/trackers', timeout=15,
            json={'trackingNumber': 'CR123', 'courierCode': ['costa-rica-post']},
        )
        self.assertEqual(client.session.headers['Authorization'], 'Bearer ship24-key')

    def test_rejected_key(self):
        client = self._client(build_response(401))
        with self.assertRaises(UpstreamAuthException):
            client.get_results('trk-1')

    def test_rejected_key_names_provider(self):
        client = self._client(build_response(403))
        with self.assertRaises(UpstreamAuthException) as ctx:
            client.get_results('trk-1')
        self.assertTrue(ctx.exception.message.startswith('Shipment tracking provider'))

    def test_non_json_body(self):
        client = self._client(build_html_response(url='https://api.ship24.com/public/v1/trackers/trk-1/results'))
        with self.assertRaises(UpstreamInvalidResponseException) as ctx:
            client.get_results('trk-1')
        self.assertEqual(ctx.exception.details['url'], 'https://api.ship24.com/public/v1/trackers/trk-1/results')

    def test_json_array_body(self):
        client = self._client(build_response(200, ['trk-1']))
        with self.assertRaises(UpstreamInvalidResponseException):
            client.get_results('trk-1')

    def test_missing_key(self):
        with self.assertRaises(ConfigurationException):
            Ship24Client('')
