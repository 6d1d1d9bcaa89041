"""
Tests for mapping platform orders onto order documents.
"""

from datetime import datetime, timezone as dt_timezone

from django.test import TestCase

from ..exceptions import ValidationException
from ..models import ProductStatus, PurchaseType, OrderType
from ..services.order_mapper import (
    OrderMapper, parse_variant, build_variant_title, normalize_variant_title, classify_location,
    normalize_payment_status,
)
from ..services.status_registry import StatusRegistry
from .helpers import NOW, RegistryMixin, shopify_order, shopify_line_item


class VariantParsingTest(TestCase):
    """Test variant descriptor parsing."""

    def test_color_and_size(self):
        self.assertEqual(parse_variant('Rojo / M'), ('Rojo', 'M'))
        self.assertEqual(parse_variant('Azul|XL'), ('Azul', 'XL'))

    def test_single_part(self):
        self.assertEqual(parse_variant('Negro'), ('Negro', None))

    def test_empty_and_default(self):
        self.assertEqual(parse_variant(None), (None, None))
        self.assertEqual(parse_variant('Default Title'), (None, None))

    def test_rebuild(self):
        self.assertEqual(build_variant_title('Rojo', 'M'), 'Rojo / M')
        self.assertIsNone(build_variant_title(None, None))

    def test_normalize_keeps_every_segment(self):
        self.assertEqual(parse_variant('Rojo / M / Corto'), ('Rojo', 'M'))
        self.assertEqual(normalize_variant_title('Rojo|M, Corto'), 'Rojo / M / Corto')
        self.assertIsNone(normalize_variant_title('Default Title'))


class MapperHelpersTest(TestCase):

    def test_classify_location(self):
        known = {'1001': 'SAN_JOSE'}
        self.assertEqual(classify_location(1001, known), 'SAN_JOSE')
        self.assertEqual(classify_location(9999, known), 'UNDETERMINED')
        self.assertEqual(classify_location(None, known), 'UNDETERMINED')

    def test_payment_status(self):
        self.assertEqual(normalize_payment_status('PAID'), 'paid')
        self.assertEqual(normalize_payment_status('Partially Refunded'), 'partially_refunded')
        self.assertEqual(normalize_payment_status(None), 'pending')
        with self.assertRaises(ValidationException):
            normalize_payment_status('chargeback')


class OrderMapperTest(RegistryMixin, TestCase):
    """Test OrderMapper.map."""

    def test_map_order(self):
        """A platform order maps onto a fresh intake document."""
        document = OrderMapper(self.registry).map(shopify_order(), NOW)

        self.assertEqual(document['shopify_order_id'], '5001')
        self.assertEqual(document['shopify_order_number'], '#1001')
        self.assertEqual(
            document['shopify_order_link'],
            'https://admin.shopify.com/store/sharktest/orders/5001'
        )
        self.assertEqual(document['payment_status'], 'paid')
        self.assertEqual(document['location'], 'SAN_JOSE')
        self.assertEqual(document['order_type'], OrderType.UNDETERMINED)
        self.assertEqual(document['current_status']['status'], ProductStatus.INTAKE)
        self.assertEqual(len(document['status_history']), 1)
        self.assertEqual(document['current_status'], document['status_history'][0])
        self.assertEqual(document['updated_at'], NOW)
        self.assertEqual(
            document['created_at'],
            datetime(2024, 3, 1, 16, 30, tzinfo=dt_timezone.utc)
        )

        product = document['order_details']['products'][0]
        self.assertEqual(product['product_id'], '7001')
        self.assertEqual(product['color'], 'Rojo')
        self.assertEqual(product['size'], 'M')
        self.assertEqual(product['purchase_type'], PurchaseType.TO_BE_DEFINED)
        self.assertIsNone(product['supplier_po'])
        self.assertEqual(product['status'][0]['status'], ProductStatus.INTAKE)
        self.assertEqual(product['status'][0]['updated_at'], NOW.isoformat())

    def test_map_is_deterministic(self):
        """Same payload, registry and clock give the same document."""
        mapper = OrderMapper(self.registry)
        self.assertEqual(mapper.map(shopify_order(), NOW), mapper.map(shopify_order(), NOW))

    def test_temporary_product_id(self):
        """Line items without an id get a temporary one from the variant."""
        payload = shopify_order(line_items=[shopify_line_item(item_id=None, variant_id=88)])
        document = OrderMapper(self.registry).map(payload, NOW)
        self.assertEqual(document['order_details']['products'][0]['product_id'], 'temp_88')

    def test_order_tracking_from_fulfillments(self):
        payload = shopify_order(fulfillments=[
            {'tracking_number': None},
            {'tracking_number': 'LX123', 'tracking_company': 'Correos'},
        ])
        document = OrderMapper(self.registry).map(payload, NOW)
        self.assertEqual(
            document['tracking_info']['order_tracking'],
            {'tracking_number': 'LX123', 'carrier': 'Correos'}
        )

    def test_missing_required_fields(self):
        """Every invalid field is reported at once."""
        payload = shopify_order(
            name=None, created_at='yesterday',
            line_items=[shopify_line_item(name=None, title=None, quantity=-1)],
        )
        with self.assertRaises(ValidationException) as ctx:
            OrderMapper(self.registry).map(payload, NOW)

        errors = ctx.exception.details
        self.assertIn('name', errors)
        self.assertIn('created_at', errors)
        self.assertIn('line_items[0].name', errors)
        self.assertIn('line_items[0].quantity', errors)

    def test_registry_without_intake_code(self):
        """The first registered product code becomes the intake status."""
        registry = StatusRegistry.from_records([
            {'kind': 'PRODUCT', 'internal_code': 'AWAITING_TRACKING', 'customer_label': 'Esperando'},
        ])
        document = OrderMapper(registry).map(shopify_order(), NOW)
        self.assertEqual(document['current_status']['status'], 'AWAITING_TRACKING')
