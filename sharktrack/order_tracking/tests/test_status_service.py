"""
Tests for manual status moves, purchase details and workflow rules.
"""

from django.test import TestCase

from ..exceptions import (
    InvalidTransitionException, NotFoundException, ValidationException,
)
from ..models import (
    Order, Product, ProductStatus, OrderTrackStatus, OrderType, PurchaseType,
    SupplierPurchaseOrder, TrackingNumber,
)
from ..services import (
    StatusService, ProductService, ConsolidationService, ProductWorkflow, OrderWorkflow,
)
from ..services.product_service import derive_order_type
from .helpers import RegistryMixin, shopify_order, shopify_line_item


class WorkflowTest(TestCase):
    """Test transition tables."""

    def test_product_forward_moves(self):
        self.assertTrue(ProductWorkflow.can_transition_to(ProductStatus.INTAKE, ProductStatus.IN_TRANSIT))
        self.assertTrue(ProductWorkflow.can_transition_to(
            ProductStatus.INTAKE, ProductStatus.RECEIVED_BY_OPERATOR
        ))
        self.assertFalse(ProductWorkflow.can_transition_to(ProductStatus.IN_TRANSIT, ProductStatus.INTAKE))
        self.assertFalse(ProductWorkflow.can_transition_to(ProductStatus.IN_TRANSIT, ProductStatus.IN_TRANSIT))

    def test_consolidated_is_reserved(self):
        """Only consolidation may set CONSOLIDATED."""
        self.assertFalse(ProductWorkflow.can_transition_to(
            ProductStatus.RECEIVED_BY_OPERATOR, ProductStatus.CONSOLIDATED
        ))

    def test_order_moves_one_step(self):
        self.assertTrue(OrderWorkflow.can_transition_to(OrderTrackStatus.PREPARED, OrderTrackStatus.WITH_CARRIER))
        self.assertFalse(OrderWorkflow.can_transition_to(OrderTrackStatus.PREPARED, OrderTrackStatus.DELIVERED))
        self.assertFalse(OrderWorkflow.can_transition_to(ProductStatus.CONSOLIDATED, OrderTrackStatus.PREPARED))
        self.assertFalse(OrderWorkflow.can_transition_to(OrderTrackStatus.DELIVERED, OrderTrackStatus.PREPARED))

    def test_next_statuses_skip_reserved_moves(self):
        self.assertEqual(ProductWorkflow.next_statuses(ProductStatus.RECEIVED_BY_OPERATOR), [])
        self.assertEqual(
            ProductWorkflow.next_statuses(ProductStatus.EN_ROUTE_TO_BRANCH),
            [ProductStatus.RECEIVED_BY_OPERATOR]
        )
        self.assertEqual(OrderWorkflow.next_statuses(ProductStatus.CONSOLIDATED), [])
        self.assertEqual(OrderWorkflow.next_statuses(OrderTrackStatus.WITH_CARRIER), [OrderTrackStatus.READY_FOR_DELIVERY])
        self.assertEqual(OrderWorkflow.next_statuses(None), [])


class ProductStatusTest(RegistryMixin, TestCase):
    """Test StatusService product moves and tracking."""

    def setUp(self):
        super().setUp()
        self.order = self._create_order()

    def test_advance_product_status(self):
        order = StatusService.advance_product_status(
            '5001', '7001', ProductStatus.IN_TRANSIT, self.registry, 'Salió de bodega'
        )
        product = order.find_product('7001')
        self.assertEqual([e['status'] for e in product['status']], ['INTAKE', 'IN_TRANSIT'])
        self.assertEqual(product['status'][-1]['description'], 'Salió de bodega')

        # The order's own history is untouched
        order.refresh_from_db()
        self.assertEqual(order.status, ProductStatus.INTAKE)

    def test_backward_move_rejected(self):
        StatusService.advance_product_status('5001', '7001', ProductStatus.IN_TRANSIT, self.registry)
        with self.assertRaises(InvalidTransitionException) as ctx:
            StatusService.advance_product_status('5001', '7001', ProductStatus.AWAITING_TRACKING, self.registry)
        self.assertEqual(ctx.exception.http_status, 409)
        self.assertEqual(ctx.exception.details['current_status'], 'IN_TRANSIT')

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValidationException):
            StatusService.advance_product_status('5001', '7001', 'LOST_AT_SEA', self.registry)

    def test_missing_order_and_product(self):
        with self.assertRaises(NotFoundException):
            StatusService.advance_product_status('9999', '7001', ProductStatus.IN_TRANSIT, self.registry)
        with self.assertRaises(NotFoundException):
            StatusService.advance_product_status('5001', '0000', ProductStatus.IN_TRANSIT, self.registry)

    def test_attach_product_tracking(self):
        order = StatusService.attach_product_tracking('5001', '7001', 'USPS', 'US123', self.registry)

        entry = order.tracking_info['product_trackings'][0]
        self.assertEqual(entry['product_id'], '7001')
        self.assertEqual(entry['tracking_number'], 'US123')
        self.assertIsNone(entry['consolidated_tracking_number'])

        mirror = Product.objects.get(product_id='7001')
        self.assertEqual(mirror.orders, ['5001'])
        self.assertEqual(mirror.tracking_numbers, [
            {'tracking_number': 'US123', 'carrier': 'USPS', 'status': 'INTAKE'}
        ])

    def test_attach_product_tracking_requires_fields(self):
        with self.assertRaises(ValidationException) as ctx:
            StatusService.attach_product_tracking('5001', '7001', '', '', self.registry)
        self.assertIn('carrier', ctx.exception.details)
        self.assertIn('trackingNumber', ctx.exception.details)


class OrderStatusTest(RegistryMixin, TestCase):
    """Test StatusService order moves after preparation."""

    def setUp(self):
        super().setUp()
        self._receive_products(self._create_order())
        ConsolidationService.consolidate_products('5001', 'CorreosCR', 'CR123', self.registry)

    def test_cannot_skip_preparation(self):
        with self.assertRaises(InvalidTransitionException):
            StatusService.advance_order_status('5001', OrderTrackStatus.WITH_CARRIER, self.registry)

    def test_prepared_is_reserved(self):
        with self.assertRaises(InvalidTransitionException):
            StatusService.advance_order_status('5001', OrderTrackStatus.PREPARED, self.registry)

    def test_order_track_updates_shipments(self):
        """Shipment associations follow the order's status."""
        ConsolidationService.prepare_products('5001', 'CR999', self.registry)

        StatusService.advance_order_status('5001', OrderTrackStatus.WITH_CARRIER, self.registry)
        order = StatusService.advance_order_status('5001', OrderTrackStatus.READY_FOR_DELIVERY, self.registry)

        self.assertEqual(order.status, OrderTrackStatus.READY_FOR_DELIVERY)
        self.assertEqual(
            [e['status'] for e in order.status_history],
            ['INTAKE', 'CONSOLIDATED', 'PREPARED', 'WITH_CARRIER', 'READY_FOR_DELIVERY']
        )
        shipment = TrackingNumber.objects.get(tracking_number='CR123')
        self.assertEqual({a['status'] for a in shipment.products}, {'READY_FOR_DELIVERY'})

    def test_product_status_is_rejected_for_orders(self):
        with self.assertRaises(ValidationException):
            StatusService.advance_order_status('5001', ProductStatus.IN_TRANSIT, self.registry)


class PurchaseDetailsTest(RegistryMixin, TestCase):
    """Test ProductService.update_purchase_details."""

    def setUp(self):
        super().setUp()
        self._create_order(shopify_order(line_items=[
            shopify_line_item(),
            shopify_line_item(item_id=7002, name='Casco'),
        ]))
        SupplierPurchaseOrder.objects.create(po_number='PO-77', supplier_name='TEMU', order_date='2024-03-02')

    def test_pre_order_links_purchase_order(self):
        ProductService.update_purchase_details('5001', '7001', PurchaseType.PRE_ORDER, 'PO-77', 'TEMU')
        order = ProductService.update_purchase_details('5001', '7002', PurchaseType.PRE_ORDER, 'PO-77')

        self.assertEqual(order.order_type, OrderType.PRE_ORDER)
        self.assertEqual(order.find_product('7001')['provider'], 'TEMU')
        self.assertEqual(order.find_product('7002')['provider'], 'TO_BE_DEFINED')

        purchase_order = SupplierPurchaseOrder.objects.get(po_number='PO-77')
        self.assertEqual(purchase_order.products, ['7001', '7002'])
        self.assertEqual(purchase_order.orders, ['5001'])

    def test_mixed_purchase_types(self):
        order = ProductService.update_purchase_details('5001', '7001', PurchaseType.IMMEDIATE)
        self.assertEqual(order.order_type, OrderType.UNDETERMINED)
        order = ProductService.update_purchase_details('5001', '7002', PurchaseType.IMMEDIATE)
        self.assertEqual(Order.objects.get(pk=order.pk).order_type, OrderType.IMMEDIATE)

    def test_pre_order_requires_purchase_order(self):
        with self.assertRaises(ValidationException):
            ProductService.update_purchase_details('5001', '7001', PurchaseType.PRE_ORDER)
        with self.assertRaises(ValidationException):
            ProductService.update_purchase_details('5001', '7001', PurchaseType.IMMEDIATE, 'PO-77')

    def test_unknown_purchase_order(self):
        with self.assertRaises(NotFoundException):
            ProductService.update_purchase_details('5001', '7001', PurchaseType.PRE_ORDER, 'PO-404')

    def test_derive_order_type(self):
        self.assertEqual(derive_order_type([]), OrderType.UNDETERMINED)
        self.assertEqual(
            derive_order_type([{'purchase_type': 'TO_BE_DEFINED'}]), OrderType.UNDETERMINED
        )
        self.assertEqual(
            derive_order_type([{'purchase_type': 'REPLACEMENT'}] * 2), OrderType.REPLACEMENT
        )
