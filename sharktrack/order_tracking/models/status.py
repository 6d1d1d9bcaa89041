"""
Status vocabulary models for Order Tracking.

The Status table seeds the in-memory status registry. Codes are the
operational values stored on orders and products; customer labels are what
the storefront shows.
"""

from django.db import models


class StatusKind(models.TextChoices):
    """The two closed status vocabularies."""
    PRODUCT = 'PRODUCT', 'Product'
    ORDER = 'ORDER', 'Order'


class ProductStatus(models.TextChoices):
    """Product track, from intake to consolidation at the operator's facility."""
    INTAKE = 'INTAKE', 'Por Procesar'
    AWAITING_TRACKING = 'AWAITING_TRACKING', 'Esperando Tracking'
    IN_TRANSIT = 'IN_TRANSIT', 'En Tránsito'
    ARRIVED_AT_HUB = 'ARRIVED_AT_HUB', 'Entregado en Miami'
    PROCESSED_AT_HUB = 'PROCESSED_AT_HUB', 'Procesado en DUAL Miami'
    AT_DISTRIBUTION_CENTER = 'AT_DISTRIBUTION_CENTER', 'En Centro de Distribución'
    EN_ROUTE_TO_BRANCH = 'EN_ROUTE_TO_BRANCH', 'En Sucursal DUAL'
    RECEIVED_BY_OPERATOR = 'RECEIVED_BY_OPERATOR', 'Recibido por Sharkletas'
    CONSOLIDATED = 'CONSOLIDATED', 'Consolidado'


class OrderTrackStatus(models.TextChoices):
    """Order track, from preparation to final delivery by the local carrier."""
    PREPARED = 'PREPARED', 'Preparado'
    WITH_CARRIER = 'WITH_CARRIER', 'En poder de Correos'
    READY_FOR_DELIVERY = 'READY_FOR_DELIVERY', 'Listo para Entrega'
    DELIVERED = 'DELIVERED', 'Entregado'


# Default customer-facing labels used by the seed_statuses command.
DEFAULT_CUSTOMER_LABELS = {
    StatusKind.PRODUCT: {
        ProductStatus.INTAKE: 'En Preparación',
        ProductStatus.AWAITING_TRACKING: 'Esperando Número de Seguimiento',
        ProductStatus.IN_TRANSIT: 'En Camino',
        ProductStatus.ARRIVED_AT_HUB: 'Llegó a Miami',
        ProductStatus.PROCESSED_AT_HUB: 'Procesado en Miami',
        ProductStatus.AT_DISTRIBUTION_CENTER: 'En Centro de Distribución',
        ProductStatus.EN_ROUTE_TO_BRANCH: 'En Camino a Sucursal',
        ProductStatus.RECEIVED_BY_OPERATOR: 'Recibido por Nosotros',
        ProductStatus.CONSOLIDATED: 'Preparación Final',
    },
    StatusKind.ORDER: {
        OrderTrackStatus.PREPARED: 'Listo para Enviar',
        OrderTrackStatus.WITH_CARRIER: 'En Tránsito con Correos',
        OrderTrackStatus.READY_FOR_DELIVERY: 'Listo para Entrega',
        OrderTrackStatus.DELIVERED: 'Entregado',
    },
}


class Status(models.Model):
    """
    One status code of a vocabulary together with its customer-facing label.
    """

    kind = models.CharField(
        max_length=10,
        choices=StatusKind.choices,
        help_text="Vocabulary the code belongs to"
    )
    internal_code = models.CharField(
        max_length=50,
        help_text="Operational status code stored on orders and products"
    )
    customer_label = models.CharField(
        max_length=100,
        help_text="Label shown to customers"
    )
    position = models.PositiveIntegerField(
        default=0,
        help_text="Definition order within the vocabulary"
    )

    class Meta:
        ordering = ['kind', 'position', 'id']
        constraints = [
            models.UniqueConstraint(fields=['kind', 'internal_code'], name='unique_status_code_per_kind'),
        ]
        verbose_name_plural = 'statuses'

    def __str__(self):
        return f"{self.kind}:{self.internal_code} ({self.customer_label})"
