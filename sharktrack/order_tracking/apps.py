from django.apps import AppConfig


class OrderTrackingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'order_tracking'
    verbose_name = 'Order Tracking'

    # Installed at process start by load_registry(); never loaded lazily
    registry = None
