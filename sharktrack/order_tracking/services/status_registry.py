"""
Status registry for Order Tracking.

Maps {kind, internal code} to customer-facing labels. The registry is built
once at process start from the Status table and handed to every service that
validates statuses. It never reloads on its own; reload_registry() is the only
way to swap in a fresh copy.
"""

import logging
from collections import OrderedDict
from types import MappingProxyType
from typing import Dict, Any, Iterable, Mapping, Optional, Tuple

from django.apps import apps
from django.db import DatabaseError
from django.utils import timezone

from ..exceptions import ConfigurationException, ValidationException
from ..models import Status, StatusKind, ProductStatus

logger = logging.getLogger(__name__)

APP_LABEL = 'order_tracking'

INTAKE_CODE = ProductStatus.INTAKE


class StatusRegistry:
    """Immutable mapping of status codes to customer labels, per kind."""

    def __init__(self, mapping: Mapping[str, Mapping[str, str]], loaded_at=None):
        frozen = {}
        for kind in StatusKind.values:
            codes = mapping.get(kind) or {}
            frozen[kind] = MappingProxyType(OrderedDict(codes))
        self._mapping = MappingProxyType(frozen)
        self.loaded_at = loaded_at or timezone.now()

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> 'StatusRegistry':
        """
        Fold status records into a registry.

        Args:
            records: Iterable of {kind, internal_code, customer_label} mappings,
                in definition order

        Returns:
            StatusRegistry instance
        """
        mapping: Dict[str, Dict[str, str]] = {kind: OrderedDict() for kind in StatusKind.values}
        for record in records:
            kind = record['kind']
            if kind not in mapping:
                logger.warning(f"Ignoring status {record.get('internal_code')} with unknown kind {kind}")
                continue
            mapping[kind][record['internal_code']] = record['customer_label']
        return cls(mapping)

    @classmethod
    def load(cls) -> 'StatusRegistry':
        """
        Read every Status row and build the registry.

        Raises:
            ConfigurationException: If the table cannot be read or is empty
        """
        try:
            records = list(
                Status.objects.order_by('kind', 'position', 'id')
                .values('kind', 'internal_code', 'customer_label')
            )
        except DatabaseError as e:
            raise ConfigurationException(
                f"Unable to load statuses: {e}",
                {"reason": "database_error"}
            ) from e

        registry = cls.from_records(records)
        if registry.is_empty:
            raise ConfigurationException(
                "Status registry is empty; run the seed_statuses command",
                {"reason": "empty_registry"}
            )
        return registry

    @property
    def is_empty(self) -> bool:
        return not any(self._mapping[kind] for kind in StatusKind.values)

    def list_codes(self, kind: str) -> Tuple[str, ...]:
        return tuple(self._mapping.get(kind, {}).keys())

    def is_valid(self, kind: str, code: Optional[str]) -> bool:
        return code is not None and code in self._mapping.get(kind, {})

    def label_for(self, kind: str, code: str) -> str:
        """Customer-facing label for a status code."""
        self.validate(kind, code)
        return self._mapping[kind][code]

    def validate(self, kind: str, code: Optional[str], field: str = 'status') -> str:
        """
        Reject codes that are not part of the loaded vocabulary.

        Raises:
            ValidationException: If the code is unknown for the kind
        """
        if not self.is_valid(kind, code):
            raise ValidationException(
                f"Unknown {kind.lower()} status: {code}",
                {field: [f"'{code}' is not a registered {kind.lower()} status"],
                 'allowed': list(self.list_codes(kind))}
            )
        return code

    def validate_order_status(self, code: Optional[str], field: str = 'status') -> str:
        """
        Validate an order-level history entry.

        Orders begin on the product track and move to the order track after
        consolidation, so either vocabulary is accepted.
        """
        if self.is_valid(StatusKind.ORDER, code) or self.is_valid(StatusKind.PRODUCT, code):
            return code
        raise ValidationException(
            f"Unknown order status: {code}",
            {field: [f"'{code}' is not a registered status"],
             'allowed': list(self.list_codes(StatusKind.ORDER) + self.list_codes(StatusKind.PRODUCT))}
        )

    def order_label_for(self, code: str) -> str:
        if self.is_valid(StatusKind.ORDER, code):
            return self._mapping[StatusKind.ORDER][code]
        return self.label_for(StatusKind.PRODUCT, code)

    def initial_code(self, kind: str) -> str:
        """
        Initial status for new records of a kind.

        Orders start on the product track, so both kinds resolve against the
        product vocabulary. Falls back to the first product code when the
        canonical intake code is absent from this deployment's registry.

        Raises:
            ConfigurationException: If there are no product codes at all
        """
        if self.is_valid(StatusKind.PRODUCT, INTAKE_CODE):
            return INTAKE_CODE

        codes = self.list_codes(StatusKind.PRODUCT)
        if not codes:
            raise ConfigurationException(
                f"Status registry has no product statuses (requested for {kind})",
                {"kind": kind}
            )
        logger.warning(f"Intake status {INTAKE_CODE} missing for {kind}; falling back to {codes[0]}")
        return codes[0]

    def as_dict(self) -> Dict[str, Dict[str, str]]:
        return {kind: dict(codes) for kind, codes in self._mapping.items()}

    def __eq__(self, other):
        if not isinstance(other, StatusRegistry):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __repr__(self):
        counts = ', '.join(f"{kind}={len(codes)}" for kind, codes in self._mapping.items())
        return f"<StatusRegistry {counts}>"


def _app_config():
    return apps.get_app_config(APP_LABEL)


def install_registry(registry: StatusRegistry) -> StatusRegistry:
    """Make a registry the process-wide one."""
    _app_config().registry = registry
    return registry


def load_registry() -> StatusRegistry:
    """
    Load the registry at process start.

    Raises:
        ConfigurationException: If statuses cannot be loaded; callers at
            startup let it propagate so the process does not serve requests
    """
    registry = StatusRegistry.load()
    logger.info(f"Status registry loaded: {registry!r}")
    return install_registry(registry)


def reload_registry() -> StatusRegistry:
    """Explicitly replace the process-wide registry with a fresh copy."""
    registry = StatusRegistry.load()
    previous = getattr(_app_config(), 'registry', None)
    install_registry(registry)
    logger.info(f"Status registry reloaded: {previous!r} -> {registry!r}")
    return registry


def get_registry() -> StatusRegistry:
    """
    Return the loaded registry.

    Raises:
        ConfigurationException: If no registry was loaded at startup
    """
    registry = getattr(_app_config(), 'registry', None)
    if registry is None:
        raise ConfigurationException(
            "Status registry is not loaded",
            {"reason": "not_loaded"}
        )
    return registry


def peek_registry() -> Optional[StatusRegistry]:
    """The loaded registry, or None; for read paths that degrade without labels."""
    return getattr(_app_config(), 'registry', None)


def clear_registry():
    _app_config().registry = None
