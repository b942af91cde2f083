"""Data Access Objects package."""

from .base import BaseDAO
from .generic import GenericDAO
from .metadata import EntityMetadata, resolve_entity_metadata
from .protocols import ReadableRepository, WriteableRepository
from .readable import ReadableDAO
from .sorting import SortCriterion, to_order_by
from .writeable import WriteableDAO

__all__ = [
    "BaseDAO",
    "EntityMetadata",
    "GenericDAO",
    "ReadableDAO",
    "ReadableRepository",
    "SortCriterion",
    "WriteableDAO",
    "WriteableRepository",
    "resolve_entity_metadata",
    "to_order_by",
]
