"""Entity mapping metadata lookup."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import InstrumentedAttribute, Mapper

from generic_dao.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityMetadata:
    """Mapping facts about one entity type, resolved once per DAO.

    Attributes:
        entity_type: The mapped class.
        primary_key_property_name: Attribute holding the identifier.
        mapper: SQLAlchemy mapper of ``entity_type``.
    """

    entity_type: type
    primary_key_property_name: str
    mapper: Mapper = field(repr=False, compare=False)

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @property
    def primary_key(self) -> InstrumentedAttribute:
        return getattr(self.entity_type, self.primary_key_property_name)

    def scalar_property_names(self) -> list[str]:
        """Column-backed attributes other than the identifier, in mapping order."""
        return [
            attr.key
            for attr in self.mapper.column_attrs
            if attr.key != self.primary_key_property_name
        ]

    def identifier_of(self, obj: Any) -> Any:
        return getattr(obj, self.primary_key_property_name)


def resolve_entity_metadata(entity_type: type) -> EntityMetadata:
    """Look up the mapping of ``entity_type``.

    Raises:
        ConfigurationError: If the type is not mapped, or is mapped with a
            composite primary key.
    """
    mapper = inspect(entity_type, raiseerr=False)
    if not isinstance(mapper, Mapper):
        name = getattr(entity_type, "__name__", repr(entity_type))
        logger.error("Class %s is not mapped", name)
        raise ConfigurationError(f"Class {name} is not mapped")

    if len(mapper.primary_key) != 1:
        logger.error("Class %s has a composite primary key", entity_type.__name__)
        raise ConfigurationError(
            f"Class {entity_type.__name__} must have exactly one primary key column"
        )

    pk_property = mapper.get_property_by_column(mapper.primary_key[0])
    return EntityMetadata(
        entity_type=entity_type,
        primary_key_property_name=pk_property.key,
        mapper=mapper,
    )
