"""Base DAO class binding one entity type to one session provider."""

import logging
from typing import Any, Generic, Iterable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from generic_dao.dao.metadata import EntityMetadata, resolve_entity_metadata
from generic_dao.dao.sorting import SortCriterion, to_order_by
from generic_dao.database import Database
from generic_dao.errors import ConfigurationError, InvalidArgumentError

logger = logging.getLogger(__name__)

# Entity type
T = TypeVar("T")
# Primary key type
K = TypeVar("K")


def _bound_entity_type(cls: type, entity_type: type | None) -> type:
    entity_type = entity_type if entity_type is not None else getattr(cls, "entity_type", None)
    if entity_type is None:
        raise InvalidArgumentError(
            f"{cls.__name__} needs an entity_type argument or class attribute"
        )
    return entity_type


def _bound_sort_criteria(
    cls: type, default_sort_criteria: Iterable[SortCriterion] | None
) -> tuple[SortCriterion, ...]:
    if default_sort_criteria is None:
        default_sort_criteria = getattr(cls, "default_sort_criteria", ())
    return tuple(default_sort_criteria)


class BaseDAO(Generic[T, K]):
    """Base class for Data Access Objects.

    A DAO is bound to one mapped entity type and one ``Database``. The entity
    type comes from the ``entity_type`` constructor argument or, for
    dedicated subclasses, from an ``entity_type`` class attribute:

        class BookDAO(GenericDAO[Book, int]):
            entity_type = Book
            default_sort_criteria = (SortCriterion.asc("title"),)

    Everything resolved here is immutable after construction, so one instance
    can serve many concurrent tasks; each task works in its own session.
    """

    entity_type: type | None = None
    default_sort_criteria: tuple[SortCriterion, ...] = ()

    def __init__(
        self,
        database: Database,
        entity_type: type[T] | None = None,
        default_sort_criteria: Iterable[SortCriterion] | None = None,
        *,
        metadata: EntityMetadata | None = None,
    ):
        """Initialize DAO with database connection.

        Args:
            database: Database instance for session management.
            entity_type: Mapped class handled by this DAO. Overrides the
                class attribute of the same name.
            default_sort_criteria: Ordering used when a query gets none.
            metadata: Already resolved metadata to share with a sibling DAO;
                skips resolving the entity type again.

        Raises:
            InvalidArgumentError: If ``database`` or the entity type is missing.
            ConfigurationError: If the entity type is not mapped, or a
                default sort criterion names an unknown property.
        """
        if database is None:
            raise InvalidArgumentError("Parameter database cannot be None")

        self._db = database
        if metadata is None:
            metadata = resolve_entity_metadata(_bound_entity_type(type(self), entity_type))
        self._metadata: EntityMetadata = metadata
        # Instance attributes shadow the class-level binding hooks
        self.entity_type = self._metadata.entity_type
        self.default_sort_criteria = _bound_sort_criteria(type(self), default_sort_criteria)
        try:
            self._default_order_by = to_order_by(self.entity_type, self.default_sort_criteria)
        except KeyError as e:
            raise ConfigurationError(
                f"Default sort property {e.args[0]!r} is not mapped on "
                f"{self._metadata.entity_name}"
            ) from e

        logger.debug(
            "%s bound to %s (key %s)",
            type(self).__name__,
            self._metadata.entity_name,
            self._metadata.primary_key_property_name,
        )

    @property
    def db(self) -> Database:
        """Get the database instance."""
        return self._db

    @property
    def metadata(self) -> EntityMetadata:
        return self._metadata

    @property
    def primary_key_property_name(self) -> str:
        return self._metadata.primary_key_property_name

    @property
    def default_order_by(self) -> list[Any]:
        """Ordering clauses computed once from the default sort criteria."""
        return list(self._default_order_by)

    def _get_session(self) -> AsyncSession:
        """Get the calling task's session.

        Transactions are delimited by the caller with ``db.session()``.
        """
        return self._db.current_session()

    def _require(self, obj: Any, name: str = "obj") -> None:
        if obj is None:
            raise InvalidArgumentError(f"Parameter {name} cannot be None")
