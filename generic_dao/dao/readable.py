"""Read-only DAO operations."""

import logging
from numbers import Number
from typing import Any, Iterable

from sqlalchemy import Select, func, inspect, select

from generic_dao.dao.base import BaseDAO, K, T
from generic_dao.dao.sorting import SortCriterion, to_order_by
from generic_dao.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def _is_zero(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool) and value == 0


class ReadableDAO(BaseDAO[T, K]):
    """Query operations for one entity type.

    Every method runs in the calling task's session, so instances returned
    here belong to the caller's unit-of-work until evicted or the session is
    removed. Absent rows are reported as ``None`` / ``[]``, never raised.
    """

    async def count_all(self) -> int:
        """Count every row of the entity type."""
        stmt = select(func.count()).select_from(self.entity_type)
        return await self._get_session().scalar(stmt)

    async def find_all(self) -> list[T]:
        """Return every instance, ordered by the default sort criteria."""
        result = await self._get_session().scalars(self.select_all())
        return list(result.all())

    async def find_by_id(self, entity_id: K) -> T | None:
        """Return the instance with identifier ``entity_id``, or None."""
        return await self._get_session().get(self.entity_type, entity_id)

    async def find_by_ids(self, ids: Iterable[K]) -> list[T]:
        """Return the instances whose identifier is in ``ids``.

        Order is unspecified.
        """
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self.entity_type).where(self.metadata.primary_key.in_(ids))
        result = await self._get_session().scalars(stmt)
        return list(result.all())

    async def find_by_example(self, example: T | None) -> list[T]:
        """Return the instances resembling ``example``.

        See ``example_criteria`` for the matching rules. ``None`` matches
        everything, ordered like ``find_all``.
        """
        stmt = self.select_all()
        if example is not None:
            stmt = stmt.where(*self.example_criteria(example))
        result = await self._get_session().scalars(stmt)
        return list(result.all())

    async def find_page(
        self, first_result: int, max_results: int, *sort_criteria: SortCriterion
    ) -> list[T]:
        """Return at most ``max_results`` instances starting at ``first_result``.

        Without ``sort_criteria`` the default sort criteria apply.
        """
        stmt = self.select_page(first_result, max_results, *sort_criteria)
        result = await self._get_session().scalars(stmt)
        return list(result.all())

    def reattach(self, obj: T) -> T:
        """Attach a detached instance to the current session and return it.

        No SQL is emitted: the instance is neither reloaded nor version
        checked.
        """
        self._require(obj)
        if not inspect(obj).has_identity:
            raise InvalidArgumentError("Object was never persisted and cannot be reattached")
        self._get_session().add(obj)
        return obj

    async def refresh(self, obj: T) -> None:
        """Reload the state of an attached instance from storage."""
        self._require(obj)
        await self._get_session().refresh(obj)

    def order_by(self, *sort_criteria: SortCriterion) -> list[Any]:
        """Ordering clauses for ``sort_criteria``, or the defaults when empty."""
        if not sort_criteria:
            return self.default_order_by
        try:
            return to_order_by(self.entity_type, sort_criteria)
        except KeyError as e:
            raise InvalidArgumentError(
                f"Cannot sort {self.metadata.entity_name} by unknown property {e.args[0]!r}"
            ) from e

    def select_all(self, *sort_criteria: SortCriterion) -> Select:
        """A ``SELECT`` of the entity type with ordering applied."""
        return select(self.entity_type).order_by(*self.order_by(*sort_criteria))

    def select_page(
        self, first_result: int, max_results: int, *sort_criteria: SortCriterion
    ) -> Select:
        """``select_all`` restricted to ``[first_result, first_result + max_results)``."""
        if first_result < 0 or max_results < 0:
            raise InvalidArgumentError("first_result and max_results cannot be negative")
        return self.select_all(*sort_criteria).offset(first_result).limit(max_results)

    def example_criteria(self, example: T) -> list[Any]:
        """Filters matching the scalar properties set on ``example``.

        The identifier, relationships, ``None`` values and numeric zeroes are
        ignored. Strings match case-insensitively anywhere in the column;
        other values must be equal.
        """
        criteria = []
        for name in self.metadata.scalar_property_names():
            value = getattr(example, name, None)
            if value is None or _is_zero(value):
                continue
            column = getattr(self.entity_type, name)
            if isinstance(value, str):
                criteria.append(column.icontains(value, autoescape=True))
            else:
                criteria.append(column == value)
        logger.debug(
            "Example of %s matched on %d properties", self.metadata.entity_name, len(criteria)
        )
        return criteria
