"""Read/write DAO facade."""

import logging
from typing import Any, Generic, Iterable

from sqlalchemy import Select

from generic_dao.dao.base import K, T, _bound_entity_type, _bound_sort_criteria
from generic_dao.dao.readable import ReadableDAO
from generic_dao.dao.sorting import SortCriterion
from generic_dao.dao.writeable import WriteableDAO
from generic_dao.database import Database
from generic_dao.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class GenericDAO(Generic[T, K]):
    """Full CRUD access to one entity type.

    Holds one ReadableDAO and one WriteableDAO bound to the same entity type,
    database and default sort criteria, and forwards every call to them.

    Usage:
        books = GenericDAO(db, Book, [SortCriterion.asc("title")])
        async with db.session():
            await books.save(Book(title="Dune"))
            page = await books.find_page(0, 20)
    """

    entity_type: type | None = None
    default_sort_criteria: tuple[SortCriterion, ...] = ()

    def __init__(
        self,
        database: Database,
        entity_type: type[T] | None = None,
        default_sort_criteria: Iterable[SortCriterion] | None = None,
    ):
        if database is None:
            raise InvalidArgumentError("Parameter database cannot be None")

        self.entity_type = _bound_entity_type(type(self), entity_type)
        self.default_sort_criteria = _bound_sort_criteria(type(self), default_sort_criteria)
        self.readable: ReadableDAO[T, K] = ReadableDAO(
            database, self.entity_type, self.default_sort_criteria
        )
        self.writeable: WriteableDAO[T, K] = WriteableDAO(
            database,
            self.entity_type,
            self.default_sort_criteria,
            metadata=self.readable.metadata,
        )

    @property
    def db(self) -> Database:
        return self.readable.db

    @property
    def primary_key_property_name(self) -> str:
        return self.readable.primary_key_property_name

    @property
    def default_order_by(self) -> list[Any]:
        return self.readable.default_order_by

    # Reads

    async def count_all(self) -> int:
        return await self.readable.count_all()

    async def find_all(self) -> list[T]:
        return await self.readable.find_all()

    async def find_by_id(self, entity_id: K) -> T | None:
        return await self.readable.find_by_id(entity_id)

    async def find_by_ids(self, ids: Iterable[K]) -> list[T]:
        return await self.readable.find_by_ids(ids)

    async def find_by_example(self, example: T | None) -> list[T]:
        return await self.readable.find_by_example(example)

    async def find_page(
        self, first_result: int, max_results: int, *sort_criteria: SortCriterion
    ) -> list[T]:
        return await self.readable.find_page(first_result, max_results, *sort_criteria)

    def reattach(self, obj: T) -> T:
        return self.readable.reattach(obj)

    async def refresh(self, obj: T) -> None:
        await self.readable.refresh(obj)

    def order_by(self, *sort_criteria: SortCriterion) -> list[Any]:
        return self.readable.order_by(*sort_criteria)

    def select_all(self, *sort_criteria: SortCriterion) -> Select:
        return self.readable.select_all(*sort_criteria)

    def select_page(
        self, first_result: int, max_results: int, *sort_criteria: SortCriterion
    ) -> Select:
        return self.readable.select_page(first_result, max_results, *sort_criteria)

    def example_criteria(self, example: T) -> list[Any]:
        return self.readable.example_criteria(example)

    # Writes

    async def save(self, obj: T) -> None:
        await self.writeable.save(obj)

    async def update(self, obj: T) -> T:
        return await self.writeable.update(obj)

    async def delete_by_id(self, entity_id: K) -> None:
        await self.writeable.delete_by_id(entity_id)

    async def delete(self, obj: T) -> None:
        await self.writeable.delete(obj)

    def evict(self, obj: T) -> None:
        self.writeable.evict(obj)

    async def merge(self, obj: T) -> T:
        return await self.writeable.merge(obj)

    def is_persistent(self, obj: T) -> bool:
        return self.writeable.is_persistent(obj)
