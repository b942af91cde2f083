"""Capability interfaces implemented by the DAO classes."""

from typing import Iterable, Protocol, TypeVar, runtime_checkable

from generic_dao.dao.sorting import SortCriterion

_T = TypeVar("_T")
_K = TypeVar("_K", contravariant=True)


@runtime_checkable
class ReadableRepository(Protocol[_T, _K]):
    """Read-only access to one entity type."""

    async def count_all(self) -> int: ...

    async def find_all(self) -> list[_T]: ...

    async def find_by_id(self, entity_id: _K) -> _T | None: ...

    async def find_by_ids(self, ids: Iterable[_K]) -> list[_T]: ...

    async def find_by_example(self, example: _T | None) -> list[_T]: ...

    async def find_page(
        self, first_result: int, max_results: int, *sort_criteria: SortCriterion
    ) -> list[_T]: ...

    def reattach(self, obj: _T) -> _T: ...

    async def refresh(self, obj: _T) -> None: ...


@runtime_checkable
class WriteableRepository(Protocol[_T, _K]):
    """Mutating access to one entity type."""

    async def save(self, obj: _T) -> None: ...

    async def update(self, obj: _T) -> _T: ...

    async def delete_by_id(self, entity_id: _K) -> None: ...

    async def delete(self, obj: _T) -> None: ...

    def evict(self, obj: _T) -> None: ...

    async def merge(self, obj: _T) -> _T: ...

    def is_persistent(self, obj: _T) -> bool: ...
