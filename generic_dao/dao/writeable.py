"""Mutation DAO operations."""

import logging
from typing import Any

from sqlalchemy import bindparam, delete, inspect
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.attributes import flag_modified

from generic_dao.dao.base import BaseDAO, K, T
from generic_dao.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class WriteableDAO(BaseDAO[T, K]):
    """Insert, update and delete operations for one entity type.

    Writes are flushed before returning so generated identifiers are
    assigned and storage errors are raised at the call; committing is left to
    the caller's ``db.session()`` block.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        # delete from <entity> where <primary key> = :id
        self._delete_by_id_stmt = (
            delete(self.entity_type)
            .where(self.metadata.primary_key == bindparam("id"))
            .execution_options(synchronize_session="fetch")
        )

    async def save(self, obj: T) -> None:
        """Insert ``obj``; a generated identifier is set on it."""
        self._require(obj)
        session = self._get_session()
        session.add(obj)
        await session.flush()
        logger.debug(
            "Saved %s %s", self.metadata.entity_name, self.metadata.identifier_of(obj)
        )

    async def update(self, obj: T) -> T:
        """Write the state of a persistent ``obj`` and return it.

        A detached instance is attached without being reloaded and without a
        version check. An instance built by hand with an identifier is treated
        as a detached copy of that row and all of its set columns are written.

        Raises:
            InvalidArgumentError: If ``obj`` is None or has no identifier.
        """
        if not self.is_persistent(obj):
            raise InvalidArgumentError("Object not persistent")

        session = self._get_session()
        state = inspect(obj)
        if state.transient:
            make_transient_to_detached(obj)
            session.add(obj)
            for name in self.metadata.scalar_property_names():
                if name in state.dict:
                    flag_modified(obj, name)
        else:
            session.add(obj)
        await session.flush()
        logger.debug(
            "Updated %s %s", self.metadata.entity_name, self.metadata.identifier_of(obj)
        )
        return obj

    async def delete_by_id(self, entity_id: K) -> None:
        """Delete the row with identifier ``entity_id`` without loading it."""
        await self._get_session().execute(self._delete_by_id_stmt, {"id": entity_id})
        logger.debug("Deleted %s %s", self.metadata.entity_name, entity_id)

    async def delete(self, obj: T) -> None:
        """Delete a loaded (or detached) instance."""
        self._require(obj)
        session = self._get_session()
        await session.delete(obj)
        await session.flush()

    def evict(self, obj: T) -> None:
        """Detach ``obj`` from the current session; storage is untouched."""
        self._require(obj)
        session = self._get_session()
        if obj in session:
            session.expunge(obj)

    async def merge(self, obj: T) -> T:
        """Copy the state of ``obj`` onto the session's persistent instance.

        Returns:
            The persistent instance, which is not ``obj`` when ``obj`` is
            detached.
        """
        self._require(obj)
        return await self._get_session().merge(obj)

    def is_persistent(self, obj: T) -> bool:
        """Whether ``obj`` has an identifier.

        Raises:
            InvalidArgumentError: If ``obj`` is None.
        """
        if obj is None:
            raise InvalidArgumentError("Parameter obj cannot be None")
        return self.metadata.identifier_of(obj) is not None
