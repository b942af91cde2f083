"""Unit tests for DAO construction and entity metadata resolution.

Tests verify:
- Unmapped and composite-key entity types are rejected at construction
- A missing database or entity type is rejected at construction
- Entity type and default sort criteria can be bound per subclass
"""

import pytest

from entities import Dummy, NotAnEntity, Pairing, Tag
from generic_dao.dao import (
    GenericDAO,
    ReadableDAO,
    SortCriterion,
    WriteableDAO,
    resolve_entity_metadata,
)
from generic_dao.database import Database
from generic_dao.errors import ConfigurationError, DAOError, InvalidArgumentError


class DummyDAO(GenericDAO[Dummy, int]):
    entity_type = Dummy
    default_sort_criteria = (SortCriterion.asc("string"),)


class TestEntityMetadata:
    """Tests for resolve_entity_metadata."""

    def test_resolves_generated_primary_key(self):
        metadata = resolve_entity_metadata(Dummy)

        assert metadata.entity_type is Dummy
        assert metadata.primary_key_property_name == "id"
        assert metadata.entity_name == "Dummy"

    def test_resolves_named_primary_key(self):
        metadata = resolve_entity_metadata(Tag)

        assert metadata.primary_key_property_name == "code"
        assert metadata.primary_key is Tag.code

    def test_scalar_properties_exclude_key_and_relationships(self):
        metadata = resolve_entity_metadata(Dummy)

        assert metadata.scalar_property_names() == ["string", "number"]

    def test_unmapped_class_is_rejected(self):
        with pytest.raises(ConfigurationError, match="NotAnEntity is not mapped"):
            resolve_entity_metadata(NotAnEntity)

    def test_non_class_is_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_entity_metadata("Dummy")

    def test_composite_key_is_rejected(self):
        with pytest.raises(ConfigurationError):
            resolve_entity_metadata(Pairing)


class TestDAOConstruction:
    """Tests for fail-fast DAO construction."""

    @pytest.mark.parametrize("dao_class", [ReadableDAO, WriteableDAO, GenericDAO])
    async def test_unmapped_entity_fails(self, test_db: Database, dao_class):
        with pytest.raises(ConfigurationError):
            dao_class(test_db, NotAnEntity)

    @pytest.mark.parametrize("dao_class", [ReadableDAO, WriteableDAO, GenericDAO])
    def test_missing_database_fails(self, dao_class):
        with pytest.raises(InvalidArgumentError):
            dao_class(None, Dummy)

    @pytest.mark.parametrize("dao_class", [ReadableDAO, WriteableDAO, GenericDAO])
    async def test_missing_entity_type_fails(self, test_db: Database, dao_class):
        with pytest.raises(InvalidArgumentError):
            dao_class(test_db)

    async def test_unknown_default_sort_property_fails(self, test_db: Database):
        with pytest.raises(ConfigurationError, match="colour"):
            GenericDAO(test_db, Dummy, [SortCriterion.asc("colour")])

    async def test_errors_share_a_base_class(self, test_db: Database):
        with pytest.raises(DAOError):
            GenericDAO(test_db, NotAnEntity)
        assert issubclass(InvalidArgumentError, ValueError)

    async def test_subclass_binds_entity_type_and_sorting(self, test_db: Database):
        dao = DummyDAO(test_db)

        assert dao.entity_type is Dummy
        assert dao.primary_key_property_name == "id"
        assert dao.default_sort_criteria == (SortCriterion.asc("string"),)
        assert dao.readable.default_sort_criteria == dao.default_sort_criteria
        assert dao.writeable.entity_type is Dummy

    async def test_constructor_arguments_override_class_binding(self, test_db: Database):
        dao = DummyDAO(test_db, default_sort_criteria=[SortCriterion.desc("number")])

        assert dao.default_sort_criteria == (SortCriterion.desc("number"),)
        assert str(dao.default_order_by[0]) == str(Dummy.number.desc())

    async def test_default_order_by_is_empty_without_criteria(self, test_db: Database):
        dao = GenericDAO(test_db, Tag)

        assert dao.default_sort_criteria == ()
        assert dao.default_order_by == []
        assert dao.primary_key_property_name == "code"
