"""Generic async DAO layer on top of SQLAlchemy."""

from generic_dao.config import PersistenceConfig
from generic_dao.dao import (
    BaseDAO,
    EntityMetadata,
    GenericDAO,
    ReadableDAO,
    SortCriterion,
    WriteableDAO,
)
from generic_dao.database import Base, Database
from generic_dao.errors import ConfigurationError, DAOError, InvalidArgumentError

__all__ = [
    "Base",
    "BaseDAO",
    "ConfigurationError",
    "DAOError",
    "Database",
    "EntityMetadata",
    "GenericDAO",
    "InvalidArgumentError",
    "PersistenceConfig",
    "ReadableDAO",
    "SortCriterion",
    "WriteableDAO",
]
