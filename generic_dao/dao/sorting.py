"""Sort criteria and their translation into ORM ordering clauses."""

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import inspect

from generic_dao.enums import SortDirection


class SortCriterion(BaseModel):
    """One ordering rule: a property name plus a direction.

    Immutable. Criteria are applied in the order given; later criteria only
    break ties left by earlier ones.
    """

    model_config = ConfigDict(frozen=True)

    property_name: str = Field(min_length=1)
    ascending: bool = True

    @classmethod
    def asc(cls, property_name: str) -> "SortCriterion":
        return cls(property_name=property_name, ascending=True)

    @classmethod
    def desc(cls, property_name: str) -> "SortCriterion":
        return cls(property_name=property_name, ascending=False)

    @property
    def direction(self) -> SortDirection:
        return SortDirection.ASC if self.ascending else SortDirection.DESC

    def __str__(self) -> str:
        return f"{self.property_name} {self.direction}"


def to_order_by(entity_type: type, sort_criteria: Iterable[SortCriterion]) -> list[Any]:
    """Translate sort criteria into ``ORDER BY`` clauses for ``entity_type``.

    Raises:
        KeyError: If a criterion names a property the entity does not map.
    """
    mapper = inspect(entity_type)
    clauses = []
    for criterion in sort_criteria:
        if criterion.property_name not in mapper.column_attrs:
            raise KeyError(criterion.property_name)
        column = getattr(entity_type, criterion.property_name)
        clauses.append(column.asc() if criterion.ascending else column.desc())
    return clauses
