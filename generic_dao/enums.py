"""StrEnum definitions for type-safe constants."""

from enum import StrEnum


class SortDirection(StrEnum):
    """Ordering direction of a sort criterion."""

    ASC = "ASC"
    DESC = "DESC"
