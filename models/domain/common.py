"""
Shared building blocks for domain models.
"""

from enum import Enum


class Lifecycle(str, Enum):
    """
    Soft-delete state of a stored record.

    Rows are never hard-deleted; the `deleted` column is mapped onto this
    state when rows are loaded.
    """

    ACTIVE = "active"
    DELETED = "deleted"

    @classmethod
    def from_deleted_flag(cls, deleted) -> "Lifecycle":
        return cls.DELETED if deleted else cls.ACTIVE
