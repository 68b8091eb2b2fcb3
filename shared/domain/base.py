"""
Base Domain Classes

Foundational building blocks for the domain layer:
- Entity: Objects with identity, compared by id
- ValueObject: Immutable objects compared by value
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(kw_only=True)
class Entity(ABC):
    """
    Base class for all entities

    An entity without an id has not been persisted yet; the store assigns
    the id on first save. Two persisted entities are equal if their ids
    are equal.
    """
    id: UUID | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None

    @property
    def is_new(self) -> bool:
        return self.id is None

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self):
        return hash(self.id) if self.id is not None else id(self)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass
