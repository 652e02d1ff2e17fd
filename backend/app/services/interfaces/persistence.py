"""
Persistence gateway interface.

The normalizer and validator only need three things from storage:
an existence check by id, a write that runs a pre-commit hook first,
and a unique constraint on Event.slug reported as ConflictError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

from app.core.result import Result

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class PendingWrite:
    """
    A candidate document on its way to the store.

    Attributes:
        fields: Full candidate values (stored values merged with the changes)
        modified: Names of the fields this write changes
        is_new: True for an insert, False for an update
    """

    fields: Mapping[str, Any]
    modified: frozenset = field(default_factory=frozenset)
    is_new: bool = True

    @classmethod
    def insert(cls, fields: Mapping[str, Any]) -> "PendingWrite":
        return cls(fields=dict(fields), modified=frozenset(fields), is_new=True)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def is_modified(self, name: str) -> bool:
        return self.is_new or name in self.modified


# A hook returns the normalized record (a dataclass) or the first error found
PreCommitHook = Callable[[PendingWrite], Awaitable[Result]]


class PersistenceGateway(ABC):
    """
    Interface for the durable store behind the write hooks.

    Implementations:
    - SqlAlchemyGateway: async SQLAlchemy session (app.db.gateway)
    """

    @abstractmethod
    async def exists_by_id(self, event_id: Any) -> bool:
        """Return True if an Event with this identity is stored."""
        ...

    @abstractmethod
    async def save(
        self,
        model: type,
        write: PendingWrite,
        hook: PreCommitHook,
        instance: Optional[ModelT] = None,
    ) -> ModelT:
        """
        Run `hook` on `write` and durably commit the record it returns.

        Raises:
            ValidationError: the hook rejected the write; nothing is written
            ConflictError: a unique constraint rejected the commit
        """
        ...
