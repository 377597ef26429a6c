"""Lookup of entity ids referenced by triggers (users, tags, counterparts)."""
from abc import ABC, abstractmethod
from typing import Iterable
import structlog
from pydantic import BaseModel

log = structlog.get_logger()


class EntityRef(BaseModel):
    """Display object for an id referenced in a trigger."""
    id: str
    kind: str
    display_name: str
    # False when the directory does not know the id
    found: bool = True


class EntityDirectory(ABC):
    """Abstract interface resolving ids to display objects."""

    @abstractmethod
    async def resolve(self, kind: str, ids: Iterable[str]) -> list[EntityRef]:
        """
        Resolve ids of one entity kind.

        Args:
            kind: "user", "tag" or "counterpart"
            ids: Ids to resolve

        Returns:
            One EntityRef per id, in input order; unknown ids yield a
            placeholder with ``found=False``
        """
        pass


class InMemoryEntityDirectory(EntityDirectory):
    """Directory backed by a dict, used by the API and tests."""

    def __init__(self):
        self._entities: dict[tuple[str, str], str] = {}

    def register(self, kind: str, entity_id: str, display_name: str):
        self._entities[(kind, entity_id)] = display_name

    async def resolve(self, kind: str, ids: Iterable[str]) -> list[EntityRef]:
        refs = []
        for entity_id in ids:
            name = self._entities.get((kind, entity_id))
            if name is None:
                log.debug("directory.unknown_id", kind=kind, id=entity_id)
                refs.append(EntityRef(id=entity_id, kind=kind, display_name=entity_id, found=False))
            else:
                refs.append(EntityRef(id=entity_id, kind=kind, display_name=name))
        return refs


# Global directory instance backing the HTTP API
entity_directory = InMemoryEntityDirectory()
