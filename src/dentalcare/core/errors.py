from __future__ import annotations

from typing import Any


class NotFoundError(LookupError):
    """A single-entity lookup by identifier had no match."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")
