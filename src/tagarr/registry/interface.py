"""Protocol for tag registries.

A registry is anything that stores movies and the tags attached to them.
RadarrClient talks to a real instance; InMemoryRegistry backs the tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from tagarr.registry.models import Item, Label, LabelOp


class LabelRegistry(Protocol):
    """Movie and tag operations used by the classifiers and reconciler.

    All calls are synchronous. Failures raise RegistryUnavailable.
    """

    name: str

    def validate_connection(self) -> bool:
        """Check that the registry is reachable and the key is accepted."""
        ...

    def list_items(self) -> list[Item]:
        """Return every movie in the registry."""
        ...

    def get_item(self, item_id: int) -> Item:
        """Return one movie with its current tags."""
        ...

    def list_labels(self) -> list[Label]:
        """Return every tag defined in the registry."""
        ...

    def create_label(self, name: str) -> int:
        """Create a tag and return its id."""
        ...

    def edit_item_labels(
        self, item_ids: Sequence[int], label_ids: Sequence[int], op: LabelOp
    ) -> None:
        """Add or remove tags on many movies in a single call."""
        ...

    def delete_label(self, label_id: int) -> None:
        """Delete a tag definition."""
        ...
