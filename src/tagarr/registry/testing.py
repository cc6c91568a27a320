"""Testing utilities for code that talks to a tag registry.

Provides an in-memory registry and an Item factory so classifiers and the
reconciler can be exercised without a Radarr instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from tagarr.registry.client import RegistryUnavailable
from tagarr.registry.models import Item, Label, LabelOp


def make_item(
    item_id: int = 1,
    title: str = "Test Movie",
    year: int = 2020,
    labels: Iterable[int] = (),
    **kwargs: Any,
) -> Item:
    """Create an Item for testing.

    Args:
        item_id: Radarr movie id.
        title: Movie title.
        year: Release year.
        labels: Tag ids currently attached.
        **kwargs: Additional Item attributes. external_id defaults to
            1000 + item_id and has_file to True.

    Returns:
        Item instance.
    """
    kwargs.setdefault("external_id", 1000 + item_id)
    kwargs.setdefault("has_file", True)
    return Item(
        id=item_id,
        title=title,
        year=year,
        labels=frozenset(labels),
        **kwargs,
    )


class InMemoryRegistry:
    """LabelRegistry backed by dictionaries.

    Mutating calls are recorded in ``calls`` so tests can assert on
    request volume and batching.
    """

    def __init__(
        self,
        name: str = "Primary",
        items: Iterable[Item] = (),
        labels: Iterable[Label] = (),
    ) -> None:
        self.name = name
        self.items: dict[int, Item] = {item.id: item for item in items}
        self.labels: dict[int, Label] = {label.id: label for label in labels}
        self.calls: list[tuple[Any, ...]] = []
        self.fail_on: set[str] = set()
        self._next_label_id = max(self.labels, default=0) + 1

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RegistryUnavailable(f"{self.name}: {operation} failed")

    @property
    def mutation_count(self) -> int:
        """Number of create/edit/delete calls made so far."""
        return len(self.calls)

    def label_id(self, name: str) -> int | None:
        """Return the id of the named tag, or None."""
        for label in self.labels.values():
            if label.name == name:
                return label.id
        return None

    def label_names(self, item_id: int) -> set[str]:
        """Return the names of the tags attached to a movie."""
        return {
            self.labels[label_id].name
            for label_id in self.items[item_id].labels
            if label_id in self.labels
        }

    def validate_connection(self) -> bool:
        self._check("validate_connection")
        return True

    def list_items(self) -> list[Item]:
        self._check("list_items")
        return list(self.items.values())

    def get_item(self, item_id: int) -> Item:
        self._check("get_item")
        if item_id not in self.items:
            raise RegistryUnavailable(f"{self.name}: movie {item_id} not found")
        return self.items[item_id]

    def list_labels(self) -> list[Label]:
        self._check("list_labels")
        return list(self.labels.values())

    def create_label(self, name: str) -> int:
        self._check("create_label")
        label_id = self._next_label_id
        self._next_label_id += 1
        self.labels[label_id] = Label(id=label_id, name=name)
        self.calls.append(("create_label", name))
        return label_id

    def edit_item_labels(
        self, item_ids: Sequence[int], label_ids: Sequence[int], op: LabelOp
    ) -> None:
        self._check("edit_item_labels")
        self.calls.append(("edit_item_labels", tuple(item_ids), tuple(label_ids), op))
        for item_id in item_ids:
            item = self.items[item_id]
            if op is LabelOp.ADD:
                labels = item.labels | set(label_ids)
            else:
                labels = item.labels - set(label_ids)
            self.items[item_id] = replace(item, labels=frozenset(labels))

    def delete_label(self, label_id: int) -> None:
        self._check("delete_label")
        self.calls.append(("delete_label", label_id))
        self.labels.pop(label_id, None)
        for item_id, item in self.items.items():
            if label_id in item.labels:
                self.items[item_id] = replace(item, labels=item.labels - {label_id})
