"""Tag registries: the Radarr client and the protocol it implements."""

from tagarr.registry.client import RadarrClient, RegistryAuthError, RegistryUnavailable
from tagarr.registry.interface import LabelRegistry
from tagarr.registry.models import Item, Label, LabelOp

__all__ = [
    "Item",
    "Label",
    "LabelOp",
    "LabelRegistry",
    "RadarrClient",
    "RegistryAuthError",
    "RegistryUnavailable",
]
