"""Metadata infrastructure module: concrete type metadata providers."""

from .class_provider import ClassTypeMetadataProvider, annotate_type
from .in_memory_provider import InMemoryTypeMetadataProvider
from .yaml_provider import YamlTypeMetadataProvider

__all__ = [
    "ClassTypeMetadataProvider",
    "InMemoryTypeMetadataProvider",
    "YamlTypeMetadataProvider",
    "annotate_type",
]
