from .type_metadata_provider import TypeMetadataProvider

__all__ = [
    "TypeMetadataProvider",
]
