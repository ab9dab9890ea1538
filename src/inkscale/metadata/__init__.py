"""Ink! v6 metadata loading.

This package provides:
- Pydantic models for the metadata document (events, type table, contract info)
- `MetadataCatalog`: read-only type/event indices built once per document
"""

from inkscale.metadata.catalog import MetadataCatalog
from inkscale.metadata.document import InkEvent, InkEventArg, InkMetadata, InkTypeEntry

__all__ = [
    "MetadataCatalog",
    "InkEvent",
    "InkEventArg",
    "InkMetadata",
    "InkTypeEntry",
]
