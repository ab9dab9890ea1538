"""Core data models, configuration and interfaces.

This package provides:
- Type definition kinds, event specs, decoded events, version entries
- Configuration classes (DecoderConfig, DecodeRunConfig, IndexedArgPolicy)
- The IEventDecoder protocol used by the version registry
"""

from inkscale.core.config import DecodeRunConfig, DecoderConfig, IndexedArgPolicy
from inkscale.core.interfaces import IEventDecoder
from inkscale.core.models import (
    AddressDef,
    ArgSpec,
    ArrayDef,
    CompactDef,
    CompositeDef,
    DecodedEvent,
    EventLog,
    EventSpec,
    Field,
    PrimitiveDef,
    SequenceDef,
    TupleDef,
    TypeDefinition,
    UnsupportedDef,
    VariantCase,
    VariantDef,
    VersionEntry,
)

__all__ = [
    "DecodeRunConfig",
    "DecoderConfig",
    "IndexedArgPolicy",
    "IEventDecoder",
    "AddressDef",
    "ArgSpec",
    "ArrayDef",
    "CompactDef",
    "CompositeDef",
    "DecodedEvent",
    "EventLog",
    "EventSpec",
    "Field",
    "PrimitiveDef",
    "SequenceDef",
    "TupleDef",
    "TypeDefinition",
    "UnsupportedDef",
    "VariantCase",
    "VariantDef",
    "VersionEntry",
]
