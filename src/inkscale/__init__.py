from __future__ import annotations

from .core.config import DecoderConfig, IndexedArgPolicy
from .core.models import DecodedEvent, EventLog, VersionEntry
from .decoding.decoder import EventDecoder, decode_event
from .decoding.scale import ScaleValueDecoder, decode_compact
from .errors import InkScaleError
from .metadata.catalog import MetadataCatalog
from .orchestration.batch import decode_jsonl, decode_logs
from .routing.contracts import load_contracts
from .routing.registry import VersionRegistry, merge_entry

__all__ = [
    "MetadataCatalog",
    "ScaleValueDecoder",
    "decode_compact",
    "EventDecoder",
    "decode_event",
    "DecoderConfig",
    "IndexedArgPolicy",
    "DecodedEvent",
    "EventLog",
    "VersionEntry",
    "VersionRegistry",
    "merge_entry",
    "load_contracts",
    "decode_jsonl",
    "decode_logs",
    "InkScaleError",
]
