"""SCALE event decoding driven by Ink! v6 metadata.

This package provides:
- `ScaleValueDecoder` / `DecodeContext`: recursive, type-directed value decoding
- `EventDecoder` / `decode_event`: topic + data routing for one event
- Hex, signature and integer helpers
"""

from inkscale.decoding.decoder import EventDecoder, decode_event
from inkscale.decoding.scale import DecodeContext, ScaleValueDecoder, decode_compact, read_compact
from inkscale.decoding.utils import normalize_signature, snake_case, to_bytes

__all__ = [
    "EventDecoder",
    "decode_event",
    "DecodeContext",
    "ScaleValueDecoder",
    "decode_compact",
    "read_compact",
    "normalize_signature",
    "snake_case",
    "to_bytes",
]
