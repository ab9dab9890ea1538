"""Batch decoding of raw log streams.

This package provides:
- `decode_logs`: decode many logs through a registry or a single decoder,
  counting (never raising on) per-log failures
- `decode_jsonl`: the same over a JSONL dump, counting malformed lines as failed
- `BatchStats` / `BatchResult` / `DecodedLog` result types
"""

from inkscale.orchestration.batch import BatchResult, BatchStats, DecodedLog, decode_jsonl, decode_logs

__all__ = [
    "BatchResult",
    "BatchStats",
    "DecodedLog",
    "decode_jsonl",
    "decode_logs",
]
