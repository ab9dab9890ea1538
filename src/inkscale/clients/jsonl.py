"""Reader for JSONL dumps of raw contract logs.

Each line is one log as produced by an ingestion collaborator, e.g.::

    {"address": "0x...", "topics": ["0x...", ...], "data": "0x...",
     "blockNumber": 1934744, "transactionHash": "0x...", "logIndex": 0}

Block numbers and log indices may be ints or 0x-hex strings (RPC style).
It returns `EventLog` records ready for downstream decoding. `iter_logs` is
strict; `iter_lines` + `parse_log_line` let a caller handle bad lines one by
one (see `orchestration.batch.decode_jsonl`).
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from inkscale.core.models import EventLog
from inkscale.errors import InvalidLogRecord


def _as_int(value: Any) -> int:
    """Return an int from an int, a decimal string or a 0x-hex string."""
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.lower().startswith("0x"):
        return int(value, 16)
    return int(value)


def event_log_from_record(rl: Mapping[str, Any]) -> EventLog:
    """Map one raw log record (camelCase or snake_case keys) to an EventLog."""
    topics = tuple(str(t).lower() for t in rl.get("topics", []))
    code_hash = rl.get("codeHash") or rl.get("code_hash")
    return EventLog(
        address=str(rl["address"]).lower(),
        topics=topics,
        data_hex=str(rl.get("data") or rl.get("data_hex") or rl.get("dataHex") or "0x"),
        block_number=_as_int(rl.get("blockNumber", rl.get("block_number", 0))),
        tx_hash=str(rl.get("transactionHash") or rl.get("tx_hash") or "").lower(),
        log_index=_as_int(rl.get("logIndex", rl.get("log_index", 0))),
        code_hash=str(code_hash).lower() if code_hash else None,
    )


def parse_log_line(line: str, where: str = "<line>") -> EventLog:
    """Parse one JSONL line; `where` prefixes the error (e.g. `path:lineno`)."""
    try:
        return event_log_from_record(json.loads(line))
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidLogRecord(f"{where}: invalid log record: {exc}") from exc


def iter_lines(path: Path) -> Iterator[tuple[str, str]]:
    """Yield `(path:lineno, line)` for every non-blank line of a JSONL file."""
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            if line.strip():
                yield f"{path}:{lineno}", line


def iter_logs(path: Path) -> Iterator[EventLog]:
    """Yield EventLog records from a JSONL file; the first malformed line raises."""
    for where, line in iter_lines(path):
        yield parse_log_line(line, where)
