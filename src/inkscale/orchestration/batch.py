from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from inkscale.clients.jsonl import iter_lines, parse_log_line
from inkscale.core.interfaces import IEventDecoder
from inkscale.core.models import DecodedEvent, EventLog
from inkscale.errors import InkScaleError, InvalidLogRecord, RegistryError
from inkscale.routing.registry import VersionRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class BatchStats:
    """
    Aggregated counters for one batch decode.

    - `decoded`: logs that produced a DecodedEvent
    - `skipped_unknown`: no topics, or no event spec for the signature
    - `failed`: decoding raised an InkScaleError, or the input record was malformed
    - `unrouted`: no contract version matched the log's address
    """

    total_logs: int = 0
    decoded: int = 0
    skipped_unknown: int = 0
    failed: int = 0
    unrouted: int = 0


@dataclass(slots=True)
class DecodedLog:
    """A decoded event together with the raw log it came from."""

    log: EventLog
    event: DecodedEvent


@dataclass(slots=True)
class BatchResult:
    events: list[DecodedLog] = field(default_factory=list)
    stats: BatchStats = field(default_factory=BatchStats)


# ---------------------------------------------------------------------------
# Core log processing
# ---------------------------------------------------------------------------


def _decode_one(log: EventLog, router: VersionRegistry | IEventDecoder) -> DecodedEvent | None:
    signature = log.topics[0]
    if isinstance(router, VersionRegistry):
        return router.decode_with_routing(
            signature,
            log.data_hex,
            log.topics,
            log.address,
            log.block_number,
            log.code_hash,
        )
    return router.decode_event(signature, log.data_hex, log.topics)


def _process(result: BatchResult, log: EventLog, router: VersionRegistry | IEventDecoder) -> None:
    stats = result.stats
    if not log.topics:
        stats.skipped_unknown += 1
        return

    try:
        event = _decode_one(log, router)
    except RegistryError as exc:
        stats.unrouted += 1
        logger.warning(
            "unrouted log %s#%d at block %d (%s): %s",
            log.tx_hash, log.log_index, log.block_number, log.address, exc,
        )
        return
    except InkScaleError as exc:
        stats.failed += 1
        logger.warning(
            "failed to decode log %s#%d at block %d (%s): %s: %s",
            log.tx_hash, log.log_index, log.block_number, log.address, type(exc).__name__, exc,
        )
        return

    if event is None:
        stats.skipped_unknown += 1
        return

    result.events.append(DecodedLog(log=log, event=event))
    stats.decoded += 1


def _log_summary(stats: BatchStats) -> None:
    logger.debug(
        "batch done: %d logs, %d decoded, %d skipped, %d failed, %d unrouted",
        stats.total_logs, stats.decoded, stats.skipped_unknown, stats.failed, stats.unrouted,
    )


def decode_logs(logs: Iterable[EventLog], router: VersionRegistry | IEventDecoder) -> BatchResult:
    """
    Decode a stream of raw logs, isolating per-log failures.

    Parameters
    ----------
    logs : Iterable[EventLog]
        Raw logs in any order.
    router : VersionRegistry | IEventDecoder
        A registry routes each log by address, block number and code hash;
        a plain decoder is applied to every log.

    Returns
    -------
    BatchResult
        Decoded events in input order, and the counters for the run.
    """
    result = BatchResult()
    for log in logs:
        result.stats.total_logs += 1
        _process(result, log, router)
    _log_summary(result.stats)
    return result


def decode_jsonl(path: Path, router: VersionRegistry | IEventDecoder) -> BatchResult:
    """
    Decode a JSONL dump of raw logs.

    Like `decode_logs`, but a line that is not a valid log record counts as
    `failed` (with a warning naming `path:lineno`) instead of ending the run.
    """
    result = BatchResult()
    for where, line in iter_lines(path):
        result.stats.total_logs += 1
        try:
            log = parse_log_line(line, where)
        except InvalidLogRecord as exc:
            result.stats.failed += 1
            logger.warning("%s", exc)
            continue
        _process(result, log, router)
    _log_summary(result.stats)
    return result
