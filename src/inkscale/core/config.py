from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from inkscale.constants import DEFAULT_MAX_DEPTH


class IndexedArgPolicy(str, Enum):
    """Where the bytes of indexed event arguments live.

    - TOPICS_ONLY: indexed values are only in topics; the data buffer holds
      the non-indexed arguments back to back.
    - ALSO_IN_DATA: the data buffer holds every argument in declaration
      order; indexed ones are read from topics and skipped in data.
    """

    TOPICS_ONLY = "topics-only"
    ALSO_IN_DATA = "also-in-data"


@dataclass(frozen=True)
class DecoderConfig:
    """Configuration for one contract version's event decoder."""

    event_type_mapping: Mapping[str, str] = field(default_factory=dict)  # label -> external name
    indexed_policy: IndexedArgPolicy = IndexedArgPolicy.TOPICS_ONLY
    max_depth: int = DEFAULT_MAX_DEPTH
    checksum_addresses: bool = False


@dataclass(frozen=True)
class DecodeRunConfig:
    """Configuration for decoding a JSONL log dump (CLI)."""

    logs_path: Path
    out_path: Path | None = None  # None -> stdout
    metadata_path: Path | None = None
    contracts_path: Path | None = None
    contract: str | None = None
    event_type_mapping: Mapping[str, str] = field(default_factory=dict)
    indexed_policy: IndexedArgPolicy = IndexedArgPolicy.TOPICS_ONLY
    checksum_addresses: bool = False

    def decoder_config(self) -> DecoderConfig:
        return DecoderConfig(
            event_type_mapping=self.event_type_mapping,
            indexed_policy=self.indexed_policy,
            checksum_addresses=self.checksum_addresses,
        )
