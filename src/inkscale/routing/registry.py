"""Version registry: route (address, block height) to the right ABI version.

This module exposes:
- `merge_entry(entries, entry)` -> new tuple with `entry` inserted or replacing
  the entry of the same version tag, sorted by starting block
- `VersionRegistry` -> immutable entries + version -> decoder mapping, with
  `resolve()` and `decode_with_routing()`
- `entries_from_json()` / `entries_to_json()` for the registry file format
  `[{version, addresses?, codeHash?, from?, to?, indexedPolicy?}]`

Resolution never depends on storage order; sorting is for readable output.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inkscale.core.config import IndexedArgPolicy
from inkscale.core.interfaces import IEventDecoder
from inkscale.core.models import DecodedEvent, VersionEntry
from inkscale.errors import InvalidConfig, NoDecoderForAddress, UnknownVersion

logger = logging.getLogger(__name__)


# ---- merge (pure) ----


def _sort_key(entry: VersionEntry) -> int:
    return entry.from_block if entry.from_block is not None else -1


def merge_entry(entries: Iterable[VersionEntry], entry: VersionEntry) -> tuple[VersionEntry, ...]:
    """Insert `entry` or replace the one with the same version tag; never mutates `entries`."""
    merged = [e for e in entries if e.version != entry.version]
    merged.append(entry)
    return tuple(sorted(merged, key=_sort_key))


# ---- registry ----


class VersionRegistry:
    """Resolve which contract version applies and dispatch to its decoder.

    Parameters
    ----------
    entries : Iterable[VersionEntry]
        Routing rules, in any order.
    decoders : Mapping[str, IEventDecoder] | None
        Decoder per version tag. Only needed for `decoder_for` and
        `decode_with_routing`; `resolve` works without it.
    """

    def __init__(
        self,
        entries: Iterable[VersionEntry] = (),
        decoders: Mapping[str, IEventDecoder] | None = None,
    ) -> None:
        self._entries = tuple(entries)
        self._decoders = MappingProxyType(dict(decoders or {}))

    @property
    def entries(self) -> tuple[VersionEntry, ...]:
        return self._entries

    @property
    def decoders(self) -> Mapping[str, IEventDecoder]:
        return self._decoders

    def merged(self, entry: VersionEntry, decoder: IEventDecoder | None = None) -> VersionRegistry:
        """Return a new registry with `entry` merged in (and its decoder, if given)."""
        decoders = dict(self._decoders)
        if decoder is not None:
            decoders[entry.version] = decoder
        return VersionRegistry(merge_entry(self._entries, entry), decoders)

    def resolve(self, address: str, block_height: int, code_hash: str | None = None) -> VersionEntry:
        """Pick the version entry for an address at a block height.

        1. Keep entries for this address (no address list = wildcard) and, when
           `code_hash` is given, entries whose code hash matches or is unset.
        2. Of those, keep entries whose `[from, to)` range covers the height;
           if none does, fall back to step 1's set.
        3. Most recent wins: greatest `from` (absent = 0), then greatest
           version tag when two entries start at the same block.
        """
        by_address = [
            e for e in self._entries if e.matches_address(address) and e.matches_code_hash(code_hash)
        ]
        in_range = [e for e in by_address if e.covers(block_height)]
        candidates = in_range or by_address
        if not candidates:
            raise NoDecoderForAddress(f"no decoder version found for address {address}")
        if not in_range:
            logger.debug("no range covers block %d for %s; using address-only match", block_height, address)
        return max(candidates, key=lambda e: (e.start, e.version))

    def decoder_for(self, address: str, block_height: int, code_hash: str | None = None) -> IEventDecoder:
        entry = self.resolve(address, block_height, code_hash)
        try:
            return self._decoders[entry.version]
        except KeyError:
            raise UnknownVersion(f"version not found: {entry.version}") from None

    def decode_with_routing(
        self,
        signature: str,
        data: bytes | str,
        topics: Sequence[str],
        address: str,
        block_height: int,
        code_hash: str | None = None,
    ) -> DecodedEvent | None:
        """Resolve the version for (address, block_height) and decode with it."""
        decoder = self.decoder_for(address, block_height, code_hash)
        return decoder.decode_event(signature, data, topics)


# ---- registry file format ----


class VersionEntryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str
    addresses: list[str] = []
    codeHash: str | None = None
    from_block: int | None = Field(default=None, alias="from")
    to_block: int | None = Field(default=None, alias="to")
    indexedPolicy: IndexedArgPolicy | None = None

    def to_entry(self) -> VersionEntry:
        return VersionEntry(
            version=self.version,
            addresses=tuple(self.addresses),
            code_hash=self.codeHash,
            from_block=self.from_block,
            to_block=self.to_block,
            indexed_policy=self.indexedPolicy.value if self.indexedPolicy else None,
        )


def entries_from_json(source: Path | Sequence[Mapping[str, Any]]) -> tuple[VersionEntry, ...]:
    """Parse registry entries from a JSON file or an already-loaded list."""
    if isinstance(source, Path):
        try:
            source = json.loads(source.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidConfig(f"cannot read registry file: {exc}") from exc
    if not isinstance(source, list):
        raise InvalidConfig("registry file must hold a JSON list of version entries")
    try:
        return tuple(VersionEntryModel.model_validate(item).to_entry() for item in source)
    except ValidationError as exc:
        raise InvalidConfig(f"invalid registry entry: {exc}") from exc


def entries_to_json(entries: Iterable[VersionEntry]) -> list[dict[str, Any]]:
    """Serialize entries in the registry file format (omitting empty fields)."""
    out: list[dict[str, Any]] = []
    for e in entries:
        item: dict[str, Any] = {"version": e.version}
        if e.addresses:
            item["addresses"] = list(e.addresses)
        if e.code_hash is not None:
            item["codeHash"] = e.code_hash
        if e.from_block is not None:
            item["from"] = e.from_block
        item["to"] = e.to_block
        if e.indexed_policy is not None:
            item["indexedPolicy"] = e.indexed_policy
        out.append(item)
    return out
