"""Core data models shared by the catalog, the decoders and the registry.

This module defines:
- Type definition kinds (`PrimitiveDef`, `CompositeDef`, ...): a closed set
  resolved once when a `MetadataCatalog` is built, dispatched with `match`.
- `EventSpec` / `ArgSpec`: one event of the contract and its arguments.
- `DecodedEvent`: the result handed back to collaborators.
- `VersionEntry`: one routing rule of a `VersionRegistry`.
- `EventLog`: a raw contract log as supplied by an ingestion collaborator.

Design notes
------------
- Everything here is immutable except `DecodedEvent`, which is created per
  call and owned by the caller.
- Addresses and signatures are stored lowercase.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# === Type definitions ===


@dataclass(frozen=True, slots=True)
class Field:
    """One field of a composite or variant case (name is None for tuple-like fields)."""

    type_id: int
    name: str | None = None


@dataclass(frozen=True, slots=True)
class PrimitiveDef:
    name: str  # e.g. "u8", "u128", "bool", "str"


@dataclass(frozen=True, slots=True)
class CompositeDef:
    fields: tuple[Field, ...]


@dataclass(frozen=True, slots=True)
class VariantCase:
    index: int
    name: str
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True, slots=True)
class VariantDef:
    cases: tuple[VariantCase, ...]
    _by_index: dict[int, VariantCase] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_index", {c.index: c for c in self.cases})

    def case(self, index: int) -> VariantCase | None:
        """Return the case for a discriminant, or None if it is not declared."""
        return self._by_index.get(index)

    @property
    def is_unit_only(self) -> bool:
        return all(not c.fields for c in self.cases)


@dataclass(frozen=True, slots=True)
class ArrayDef:
    element_type_id: int
    length: int


@dataclass(frozen=True, slots=True)
class SequenceDef:
    element_type_id: int


@dataclass(frozen=True, slots=True)
class TupleDef:
    type_ids: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class CompactDef:
    type_id: int


@dataclass(frozen=True, slots=True)
class AddressDef:
    """20-byte address-shaped composite (H160), decoded to a hex string."""

    length: int = 20


@dataclass(frozen=True, slots=True)
class UnsupportedDef:
    """A shape the metadata may carry but the decoder does not handle."""

    shape: str  # e.g. "bitSequence"


TypeKind = (
    PrimitiveDef
    | CompositeDef
    | VariantDef
    | ArrayDef
    | SequenceDef
    | TupleDef
    | CompactDef
    | AddressDef
    | UnsupportedDef
)


@dataclass(frozen=True, slots=True)
class TypeDefinition:
    """One entry of the metadata type table."""

    id: int
    kind: TypeKind
    path: tuple[str, ...] = ()

    @property
    def path_str(self) -> str:
        return ".".join(self.path)


# === Event specs ===


@dataclass(frozen=True, slots=True)
class ArgSpec:
    label: str
    type_id: int
    indexed: bool = False


@dataclass(frozen=True, slots=True)
class EventSpec:
    """One contract event: label, normalized signature and ordered arguments."""

    label: str
    signature: str | None  # 64 lowercase hex chars, no 0x; None for anonymous events
    args: tuple[ArgSpec, ...] = ()

    @property
    def indexed_args(self) -> tuple[ArgSpec, ...]:
        return tuple(a for a in self.args if a.indexed)

    @property
    def data_args(self) -> tuple[ArgSpec, ...]:
        return tuple(a for a in self.args if not a.indexed)


# === Decoded output ===


@dataclass(slots=True)
class DecodedEvent:
    """Decoded event: external `event_type` plus `{arg label: value}`."""

    event_type: str
    data: dict[str, Any]
    label: str = ""
    signature: str = ""


# === Routing ===


@dataclass(frozen=True, slots=True)
class VersionEntry:
    """Routing rule: which ABI version applies to which addresses and blocks.

    The block range is half-open: `[from_block, to_block)`; `to_block=None`
    means open-ended and `from_block=None` means "since genesis".
    """

    version: str
    addresses: tuple[str, ...] = ()
    code_hash: str | None = None
    from_block: int | None = None
    to_block: int | None = None
    indexed_policy: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "addresses", tuple(a.lower() for a in self.addresses))
        if self.code_hash is not None:
            object.__setattr__(self, "code_hash", self.code_hash.lower())

    @property
    def start(self) -> int:
        """Sort key for "most recent wins" (absent `from_block` counts as 0)."""
        return self.from_block if self.from_block is not None else 0

    def matches_address(self, address: str) -> bool:
        return not self.addresses or address.lower() in self.addresses

    def matches_code_hash(self, code_hash: str | None) -> bool:
        if code_hash is None or self.code_hash is None:
            return True
        return self.code_hash == code_hash.lower()

    def covers(self, block_height: int) -> bool:
        if self.from_block is not None and block_height < self.from_block:
            return False
        if self.to_block is not None and block_height >= self.to_block:
            return False
        return True


# === Ingestion record ===


@dataclass(slots=True, frozen=True)
class EventLog:
    """Raw contract log, minimally normalized."""

    address: str  # lowercased 0x...
    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str  # "0x..."
    block_number: int
    tx_hash: str = ""
    log_index: int = 0
    code_hash: str | None = None
