"""Type-directed SCALE value decoder.

`ScaleValueDecoder` walks a `MetadataCatalog` type graph and reads values from
a `DecodeContext`. Dispatch happens once per value with `match` over the
closed set of type kinds; recursion depth is tracked explicitly so that a
malformed (or cyclic) type graph fails fast with `RecursionLimitExceeded`.

Value mapping
-------------
- integers -> int, bool -> bool, str/char -> str
- composite -> dict (unnamed fields become `field<N>`)
- variant -> case name (fieldless), `{"tag", **fields}` (named fields),
  `{"tag", "value": [...]}` (unnamed fields), or
  `{"tag": "UnknownVariant", "index": n}` for undeclared discriminants
- array / sequence / tuple -> list; `Vec<u8>` -> bytes
- H160 -> 0x hex string
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from inkscale.constants import DEFAULT_MAX_DEPTH, UNKNOWN_VARIANT_TAG
from inkscale.core.models import (
    AddressDef,
    ArrayDef,
    CompactDef,
    CompositeDef,
    Field,
    PrimitiveDef,
    SequenceDef,
    TupleDef,
    UnsupportedDef,
    VariantDef,
)
from inkscale.decoding.utils import format_address, to_signed
from inkscale.errors import BufferUnderrun, DecodeError, MissingTopic, RecursionLimitExceeded, UnsupportedType

if TYPE_CHECKING:
    from inkscale.metadata.catalog import MetadataCatalog

logger = logging.getLogger(__name__)

# Fixed-width integer primitives: name -> byte width
UNSIGNED_WIDTHS: dict[str, int] = {"u8": 1, "u16": 2, "u32": 4, "u64": 8, "u128": 16, "u256": 32}
SIGNED_WIDTHS: dict[str, int] = {"i8": 1, "i16": 2, "i32": 4, "i64": 8, "i128": 16, "i256": 32}

_U8 = PrimitiveDef("u8")


# ---------- per-call state ----------


@dataclass(slots=True)
class DecodeContext:
    """Byte buffer + cursor, and topic list + topic cursor, for one decode call.

    Never shared between calls; `offset` only moves forward.
    """

    data: bytes
    offset: int = 0
    topics: Sequence[str] = ()
    topic_index: int = 1  # topics[0] is the event signature

    def remaining(self) -> int:
        return max(0, len(self.data) - self.offset)

    def take(self, n: int) -> bytes:
        """Consume `n` bytes or raise BufferUnderrun without moving the cursor."""
        end = self.offset + n
        if self.offset < 0 or self.offset > len(self.data) or end > len(self.data):
            raise BufferUnderrun(
                f"need {n} byte(s) at offset {self.offset}, buffer holds {len(self.data)}"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def next_topic(self, label: str) -> str:
        if self.topic_index >= len(self.topics):
            raise MissingTopic(
                f"missing topic for indexed arg {label!r} (topic #{self.topic_index}, have {len(self.topics)})"
            )
        topic = self.topics[self.topic_index]
        self.topic_index += 1
        return topic


# ---------- leaf readers ----------


def read_compact(ctx: DecodeContext) -> int:
    """Read a SCALE compact integer.

    The two low bits of the first byte select the mode:
    0b00 single byte, 0b01 two bytes, 0b10 four bytes (all shifted right by 2),
    0b11 big-integer mode with `(first >> 2) + 4` little-endian bytes following.
    """
    first = ctx.take(1)[0]
    mode = first & 0b11
    if mode == 0b00:
        return first >> 2
    if mode == 0b01:
        return int.from_bytes(bytes([first]) + ctx.take(1), "little") >> 2
    if mode == 0b10:
        return int.from_bytes(bytes([first]) + ctx.take(3), "little") >> 2
    return int.from_bytes(ctx.take((first >> 2) + 4), "little")


def decode_compact(buffer: bytes, offset: int = 0) -> tuple[int, int]:
    """Return `(value, new_offset)` for a compact integer at `offset`."""
    ctx = DecodeContext(bytes(buffer), offset)
    value = read_compact(ctx)
    return value, ctx.offset


def read_primitive(ctx: DecodeContext, name: str) -> Any:
    """Read one primitive value by its metadata name."""
    width = UNSIGNED_WIDTHS.get(name)
    if width is not None:
        return int.from_bytes(ctx.take(width), "little")
    width = SIGNED_WIDTHS.get(name)
    if width is not None:
        return to_signed(int.from_bytes(ctx.take(width), "little"), width * 8)
    if name == "bool":
        return ctx.take(1)[0] != 0
    if name == "str":
        length = read_compact(ctx)
        return ctx.take(length).decode("utf-8", errors="replace")
    if name == "char":
        code_point = int.from_bytes(ctx.take(4), "little")
        try:
            return chr(code_point)
        except ValueError:
            raise DecodeError(f"invalid char code point {code_point:#x}") from None
    raise UnsupportedType(f"unsupported primitive type {name!r}")


# ---------- recursive decoder ----------


class ScaleValueDecoder:
    """Decode SCALE values by metadata type id.

    Parameters
    ----------
    catalog : MetadataCatalog
        Type table used for lookups (read-only).
    max_depth : int
        Maximum nesting depth before `RecursionLimitExceeded`.
    checksum_addresses : bool
        Render H160 values in EIP-55 form instead of lowercase hex.
    """

    def __init__(
        self,
        catalog: MetadataCatalog,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        checksum_addresses: bool = False,
    ) -> None:
        self.catalog = catalog
        self.max_depth = max_depth
        self.checksum_addresses = checksum_addresses

    def decode(self, type_id: int, buffer: bytes, offset: int = 0) -> tuple[Any, int]:
        """Decode one value of `type_id` at `offset`; return `(value, new_offset)`."""
        ctx = DecodeContext(bytes(buffer), offset)
        value = self.decode_from(ctx, type_id)
        return value, ctx.offset

    def decode_from(self, ctx: DecodeContext, type_id: int, depth: int = 0) -> Any:
        """Decode one value of `type_id` at the context cursor, advancing it."""
        if depth > self.max_depth:
            raise RecursionLimitExceeded(f"type nesting deeper than {self.max_depth} at type {type_id}")
        tdef = self.catalog.type_by_id(type_id)

        match tdef.kind:
            case PrimitiveDef(name=name):
                return read_primitive(ctx, name)
            case AddressDef(length=length):
                return format_address(ctx.take(length), checksum=self.checksum_addresses)
            case CompositeDef(fields=fields):
                return self._decode_fields(ctx, fields, depth)
            case VariantDef() as variant:
                return self._decode_variant(ctx, variant, depth)
            case ArrayDef(element_type_id=element, length=length):
                return self._decode_repeated(ctx, element, length, depth)
            case SequenceDef(element_type_id=element):
                return self._decode_sequence(ctx, element, depth)
            case TupleDef(type_ids=type_ids):
                return [self.decode_from(ctx, t, depth + 1) for t in type_ids]
            case CompactDef():
                return read_compact(ctx)
            case UnsupportedDef(shape=shape):
                raise UnsupportedType(f"type {type_id}: {shape!r} values are not supported")
        raise UnsupportedType(f"type {type_id}: unsupported definition {tdef.kind!r}")

    def _decode_fields(self, ctx: DecodeContext, fields: Sequence[Field], depth: int) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for i, f in enumerate(fields):
            out[f.name or f"field{i}"] = self.decode_from(ctx, f.type_id, depth + 1)
        return out

    def _decode_variant(self, ctx: DecodeContext, variant: VariantDef, depth: int) -> Any:
        discriminant = ctx.take(1)[0]
        case = variant.case(discriminant)
        if case is None:
            logger.debug("unknown variant discriminant %d", discriminant)
            return {"tag": UNKNOWN_VARIANT_TAG, "index": discriminant}
        if not case.fields:
            return case.name
        if any(f.name for f in case.fields):
            return {"tag": case.name, **self._decode_fields(ctx, case.fields, depth)}
        return {"tag": case.name, "value": [self.decode_from(ctx, f.type_id, depth + 1) for f in case.fields]}

    def _decode_sequence(self, ctx: DecodeContext, element: int, depth: int) -> Any:
        count = read_compact(ctx)
        if self.catalog.type_by_id(element).kind == _U8:
            return ctx.take(count)  # Vec<u8>: raw bytes
        if count > ctx.remaining() and not self.catalog.is_zero_sized(element):
            raise BufferUnderrun(f"sequence of {count} element(s) exceeds remaining {ctx.remaining()} byte(s)")
        return self._decode_repeated(ctx, element, count, depth)

    def _decode_repeated(self, ctx: DecodeContext, element: int, count: int, depth: int) -> list[Any]:
        if count and self.catalog.is_zero_sized(element):
            # Every element encodes to no bytes: decode one, repeat it.
            return [self.decode_from(ctx, element, depth + 1)] * count
        return [self.decode_from(ctx, element, depth + 1) for _ in range(count)]
