"""Metadata-driven event decoder.

This module translates one raw contract event (signature, data, topics) into
a `DecodedEvent` using a `MetadataCatalog`:

- indexed arguments are read from `topics[1:]`, in declaration order;
- non-indexed arguments are SCALE-decoded from the data buffer;
- the `IndexedArgPolicy` of the config says whether indexed values are
  also present in the data buffer (and must be skipped there).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from inkscale.core.config import DecoderConfig, IndexedArgPolicy
from inkscale.core.models import AddressDef, ArgSpec, DecodedEvent, EventSpec, PrimitiveDef
from inkscale.decoding.scale import (
    SIGNED_WIDTHS,
    UNSIGNED_WIDTHS,
    DecodeContext,
    ScaleValueDecoder,
    read_primitive,
)
from inkscale.decoding.utils import format_address, snake_case, to_bytes
from inkscale.errors import BufferUnderrun

if TYPE_CHECKING:
    from inkscale.metadata.catalog import MetadataCatalog

logger = logging.getLogger(__name__)

# Primitives whose topic holds the value itself (little-endian from byte 0)
TOPIC_VALUE_PRIMITIVES = frozenset(UNSIGNED_WIDTHS) | frozenset(SIGNED_WIDTHS) | {"bool"}


class EventDecoder:
    """Decode the events of one contract version."""

    def __init__(self, catalog: MetadataCatalog, config: DecoderConfig | None = None) -> None:
        self.catalog = catalog
        self.config = config or DecoderConfig()
        self.values = ScaleValueDecoder(
            catalog,
            max_depth=self.config.max_depth,
            checksum_addresses=self.config.checksum_addresses,
        )

    def event_type_for(self, spec: EventSpec) -> str:
        """External name: explicit mapping first, snake_case label otherwise."""
        return self.config.event_type_mapping.get(spec.label) or snake_case(spec.label)

    def decode_event(
        self,
        signature: str,
        data: bytes | str,
        topics: Sequence[str],
    ) -> DecodedEvent | None:
        """Decode one event, or return None when the signature is not ours."""
        spec = self.catalog.event_by_signature(signature)
        if spec is None:
            return None

        ctx = DecodeContext(to_bytes(data), topics=tuple(topics))
        skip_indexed_in_data = self.config.indexed_policy is IndexedArgPolicy.ALSO_IN_DATA
        values: dict[str, Any] = {}

        for arg in spec.args:
            if arg.indexed:
                values[arg.label] = self._decode_topic(arg, ctx.next_topic(arg.label))
                if skip_indexed_in_data:
                    self.values.decode_from(ctx, arg.type_id)
            else:
                values[arg.label] = self.values.decode_from(ctx, arg.type_id)
            logger.debug("decoded %s.%s = %r", spec.label, arg.label, values[arg.label])

        return DecodedEvent(
            event_type=self.event_type_for(spec),
            data=values,
            label=spec.label,
            signature=spec.signature or "",
        )

    def _decode_topic(self, arg: ArgSpec, topic: str) -> Any:
        """Decode an indexed argument from its 32-byte topic.

        Integers and bools are stored little-endian from byte 0; addresses are
        right-aligned. Any other type is hashed or padded on chain, so the raw
        topic hex is kept instead.
        """
        tdef = self.catalog.type_by_id(arg.type_id)
        match tdef.kind:
            case PrimitiveDef(name=name) if name in TOPIC_VALUE_PRIMITIVES:
                return read_primitive(DecodeContext(to_bytes(topic)), name)
            case AddressDef(length=length):
                raw = to_bytes(topic)
                if len(raw) < length:
                    raise BufferUnderrun(f"topic for {arg.label!r} holds {len(raw)} byte(s), need {length}")
                return format_address(raw[-length:], checksum=self.config.checksum_addresses)
        logger.debug("keeping raw topic for indexed arg %r (type %d)", arg.label, arg.type_id)
        return topic


def decode_event(
    *,
    signature: str,
    data: bytes | str,
    topics: Sequence[str],
    catalog: MetadataCatalog,
    config: DecoderConfig | None = None,
) -> DecodedEvent | None:
    """Functional form of `EventDecoder.decode_event`."""
    return EventDecoder(catalog, config).decode_event(signature, data, topics)
