"""Indexed, read-only view over an Ink! v6 metadata document.

`MetadataCatalog.load(...)` validates the document, resolves every type entry
into one of the closed `TypeKind` dataclasses (including the special H160
address shape) and indexes events by normalized signature. Nothing is
mutated after construction, so one catalog can be shared by any number of
concurrent decode calls.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from inkscale.constants import ADDRESS_BYTES, H160_PATH, SUPPORTED_METADATA_VERSION
from inkscale.core.models import (
    AddressDef,
    ArgSpec,
    ArrayDef,
    CompactDef,
    CompositeDef,
    EventSpec,
    Field,
    PrimitiveDef,
    SequenceDef,
    TupleDef,
    TypeDefinition,
    TypeKind,
    UnsupportedDef,
    VariantCase,
    VariantDef,
)
from inkscale.decoding.utils import normalize_signature
from inkscale.errors import InvalidMetadata, UnknownType
from inkscale.metadata.document import (
    ArrayShape,
    CompactShape,
    CompositeShape,
    FieldShape,
    InkEvent,
    InkMetadata,
    InkTypeEntry,
    SequenceShape,
    VariantShape,
)

logger = logging.getLogger(__name__)

MetadataSource = Mapping[str, Any] | Path


# ---------- document checks ----------


def _read_document(source: MetadataSource) -> Mapping[str, Any]:
    if isinstance(source, Path):
        try:
            doc = json.loads(source.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidMetadata(f"cannot read metadata from {source}: {exc}") from exc
    else:
        doc = source
    if not isinstance(doc, Mapping):
        raise InvalidMetadata("metadata document must be a JSON object")
    return doc


def _check_document(doc: Mapping[str, Any]) -> None:
    """Structural checks with precise messages, before model validation."""
    version = doc.get("version")
    if version != SUPPORTED_METADATA_VERSION:
        raise InvalidMetadata(
            f"unsupported Ink! metadata version: {version!r}, expected {SUPPORTED_METADATA_VERSION}"
        )
    spec = doc.get("spec")
    if not isinstance(spec, Mapping) or not isinstance(spec.get("events"), list):
        raise InvalidMetadata("missing or invalid spec.events")
    if not isinstance(doc.get("types"), list):
        raise InvalidMetadata("missing or invalid types array")
    if not any(isinstance(e, Mapping) and e.get("signature_topic") for e in spec["events"]):
        raise InvalidMetadata("no event carries a signature_topic")


# ---------- type resolution ----------


def _fields(shapes: Iterable[FieldShape]) -> tuple[Field, ...]:
    return tuple(Field(type_id=f.type, name=f.name) for f in shapes)


def _shape(model: type[BaseModel], payload: Any, type_id: int) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidMetadata(f"type {type_id}: malformed definition: {exc}") from exc


def _build_kind(entry: InkTypeEntry) -> TypeKind:
    """Translate one raw `def` object into its TypeKind."""
    definition = entry.type.definition
    if len(definition) != 1:
        raise InvalidMetadata(f"type {entry.id}: expected exactly one def key, got {sorted(definition)}")
    ((shape, payload),) = definition.items()

    match shape:
        case "primitive":
            if not isinstance(payload, str):
                raise InvalidMetadata(f"type {entry.id}: primitive name must be a string")
            return PrimitiveDef(payload)
        case "composite":
            composite = _shape(CompositeShape, payload or {}, entry.id)
            return CompositeDef(_fields(composite.fields))
        case "variant":
            variant = _shape(VariantShape, payload or {}, entry.id)
            return VariantDef(
                tuple(VariantCase(v.index, v.name, _fields(v.fields)) for v in variant.variants)
            )
        case "array":
            array = _shape(ArrayShape, payload, entry.id)
            return ArrayDef(element_type_id=array.type, length=array.len)
        case "sequence":
            return SequenceDef(_shape(SequenceShape, payload, entry.id).type)
        case "tuple":
            if not isinstance(payload, list) or not all(isinstance(t, int) for t in payload):
                raise InvalidMetadata(f"type {entry.id}: tuple must list type ids")
            return TupleDef(tuple(payload))
        case "compact":
            return CompactDef(_shape(CompactShape, payload, entry.id).type)
    logger.debug("type %d: %r definitions are not decodable", entry.id, shape)
    return UnsupportedDef(shape)


def _is_address_shaped(tdef: TypeDefinition, kinds: Mapping[int, TypeKind]) -> bool:
    """H160 by path, or a composite whose single field is `[u8; 20]`."""
    if not isinstance(tdef.kind, CompositeDef):
        return False
    if tdef.path_str == H160_PATH:
        return True
    if len(tdef.kind.fields) != 1:
        return False
    inner = kinds.get(tdef.kind.fields[0].type_id)
    return (
        isinstance(inner, ArrayDef)
        and inner.length == ADDRESS_BYTES
        and kinds.get(inner.element_type_id) == PrimitiveDef("u8")
    )


def _build_types(entries: Iterable[InkTypeEntry]) -> dict[int, TypeDefinition]:
    types: dict[int, TypeDefinition] = {}
    for entry in entries:
        if entry.id in types:
            raise InvalidMetadata(f"duplicate type id {entry.id}")
        types[entry.id] = TypeDefinition(entry.id, _build_kind(entry), tuple(entry.type.path))

    # Second pass: address detection needs the whole table.
    kinds = {tid: t.kind for tid, t in types.items()}
    for tid, tdef in types.items():
        if _is_address_shaped(tdef, kinds):
            types[tid] = TypeDefinition(tid, AddressDef(ADDRESS_BYTES), tdef.path)
    return types


def _zero_sized_types(types: Mapping[int, TypeDefinition]) -> frozenset[int]:
    """Ids of types whose SCALE encoding is always empty (`()`, fieldless structs, ...)."""
    memo: dict[int, bool] = {}

    def zero(tid: int) -> bool:
        if tid in memo:
            return memo[tid]
        tdef = types.get(tid)
        if tdef is None:
            return False
        memo[tid] = False  # in progress; a recursive type counts as sized
        match tdef.kind:
            case CompositeDef(fields=fields):
                result = all(zero(f.type_id) for f in fields)
            case TupleDef(type_ids=type_ids):
                result = all(zero(t) for t in type_ids)
            case ArrayDef(element_type_id=element, length=length):
                result = length == 0 or zero(element)
            case _:
                result = False
        memo[tid] = result
        return result

    return frozenset(tid for tid in types if zero(tid))


def _build_event(event: InkEvent) -> EventSpec:
    signature = normalize_signature(event.signature_topic) if event.signature_topic else None
    args = tuple(ArgSpec(a.label, a.type_id, a.indexed) for a in event.args)
    return EventSpec(label=event.label, signature=signature, args=args)


# ---------- catalog ----------


class MetadataCatalog:
    """Read-only type and event tables for one metadata document."""

    def __init__(
        self,
        types: Mapping[int, TypeDefinition],
        events: Iterable[EventSpec],
        *,
        contract_name: str | None = None,
        contract_version: str | None = None,
    ) -> None:
        self._types = dict(types)
        self._zero_sized = _zero_sized_types(self._types)
        self._events = tuple(events)
        self._by_signature: dict[str, EventSpec] = {}
        for spec in self._events:
            if spec.signature is None:
                continue
            if spec.signature in self._by_signature:
                raise InvalidMetadata(f"duplicate event signature {spec.signature}")
            self._by_signature[spec.signature] = spec
        self.contract_name = contract_name
        self.contract_version = contract_version

    @classmethod
    def load(cls, source: MetadataSource) -> MetadataCatalog:
        """Validate a metadata document (mapping or JSON file path) and index it."""
        doc = _read_document(source)
        _check_document(doc)
        try:
            metadata = InkMetadata.model_validate(doc)
        except ValidationError as exc:
            raise InvalidMetadata(f"invalid Ink! metadata: {exc}") from exc

        catalog = cls(
            _build_types(metadata.types),
            (_build_event(e) for e in metadata.spec.events),
            contract_name=metadata.contract.name if metadata.contract else None,
            contract_version=metadata.contract.version if metadata.contract else None,
        )
        logger.debug(
            "loaded %d events and %d types (contract=%s)",
            len(catalog.events),
            len(catalog._types),
            catalog.contract_name,
        )
        return catalog

    @property
    def events(self) -> tuple[EventSpec, ...]:
        return self._events

    def type_by_id(self, type_id: int) -> TypeDefinition:
        try:
            return self._types[type_id]
        except KeyError:
            raise UnknownType(f"unknown type id {type_id}") from None

    def is_zero_sized(self, type_id: int) -> bool:
        return type_id in self._zero_sized

    def event_by_signature(self, signature: str) -> EventSpec | None:
        """Return the event for a signature (0x-prefixed or bare), or None."""
        return self._by_signature.get(normalize_signature(signature))
