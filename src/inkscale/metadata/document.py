"""Pydantic models for the parts of an Ink! v6 metadata document we read.

Only the event spec, the type table and the optional contract info are
modelled; everything else in the document (constructors, messages, storage)
is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InkTypeRef(BaseModel):
    type: int
    displayName: list[str] = []


class InkEventArg(BaseModel):
    label: str
    type: int | InkTypeRef
    indexed: bool = False
    docs: list[str] = []

    @property
    def type_id(self) -> int:
        return self.type if isinstance(self.type, int) else self.type.type


class InkEvent(BaseModel):
    label: str
    args: list[InkEventArg] = []
    signature_topic: str | None = None
    docs: list[str] = []
    module_path: str | None = None


class InkSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    events: list[InkEvent]


class InkTypeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    definition: dict[str, Any] = Field(alias="def")
    path: list[str] = []
    params: list[dict[str, Any]] = []


class InkTypeEntry(BaseModel):
    id: int
    type: InkTypeBody


class InkContractInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None


class InkMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: int
    spec: InkSpec
    types: list[InkTypeEntry]
    contract: InkContractInfo | None = None


# ---- type `def` payloads (one key of the `def` object each) ----


class FieldShape(BaseModel):
    type: int
    name: str | None = None
    typeName: str | None = None


class CompositeShape(BaseModel):
    fields: list[FieldShape] = []


class VariantCaseShape(BaseModel):
    index: int
    name: str
    fields: list[FieldShape] = []


class VariantShape(BaseModel):
    variants: list[VariantCaseShape] = []


class ArrayShape(BaseModel):
    len: int
    type: int


class SequenceShape(BaseModel):
    type: int


class CompactShape(BaseModel):
    type: int
