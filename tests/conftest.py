import copy
import json
from pathlib import Path
from typing import Any

import pytest

from helpers import (
    CLUE_GIVEN_SIG,
    GUESS_MADE_SIG,
    MESSAGE_QUEUED_SIG,
    NEW_GAME_SIG,
    ROLE_GRANTED_SIG,
    SHAPES_SIG,
)
from inkscale.metadata.catalog import MetadataCatalog


def _arg(label: str, type_id: int, indexed: bool = False, display: str = "") -> dict[str, Any]:
    return {
        "label": label,
        "type": {"type": type_id, "displayName": [display] if display else []},
        "indexed": indexed,
        "docs": [],
    }


TYPES: list[dict[str, Any]] = [
    {"id": 0, "type": {"def": {"primitive": "u128"}}},
    {"id": 1, "type": {"def": {"primitive": "u8"}}},
    {"id": 2, "type": {"def": {"array": {"len": 20, "type": 1}}}},
    {"id": 3, "type": {"path": ["primitive_types", "H160"], "def": {"composite": {"fields": [{"type": 2, "typeName": "[u8; 20]"}]}}}},
    {"id": 4, "type": {"def": {"primitive": "u16"}}},
    {"id": 5, "type": {"def": {"primitive": "u32"}}},
    {
        "id": 6,
        "type": {
            "path": ["guess_the_number", "Clue"],
            "def": {
                "variant": {
                    "variants": [
                        {"index": 0, "name": "More"},
                        {"index": 1, "name": "Less"},
                        {"index": 2, "name": "Found"},
                    ]
                }
            },
        },
    },
    {"id": 7, "type": {"def": {"sequence": {"type": 1}}}},
    {"id": 8, "type": {"def": {"primitive": "str"}}},
    {"id": 9, "type": {"def": {"primitive": "bool"}}},
    {
        "id": 10,
        "type": {
            "path": ["shapes", "Point"],
            "def": {"composite": {"fields": [{"name": "x", "type": 14}, {"name": "y", "type": 14}]}},
        },
    },
    {"id": 11, "type": {"def": {"tuple": [4, 5]}}},
    {"id": 12, "type": {"def": {"sequence": {"type": 4}}}},
    {
        "id": 13,
        "type": {
            "path": ["messages", "Body"],
            "def": {
                "variant": {
                    "variants": [
                        {"index": 0, "name": "Empty"},
                        {"index": 1, "name": "Text", "fields": [{"name": "body", "type": 8}]},
                        {"index": 2, "name": "Pair", "fields": [{"type": 4}, {"type": 5}]},
                    ]
                }
            },
        },
    },
    {"id": 14, "type": {"def": {"primitive": "i16"}}},
    {"id": 15, "type": {"def": {"compact": {"type": 5}}}},
    {"id": 16, "type": {"def": {"composite": {"fields": [{"type": 4}, {"type": 9}]}}}},
    {"id": 17, "type": {"def": {"bitSequence": {"bit_store_type": 1, "bit_order_type": 1}}}},
    {"id": 18, "type": {"def": {"primitive": "u64"}}},
    {
        "id": 19,
        "type": {
            "path": ["Option"],
            "def": {"variant": {"variants": [{"index": 0, "name": "None"}, {"index": 1, "name": "Some", "fields": [{"type": 5}]}]}},
        },
    },
    {"id": 20, "type": {"path": ["shapes", "Loop"], "def": {"composite": {"fields": [{"name": "next", "type": 20}]}}}},
    {"id": 21, "type": {"def": {"array": {"len": 3, "type": 1}}}},
    {"id": 22, "type": {"def": {"primitive": "i128"}}},
    {"id": 23, "type": {"def": {"primitive": "char"}}},
    {"id": 30, "type": {"def": {"tuple": []}}},
    {"id": 31, "type": {"def": {"sequence": {"type": 30}}}},
    {"id": 32, "type": {"path": ["shapes", "Marker"], "def": {"composite": {}}}},
    {"id": 33, "type": {"def": {"array": {"len": 4, "type": 32}}}},
    {"id": 34, "type": {"def": {"sequence": {"type": 33}}}},
]


EVENTS: list[dict[str, Any]] = [
    {
        "label": "NewGame",
        "signature_topic": NEW_GAME_SIG,
        "module_path": "guess_the_number",
        "docs": [],
        "args": [
            _arg("game_number", 0, indexed=True, display="u128"),
            _arg("player", 3, indexed=True, display="H160"),
            _arg("min_number", 4, display="u16"),
            _arg("max_number", 4, display="u16"),
        ],
    },
    {
        "label": "GuessMade",
        "signature_topic": GUESS_MADE_SIG,
        "args": [
            _arg("game_number", 0, indexed=True),
            _arg("attempt", 5),
            _arg("guess", 4),
        ],
    },
    {
        "label": "ClueGiven",
        "signature_topic": CLUE_GIVEN_SIG,
        "args": [
            _arg("game_number", 0, indexed=True),
            _arg("attempt", 5),
            _arg("guess", 4),
            _arg("clue", 6),
        ],
    },
    {
        "label": "MessageQueued",
        "signature_topic": MESSAGE_QUEUED_SIG,
        "args": [
            _arg("message_id", 18, indexed=True),
            _arg("payload", 7),
            _arg("note", 8),
            _arg("body", 13),
        ],
    },
    {
        "label": "RoleGranted",
        "signature_topic": ROLE_GRANTED_SIG,
        "args": [
            _arg("role", 7, indexed=True),
            _arg("account", 3, indexed=True),
            _arg("granted_at", 15),
        ],
    },
    {
        "label": "Shapes",
        "signature_topic": SHAPES_SIG,
        "args": [
            _arg("point", 10),
            _arg("pair", 11),
            {"label": "values", "type": 12, "indexed": False},
            _arg("unnamed", 16),
            _arg("maybe", 19),
        ],
    },
    {"label": "Anonymous", "signature_topic": None, "args": [_arg("value", 5)]},
]


METADATA: dict[str, Any] = {
    "source": {"hash": "0x00", "language": "ink! 6.0.0", "compiler": "rustc 1.85.0"},
    "contract": {"name": "guess_the_number", "version": "0.1.0"},
    "version": 6,
    "types": TYPES,
    "spec": {"constructors": [], "messages": [], "events": EVENTS},
}


@pytest.fixture
def metadata_doc() -> dict[str, Any]:
    """A fresh, mutable copy of the test metadata document."""
    return copy.deepcopy(METADATA)


@pytest.fixture
def catalog(metadata_doc: dict[str, Any]) -> MetadataCatalog:
    return MetadataCatalog.load(metadata_doc)


@pytest.fixture
def metadata_file(tmp_path: Path, metadata_doc: dict[str, Any]) -> Path:
    path = tmp_path / "guess_the_number.json"
    path.write_text(json.dumps(metadata_doc))
    return path
