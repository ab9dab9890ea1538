import json
import logging
from pathlib import Path

import pytest

from helpers import CONTRACT_ADDRESS, GUESS_MADE_SIG, NEW_GAME_SIG, address_topic, u128_topic
from inkscale.clients.jsonl import event_log_from_record, iter_logs, parse_log_line
from inkscale.core.models import EventLog, VersionEntry
from inkscale.decoding.decoder import EventDecoder
from inkscale.errors import InvalidLogRecord
from inkscale.metadata.catalog import MetadataCatalog
from inkscale.orchestration.batch import decode_jsonl, decode_logs
from inkscale.routing.registry import VersionRegistry


def _new_game(block: int = 2_000_000, data: str = "0x01006400", address: str = CONTRACT_ADDRESS) -> EventLog:
    return EventLog(
        address=address,
        topics=(NEW_GAME_SIG, u128_topic(1), address_topic(CONTRACT_ADDRESS)),
        data_hex=data,
        block_number=block,
        tx_hash="0xabc",
        log_index=0,
    )


@pytest.fixture
def logs() -> list[EventLog]:
    return [
        _new_game(),
        _new_game(data="0x01"),  # truncated
        EventLog(address=CONTRACT_ADDRESS, topics=("0x" + "99" * 32,), data_hex="0x", block_number=2_000_000),
        EventLog(address=CONTRACT_ADDRESS, topics=(), data_hex="0x", block_number=2_000_000),
        _new_game(address="0x" + "22" * 20),
        EventLog(
            address=CONTRACT_ADDRESS,
            topics=(GUESS_MADE_SIG, u128_topic(1)),
            data_hex="0x" + (3).to_bytes(4, "little").hex() + (9).to_bytes(2, "little").hex(),
            block_number=2_000_001,
        ),
    ]


def test_decode_logs_with_registry(catalog: MetadataCatalog, logs: list[EventLog]) -> None:
    entry = VersionEntry(version="v0.1.0", addresses=(CONTRACT_ADDRESS,), from_block=1934744)
    registry = VersionRegistry([entry], {"v0.1.0": EventDecoder(catalog)})

    result = decode_logs(logs, registry)

    assert [d.event.event_type for d in result.events] == ["new_game", "guess_made"]
    assert result.events[0].log is logs[0]
    stats = result.stats
    assert stats.total_logs == 6
    assert stats.decoded == 2
    assert stats.failed == 1
    assert stats.skipped_unknown == 2
    assert stats.unrouted == 1


def test_decode_logs_with_single_decoder(catalog: MetadataCatalog, logs: list[EventLog]) -> None:
    result = decode_logs(logs, EventDecoder(catalog))
    # no routing: the foreign-address log decodes too
    assert result.stats.decoded == 3
    assert result.stats.unrouted == 0


def test_failures_are_logged(catalog: MetadataCatalog, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="inkscale.orchestration.batch"):
        result = decode_logs([_new_game(data="0x01")], EventDecoder(catalog))
    assert result.stats.failed == 1
    assert "BufferUnderrun" in caplog.text


class TestDecodeJsonl:
    def test_malformed_lines_count_as_failed(self, catalog: MetadataCatalog, tmp_path: Path) -> None:
        good = {
            "address": CONTRACT_ADDRESS,
            "topics": [NEW_GAME_SIG, u128_topic(1), address_topic(CONTRACT_ADDRESS)],
            "data": "0x01006400",
            "blockNumber": 2_000_000,
        }
        path = tmp_path / "logs.jsonl"
        path.write_text(
            "\n".join(
                [
                    json.dumps(good),
                    "{not json",
                    json.dumps({"topics": [NEW_GAME_SIG]}),  # no address
                    "",
                    json.dumps({**good, "blockNumber": 2_000_001}),
                ]
            )
            + "\n"
        )

        result = decode_jsonl(path, EventDecoder(catalog))

        assert [d.log.block_number for d in result.events] == [2_000_000, 2_000_001]
        assert result.stats.total_logs == 4
        assert result.stats.decoded == 2
        assert result.stats.failed == 2

    def test_malformed_line_is_logged_with_position(
        self, catalog: MetadataCatalog, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "logs.jsonl"
        path.write_text("\n[1, 2]\n")
        with caplog.at_level(logging.WARNING, logger="inkscale.orchestration.batch"):
            result = decode_jsonl(path, EventDecoder(catalog))
        assert result.stats.failed == 1
        assert "logs.jsonl:2" in caplog.text


class TestJsonlClient:
    def test_record_mapping(self) -> None:
        log = event_log_from_record(
            {
                "address": CONTRACT_ADDRESS.upper().replace("0X", "0x"),
                "topics": [NEW_GAME_SIG.upper().replace("0X", "0x")],
                "data": "0x01006400",
                "blockNumber": "0x1d8598",
                "transactionHash": "0xABC",
                "logIndex": 3,
            }
        )
        assert log.address == CONTRACT_ADDRESS
        assert log.topics == (NEW_GAME_SIG,)
        assert log.block_number == 1934744
        assert log.tx_hash == "0xabc"
        assert log.log_index == 3
        assert log.code_hash is None

    def test_snake_case_keys(self) -> None:
        log = event_log_from_record(
            {"address": CONTRACT_ADDRESS, "topics": [], "data_hex": "0x00", "block_number": "12", "code_hash": "0xAA"}
        )
        assert log.data_hex == "0x00"
        assert log.block_number == 12
        assert log.code_hash == "0xaa"

    def test_iter_logs(self, tmp_path: Path) -> None:
        path = tmp_path / "logs.jsonl"
        rows = [{"address": CONTRACT_ADDRESS, "topics": [NEW_GAME_SIG], "data": "0x", "blockNumber": i} for i in range(3)]
        path.write_text("\n".join(json.dumps(r) for r in rows) + "\n\n")
        assert [log.block_number for log in iter_logs(path)] == [0, 1, 2]

    def test_invalid_line(self, tmp_path: Path) -> None:
        path = tmp_path / "logs.jsonl"
        path.write_text(json.dumps({"topics": []}) + "\n")
        with pytest.raises(InvalidLogRecord, match="logs.jsonl:1"):
            list(iter_logs(path))

    def test_parse_log_line(self) -> None:
        log = parse_log_line(json.dumps({"address": CONTRACT_ADDRESS, "topics": [], "data": "0x", "blockNumber": 7}))
        assert log.block_number == 7
        with pytest.raises(InvalidLogRecord, match="logs.jsonl:9"):
            parse_log_line('"just a string"', "logs.jsonl:9")
