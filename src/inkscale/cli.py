import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from inkscale.errors import InkScaleError

console = Console(stderr=True)

POLICY_CHOICES = ["topics-only", "also-in-data"]


def _jsonable(value: Any) -> Any:
    """Make decoded values JSON-serializable (bytes -> 0x hex)."""
    from inkscale.decoding.utils import bytes_to_hex

    if isinstance(value, (bytes, bytearray)):
        return bytes_to_hex(bytes(value))
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _parse_renames(renames: tuple[str, ...]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for item in renames:
        label, sep, name = item.partition("=")
        if not sep or not label or not name:
            raise click.BadParameter(f"expected Label=name, got {item!r}", param_hint="--rename")
        mapping[label] = name
    return mapping


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def cli(log_level: str) -> None:
    """inkscale: decode Ink! v6 contract events from raw logs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@cli.command("events")
@click.argument("metadata", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def events_cmd(metadata: Path) -> None:
    """List the events declared in a metadata file."""
    from inkscale.decoding.decoder import EventDecoder
    from inkscale.metadata.catalog import MetadataCatalog

    try:
        catalog = MetadataCatalog.load(metadata)
    except InkScaleError as e:
        raise click.ClickException(str(e)) from e

    decoder = EventDecoder(catalog)
    table = Table(title=f"{catalog.contract_name or metadata.name} {catalog.contract_version or ''}".strip())
    table.add_column("label", style="bold")
    table.add_column("event type")
    table.add_column("signature")
    table.add_column("indexed")
    table.add_column("data")
    for spec in catalog.events:
        table.add_row(
            spec.label,
            decoder.event_type_for(spec),
            f"0x{spec.signature[:10]}" if spec.signature else "-",
            ", ".join(a.label for a in spec.indexed_args) or "-",
            ", ".join(a.label for a in spec.data_args) or "-",
        )
    Console().print(table)


@cli.command("decode")
@click.option("--metadata", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Ink! metadata JSON")
@click.option("--contracts", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Contracts config JSON")
@click.option("--contract", type=str, default=None, help="Contract name in --contracts")
@click.option("--logs", "logs_path", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--out", "out_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="JSONL output (default stdout)")
@click.option("--rename", "renames", multiple=True, help="Label=event_type; repeat for several events")
@click.option(
    "--indexed-policy",
    type=click.Choice(POLICY_CHOICES),
    default="topics-only",
    show_default=True,
    help="Whether indexed args are also SCALE-encoded in data",
)
@click.option("--checksum/--no-checksum", default=False, show_default=True, help="EIP-55 addresses")
def decode_cmd(
    metadata: Path | None,
    contracts: Path | None,
    contract: str | None,
    logs_path: Path,
    out_path: Path | None,
    renames: tuple[str, ...],
    indexed_policy: str,
    checksum: bool,
) -> None:
    """Decode a JSONL dump of raw logs into one JSON line per event."""
    if (metadata is None) == (contracts is None):
        raise click.UsageError("Pass exactly one of --metadata or --contracts")
    if contracts is not None and not contract:
        raise click.UsageError("--contracts requires --contract")

    from inkscale.core.config import DecodeRunConfig, IndexedArgPolicy
    from inkscale.decoding.decoder import EventDecoder
    from inkscale.metadata.catalog import MetadataCatalog
    from inkscale.orchestration.batch import decode_jsonl
    from inkscale.routing.contracts import load_contracts

    config = DecodeRunConfig(
        logs_path=logs_path,
        out_path=out_path,
        metadata_path=metadata,
        contracts_path=contracts,
        contract=contract,
        event_type_mapping=_parse_renames(renames),
        indexed_policy=IndexedArgPolicy(indexed_policy),
        checksum_addresses=checksum,
    )

    t0 = time.time()
    try:
        if config.metadata_path is not None:
            router = EventDecoder(MetadataCatalog.load(config.metadata_path), config.decoder_config())
        else:
            registries = load_contracts(config.contracts_path)
            if config.contract not in registries:
                raise click.ClickException(
                    f"contract {config.contract!r} not in {config.contracts_path} "
                    f"(have: {', '.join(sorted(registries)) or 'none'})"
                )
            router = registries[config.contract]
        result = decode_jsonl(config.logs_path, router)
    except InkScaleError as e:
        raise click.ClickException(str(e)) from e

    out = open(config.out_path, "w") if config.out_path else sys.stdout
    try:
        for item in result.events:
            row = {
                "event_type": item.event.event_type,
                "data": _jsonable(item.event.data),
                "block_number": item.log.block_number,
                "tx_hash": item.log.tx_hash,
                "log_index": item.log.log_index,
                "address": item.log.address,
            }
            out.write(json.dumps(row) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()

    s = result.stats
    elapsed = time.time() - t0
    console.print(f"[bold]done[/]: {s.total_logs} logs • {elapsed:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"[green]decoded[/]={s.decoded}  "
        f"[yellow]skipped_unknown[/]={s.skipped_unknown}  "
        f"[red]failed[/]={s.failed}  "
        f"[magenta]unrouted[/]={s.unrouted}"
    )


# ---------- registry file ----------


@cli.group("registry")
def registry_grp() -> None:
    """Inspect and update version registry files."""


def _load_entries(path: Path) -> tuple:
    from inkscale.routing.registry import entries_from_json

    if not path.exists():
        return ()
    try:
        return entries_from_json(path)
    except InkScaleError as e:
        raise click.ClickException(str(e)) from e


@registry_grp.command("show")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def registry_show_cmd(file: Path) -> None:
    """Print the entries of a registry file."""
    table = Table(title=file.name)
    for col in ("version", "addresses", "code hash", "from", "to", "indexed policy"):
        table.add_column(col)
    for e in _load_entries(file):
        table.add_row(
            e.version,
            "\n".join(e.addresses) or "*",
            e.code_hash or "-",
            "-" if e.from_block is None else str(e.from_block),
            "open" if e.to_block is None else str(e.to_block),
            e.indexed_policy or "-",
        )
    Console().print(table)


def _parse_to(value: str | None) -> int | None:
    if value is None or value.lower() in ("null", "none", ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise click.BadParameter(f"expected a block number or 'null', got {value!r}", param_hint="--to") from None


@registry_grp.command("merge")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--version", "tag", required=True, help="Version tag, e.g. v0.2.0")
@click.option("--address", "addresses", multiple=True, help="Contract address; repeat for several")
@click.option("--from", "from_block", type=int, default=None, help="First block (inclusive)")
@click.option("--to", "to_block", type=str, default=None, help="Last block (exclusive) or 'null'")
@click.option("--code-hash", type=str, default=None)
@click.option("--indexed-policy", type=click.Choice(POLICY_CHOICES), default=None, help="Indexed-arg layout of this version")
def registry_merge_cmd(
    file: Path,
    tag: str,
    addresses: tuple[str, ...],
    from_block: int | None,
    to_block: str | None,
    code_hash: str | None,
    indexed_policy: str | None,
) -> None:
    """Insert or replace one version entry in a registry file."""
    from inkscale.core.models import VersionEntry
    from inkscale.routing.registry import entries_to_json, merge_entry

    entry = VersionEntry(
        version=tag,
        addresses=addresses,
        code_hash=code_hash,
        from_block=from_block,
        to_block=_parse_to(to_block),
        indexed_policy=indexed_policy,
    )
    entries = merge_entry(_load_entries(file), entry)
    file.write_text(json.dumps(entries_to_json(entries), indent=2) + "\n")
    console.print(f"[bold]merged[/] {tag} into {file} ({len(entries)} entries)")
