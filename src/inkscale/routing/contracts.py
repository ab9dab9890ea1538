"""Contracts configuration: contracts -> versions -> metadata + routing rules.

Two layouts are accepted per contract:

Extended (versioned)::

    {"name": "guess_the_number",
     "versions": [{"tag": "v0.1.0", "metadata": "gtn_v1.json",
                   "addresses": ["0x..."], "from": 1934744, "to": null}]}

Simple (single version, tag read from the metadata's `contract.version`)::

    {"name": "guess_the_number", "metadata": "gtn.json",
     "address": "0x...", "range": {"from": 1934744}}

Metadata paths are resolved relative to the configuration file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from inkscale.constants import DEFAULT_VERSION_TAG
from inkscale.core.config import DecoderConfig, IndexedArgPolicy
from inkscale.core.models import VersionEntry
from inkscale.decoding.decoder import EventDecoder
from inkscale.errors import InvalidConfig
from inkscale.metadata.catalog import MetadataCatalog
from inkscale.routing.registry import VersionRegistry

logger = logging.getLogger(__name__)


class BlockRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_block: int | None = Field(default=None, alias="from")
    to_block: int | None = Field(default=None, alias="to")


class VersionConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tag: str
    metadata: str | None = None
    abi: str | None = None
    address: str | None = None
    addresses: list[str] | None = None
    from_block: int | None = Field(default=None, alias="from")
    to_block: int | None = Field(default=None, alias="to")
    blockRange: BlockRange | None = None
    range: BlockRange | None = None
    codeHash: str | None = None
    indexedPolicy: IndexedArgPolicy | None = None
    eventTypeMapping: dict[str, str] | None = None


class ContractConfig(BaseModel):
    name: str
    versions: list[VersionConfig] | None = None
    metadata: str | None = None
    abi: str | None = None
    address: str | None = None
    addresses: list[str] | None = None
    blockRange: BlockRange | None = None
    range: BlockRange | None = None
    indexedPolicy: IndexedArgPolicy | None = None
    eventTypeMapping: dict[str, str] = {}


class ContractsFile(BaseModel):
    contracts: list[ContractConfig]


# ---------- normalization ----------


def _addresses(address: str | None, addresses: list[str] | None) -> list[str]:
    return list(addresses or ([address] if address else []))


def _load_catalog(config_dir: Path, rel_path: str | None, what: str) -> MetadataCatalog:
    if not rel_path:
        raise InvalidConfig(f"metadata path required for {what}")
    path = (config_dir / rel_path).resolve()
    if not path.is_file():
        raise InvalidConfig(f"metadata file not found: {path} (for {what})")
    return MetadataCatalog.load(path)


def _version_tag_from(catalog: MetadataCatalog) -> str:
    version = catalog.contract_version
    if not version:
        logger.warning("metadata has no contract.version; using default %s", DEFAULT_VERSION_TAG)
        return DEFAULT_VERSION_TAG
    return version if version.startswith("v") else f"v{version}"


def _versioned(contract: ContractConfig, config_dir: Path) -> VersionRegistry:
    registry = VersionRegistry()
    for v in contract.versions or []:
        what = f"{contract.name}@{v.tag}"
        catalog = _load_catalog(config_dir, v.metadata or v.abi or contract.metadata or contract.abi, what)

        addresses = _addresses(v.address, v.addresses) or _addresses(contract.address, contract.addresses)
        block_range = v.blockRange or v.range or BlockRange()
        policy = v.indexedPolicy or contract.indexedPolicy or IndexedArgPolicy.TOPICS_ONLY
        mapping = v.eventTypeMapping if v.eventTypeMapping is not None else contract.eventTypeMapping

        entry = VersionEntry(
            version=v.tag,
            addresses=tuple(addresses),
            code_hash=v.codeHash,
            from_block=block_range.from_block if block_range.from_block is not None else v.from_block,
            to_block=block_range.to_block if block_range.to_block is not None else v.to_block,
            indexed_policy=policy.value,
        )
        decoder = EventDecoder(catalog, DecoderConfig(event_type_mapping=mapping, indexed_policy=policy))
        registry = registry.merged(entry, decoder)
        logger.debug("registered %s (from=%s, to=%s)", what, entry.from_block, entry.to_block)
    return registry


def _simple(contract: ContractConfig, config_dir: Path) -> VersionRegistry:
    catalog = _load_catalog(config_dir, contract.metadata or contract.abi, contract.name)
    addresses = _addresses(contract.address, contract.addresses)
    if not addresses:
        raise InvalidConfig(f"at least one address required for contract {contract.name}")

    block_range = contract.range or contract.blockRange or BlockRange()
    policy = contract.indexedPolicy or IndexedArgPolicy.TOPICS_ONLY
    entry = VersionEntry(
        version=_version_tag_from(catalog),
        addresses=tuple(addresses),
        from_block=block_range.from_block if block_range.from_block is not None else 0,
        to_block=block_range.to_block,
        indexed_policy=policy.value,
    )
    decoder = EventDecoder(
        catalog, DecoderConfig(event_type_mapping=contract.eventTypeMapping, indexed_policy=policy)
    )
    return VersionRegistry().merged(entry, decoder)


# ---------- public API ----------


def load_contracts(path: Path) -> dict[str, VersionRegistry]:
    """Read a contracts configuration file into one VersionRegistry per contract."""
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfig(f"cannot read contracts config {path}: {exc}") from exc
    try:
        config = ContractsFile.model_validate(raw)
    except ValidationError as exc:
        raise InvalidConfig(f"contracts config must contain a 'contracts' array: {exc}") from exc

    config_dir = path.resolve().parent
    registries: dict[str, VersionRegistry] = {}
    for contract in config.contracts:
        if contract.versions:
            registries[contract.name] = _versioned(contract, config_dir)
        else:
            registries[contract.name] = _simple(contract, config_dir)
    return registries
