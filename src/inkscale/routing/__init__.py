"""Version routing for contracts whose ABI changes across deployments.

This package provides:
- `VersionRegistry`: resolve (address, block height, code hash) -> version -> decoder
- `merge_entry`: pure insert-or-update of registry entries
- Registry file (de)serialization and the contracts configuration loader
"""

from inkscale.routing.contracts import load_contracts
from inkscale.routing.registry import VersionRegistry, entries_from_json, entries_to_json, merge_entry

__all__ = [
    "VersionRegistry",
    "entries_from_json",
    "entries_to_json",
    "load_contracts",
    "merge_entry",
]
