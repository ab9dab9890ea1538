from __future__ import annotations

# Ink! metadata layout
SUPPORTED_METADATA_VERSION = 6
H160_PATH                  = "primitive_types.H160"
ADDRESS_BYTES              = 20

# decoder limits and tags
DEFAULT_MAX_DEPTH    = 64
UNKNOWN_VARIANT_TAG  = "UnknownVariant"
DEFAULT_VERSION_TAG  = "v1.0.0"
