"""Error taxonomy for metadata loading, value decoding and version routing.

- `InvalidMetadata` / `InvalidConfig` / `InvalidLogRecord`: fatal at load time.
- `DecodeError` and subclasses: fatal for one decode call only.
- `RegistryError` and subclasses: fatal for one resolution only.
"""

from __future__ import annotations


class InkScaleError(Exception):
    """Base class for every error raised by inkscale."""


class InvalidMetadata(InkScaleError, ValueError):
    """The contract metadata document is not a usable Ink! v6 document."""


class InvalidConfig(InkScaleError, ValueError):
    """A contracts or registry configuration file is malformed."""


class InvalidLogRecord(InkScaleError, ValueError):
    """A raw log record cannot be mapped to an EventLog."""


# ---- per-call decode failures ----


class DecodeError(InkScaleError):
    """Decoding one event or value failed; other calls are unaffected."""


class UnknownType(DecodeError, LookupError):
    """A type id is not present in the metadata type table."""


class UnsupportedType(DecodeError):
    """The type shape exists but cannot be decoded (e.g. bit sequences)."""


class BufferUnderrun(DecodeError):
    """A read would go past the end of the byte buffer."""


class MissingTopic(DecodeError):
    """An indexed argument has no remaining topic to read from."""


class RecursionLimitExceeded(DecodeError):
    """Type nesting went deeper than the configured limit."""


# ---- routing failures ----


class RegistryError(InkScaleError):
    """Version routing failed."""


class NoDecoderForAddress(RegistryError, LookupError):
    """No registry entry applies to the requested address."""


class UnknownVersion(RegistryError, LookupError):
    """An entry resolved to a version tag that has no decoder attached."""
