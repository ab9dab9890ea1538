from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from inkscale.core.models import DecodedEvent


# ---------------------------------------------------------------------------
# IEventDecoder
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventDecoder(Protocol):
    """
    Anything that turns one raw contract log into a DecodedEvent.

    Domain expectations:
    - Unknown signatures return None; they are not errors.
    - Failures raise `inkscale.errors.DecodeError` subclasses and never leave
      shared state behind.
    """

    def decode_event(
        self,
        signature: str,
        data: bytes | str,
        topics: Sequence[str],
    ) -> DecodedEvent | None:
        """
        Decode one event.

        Implementations:
        - `EventDecoder` (metadata-driven interpreter)
        - Hand-written or stub decoders for testing
        """
        ...
