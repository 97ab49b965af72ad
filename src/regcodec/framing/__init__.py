"""Wire envelope framing for regcodec.

This module provides the magic byte + schema id prefix that wraps every
encoded payload.
"""

from __future__ import annotations

from .envelope import MAGIC_BYTE, read_envelope, write_envelope

__all__ = [
    "MAGIC_BYTE",
    "write_envelope",
    "read_envelope",
]
