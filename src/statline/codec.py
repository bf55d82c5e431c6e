"""XOR + base64 payload codec for obfuscated dataset files.

Not encryption: it only keeps data files from being readable at a glance.
"""

from __future__ import annotations

import base64
import binascii
import json
from itertools import cycle
from typing import Any

from statline.exceptions import CodecError

_PLAIN_JSON_PREFIXES = (b"[", b"{")


def _xor(data: bytes, key: bytes) -> bytes:
    return bytes(b ^ k for b, k in zip(data, cycle(key)))


def is_obfuscated(raw: bytes) -> bool:
    """Plain JSON payloads start with ``[`` or ``{``; anything else is encoded."""
    return not raw.lstrip().startswith(_PLAIN_JSON_PREFIXES)


def encode_payload(obj: Any, key: str) -> bytes:
    if not key:
        raise CodecError("obfuscation key must not be empty")
    text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    return base64.b64encode(_xor(text.encode("utf-8"), key.encode("utf-8")))


def decode_payload(raw: bytes, key: str) -> Any:
    """Parse ``raw`` as JSON, decoding it first when it is obfuscated."""
    if not is_obfuscated(raw):
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CodecError(f"payload is not valid JSON: {exc}") from exc

    if not key:
        raise CodecError("obfuscation key must not be empty")
    try:
        decoded = base64.b64decode(raw.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CodecError(f"payload is neither JSON nor base64: {exc}") from exc

    try:
        return json.loads(_xor(decoded, key.encode("utf-8")).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CodecError("decoded payload is not valid JSON (wrong key?)") from exc


__all__ = ["decode_payload", "encode_payload", "is_obfuscated"]
