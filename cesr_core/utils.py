"""
cesr_core.utils
---------------
Base64 helpers for the url-safe alphabet used by qb64 text.
All decoding is strict: characters outside the alphabet are an error,
never silently dropped.
"""

from __future__ import annotations
import base64, math, re
from typing import Union

from .errors import ConversionError

B64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
B64_INDEX = {c: i for i, c in enumerate(B64_CHARS)}

_B64_RE = re.compile(rb"\A[A-Za-z0-9_-]*\Z")


def sceil(r: float) -> int:
    """Symmetric ceiling: rounds away from zero."""
    return int(math.copysign(math.ceil(abs(r)), r))


def encode_b64(b: bytes) -> bytes:
    return base64.urlsafe_b64encode(b)


def decode_b64(s: Union[str, bytes]) -> bytes:
    if isinstance(s, str):
        s = s.encode("utf-8")
    if not _B64_RE.match(s):
        raise ValueError("Non base64url character in input")
    if len(s) % 4:
        raise ValueError(f"Base64 length {len(s)} is not a multiple of 4")
    return base64.urlsafe_b64decode(s)


def int_to_b64(i: int, length: int = 1) -> str:
    if i < 0:
        raise ValueError(f"Negative value {i}")
    out = []
    while i:
        i, r = divmod(i, 64)
        out.append(B64_CHARS[r])
    text = "".join(reversed(out))
    if len(text) > length:
        raise ValueError(f"Value needs {len(text)} chars, only {length} allowed")
    return text.rjust(length, "A")


def b64_to_int(s: Union[str, bytes]) -> int:
    if isinstance(s, bytes):
        s = s.decode("utf-8")
    i = 0
    for c in s:
        try:
            i = i * 64 + B64_INDEX[c]
        except KeyError:
            raise ValueError(f"Invalid base64 character {c!r}") from None
    return i


def b2_to_b64(b: bytes, count: int) -> str:
    """Return the first ``count`` sextets of binary ``b`` as base64 text."""
    n = sceil(count * 3 / 4)
    if n > len(b):
        raise ValueError(f"Need {n} bytes for {count} sextets, have {len(b)}")
    i = int.from_bytes(b[:n], "big")
    i >>= 2 * (count % 4)
    return int_to_b64(i, count)


def qb64_to_qb2(qb64: Union[str, bytes]) -> bytes:
    """Pack one or more complete qb64 primitives into binary."""
    try:
        return decode_b64(qb64)
    except ValueError as ex:
        raise ConversionError(f"Invalid qb64 stream: {ex}") from ex


def qb2_to_qb64(qb2: bytes) -> str:
    """Expand one or more complete qb2 primitives into qb64 text."""
    if len(qb2) % 3:
        raise ConversionError(f"Binary length {len(qb2)} is not a multiple of 3")
    return encode_b64(bytes(qb2)).decode("utf-8")
