# cesr_core/codex.py
"""
cesr_core.codex
---------------
Protocol constants for self-framing primitives.

- MatterCodex: closed set of primitive kinds, each bound to its code
- Sizes: code -> Sizage(hs, ss, fs, ls)
- Hards: first character -> hard code size (header length)

These tables are wire constants. Changing any value breaks
interoperability with every other implementation of the encoding.
"""

from __future__ import annotations
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Union

from .errors import InvalidCodeError, ShortageError, UnknownCodeError


class MatterCodex(str, Enum):
    Ed25519_Seed = "A"           # Ed25519 256 bit random seed for private key
    Ed25519N = "B"               # Ed25519 verification key non-transferable, basic derivation
    X25519 = "C"                 # X25519 public encryption key
    Ed25519 = "D"                # Ed25519 verification key basic derivation
    Blake3_256 = "E"             # Blake3 256 bit digest self-addressing derivation
    X25519_Private = "O"         # X25519 private decryption key
    X25519_Cipher_Seed = "P"     # X25519 124 char b64 cipher of 44 char qb64 seed
    Salt_128 = "0A"              # 128 bit random salt or 128 bit number
    Ed25519_Sig = "0B"           # Ed25519 signature
    X25519_Cipher_Salt = "1AAH"  # X25519 100 char b64 cipher of 24 char qb64 salt

    @property
    def code(self) -> str:
        return self.value


MtrDex = MatterCodex

# non-transferable prefix codes
NON_TRANS_DEX = frozenset({MatterCodex.Ed25519N.value})

# digest codes
DIG_DEX = frozenset({MatterCodex.Blake3_256.value})


class Sizage(NamedTuple):
    hs: int  # hard size, chars of the code itself
    ss: int  # soft size, chars of the soft part following the code
    fs: int  # full size, chars of the complete qb64
    ls: int  # lead size, zero bytes prepended to raw


SIZES: Mapping[str, Sizage] = MappingProxyType({
    "A": Sizage(hs=1, ss=0, fs=44, ls=0),
    "B": Sizage(hs=1, ss=0, fs=44, ls=0),
    "C": Sizage(hs=1, ss=0, fs=44, ls=0),
    "D": Sizage(hs=1, ss=0, fs=44, ls=0),
    "E": Sizage(hs=1, ss=0, fs=44, ls=0),
    "O": Sizage(hs=1, ss=0, fs=44, ls=0),
    "P": Sizage(hs=1, ss=0, fs=124, ls=0),
    # Older tables swapped the next three rows, giving 0B (4,0,100,0).
    # hs must equal len(code) and Hards[code[0]], which pins these values.
    "0A": Sizage(hs=2, ss=0, fs=24, ls=0),
    "0B": Sizage(hs=2, ss=0, fs=88, ls=0),
    "1AAH": Sizage(hs=4, ss=0, fs=100, ls=0),
})


def _hards() -> Mapping[str, int]:
    hards = {chr(c): 1 for c in range(ord("A"), ord("Z") + 1)}
    hards.update({chr(c): 1 for c in range(ord("a"), ord("z") + 1)})
    hards.update({"0": 2, "1": 4, "2": 4, "3": 4, "4": 2,
                  "5": 2, "6": 2, "7": 4, "8": 4, "9": 4})
    return MappingProxyType(hards)


HARDS: Mapping[str, int] = _hards()


def code_of(variant: MatterCodex) -> str:
    return MatterCodex(variant).value


def sizage_of(code: Union[str, MatterCodex], sizes: Mapping[str, Sizage] = SIZES) -> Sizage:
    key = code.value if isinstance(code, MatterCodex) else code
    try:
        return sizes[key]
    except (KeyError, TypeError):
        raise UnknownCodeError(f"Unknown code {key!r}") from None


def raw_size_of(code: Union[str, MatterCodex], sizes: Mapping[str, Sizage] = SIZES) -> int:
    """Number of raw bytes a primitive of ``code`` carries."""
    hs, ss, fs, ls = sizage_of(code, sizes)
    return (fs - hs - ss) * 3 // 4 - ls


def header_len_of(first: Union[str, bytes], hards: Mapping[str, int] = HARDS) -> int:
    """
    Number of characters forming the hard code, given only the first
    character of a qb64 primitive.
    """
    if isinstance(first, (bytes, bytearray)):
        first = first[:1].decode("utf-8", errors="replace")
    if not first:
        raise ShortageError("Empty buffer, need first code character", need=1, have=0)
    try:
        return hards[first[0]]
    except KeyError:
        raise InvalidCodeError(f"Unsupported code start character {first[0]!r}") from None
