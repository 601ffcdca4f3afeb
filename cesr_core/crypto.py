"""
cesr_core.crypto
----------------
Cryptographic collaborators that produce and consume raw bytes, framed
as Matter primitives:

- Ed25519: seeds, verification keys, signatures
- X25519: encryption key pairs
- Blake3: 256 bit digests
- random 128 bit salts

The codec itself never calls into this module.
"""

from __future__ import annotations
from typing import Tuple
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519, x25519
import os
import blake3
from .codex import MatterCodex
from .matter import Matter

VERKEY_CODES = (MatterCodex.Ed25519.value, MatterCodex.Ed25519N.value)


def _require(matter: Matter, *codes: str) -> None:
    if matter.code not in codes:
        raise ValueError(f"Unsupported code {matter.code!r}, expected one of {codes}")

# --------- Ed25519 (sign/verify) ----------
def ed25519_generate(transferable: bool = True) -> Tuple[Matter, Matter]:
    sk = ed25519.Ed25519PrivateKey.generate()
    seed = Matter(raw=sk.private_bytes_raw(), code=MatterCodex.Ed25519_Seed)
    return seed, ed25519_verfer(seed, transferable=transferable)

def ed25519_verfer(seed: Matter, transferable: bool = True) -> Matter:
    _require(seed, MatterCodex.Ed25519_Seed.value)
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(seed.raw)
    code = MatterCodex.Ed25519 if transferable else MatterCodex.Ed25519N
    return Matter(raw=sk.public_key().public_bytes_raw(), code=code)

def ed25519_sign(seed: Matter, data: bytes) -> Matter:
    _require(seed, MatterCodex.Ed25519_Seed.value)
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(seed.raw)
    return Matter(raw=sk.sign(data), code=MatterCodex.Ed25519_Sig)

def ed25519_verify(verfer: Matter, sig: Matter, data: bytes) -> bool:
    _require(verfer, *VERKEY_CODES)
    _require(sig, MatterCodex.Ed25519_Sig.value)
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(verfer.raw).verify(sig.raw, data)
        return True
    except InvalidSignature:
        return False

# --------- X25519 (encryption keys) ----------
def x25519_generate() -> Tuple[Matter, Matter]:
    sk = x25519.X25519PrivateKey.generate()
    priv = Matter(raw=sk.private_bytes_raw(), code=MatterCodex.X25519_Private)
    pub = Matter(raw=sk.public_key().public_bytes_raw(), code=MatterCodex.X25519)
    return priv, pub

# --------- Blake3 digests / salts ----------
def blake3_digest(data: bytes) -> Matter:
    return Matter(raw=blake3.blake3(data).digest(), code=MatterCodex.Blake3_256)

def digest_verify(diger: Matter, data: bytes) -> bool:
    _require(diger, MatterCodex.Blake3_256.value)
    return blake3.blake3(data).digest() == diger.raw

def random_salt() -> Matter:
    return Matter(raw=os.urandom(16), code=MatterCodex.Salt_128)
