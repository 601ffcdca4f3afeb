"""
CESR Core Package
=================
Self-framing primitive codec for cryptographic material.

Provides:
- Code tables (MatterCodex, Sizes, Hards)
- Matter: raw <-> qb64 <-> qb2 conversion of a single primitive
- Streaming extraction of primitives from text or binary buffers
"""

from .codex import (
    DIG_DEX,
    HARDS,
    NON_TRANS_DEX,
    SIZES,
    MatterCodex,
    MtrDex,
    Sizage,
    code_of,
    header_len_of,
    raw_size_of,
    sizage_of,
)
from .errors import (
    ConversionError,
    InvalidCodeError,
    MatterError,
    MatterPermanentError,
    MatterTransientError,
    RawSizeError,
    ShortageError,
    SoftMaterialError,
    UnknownCodeError,
)
from .matter import Matter
from .parsing import MatterParser, extract, iter_matters
from .utils import qb2_to_qb64, qb64_to_qb2

__version__ = "0.1.0"

__all__ = [
    "DIG_DEX",
    "HARDS",
    "NON_TRANS_DEX",
    "SIZES",
    "MatterCodex",
    "MtrDex",
    "Sizage",
    "code_of",
    "header_len_of",
    "raw_size_of",
    "sizage_of",
    "ConversionError",
    "InvalidCodeError",
    "MatterError",
    "MatterPermanentError",
    "MatterTransientError",
    "RawSizeError",
    "ShortageError",
    "SoftMaterialError",
    "UnknownCodeError",
    "Matter",
    "MatterParser",
    "extract",
    "iter_matters",
    "qb2_to_qb64",
    "qb64_to_qb2",
]
