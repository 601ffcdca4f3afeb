# cesr_core/errors.py
"""
cesr_core.errors
----------------
Error taxonomy for the primitive codec.

Errors split the same way transport errors do: transient errors mean
"read more bytes and try again", permanent errors are fatal for the
current call or parse position.
"""

from __future__ import annotations
from typing import Optional


class MatterError(Exception):
    retryable: bool = False


class MatterTransientError(MatterError):
    retryable = True


class MatterPermanentError(MatterError):
    pass


class ShortageError(MatterTransientError):
    """
    Buffer holds fewer characters (qb64) or bytes (qb2) than the
    primitive at its front declares.
    """

    def __init__(self, message: str, need: Optional[int] = None, have: Optional[int] = None):
        super().__init__(message)
        self.need = need
        self.have = have


class UnknownCodeError(MatterPermanentError):
    pass


class InvalidCodeError(MatterPermanentError):
    """Leading character is not a valid hard code selector."""


class RawSizeError(MatterPermanentError):
    pass


class SoftMaterialError(MatterPermanentError):
    pass


class ConversionError(MatterPermanentError):
    """Undecodable base64 payload or nonzero pad/lead bits."""
