# cesr_core/matter.py
"""
cesr_core.matter
----------------
Defines Matter, the fully qualified cryptographic primitive.

A Matter holds one raw payload together with its code and derives the
three wire representations:

- qb64:  url-safe base64 text whose leading characters are the code
- qb64b: the same text as bytes, for transport buffers
- qb2:   packed binary of the qb64 bit string, header included

A Matter is built either from (raw, code) when emitting, or from the
front of a qb64 / qb2 buffer when parsing. Instances never change after
construction.

Reading a primitive off a stream always follows the same order:
peek the first character, look up the hard size, read the hard code,
look up its Sizage, then read the rest of the full size.
"""

from __future__ import annotations
import logging
from typing import Mapping, Optional, Tuple, Union

from .codex import (
    DIG_DEX,
    HARDS,
    NON_TRANS_DEX,
    SIZES,
    MatterCodex,
    Sizage,
    header_len_of,
    sizage_of,
)
from .errors import (
    ConversionError,
    RawSizeError,
    ShortageError,
    SoftMaterialError,
    UnknownCodeError,
)
from .utils import b2_to_b64, b64_to_int, decode_b64, encode_b64, sceil

log = logging.getLogger("cesr.matter")

Buffer = Union[bytes, bytearray, memoryview]


class Matter:
    """
    Fully qualified cryptographic material primitive.

    Parameters (first one supplied wins, in this order):
        raw:   payload bytes, encoded under ``code`` (and ``soft``)
        qb64b: qb64 bytes buffer beginning with a primitive
        qb64:  qb64 text beginning with a primitive
        qb2:   qb2 binary buffer beginning with a primitive

    strip: after parsing from ``qb64b`` or ``qb2``, delete the consumed
        primitive from the front of the buffer. Requires a bytearray.

    Without any source the instance is an empty placeholder under
    ``code`` (non-transferable Ed25519 by default).
    """

    Codex = MatterCodex
    Sizes: Mapping[str, Sizage] = SIZES
    Hards: Mapping[str, int] = HARDS

    def __init__(
        self,
        raw: Optional[Buffer] = None,
        code: Union[str, MatterCodex] = MatterCodex.Ed25519N,
        soft: str = "",
        qb64b: Optional[Buffer] = None,
        qb64: Optional[Union[str, bytes]] = None,
        qb2: Optional[Buffer] = None,
        strip: bool = False,
    ):
        code = code.value if isinstance(code, MatterCodex) else code

        if raw is not None:
            self._code, self._soft, self._raw = self._validate(bytes(raw), code, soft)
            self._qb64b = self._infil()

        elif qb64b is not None:
            self._check_strippable(qb64b, strip)
            fs = self._exfil(qb64b)
            if strip:
                del qb64b[:fs]

        elif qb64 is not None:
            self._check_strippable(qb64, strip)
            if isinstance(qb64, str):
                qb64 = qb64.encode("utf-8")
            fs = self._exfil(qb64)
            if strip:
                del qb64[:fs]

        elif qb2 is not None:
            self._check_strippable(qb2, strip)
            bfs = self._bexfil(qb2)
            if strip:
                del qb2[:bfs]

        else:
            self._sizage(code)
            self._code, self._soft, self._raw = code, "", b""
            self._qb64b = b""

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def code(self) -> str:
        """Hard part of the derivation code."""
        return self._code

    @property
    def soft(self) -> str:
        return self._soft

    @property
    def both(self) -> str:
        """Hard and soft parts of the code together."""
        return self._code + self._soft

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def qb64b(self) -> bytes:
        return self._qb64b

    @property
    def qb64(self) -> str:
        return self._qb64b.decode("utf-8")

    @property
    def qb2(self) -> bytes:
        return decode_b64(self._qb64b)

    @property
    def size(self) -> int:
        """Full size in qb64 characters, 0 for the placeholder."""
        return len(self._qb64b)

    @property
    def transferable(self) -> bool:
        return self._code not in NON_TRANS_DEX

    @property
    def digestive(self) -> bool:
        return self._code in DIG_DEX

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matter):
            return NotImplemented
        return (self._code, self._soft, self._raw, self._qb64b) == \
            (other._code, other._soft, other._raw, other._qb64b)

    def __hash__(self) -> int:
        return hash((self._code, self._soft, self._raw, self._qb64b))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self._code!r}, qb64={self.qb64!r})"

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------
    def _sizage(self, code: str) -> Sizage:
        return sizage_of(code, self.Sizes)

    def _validate(self, raw: bytes, code: str, soft: str) -> Tuple[str, str, bytes]:
        hs, ss, fs, ls = self._sizage(code)
        if len(code) != hs:
            raise UnknownCodeError(f"Code {code!r} does not match hard size {hs}")

        if not isinstance(soft, str) or len(soft) != ss:
            raise SoftMaterialError(f"Soft part {soft!r} for code {code!r} must be {ss} chars")
        self._check_soft(soft)

        rawsize = (fs - hs - ss) * 3 // 4 - ls
        if len(raw) != rawsize:
            raise RawSizeError(
                f"Raw size {len(raw)} does not match {rawsize} for code {code!r}")
        return code, soft, raw

    @staticmethod
    def _check_soft(soft: str) -> int:
        """Soft part as a base64 integer, empty soft is 0."""
        try:
            return b64_to_int(soft)
        except ValueError as ex:
            raise SoftMaterialError(f"Soft part {soft!r} has non base64 characters") from ex

    @staticmethod
    def _check_strippable(buf, strip: bool) -> None:
        if strip and not isinstance(buf, bytearray):
            raise TypeError(f"strip requires a bytearray buffer, got {type(buf).__name__}")

    # ------------------------------------------------------------------
    # Codec engine
    # ------------------------------------------------------------------
    def _infil(self) -> bytes:
        """
        Encode raw into qb64b.

        ps pad bytes plus ls lead bytes of zeros go in front of raw so the
        base64 groups align. The first ps characters of the encoding only
        hold pad bits; they are dropped and the code takes their place.
        """
        hs, ss, fs, ls = self._sizage(self._code)
        cs = hs + ss
        ps = cs % 4
        both = self.both.encode("utf-8")
        full = both + encode_b64(bytes(ps + ls) + self._raw)[ps:]
        if len(full) != fs:
            raise RawSizeError(f"Encoded size {len(full)} does not match {fs} for code {self._code!r}")
        return full

    def _exfil(self, qb64b: Buffer) -> int:
        """
        Decode the primitive at the front of qb64b into code, soft and raw.
        Returns the number of characters consumed.
        """
        have = len(qb64b)
        hs = header_len_of(bytes(qb64b[:1]), self.Hards)
        if have < hs:
            raise ShortageError(f"Need {hs} chars for hard code, have {have}", need=hs, have=have)

        hard = bytes(qb64b[:hs]).decode("utf-8", errors="replace")
        _, ss, fs, ls = self._sizage(hard)
        cs = hs + ss
        if have < cs:
            raise ShortageError(f"Need {cs} chars for code {hard!r}, have {have}", need=cs, have=have)

        soft = bytes(qb64b[hs:cs]).decode("utf-8", errors="replace")
        self._check_soft(soft)

        if have < fs:
            raise ShortageError(f"Need {fs} chars for code {hard!r}, have {have}", need=fs, have=have)

        full = bytes(qb64b[:fs])
        ps = cs % 4
        try:
            paw = decode_b64(b"A" * ps + full[cs:])
        except ValueError as ex:
            raise ConversionError(f"Invalid qb64 payload for code {hard!r}: {ex}") from ex

        if any(paw[:ps + ls]):
            raise ConversionError(f"Nonzero pad or lead bits for code {hard!r}")

        raw = paw[ps + ls:]
        if len(raw) != (fs - cs) * 3 // 4 - ls:
            raise ConversionError(f"Decoded raw size {len(raw)} is wrong for code {hard!r}")

        self._code, self._soft, self._raw, self._qb64b = hard, soft, raw, full
        log.debug(f"[MATTER EXFIL] code={hard} fs={fs}")
        return fs

    def _bexfil(self, qb2: Buffer) -> int:
        """
        Decode the primitive at the front of binary qb2.
        Returns the number of bytes consumed.
        """
        have = len(qb2)
        if not have:
            raise ShortageError("Empty buffer, need first code byte", need=1, have=0)

        hs = header_len_of(b2_to_b64(qb2, 1), self.Hards)
        bhs = sceil(hs * 3 / 4)
        if have < bhs:
            raise ShortageError(f"Need {bhs} bytes for hard code, have {have}", need=bhs, have=have)

        hard = b2_to_b64(qb2, hs)
        _, ss, fs, ls = self._sizage(hard)
        bcs = sceil((hs + ss) * 3 / 4)
        if have < bcs:
            raise ShortageError(f"Need {bcs} bytes for code {hard!r}, have {have}", need=bcs, have=have)

        bfs = fs * 3 // 4
        if have < bfs:
            raise ShortageError(f"Need {bfs} bytes for code {hard!r}, have {have}", need=bfs, have=have)

        self._exfil(encode_b64(bytes(qb2[:bfs])))
        return bfs
