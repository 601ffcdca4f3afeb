# cesr_core/parsing.py
"""
cesr_core.parsing
-----------------
Streaming extraction of primitives from qb64 text or qb2 binary buffers.

A ShortageError at the front of a buffer means the stream has not
delivered the whole primitive yet: the partial bytes stay buffered and
parsing resumes on the next feed. Every other MatterError is fatal for
the stream position, since an unknown primitive has no known length to
skip.
"""

from __future__ import annotations
from typing import Iterator, List, Optional, Type

from .config import load_settings
from .errors import MatterError, ShortageError
from .logger import get_logger
from .matter import Matter

log = get_logger("cesr.parsing")


def extract(ims: bytearray, binary: bool = False, klas: Type[Matter] = Matter) -> Matter:
    """Parse one primitive off the front of ``ims`` and strip it."""
    if binary:
        return klas(qb2=ims, strip=True)
    return klas(qb64b=ims, strip=True)


def iter_matters(ims: bytearray, binary: bool = False, klas: Type[Matter] = Matter) -> Iterator[Matter]:
    """
    Yield primitives from the front of ``ims`` until it is empty or holds
    only the beginning of a primitive, which is left in place.
    """
    while ims:
        try:
            matter = extract(ims, binary=binary, klas=klas)
        except ShortageError as ex:
            log.debug(f"[PARSE WAIT] need={ex.need} have={ex.have}")
            return
        yield matter


class MatterParser:
    """
    Incremental parser for a stream of concatenated primitives.

    Usage:
        parser = MatterParser()
        for chunk in chunks:
            for matter in parser.feed(chunk):
                ...
        parser.close()
    """

    def __init__(self, binary: Optional[bool] = None, klas: Type[Matter] = Matter):
        if binary is None:
            binary = load_settings().stream_domain == "bin"
        self.binary = binary
        self.klas = klas
        self._ims = bytearray()
        self.count = 0

    @property
    def pending(self) -> int:
        """Bytes buffered that do not yet form a whole primitive."""
        return len(self._ims)

    def feed(self, data: bytes) -> List[Matter]:
        """
        Buffer ``data`` and return every complete primitive now available.

        A fatal error after some primitives were extracted is deferred: the
        extracted ones are returned and the offending bytes stay at the
        front of the buffer, so the next feed or close raises.
        """
        self._ims.extend(data)
        out = []
        while self._ims:
            try:
                out.append(extract(self._ims, binary=self.binary, klas=self.klas))
            except ShortageError as ex:
                log.debug(f"[PARSE WAIT] need={ex.need} have={ex.have}")
                break
            except MatterError as ex:
                if not out:
                    raise
                log.warning(f"[PARSE ERROR] deferred after extracted={len(out)}: {ex}")
                break
        self.count += len(out)
        if out:
            log.debug(f"[PARSE] extracted={len(out)} pending={self.pending}")
        return out

    def close(self) -> None:
        """Fail if the stream ended in the middle of a primitive."""
        if not self._ims:
            return
        log.warning(f"[PARSE CLOSE] stream ended with {self.pending} unparsed bytes")
        try:
            extract(bytearray(self._ims), binary=self.binary, klas=self.klas)
        except ShortageError as ex:
            raise ShortageError(
                f"Stream ended inside a primitive: {ex}", need=ex.need, have=ex.have) from ex
