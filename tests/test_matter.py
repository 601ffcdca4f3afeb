import base64
import logging
import os
from types import MappingProxyType

import pytest
from cesr_core.codex import SIZES, MatterCodex, Sizage, raw_size_of
from cesr_core.errors import (
    ConversionError, InvalidCodeError, MatterError, RawSizeError, ShortageError,
    SoftMaterialError, UnknownCodeError,
)
from cesr_core.matter import Matter
from cesr_core.utils import qb2_to_qb64, qb64_to_qb2

ALL_CODES = [v.value for v in MatterCodex]


def sample(code):
    return Matter(raw=os.urandom(raw_size_of(code)), code=code)


def test_blake3_zero_digest_example():
    m = Matter(raw=bytes(32), code=MatterCodex.Blake3_256)
    assert m.qb64 == "E" + "A" * 43
    assert len(m.qb64) == 44
    assert m.qb64b == m.qb64.encode()
    assert m.qb2 == b"\x10" + bytes(32)
    assert m.size == 44
    assert m.digestive

    back = Matter(qb64="E" + "A" * 43)
    assert back.raw == bytes(32)
    assert back.code == "E"


def test_signature_example():
    m = Matter(raw=bytes(64), code=MatterCodex.Ed25519_Sig)
    assert len(m.qb64) == 88
    assert m.qb64.startswith("0B")
    assert m.qb2[:2] == b"\xd0\x10"
    assert len(m.qb2) == 66

    sig = sample("0B")
    assert len(sig.qb64) == 88 and sig.qb64[:2] == "0B"


def test_four_char_code():
    m = Matter(raw=bytes(72), code=MatterCodex.X25519_Cipher_Salt)
    assert m.qb64 == "1AAH" + "A" * 96
    assert m.qb2[:3] == b"\xd4\x00\x07"
    assert Matter(qb2=m.qb2).code == "1AAH"


def test_infil_matches_plain_base64():
    raw = bytes(range(32))
    m = Matter(raw=raw, code="D")
    expected = "D" + base64.urlsafe_b64encode(b"\x00" + raw).decode()[1:]
    assert m.qb64 == expected
    assert m.qb2 == base64.urlsafe_b64decode(expected)


@pytest.mark.parametrize("code", ALL_CODES)
def test_round_trips(code):
    m = sample(code)
    hs, ss, fs, ls = SIZES[code]
    assert len(m.qb64) == fs
    assert len(m.qb2) == fs * 3 // 4
    assert m.qb64.startswith(code)

    assert Matter(qb64=m.qb64) == m
    assert Matter(qb64b=m.qb64b) == m
    assert Matter(qb2=m.qb2) == m
    assert Matter(qb64=m.qb64).raw == m.raw
    assert Matter(qb2=m.qb2).code == code

    assert qb64_to_qb2(m.qb64) == m.qb2
    assert qb2_to_qb64(m.qb2) == m.qb64
    assert qb64_to_qb2(qb2_to_qb64(m.qb2)) == m.qb2


@pytest.mark.parametrize("code", ALL_CODES)
def test_truncation_is_shortage(code):
    m = sample(code)
    fs = m.size

    with pytest.raises(ShortageError) as exc:
        Matter(qb64=m.qb64[:fs - 1])
    assert exc.value.need == fs
    assert exc.value.retryable

    for end in range(fs):
        with pytest.raises(ShortageError):
            Matter(qb64b=m.qb64b[:end])

    qb2 = m.qb2
    for end in range(len(qb2)):
        with pytest.raises(ShortageError):
            Matter(qb2=qb2[:end])


def test_strip_text():
    a = sample("0B")
    b = sample("E")
    buf = bytearray(a.qb64b + b.qb64b)

    m = Matter(qb64b=buf, strip=True)
    assert m == a
    assert buf == bytearray(b.qb64b)

    m = Matter(qb64b=buf, strip=True)
    assert m == b
    assert buf == bytearray()


def test_no_strip_leaves_buffer():
    a = sample("A")
    b = sample("1AAH")
    buf = bytearray(a.qb64b + b.qb64b)

    m = Matter(qb64b=buf)
    assert m == a
    assert buf == bytearray(a.qb64b + b.qb64b)

    # trailing data is ignored without strip
    assert Matter(qb64=a.qb64 + b.qb64) == a


def test_strip_binary():
    a = sample("P")
    b = sample("0A")
    buf = bytearray(a.qb2 + b.qb2)

    assert Matter(qb2=buf, strip=True) == a
    assert buf == bytearray(b.qb2)
    assert Matter(qb2=buf) == b
    assert buf == bytearray(b.qb2)


def test_strip_requires_mutable_buffer():
    m = sample("E")
    with pytest.raises(TypeError):
        Matter(qb64=m.qb64, strip=True)
    with pytest.raises(TypeError):
        Matter(qb64b=m.qb64b, strip=True)
    with pytest.raises(TypeError):
        Matter(qb2=m.qb2, strip=True)


def test_failed_strip_keeps_buffer():
    m = sample("0B")
    buf = bytearray(m.qb64b[:50])
    with pytest.raises(ShortageError):
        Matter(qb64b=buf, strip=True)
    assert buf == bytearray(m.qb64b[:50])


def test_default_placeholder():
    m = Matter()
    assert m.raw == b""
    assert m.code == MatterCodex.Ed25519N
    assert m.qb64 == ""
    assert m.qb64b == b""
    assert m.qb2 == b""
    assert m.size == 0
    assert not m.transferable
    assert Matter() == Matter()


def test_raw_size_mismatch():
    with pytest.raises(RawSizeError):
        Matter(raw=bytes(31), code="E")
    with pytest.raises(RawSizeError):
        Matter(raw=bytes(33), code="E")
    with pytest.raises(RawSizeError):
        Matter(raw=b"", code="0B")


def test_unknown_codes():
    with pytest.raises(UnknownCodeError):
        Matter(raw=bytes(32), code="Z")
    with pytest.raises(UnknownCodeError):
        Matter(qb64="Z" + "A" * 43)
    with pytest.raises(UnknownCodeError):
        Matter(qb64="0Z" + "A" * 22)
    with pytest.raises(UnknownCodeError):
        Matter(qb64="1AAZ" + "A" * 96)


def test_invalid_start_character():
    for text in ("-AAB" + "A" * 40, "_" * 44, "=" * 4):
        with pytest.raises(InvalidCodeError):
            Matter(qb64=text)
    with pytest.raises(InvalidCodeError):
        Matter(qb2=b"\xff" * 33)  # first sextet is '_'


def test_malformed_payload():
    with pytest.raises(ConversionError):
        Matter(qb64="E" + "A" * 42 + "=")
    with pytest.raises(ConversionError):
        Matter(qb64="E" + "A" * 42 + "+")
    # top pad bits of the first payload char must be zero
    with pytest.raises(ConversionError):
        Matter(qb64="E_" + "A" * 42)


def test_all_errors_share_base():
    for bad in ({"raw": bytes(1), "code": "E"}, {"qb64": "Z" * 44}, {"qb64": "-" * 44}, {"qb64": "E"}):
        with pytest.raises(MatterError):
            Matter(**bad)


def test_value_semantics():
    raw = os.urandom(32)
    a = Matter(raw=raw, code="D")
    b = Matter(raw=bytearray(raw), code=MatterCodex.Ed25519)
    assert a == b
    assert hash(a) == hash(b)
    assert a != Matter(raw=raw, code="B")
    assert a.transferable and not a.digestive
    assert "code='D'" in repr(a)

    with pytest.raises(AttributeError):
        a.raw = bytes(32)


def test_exfil_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="cesr.matter")
    Matter(qb64="E" + "A" * 43)
    assert "[MATTER EXFIL] code=E fs=44" in caplog.text


# Table with soft and lead parts, not used by any standard code.
class WideMatter(Matter):
    Sizes = MappingProxyType({
        **SIZES,
        "4A": Sizage(hs=2, ss=2, fs=8, ls=0),
        "5B": Sizage(hs=2, ss=0, fs=8, ls=1),
    })


def test_soft_part():
    m = WideMatter(raw=b"abc", code="4A", soft="AB")
    assert m.qb64 == "4AABYWJj"
    assert m.both == "4AAB"

    back = WideMatter(qb64="4AABYWJj")
    assert back.soft == "AB"
    assert back.raw == b"abc"
    assert WideMatter(qb2=m.qb2) == m

    with pytest.raises(SoftMaterialError):
        WideMatter(raw=b"abc", code="4A", soft="A")
    with pytest.raises(SoftMaterialError):
        WideMatter(raw=b"abc", code="4A", soft="A$")
    with pytest.raises(SoftMaterialError):
        Matter(raw=bytes(32), code="E", soft="AA")
    with pytest.raises(ShortageError):
        WideMatter(qb64="4AA")


def test_malformed_soft_part_on_parse():
    with pytest.raises(SoftMaterialError):
        WideMatter(qb64="4A$$YWJj")


def test_lead_bytes():
    m = WideMatter(raw=b"\xff\xff\xff", code="5B")
    assert m.qb64 == "5BAA____"
    assert m.qb2 == b"\xe4\x10\x00\xff\xff\xff"
    assert WideMatter(qb64="5BAA____").raw == b"\xff\xff\xff"
    assert WideMatter(qb2=m.qb2) == m

    with pytest.raises(ConversionError):
        WideMatter(qb64="5BAB____")
