"""
Value encoder for AMOUNT tokens.

Turns a typed value plus an EncodingSpec into the uppercase hex (or, for
ABC123/TXT, literal text) that is spliced into a code line.

Encodings:
- HEX input:   hex literal, right-aligned to `width` bytes, big-endian;
               reversed for LITTLE.
- Decimal:     unsigned integer, `width` little-endian bytes; reversed
               for BIG.
- FLOAT:       IEEE-754 single, little-endian bytes; reversed for BIG.
- ABC123+TXT:  the text itself, no conversion.
- UTF08:       UTF-8 bytes; reversed only for LITTLE.
- UTF16:       UTF-16 code units in the requested byte order.

The width comes from the default literal: one byte per two hex digits,
rounded up and clamped to 1..8, or 4 when there is no literal.

Any failure yields an unsuccessful ParseResult; nothing partial is ever
returned.
"""

import math
import struct
from typing import Final, Optional
from modpatch.lib.log import LOG
from modpatch.models.dataModel import (
    AmountInput,
    AmountType,
    EncodingSpec,
    Endian,
    ParseResult,
    Token,
    ValueRadix,
)

TEXT_TYPES: Final[frozenset[AmountType]] = frozenset(
    {AmountType.ABC123, AmountType.UTF08, AmountType.UTF16}
)
DEFAULT_WIDTH: Final[int] = 4
U32_MAX: Final[int] = 0xFFFFFFFF
U64_MAX: Final[int] = 0xFFFFFFFFFFFFFFFF


def default_isLiteral(default: str) -> bool:
    d = (default or "").strip()
    return bool(d) and d.upper() != "NA"


def width_infer(default: str) -> int:
    """Bytes implied by the default literal's hex-digit count."""
    if not default_isLiteral(default):
        return DEFAULT_WIDTH
    return min(8, max(1, math.ceil(len(default.strip()) / 2)))


def maxLength_get(default: str, type_: AmountType) -> Optional[int]:
    """Character limit for text encodings; NA or no default means none."""
    if type_ in TEXT_TYPES and default_isLiteral(default):
        return len(default.strip())
    return None


def maxValue_get(default: str, type_: AmountType, width: int) -> Optional[int]:
    """Numeric ceiling for integer encodings.

    A default that reads as a positive decimal integer is itself the
    ceiling; otherwise 32 bits, or the full width when wider.
    """
    if type_ in TEXT_TYPES or type_ == AmountType.FLOAT:
        return None
    d = (default or "").strip()
    if d.isascii() and d.isdigit() and int(d) > 0:
        return int(d)
    return U32_MAX if width <= 4 else (1 << (8 * width)) - 1


def defaultBytes_get(default: str, endian: Endian) -> bytes:
    """Four bytes, little-endian order, read from a default literal."""
    s = default.strip() if default_isLiteral(default) else "00000000"
    if len(s) % 2:
        s = "0" + s
    raw = bytearray(bytes.fromhex(s))
    if endian == Endian.BIG:
        raw.reverse()
    return bytes((raw + bytearray(4))[:4])


def initial_get(default: str, type_: AmountType, endian: Endian) -> str:
    """Suggested value for the prompt, derived from the default literal."""
    if type_ in TEXT_TYPES:
        return ""
    try:
        raw = defaultBytes_get(default, endian)
    except ValueError:
        return "0"
    if type_ == AmountType.FLOAT:
        return format(struct.unpack("<f", raw)[0], ".7g")
    return str(int.from_bytes(raw, "little"))


def spec_build(
    token: Token,
    type_: Optional[AmountType] = None,
    endian: Optional[Endian] = None,
) -> EncodingSpec:
    """Resolve the EncodingSpec of one AMOUNT token.

    Args:
        token: An AMOUNT token from the scanner
        type_: Optional override, honoured only for HEX and FLOAT tokens
        endian: Optional override, honoured only for HEX and FLOAT tokens

    Returns:
        EncodingSpec for this token instance
    """
    t: AmountType = token.type or AmountType.HEX
    e: Endian = token.endian or Endian.BIG
    selectable: bool = t in (AmountType.HEX, AmountType.FLOAT)
    if selectable:
        t = type_ or t
        e = endian or e
    width: int = width_infer(token.default)
    return EncodingSpec(
        type=t,
        endian=e,
        width=width,
        max_length=maxLength_get(token.default, t),
        max_value=maxValue_get(token.default, t, width),
        default=token.default,
        initial=initial_get(token.default, t, e),
        selectable=selectable,
    )


def fail(msg: str) -> ParseResult:
    LOG(msg)
    return ParseResult(text="", error=msg, success=False)


def hex_fromBytes(raw: bytes) -> str:
    return raw.hex().upper()


def hexLiteral_encode(text: str, spec: EncodingSpec) -> ParseResult:
    s = text.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    s = s.lstrip("0") or "0"
    if len(s) % 2:
        s = "0" + s
    try:
        raw = bytes.fromhex(s)
    except ValueError:
        return fail(f"Not a hex value: {text!r}")
    raw = raw[-spec.width:].rjust(spec.width, b"\x00")
    if spec.endian == Endian.LITTLE:
        raw = raw[::-1]
    return ParseResult(text=hex_fromBytes(raw), error=None, success=True)


def decimal_encode(text: str, spec: EncodingSpec) -> ParseResult:
    s = text.strip().lstrip("+")
    if not (s.isascii() and s.isdigit()):
        return fail(f"Not an unsigned integer: {text!r}")
    n = int(s)
    if n > U64_MAX:
        return fail(f"Value {n} does not fit in 64 bits")
    if spec.max_value is not None and n > spec.max_value:
        return fail(f"Value {n} exceeds the maximum of {spec.max_value}")
    raw = n.to_bytes(8, "little")[: spec.width]
    if spec.endian == Endian.BIG:
        raw = raw[::-1]
    return ParseResult(text=hex_fromBytes(raw), error=None, success=True)


def float_encode(text: str, spec: EncodingSpec) -> ParseResult:
    try:
        raw = struct.pack("<f", float(text.strip()))
    except (ValueError, OverflowError, struct.error):
        return fail(f"Not a 32-bit float: {text!r}")
    if spec.endian == Endian.BIG:
        raw = raw[::-1]
    return ParseResult(text=hex_fromBytes(raw), error=None, success=True)


def text_encode(text: str, spec: EncodingSpec) -> ParseResult:
    if spec.max_length is not None and len(text) > spec.max_length:
        return fail(f"Max length is {spec.max_length} characters, got {len(text)}")
    if spec.type == AmountType.ABC123:
        if spec.endian != Endian.TXT:
            return fail("ABC123 values require the TXT byte order")
        return ParseResult(text=text, error=None, success=True)
    try:
        if spec.type == AmountType.UTF08:
            raw = text.encode("utf-8")
            if spec.endian == Endian.LITTLE:
                raw = raw[::-1]
        else:
            codec = "utf-16-be" if spec.endian == Endian.BIG else "utf-16-le"
            raw = text.encode(codec)
    except UnicodeEncodeError as e:
        return fail(f"Cannot encode text: {e}")
    return ParseResult(text=hex_fromBytes(raw), error=None, success=True)


def value_encode(value: AmountInput | str, spec: EncodingSpec) -> ParseResult:
    """Encode one answer according to `spec`.

    Args:
        value: The typed answer; a bare string is read as decimal
        spec: Encoding resolved for the token being filled

    Returns:
        ParseResult with the replacement text, or the reason it failed
    """
    answer: AmountInput = value if isinstance(value, AmountInput) else AmountInput(text=value)
    text: str = answer.text if answer.text is not None else ""

    if spec.type in TEXT_TYPES:
        return text_encode(text, spec)
    if spec.type == AmountType.FLOAT:
        return float_encode(text, spec)
    if answer.radix == ValueRadix.HEX:
        return hexLiteral_encode(text, spec)
    return decimal_encode(text, spec)
