"""Byte-level reader for PDF direct objects."""

from __future__ import annotations

import re

from .exceptions import ParseError
from .objects import PdfArray, PdfDict, PdfName, PdfRef, PdfString

__all__ = [
    "WHITESPACE",
    "DELIMITERS",
    "skip_ws",
    "read_int",
    "read_value",
    "read_object_header",
    "read_keyword",
    "MAX_NESTING",
]

WHITESPACE = b"\x00\t\n\x0c\r "
DELIMITERS = b"()<>[]{}/%"
_STOP = WHITESPACE + DELIMITERS

_NUMBER = re.compile(rb"[+-]?(?:\d+\.?\d*|\.\d+)")
_REFERENCE_TAIL = re.compile(rb"[\x00\t\n\x0c\r ]+(\d+)[\x00\t\n\x0c\r ]+R(?![^\x00\t\n\x0c\r ()<>\[\]{}/%])")
_OBJECT_HEADER = re.compile(rb"(\d+)[\x00\t\n\x0c\r ]+(\d+)[\x00\t\n\x0c\r ]+obj(?![^\x00\t\n\x0c\r ()<>\[\]{}/%])")
_HEX_DIGITS = b"0123456789abcdefABCDEF"
MAX_NESTING = 256

_ESCAPES = {
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("("): b"(",
    ord(")"): b")",
    ord("\\"): b"\\",
}


def skip_ws(data: bytes, index: int) -> int:
    """Advance past whitespace and comments."""

    length = len(data)
    while index < length:
        byte = data[index]
        if byte in WHITESPACE:
            index += 1
        elif byte == 0x25:  # %
            while index < length and data[index] not in b"\r\n":
                index += 1
        else:
            break
    return index


def read_int(data: bytes, index: int) -> tuple[int, int]:
    index = skip_ws(data, index)
    start = index
    while index < len(data) and data[index] in b"+-0123456789":
        index += 1
    if start == index:
        raise ParseError("Expected integer", offset=start)
    try:
        return int(data[start:index]), index
    except ValueError as exc:
        raise ParseError("Malformed integer", offset=start) from exc


def read_keyword(data: bytes, index: int) -> tuple[bytes, int]:
    """Read a run of regular characters such as ``obj`` or ``trailer``."""

    index = skip_ws(data, index)
    start = index
    while index < len(data) and data[index] not in _STOP:
        index += 1
    return data[start:index], index


def read_object_header(data: bytes, index: int) -> tuple[int, int, int] | None:
    """Match ``<number> <generation> obj`` at ``index``.

    Returns the object number, generation and the offset just after the
    ``obj`` keyword, or ``None`` when no header starts there.
    """

    index = skip_ws(data, index)
    match = _OBJECT_HEADER.match(data, index)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), match.end()


def read_value(data: bytes, index: int, depth: int = 0) -> tuple[object, int]:
    """Read one direct object starting at ``index``.

    Returns the decoded value and the offset of the first byte after it.
    Integers followed by ``<generation> R`` are read as :class:`PdfRef`.
    Arrays and dictionaries nested deeper than ``MAX_NESTING`` raise
    :class:`ParseError`.
    """

    index = skip_ws(data, index)
    if index >= len(data):
        raise ParseError("Unexpected end of data", offset=index)

    byte = data[index]
    if byte == 0x2F:  # /
        return _read_name(data, index)
    if byte == 0x3C:  # <
        if data[index + 1 : index + 2] == b"<":
            _check_depth(depth, index)
            return _read_dictionary(data, index + 2, depth + 1)
        return _read_hex_string(data, index + 1)
    if byte == 0x28:  # (
        return _read_literal_string(data, index + 1)
    if byte == 0x5B:  # [
        _check_depth(depth, index)
        return _read_array(data, index + 1, depth + 1)

    match = _NUMBER.match(data, index)
    if match:
        token = match.group(0)
        end = match.end()
        if b"." in token:
            return float(token), end
        number = int(token)
        tail = _REFERENCE_TAIL.match(data, end)
        if tail and number >= 0 and not token.startswith((b"+", b"-")):
            return PdfRef(number, int(tail.group(1))), tail.end()
        return number, end

    keyword, end = read_keyword(data, index)
    if keyword == b"true":
        return True, end
    if keyword == b"false":
        return False, end
    if keyword == b"null":
        return None, end
    raise ParseError(f"Unexpected token {keyword[:20]!r}", offset=index)


def _check_depth(depth: int, index: int) -> None:
    if depth >= MAX_NESTING:
        raise ParseError("Nesting too deep", offset=index)


def _read_name(data: bytes, index: int) -> tuple[PdfName, int]:
    index += 1
    start = index
    while index < len(data) and data[index] not in _STOP:
        index += 1
    raw = data[start:index]
    if b"#" in raw:
        decoded = bytearray()
        position = 0
        while position < len(raw):
            chunk = raw[position + 1 : position + 3]
            if raw[position] == 0x23 and len(chunk) == 2 and all(c in _HEX_DIGITS for c in chunk):
                decoded.append(int(chunk, 16))
                position += 3
            else:
                decoded.append(raw[position])
                position += 1
        raw = bytes(decoded)
    return PdfName("/" + raw.decode("latin-1")), index


def _read_dictionary(data: bytes, index: int, depth: int) -> tuple[PdfDict, int]:
    result = PdfDict()
    while True:
        index = skip_ws(data, index)
        if index >= len(data):
            raise ParseError("Unterminated dictionary", offset=index)
        if data[index : index + 2] == b">>":
            return result, index + 2
        if data[index] != 0x2F:
            raise ParseError("Dictionary key is not a name", offset=index)
        key, index = _read_name(data, index)
        index = skip_ws(data, index)
        if data[index : index + 2] == b">>":
            # Key without a value reads as null.
            result[key] = None
            return result, index + 2
        value, index = read_value(data, index, depth)
        result[key] = value


def _read_array(data: bytes, index: int, depth: int) -> tuple[PdfArray, int]:
    result = PdfArray()
    while True:
        index = skip_ws(data, index)
        if index >= len(data):
            raise ParseError("Unterminated array", offset=index)
        if data[index] == 0x5D:  # ]
            return result, index + 1
        value, index = read_value(data, index, depth)
        result.append(value)


def _read_hex_string(data: bytes, index: int) -> tuple[PdfString, int]:
    end = data.find(b">", index)
    if end == -1:
        raise ParseError("Unterminated hex string", offset=index)
    digits = bytes(c for c in data[index:end] if c not in WHITESPACE)
    if any(c not in _HEX_DIGITS for c in digits):
        raise ParseError("Invalid hex string", offset=index)
    if len(digits) % 2:
        digits += b"0"
    return PdfString(bytes.fromhex(digits.decode("ascii")), hex=True), end + 1


def _read_literal_string(data: bytes, index: int) -> tuple[PdfString, int]:
    result = bytearray()
    depth = 1
    length = len(data)
    while index < length:
        byte = data[index]
        if byte == 0x5C:  # backslash
            index += 1
            if index >= length:
                break
            escaped = data[index]
            if escaped in _ESCAPES:
                result += _ESCAPES[escaped]
                index += 1
            elif 0x30 <= escaped <= 0x37:
                end = index
                while end < length and end - index < 3 and 0x30 <= data[end] <= 0x37:
                    end += 1
                result.append(int(data[index:end], 8) & 0xFF)
                index = end
            elif escaped == 0x0D:
                index += 2 if data[index + 1 : index + 2] == b"\n" else 1
            elif escaped == 0x0A:
                index += 1
            else:
                result.append(escaped)
                index += 1
            continue
        if byte == 0x28:
            depth += 1
        elif byte == 0x29:
            depth -= 1
            if depth == 0:
                return PdfString(bytes(result)), index + 1
        elif byte == 0x0D:
            result += b"\n"
            index += 2 if data[index + 1 : index + 2] == b"\n" else 1
            continue
        result.append(byte)
        index += 1
    raise ParseError("Unterminated literal string", offset=index)
