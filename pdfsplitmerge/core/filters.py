"""Stream decoding for the structural streams the parser must inspect.

Only cross-reference streams and object streams are ever decoded; page
content, images and fonts are passed through untouched.  The actual codecs are
pypdf's filter implementations so predictor handling matches a widely used
reader.
"""

from __future__ import annotations

from typing import Any

from pypdf.filters import (
    ASCII85Decode,
    ASCIIHexDecode,
    FlateDecode,
    LZWDecode,
    RunLengthDecode,
)
from pypdf.generic import ArrayObject, DictionaryObject, FloatObject, NameObject, NumberObject

from .exceptions import ParseError
from .objects import PdfArray, PdfDict, PdfName, PdfStream

__all__ = ["decode_stream"]

_DECODERS = {
    "/FlateDecode": FlateDecode,
    "/Fl": FlateDecode,
    "/ASCIIHexDecode": ASCIIHexDecode,
    "/AHx": ASCIIHexDecode,
    "/ASCII85Decode": ASCII85Decode,
    "/A85": ASCII85Decode,
    "/LZWDecode": LZWDecode,
    "/LZW": LZWDecode,
    "/RunLengthDecode": RunLengthDecode,
    "/RL": RunLengthDecode,
}


def _to_pypdf(value: Any) -> Any:
    if isinstance(value, PdfName):
        return NameObject(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return NumberObject(value)
    if isinstance(value, float):
        return FloatObject(value)
    if isinstance(value, PdfDict):
        return DictionaryObject({NameObject(key): _to_pypdf(item) for key, item in value.items()})
    if isinstance(value, PdfArray):
        return ArrayObject(_to_pypdf(item) for item in value)
    return value


def _decode_parms(stream: PdfStream, position: int, resolve) -> DictionaryObject | None:
    parms = resolve(stream.dictionary.get("/DecodeParms"))
    if isinstance(parms, PdfArray):
        parms = resolve(parms[position]) if position < len(parms) else None
    if isinstance(parms, PdfDict):
        return _to_pypdf(
            PdfDict({key: resolve(value) for key, value in parms.items()})
        )
    return None


def decode_stream(stream: PdfStream, resolve=lambda value: value) -> bytes:
    """Return the decoded bytes of ``stream``.

    ``resolve`` dereferences indirect filter parameters.  Unsupported filters
    (image codecs such as ``/DCTDecode``) raise :class:`ParseError` since
    structural streams never use them.
    """

    filters = resolve(stream.dictionary.get("/Filter"))
    if isinstance(filters, PdfName):
        names = [filters]
    elif isinstance(filters, PdfArray):
        names = [resolve(item) for item in filters]
    else:
        names = []

    data = stream.data
    for position, name in enumerate(names):
        decoder = _DECODERS.get(name)
        if decoder is None:
            raise ParseError(f"Unsupported filter {name} on structural stream")
        try:
            data = decoder.decode(data, _decode_parms(stream, position, resolve))
        except ParseError:
            raise
        except Exception as exc:
            raise ParseError(f"Failed to decode {name} stream: {exc}") from exc
    return data
