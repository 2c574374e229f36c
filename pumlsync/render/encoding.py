"""PlantUML text encoding for server URLs (deflate + PlantUML base64)."""

from __future__ import annotations

import zlib

# PlantUML's custom base64 alphabet
_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"


def encode_plantuml(source: str) -> str:
    """Encode diagram text the way PlantUML servers expect it in a URL."""
    # raw deflate: strip the zlib header and adler32 trailer
    compressed = zlib.compress(source.encode("utf-8"), level=9)[2:-4]
    result = []

    for i in range(0, len(compressed), 3):
        chunk = compressed[i : i + 3]
        if len(chunk) == 3:
            b1, b2, b3 = chunk
            result.append(_ALPHABET[b1 >> 2])
            result.append(_ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
            result.append(_ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)])
            result.append(_ALPHABET[b3 & 0x3F])
        elif len(chunk) == 2:
            b1, b2 = chunk
            result.append(_ALPHABET[b1 >> 2])
            result.append(_ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
            result.append(_ALPHABET[(b2 & 0xF) << 2])
        elif len(chunk) == 1:
            b1 = chunk[0]
            result.append(_ALPHABET[b1 >> 2])
            result.append(_ALPHABET[(b1 & 0x3) << 4])

    return "".join(result)


def decode_plantuml(encoded: str) -> str:
    """Inverse of :func:`encode_plantuml`."""
    values = [_ALPHABET.index(c) for c in encoded]
    data = bytearray()
    for i in range(0, len(values), 4):
        group = values[i : i + 4]
        n = len(group)
        c1 = group[0]
        c2 = group[1] if n > 1 else 0
        c3 = group[2] if n > 2 else 0
        c4 = group[3] if n > 3 else 0
        data.append(((c1 << 2) | (c2 >> 4)) & 0xFF)
        if n > 2:
            data.append(((c2 & 0xF) << 4 | (c3 >> 2)) & 0xFF)
        if n > 3:
            data.append(((c3 & 0x3) << 6 | c4) & 0xFF)
    return zlib.decompress(bytes(data), -15).decode("utf-8")
