import re

from .errors import MalformedHexError

_HEX_RE = re.compile(r"[0-9a-fA-F]*")

def encode(data: bytes) -> str:
    """
    Render bytes as lowercase hex, two zero-padded digits per byte.
    Total over every byte sequence: b'' -> ''.
    """
    return bytes(data).hex()

def decode(text: str) -> bytes:
    """
    Parse hex text back into bytes. Case-insensitive.

    Only [0-9a-fA-F] is accepted: no whitespace, no '0x' prefix, no signs.
    Raises MalformedHexError on odd length or any other character, so
    encode(decode(s)) == s.lower() for every accepted s.
    """
    if not isinstance(text, str):
        raise MalformedHexError(f"expected hex text, got {type(text).__name__}")
    if len(text) % 2 != 0:
        raise MalformedHexError(f"odd-length hex string ({len(text)} chars)")
    if not _HEX_RE.fullmatch(text):
        bad = next(c for c in text if c not in "0123456789abcdefABCDEF")
        raise MalformedHexError(f"non-hex character {bad!r} in input")
    return bytes.fromhex(text)
