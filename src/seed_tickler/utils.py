import string
import struct
from typing import List

from seed_tickler.errors import InputError

HEX_DIGITS = frozenset(string.hexdigits)
MAX_SEED_DIGITS = 8
MAX_PREFIX_DIGITS = 16


def _parse_hex(text: str, name: str, max_digits: int) -> int:
    """Parse bare hex (no 0x prefix) with an upper bound on digits."""
    if text is None:
        raise InputError(f"{name} is required")
    text = text.strip()
    if not text:
        raise InputError(f"{name} must not be empty")
    if not set(text) <= HEX_DIGITS:
        raise InputError(f"{name} must be bare hexadecimal without a 0x prefix: {text!r}")
    if len(text) > max_digits:
        raise InputError(f"{name} must be at most {max_digits} hex digits: {text!r}")
    return int(text, 16)


def parse_seed(text: str) -> int:
    """Parse a 32-bit seed given as up to 8 hex digits."""
    return _parse_hex(text, "seed", MAX_SEED_DIGITS)


def parse_target_prefix(text: str) -> int:
    """
    Parse a leaked ciphertext prefix given as up to 16 hex digits.
    Short inputs are zero-extended; the digit count never narrows the comparison.
    """
    return _parse_hex(text, "target prefix", MAX_PREFIX_DIGITS)


def bswap32(x: int) -> int:
    return (
        ((x & 0xFF000000) >> 24)
        | ((x & 0x00FF0000) >> 8)
        | ((x & 0x0000FF00) << 8)
        | ((x & 0x000000FF) << 24)
    )


def words_from_bytes(data: bytes) -> List[int]:
    """Split a buffer into little-endian 32-bit words."""
    if len(data) % 4:
        raise ValueError(f"buffer length {len(data)} is not a multiple of 4")
    return list(struct.unpack(f"<{len(data) // 4}I", data))


def hex_words(data: bytes) -> List[str]:
    return [f"{w:08X}" for w in words_from_bytes(data)]
