"""
Rebuild the 256 byte key-data buffer the bootloader feeds into RSA.

Two layout quirks were observed in the bootloader binary and are reproduced
as-is; their purpose is unknown:

* the last word keeps only its low 16 bits and gets 0x0200 added in
  big-endian byte order, which leaves the top byte of the buffer zero;
* byte 245 is overwritten with zero after generation.
"""
import struct
from typing import Optional

from seed_tickler.twister import MersenneTwister
from seed_tickler.utils import bswap32

KEY_DATA_WORDS = 64
KEY_DATA_SIZE = KEY_DATA_WORDS * 4
ZEROED_BYTE_OFFSET = 245
TOP_WORD_MASK = 0xFFFF
TOP_WORD_OFFSET = 0x0200

_PACK_WORDS = struct.Struct(f"<{KEY_DATA_WORDS}I")


def top_word(word: int) -> int:
    """Truncate and offset the final word exactly as the bootloader does."""
    return bswap32((bswap32(word & TOP_WORD_MASK) + TOP_WORD_OFFSET) & 0xFFFFFFFF)


def build_candidate(engine: MersenneTwister) -> bytearray:
    """Drain 64 words from a freshly seeded engine into a candidate buffer."""
    words = [engine.next() for _ in range(KEY_DATA_WORDS)]
    words[-1] = top_word(words[-1])

    buffer = bytearray(_PACK_WORDS.pack(*words))
    buffer[ZEROED_BYTE_OFFSET] = 0
    return buffer


def candidate_for_seed(seed: int, engine: Optional[MersenneTwister] = None) -> bytearray:
    if engine is None:
        engine = MersenneTwister()
    engine.seed(seed)
    return build_candidate(engine)
