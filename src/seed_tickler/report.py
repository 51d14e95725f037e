from typing import List

from seed_tickler.search import SearchResult
from seed_tickler.progress import SearchStatus
from seed_tickler.utils import hex_words

WORDS_PER_LINE = 8


def format_words(data: bytes, words_per_line: int = WORDS_PER_LINE) -> List[str]:
    """Render a buffer as little-endian 32-bit words, 8 hex digits each."""
    words = hex_words(data)
    return [
        " " + " ".join(words[i:i + words_per_line])
        for i in range(0, len(words), words_per_line)
    ]


def format_report(result: SearchResult) -> str:
    """ Build the operator report for a finished search. """
    if result.status is not SearchStatus.FOUND:
        return f"**** NOT FOUND ****\nSearch {result.status} after {result.seeds_tried} seeds.\n"

    lines = [
        "**** FOUND ****",
        f"Seed: {result.seed:08X}",
        "",
        "Key Data:",
        *format_words(result.candidate),
        "Seed Data:",
        *format_words(result.ciphertext),
    ]
    return "\n".join(lines) + "\n"
