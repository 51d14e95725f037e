"""
Brute-force search over bootloader seeds.

Every trial is a pure function of (seed, public key, target prefix): seed a
private engine, rebuild the candidate buffer, encrypt it and compare the
low-order ciphertext bytes against the leaked prefix. The seed range is cut
into disjoint chunks so several worker processes can scan it without any
shared state; the first reported match stops further dispatch.
"""
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from concurrent.futures.process import BrokenProcessPool
from dataclasses import dataclass
import signal
import threading
import time
from typing import Dict, Iterator, Optional, Tuple

import structlog

from seed_tickler.candidate import build_candidate
from seed_tickler.errors import InputError
from seed_tickler.oracle import PublicKey, encrypt
from seed_tickler.progress import LatestSlot, SearchSnapshot, SearchStatus
from seed_tickler.twister import MersenneTwister, WORD_MASK

log = structlog.get_logger()

SEED_STEP = 2
ODD_SEED_COUNT = 1 << 31
MAX_PREFIX_WIDTH = 8
DEFAULT_CHUNK_SIZE = 4096
CANCEL_CHECK_INTERVAL = 256


@dataclass(frozen=True, slots=True)
class TargetPrefix:
    """The leaked low-order bytes of the ciphertext, read little-endian."""

    value: int
    width: int = MAX_PREFIX_WIDTH

    def __post_init__(self):
        if not 1 <= self.width <= MAX_PREFIX_WIDTH:
            raise InputError(f"prefix width must be 1..{MAX_PREFIX_WIDTH} bytes, got {self.width}")
        if not 0 <= self.value < 1 << (8 * self.width):
            raise InputError(f"prefix {self.value:#x} does not fit in {self.width} bytes")

    @classmethod
    def from_ciphertext(cls, ciphertext: bytes, width: int = MAX_PREFIX_WIDTH) -> "TargetPrefix":
        return cls(int.from_bytes(ciphertext[:width], "little"), width)

    def matches(self, ciphertext: bytes) -> bool:
        return int.from_bytes(ciphertext[:self.width], "little") == self.value

    def __str__(self):
        return f"{self.value:0{self.width * 2}X}"


@dataclass(frozen=True, slots=True)
class SearchResult:
    status: SearchStatus
    seeds_tried: int
    seed: Optional[int] = None
    candidate: Optional[bytes] = None
    ciphertext: Optional[bytes] = None

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.FOUND


Chunk = Tuple[int, int]


def seed_at(start_seed: int, index: int) -> int:
    """The index-th seed tried from start_seed, wrapping at 2^32."""
    return (start_seed + SEED_STEP * index) & WORD_MASK


def try_seed(
    seed: int, key: PublicKey, target: TargetPrefix, engine: MersenneTwister
) -> Optional[Tuple[bytes, bytes]]:
    """Run one trial. Returns (candidate, ciphertext) on a match, else None."""
    engine.seed(seed)
    candidate = build_candidate(engine)
    ciphertext = encrypt(candidate, key)
    if target.matches(ciphertext):
        return bytes(candidate), ciphertext
    return None


def scan_range(
    key: PublicKey,
    target: TargetPrefix,
    first_seed: int,
    count: int,
    cancel: Optional[threading.Event] = None,
) -> SearchResult:
    """Try count consecutive odd seeds starting at first_seed with a private engine."""
    engine = MersenneTwister()
    seed = first_seed
    for tried in range(count):
        if cancel is not None and tried % CANCEL_CHECK_INTERVAL == 0 and cancel.is_set():
            return SearchResult(SearchStatus.CANCELLED, tried)

        hit = try_seed(seed, key, target, engine)
        if hit is not None:
            candidate, ciphertext = hit
            return SearchResult(SearchStatus.FOUND, tried + 1, seed, candidate, ciphertext)
        seed = (seed + SEED_STEP) & WORD_MASK

    return SearchResult(SearchStatus.EXHAUSTED, count)


def iter_chunks(start_seed: int, count: int, chunk_size: int) -> Iterator[Chunk]:
    """Split count seeds from start_seed into disjoint (first_seed, length) chunks."""
    for offset in range(0, count, chunk_size):
        yield seed_at(start_seed, offset), min(chunk_size, count - offset)


class _Progress:
    """Builds and publishes snapshots for an optional consumer."""

    def __init__(self, slot: Optional[LatestSlot[SearchSnapshot]], start_seed: int, total: int, workers: int):
        self.slot = slot
        self.start_seed = start_seed
        self.total = total
        self.workers = workers
        self.started = time.monotonic()
        self.version = 0
        self.tried = 0

    @property
    def current_seed(self) -> int:
        return seed_at(self.start_seed, max(self.tried - 1, 0))

    def publish(self, status: SearchStatus, current_seed: int, found_seed: Optional[int] = None) -> None:
        if self.slot is None:
            return
        self.version += 1
        self.slot.publish(
            SearchSnapshot(
                version=self.version,
                status=status,
                start_seed=self.start_seed,
                current_seed=current_seed,
                seeds_tried=self.tried,
                seeds_total=self.total,
                elapsed=time.monotonic() - self.started,
                workers=self.workers,
                found_seed=found_seed,
            )
        )


def search_seeds(
    key: PublicKey,
    target: TargetPrefix,
    start_seed: int,
    count: Optional[int] = None,
    *,
    workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress: Optional[LatestSlot[SearchSnapshot]] = None,
    cancel: Optional[threading.Event] = None,
) -> SearchResult:
    """
    Search count odd seeds upwards from start_seed (forced odd) for one whose
    ciphertext starts with target.

    count=None covers the whole odd seed space, wrapping at 2^32. Ends in
    FOUND, EXHAUSTED once every seed in range was tried, or CANCELLED when
    cancel is set. Oracle errors propagate.
    """
    if not 0 <= start_seed <= WORD_MASK:
        raise InputError(f"start seed {start_seed:#x} is not a 32-bit value")
    total = ODD_SEED_COUNT if count is None else count
    if not 0 <= total <= ODD_SEED_COUNT:
        raise InputError(f"seed count must be 0..{ODD_SEED_COUNT}, got {total}")
    if workers < 1:
        raise InputError(f"workers must be at least 1, got {workers}")
    if chunk_size < 1:
        raise InputError(f"chunk size must be at least 1, got {chunk_size}")

    start_seed |= 1
    tracker = _Progress(progress, start_seed, total, workers)
    log.info(
        "search started",
        start_seed=f"{start_seed:08X}",
        target=str(target),
        seeds=total,
        workers=workers,
        modulus_bits=key.size_bits,
    )

    try:
        chunks = iter_chunks(start_seed, total, chunk_size)
        if workers == 1:
            result = _search_serial(key, target, chunks, tracker, cancel)
        else:
            result = _search_parallel(key, target, chunks, tracker, cancel, workers)
    finally:
        if progress is not None:
            progress.close()

    match result.status:
        case SearchStatus.FOUND:
            log.info("seed found", seed=f"{result.seed:08X}", seeds_tried=result.seeds_tried)
        case SearchStatus.EXHAUSTED:
            log.warning("seed range exhausted", seeds_tried=result.seeds_tried)
        case SearchStatus.CANCELLED:
            log.warning("search cancelled", seeds_tried=result.seeds_tried)
    return result


def _search_serial(
    key: PublicKey,
    target: TargetPrefix,
    chunks: Iterator[Chunk],
    tracker: _Progress,
    cancel: Optional[threading.Event],
) -> SearchResult:
    for first_seed, length in chunks:
        if cancel is not None and cancel.is_set():
            break

        result = scan_range(key, target, first_seed, length, cancel)
        tracker.tried += result.seeds_tried

        if result.status is SearchStatus.FOUND:
            tracker.publish(SearchStatus.FOUND, result.seed, found_seed=result.seed)
            return _with_total(result, tracker.tried)
        if result.status is SearchStatus.CANCELLED:
            break
        tracker.publish(SearchStatus.RUNNING, tracker.current_seed)

    if cancel is not None and cancel.is_set():
        tracker.publish(SearchStatus.CANCELLED, tracker.current_seed)
        return SearchResult(SearchStatus.CANCELLED, tracker.tried)
    tracker.publish(SearchStatus.EXHAUSTED, tracker.current_seed)
    return SearchResult(SearchStatus.EXHAUSTED, tracker.tried)


def _ignore_sigint() -> None:
    """Worker initializer: Ctrl-C is handled by the parent through the cancel event."""
    signal.signal(signal.SIGINT, signal.SIG_IGN)


def _search_parallel(
    key: PublicKey,
    target: TargetPrefix,
    chunks: Iterator[Chunk],
    tracker: _Progress,
    cancel: Optional[threading.Event],
    workers: int,
) -> SearchResult:
    # Keep a bounded window of chunks in flight; workers own their engines.
    executor = ProcessPoolExecutor(max_workers=workers, initializer=_ignore_sigint)
    pending: Dict[Future, Chunk] = {}
    try:
        while True:
            while len(pending) < workers * 2 and not (cancel is not None and cancel.is_set()):
                chunk = next(chunks, None)
                if chunk is None:
                    break
                pending[executor.submit(scan_range, key, target, *chunk)] = chunk

            if not pending:
                break

            done, _ = wait(pending, timeout=0.5, return_when=FIRST_COMPLETED)
            found = []
            for future in done:
                del pending[future]
                try:
                    result = future.result()
                except (KeyboardInterrupt, BrokenProcessPool):
                    # An interrupted worker only counts as cancellation once cancel is set.
                    if cancel is None or not cancel.is_set():
                        raise
                    continue
                tracker.tried += result.seeds_tried
                if result.status is SearchStatus.FOUND:
                    found.append(result)

            if found:
                # Several chunks may finish together; report the one closest to the start.
                best = min(found, key=lambda r: (r.seed - tracker.start_seed) & WORD_MASK)
                tracker.publish(SearchStatus.FOUND, best.seed, found_seed=best.seed)
                return _with_total(best, tracker.tried)
            tracker.publish(SearchStatus.RUNNING, tracker.current_seed)
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    if cancel is not None and cancel.is_set():
        tracker.publish(SearchStatus.CANCELLED, tracker.current_seed)
        return SearchResult(SearchStatus.CANCELLED, tracker.tried)
    tracker.publish(SearchStatus.EXHAUSTED, tracker.current_seed)
    return SearchResult(SearchStatus.EXHAUSTED, tracker.tried)


def _with_total(result: SearchResult, tried: int) -> SearchResult:
    return SearchResult(result.status, tried, result.seed, result.candidate, result.ciphertext)
