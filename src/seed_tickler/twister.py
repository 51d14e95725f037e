"""
Mersenne Twister MT19937, seeded the way the supplier bootloader seeds it.

The bootloader ships Shawn Cokus' 1998 recode of MT19937: the state vector
is filled from the seed with Knuth's LCG (x *= 69069) instead of the later
init_genrand() scheme, and the seed is always forced odd. Output is
bit-identical to the original mt19937.c reference for the same seed.

Each instance owns its state, so separate search workers never share one.
"""
from typing import Iterator, List, Optional

N = 624                      # length of state vector
M = 397                      # period parameter
MATRIX_A = 0x9908B0DF        # twist magic constant
LCG_MULTIPLIER = 69069
FALLBACK_SEED = 1

TEMPER_SHIFT_U = 11
TEMPER_SHIFT_S = 7
TEMPER_MASK_B = 0x9D2C5680
TEMPER_SHIFT_T = 15
TEMPER_MASK_C = 0xEFC60000
TEMPER_SHIFT_L = 18

UPPER_MASK = 0x80000000
LOWER_MASK = 0x7FFFFFFF
WORD_MASK = 0xFFFFFFFF


def temper(y: int) -> int:
    """Apply the MT19937 output tempering to a raw state word."""
    y ^= y >> TEMPER_SHIFT_U
    y ^= (y << TEMPER_SHIFT_S) & TEMPER_MASK_B
    y ^= (y << TEMPER_SHIFT_T) & TEMPER_MASK_C
    return y ^ (y >> TEMPER_SHIFT_L)


def _twist(s0: int, s1: int, sm: int) -> int:
    y = (s0 & UPPER_MASK) | (s1 & LOWER_MASK)
    return sm ^ (y >> 1) ^ (MATRIX_A if s1 & 1 else 0)


class MersenneTwister:
    """
    MT19937 engine with a 624 word state vector, a read cursor and a
    countdown of tempered words left before the next batch reload.

    A freshly constructed engine has a countdown of -1, so the first read
    reseeds from FALLBACK_SEED. Call seed() before drawing output.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.state: List[int] = [0] * N
        self.cursor: Optional[int] = None
        self.left = -1
        if seed is not None:
            self.seed(seed)

    def seed(self, seed: int) -> None:
        """Expand seed into the state vector. Even seeds fold onto seed | 1."""
        x = (seed | 1) & WORD_MASK
        state = self.state
        for i in range(N):
            state[i] = x
            x = (x * LCG_MULTIPLIER) & WORD_MASK
        self.left = 0
        self.cursor = None

    def _reload(self) -> int:
        """Twist the whole state vector in place and return its first tempered word."""
        if self.left < -1:
            self.seed(FALLBACK_SEED)

        state = self.state
        for i in range(N - M):
            state[i] = _twist(state[i], state[i + 1], state[i + M])
        for i in range(N - M, N - 1):
            state[i] = _twist(state[i], state[i + 1], state[i + M - N])
        # Wrap-around step uses the already regenerated state[0].
        state[N - 1] = _twist(state[N - 1], state[0], state[M - 1])

        self.left = N - 1
        self.cursor = 1
        return temper(state[0])

    def next(self) -> int:
        self.left -= 1
        if self.left < 0:
            return self._reload()

        y = self.state[self.cursor]
        self.cursor += 1
        return temper(y)

    __call__ = next

    def words(self, count: int) -> Iterator[int]:
        for _ in range(count):
            yield self.next()
