import pytest

from seed_tickler.twister import FALLBACK_SEED, N, MersenneTwister, temper

# First outputs of the 1998 mt19937.c reference for seed 1.
SEED_1_OUTPUTS = [
    0xE2450886, 0xF94C56FA, 0x81F0EEAF, 0xE30E8878, 0xB07A203C,
    0xF179224E, 0xEDC4F1C4, 0x7CD78BFF, 0xC7A68C77, 0xE08C2585,
]

# sgenrand(4357), the seed used by the published reference output listing.
SEED_4357_OUTPUTS = [
    0xD13C8AF5, 0xFFC27482, 0x82A6958B, 0x21AC240A, 0x09110BBA,
    0xFE127BC0, 0xA02E7212, 0x10060698, 0x692452F5, 0x2280870E,
]

# Outputs 620..628 for seed 1, straddling the second batch reload.
SEED_1_RELOAD_OUTPUTS = [
    0x16A7A128, 0x3658E62F, 0x43174A77, 0x2CCB41A4,
    0x440F69ED, 0xE3A4ABEC, 0x6687475F, 0x55A87667, 0xBD68AE53,
]


class TestMersenneTwister:
    """Test suite for the MT19937 engine"""

    def test_seed_1_reference_outputs(self):
        """Seed 1 reproduces the reference output sequence"""
        engine = MersenneTwister(1)
        assert [engine.next() for _ in range(10)] == SEED_1_OUTPUTS

    def test_seed_4357_reference_outputs(self):
        """Seed 4357 reproduces the published reference listing"""
        engine = MersenneTwister(4357)
        assert list(engine.words(10)) == SEED_4357_OUTPUTS

    def test_outputs_across_reload(self):
        """Outputs stay exact across the 624 word batch boundary"""
        engine = MersenneTwister(1)
        outputs = [engine.next() for _ in range(629)]
        assert outputs[620:629] == SEED_1_RELOAD_OUTPUTS

    def test_call_is_next(self):
        """Calling the engine draws the next word"""
        engine = MersenneTwister(1)
        assert engine() == SEED_1_OUTPUTS[0]
        assert engine.next() == SEED_1_OUTPUTS[1]

    @pytest.mark.parametrize("seed", [0x00000001, 0x12345679, 0xDEADBEEF, 0xFFFFFFFF])
    def test_deterministic(self, seed):
        """Two engines with the same seed agree"""
        first = MersenneTwister(seed)
        second = MersenneTwister(seed)
        assert list(first.words(700)) == list(second.words(700))

    @pytest.mark.parametrize("k", [0, 1, 0x1234, 0x6F56DF77, 0x7FFFFFFF])
    def test_even_seeds_fold_to_odd(self, k):
        """Seeds 2k and 2k+1 produce the same sequence"""
        even = MersenneTwister(2 * k)
        odd = MersenneTwister(2 * k + 1)
        assert list(even.words(64)) == list(odd.words(64))

    def test_reseed_resets_sequence(self):
        """Reseeding discards all previous state"""
        engine = MersenneTwister(0xDEADBEEF)
        for _ in range(1000):
            engine.next()
        engine.seed(1)
        assert list(engine.words(10)) == SEED_1_OUTPUTS

    def test_seed_fills_state_with_lcg(self):
        """Seeding fills the state vector with the 69069 LCG"""
        engine = MersenneTwister(1)
        assert engine.state[0] == 1
        assert engine.state[1] == 69069
        assert engine.state[2] == (69069 * 69069) & 0xFFFFFFFF
        assert len(engine.state) == N
        assert engine.left == 0
        assert engine.cursor is None

    def test_countdown_after_first_read(self):
        """The first read reloads and leaves 623 words pending"""
        engine = MersenneTwister(1)
        engine.next()
        assert engine.left == N - 1
        assert engine.cursor == 1

    def test_countdown_stays_in_range(self):
        """The countdown never leaves [-1, 623] while reading"""
        engine = MersenneTwister(7)
        for _ in range(2 * N + 5):
            engine.next()
            assert -1 <= engine.left <= N - 1

    def test_reads_do_not_mutate_state(self):
        """Reading through the cursor leaves the state vector untouched"""
        engine = MersenneTwister(3)
        engine.next()
        snapshot = list(engine.state)
        for _ in range(N - 1):
            engine.next()
        assert engine.state == snapshot

    def test_unseeded_engine_falls_back_to_seed_1(self):
        """An engine that was never seeded behaves as if seeded with 1"""
        engine = MersenneTwister()
        assert engine.left == -1
        assert list(engine.words(10)) == SEED_1_OUTPUTS
        assert FALLBACK_SEED == 1

    def test_temper_known_value(self):
        """Tempering matches the first output computed from the raw word"""
        engine = MersenneTwister(1)
        first = engine.next()
        assert temper(engine.state[0]) == first
        assert temper(0) == 0
