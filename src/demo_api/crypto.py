import pathlib
import secrets
from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
import structlog

from seed_tickler.candidate import candidate_for_seed
from seed_tickler.oracle import PublicKey, encrypt
from seed_tickler.twister import WORD_MASK


log = structlog.get_logger()

KEY_DIR = pathlib.Path(__file__).parent / "keys"
KEY_FILE_NAME = "bootloader.pem"
KEY_BITS = 2048
KEY_EXPONENT = 65537
LEAK_BYTES = 8


@dataclass(frozen=True, slots=True)
class Boot:
    """One simulated boot: the secret seed and what an observer sees."""

    seed: int
    window_start: int
    window_size: int
    candidate: bytes
    ciphertext: bytes

    @property
    def leaked_prefix(self) -> int:
        return int.from_bytes(self.ciphertext[:LEAK_BYTES], "little")


def get_private_key(key_dir: pathlib.Path | None = None) -> rsa.RSAPrivateKey:
    """Returns the bootloader's private key.
    If the key file does not exist, it creates a new key and saves it to the key file."""
    key_dir = key_dir or KEY_DIR
    keyfile = key_dir / KEY_FILE_NAME
    if keyfile.exists():
        return serialization.load_pem_private_key(keyfile.read_bytes(), password=None)

    key_dir.mkdir(parents=True, exist_ok=True)
    key = rsa.generate_private_key(public_exponent=KEY_EXPONENT, key_size=KEY_BITS)
    keyfile.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    log.info("generated bootloader key", keyfile=str(keyfile), bits=KEY_BITS)
    return key


def get_public_key(key_dir: pathlib.Path | None = None) -> PublicKey:
    numbers = get_private_key(key_dir).public_key().public_numbers()
    return PublicKey(modulus=numbers.n, exponent=numbers.e)


def simulate_boot(key: PublicKey, window_size: int) -> Boot:
    """Pick a random seed, derive its key data and encrypt it like the bootloader.
    The seed lies somewhere inside a window of window_size odd seeds."""
    seed = secrets.randbits(32) | 1
    offset = secrets.randbelow(window_size)
    window_start = (seed - 2 * offset) & WORD_MASK

    candidate = bytes(candidate_for_seed(seed))
    ciphertext = encrypt(candidate, key)
    return Boot(
        seed=seed,
        window_start=window_start,
        window_size=window_size,
        candidate=candidate,
        ciphertext=ciphertext,
    )
