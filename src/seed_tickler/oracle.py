"""
Textbook RSA over little-endian buffers, used as a verification oracle.

The bootloader encrypts the raw key-data buffer with no padding, so the
ciphertext of any candidate can be recomputed from the public key alone.
"""
from dataclasses import dataclass
import pathlib
from typing import Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
import structlog

from seed_tickler.errors import KeyLoadError, OracleError

log = structlog.get_logger()

BLOCK_SIZE = 256
DEFAULT_EXPONENT = 65537


@dataclass(frozen=True, slots=True)
class PublicKey:
    modulus: int
    exponent: int = DEFAULT_EXPONENT

    def __post_init__(self):
        if self.modulus < 3:
            raise KeyLoadError(f"modulus is too small: {self.modulus}")
        if self.exponent < 1:
            raise KeyLoadError(f"exponent must be positive: {self.exponent}")

    @property
    def size_bits(self) -> int:
        return self.modulus.bit_length()

    @property
    def size_bytes(self) -> int:
        return (self.size_bits + 7) // 8

    @classmethod
    def from_hex(cls, modulus_hex: str, exponent: int = DEFAULT_EXPONENT) -> "PublicKey":
        try:
            modulus = int(modulus_hex, 16)
        except ValueError as e:
            raise KeyLoadError(f"modulus is not hexadecimal: {e}") from e
        return cls(modulus=modulus, exponent=exponent)


def encode(buffer: Union[bytes, bytearray]) -> int:
    return int.from_bytes(buffer, "little")


def decode(value: int, size: int = BLOCK_SIZE) -> bytes:
    try:
        return value.to_bytes(size, "little")
    except OverflowError as e:
        raise OracleError(f"value does not fit in {size} bytes") from e


def encrypt(buffer: Union[bytes, bytearray], key: PublicKey) -> bytes:
    """Compute buffer^e mod n with both sides little-endian, zero padded to 256 bytes."""
    if len(buffer) != BLOCK_SIZE:
        raise OracleError(f"oracle input must be {BLOCK_SIZE} bytes, got {len(buffer)}")

    message = encode(buffer)
    if message >= key.modulus:
        # Candidates are built to stay below a full size modulus.
        raise OracleError(
            f"oracle input is not below the modulus ({message.bit_length()} bits vs {key.size_bits})"
        )

    return decode(pow(message, key.exponent, key.modulus))


def load_public_key(path: Union[str, pathlib.Path]) -> PublicKey:
    """Load an RSA public key from a PEM or DER file (SubjectPublicKeyInfo or PKCS#1)."""
    try:
        data = pathlib.Path(path).read_bytes()
    except OSError as e:
        raise KeyLoadError(f"Could not read key file {path}: {e}") from e

    loader = serialization.load_pem_public_key if b"-----BEGIN" in data else serialization.load_der_public_key
    try:
        key = loader(data)
    except ValueError as e:
        raise KeyLoadError(f"Could not parse key file {path}: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyLoadError(f"Key file {path} does not hold an RSA public key")

    numbers = key.public_numbers()
    log.debug("public key loaded", path=str(path), bits=key.key_size, exponent=numbers.e)
    return PublicKey(modulus=numbers.n, exponent=numbers.e)
