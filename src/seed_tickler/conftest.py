import pytest
import structlog
from cryptography.hazmat.primitives.asymmetric import rsa

from seed_tickler.oracle import PublicKey


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def test_key(rsa_private_key) -> PublicKey:
    numbers = rsa_private_key.public_key().public_numbers()
    return PublicKey(modulus=numbers.n, exponent=numbers.e)


@pytest.fixture(scope="session")
def private_exponent(rsa_private_key) -> int:
    return rsa_private_key.private_numbers().d


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
