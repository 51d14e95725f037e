class SeedTicklerError(Exception):
    """Base class for errors raised by seed_tickler."""


class InputError(SeedTicklerError, ValueError):
    """Malformed seed, prefix or other user supplied value."""


class OracleError(SeedTicklerError):
    """The RSA oracle was handed a value it cannot encrypt faithfully."""


class KeyLoadError(SeedTicklerError):
    """An RSA public key could not be read, parsed or validated."""
