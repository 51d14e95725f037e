from typing import Optional

from fastapi import FastAPI, APIRouter, HTTPException, Query
import structlog

from . import crypto, models

log = structlog.get_logger(
    processors=[
        structlog.processors.JSONRenderer(indent=2),
    ],
)

DEFAULT_WINDOW_SIZE = 512
MAX_WINDOW_SIZE = 1 << 20

# Most recent simulated boot; the demo keeps a single device.
LAST_BOOT: dict[str, Optional[crypto.Boot]] = {"boot": None}

# Create the FastAPI app
app = FastAPI(title="Leaky Bootloader Demo API")

# Create the router for API endpoints
router = APIRouter()


@router.get("/key", response_model=models.KeyResponse)
def key():
    """ The bootloader's RSA public key, as baked into the firmware. """
    public_key = crypto.get_public_key()
    return models.KeyResponse(
        modulus_hex=f"{public_key.modulus:x}",
        exponent=public_key.exponent,
        bits=public_key.size_bits,
    )


@router.get("/boot", response_model=models.BootResponse)
def boot(window_size: int = Query(DEFAULT_WINDOW_SIZE, ge=1, le=MAX_WINDOW_SIZE)):
    """ Simulate one boot and leak the first 8 bytes of the RSA encrypted key data.
    The seed is hidden somewhere within window_size odd seeds of window_start.
    """
    public_key = crypto.get_public_key()
    simulated = crypto.simulate_boot(public_key, window_size)
    LAST_BOOT["boot"] = simulated
    log.info(
        "boot simulated",
        window_start=f"{simulated.window_start:08X}",
        window_size=window_size,
        prefix_hex=f"{simulated.leaked_prefix:016X}",
    )
    return models.BootResponse(
        prefix_hex=f"{simulated.leaked_prefix:016X}",
        window_start=f"{simulated.window_start:08X}",
        window_size=window_size,
    )


@router.post("/verify", response_model=models.VerifyResponse)
def verify(req: models.VerifyRequest):
    """ Check a recovered seed against the most recent boot. """
    simulated = LAST_BOOT["boot"]
    if simulated is None:
        raise HTTPException(status_code=409, detail="No boot has been simulated yet")

    seed = int(req.seed, 16) | 1
    if seed != simulated.seed:
        log.warning("seed rejected", seed=f"{seed:08X}")
        return models.VerifyResponse(valid=False)

    log.info("seed recovered", seed=f"{seed:08X}")
    return models.VerifyResponse(valid=True, key_data_hex=simulated.candidate.hex())


# Include the router in the app (after all routes are defined)
app.include_router(router, prefix="/api")
