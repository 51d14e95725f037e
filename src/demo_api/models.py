from pydantic import BaseModel, Field


class KeyResponse(BaseModel):
    modulus_hex: str
    exponent: int
    bits: int


class BootResponse(BaseModel):
    prefix_hex: str
    window_start: str
    window_size: int


class VerifyRequest(BaseModel):
    seed: str = Field(pattern=r"^[0-9a-fA-F]{1,8}$")


class VerifyResponse(BaseModel):
    valid: bool
    key_data_hex: str | None = None
