from pydantic import BaseModel, Field, field_validator

import config
from mymath import MAX_U64


class EncodePayload(BaseModel):
    """Request model for encoding an index."""
    index: int = Field(..., ge=0, le=MAX_U64)
    adjectives: int = Field(config.DEFAULT_ADJECTIVES, ge=1, le=config.MAX_ADJECTIVES)
    scrambled: bool = False


class DecodePayload(BaseModel):
    """Request model for decoding a human ID."""
    human_id: str = Field(..., min_length=1, max_length=1024)

    @field_validator('human_id')
    def normalize_human_id(cls, value):
        value = value.strip().lower()
        if not value:
            raise ValueError("human_id cannot be empty")
        return value


class HumanIDResponse(BaseModel):
    """Response model for a successfully encoded index."""
    human_id: str
    index: int
    adjectives: int
    scrambled: bool


class DecodeResponse(BaseModel):
    human_id: str
    index: int
    scrambled: bool


class CombinationsResponse(BaseModel):
    adjectives: int
    combinations: int
    domain_size: int


class ErrorResponse(BaseModel):
    detail: str
