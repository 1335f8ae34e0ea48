"""Pydantic schemas for gateway responses."""

from pydantic import BaseModel, StrictStr


class ChunkResponse(BaseModel):
    """Response model for GET /chunk/{offset}. Proof fields are ignored."""
    chunk: StrictStr


class TxOffsetResponse(BaseModel):
    """Response model for GET /tx/{id}/offset. Both values are decimal strings."""
    offset: StrictStr
    size: StrictStr
