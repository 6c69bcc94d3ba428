from pydantic import BaseModel, Field


class DispatchResponse(BaseModel):
    """Response returned after a blob has been dispatched."""

    blob_id: str = Field(..., description="Identifier needed to fetch the inclusion data")


class InclusionData(BaseModel):
    """Reconstructed blob content for a given identifier."""

    data: bytes = Field(..., description="Full blob content")
