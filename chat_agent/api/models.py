"""
Pydantic models for the HTTP API
"""

from pydantic import BaseModel, ConfigDict, Field

from chat_agent.config.settings import settings


class RagQueryRequest(BaseModel):
    """Document search / question request"""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"query": "What is the refund policy?", "topK": 5}
            ]
        },
    )

    query: str = Field(..., min_length=1, max_length=2000, description="Question or search text")
    top_k: int = Field(
        default_factory=lambda: settings.rag_top_k,
        alias="topK",
        ge=1,
        le=50,
        description="Number of chunks to retrieve",
    )


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="API version")
