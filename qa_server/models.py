"""
Pydantic models for the QA API
"""

from pydantic import BaseModel, Field, StrictStr
from typing import Dict, Any, Optional


class QARequest(BaseModel):
    """Request payload for the QA endpoint"""
    question: StrictStr = Field(..., min_length=1, description="Question in natural language")


class QAMetadata(BaseModel):
    model: str = Field(..., description="Model description")
    input_tokens: int = Field(..., description="Prompt length in tokens before padding")
    output_tokens: int = Field(..., description="Number of decoded tokens")
    inference_time_ms: int = Field(..., description="Forward pass duration")
    total_time_ms: int = Field(..., description="Request duration including model loading")


class QAResponse(BaseModel):
    """Response payload from the QA endpoint"""
    question: str
    answer: str
    metadata: QAMetadata


class ErrorResponse(BaseModel):
    error: str
    type: Optional[str] = None


class StatusResponse(BaseModel):
    """Status and usage information"""
    status: str = Field(..., description="Service status")
    model: str
    model_size: str
    model_cached: bool = Field(..., description="Whether the model artifact is on disk")
    cache_size: str = Field(..., description="Size of the cached artifact or 'not downloaded'")
    session_state: str = Field(..., description="Inference session lifecycle state")
    endpoint: str
    usage: Dict[str, Any]
    note: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    model_loaded: bool = Field(..., description="Whether the inference session is ready")
    session_state: str = Field(default="", description="Inference session lifecycle state")
