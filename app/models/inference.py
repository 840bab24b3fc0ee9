"""
Pydantic schemas for the inference proxy endpoints
"""

from typing import Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Plain-text classification request forwarded to the simple classifier."""
    emailContent: Optional[str] = Field(None, description="Email text to classify")
    context: Optional[str] = Field(None, description="Classification context, defaults to 'general'")


class AnalyzeFullRequest(BaseModel):
    """Full MIME pipeline request; exactly one of the two bodies is used."""
    mime_raw: Optional[str] = Field(None, description="Raw RFC 822 message")
    mime_b64: Optional[str] = Field(None, description="Base64 encoded RFC 822 message")

    class Config:
        extra = "allow"
