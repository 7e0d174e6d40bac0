"""
Common schemas used across the application.
"""
from datetime import datetime, timezone
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """
    Base for stored records and API bodies.

    Attributes are snake_case in Python and camelCase in documents and JSON.
    Either spelling is accepted on input.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    code: int = 200
    message: str = "API is healthy."
