"""
SQLAlchemy models.
"""
from lastcall.models.document import Document

__all__ = ["Document"]
