"""
Document store: path-addressed typed records.
"""
from lastcall.store.documents import DocumentStore

__all__ = ["DocumentStore"]
