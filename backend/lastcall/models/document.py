"""
Document model.

Every record of the core lives in one table keyed by its slash-separated path,
e.g. `Organizations/{orgId}/Employees/{userId}`. The parent collection path is
stored alongside so a collection can be listed with a single indexed query.
"""
from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from lastcall.db.base import Base
from lastcall.models.base import TimestampMixin


class Document(Base, TimestampMixin):
    """A single JSON document addressed by path."""
    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)
    collection: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Document {self.path}>"
