"""
Document store backed by the `documents` table.

Offers typed read / write / delete by path. Each call is atomic for a single
document; nothing here spans documents, so multi-document workflows in the
services are written as idempotent sequences.
"""
import logging
from typing import Any, List, Optional, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lastcall.core.exceptions import ConflictError, NotFoundError
from lastcall.models.document import Document
from lastcall.store import paths

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
DocumentData = Union[BaseModel, dict[str, Any]]


def _dump(doc: DocumentData) -> dict[str, Any]:
    if isinstance(doc, BaseModel):
        return doc.model_dump(mode="json", by_alias=True)
    return dict(doc)


class DocumentStore:
    """Path-addressed JSON documents on top of an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, path: str) -> Optional[Document]:
        return await self.session.get(Document, path)

    async def get(self, path: str) -> Optional[dict[str, Any]]:
        """Return the raw document data or None."""
        document = await self._load(path)
        if document is None:
            return None
        return dict(document.data)

    async def exists(self, path: str) -> bool:
        return await self._load(path) is not None

    async def read(self, path: str, model: type[M]) -> Optional[M]:
        """Return the document parsed as `model`, or None when absent."""
        data = await self.get(path)
        if data is None:
            return None
        return model.model_validate(data)

    async def create(self, path: str, doc: DocumentData) -> None:
        """Create-only write. Raises ConflictError if the path is taken."""
        if await self._load(path) is not None:
            raise ConflictError(f"Document already exists: {path}")
        try:
            # Savepoint so a lost insert race leaves the session usable
            async with self.session.begin_nested():
                self.session.add(
                    Document(path=path, collection=paths.parent(path), data=_dump(doc))
                )
                await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Concurrent create lost for {path}")
            raise ConflictError(f"Document already exists: {path}") from e

    async def write(self, path: str, doc: DocumentData, overwrite: bool = True) -> None:
        """Set a document, replacing it entirely when it already exists."""
        if not overwrite:
            await self.create(path, doc)
            return
        document = await self._load(path)
        if document is None:
            await self.create(path, doc)
            return
        document.data = _dump(doc)
        await self.session.flush()

    async def update(self, path: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge top-level fields into an existing document."""
        document = await self._load(path)
        if document is None:
            raise NotFoundError(f"Document not found: {path}")
        document.data = {**document.data, **fields}
        await self.session.flush()
        return dict(document.data)

    async def delete(self, path: str) -> bool:
        """Delete a document. Returns False when there was nothing to delete."""
        document = await self._load(path)
        if document is None:
            return False
        await self.session.delete(document)
        await self.session.flush()
        return True

    async def list(self, collection: str) -> list[dict[str, Any]]:
        """All documents directly inside `collection`, ordered by path."""
        result = await self.session.execute(
            select(Document)
            .where(Document.collection == collection)
            .order_by(Document.path)
        )
        return [dict(document.data) for document in result.scalars().all()]

    # `list` is shadowed by the method above inside this class body
    async def list_as(self, collection: str, model: type[M]) -> List[M]:
        return [model.model_validate(data) for data in await self.list(collection)]

    async def delete_tree(self, path: str) -> int:
        """Delete a document and every document nested below it."""
        result = await self.session.execute(
            delete(Document).where(
                or_(
                    Document.path == path,
                    Document.path.startswith(f"{path}/", autoescape=True),
                )
            ),
            execution_options={"synchronize_session": "fetch"},
        )
        logger.info(f"Deleted document tree {path} ({result.rowcount} documents)")
        return result.rowcount
