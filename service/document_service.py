# service/document_service.py
import logging
from datetime import datetime, timezone
from uuid import uuid4
from core.integrity import check_workspace_refs
from model.document import Document, DocumentWrite
from repository.document_repository import DocumentRepository
from util.errors import DocumentNotFound

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(self, documents: DocumentRepository, *, strict_refs: bool = False) -> None:
        self._documents = documents
        self._strict = strict_refs

    async def create(self, workspace: str, payload: DocumentWrite) -> Document:
        """
        Reference guard first, write second: a rejected document is never stored.
        """
        await check_workspace_refs(
            self._documents, payload.references, workspace, strict=self._strict
        )
        now = datetime.now(timezone.utc)
        doc = Document(
            id=str(uuid4()),
            workspace=workspace,
            name=payload.name,
            references=payload.references,
            createdAt=now,
            updatedAt=now,
        )
        await self._documents.put(doc)
        logger.info(
            "documents.created id=%s workspace=%s refs=%d",
            doc.id,
            workspace,
            len(doc.references),
        )
        return doc

    async def update(self, workspace: str, doc_id: str, payload: DocumentWrite) -> Document:
        existing = await self.get(workspace, doc_id)
        await check_workspace_refs(
            self._documents, payload.references, workspace, strict=self._strict
        )
        doc = existing.model_copy(
            update={
                "name": payload.name,
                "references": payload.references,
                "updatedAt": datetime.now(timezone.utc),
            }
        )
        await self._documents.put(doc)
        logger.info("documents.updated id=%s workspace=%s", doc.id, workspace)
        return doc

    async def get(self, workspace: str, doc_id: str) -> Document:
        doc = await self._documents.get(doc_id)
        # Documents of another workspace look exactly like missing ones.
        if doc is None or doc.workspace != workspace:
            raise DocumentNotFound(doc_id)
        return doc
