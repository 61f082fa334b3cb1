# repository/document_repository.py
import json
import logging
from datetime import datetime
from typing import Dict, Final, Iterable, List, Optional
from redis.asyncio import Redis
from config.cache import get_redis
from model.document import Document
from repository.namespaces import DOCUMENTS, WORKSPACES
from util.functions import as_text, chunked

KEY_PREFIX: Final[str] = DOCUMENTS
DELETE_BATCH: Final[int] = 500

logger = logging.getLogger(__name__)


class DocumentRepository:
    """
    Redis-backed document store.

    Layout:
    - one hash per document (id, workspace, name, references, timestamps)
    - one set per workspace holding its document ids, used for bulk deletes

    The workspace field is written once, on creation, and never reassigned.
    """

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(doc_id: str) -> str:
        return f"{KEY_PREFIX}:{doc_id}"

    @staticmethod
    def _index(workspace: str) -> str:
        return f"{WORKSPACES}:{workspace}:documents"

    # ---------------- Core CRUD ----------------

    async def put(self, doc: Document) -> None:
        r = await self._client()
        mapping = {
            "id": doc.id,
            "workspace": doc.workspace,
            "name": doc.name,
            "references": json.dumps(doc.references),
            "createdAt": doc.createdAt.isoformat(),
            "updatedAt": doc.updatedAt.isoformat(),
        }
        await r.hset(self._key(doc.id), mapping=mapping)
        await r.sadd(self._index(doc.workspace), doc.id)

    async def get(self, doc_id: str) -> Optional[Document]:
        if not doc_id:
            return None
        r = await self._client()
        h = await r.hgetall(self._key(doc_id))
        if not h:
            return None

        def _s(key: str, default: str = "") -> str:
            v = h.get(key.encode("utf-8"), h.get(key))
            return default if v is None else as_text(v)

        try:
            return Document(
                id=_s("id", doc_id),
                workspace=_s("workspace"),
                name=_s("name"),
                references=json.loads(_s("references", "[]")),
                createdAt=datetime.fromisoformat(_s("createdAt")),
                updatedAt=datetime.fromisoformat(_s("updatedAt")),
            )
        except (ValueError, TypeError):
            logger.warning("documents.decode.error id=%s", doc_id)
            return None

    # ---------------- Projections ----------------

    async def find_workspaces(self, doc_ids: Iterable[str]) -> Dict[str, str]:
        """
        Batched projection read: {doc_id: workspace} for ids that exist.
        Unknown ids are simply absent from the result.
        """
        ids = list(dict.fromkeys(doc_ids))
        if not ids:
            return {}
        r = await self._client()
        pipe = r.pipeline(transaction=False)
        for doc_id in ids:
            pipe.hget(self._key(doc_id), "workspace")
        values = await pipe.execute()
        return {
            doc_id: as_text(v) for doc_id, v in zip(ids, values) if v is not None
        }

    async def count_by_workspace(self, workspace: str) -> int:
        r = await self._client()
        return int(await r.scard(self._index(workspace)) or 0)

    # ---------------- Bulk ----------------

    async def delete_by_workspace(self, workspace: str) -> int:
        """
        Remove every document indexed under `workspace`, then the index itself.
        Returns how many documents were removed; 0 when nothing was left.
        """
        r = await self._client()
        members: List[str] = [as_text(m) for m in await r.smembers(self._index(workspace))]
        deleted = 0
        for batch in chunked(members, DELETE_BATCH):
            deleted += int(await r.delete(*[self._key(d) for d in batch]))
            await r.srem(self._index(workspace), *batch)
        await r.delete(self._index(workspace))
        return deleted
