# repository/workflow_repository.py
import json
from datetime import datetime, timezone
from typing import Final, Optional
from redis.asyncio import Redis
from config.cache import get_redis
from model.workflow import WipeWorkflow
from repository.namespaces import WORKFLOWS
from util.enums import WipeStage
from util.functions import as_text

KEY_PREFIX: Final[str] = WORKFLOWS


class WorkflowRepository:
    """
    Flow:
    - One hash per tenant holding the latest wipe workflow record.
    - Every stage transition overwrites the record so a crashed run can resume.
    - Records expire after `ttl_seconds`; a missing record means "start fresh".
    """

    def __init__(self, ttl_seconds: int) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(tenant: str) -> str:
        return f"{KEY_PREFIX}:{tenant}"

    async def start(self, tenant: str) -> WipeWorkflow:
        now = datetime.now(timezone.utc)
        wf = WipeWorkflow(tenant=tenant, startedAt=now, updatedAt=now)
        await self.put(wf)
        return wf

    async def put(self, wf: WipeWorkflow) -> None:
        r = await self._client()
        mapping = {
            "tenant": wf.tenant,
            "stage": wf.stage.value,
            "completedStages": json.dumps([s.value for s in wf.completedStages]),
            "documentsDeleted": str(wf.documentsDeleted),
            "prefixes": json.dumps(wf.prefixes),
            "error": wf.error or "",
            "failedStage": wf.failedStage.value if wf.failedStage else "",
            "startedAt": wf.startedAt.isoformat(),
            "updatedAt": wf.updatedAt.isoformat(),
        }
        await r.hset(self._key(wf.tenant), mapping=mapping)
        await r.expire(self._key(wf.tenant), self._ttl)

    async def get(self, tenant: str) -> Optional[WipeWorkflow]:
        if not tenant:
            return None
        r = await self._client()
        h = await r.hgetall(self._key(tenant))
        if not h:
            return None

        def _s(key: str, default: str = "") -> str:
            v = h.get(key.encode("utf-8"), h.get(key))
            return default if v is None else as_text(v)

        try:
            return WipeWorkflow(
                tenant=_s("tenant", tenant),
                stage=WipeStage(_s("stage", WipeStage.RECEIVED.value)),
                completedStages=[
                    WipeStage(s) for s in json.loads(_s("completedStages", "[]"))
                ],
                documentsDeleted=int(_s("documentsDeleted", "0") or 0),
                prefixes=json.loads(_s("prefixes", "[]")),
                error=_s("error") or None,
                failedStage=WipeStage(_s("failedStage")) if _s("failedStage") else None,
                startedAt=datetime.fromisoformat(_s("startedAt")),
                updatedAt=datetime.fromisoformat(_s("updatedAt")),
            )
        except ValueError:
            return None

    async def advance(
        self, wf: WipeWorkflow, stage: WipeStage, **changes
    ) -> WipeWorkflow:
        """Move `wf` to `stage`, apply field `changes`, persist and return the new record."""
        updated = wf.model_copy(
            update={
                "stage": stage,
                "updatedAt": datetime.now(timezone.utc),
                **changes,
            }
        )
        await self.put(updated)
        return updated
