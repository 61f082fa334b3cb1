# service/wipe_service.py
import logging
import re
from datetime import datetime, timezone
from typing import AbstractSet, Any, Dict, List, Optional
from pydantic import ValidationError as PydanticValidationError
from model.workflow import WipeRequest, WipeWorkflow
from repository.document_repository import DocumentRepository
from repository.workflow_repository import WorkflowRepository
from service.object_store_service import ObjectStoreGateway
from util.enums import WipeStage
from util.timing import timed

logger = logging.getLogger(__name__)

TENANT_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


class WipeRejected(Exception):
    """The wipe request failed validation; nothing was deleted."""


class WipeOrchestrator:
    """
    Erases a tenant's data when a wipe notification arrives from the bus.

    received -> validating -> deleting_documents -> deleting_objects -> completed | failed

    - Documents are deleted synchronously; objects get a short expiration policy
      on the tenant's key prefixes and are purged by the backend later.
    - Each stage is recorded. A record interrupted mid-flight is resumed and skips
      an object stage it already finished; the document stage always runs again.
      A failed or completed record starts over. Nothing is rolled back.
    - Runs for the same tenant are not de-duplicated; re-running is harmless.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        objects: ObjectStoreGateway,
        workflows: WorkflowRepository,
        *,
        protected_workspaces: AbstractSet[str] = frozenset(),
        object_ttl_days: int = 1,
    ) -> None:
        self._documents = documents
        self._objects = objects
        self._workflows = workflows
        self._protected = frozenset(protected_workspaces)
        self._ttl_days = int(object_ttl_days)

    async def run(self, payload: Dict[str, Any]) -> Optional[WipeWorkflow]:
        """
        Drive one wipe to a terminal stage and return the final record.
        Returns None when the payload does not even name a tenant.
        """
        try:
            request = WipeRequest.model_validate(payload)
        except PydanticValidationError as e:
            logger.error(
                "wipe.stage.failed tenant=- stage=%s err=%s",
                WipeStage.RECEIVED.value,
                e.errors()[0].get("msg") if e.errors() else e,
            )
            return None

        tenant = request.tenant
        logger.info("wipe.received tenant=%s scope=%s", tenant, request.scope.value)

        try:
            prefixes = self._validate(request)
        except WipeRejected as e:
            logger.error(
                "wipe.stage.failed tenant=%s stage=%s err=%s",
                tenant,
                WipeStage.VALIDATING.value,
                e,
            )
            now = datetime.now(timezone.utc)
            # Not persisted: the tenant key itself may be unusable.
            return WipeWorkflow(
                tenant=tenant,
                stage=WipeStage.FAILED,
                failedStage=WipeStage.VALIDATING,
                error=str(e),
                startedAt=now,
                updatedAt=now,
            )

        stage = WipeStage.RECEIVED
        wf: Optional[WipeWorkflow] = None
        try:
            wf = await self._resume_or_start(tenant)
            stage = WipeStage.VALIDATING
            wf = await self._workflows.advance(wf, stage, prefixes=prefixes)

            if request.wipes_documents:
                # Always runs: documents may have been created since an earlier attempt.
                stage = WipeStage.DELETING_DOCUMENTS
                wf = await self._workflows.advance(wf, stage)
                with timed(logger, "wipe.documents", tenant=tenant):
                    deleted = await self._documents.delete_by_workspace(tenant)
                remaining = await self._documents.count_by_workspace(tenant)
                logger.info(
                    "wipe.documents.deleted tenant=%s count=%d remaining=%d",
                    tenant,
                    deleted,
                    remaining,
                )
                wf = await self._workflows.advance(
                    wf,
                    stage,
                    documentsDeleted=wf.documentsDeleted + deleted,
                    completedStages=_with_stage(wf.completedStages, stage),
                )

            if request.wipes_objects and WipeStage.DELETING_OBJECTS not in wf.completedStages:
                stage = WipeStage.DELETING_OBJECTS
                wf = await self._workflows.advance(wf, stage)
                with timed(logger, "wipe.objects", tenant=tenant, prefixes=len(prefixes)):
                    ok = await self._objects.create_lifecycle_policy(
                        prefixes, expiration_days=self._ttl_days
                    )
                if not ok:
                    return await self._fail(wf, tenant, stage, "lifecycle policy not applied")
                wf = await self._workflows.advance(
                    wf, stage, completedStages=_with_stage(wf.completedStages, stage)
                )

            stage = WipeStage.COMPLETED
            wf = await self._workflows.advance(wf, stage, error=None, failedStage=None)
        except Exception as e:
            return await self._fail(wf, tenant, stage, e)

        logger.info(
            "wipe.completed tenant=%s documents=%d prefixes=%s",
            tenant,
            wf.documentsDeleted,
            ",".join(prefixes),
        )
        return wf

    # ---------------- Stages ----------------

    def _validate(self, request: WipeRequest) -> List[str]:
        """Return the key prefixes to expire; raise WipeRejected before any deletion."""
        tenant = request.tenant
        if not TENANT_PATTERN.match(tenant):
            raise WipeRejected(f"malformed tenant identifier: {tenant!r}")
        if tenant in self._protected:
            raise WipeRejected(f"tenant {tenant} is protected from erasure")

        own_prefix = self._objects.tenant_prefix(tenant)
        prefixes = request.prefixes or [own_prefix]
        foreign = [p for p in prefixes if not p.startswith(own_prefix)]
        if foreign:
            raise WipeRejected(
                f"prefixes outside {own_prefix}: {', '.join(sorted(foreign))}"
            )
        return prefixes

    async def _resume_or_start(self, tenant: str) -> WipeWorkflow:
        """
        Pick up a record left mid-flight by a crashed run; anything that reached
        a terminal stage (completed or failed) is replaced by a fresh record.
        """
        previous = await self._workflows.get(tenant)
        if previous is not None and previous.stage not in _TERMINAL:
            logger.info(
                "wipe.resume tenant=%s stage=%s done=%s",
                tenant,
                previous.stage.value,
                ",".join(s.value for s in previous.completedStages) or "-",
            )
            return previous
        return await self._workflows.start(tenant)

    async def _fail(
        self, wf: Optional[WipeWorkflow], tenant: str, stage: WipeStage, err: Any
    ) -> WipeWorkflow:
        """Log, then try to record the failure. Never raises."""
        logger.error("wipe.stage.failed tenant=%s stage=%s err=%s", tenant, stage.value, err)
        now = datetime.now(timezone.utc)
        base = wf or WipeWorkflow(tenant=tenant, startedAt=now, updatedAt=now)
        record = base.model_copy(
            update={
                "stage": WipeStage.FAILED,
                "failedStage": stage,
                "error": str(err),
                "updatedAt": now,
            }
        )
        try:
            await self._workflows.put(record)
        except Exception as e:
            logger.error(
                "wipe.record.error tenant=%s stage=%s err=%s", tenant, stage.value, e
            )
        return record


_TERMINAL = frozenset({WipeStage.COMPLETED, WipeStage.FAILED})


def _with_stage(done: List[WipeStage], stage: WipeStage) -> List[WipeStage]:
    return done if stage in done else [*done, stage]
