# core/integrity.py
import logging
from typing import Dict, Iterable, Protocol
from util.errors import CrossTenantReference, MissingTenant

logger = logging.getLogger(__name__)


class WorkspaceLookup(Protocol):
    async def find_workspaces(self, doc_ids: Iterable[str]) -> Dict[str, str]: ...


async def check_workspace_refs(
    store: WorkspaceLookup,
    ref_ids: Iterable[str] | None,
    workspace: str,
    *,
    strict: bool = False,
) -> None:
    """
    Guard a write: every referenced document that exists must belong to `workspace`.

    - Runs before the referencing document is persisted; raising aborts the write.
    - Ids that do not exist are ignored unless `strict` is set.
    - One batched read, no locks: a concurrent re-scoping of a target is not seen.
    """
    if not workspace:
        raise MissingTenant("Missing required parameter: workspace")

    ids = list(dict.fromkeys(ref_ids or ()))
    if not ids:
        return

    logger.debug("refs.check workspace=%s count=%d", workspace, len(ids))
    found = await store.find_workspaces(ids)

    foreign = [doc_id for doc_id, ws in found.items() if ws != workspace]
    if foreign:
        logger.warning(
            "refs.cross_tenant workspace=%s refs=%s", workspace, ",".join(sorted(foreign))
        )
        raise CrossTenantReference(foreign)

    if strict:
        dangling = [doc_id for doc_id in ids if doc_id not in found]
        if dangling:
            logger.warning(
                "refs.dangling workspace=%s refs=%s", workspace, ",".join(sorted(dangling))
            )
            raise CrossTenantReference(dangling)
