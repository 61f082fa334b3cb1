# controller/asset_controller.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from controller.controller_dependencies import (
    get_object_store,
    rate_limiter,
    require_workspace,
)
from model.storage import StorageEvent
from service.object_store_service import ObjectStoreGateway
from util.constants import InternalURIs
from util.functions import url_join

asset_router = APIRouter(dependencies=[Depends(rate_limiter)])


def _workspace_key(store: ObjectStoreGateway, workspace: str, path: str) -> str:
    # Keys always live under the caller's workspace prefix.
    if ".." in path.split("/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid asset path"
        )
    return url_join(store.tenant_prefix(workspace), path)


@asset_router.post(
    InternalURIs.ASSETS,
    response_model=StorageEvent,
    status_code=status.HTTP_201_CREATED,
)
async def upload_asset(
    file: UploadFile = File(...),
    path: str = Form(...),
    workspace: str = Depends(require_workspace),
    store: ObjectStoreGateway = Depends(get_object_store),
) -> StorageEvent:
    return await store.upload(
        file.file,
        _workspace_key(store, workspace, path),
        file.content_type or "application/octet-stream",
        metadata={"workspace": workspace, "filename": file.filename or ""},
    )


@asset_router.get(InternalURIs.ASSET, response_model=StorageEvent)
async def probe_asset(
    key: str,
    workspace: str = Depends(require_workspace),
    store: ObjectStoreGateway = Depends(get_object_store),
) -> StorageEvent:
    event = await store.key_exists(_workspace_key(store, workspace, key))
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return event
