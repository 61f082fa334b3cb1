# controller/document_controller.py
from fastapi import APIRouter, Depends, status
from controller.controller_dependencies import (
    get_document_service,
    rate_limiter,
    require_workspace,
)
from model.document import Document, DocumentWrite
from service.document_service import DocumentService
from util.constants import InternalURIs

document_router = APIRouter(dependencies=[Depends(rate_limiter)])


@document_router.post(
    InternalURIs.DOCUMENTS,
    response_model=Document,
    status_code=status.HTTP_201_CREATED,
)
async def create_document(
    payload: DocumentWrite,
    workspace: str = Depends(require_workspace),
    service: DocumentService = Depends(get_document_service),
) -> Document:
    return await service.create(workspace, payload)


@document_router.put(InternalURIs.DOCUMENT, response_model=Document)
async def update_document(
    doc_id: str,
    payload: DocumentWrite,
    workspace: str = Depends(require_workspace),
    service: DocumentService = Depends(get_document_service),
) -> Document:
    return await service.update(workspace, doc_id, payload)


@document_router.get(InternalURIs.DOCUMENT, response_model=Document)
async def get_document(
    doc_id: str,
    workspace: str = Depends(require_workspace),
    service: DocumentService = Depends(get_document_service),
) -> Document:
    return await service.get(workspace, doc_id)
