# controller/controller_dependencies.py
from typing import Optional
from fastapi import Depends, Header, Request
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from config.storage import build_transfer_config, get_s3_client
from core.origin import TrustedTopicVerifier
from model.api import SuccessResponse
from model.bus import BusNotification
from repository.document_repository import DocumentRepository
from repository.workflow_repository import WorkflowRepository
from service.bus_service import BusMessageAdapter
from service.document_service import DocumentService
from service.object_store_service import ObjectStoreGateway
from service.subscription_service import SubscriptionService
from service.wipe_service import WipeOrchestrator
from util.enums import ErrorMessage
from util.errors import AppError

# Shared so tests can override it through app.dependency_overrides.
rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def get_object_store() -> ObjectStoreGateway:
    return ObjectStoreGateway(
        get_s3_client(),
        endpoint_url=settings.S3_ENDPOINT_URL,
        default_bucket=settings.S3_ASSETS_BUCKET,
        cache_ttl=settings.S3_MAP_TILES_TTL,
        path_prefix=settings.S3_ASSETS_PATH_PREFIX,
        transfer_config=build_transfer_config(settings),
    )


def get_document_service() -> DocumentService:
    return DocumentService(DocumentRepository(), strict_refs=settings.REFERENCE_CHECK_STRICT)


def get_wipe_orchestrator(
    objects: ObjectStoreGateway = Depends(get_object_store),
) -> WipeOrchestrator:
    return WipeOrchestrator(
        DocumentRepository(),
        objects,
        WorkflowRepository(ttl_seconds=settings.WORKFLOW_TTL_SECONDS),
        protected_workspaces=settings.protected_workspaces,
        object_ttl_days=settings.WIPE_OBJECT_TTL_DAYS,
    )


def get_bus_adapter() -> BusMessageAdapter:
    return BusMessageAdapter(
        TrustedTopicVerifier(settings.SNS_TOPIC_SUBSCRIPTION_ARN),
        SubscriptionService(timeout_seconds=settings.SNS_HANDSHAKE_TIMEOUT_SECONDS),
    )


async def handle_bus_message(
    request: Request, adapter: BusMessageAdapter = Depends(get_bus_adapter)
) -> Optional[SuccessResponse]:
    """
    Handshake: returns the acknowledgment the route must answer with.
    Notification: stores the decoded message on request.state.bus_message and
    returns None so the route carries on with it.
    """
    result = await adapter.handle(request.headers, await request.body())
    if isinstance(result, BusNotification):
        request.state.bus_message = result
        return None
    return result


async def require_workspace(x_workspace: str = Header(default="")) -> str:
    # Token verification lives upstream; the gateway forwards the caller's workspace.
    workspace = x_workspace.strip()
    if not workspace:
        raise AppError.from_info(ErrorMessage.MISSING_WORKSPACE.value)
    return workspace
