# controller/subscription_controller.py
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from controller.controller_dependencies import get_wipe_orchestrator, handle_bus_message
from model.api import SuccessResponse
from model.bus import BusNotification
from service.wipe_service import WipeOrchestrator
from util.constants import InternalURIs

logger = logging.getLogger(__name__)

# No rate limit here: delivery pace belongs to the bus.
subscription_router = APIRouter()


@subscription_router.post(
    InternalURIs.SUBSCRIBE,
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def wipe_data_subscription(
    request: Request,
    background: BackgroundTasks,
    ack: Optional[SuccessResponse] = Depends(handle_bus_message),
    orchestrator: WipeOrchestrator = Depends(get_wipe_orchestrator),
) -> SuccessResponse:
    if ack is not None:
        return ack

    message: BusNotification = request.state.bus_message
    # One-way action: the outcome only shows up in logs and the workflow record.
    background.add_task(orchestrator.run, message.payload)
    logger.info("wipe.dispatched message=%s", message.messageId or "-")
    return SuccessResponse(code=status.HTTP_200_OK)
