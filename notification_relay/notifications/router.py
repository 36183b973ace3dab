import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from .schemas import (
    DispatchRequest,
    ErrorResponse,
    HealthResponse,
    NotificationListResponse,
    SendNotificationResponse,
)
from .service import HealthReporter, NotificationDispatcher, NotificationHistoryService
from ..dependencies import get_dispatcher, get_health_reporter, get_history_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    '/send-notification',
    response_model=SendNotificationResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        410: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def send_notification(
    request: DispatchRequest,
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)]
):
    """
    Send a chat message push notification to the receiver's device
    """
    result = await dispatcher.dispatch(request)
    return SendNotificationResponse(messageId=result.messageId)


@router.get('/health', response_model=HealthResponse)
async def health(reporter: Annotated[HealthReporter, Depends(get_health_reporter)]):
    return reporter.health()


@router.get(
    '/notifications/{user_id}',
    response_model=NotificationListResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_notifications(
    user_id: str,
    history: Annotated[NotificationHistoryService, Depends(get_history_service)],
    limit: Optional[str] = Query(None, description="Maximum number of notifications, defaults to 50")
):
    """
    Get notifications received by a user, newest first
    """
    notifications = await history.list_history(user_id, limit)
    logger.debug(f"Fetched {len(notifications)} notifications for {user_id}")
    return NotificationListResponse(notifications=notifications, count=len(notifications))
