from typing import Annotated

from fastapi import Depends, Request

from .config import settings
from .context import RelayContext
from .notifications.service import HealthReporter, NotificationDispatcher, NotificationHistoryService


def get_context(request: Request) -> RelayContext:
    return request.app.state.relay_context


async def get_dispatcher(
    context: Annotated[RelayContext, Depends(get_context)]
) -> NotificationDispatcher:
    return NotificationDispatcher(context, settings)


async def get_history_service(
    context: Annotated[RelayContext, Depends(get_context)]
) -> NotificationHistoryService:
    return NotificationHistoryService(context, settings)


async def get_health_reporter(
    context: Annotated[RelayContext, Depends(get_context)]
) -> HealthReporter:
    return HealthReporter(context, settings)
