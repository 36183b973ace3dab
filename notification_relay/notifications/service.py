import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .errors import (
    DispatchFailed,
    InvalidRequest,
    PushSendError,
    PushTokenUnregistered,
    RecipientTokenExpired,
    RecipientTokenUnavailable,
    RecipientUnknown,
    StoreError,
)
from .schemas import (
    CHAT_MESSAGE_TYPE,
    REQUIRED_FIELDS,
    AndroidHints,
    ApnsHints,
    DispatchRequest,
    DispatchResult,
    HealthResponse,
    HistoryRecord,
    PushPayload,
)
from ..config import Settings, settings as default_settings
from ..context import RelayContext

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def preview(text: Optional[str]) -> str:
    """Shorten a message body for log output"""
    if not text:
        return ""
    if len(text) <= PREVIEW_LENGTH:
        return text
    return text[:PREVIEW_LENGTH] + "..."


class NotificationDispatcher:
    """Sends one chat push notification per request and records it in history."""

    def __init__(self, context: RelayContext, settings: Settings = default_settings):
        self.tokens = context.token_store
        self.history = context.history_store
        self.messenger = context.messenger
        self.settings = settings

    async def dispatch(self, request: DispatchRequest) -> DispatchResult:
        """
        Deliver a chat message notification to the receiver's device.

        Every external call is awaited before the next one starts and none of
        them is retried.

        Args:
            request: The incoming notification request

        Returns:
            DispatchResult holding the messaging service's message ID

        Raises:
            InvalidRequest: A required field is missing or empty
            RecipientUnknown: No token record exists for the receiver
            RecipientTokenUnavailable: The token record holds no token
            RecipientTokenExpired: The messaging service reported the token unregistered
            DispatchFailed: Any other messaging failure
            StoreError: The token lookup itself failed
        """
        missing = request.missing_fields()
        if missing:
            logger.warning(f"Rejected notification request, missing fields: {missing}")
            raise InvalidRequest()

        receiver_id = request.receiverId
        logger.info(
            f"Received notification request for {receiver_id} from {request.senderId} "
            f"in conversation {request.conversationId}: {preview(request.message)}"
        )

        try:
            token_record = await asyncio.to_thread(self.tokens.get, receiver_id)
        except Exception as e:
            logger.error(f"Error reading FCM token for user {receiver_id}: {str(e)}")
            raise StoreError(str(e) or None)
        if token_record is None:
            logger.warning(f"No FCM token found for user: {receiver_id}")
            raise RecipientUnknown()
        if not token_record.fcmToken:
            logger.warning(f"Empty FCM token for user: {receiver_id}")
            raise RecipientTokenUnavailable()

        payload = self.build_payload(request, token_record.fcmToken)

        try:
            message_id = await asyncio.to_thread(self.messenger.send, payload)
        except PushTokenUnregistered as e:
            logger.warning(f"FCM token for user {receiver_id} is no longer registered: {str(e)}")
            await self._discard_token(receiver_id)
            raise RecipientTokenExpired()
        except PushSendError as e:
            logger.error(f"Error sending notification to {receiver_id}: {str(e)}")
            raise DispatchFailed(str(e) or None)

        logger.info(f"Notification sent successfully: {message_id}")

        history_saved = await self._record_history(request)
        return DispatchResult(messageId=message_id, historySaved=history_saved)

    def build_payload(self, request: DispatchRequest, token: str) -> PushPayload:
        data = {name: getattr(request, name) for name in REQUIRED_FIELDS}
        data['type'] = CHAT_MESSAGE_TYPE
        return PushPayload(
            token=token,
            title=request.senderName,
            body=request.message,
            data=data,
            android=AndroidHints(
                icon=self.settings.android_icon,
                sound=self.settings.android_sound,
                channelId=self.settings.android_channel_id,
            ),
            apns=ApnsHints(
                sound=self.settings.apns_sound,
                badge=self.settings.apns_badge,
            ),
        )

    async def _discard_token(self, receiver_id: str) -> None:
        # The expired-token error is reported whatever happens here
        try:
            await asyncio.to_thread(self.tokens.delete, receiver_id)
            logger.info(f"Removed invalid FCM token for user: {receiver_id}")
        except Exception as e:
            logger.error(f"Error removing invalid token for user {receiver_id}: {str(e)}")

    async def _record_history(self, request: DispatchRequest) -> bool:
        record = HistoryRecord(
            receiverId=request.receiverId,
            senderId=request.senderId,
            senderName=request.senderName,
            message=request.message,
            conversationId=request.conversationId,
        )
        try:
            await asyncio.to_thread(self.history.append, record)
        except Exception as e:
            logger.warning(f"Notification sent but history write failed for {request.receiverId}: {str(e)}")
            return False
        logger.info("Notification saved to history")
        return True


def parse_limit(raw_limit, default: int) -> int:
    """Positive integers are used as-is; anything else falls back to the default."""
    if raw_limit is None:
        return default
    try:
        limit = int(str(raw_limit).strip())
    except ValueError:
        return default
    if limit <= 0:
        return default
    return limit


class NotificationHistoryService:
    """Read access to previously dispatched notifications."""

    def __init__(self, context: RelayContext, settings: Settings = default_settings):
        self.history = context.history_store
        self.settings = settings

    async def list_history(self, user_id: str, limit=None) -> List[HistoryRecord]:
        limit = parse_limit(limit, self.settings.history_default_limit)
        try:
            records = await asyncio.to_thread(self.history.list_for_receiver, user_id, limit)
        except Exception as e:
            logger.error(f"Error fetching notifications for {user_id}: {str(e)}")
            raise StoreError(str(e) or None)
        return list(records)[:limit]


class HealthReporter:
    def __init__(self, context: RelayContext, settings: Settings = default_settings):
        self.firebase_initialized = context.firebase_initialized
        self.settings = settings

    def health(self) -> HealthResponse:
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            service=self.settings.service_title,
            firebase="Connected" if self.firebase_initialized else "Disconnected",
            firebaseInitialized=self.firebase_initialized,
        )
