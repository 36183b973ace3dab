from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

CHAT_MESSAGE_TYPE = "chat_message"

REQUIRED_FIELDS = ("receiverId", "senderId", "senderName", "message", "conversationId")


class DispatchRequest(BaseModel):
    """Incoming chat notification request. Presence is checked by the dispatcher."""
    receiverId: Optional[str] = None
    senderId: Optional[str] = None
    senderName: Optional[str] = None
    message: Optional[str] = None
    conversationId: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]


class TokenRecord(BaseModel):
    fcmToken: Optional[str] = None
    lastUpdated: Optional[datetime] = None


class HistoryRecord(BaseModel):
    # Documents may carry fields written by other clients
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    receiverId: str
    senderId: str
    senderName: str
    message: str
    conversationId: str
    timestamp: Optional[datetime] = None


class AndroidHints(BaseModel):
    icon: str
    sound: str
    channelId: str


class ApnsHints(BaseModel):
    sound: str
    badge: int


class PushPayload(BaseModel):
    """Store-agnostic description of one push message."""
    token: str
    title: str
    body: str
    data: Dict[str, str]
    android: AndroidHints
    apns: ApnsHints


class DispatchResult(BaseModel):
    messageId: str
    historySaved: bool = True


class SendNotificationResponse(BaseModel):
    success: bool = True
    messageId: str
    message: str = "Notification sent successfully"


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: List[HistoryRecord]
    count: int


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: datetime
    service: str
    firebase: str
    firebaseInitialized: bool


class ErrorResponse(BaseModel):
    success: bool = False
    error: str = Field(description="Human readable error message")
