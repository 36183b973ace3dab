import logging

from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError

from ..notifications.errors import PushSendError, PushTokenUnregistered
from ..notifications.schemas import PushPayload

logger = logging.getLogger(__name__)


def to_fcm_message(payload: PushPayload) -> messaging.Message:
    return messaging.Message(
        token=payload.token,
        notification=messaging.Notification(
            title=payload.title,
            body=payload.body
        ),
        data=payload.data,
        android=messaging.AndroidConfig(
            notification=messaging.AndroidNotification(
                icon=payload.android.icon,
                sound=payload.android.sound,
                channel_id=payload.android.channelId
            )
        ),
        apns=messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    sound=payload.apns.sound,
                    badge=payload.apns.badge
                )
            )
        )
    )


class FcmMessenger:
    """Sends single-device pushes through Firebase Cloud Messaging."""

    def __init__(self, app=None):
        self.app = app

    def send(self, payload: PushPayload) -> str:
        """
        Send one push message.

        Returns:
            The FCM message ID

        Raises:
            PushTokenUnregistered: FCM reported registration-token-not-registered
            PushSendError: Any other failure while sending
        """
        try:
            return messaging.send(to_fcm_message(payload), app=self.app)
        except messaging.UnregisteredError as e:
            raise PushTokenUnregistered(str(e)) from e
        except FirebaseError as e:
            logger.error(f"Firebase error [{e.code}] sending notification: {str(e)}")
            raise PushSendError(str(e)) from e
        except ValueError as e:
            # Raised by the SDK for malformed messages before anything is sent
            raise PushSendError(str(e)) from e
        except Exception as e:
            # Credential refresh and transport failures are not FirebaseErrors
            logger.error(f"Error sending notification: {str(e)}")
            raise PushSendError(str(e)) from e
