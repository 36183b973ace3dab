from fastapi import status


class RelayError(Exception):
    """Base error for failures reported back to the HTTP client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class RecipientUnknown(RelayError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found or not online"


class RecipientTokenUnavailable(RelayError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User token not available"


class RecipientTokenExpired(RelayError):
    status_code = status.HTTP_410_GONE
    default_message = "User token is no longer valid"


class DispatchFailed(RelayError):
    default_message = "Failed to send notification"


class StoreError(RelayError):
    default_message = "Failed to access notification store"


class StartupConfigError(Exception):
    """No usable Firebase credential source could be resolved."""


# Raised by messenger implementations

class PushSendError(Exception):
    """The messaging service rejected or failed to deliver a push."""


class PushTokenUnregistered(PushSendError):
    """The device token is permanently invalid and should be discarded."""
