import asyncio

import pytest

from notification_relay.config import Settings
from notification_relay.notifications.errors import (
    DispatchFailed,
    InvalidRequest,
    PushSendError,
    PushTokenUnregistered,
    RecipientTokenExpired,
    RecipientTokenUnavailable,
    RecipientUnknown,
    StoreError,
)
from notification_relay.notifications.schemas import DispatchRequest, TokenRecord
from notification_relay.notifications.service import NotificationDispatcher, preview


def dispatch(context, payload):
    dispatcher = NotificationDispatcher(context, Settings())
    return asyncio.run(dispatcher.dispatch(DispatchRequest(**payload)))


def test_dispatch_sends_and_records_history(context, chat_request, messenger, history_store):
    result = dispatch(context, chat_request)

    assert result.messageId == "projects/test-project/messages/1"
    assert result.historySaved is True
    assert len(messenger.sent) == 1
    assert len(history_store.records) == 1
    record = history_store.records[0]
    assert record.receiverId == "u1"
    assert record.senderId == "u2"
    assert record.senderName == "Bob"
    assert record.message == "hi"
    assert record.conversationId == "c1"
    assert record.timestamp is not None


def test_payload_carries_notification_data_and_platform_hints(context, chat_request, messenger):
    dispatch(context, chat_request)

    payload = messenger.sent[0]
    assert payload.token == "tok_abc"
    assert payload.title == "Bob"
    assert payload.body == "hi"
    assert payload.data == {
        "receiverId": "u1",
        "senderId": "u2",
        "senderName": "Bob",
        "message": "hi",
        "conversationId": "c1",
        "type": "chat_message",
    }
    assert payload.android.icon == "ic_launcher"
    assert payload.android.sound == "default"
    assert payload.android.channelId == "chat_messages"
    assert payload.apns.sound == "default"
    assert payload.apns.badge == 1


@pytest.mark.parametrize("missing", ["receiverId", "senderId", "senderName", "message", "conversationId"])
def test_missing_field_is_rejected_without_store_access(context, chat_request, token_store, history_store, messenger, missing):
    del chat_request[missing]

    with pytest.raises(InvalidRequest):
        dispatch(context, chat_request)

    assert token_store.calls == []
    assert history_store.calls == []
    assert messenger.sent == []


def test_empty_field_counts_as_missing(context, chat_request, token_store):
    chat_request["message"] = ""

    with pytest.raises(InvalidRequest):
        dispatch(context, chat_request)
    assert token_store.calls == []


def test_unknown_recipient_never_reaches_messenger(context, chat_request, messenger, history_store):
    chat_request["receiverId"] = "nobody"

    with pytest.raises(RecipientUnknown):
        dispatch(context, chat_request)

    assert messenger.sent == []
    assert history_store.records == []


def test_empty_token_never_reaches_messenger(context, chat_request, token_store, messenger):
    token_store.tokens["u1"] = TokenRecord(fcmToken="")

    with pytest.raises(RecipientTokenUnavailable):
        dispatch(context, chat_request)

    assert messenger.sent == []


def test_unregistered_token_is_removed(context, chat_request, token_store, messenger, history_store):
    messenger.error = PushTokenUnregistered("Requested entity was not found.")

    with pytest.raises(RecipientTokenExpired):
        dispatch(context, chat_request)

    assert ('delete', 'u1') in token_store.calls
    assert token_store.get("u1") is None
    assert history_store.records == []


def test_failed_token_removal_keeps_expired_error(context, chat_request, token_store, messenger):
    messenger.error = PushTokenUnregistered("gone")
    token_store.fail_delete = RuntimeError("permission denied")

    with pytest.raises(RecipientTokenExpired):
        dispatch(context, chat_request)

    assert ('delete', 'u1') in token_store.calls


def test_other_send_failure_carries_service_message(context, chat_request, token_store, messenger, history_store):
    messenger.error = PushSendError("Quota exceeded")

    with pytest.raises(DispatchFailed) as exc_info:
        dispatch(context, chat_request)

    assert exc_info.value.message == "Quota exceeded"
    assert ('delete', 'u1') not in token_store.calls
    assert history_store.records == []


def test_send_failure_without_message_uses_default(context, chat_request, messenger):
    messenger.error = PushSendError()

    with pytest.raises(DispatchFailed) as exc_info:
        dispatch(context, chat_request)

    assert exc_info.value.message == "Failed to send notification"


def test_history_failure_does_not_mask_successful_send(context, chat_request, history_store):
    history_store.fail_append = RuntimeError("deadline exceeded")

    result = dispatch(context, chat_request)

    assert result.messageId == "projects/test-project/messages/1"
    assert result.historySaved is False


def test_token_lookup_failure_is_a_store_error(context, chat_request, token_store, messenger):
    token_store.fail_get = RuntimeError("unavailable")

    with pytest.raises(StoreError):
        dispatch(context, chat_request)
    assert messenger.sent == []


def test_each_request_is_attempted_once(context, chat_request, messenger):
    messenger.error = PushSendError("internal")

    with pytest.raises(DispatchFailed):
        dispatch(context, chat_request)

    assert len(messenger.sent) == 1


def test_preview_truncates_long_messages():
    assert preview("short") == "short"
    assert preview("x" * 60) == "x" * 50 + "..."
    assert preview(None) == ""
