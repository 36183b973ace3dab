import logging
from typing import List, Optional

import google.cloud.firestore
from firebase_admin import firestore
from firebase_admin.firestore import FieldFilter
from pydantic import ValidationError

from ..notifications.schemas import HistoryRecord, TokenRecord
from ..time_utils import convert_timestamps

logger = logging.getLogger(__name__)


class FirestoreTokenStore:
    """FCM tokens keyed by user ID, one document per user."""

    def __init__(self, client: google.cloud.firestore.Client, collection: str = "fcm_tokens"):
        self.client = client
        self.collection = collection

    def get(self, user_id: str) -> Optional[TokenRecord]:
        token_doc = self.client.collection(self.collection).document(user_id).get()
        if not token_doc.exists:
            return None
        token_data = convert_timestamps(token_doc.to_dict() or {})
        return TokenRecord(
            fcmToken=token_data.get('fcmToken'),
            lastUpdated=token_data.get('lastUpdated'),
        )

    def delete(self, user_id: str) -> None:
        self.client.collection(self.collection).document(user_id).delete()


class FirestoreHistoryStore:
    """Append-only log of dispatched notifications."""

    def __init__(self, client: google.cloud.firestore.Client, collection: str = "notifications"):
        self.client = client
        self.collection = collection

    def append(self, record: HistoryRecord) -> str:
        data = record.model_dump(exclude={'id', 'timestamp'})
        data['timestamp'] = firestore.SERVER_TIMESTAMP
        _, doc_ref = self.client.collection(self.collection).add(data)
        return doc_ref.id

    def list_for_receiver(self, user_id: str, limit: int) -> List[HistoryRecord]:
        query = (
            self.client.collection(self.collection)
            .where(filter=FieldFilter('receiverId', '==', user_id))
            .order_by('timestamp', direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        records = []
        for doc in query.stream():
            doc_data = convert_timestamps(doc.to_dict() or {})
            try:
                records.append(HistoryRecord(**{**doc_data, 'id': doc.id}))
            except ValidationError as e:
                logger.warning(f"Skipping malformed notification {doc.id}: {e.error_count()} invalid fields")
        return records
