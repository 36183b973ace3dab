from .firebase import FirebaseDB, build_context
from .messenger import FcmMessenger
from .stores import FirestoreHistoryStore, FirestoreTokenStore

__all__ = [
    "FirebaseDB",
    "FcmMessenger",
    "FirestoreHistoryStore",
    "FirestoreTokenStore",
    "build_context",
]
