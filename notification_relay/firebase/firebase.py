import logging

import firebase_admin
import google.cloud.firestore
from firebase_admin import firestore

from .credentials import SETUP_INSTRUCTIONS, resolve_credential
from .messenger import FcmMessenger
from .stores import FirestoreHistoryStore, FirestoreTokenStore
from ..config import Settings, settings as default_settings
from ..context import RelayContext
from ..notifications.errors import StartupConfigError

logger = logging.getLogger(__name__)


class FirebaseDB:
    """Owns the Firebase app plus the Firestore client derived from it."""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings
        self.app = None
        self.firestore_db = None
        self.initialized = False

    def get_firestore_db(self) -> google.cloud.firestore.Client:
        return self.firestore_db

    def connect(self) -> None:
        """
        Initialize the Firebase Admin SDK, reusing the default app if present.

        Raises:
            StartupConfigError: No credential source resolved
        """
        if self.initialized:
            return
        try:
            # Try to get the existing default app
            self.app = firebase_admin.get_app()
            logger.info("Retrieved existing Firebase app")
        except ValueError:
            try:
                source, cred = resolve_credential(self.settings)
            except StartupConfigError as e:
                logger.error(f"Error initializing Firebase Admin: {str(e)}")
                logger.error(SETUP_INSTRUCTIONS)
                raise
            self.app = firebase_admin.initialize_app(credential=cred)
            logger.info(f"Firebase Admin initialized successfully from {source}. App name: {self.app.name}")
        self.firestore_db = firestore.client(self.app)
        self.initialized = True

    def test_connection(self) -> bool:
        """Read one document to confirm Firestore is reachable. Never raises."""
        try:
            self.firestore_db.collection(self.settings.probe_collection).limit(1).get()
            logger.info("Firestore connection successful")
            return True
        except Exception as e:
            logger.error(f"Firestore connection failed: {str(e)}")
            logger.error("Check your Firebase project settings and security rules")
            return False


def build_context(settings: Settings = default_settings) -> RelayContext:
    """Connect to Firebase and wire the Firestore/FCM backed collaborators."""
    firebase_db = FirebaseDB(settings)
    firebase_db.connect()
    client = firebase_db.get_firestore_db()
    return RelayContext(
        token_store=FirestoreTokenStore(client, settings.tokens_collection),
        history_store=FirestoreHistoryStore(client, settings.history_collection),
        messenger=FcmMessenger(firebase_db.app),
        firebase_initialized=firebase_db.initialized,
        connection_probe=firebase_db.test_connection,
    )
