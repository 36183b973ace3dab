from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings for the Notification Relay"""

    # Application settings
    service_name: str = "notification-relay"
    service_title: str = "Chat Notification Server"
    log_level: str = "INFO"
    environment: str = "dev"

    # HTTP server settings
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = False

    # Firebase credential sources, tried in this order
    google_application_credentials: Optional[str] = None
    firebase_service_account_base64: Optional[str] = None
    firebase_project_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_service_account: Optional[str] = None
    firebase_service_account_file: str = "firebase-service-account.json"

    # Firestore collections
    tokens_collection: str = "fcm_tokens"
    history_collection: str = "notifications"
    probe_collection: str = "_test"

    # History query settings
    history_default_limit: int = Field(default=50, gt=0)

    # Push delivery hints
    android_icon: str = "ic_launcher"
    android_sound: str = "default"
    android_channel_id: str = "chat_messages"
    apns_sound: str = "default"
    apns_badge: int = 1

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# Create settings instance
settings = Settings()
