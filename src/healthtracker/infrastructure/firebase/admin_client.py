"""
Firebase Admin Client

Server-side Firebase access: ID token verification, Auth user lookup
and FCM web push. Calls into the blocking Admin SDK run in a worker
thread.

SECURITY: The service-account private key is read from settings and
never logged.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import auth, credentials, messaging
from firebase_admin.exceptions import FirebaseError

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger
from healthtracker.services.notifications.payloads import (
    DEFAULT_ICON,
    DEFAULT_TAG,
    DISMISS_ACTION,
    STANDARD_VIBRATION,
    VIEW_ACTION,
)

logger = get_logger(__name__)

APP_NAME = "healthtracker"


class FirebaseAdminError(Exception):
    """Base error for Firebase Admin operations."""


class FirebaseNotConfiguredError(FirebaseAdminError):
    """Service-account credentials are missing or failed to load."""


class InvalidAuthTokenError(FirebaseAdminError):
    """The ID token is malformed, expired, revoked or forged."""


class FirebaseUserNotFoundError(FirebaseAdminError):
    """No Auth user with the given uid."""


class PushDeliveryError(FirebaseAdminError):
    """FCM rejected the message."""


@dataclass(frozen=True)
class FirebaseUser:
    """Subset of an Auth UserRecord used by the admin panel."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> "FirebaseUser":
        return cls(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            phone_number=record.phone_number,
        )


class FirebaseAdminClient:
    """
    Firebase Admin SDK wrapper.

    Usage:
        client = FirebaseAdminClient()
        client.initialize()
        claims = await client.verify_id_token(token)
    """

    def __init__(self) -> None:
        self._app: Optional[firebase_admin.App] = None

    @property
    def is_initialized(self) -> bool:
        return self._app is not None

    def initialize(self) -> bool:
        """
        Initialize the Admin SDK app once.

        Returns:
            True if the app is available
        """
        if self._app is not None:
            return True

        settings = get_settings().firebase
        if not settings.is_admin_configured():
            logger.warning("Firebase Admin credentials not configured")
            return False

        try:
            self._app = firebase_admin.get_app(APP_NAME)
            return True
        except ValueError:
            pass

        try:
            credential = credentials.Certificate({
                "type": "service_account",
                "project_id": settings.project_id,
                "client_email": settings.client_email,
                "private_key": settings.private_key.get_secret_value(),
                "token_uri": "https://oauth2.googleapis.com/token",
            })
            self._app = firebase_admin.initialize_app(
                credential,
                {"projectId": settings.project_id},
                name=APP_NAME,
            )
        except ValueError as e:
            logger.error("Firebase Admin initialization failed", error=str(e))
            return False

        logger.info("Firebase Admin initialized", project_id=settings.project_id)
        return True

    def _require_app(self) -> firebase_admin.App:
        if self._app is None and not self.initialize():
            raise FirebaseNotConfiguredError("Firebase Admin SDK not properly configured")
        return self._app

    async def verify_id_token(self, id_token: str) -> dict:
        """
        Verify a Firebase ID token.

        Returns:
            Decoded claims (uid, email, ...)

        Raises:
            InvalidAuthTokenError: Token rejected
            FirebaseNotConfiguredError: Admin SDK unavailable
        """
        app = self._require_app()
        try:
            return await asyncio.to_thread(auth.verify_id_token, id_token, app)
        except (auth.InvalidIdTokenError, ValueError) as e:
            raise InvalidAuthTokenError(str(e)) from e
        except FirebaseError as e:
            logger.warning("ID token verification failed", error=str(e))
            raise InvalidAuthTokenError(str(e)) from e

    async def get_user(self, uid: str) -> FirebaseUser:
        app = self._require_app()
        try:
            record = await asyncio.to_thread(auth.get_user, uid, app)
        except auth.UserNotFoundError as e:
            raise FirebaseUserNotFoundError(f"User {uid} not found") from e
        return FirebaseUser.from_record(record)

    async def list_users(self) -> list[FirebaseUser]:
        """All Auth users, following pagination."""
        app = self._require_app()

        def _collect() -> list[FirebaseUser]:
            page = auth.list_users(app=app)
            return [FirebaseUser.from_record(r) for r in page.iterate_all()]

        users = await asyncio.to_thread(_collect)
        logger.debug("Listed Firebase users", count=len(users))
        return users

    async def send_push(
        self,
        registration_token: str,
        title: str,
        body: str,
        data: Optional[dict[str, str]] = None,
        link: Optional[str] = None,
    ) -> str:
        """
        Send a web push to one device.

        The notification carries the same icon, tag, vibration and
        actions the service worker uses for background messages.
        `link` must be an absolute HTTPS URL when given.

        Returns:
            FCM message id

        Raises:
            PushDeliveryError: FCM rejected the message
        """
        app = self._require_app()
        payload_data = dict(data or {})
        message = messaging.Message(
            token=registration_token,
            data=payload_data,
            notification=messaging.Notification(title=title, body=body),
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    title=title,
                    body=body,
                    icon=DEFAULT_ICON,
                    badge=DEFAULT_ICON,
                    tag=payload_data.get("tag", DEFAULT_TAG),
                    vibrate=list(STANDARD_VIBRATION),
                    actions=[
                        messaging.WebpushNotificationAction(a.action, a.title, icon=a.icon)
                        for a in (VIEW_ACTION, DISMISS_ACTION)
                    ],
                ),
                fcm_options=messaging.WebpushFCMOptions(link=link) if link else None,
            ),
        )

        try:
            message_id = await asyncio.to_thread(messaging.send, message, False, app)
        except (FirebaseError, ValueError) as e:
            logger.error("FCM send failed", error=str(e))
            raise PushDeliveryError(str(e)) from e

        logger.info("Push notification sent", message_id=message_id)
        return message_id


_firebase_client: Optional[FirebaseAdminClient] = None


def get_firebase_client() -> FirebaseAdminClient:
    """Get or create the global Firebase Admin client."""
    global _firebase_client
    if _firebase_client is None:
        _firebase_client = FirebaseAdminClient()
    return _firebase_client
