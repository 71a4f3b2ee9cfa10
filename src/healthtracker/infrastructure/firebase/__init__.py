"""Firebase Admin infrastructure package."""

from healthtracker.infrastructure.firebase.admin_client import (
    FirebaseAdminClient,
    FirebaseAdminError,
    FirebaseNotConfiguredError,
    FirebaseUser,
    FirebaseUserNotFoundError,
    InvalidAuthTokenError,
    PushDeliveryError,
    get_firebase_client,
)

__all__ = [
    "FirebaseAdminClient",
    "FirebaseAdminError",
    "FirebaseNotConfiguredError",
    "FirebaseUser",
    "FirebaseUserNotFoundError",
    "InvalidAuthTokenError",
    "PushDeliveryError",
    "get_firebase_client",
]
