from __future__ import annotations

import hmac
import json
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from src.portal.config import settings
from src.portal.domain.models.auth import AuthPointer
from src.portal.domain.models.user import ProfileUpdate, RegisterRequest, User
from src.portal.infra.storage.documents import DocumentStore, document_store
from src.portal.services.users.passwords import hash_password, verify_password


logger = logging.getLogger("users")

USERS_KEY = "healthcare_ai_users"
AUTH_KEY = "healthcare_ai_auth"
CREDENTIALS_KEY = "healthcare_ai_credentials"

MIN_PASSWORD_LENGTH = 6

_users_adapter = TypeAdapter(List[User])


class UserServiceError(Exception):
    """Base class for account errors; the message is safe to show to users."""


class DuplicateEmailError(UserServiceError):
    pass


class UserNotFoundError(UserServiceError):
    pass


class InvalidCredentialsError(UserServiceError):
    pass


class RegistrationValidationError(UserServiceError):
    pass


def default_users() -> List[User]:
    seeded_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        User(
            id="user_demo_1",
            email="doctor@hospital.com",
            name="Dr. Sarah Johnson",
            specialty="Cardiology",
            credentials="MD, FACC",
            license_number="MD123456",
            hospital="General Hospital",
            created_at=seeded_at,
        ),
        User(
            id="user_demo_2",
            email="dr.smith@clinic.com",
            name="Dr. Michael Smith",
            specialty="Dermatology",
            credentials="MD, FAAD",
            license_number="MD789012",
            hospital="Skin Care Clinic",
            created_at=seeded_at,
        ),
    ]


def email_key(email: str) -> str:
    """Comparison key for an email address; matching is case-insensitive."""

    return email.strip().lower()


def _now_ms() -> int:
    return int(time.time() * 1000)


class UserService:
    """User store and login state backed by two key-value documents.

    The users document holds the list of accounts; a separate auth document
    holds the pointer to the logged-in user. There is a single pointer per
    store, so one store serves one active client context.

    In ``demo`` auth mode every account accepts the same shared password.
    That is not authentication and must not be deployed; ``hashed`` mode keeps
    a bcrypt hash per account in a third document instead.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        *,
        auth_mode: Optional[str] = None,
        demo_password: Optional[str] = None,
    ) -> None:
        self._store = store or document_store
        self._auth_mode = auth_mode or settings.auth_mode
        self._demo_password = demo_password if demo_password is not None else settings.demo_password

        if self._auth_mode not in {"demo", "hashed"}:
            raise ValueError(f"Unsupported AUTH_MODE '{self._auth_mode}'; expected 'demo' or 'hashed'.")
        if self._auth_mode == "demo":
            logger.warning(
                "AUTH_MODE=demo: every account accepts the shared demo password. "
                "This is not real authentication; set AUTH_MODE=hashed outside of demos."
            )

    # Users document

    def _load_users(self) -> List[User]:
        raw = self._store.get(USERS_KEY)
        if raw is None:
            users = default_users()
            self._save_users(users)
            return users
        try:
            return _users_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("Users document is unreadable; falling back to the demo accounts")
            return default_users()

    def _save_users(self, users: List[User]) -> None:
        self._store.set(USERS_KEY, _users_adapter.dump_json(users, by_alias=True).decode("utf-8"))

    def list_users(self) -> List[User]:
        return self._load_users()

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self._load_users() if u.id == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        key = email_key(email)
        return next((u for u in self._load_users() if email_key(u.email) == key), None)

    # Credentials document (hashed mode only)

    def _load_credentials(self) -> Dict[str, str]:
        raw = self._store.get(CREDENTIALS_KEY)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Credentials document is unreadable; treating it as empty")
            return {}
        return data if isinstance(data, dict) else {}

    def _set_credential(self, user_id: str, password: str) -> None:
        credentials = self._load_credentials()
        credentials[user_id] = hash_password(password)
        self._store.set(CREDENTIALS_KEY, json.dumps(credentials))

    def _check_password(self, user: User, password: str) -> bool:
        if self._auth_mode == "demo":
            return hmac.compare_digest(password.encode("utf-8"), self._demo_password.encode("utf-8"))
        hashed = self._load_credentials().get(user.id)
        if not hashed:
            return False
        return verify_password(password, hashed)

    # Auth pointer

    def _set_auth_pointer(self, user_id: str) -> None:
        pointer = AuthPointer(user_id=user_id, timestamp=_now_ms())
        self._store.set(AUTH_KEY, pointer.model_dump_json(by_alias=True))

    def _get_auth_pointer(self) -> Optional[AuthPointer]:
        raw = self._store.get(AUTH_KEY)
        if raw is None:
            return None
        try:
            return AuthPointer.model_validate_json(raw)
        except ValidationError:
            logger.warning("Auth pointer document is unreadable; treating caller as logged out")
            return None

    # Operations

    def register(self, request: RegisterRequest) -> User:
        """Create an account and log it in.

        Raises RegistrationValidationError for invalid input and
        DuplicateEmailError when the email is already registered. The store is
        not modified on failure.
        """

        if not request.email.strip() or not request.name.strip() or not request.password:
            raise RegistrationValidationError("Email, name and password are required")
        if request.confirm_password is not None and request.password != request.confirm_password:
            raise RegistrationValidationError("Passwords do not match")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise RegistrationValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        users = self._load_users()
        if any(email_key(u.email) == email_key(request.email) for u in users):
            raise DuplicateEmailError("User already exists")

        existing_ids = {u.id for u in users}
        stamp = _now_ms()
        while f"user_{stamp}" in existing_ids:
            stamp += 1

        try:
            user = User(
                id=f"user_{stamp}",
                email=request.email.strip(),
                name=request.name,
                specialty=request.specialty,
                credentials=request.credentials,
                license_number=request.license_number,
                hospital=request.hospital,
                created_at=datetime.now(timezone.utc),
            )
        except ValidationError as exc:
            raise RegistrationValidationError("Invalid email address") from exc

        if self._auth_mode == "hashed":
            self._set_credential(user.id, request.password)

        users.append(user)
        self._save_users(users)
        self._set_auth_pointer(user.id)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> User:
        user = self.get_user_by_email(email)
        if user is None:
            raise UserNotFoundError("User not found")
        if not self._check_password(user, password):
            raise InvalidCredentialsError("Invalid password")

        self._set_auth_pointer(user.id)
        return user

    def current_user(self) -> Optional[User]:
        """Resolve the auth pointer; a dangling or unreadable pointer gives None."""

        pointer = self._get_auth_pointer()
        if pointer is None:
            return None
        return self.get_user(pointer.user_id)

    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def logout(self) -> None:
        self._store.delete(AUTH_KEY)

    def update_profile(self, user_id: str, update: ProfileUpdate) -> User:
        users = self._load_users()
        index = next((i for i, u in enumerate(users) if u.id == user_id), None)
        if index is None:
            raise UserNotFoundError("User not found")

        changes = update.model_dump(exclude_unset=True)
        # email and name are required on User and cannot be cleared.
        for required in ("email", "name"):
            if changes.get(required, "") is None:
                changes.pop(required)
        new_email = changes.get("email")
        if new_email is not None and any(
            email_key(u.email) == email_key(new_email) and u.id != user_id for u in users
        ):
            raise DuplicateEmailError("User already exists")

        users[index] = users[index].model_copy(update=changes)
        self._save_users(users)
        return users[index]


user_service = UserService()
