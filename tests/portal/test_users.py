import json
import logging
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from fastapi import status

from src.portal.domain.models.user import ProfileUpdate, RegisterRequest
from src.portal.infra.storage.documents import InMemoryDocumentStore, JsonFileDocumentStore
from src.portal.main import app
from src.portal.security import get_user_service
from src.portal.services.users.service import (
    AUTH_KEY,
    USERS_KEY,
    DuplicateEmailError,
    InvalidCredentialsError,
    RegistrationValidationError,
    UserNotFoundError,
    UserService,
)


def _registration(**overrides) -> RegisterRequest:
    data = {
        "email": "dr.lee@stmarys.org",
        "password": "secret1",
        "confirm_password": "secret1",
        "name": "Dr. Ana Lee",
        "specialty": "Neurology",
    }
    data.update(overrides)
    return RegisterRequest(**data)


def test_first_access_seeds_demo_accounts():
    store = InMemoryDocumentStore()
    service = UserService(store, auth_mode="demo", demo_password="demo123")

    emails = [u.email for u in service.list_users()]

    assert emails == ["doctor@hospital.com", "dr.smith@clinic.com"]
    assert store.get(USERS_KEY) is not None


def test_login_current_user_and_logout(users):
    user = users.login("doctor@hospital.com", "demo123")

    assert user.id == "user_demo_1"
    assert users.current_user() == user
    assert users.is_authenticated()

    users.logout()
    assert users.current_user() is None


def test_login_failures(users):
    with pytest.raises(UserNotFoundError):
        users.login("nobody@hospital.com", "demo123")
    with pytest.raises(InvalidCredentialsError):
        users.login("doctor@hospital.com", "wrong-password")
    assert users.current_user() is None


def test_register_logs_in_new_user(users):
    user = users.register(_registration())

    assert user.id.startswith("user_")
    assert user.email == "dr.lee@stmarys.org"
    assert users.current_user() == user
    assert users.login("dr.lee@stmarys.org", "demo123") == user


def test_register_duplicate_email_leaves_store_untouched():
    store = InMemoryDocumentStore()
    users = UserService(store, auth_mode="demo", demo_password="demo123")
    users.list_users()
    before = store.get(USERS_KEY)

    with pytest.raises(DuplicateEmailError):
        users.register(_registration(email="doctor@hospital.com"))

    assert store.get(USERS_KEY) == before
    assert store.get(AUTH_KEY) is None


def test_duplicate_check_ignores_email_case_and_whitespace(users):
    with pytest.raises(DuplicateEmailError):
        users.register(_registration(email="Doctor@HOSPITAL.com"))
    with pytest.raises(DuplicateEmailError):
        users.register(_registration(email="  dr.smith@clinic.com "))

    assert [u.email for u in users.list_users()] == ["doctor@hospital.com", "dr.smith@clinic.com"]


def test_login_matches_email_as_typed_at_registration(users):
    registered = users.register(_registration(email="new@Clinic.ORG"))
    users.logout()

    assert users.login("new@Clinic.ORG", "demo123") == registered
    users.logout()
    assert users.login("NEW@clinic.org", "demo123") == registered
    assert users.get_user_by_email(" new@clinic.org") == registered


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"confirm_password": "secret2"}, "Passwords do not match"),
        ({"password": "abc", "confirm_password": "abc"}, "at least 6 characters"),
        ({"name": "  "}, "required"),
        ({"email": "not-an-email"}, "Invalid email"),
    ],
)
def test_register_validation(users, overrides, reason):
    with pytest.raises(RegistrationValidationError) as excinfo:
        users.register(_registration(**overrides))
    assert reason in str(excinfo.value)


def test_update_profile(users):
    updated = users.update_profile("user_demo_2", ProfileUpdate(hospital="City Clinic", license_number="MD000001"))

    assert updated.hospital == "City Clinic"
    assert updated.license_number == "MD000001"
    assert updated.name == "Dr. Michael Smith"
    assert users.get_user("user_demo_2") == updated

    with pytest.raises(UserNotFoundError):
        users.update_profile("user_missing", ProfileUpdate(name="X"))
    with pytest.raises(DuplicateEmailError):
        users.update_profile("user_demo_2", ProfileUpdate(email="doctor@hospital.com"))
    with pytest.raises(DuplicateEmailError):
        users.update_profile("user_demo_2", ProfileUpdate(email="DOCTOR@Hospital.com"))


def test_corrupt_documents_degrade_to_defaults():
    store = InMemoryDocumentStore()
    store.set(USERS_KEY, "{not json")
    store.set(AUTH_KEY, "also not json")
    users = UserService(store, auth_mode="demo", demo_password="demo123")

    assert [u.id for u in users.list_users()] == ["user_demo_1", "user_demo_2"]
    assert users.current_user() is None

    # The next write replaces the corrupt document.
    users.register(_registration())
    assert len(json.loads(store.get(USERS_KEY))) == 3


def test_dangling_auth_pointer_resolves_to_none(users):
    users.login("doctor@hospital.com", "demo123")
    users._store.set(AUTH_KEY, json.dumps({"userId": "user_deleted", "timestamp": 0}))

    assert users.current_user() is None


def test_hashed_mode_checks_per_user_credentials():
    store = InMemoryDocumentStore()
    users = UserService(store, auth_mode="hashed", demo_password="demo123")

    user = users.register(_registration(password="s3cure-pass", confirm_password="s3cure-pass"))
    users.logout()

    with pytest.raises(InvalidCredentialsError):
        users.login(user.email, "demo123")
    # Seeded demo accounts have no credential in hashed mode.
    with pytest.raises(InvalidCredentialsError):
        users.login("doctor@hospital.com", "demo123")

    assert users.login(user.email, "s3cure-pass") == user
    assert "s3cure-pass" not in store.get("healthcare_ai_credentials")


def test_unknown_auth_mode_is_rejected():
    with pytest.raises(ValueError):
        UserService(InMemoryDocumentStore(), auth_mode="plaintext")


def test_file_store_persists_between_services(tmp_path):
    first = UserService(JsonFileDocumentStore(tmp_path), auth_mode="demo", demo_password="demo123")
    registered = first.register(_registration())

    second = UserService(JsonFileDocumentStore(tmp_path), auth_mode="demo", demo_password="demo123")

    assert second.current_user() == registered
    assert (tmp_path / f"{USERS_KEY}.json").exists()


async def test_auth_api_flow(users):
    app.dependency_overrides[get_user_service] = lambda: users

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        me = await ac.get("/api/v1/auth/me")
        assert me.status_code == status.HTTP_401_UNAUTHORIZED

        bad = await ac.post("/api/v1/auth/login", json={"email": "doctor@hospital.com", "password": "nope"})
        assert bad.status_code == status.HTTP_401_UNAUTHORIZED

        missing = await ac.post("/api/v1/auth/login", json={"email": "ghost@hospital.com", "password": "demo123"})
        assert missing.status_code == status.HTTP_404_NOT_FOUND

        login = await ac.post("/api/v1/auth/login", json={"email": "doctor@hospital.com", "password": "demo123"})
        assert login.status_code == status.HTTP_200_OK
        assert login.json()["licenseNumber"] == "MD123456"

        patched = await ac.patch("/api/v1/auth/me", json={"hospital": "Heart Institute"})
        assert patched.status_code == status.HTTP_200_OK
        assert patched.json()["hospital"] == "Heart Institute"

        logout = await ac.post("/api/v1/auth/logout")
        assert logout.status_code == status.HTTP_204_NO_CONTENT
        assert (await ac.get("/api/v1/auth/me")).status_code == status.HTTP_401_UNAUTHORIZED

        register = await ac.post(
            "/api/v1/auth/register",
            json={
                "email": "dr.okafor@lagosgeneral.org",
                "password": "secret1",
                "confirmPassword": "secret1",
                "name": "Dr. Chidi Okafor",
                "licenseNumber": "MD555000",
            },
        )
        assert register.status_code == status.HTTP_201_CREATED
        assert register.json()["licenseNumber"] == "MD555000"

        duplicate = await ac.post(
            "/api/v1/auth/register",
            json={"email": "dr.okafor@lagosgeneral.org", "password": "secret1", "name": "Someone"},
        )
        assert duplicate.status_code == status.HTTP_409_CONFLICT

        weak = await ac.post(
            "/api/v1/auth/register",
            json={"email": "dr.new@lagosgeneral.org", "password": "123", "name": "New"},
        )
        assert weak.status_code == status.HTTP_400_BAD_REQUEST


def test_logout_surfaces_a_failed_delete(tmp_path, monkeypatch, caplog):
    store = JsonFileDocumentStore(tmp_path)
    users = UserService(store, auth_mode="demo", demo_password="demo123")
    users.login("doctor@hospital.com", "demo123")

    def refuse(self, missing_ok=False):
        raise PermissionError("read-only volume")

    monkeypatch.setattr(Path, "unlink", refuse)

    with caplog.at_level(logging.ERROR, logger="storage"):
        with pytest.raises(OSError):
            users.logout()

    assert "Failed to delete document healthcare_ai_auth" in caplog.text
    assert users.current_user() is not None
