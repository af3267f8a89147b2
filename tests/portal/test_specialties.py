from httpx import ASGITransport, AsyncClient
from fastapi import status

from src.portal.main import app
from src.portal.services.specialties.registry import (
    MEDICAL_SPECIALTIES,
    get_default_specialty,
    get_specialty_by_id,
    list_specialties,
)


def test_lookup_returns_exact_registered_entry():
    for specialty in MEDICAL_SPECIALTIES:
        assert get_specialty_by_id(specialty.id) is specialty


def test_lookup_of_unknown_id_returns_none():
    assert get_specialty_by_id("oncology") is None
    assert get_specialty_by_id("") is None
    assert get_specialty_by_id("Cardiology") is None


def test_list_keeps_registry_order_and_default_is_first():
    ids = [s.id for s in list_specialties()]
    assert ids == ["cardiology", "dermatology", "radiology", "pediatrics", "orthopedics", "neurology"]
    assert get_default_specialty().id == "cardiology"


def test_every_specialty_has_prompt_and_model():
    for specialty in list_specialties():
        assert specialty.system_prompt.startswith(f"You are a specialized AI {specialty.name.lower()} assistant")
        assert specialty.model == "openrouter/anthropic/claude-sonnet-4"


async def test_specialties_api_lists_and_gets():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        list_resp = await ac.get("/api/v1/specialties/")
        assert list_resp.status_code == status.HTTP_200_OK
        assert len(list_resp.json()) == 6

        get_resp = await ac.get("/api/v1/specialties/neurology")
        assert get_resp.status_code == status.HTTP_200_OK
        body = get_resp.json()
        assert body["name"] == "Neurology"
        assert "systemPrompt" in body

        missing = await ac.get("/api/v1/specialties/oncology")
        assert missing.status_code == status.HTTP_404_NOT_FOUND
