from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from src.portal.domain.models.specialty import MedicalSpecialty
from src.portal.security import get_api_key
from src.portal.services.specialties.registry import get_specialty_by_id, list_specialties

router = APIRouter(
    prefix="/specialties",
    tags=["specialties"],
    dependencies=[Depends(get_api_key)],
)


@router.get("/", response_model=List[MedicalSpecialty])
async def list_all_specialties() -> List[MedicalSpecialty]:
    return list_specialties()


@router.get("/{specialty_id}", response_model=MedicalSpecialty)
async def get_specialty(specialty_id: str) -> MedicalSpecialty:
    specialty = get_specialty_by_id(specialty_id)
    if specialty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Specialty not found")
    return specialty
