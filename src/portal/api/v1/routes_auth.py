from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.portal.domain.models.user import LoginRequest, ProfileUpdate, RegisterRequest, User
from src.portal.security import get_api_key, get_current_user, get_user_service
from src.portal.services.audit.service import audit_service
from src.portal.services.users.service import (
    DuplicateEmailError,
    InvalidCredentialsError,
    RegistrationValidationError,
    UserNotFoundError,
    UserService,
)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    dependencies=[Depends(get_api_key)],
)


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, users: UserService = Depends(get_user_service)) -> User:
    try:
        user = users.register(payload)
    except RegistrationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    audit_service.log_event(action="register", resource_type="user", resource_id=user.id)
    return user


@router.post("/login", response_model=User)
async def login(payload: LoginRequest, users: UserService = Depends(get_user_service)) -> User:
    try:
        user = users.login(payload.email, payload.password)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidCredentialsError as exc:
        audit_service.log_event(action="login_failed", resource_type="user")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    audit_service.log_event(action="login", resource_type="user", resource_id=user.id)
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(users: UserService = Depends(get_user_service)) -> Response:
    users.logout()
    audit_service.log_event(action="logout", resource_type="user")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=User)
async def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.patch("/me", response_model=User)
async def update_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> User:
    try:
        updated = users.update_profile(current_user.id, payload)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    audit_service.log_event(
        action="update_profile",
        resource_type="user",
        resource_id=updated.id,
        extra={"fields": sorted(payload.model_dump(exclude_unset=True))},
    )
    return updated
