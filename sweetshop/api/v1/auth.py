import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sweetshop.api.deps import get_identity
from sweetshop.core.errors import CatalogError
from sweetshop.core.security import Identity
from sweetshop.schemas.auth import LoginRequest, RegisterRequest, UserResponse
from sweetshop.schemas.response import SuccessResponse
from sweetshop.services import auth_service

router = APIRouter()
log = logging.getLogger("uvicorn")


def _user_payload(user) -> dict:
    return UserResponse(
        id=str(user.id),
        username=user.username,
        email=user.email,
        role=getattr(user.role, "value", user.role),
    ).model_dump()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def register_endpoint(payload: RegisterRequest):
    try:
        user = await auth_service.register(payload.username, payload.email, payload.password)
        return SuccessResponse(message="User registered successfully", data={"user": _user_payload(user)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error registering user: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/login", response_model=SuccessResponse)
async def login_endpoint(payload: LoginRequest):
    """Returns the account and a bearer token for the Authorization header."""
    try:
        user, token = await auth_service.login(payload.email, payload.password)
        return SuccessResponse(message="Login successful", data={"user": _user_payload(user), "token": token})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error logging in: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/me", response_model=SuccessResponse)
async def me_endpoint(identity: Identity = Depends(get_identity)):
    return SuccessResponse(data={"id": identity.user_id, "role": identity.role.value})
