"""User routes (register, login, update, delete)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_token_issuer, get_user_service
from api.errors import INVALID_CREDENTIALS, to_http_exception
from api.models import EditUserBody, LoginBody, LoginResponse, RegisterBody, UserResponse
from api.security import require_roles
from domain.model.errors import DomainError
from domain.model.user import EditUserRequest, Role
from services.token_issuer import TokenIssuer
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterBody, service: UserService = Depends(get_user_service)):
    """Register a new user.

    Raises:
        HTTPException: 400 on validation failure, 409 if the email is taken
    """
    try:
        user = service.register(body.to_domain())
    except DomainError as e:
        raise to_http_exception(e) from e

    return UserResponse.from_domain(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginBody,
    service: UserService = Depends(get_user_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Check credentials, issue a token and stamp last_login.

    Unknown email and wrong password both answer 401 with the same message.
    """
    try:
        user = service.authenticate(body.to_domain())
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        issued = issuer.issue(user.id)
        if issued is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        stamped = service.update(
            user.id,
            EditUserRequest(last_login=datetime.now(timezone.utc), jwt_token=issued.token),
        )
    except DomainError as e:
        raise to_http_exception(e) from e

    logger.info("User logged in", extra={"userId": user.id})
    return LoginResponse(
        user=UserResponse.from_domain(stamped or issued.user),
        token=issued.token,
        expires_at=issued.expires_at,
    )


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: EditUserBody,
    service: UserService = Depends(get_user_service),
    _claims: dict = Depends(require_roles(Role.ADMIN, Role.USER)),
):
    """Apply a partial update. 404 if the user does not exist."""
    try:
        user = service.update(user_id, body.to_domain())
    except DomainError as e:
        raise to_http_exception(e) from e

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    _claims: dict = Depends(require_roles(Role.ADMIN)),
):
    """Hard-delete a user. 404 if the user does not exist."""
    try:
        deleted = service.delete(user_id)
    except DomainError as e:
        raise to_http_exception(e) from e

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
