"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from loguru import logger

from bank_api.core.auth import get_hasher, get_token_service
from bank_api.core.errors import AccountNotFoundError, LoginFailedError
from bank_api.core.passwords import PasswordHasher
from bank_api.core.tokens import TokenService
from bank_api.db import get_store
from bank_api.models import LoginRequest, LoginResponse
from bank_api.store import AccountStore

router = APIRouter(tags=["auth"])


@router.post("/login")
async def login(
    request: LoginRequest,
    store: Annotated[AccountStore, Depends(get_store)],
    hasher: Annotated[PasswordHasher, Depends(get_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> LoginResponse:
    """Exchange an account number and password for a session token.

    Raises:
        LoginFailedError: If the number is unknown or the password is wrong.
    """
    try:
        account = await store.get_by_number(request.number)
    except AccountNotFoundError as err:
        hasher.burn()
        logger.info("Login failed for unknown account number {}", request.number)
        raise LoginFailedError from err

    if not hasher.verify(account.encrypted_password, request.password):
        logger.info("Login failed for account number {}", request.number)
        raise LoginFailedError

    token = tokens.issue(account)
    logger.info("Account number {} logged in", account.number)
    return LoginResponse(number=account.number, token=token)
