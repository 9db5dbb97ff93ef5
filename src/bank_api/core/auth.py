"""Authorization for the single-account routes."""

import re
from typing import Annotated

from fastapi import Depends, Header, Request
from loguru import logger

from bank_api.core.errors import BankError, PermissionDeniedError
from bank_api.core.passwords import PasswordHasher
from bank_api.core.tokens import InvalidTokenError, TokenService
from bank_api.db import get_store
from bank_api.models import Account
from bank_api.store import AccountStore

TOKEN_HEADER = "x-jwt-token"

_DECIMAL_ID = re.compile(r"[+-]?[0-9]+")


def get_token_service(request: Request) -> TokenService:
    """Get the app's token service."""
    return request.app.state.tokens


def get_hasher(request: Request) -> PasswordHasher:
    """Get the app's password hasher."""
    return request.app.state.hasher


def _deny(reason: str) -> PermissionDeniedError:
    logger.debug("Permission denied: {}", reason)
    return PermissionDeniedError()


async def require_account_owner(
    account_id: str,
    tokens: Annotated[TokenService, Depends(get_token_service)],
    store: Annotated[AccountStore, Depends(get_store)],
    token: Annotated[str | None, Header(alias=TOKEN_HEADER)] = None,
) -> Account:
    """Allow the request only if its token is bound to the account in the path.

    Every failure raises the same ``PermissionDeniedError`` so callers
    cannot tell a missing account from a bad token.

    Returns:
        The account addressed by the path.
    """
    if not token:
        raise _deny("missing token header")

    try:
        claims = tokens.verify(token)
    except InvalidTokenError as err:
        raise _deny(f"invalid token: {err.message}") from err

    if not _DECIMAL_ID.fullmatch(account_id):
        raise _deny(f"invalid account id {account_id!r}")
    parsed_id = int(account_id)

    try:
        account = await store.get_by_id(parsed_id)
    except BankError as err:
        raise _deny(f"account lookup failed: {err}") from err

    if account.number != claims.account_number:
        raise _deny(f"token is not bound to account {parsed_id}")

    return account
