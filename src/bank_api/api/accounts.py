"""API endpoints for account management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from loguru import logger

from bank_api.core.accounts import open_account
from bank_api.core.auth import get_hasher, require_account_owner
from bank_api.core.passwords import PasswordHasher
from bank_api.db import get_store
from bank_api.models import Account, AccountResponse, CreateAccountRequest
from bank_api.store import AccountStore

router = APIRouter(prefix="/account", tags=["accounts"])


# TODO(bank-api): Listing needs no token; gate it like /account/{account_id}.
@router.get("", response_model=list[AccountResponse])
async def get_accounts(
    store: Annotated[AccountStore, Depends(get_store)],
) -> list[AccountResponse]:
    """List every account."""
    accounts = await store.get_all()
    return [AccountResponse.from_account(account) for account in accounts]


@router.post("", response_model=AccountResponse)
async def create_account(
    payload: CreateAccountRequest,
    request: Request,
    store: Annotated[AccountStore, Depends(get_store)],
    hasher: Annotated[PasswordHasher, Depends(get_hasher)],
) -> AccountResponse:
    """Create an account with a freshly allocated account number."""
    account = await open_account(
        store,
        hasher,
        payload.first_name,
        payload.last_name,
        payload.password,
        attempts=request.app.state.settings.number_allocation_attempts,
    )
    return AccountResponse.from_account(account)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account: Annotated[Account, Depends(require_account_owner)],
) -> AccountResponse:
    """Get the account the caller's token is bound to."""
    return AccountResponse.from_account(account)


@router.delete("/{account_id}")
async def delete_account(
    account: Annotated[Account, Depends(require_account_owner)],
    store: Annotated[AccountStore, Depends(get_store)],
) -> dict[str, int]:
    """Delete the account the caller's token is bound to."""
    await store.delete(account.id)
    logger.info("Deleted account {}", account.id)
    return {"deleted:": account.id}
