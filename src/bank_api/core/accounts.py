"""Account construction and creation."""

import random

from loguru import logger

from bank_api.core.errors import DuplicateAccountNumberError, InternalError
from bank_api.core.numbers import allocate_account_number
from bank_api.core.passwords import PasswordHasher
from bank_api.models import Account, NewAccount
from bank_api.store import AccountStore


def new_account(
    first_name: str,
    last_name: str,
    password: str,
    hasher: PasswordHasher,
    rng: random.Random | None = None,
) -> NewAccount:
    """Build an unsaved account with a fresh number and hashed password."""
    return NewAccount(
        first_name=first_name,
        last_name=last_name,
        number=allocate_account_number(rng),
        encrypted_password=hasher.hash(password),
    )


async def open_account(
    store: AccountStore,
    hasher: PasswordHasher,
    first_name: str,
    last_name: str,
    password: str,
    *,
    attempts: int = 5,
    rng: random.Random | None = None,
) -> Account:
    """Create and persist an account.

    A colliding account number is re-drawn up to ``attempts`` times in total.

    Raises:
        InternalError: If every attempt collided with an existing number.
    """
    account = new_account(first_name, last_name, password, hasher, rng)
    for attempt in range(1, attempts + 1):
        try:
            created = await store.create(account)
        except DuplicateAccountNumberError:
            logger.warning(
                "Account number collision on attempt {}/{}", attempt, attempts
            )
            account = account.model_copy(
                update={"number": allocate_account_number(rng)}
            )
            continue

        logger.info("Created account {} with number {}", created.id, created.number)
        return created

    msg = "could not allocate a unique account number"
    raise InternalError(msg)
