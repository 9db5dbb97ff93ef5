"""Database connection management."""

from collections.abc import AsyncIterator  # noqa: TC003
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from loguru import logger

from bank_api.core.accounts import open_account
from bank_api.core.config import Settings
from bank_api.core.errors import StartupError, StoreError
from bank_api.core.passwords import PasswordHasher
from bank_api.store import AccountStore, PostgresAccountStore

DEMO_ACCOUNT = ("Demo", "Account", "passwordbreaker")


async def seed_accounts(
    store: AccountStore, hasher: PasswordHasher, settings: Settings
) -> None:
    """Create the demo account."""
    first_name, last_name, password = DEMO_ACCOUNT
    account = await open_account(
        store,
        hasher,
        first_name,
        last_name,
        password,
        attempts=settings.number_allocation_attempts,
    )
    logger.info("Seeded demo account {} with number {}", account.id, account.number)


async def _seed_if_requested(app: FastAPI, store: AccountStore) -> None:
    if app.state.seed:
        logger.info("Seeding the database")
        await seed_accounts(store, app.state.hasher, app.state.settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the connection pool and account store for the app's lifetime.

    An app created with a ready store skips the database entirely. Failing
    to reach the database or create the table aborts startup.
    """
    if app.state.store is not None:
        await _seed_if_requested(app, app.state.store)
        yield
        return

    settings: Settings = app.state.settings
    try:
        pool = await asyncpg.create_pool(settings.database_url)
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as err:
        logger.critical("Could not connect to the database: {}", err)
        raise StartupError(str(err)) from err

    async with pool:
        logger.info("Database pool created")
        store = PostgresAccountStore(pool)
        try:
            await store.init()
        except StoreError as err:
            logger.critical("Could not create the account table: {}", err.__cause__)
            raise StartupError(str(err.__cause__)) from err

        app.state.store = store
        await _seed_if_requested(app, store)
        yield
        app.state.store = None


def get_store(request: Request) -> AccountStore:
    """Get the account store for the running app."""
    store: AccountStore | None = request.app.state.store
    assert store is not None
    return store
