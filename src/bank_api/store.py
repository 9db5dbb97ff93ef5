"""Account persistence."""

from collections.abc import AsyncIterator  # noqa: TC003
from contextlib import asynccontextmanager
from typing import Protocol

import asyncpg
from loguru import logger

from bank_api.core.errors import (
    AccountNotFoundError,
    DuplicateAccountNumberError,
    StoreError,
)
from bank_api.models import Account, NewAccount

CREATE_ACCOUNT_TABLE = """
CREATE TABLE IF NOT EXISTS account (
    id serial PRIMARY KEY,
    first_name varchar(50),
    last_name varchar(50),
    number integer NOT NULL UNIQUE,
    balance bigint NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL,
    encrypted_password varchar(255) NOT NULL
)
"""

_COLUMNS = "id, first_name, last_name, number, balance, created_at, encrypted_password"


class AccountStore(Protocol):
    """Capabilities the API needs from account storage."""

    async def create(self, account: NewAccount) -> Account:
        """Persist a new account and return it with its id.

        Raises ``DuplicateAccountNumberError`` if the number is taken.
        """
        ...

    async def delete(self, account_id: int) -> None:
        """Delete an account, raising ``AccountNotFoundError`` if missing."""
        ...

    async def update(self, account: Account) -> Account:
        """Update the name fields of an existing account."""
        ...

    async def get_all(self) -> list[Account]: ...

    async def get_by_id(self, account_id: int) -> Account: ...

    async def get_by_number(self, number: int) -> Account: ...


def _to_account(row: asyncpg.Record) -> Account:
    return Account.model_validate(dict(row))


class PostgresAccountStore:
    """``AccountStore`` backed by a PostgreSQL ``account`` table."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool = pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.pool.PoolConnectionProxy]:
        """Acquire a pooled connection, reporting driver failures as StoreError."""
        try:
            async with self._pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as err:
            logger.error("Account store operation failed: {}", err)
            raise StoreError from err

    async def init(self) -> None:
        """Create the account table if it does not exist yet."""
        async with self._connection() as conn:
            _ = await conn.execute(CREATE_ACCOUNT_TABLE)
        logger.info("Account table ready")

    async def create(self, account: NewAccount) -> Account:
        async with self._connection() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO account
                        (first_name, last_name, number, balance, created_at,
                         encrypted_password)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING {_COLUMNS}
                    """,  # noqa: S608
                    account.first_name,
                    account.last_name,
                    account.number,
                    account.balance,
                    account.created_at,
                    account.encrypted_password,
                )
            except asyncpg.UniqueViolationError as err:
                raise DuplicateAccountNumberError(account.number) from err

        assert row is not None
        return _to_account(row)

    async def delete(self, account_id: int) -> None:
        async with self._connection() as conn:
            deleted = await conn.fetchval(
                "DELETE FROM account WHERE id = $1 RETURNING id",
                account_id,
            )
        if deleted is None:
            raise AccountNotFoundError(account_id=account_id)

    async def update(self, account: Account) -> Account:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE account
                SET first_name = $2, last_name = $3
                WHERE id = $1
                RETURNING {_COLUMNS}
                """,  # noqa: S608
                account.id,
                account.first_name,
                account.last_name,
            )
        if row is None:
            raise AccountNotFoundError(account_id=account.id)
        return _to_account(row)

    async def get_all(self) -> list[Account]:
        async with self._connection() as conn:
            rows = await conn.fetch(f"SELECT {_COLUMNS} FROM account ORDER BY id")  # noqa: S608
        return [_to_account(row) for row in rows]

    async def get_by_id(self, account_id: int) -> Account:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM account WHERE id = $1",  # noqa: S608
                account_id,
            )
        if row is None:
            raise AccountNotFoundError(account_id=account_id)
        return _to_account(row)

    async def get_by_number(self, number: int) -> Account:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM account WHERE number = $1",  # noqa: S608
                number,
            )
        if row is None:
            raise AccountNotFoundError(number=number)
        return _to_account(row)
