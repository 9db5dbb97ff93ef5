from collections.abc import AsyncIterator
from dataclasses import dataclass
from http import HTTPStatus

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bank_api.core.config import Settings
from bank_api.core.errors import AccountNotFoundError, DuplicateAccountNumberError
from bank_api.main import create_app
from bank_api.models import Account, NewAccount

TEST_SECRET = "test-signing-secret"  # noqa: S105


class InMemoryAccountStore:
    """Account store kept in a dict, for exercising the API without Postgres."""

    def __init__(self) -> None:
        self.accounts: dict[int, Account] = {}
        self._next_id = 1
        self.taken_numbers: set[int] = set()

    async def create(self, account: NewAccount) -> Account:
        if account.number in self.taken_numbers or any(
            existing.number == account.number for existing in self.accounts.values()
        ):
            raise DuplicateAccountNumberError(account.number)
        created = Account(
            id=self._next_id,
            encrypted_password=account.encrypted_password,
            **account.model_dump(),
        )
        self.accounts[created.id] = created
        self._next_id += 1
        return created

    async def delete(self, account_id: int) -> None:
        if self.accounts.pop(account_id, None) is None:
            raise AccountNotFoundError(account_id=account_id)

    async def update(self, account: Account) -> Account:
        if account.id not in self.accounts:
            raise AccountNotFoundError(account_id=account.id)
        self.accounts[account.id] = account
        return account

    async def get_all(self) -> list[Account]:
        return list(self.accounts.values())

    async def get_by_id(self, account_id: int) -> Account:
        try:
            return self.accounts[account_id]
        except KeyError:
            raise AccountNotFoundError(account_id=account_id) from None

    async def get_by_number(self, number: int) -> Account:
        for account in self.accounts.values():
            if account.number == number:
                return account
        raise AccountNotFoundError(number=number)


@dataclass
class CreatedAccount:
    id: int
    number: int
    password: str


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def app(settings: Settings, store: InMemoryAccountStore) -> FastAPI:
    return create_app(settings, store=store)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
async def created_account(client: AsyncClient) -> CreatedAccount:
    password = "pw1"  # noqa: S105
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": password}
    )
    assert response.status_code == HTTPStatus.OK, response.text
    data = response.json()
    return CreatedAccount(id=data["id"], number=data["number"], password=password)


@pytest.fixture
async def token(client: AsyncClient, created_account: CreatedAccount) -> str:
    response = await client.post(
        "/login",
        json={"number": created_account.number, "password": created_account.password},
    )
    assert response.status_code == HTTPStatus.OK, response.text
    return response.json()["token"]
