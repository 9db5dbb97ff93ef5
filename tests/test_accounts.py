from http import HTTPStatus

import pytest
from conftest import CreatedAccount, InMemoryAccountStore
from httpx import AsyncClient

from bank_api.core.auth import TOKEN_HEADER
from bank_api.core.numbers import ACCOUNT_NUMBER_RANGE

pytestmark = pytest.mark.anyio


async def test__create_account__success(client: AsyncClient) -> None:
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": "pw1"}
    )
    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert "id" in data
    assert 0 <= data["number"] < ACCOUNT_NUMBER_RANGE
    assert data["firstName"] == "A"
    assert data["lastName"] == "B"
    assert data["balance"] == 0
    assert "createdAt" in data


async def test__create_account__omits_password_hash(client: AsyncClient) -> None:
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": "pw1"}
    )
    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert "encryptedPassword" not in data
    assert "encrypted_password" not in data
    assert "password" not in data
    assert "pw1" not in response.text


async def test__create_account__stores_hash_not_plaintext(
    client: AsyncClient, store: InMemoryAccountStore
) -> None:
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": "pw1"}
    )
    stored = store.accounts[response.json()["id"]]
    assert stored.encrypted_password
    assert stored.encrypted_password != "pw1"


async def test__create_account__malformed_body(client: AsyncClient) -> None:
    response = await client.post(
        "/account",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "error" in response.json()


async def test__create_account__missing_field(client: AsyncClient) -> None:
    response = await client.post("/account", json={"firstName": "A"})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "error" in response.json()


@pytest.mark.parametrize("password", ["x" * 73, "\u00e9" * 37], ids=["ascii", "multibyte"])
async def test__create_account__password_too_long(
    client: AsyncClient, store: InMemoryAccountStore, password: str
) -> None:
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": password}
    )
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"error": "password cannot be longer than 72 bytes"}
    assert store.accounts == {}


async def test__create_account__fails_when_numbers_exhausted(
    client: AsyncClient, store: InMemoryAccountStore
) -> None:
    store.taken_numbers.update(range(ACCOUNT_NUMBER_RANGE))
    response = await client.post(
        "/account", json={"firstName": "A", "lastName": "B", "password": "pw1"}
    )
    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "could not allocate a unique account number"}
    assert store.accounts == {}


async def test__get_accounts__no_accounts(client: AsyncClient) -> None:
    response = await client.get("/account")
    assert response.status_code == HTTPStatus.OK
    assert response.json() == []


async def test__get_accounts__gets_multiple(client: AsyncClient) -> None:
    num_accounts = 2
    for index in range(num_accounts):
        _ = await client.post(
            "/account",
            json={"firstName": f"A{index}", "lastName": "B", "password": "pw"},
        )

    response = await client.get("/account")

    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert len(data) == num_accounts
    assert all("encryptedPassword" not in account for account in data)


async def test__get_account__success(
    client: AsyncClient, created_account: CreatedAccount, token: str
) -> None:
    response = await client.get(
        f"/account/{created_account.id}", headers={TOKEN_HEADER: token}
    )
    assert response.status_code == HTTPStatus.OK
    data = response.json()
    assert data["id"] == created_account.id
    assert data["number"] == created_account.number
    assert "encryptedPassword" not in data


async def test__get_account__no_token(
    client: AsyncClient, created_account: CreatedAccount
) -> None:
    response = await client.get(f"/account/{created_account.id}")
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json() == {"error": "Permission denied"}


async def test__delete_account__success(
    client: AsyncClient,
    created_account: CreatedAccount,
    token: str,
    store: InMemoryAccountStore,
) -> None:
    response = await client.delete(
        f"/account/{created_account.id}", headers={TOKEN_HEADER: token}
    )
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"deleted:": created_account.id}
    assert created_account.id not in store.accounts


async def test__delete_account__nonexistent(client: AsyncClient, token: str) -> None:
    response = await client.delete("/account/9999", headers={TOKEN_HEADER: token})
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert response.json() == {"error": "Permission denied"}


async def test__delete_account__twice(
    client: AsyncClient, created_account: CreatedAccount, token: str
) -> None:
    first = await client.delete(
        f"/account/{created_account.id}", headers={TOKEN_HEADER: token}
    )
    assert first.status_code == HTTPStatus.OK

    second = await client.delete(
        f"/account/{created_account.id}", headers={TOKEN_HEADER: token}
    )
    assert second.status_code == HTTPStatus.FORBIDDEN


async def test__account__method_not_allowed(client: AsyncClient) -> None:
    response = await client.put("/account")
    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED
    assert "error" in response.json()
