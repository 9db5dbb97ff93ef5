"""Account domain model and request/response bodies."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bank_api.core.numbers import ACCOUNT_NUMBER_RANGE


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NewAccount(_CamelModel):
    """An account built for creation that the store has not persisted yet."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    number: int
    balance: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    encrypted_password: Annotated[str, Field(exclude=True, repr=False)]


class Account(NewAccount):
    """A persisted account.

    id: int
        Storage-assigned identifier.
    number: int
        Account number used to log in and bound into session tokens.
    encrypted_password: str
        bcrypt hash, excluded from every serialized form.
    """

    id: int


class AccountResponse(_CamelModel):
    """Response model for an account. Never carries the password hash."""

    id: int
    first_name: str
    last_name: str
    number: int
    balance: int
    created_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls.model_validate(account.model_dump())


class CreateAccountRequest(_CamelModel):
    """Request model for creating an account."""

    first_name: str
    last_name: str
    password: str


class LoginRequest(BaseModel):
    """Request model for logging in with an account number."""

    number: Annotated[int, Field(ge=0, lt=ACCOUNT_NUMBER_RANGE)]
    password: str


class LoginResponse(BaseModel):
    """Response model for a successful login."""

    number: int
    token: str


class TransferRequest(_CamelModel):
    """Request model for a transfer.

    Transfers are echoed back and not applied to any balance.
    """

    to_account: int
    amount: int
