"""Signed session tokens bound to an account number."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from bank_api.core.errors import BankError, ErrorKind
from bank_api.models import Account

ALGORITHM = "HS256"


class SigningError(BankError):
    kind = ErrorKind.INTERNAL
    message = "token signing failed"


class InvalidTokenError(BankError):
    kind = ErrorKind.FORBIDDEN
    message = "invalid token"


class TokenClaims(BaseModel):
    """Claims carried by a session token."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_number: Annotated[StrictInt, Field(alias="accountNumber")]
    expires_at: Annotated[StrictInt, Field(alias="exp")]


class TokenService:
    """Issue and verify HS256 tokens with a server-held secret.

    Tokens are stateless: nothing is stored server side and there is no
    revocation. Expiry is checked on every verification.
    """

    def __init__(self, secret: str, ttl: timedelta = timedelta(minutes=15)) -> None:
        self._secret = secret
        self.ttl = ttl

    def issue(self, account: Account, *, now: datetime | None = None) -> str:
        """Create a token bound to ``account.number``.

        Raises:
            SigningError: If no signing secret is configured.
        """
        if not self._secret:
            msg = "signing secret is not configured"
            raise SigningError(msg)

        issued_at = now or datetime.now(UTC)
        claims = TokenClaims(
            account_number=account.number,
            expires_at=int((issued_at + self.ttl).timestamp()),
        )
        try:
            return jwt.encode(
                claims.model_dump(by_alias=True), self._secret, algorithm=ALGORITHM
            )
        except JWTError as err:
            raise SigningError(str(err)) from err

    def verify(self, token: str) -> TokenClaims:
        """Validate a token and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, signed with another
                key or algorithm, expired, or lacks an integer account number.
        """
        if not self._secret:
            msg = "signing secret is not configured"
            raise InvalidTokenError(msg)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require_exp": True},
            )
        except JWTError as err:
            raise InvalidTokenError(str(err)) from err

        try:
            return TokenClaims.model_validate(payload)
        except ValidationError as err:
            msg = "token claims are malformed"
            raise InvalidTokenError(msg) from err
