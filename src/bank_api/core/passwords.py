"""Password hashing for stored account credentials."""

import bcrypt

from bank_api.core.errors import ConfigurationError, PasswordTooLongError

MIN_ROUNDS = 4
MAX_ROUNDS = 31
# bcrypt only reads this many bytes of input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way bcrypt codec for account passwords.

    Every call to :meth:`hash` draws a fresh salt, so hashing the same
    password twice yields two different strings that both verify.
    """

    def __init__(self, rounds: int = 12) -> None:
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            msg = f"bcrypt rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {rounds}"
            raise ConfigurationError(msg)
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Raises:
            PasswordTooLongError: If the UTF-8 password exceeds 72 bytes.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, hashed_password: str, candidate: str) -> bool:
        """Verify a candidate password against a stored hash.

        A mismatch, an unparseable hash or a candidate too long to have
        been hashed is reported as ``False``.
        """
        encoded = candidate.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(
                encoded,
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False

    def burn(self) -> None:
        """Spend the cost of one verification without a stored hash."""
        # Hash a dummy password to prevent timing attacks on unknown accounts
        bcrypt.checkpw(b"dummy", bcrypt.gensalt(rounds=self.rounds))
