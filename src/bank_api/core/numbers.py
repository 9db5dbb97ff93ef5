"""Account number allocation."""

import random

ACCOUNT_NUMBER_RANGE = 100_000

_system_random = random.SystemRandom()


def allocate_account_number(rng: random.Random | None = None) -> int:
    """Pick an account number uniformly from ``[0, ACCOUNT_NUMBER_RANGE)``.

    Uniqueness is not checked here; the store rejects duplicates.
    """
    source = rng if rng is not None else _system_random
    return source.randrange(ACCOUNT_NUMBER_RANGE)
