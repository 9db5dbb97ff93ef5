"""Main application module for the bank API.

This module builds the FastAPI application, wires the account, login and
transfer routers to their collaborators, and provides the ``bank-api``
command that serves it.
"""

import argparse
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from loguru import logger

from bank_api.api.accounts import router as accounts_router
from bank_api.api.auth import router as auth_router
from bank_api.api.transfers import router as transfers_router
from bank_api.core.config import Settings
from bank_api.core.errors import register_error_handlers
from bank_api.core.passwords import PasswordHasher
from bank_api.core.tokens import TokenService
from bank_api.db import lifespan
from bank_api.store import AccountStore


def create_app(
    settings: Settings | None = None,
    *,
    store: AccountStore | None = None,
    seed: bool = False,
) -> FastAPI:
    """Create the application.

    Without a ``store`` the app connects to ``settings.database_url`` on
    startup.
    """
    settings = settings or Settings()

    app = FastAPI(title="bank-api", lifespan=lifespan)
    app.state.settings = settings
    app.state.seed = seed
    app.state.store = store
    app.state.hasher = PasswordHasher(settings.bcrypt_rounds)
    app.state.tokens = TokenService(
        settings.jwt_secret, timedelta(seconds=settings.token_ttl_seconds)
    )

    register_error_handlers(app)

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"ok": True}

    app.include_router(auth_router)
    app.include_router(accounts_router)
    app.include_router(transfers_router)
    return app


def main(argv: list[str] | None = None) -> None:
    """Serve the API."""
    parser = argparse.ArgumentParser(description="Bank account REST API")
    _ = parser.add_argument(
        "--seed", action="store_true", help="create a demo account at startup"
    )
    args = parser.parse_args(argv)

    settings = Settings()
    if not settings.jwt_secret:
        logger.warning("BANK_JWT_SECRET is not set; logins will fail")

    app = create_app(settings, seed=args.seed)
    logger.info("Server API running on {}:{}", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
