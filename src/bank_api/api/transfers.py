"""API endpoints for transfers."""

from fastapi import APIRouter

from bank_api.models import TransferRequest

router = APIRouter(tags=["transfers"])


# TODO(bank-api): Persist transfers and move balances; requests are only echoed.
@router.post("/transfer", response_model=TransferRequest)
async def create_transfer(request: TransferRequest) -> TransferRequest:
    """Accept a transfer request and echo it back."""
    return request
