"""Blessing endpoints: token disbursement and divine token management."""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from hermes.api.deps import get_container, require_api_key
from hermes.container import ApplicationContainer
from hermes.services.exceptions import ChainInteractionError, InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_api_key)], tags=["Blessings"])


class BlessWithTokensRequest(BaseModel):
    """Disbursement request. Field checks happen in the service."""

    model_config = ConfigDict(populate_by_name=True)

    token_address: Optional[str] = Field(None, alias="tokenAddress")
    recipient: Optional[str] = None
    amount: Optional[Union[str, int, float]] = None
    reference: Optional[str] = ""


class TokenRequest(BaseModel):
    """Request naming a single token."""

    model_config = ConfigDict(populate_by_name=True)

    token_address: Optional[str] = Field(None, alias="tokenAddress")


class BlessWithTokensResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    token_address: str = Field(serialization_alias="tokenAddress")
    recipient: str
    amount: str
    reference: str
    tx_hash: str = Field(serialization_alias="txHash")
    block_number: int = Field(serialization_alias="blockNumber")


class TokenTxResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    token_address: str = Field(serialization_alias="tokenAddress")
    tx_hash: str = Field(serialization_alias="txHash")
    block_number: int = Field(serialization_alias="blockNumber")


class DivineTokensResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    divine_tokens: list[str] = Field(serialization_alias="divineTokens")


def _bad_request(e: InvalidRequestError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _chain_failure(error: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": str(e)},
    )


@router.post(
    "/bless-with-tokens",
    response_model=BlessWithTokensResponse,
    response_model_by_alias=True,
)
async def bless_with_tokens(
    request: BlessWithTokensRequest,
    container: ApplicationContainer = Depends(get_container),
) -> BlessWithTokensResponse:
    """Disburse tokens from the Zephyr contract to a recipient."""
    try:
        result = await container.blessings.bless_with_tokens(
            token_address=request.token_address,
            recipient=request.recipient,
            amount=request.amount,
            reference=request.reference,
        )
    except InvalidRequestError as e:
        raise _bad_request(e)
    except ChainInteractionError as e:
        logger.error(f"Error bestowing blessing: {e}")
        raise _chain_failure("Failed to bestow blessing", e)

    return BlessWithTokensResponse(
        token_address=result.token_address,
        recipient=result.recipient,
        amount=result.amount,
        reference=result.reference,
        tx_hash=result.tx_hash,
        block_number=result.block_number,
    )


@router.post("/bless-token", response_model=TokenTxResponse, response_model_by_alias=True)
async def bless_token(
    request: TokenRequest,
    container: ApplicationContainer = Depends(get_container),
) -> TokenTxResponse:
    """Add a token to the divine allow-list."""
    try:
        result = await container.blessings.bless_token(request.token_address)
    except InvalidRequestError as e:
        raise _bad_request(e)
    except ChainInteractionError as e:
        logger.error(f"Error blessing token: {e}")
        raise _chain_failure("Failed to bless token", e)

    return TokenTxResponse(
        token_address=result.token_address,
        tx_hash=result.tx_hash,
        block_number=result.block_number,
    )


@router.post("/unbless-token", response_model=TokenTxResponse, response_model_by_alias=True)
async def unbless_token(
    request: TokenRequest,
    container: ApplicationContainer = Depends(get_container),
) -> TokenTxResponse:
    """Remove a token from the divine allow-list."""
    try:
        result = await container.blessings.unbless_token(request.token_address)
    except InvalidRequestError as e:
        raise _bad_request(e)
    except ChainInteractionError as e:
        logger.error(f"Error unblessing token: {e}")
        raise _chain_failure("Failed to unbless token", e)

    return TokenTxResponse(
        token_address=result.token_address,
        tx_hash=result.tx_hash,
        block_number=result.block_number,
    )


@router.get("/divine-tokens", response_model=DivineTokensResponse, response_model_by_alias=True)
async def divine_tokens(
    container: ApplicationContainer = Depends(get_container),
) -> DivineTokensResponse:
    """List tokens cached as divine (cache only, no chain call)."""
    try:
        tokens = container.blessings.list_divine_tokens()
    except Exception as e:
        logger.error(f"Error getting divine tokens: {e}")
        raise _chain_failure("Failed to get divine tokens", e)

    return DivineTokensResponse(divine_tokens=tokens)
