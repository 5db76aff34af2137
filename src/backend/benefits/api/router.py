"""Benefit API Router.

Mounts the per-contract routers under /api/benefits and exposes the local
block-height source.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.backend.benefits.api.dependencies import get_contracts
from src.backend.benefits.api.recipient_router import recipient_router
from src.backend.benefits.api.subsidy_router import subsidy_router
from src.backend.benefits.api.usage_router import usage_router
from src.backend.benefits.config.settings import BenefitContracts
from src.backend.benefits.use_cases.admin import ManualBlockHeight

logger = logging.getLogger(__name__)

chain_router = APIRouter(prefix="/chain", tags=["Chain"])

app_benefits = APIRouter(
    prefix="/api/benefits",
    responses={404: {"description": "Not found"}},
)


class AdvanceHeightRequest(BaseModel):
    blocks: int = Field(default=1, ge=0)


@chain_router.get("/height")
def get_block_height(contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        return {"height": contracts.height_source.current_height()}


@chain_router.post("/advance")
def advance_block_height(
    body: AdvanceHeightRequest, contracts: BenefitContracts = Depends(get_contracts)
):
    """Move the local height source forward (local development only)."""
    source = contracts.height_source
    if not isinstance(source, ManualBlockHeight):
        raise HTTPException(
            status_code=409,
            detail="Block height is supplied by an external source and cannot be advanced",
        )
    with contracts.lock:
        height = source.advance(body.blocks)
    logger.info("Block height advanced by %s to %s", body.blocks, height)
    return {"height": height}


app_benefits.include_router(subsidy_router)
app_benefits.include_router(recipient_router)
app_benefits.include_router(usage_router)
app_benefits.include_router(chain_router)
