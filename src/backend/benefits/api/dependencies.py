"""Shared FastAPI dependencies for the benefit routers."""

import logging

from fastapi import Header, HTTPException, Request

from src.backend.benefits.config.settings import BenefitContracts
from src.backend.benefits.use_cases.contract_results import ContractError, ContractResult

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[ContractError, int] = {
    ContractError.NOT_ADMIN: 403,
    ContractError.DUPLICATE: 409,
    ContractError.NOT_FOUND: 404,
    ContractError.VERIFICATION_EXPIRED: 410,
}


def get_contracts(request: Request) -> BenefitContracts:
    return request.app.state.contracts


def get_caller(x_caller: str = Header(..., alias="X-Caller")) -> str:
    caller = x_caller.strip()
    if not caller:
        raise HTTPException(status_code=400, detail="X-Caller header must not be blank")
    return caller


def error_detail(error: ContractError) -> dict:
    return {"error": error.name, "code": int(error)}


def raise_for_error(result: ContractResult) -> None:
    """Translate a failed contract result into an HTTP error."""
    if result.ok:
        return
    logger.debug("Contract call failed: %s", result.error.name)
    raise HTTPException(
        status_code=ERROR_STATUS_CODES[result.error],
        detail=error_detail(result.error),
    )


def not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=error_detail(ContractError.NOT_FOUND))
