"""Domain exception to HTTP status mapping shared by the v1 routers"""

import logging

from fastapi import HTTPException

from pocket_ledger.domain.exceptions import (
    AlreadyPaid,
    BudgetAlreadyExists,
    DomainException,
    NotFound,
    PersistenceError,
)
from pocket_ledger.infrastructure.observability.metrics import record_rejection


def to_http_exception(error: DomainException, request_id: str) -> HTTPException:
    """
    Status codes:
    - 404: referenced entity missing
    - 409: conflicts with current state (already paid, duplicate budget)
    - 503: storage unavailable
    - 422: any other validation failure
    """
    if isinstance(error, PersistenceError):
        logging.error(f"Storage error: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=503, detail="Storage unavailable, please retry")

    record_rejection(error)

    if isinstance(error, NotFound):
        logging.warning(f"Not found: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=404, detail=str(error))

    if isinstance(error, (AlreadyPaid, BudgetAlreadyExists)):
        logging.warning(f"Conflict: {error}", extra={"request_id": request_id})
        return HTTPException(status_code=409, detail=str(error))

    logging.warning(f"Rejected: {error}", extra={"request_id": request_id})
    return HTTPException(status_code=422, detail=str(error))
