"""/v1/budgets - monthly category budgets"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pocket_ledger.api.dependencies import get_budget_service, get_request_id
from pocket_ledger.api.v1.errors import to_http_exception
from pocket_ledger.api.v1.schemas import (
    MONTH_PATTERN,
    BudgetCreateRequest,
    BudgetOverviewResponse,
    BudgetSchema,
    BudgetUpdateRequest,
)
from pocket_ledger.domain.exceptions import DomainException
from pocket_ledger.services.budgets import BudgetService

router = APIRouter()


@router.post("/budgets", response_model=BudgetSchema, status_code=201)
def create_budget(
    request_body: BudgetCreateRequest,
    request: Request,
    service: BudgetService = Depends(get_budget_service),
):
    try:
        budget = service.create_budget(request_body.category_id, request_body.limit)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BudgetSchema.model_validate(budget)


@router.get("/budgets", response_model=BudgetOverviewResponse)
def get_budget_overview(
    request: Request,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM, defaults to current month"),
    service: BudgetService = Depends(get_budget_service),
):
    """
    Usage of every budget in the month.

    Returns:
        Per-budget used amount, percent (capped at 100), status band and
        totals with a count per band
    """
    try:
        overview = service.overview(month)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BudgetOverviewResponse.model_validate(overview)


@router.patch("/budgets/{budget_id}", response_model=BudgetSchema)
def update_budget(
    budget_id: str,
    request_body: BudgetUpdateRequest,
    request: Request,
    service: BudgetService = Depends(get_budget_service),
):
    try:
        budget = service.update_budget(budget_id, request_body.limit, request_body.category_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BudgetSchema.model_validate(budget)


@router.delete("/budgets/{budget_id}", status_code=204)
def delete_budget(budget_id: str, request: Request, service: BudgetService = Depends(get_budget_service)):
    try:
        service.delete_budget(budget_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
