"""GET /v1/financial-health - monthly financial health score"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pocket_ledger.api.dependencies import get_health_service, get_request_id
from pocket_ledger.api.v1.errors import to_http_exception
from pocket_ledger.api.v1.schemas import (
    MONTH_PATTERN,
    CategoryExpense,
    HealthFactorsSchema,
    HealthReportResponse,
)
from pocket_ledger.domain.exceptions import DomainException
from pocket_ledger.services.health import HealthService

router = APIRouter()


@router.get("/financial-health", response_model=HealthReportResponse)
def get_financial_health(
    request: Request,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM, defaults to current month"),
    service: HealthService = Depends(get_health_service),
):
    """
    Score the month's cash flow from 0 to 100.

    Returns:
        Score, label, month-over-month change, factor breakdown and up to
        three recommendations
    """
    try:
        report = service.report(month)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    factors = report.factors
    return HealthReportResponse(
        score=report.score,
        label=report.label,
        income_change=report.income_change,
        expense_change=report.expense_change,
        recommendations=report.recommendations,
        factors=HealthFactorsSchema(
            month=factors.month,
            income=factors.income,
            expense=factors.expense,
            cash_flow=factors.cash_flow,
            debt_this_month=factors.debt_this_month,
            expense_ratio=round(factors.expense_ratio, 4),
            saving_rate=round(factors.saving_rate, 4),
            debt_ratio=round(factors.debt_ratio, 4),
            expense_by_category=[
                CategoryExpense(
                    category_id=category_id,
                    category_name=report.category_names.get(category_id, category_id),
                    amount=amount,
                )
                for category_id, amount in factors.expense_by_category
            ],
        ),
    )
