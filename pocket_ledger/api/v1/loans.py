"""/v1/loans - loans, installment schedules, payments and reminders"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pocket_ledger.api.dependencies import get_loan_service, get_request_id
from pocket_ledger.api.v1.errors import to_http_exception
from pocket_ledger.api.v1.schemas import (
    BulkScheduleEditRequest,
    BulkScheduleEditResponse,
    LoanCreateRequest,
    LoanCreateResponse,
    LoanDeleteResponse,
    LoanDetailResponse,
    LoanListItem,
    LoanListResponse,
    LoanSchema,
    LoanSummarySchema,
    LoanUpdateRequest,
    PaymentHistoryResponse,
    PaymentHistorySchema,
    PaymentRequest,
    PaymentResponse,
    PortfolioStatsResponse,
    ReminderResponse,
    ReminderSchema,
    ScheduleEditRequest,
    ScheduleEditResponse,
    ScheduleSchema,
)
from pocket_ledger.domain.exceptions import DomainException
from pocket_ledger.domain.models import LoanStatus, LoanType
from pocket_ledger.services.loans import LoanService, LoanTerms

router = APIRouter()


@router.post("/loans", response_model=LoanCreateResponse, status_code=201)
def create_loan(
    request_body: LoanCreateRequest,
    request: Request,
    service: LoanService = Depends(get_loan_service),
):
    """
    Create a loan and generate its flat-rate installment schedule.

    Flow:
    1. Validate terms (principal, term, rate, due day)
    2. Generate one installment per month
    3. Persist loan and schedule in one commit
    """
    request_id = get_request_id(request)
    try:
        loan, schedules = service.create_loan(LoanTerms(**request_body.model_dump()))
    except DomainException as e:
        raise to_http_exception(e, request_id)

    return LoanCreateResponse(
        loan=LoanSchema.model_validate(loan),
        schedules=[ScheduleSchema.model_validate(record) for record in schedules],
    )


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    request: Request,
    q: Optional[str] = Query(None, description="Search name, lender or account number"),
    status: Optional[LoanStatus] = Query(None),
    type: Optional[LoanType] = Query(None),
    created_from: Optional[date] = Query(None),
    created_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    service: LoanService = Depends(get_loan_service),
):
    try:
        result = service.list_loans(q, status, type, created_from, created_to, page, per_page)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return LoanListResponse(
        items=[
            LoanListItem(loan=LoanSchema.model_validate(loan), summary=LoanSummarySchema.model_validate(summary))
            for loan, summary in result.items
        ],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.get("/loans/stats", response_model=PortfolioStatsResponse)
def get_portfolio_stats(request: Request, service: LoanService = Depends(get_loan_service)):
    """Dashboard figures across every loan of the caller"""
    try:
        stats = service.portfolio()
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return PortfolioStatsResponse.model_validate(stats)


@router.get("/loans/payments", response_model=PaymentHistoryResponse)
def get_payment_history(
    request: Request,
    loan_id: Optional[str] = Query(None),
    service: LoanService = Depends(get_loan_service),
):
    try:
        payments = service.payment_history(loan_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return PaymentHistoryResponse(payments=[PaymentHistorySchema.model_validate(p) for p in payments])


@router.get("/loans/reminders", response_model=ReminderResponse)
def collect_reminders(request: Request, service: LoanService = Depends(get_loan_service)):
    """Reminders due today; each one is returned only the first time"""
    try:
        reminders = service.collect_reminders()
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return ReminderResponse(reminders=[ReminderSchema.model_validate(r) for r in reminders])


@router.get("/loans/{loan_id}", response_model=LoanDetailResponse)
def get_loan(loan_id: str, request: Request, service: LoanService = Depends(get_loan_service)):
    try:
        loan, schedules, summary = service.get_loan(loan_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return LoanDetailResponse(
        loan=LoanSchema.model_validate(loan),
        summary=LoanSummarySchema.model_validate(summary),
        schedules=[ScheduleSchema.model_validate(record) for record in schedules],
    )


@router.patch("/loans/{loan_id}", response_model=LoanSchema)
def update_loan(
    loan_id: str,
    request_body: LoanUpdateRequest,
    request: Request,
    service: LoanService = Depends(get_loan_service),
):
    try:
        loan = service.update_loan_details(loan_id, request_body.model_dump(exclude_unset=True))
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return LoanSchema.model_validate(loan)


@router.delete("/loans/{loan_id}", response_model=LoanDeleteResponse)
def delete_loan(loan_id: str, request: Request, service: LoanService = Depends(get_loan_service)):
    try:
        removed = service.delete_loan(loan_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return LoanDeleteResponse(loan_id=loan_id, schedules_removed=removed)


@router.post("/loans/{loan_id}/schedules/{schedule_id}/pay", response_model=PaymentResponse)
def pay_schedule(
    loan_id: str,
    schedule_id: str,
    request: Request,
    request_body: Optional[PaymentRequest] = None,
    service: LoanService = Depends(get_loan_service),
):
    """
    Mark one installment paid.

    Returns 409 when the installment was already paid.
    """
    body = request_body or PaymentRequest()
    try:
        loan, record = service.mark_paid(loan_id, schedule_id, body.method, body.note)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return PaymentResponse(loan=LoanSchema.model_validate(loan), schedule=ScheduleSchema.model_validate(record))


@router.patch("/loans/{loan_id}/schedules/{schedule_id}", response_model=ScheduleEditResponse)
def edit_schedule(
    loan_id: str,
    schedule_id: str,
    request_body: ScheduleEditRequest,
    request: Request,
    service: LoanService = Depends(get_loan_service),
):
    try:
        loan, record = service.edit_schedule_amount(loan_id, schedule_id, request_body.amount)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return ScheduleEditResponse(loan=LoanSchema.model_validate(loan), schedule=ScheduleSchema.model_validate(record))


@router.put("/loans/{loan_id}/schedules", response_model=BulkScheduleEditResponse)
def edit_all_schedules(
    loan_id: str,
    request_body: BulkScheduleEditRequest,
    request: Request,
    service: LoanService = Depends(get_loan_service),
):
    try:
        loan, schedules = service.edit_all_schedules(loan_id, request_body.amounts)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BulkScheduleEditResponse(
        loan=LoanSchema.model_validate(loan),
        schedules=[ScheduleSchema.model_validate(record) for record in schedules],
    )
