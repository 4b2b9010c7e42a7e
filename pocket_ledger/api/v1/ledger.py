"""/v1/wallets, /v1/categories, /v1/transactions, /v1/dashboard"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from pocket_ledger.api.dependencies import get_ledger_service, get_request_id
from pocket_ledger.api.v1.errors import to_http_exception
from pocket_ledger.api.v1.schemas import (
    MONTH_PATTERN,
    BudgetUsageSchema,
    CategoryCreateRequest,
    CategoryExpense,
    CategorySchema,
    CategoryUpdateRequest,
    DashboardResponse,
    MonthTotalsSchema,
    TransactionCreateRequest,
    TransactionSchema,
    WalletCreateRequest,
    WalletSchema,
    WalletUpdateRequest,
)
from pocket_ledger.domain.exceptions import DomainException
from pocket_ledger.domain.models import CategoryType
from pocket_ledger.services.ledger import LedgerService

router = APIRouter()


@router.post("/wallets", response_model=WalletSchema, status_code=201)
def create_wallet(
    request_body: WalletCreateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        wallet = service.create_wallet(**request_body.model_dump())
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return WalletSchema.model_validate(wallet)


@router.get("/wallets", response_model=List[WalletSchema])
def list_wallets(request: Request, service: LedgerService = Depends(get_ledger_service)):
    try:
        wallets = service.list_wallets()
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return [WalletSchema.model_validate(w) for w in wallets]


@router.patch("/wallets/{wallet_id}", response_model=WalletSchema)
def update_wallet(
    wallet_id: str,
    request_body: WalletUpdateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        wallet = service.update_wallet(wallet_id, request_body.model_dump(exclude_unset=True))
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return WalletSchema.model_validate(wallet)


@router.delete("/wallets/{wallet_id}", status_code=204)
def delete_wallet(wallet_id: str, request: Request, service: LedgerService = Depends(get_ledger_service)):
    try:
        service.delete_wallet(wallet_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.post("/categories", response_model=CategorySchema, status_code=201)
def create_category(
    request_body: CategoryCreateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        category = service.create_category(**request_body.model_dump())
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return CategorySchema.model_validate(category)


@router.get("/categories", response_model=List[CategorySchema])
def list_categories(
    request: Request,
    type: Optional[CategoryType] = Query(None),
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        categories = service.list_categories(type)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return [CategorySchema.model_validate(c) for c in categories]


@router.patch("/categories/{category_id}", response_model=CategorySchema)
def update_category(
    category_id: str,
    request_body: CategoryUpdateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        category = service.update_category(category_id, request_body.model_dump(exclude_unset=True))
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return CategorySchema.model_validate(category)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: str, request: Request, service: LedgerService = Depends(get_ledger_service)):
    """Delete a category together with any budget set on it"""
    try:
        service.delete_category(category_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
def record_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Record income, expense or a transfer.

    Wallet balances and the category's transaction count change in the
    same commit as the transaction itself.
    """
    try:
        tx = service.record_transaction(**request_body.model_dump())
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return TransactionSchema.model_validate(tx)


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(
    request: Request,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        transactions = service.list_transactions(month)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return [TransactionSchema.model_validate(tx) for tx in transactions]


@router.put("/transactions/{transaction_id}", response_model=TransactionSchema)
def update_transaction(
    transaction_id: str,
    request_body: TransactionCreateRequest,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    """Replace a transaction, moving its balance effects to the new wallets"""
    try:
        tx = service.update_transaction(transaction_id, **request_body.model_dump())
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return TransactionSchema.model_validate(tx)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: str,
    request: Request,
    service: LedgerService = Depends(get_ledger_service),
):
    try:
        service.delete_transaction(transaction_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    request: Request,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM, defaults to current month"),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Home screen summary.

    Returns:
        Total balance, the month's income/expense/cash flow and growth
        against last month, a six-month trend, top spending categories and
        budgets at 70% or more of their limit
    """
    try:
        summary = service.dashboard(month)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return DashboardResponse(
        month=summary.month,
        total_balance=summary.total_balance,
        income=summary.income,
        expense=summary.expense,
        cash_flow=summary.cash_flow,
        income_growth=summary.income_growth,
        expense_growth=summary.expense_growth,
        monthly_trend=[MonthTotalsSchema.model_validate(item) for item in summary.monthly_trend],
        top_categories=[
            CategoryExpense(
                category_id=category_id,
                category_name=summary.category_names.get(category_id, category_id),
                amount=amount,
            )
            for category_id, amount in summary.top_categories
        ],
        budget_warnings=[BudgetUsageSchema.model_validate(item) for item in summary.budget_warnings],
    )
