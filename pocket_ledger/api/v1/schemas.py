"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pocket_ledger.domain.models import (
    BudgetStatus,
    CategoryType,
    LoanStatus,
    LoanType,
    PaymentMethod,
    ScheduleStatus,
    TransactionType,
    WalletType,
)
from pocket_ledger.domain.schedules import MAX_TERM_MONTHS

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class DomainSchema(BaseModel):
    """Response models read straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# Loans


class LoanCreateRequest(BaseModel):
    """Request body for POST /v1/loans"""

    name: str = Field(..., min_length=1, description="Loan name")
    principal: int = Field(..., description="Amount borrowed, whole currency units")
    term_months: int = Field(..., le=MAX_TERM_MONTHS, description="Number of monthly installments")
    start_date: date
    due_day: int = Field(..., description="Day of month installments fall due (1-31)")
    interest_rate: float = Field(0.0, ge=0, allow_inf_nan=False, description="Annual flat interest, percent")
    type: LoanType = LoanType.PERSONAL
    end_date: Optional[date] = None
    lender: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None


class LoanUpdateRequest(BaseModel):
    """Request body for PATCH /v1/loans/{loan_id}; only sent fields change"""

    name: Optional[str] = None
    due_day: Optional[int] = None
    type: Optional[LoanType] = None
    interest_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    lender: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PaymentRequest(BaseModel):
    method: Optional[PaymentMethod] = None
    note: Optional[str] = None


class ScheduleEditRequest(BaseModel):
    amount: int = Field(..., description="New installment amount")


class BulkScheduleEditRequest(BaseModel):
    amounts: Dict[str, int] = Field(..., description="Installment id to new amount")


class ScheduleSchema(DomainSchema):
    """Single monthly installment"""

    id: str
    month: str
    amount: int
    principal: int
    interest: int
    due_date: date
    paid: bool
    status: ScheduleStatus
    paid_at: Optional[datetime] = None


class LoanSchema(DomainSchema):
    id: str
    name: str
    type: LoanType
    status: LoanStatus
    due_day: int
    total_amount: int
    paid_amount: int
    remaining_amount: int
    start_date: date
    end_date: Optional[date] = None
    interest_rate: Optional[float] = None
    lender: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoanSummarySchema(DomainSchema):
    status: LoanStatus
    total_schedules: int
    paid_schedules: int
    progress_percent: float
    paid_amount: int
    remaining_amount: int
    next_due: Optional[ScheduleSchema] = None


class LoanCreateResponse(BaseModel):
    """Response for POST /v1/loans"""

    loan: LoanSchema
    schedules: List[ScheduleSchema]


class LoanDetailResponse(BaseModel):
    """Response for GET /v1/loans/{loan_id}"""

    loan: LoanSchema
    summary: LoanSummarySchema
    schedules: List[ScheduleSchema]


class LoanListItem(BaseModel):
    loan: LoanSchema
    summary: LoanSummarySchema


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans"""

    items: List[LoanListItem]
    total: int
    page: int
    total_pages: int


class PaymentResponse(BaseModel):
    loan: LoanSchema
    schedule: ScheduleSchema


class ScheduleEditResponse(BaseModel):
    loan: LoanSchema
    schedule: ScheduleSchema


class BulkScheduleEditResponse(BaseModel):
    loan: LoanSchema
    schedules: List[ScheduleSchema]


class LoanDeleteResponse(BaseModel):
    loan_id: str
    schedules_removed: int


class DueItemSchema(DomainSchema):
    loan_id: str
    loan_name: str
    schedule: ScheduleSchema
    days_left: int


class PortfolioStatsResponse(DomainSchema):
    """Response for GET /v1/loans/stats"""

    total_active_loans: int
    total_remaining: int
    total_paid: int
    overdue_loans: int
    total_this_month: int
    total_monthly_payment: int
    upcoming_payments: int
    paid_percent: float
    overdue_schedules: List[DueItemSchema]
    due_soon: List[DueItemSchema]


class PaymentHistorySchema(DomainSchema):
    id: str
    loan_id: str
    schedule_id: str
    amount: int
    payment_date: datetime
    method: PaymentMethod
    notes: Optional[str] = None


class PaymentHistoryResponse(BaseModel):
    payments: List[PaymentHistorySchema]


class ReminderSchema(DomainSchema):
    key: str
    loan_id: str
    loan_name: str
    month: str
    amount: int
    days_left: int
    level: str
    message: str


class ReminderResponse(BaseModel):
    reminders: List[ReminderSchema]


# Budgets


class BudgetCreateRequest(BaseModel):
    category_id: str = Field(..., min_length=1)
    limit: int = Field(..., description="Monthly limit, whole currency units")


class BudgetUpdateRequest(BaseModel):
    category_id: Optional[str] = None
    limit: Optional[int] = None


class BudgetSchema(DomainSchema):
    id: str
    category_id: str
    limit: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BudgetUsageSchema(DomainSchema):
    budget: BudgetSchema
    category_name: str
    used: int
    percent: int
    status: BudgetStatus
    remaining: int


class BudgetOverviewResponse(DomainSchema):
    """Response for GET /v1/budgets"""

    month: str
    items: List[BudgetUsageSchema]
    total_limit: int
    total_used: int
    total_remaining: int
    status_counts: Dict[str, int]


# Wallets, categories, transactions


class WalletCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: WalletType = WalletType.CASH
    balance: int = 0
    color: Optional[str] = None
    account_number: Optional[str] = None
    description: Optional[str] = None


class WalletUpdateRequest(BaseModel):
    """Request body for PATCH /v1/wallets/{wallet_id}; balance changes only through transactions"""

    name: Optional[str] = Field(None, min_length=1)
    type: Optional[WalletType] = None
    color: Optional[str] = None
    account_number: Optional[str] = None
    description: Optional[str] = None


class WalletSchema(DomainSchema):
    id: str
    name: str
    type: WalletType
    balance: int
    color: str
    account_number: Optional[str] = None
    description: Optional[str] = None
    updated_at: Optional[datetime] = None


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    type: CategoryType
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[CategoryType] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class CategorySchema(DomainSchema):
    id: str
    name: str
    type: CategoryType
    color: str
    icon: str
    transaction_count: int
    description: Optional[str] = None
    updated_at: Optional[datetime] = None


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions and PUT /v1/transactions/{transaction_id}"""

    type: TransactionType
    amount: int
    wallet_id: str = Field(..., min_length=1)
    date: date
    category_id: Optional[str] = None
    note: Optional[str] = None
    to_wallet_id: Optional[str] = None
    fee: int = 0


class TransactionSchema(DomainSchema):
    id: str
    type: TransactionType
    amount: int
    wallet_id: str
    date: date
    category_id: Optional[str] = None
    note: Optional[str] = None
    to_wallet_id: Optional[str] = None
    fee: int = 0
    updated_at: Optional[datetime] = None


# Financial health


class CategoryExpense(BaseModel):
    category_id: str
    category_name: str
    amount: int


class HealthFactorsSchema(BaseModel):
    month: str
    income: int
    expense: int
    cash_flow: int
    debt_this_month: int
    expense_ratio: float
    saving_rate: float
    debt_ratio: float
    expense_by_category: List[CategoryExpense]


class HealthReportResponse(BaseModel):
    """Response for GET /v1/financial-health"""

    score: int
    label: str
    income_change: float
    expense_change: float
    recommendations: List[str]
    factors: HealthFactorsSchema


# Dashboard


class MonthTotalsSchema(DomainSchema):
    month: str
    income: int
    expense: int


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    month: str
    total_balance: int
    income: int
    expense: int
    cash_flow: int
    income_growth: float
    expense_growth: float
    monthly_trend: List[MonthTotalsSchema]
    top_categories: List[CategoryExpense]
    budget_warnings: List[BudgetUsageSchema]
