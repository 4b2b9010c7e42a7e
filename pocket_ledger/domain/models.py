"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class LoanStatus(str, Enum):
    ACTIVE = "active"
    PAID = "paid"
    OVERDUE = "overdue"


class LoanType(str, Enum):
    PERSONAL = "personal"
    MORTGAGE = "mortgage"
    VEHICLE = "vehicle"
    EDUCATION = "education"
    OTHER = "other"


class ScheduleStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"  # display only, never persisted


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    AUTO_DEBIT = "auto-debit"


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class WalletType(str, Enum):
    CASH = "cash"
    BANK = "bank"
    DIGITAL = "digital"


class BudgetStatus(str, Enum):
    UNUSED = "unused"
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class Loan:
    """One borrowing obligation; totals include flat-rate interest"""

    id: Optional[str]
    name: str
    due_day: int
    status: LoanStatus
    total_amount: int
    paid_amount: int
    remaining_amount: int
    start_date: date
    type: LoanType = LoanType.PERSONAL
    end_date: Optional[date] = None
    interest_rate: Optional[float] = None  # annual, percent
    lender: Optional[str] = None
    account_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ScheduleRecord:
    """Single monthly installment of a loan"""

    month: str  # YYYY-MM
    amount: int
    principal: int
    interest: int
    due_date: date
    paid: bool = False
    status: ScheduleStatus = ScheduleStatus.PENDING
    paid_at: Optional[datetime] = None
    id: Optional[str] = None
    loan_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class PaymentHistory:
    """Append-only audit entry written when an installment is paid"""

    loan_id: str
    schedule_id: str
    amount: int
    payment_date: datetime
    method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Wallet:
    id: Optional[str]
    name: str
    type: WalletType
    balance: int
    color: str = "#3b82f6"
    account_number: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Category:
    id: Optional[str]
    name: str
    type: CategoryType
    color: str = "#6b7280"
    icon: str = "💰"
    transaction_count: int = 0
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Budget:
    """Monthly spending cap for one expense category"""

    id: Optional[str]
    category_id: str
    limit: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Transaction:
    """Income, expense or transfer between wallets"""

    id: Optional[str]
    type: TransactionType
    amount: int
    wallet_id: str
    date: date
    category_id: Optional[str] = None
    note: Optional[str] = None
    to_wallet_id: Optional[str] = None  # transfers only
    fee: int = 0  # transfers only
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class DueItem:
    """Unpaid installment paired with the loan it belongs to"""

    loan_id: str
    loan_name: str
    schedule: ScheduleRecord
    days_left: int


@dataclass
class LoanSummary:
    """Per-loan figures derived from its schedule"""

    loan_id: str
    status: LoanStatus
    total_schedules: int
    paid_schedules: int
    progress_percent: float
    paid_amount: int
    remaining_amount: int
    next_due: Optional[ScheduleRecord] = None


@dataclass
class PortfolioStats:
    """Figures across all of a user's loans"""

    total_active_loans: int = 0
    total_remaining: int = 0
    total_paid: int = 0
    overdue_loans: int = 0
    total_this_month: int = 0
    total_monthly_payment: int = 0
    upcoming_payments: int = 0
    paid_percent: float = 0.0
    overdue_schedules: List[DueItem] = field(default_factory=list)
    due_soon: List[DueItem] = field(default_factory=list)


@dataclass
class BudgetUsage:
    budget: Budget
    category_name: str
    used: int
    percent: int
    status: BudgetStatus
    remaining: int


@dataclass
class BudgetOverview:
    """Budget usage for one month"""

    month: str
    items: List[BudgetUsage]
    total_limit: int
    total_used: int
    total_remaining: int
    status_counts: Dict[str, int]


@dataclass
class HealthFactors:
    """Monthly cash-flow figures used for scoring"""

    month: str
    income: int
    expense: int
    cash_flow: int
    debt_this_month: int
    expense_ratio: float
    saving_rate: float
    debt_ratio: float
    expense_by_category: List[tuple] = field(default_factory=list)  # (category_id, amount), largest first


@dataclass
class HealthReport:
    """Output of the financial health assessment"""

    factors: HealthFactors
    score: int
    label: str
    income_change: float
    expense_change: float
    recommendations: List[str]
    category_names: Dict[str, str] = field(default_factory=dict)  # id -> name for expense_by_category


@dataclass
class Reminder:
    """Upcoming installment notice"""

    key: str
    loan_id: str
    loan_name: str
    month: str
    amount: int
    days_left: int
    level: str  # warning | notice | urgent
    message: str


@dataclass
class MonthTotals:
    month: str  # YYYY-MM
    income: int
    expense: int


@dataclass
class DashboardSummary:
    """Home screen figures for one month"""

    month: str
    total_balance: int
    income: int
    expense: int
    cash_flow: int
    income_growth: float
    expense_growth: float
    monthly_trend: List[MonthTotals]
    top_categories: List[tuple]  # (category_id, amount), largest first
    budget_warnings: List[BudgetUsage]
    category_names: Dict[str, str] = field(default_factory=dict)  # id -> name for top_categories
