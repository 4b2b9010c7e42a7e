"""Document <-> domain model conversion; all field defaulting lives here"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from pocket_ledger.domain.models import (
    Budget,
    Category,
    CategoryType,
    Loan,
    LoanStatus,
    LoanType,
    PaymentHistory,
    PaymentMethod,
    ScheduleRecord,
    ScheduleStatus,
    Transaction,
    TransactionType,
    Wallet,
    WalletType,
)
from pocket_ledger.infrastructure.database.documents import StoredDocument

E = TypeVar("E", bound=Enum)

EPOCH = date(1970, 1, 1)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _enum(enum_cls: Type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _date(value: Any) -> Optional[date]:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields so partial documents stay sparse"""
    return {key: value for key, value in data.items() if value is not None}


def _created(doc: StoredDocument) -> Optional[datetime]:
    return _datetime(doc.data.get("createdAt")) or _datetime(doc.created_at)


# Loans


def loan_from_document(doc: StoredDocument) -> Loan:
    data = doc.data
    created_at = _created(doc)
    return Loan(
        id=doc.id,
        name=data.get("name") or "",
        due_day=_int(data.get("dueDay"), 1) or 1,
        status=_enum(LoanStatus, data.get("status"), LoanStatus.ACTIVE),
        total_amount=_int(data.get("totalAmount")),
        paid_amount=_int(data.get("paidAmount")),
        remaining_amount=_int(data.get("remainingAmount")),
        start_date=_date(data.get("startDate")) or (created_at.date() if created_at else EPOCH),
        type=_enum(LoanType, data.get("type"), LoanType.PERSONAL),
        end_date=_date(data.get("endDate")),
        interest_rate=_float(data.get("interestRate")),
        lender=data.get("lender") or None,
        account_number=data.get("accountNumber") or None,
        notes=data.get("notes") or None,
        created_at=created_at,
        updated_at=_datetime(data.get("updatedAt")),
    )


def loan_to_document(loan: Loan) -> Dict[str, Any]:
    return _clean(
        {
            "name": loan.name,
            "dueDay": loan.due_day,
            "status": loan.status.value,
            "type": loan.type.value,
            "totalAmount": loan.total_amount,
            "paidAmount": loan.paid_amount,
            "remainingAmount": loan.remaining_amount,
            "interestRate": loan.interest_rate,
            "lender": loan.lender,
            "accountNumber": loan.account_number,
            "notes": loan.notes,
            "startDate": _iso(loan.start_date),
            "endDate": _iso(loan.end_date),
            "createdAt": _iso(loan.created_at),
            "updatedAt": _iso(loan.updated_at),
        }
    )


def loan_totals_document(loan: Loan) -> Dict[str, Any]:
    """Only the fields payments and edits change"""
    return _clean(
        {
            "totalAmount": loan.total_amount,
            "paidAmount": loan.paid_amount,
            "remainingAmount": loan.remaining_amount,
            "status": loan.status.value,
            "updatedAt": _iso(loan.updated_at),
        }
    )


# Schedules


def schedule_from_document(doc: StoredDocument, loan_id: str) -> ScheduleRecord:
    data = doc.data
    created_at = _created(doc)
    return ScheduleRecord(
        id=doc.id,
        loan_id=data.get("loanId") or loan_id,
        month=data.get("month") or "",
        amount=_int(data.get("amount")),
        principal=_int(data.get("principal")),
        interest=_int(data.get("interest")),
        due_date=_date(data.get("dueDate")) or (created_at.date() if created_at else EPOCH),
        paid=bool(data.get("paid", False)),
        status=_enum(ScheduleStatus, data.get("status"), ScheduleStatus.PENDING),
        paid_at=_datetime(data.get("paidAt")),
        created_at=created_at,
        updated_at=_datetime(data.get("updatedAt")),
    )


def schedule_to_document(record: ScheduleRecord) -> Dict[str, Any]:
    return _clean(
        {
            "loanId": record.loan_id,
            "month": record.month,
            "amount": record.amount,
            "principal": record.principal,
            "interest": record.interest,
            "dueDate": _iso(record.due_date),
            "paid": record.paid,
            "status": record.status.value,
            "paidAt": _iso(record.paid_at),
            "createdAt": _iso(record.created_at),
            "updatedAt": _iso(record.updated_at),
        }
    )


# Payment history


def payment_from_document(doc: StoredDocument) -> PaymentHistory:
    data = doc.data
    created_at = _created(doc)
    return PaymentHistory(
        id=doc.id,
        loan_id=data.get("loanId") or "",
        schedule_id=data.get("scheduleId") or "",
        amount=_int(data.get("amount")),
        payment_date=_datetime(data.get("paymentDate")) or created_at or datetime.fromtimestamp(0, timezone.utc),
        method=_enum(PaymentMethod, data.get("method"), PaymentMethod.CASH),
        notes=data.get("notes") or None,
        created_at=created_at,
    )


def payment_to_document(payment: PaymentHistory) -> Dict[str, Any]:
    return _clean(
        {
            "loanId": payment.loan_id,
            "scheduleId": payment.schedule_id,
            "amount": payment.amount,
            "paymentDate": _iso(payment.payment_date),
            "method": payment.method.value,
            "notes": payment.notes,
            "createdAt": _iso(payment.created_at),
        }
    )


# Wallets, categories, budgets, transactions


def wallet_from_document(doc: StoredDocument) -> Wallet:
    data = doc.data
    return Wallet(
        id=doc.id,
        name=data.get("name") or "",
        type=_enum(WalletType, data.get("type"), WalletType.CASH),
        balance=_int(data.get("balance")),
        color=data.get("color") or "#3b82f6",
        account_number=data.get("accountNumber") or None,
        description=data.get("description") or None,
        created_at=_created(doc),
        updated_at=_datetime(data.get("updatedAt")),
    )


def wallet_to_document(wallet: Wallet) -> Dict[str, Any]:
    return _clean(
        {
            "name": wallet.name,
            "type": wallet.type.value,
            "balance": wallet.balance,
            "color": wallet.color,
            "accountNumber": wallet.account_number,
            "description": wallet.description,
            "createdAt": _iso(wallet.created_at),
            "updatedAt": _iso(wallet.updated_at),
        }
    )


def category_from_document(doc: StoredDocument) -> Category:
    data = doc.data
    return Category(
        id=doc.id,
        name=data.get("name") or "",
        type=_enum(CategoryType, data.get("type"), CategoryType.EXPENSE),
        color=data.get("color") or "#6b7280",
        icon=data.get("icon") or "💰",
        transaction_count=_int(data.get("transactionCount")),
        description=data.get("description") or None,
        created_at=_created(doc),
        updated_at=_datetime(data.get("updatedAt")),
    )


def category_to_document(category: Category) -> Dict[str, Any]:
    return _clean(
        {
            "name": category.name,
            "type": category.type.value,
            "color": category.color,
            "icon": category.icon,
            "transactionCount": category.transaction_count,
            "description": category.description,
            "createdAt": _iso(category.created_at),
            "updatedAt": _iso(category.updated_at),
        }
    )


def budget_from_document(doc: StoredDocument) -> Budget:
    data = doc.data
    return Budget(
        id=doc.id,
        category_id=data.get("categoryId") or "",
        limit=_int(data.get("limit")),
        created_at=_created(doc),
        updated_at=_datetime(data.get("updatedAt")),
    )


def budget_to_document(budget: Budget) -> Dict[str, Any]:
    return _clean(
        {
            "categoryId": budget.category_id,
            "limit": budget.limit,
            "createdAt": _iso(budget.created_at),
            "updatedAt": _iso(budget.updated_at),
        }
    )


def transaction_from_document(doc: StoredDocument) -> Transaction:
    data = doc.data
    created_at = _created(doc)
    return Transaction(
        id=doc.id,
        type=_enum(TransactionType, data.get("type"), TransactionType.EXPENSE),
        amount=_int(data.get("amount")),
        wallet_id=data.get("walletId") or "",
        date=_date(data.get("date")) or (created_at.date() if created_at else EPOCH),
        category_id=data.get("categoryId") or None,
        note=data.get("note") or None,
        to_wallet_id=data.get("toWalletId") or None,
        fee=_int(data.get("fee")),
        created_at=created_at,
        updated_at=_datetime(data.get("updatedAt")),
    )


def transaction_to_document(tx: Transaction) -> Dict[str, Any]:
    return _clean(
        {
            "type": tx.type.value,
            "amount": tx.amount,
            "walletId": tx.wallet_id,
            "categoryId": tx.category_id,
            "date": _iso(tx.date),
            "note": tx.note,
            "toWalletId": tx.to_wallet_id,
            "fee": tx.fee or None,
            "createdAt": _iso(tx.created_at),
            "updatedAt": _iso(tx.updated_at),
        }
    )
