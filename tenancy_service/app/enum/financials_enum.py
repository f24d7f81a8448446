from enum import Enum


class TransactionType(str, Enum):
    RENT = "RENT"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionSubType(str, Enum):
    MONTHLY_RENT = "monthly_rent"
    SECURITY_DEPOSIT = "security_deposit"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
