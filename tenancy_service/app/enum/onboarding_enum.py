from enum import Enum


class WizardMode(str, Enum):
    create = "create"
    edit = "edit"


class WizardStep(int, Enum):
    PERSONAL = 1
    CONTACT = 2
    EDUCATION_EMPLOYMENT = 3
    PROPERTY_ROOM = 4
    FINANCIAL = 5
    EMERGENCY_CONTACTS = 6
    DOCUMENTS_REVIEW = 7


TOTAL_STEPS = len(WizardStep)


class OutboxTaskType(str, Enum):
    LEDGER_RENT = "LEDGER_RENT"
    LEDGER_DEPOSIT = "LEDGER_DEPOSIT"
    OCCUPANCY_RECONCILE = "OCCUPANCY_RECONCILE"


LEDGER_TASK_TYPES = (OutboxTaskType.LEDGER_RENT, OutboxTaskType.LEDGER_DEPOSIT)


class OutboxStatus(str, Enum):
    PENDING = "PENDING"
    DONE = "DONE"
    ABANDONED = "ABANDONED"
    # replaced by a later occupancy task for the same tenant
    SUPERSEDED = "SUPERSEDED"


# statuses that count as settled when computing sync flags
SETTLED_STATUSES = (OutboxStatus.DONE, OutboxStatus.SUPERSEDED)
