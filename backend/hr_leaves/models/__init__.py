from sqlmodel import SQLModel

from hr_leaves.models.adjustment import LeaveAdjustment
from hr_leaves.models.audit import AuditLog
from hr_leaves.models.base import TimestampMixin, UUIDBase
from hr_leaves.models.entitlement import LeaveEntitlement
from hr_leaves.models.enums import (
    AdjustmentStatus,
    AdjustmentType,
    AuditAction,
    AuditEntityType,
    Decision,
    DecisionRole,
    LedgerEntryType,
    LedgerSourceType,
    RequestStatus,
)
from hr_leaves.models.ledger import LeaveLedgerEntry
from hr_leaves.models.request import LeaveRequest

__all__ = [
    "AdjustmentStatus",
    "AdjustmentType",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Decision",
    "DecisionRole",
    "LeaveAdjustment",
    "LeaveEntitlement",
    "LeaveLedgerEntry",
    "LeaveRequest",
    "LedgerEntryType",
    "LedgerSourceType",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
