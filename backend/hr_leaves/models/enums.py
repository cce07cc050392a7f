from __future__ import annotations

import enum


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class Decision(enum.StrEnum):
    """Manager decision on a pending request."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DecisionRole(enum.StrEnum):
    """Who recorded an entry in a request's approval flow."""

    MANAGER = "manager"
    SYSTEM = "system"


class AdjustmentType(enum.StrEnum):
    """Direction of a manual adjustment to taken days."""

    ADD = "ADD"
    SUBTRACT = "SUBTRACT"


class AdjustmentStatus(enum.StrEnum):
    """Lifecycle of a manual adjustment."""

    CREATED = "CREATED"
    APPROVED = "APPROVED"


class LedgerEntryType(enum.StrEnum):
    """Type of ledger entry affecting an entitlement."""

    RESERVE = "RESERVE"
    RELEASE = "RELEASE"
    CONSUME = "CONSUME"
    REVERT = "REVERT"
    ADJUSTMENT = "ADJUSTMENT"
    ACCRUAL = "ACCRUAL"


class LedgerSourceType(enum.StrEnum):
    """Origin of a ledger entry."""

    REQUEST = "REQUEST"
    ADJUSTMENT = "ADJUSTMENT"
    SYSTEM = "SYSTEM"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    ENTITLEMENT = "ENTITLEMENT"
    REQUEST = "REQUEST"
    ADJUSTMENT = "ADJUSTMENT"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
