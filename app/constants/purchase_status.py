from enum import Enum
from typing import Optional


class PurchaseStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class PurchaseType(str, Enum):
    service = "service"
    course = "course"


class PurchaseTrigger(str, Enum):
    PAYMENT_VERIFIED = "payment_verified"
    SIGNATURE_MISMATCH = "signature_mismatch"
    PAYMENT_CAPTURED = "payment_captured"
    ORDER_PAID = "order_paid"
    PAYMENT_FAILED = "payment_failed"
    REFUND_RECORDED = "refund_recorded"


TERMINAL_STATUSES = {
    PurchaseStatus.completed,
    PurchaseStatus.failed,
    PurchaseStatus.refunded,
}

# (current status, trigger) -> new status; anything missing is a no-op
ALLOWED_TRANSITIONS = {
    PurchaseStatus.pending: {
        PurchaseTrigger.PAYMENT_VERIFIED: PurchaseStatus.completed,
        PurchaseTrigger.PAYMENT_CAPTURED: PurchaseStatus.completed,
        PurchaseTrigger.ORDER_PAID: PurchaseStatus.completed,
        PurchaseTrigger.SIGNATURE_MISMATCH: PurchaseStatus.failed,
        PurchaseTrigger.PAYMENT_FAILED: PurchaseStatus.failed,
    },
    PurchaseStatus.completed: {
        PurchaseTrigger.REFUND_RECORDED: PurchaseStatus.refunded,
    },
    PurchaseStatus.failed: {},
    PurchaseStatus.refunded: {},
}


def next_status(current, trigger: PurchaseTrigger) -> Optional[PurchaseStatus]:
    """Return the status ``trigger`` moves ``current`` to, or None for a no-op."""
    return ALLOWED_TRANSITIONS.get(PurchaseStatus(current), {}).get(trigger)


def transition_edge(trigger: PurchaseTrigger):
    """The single (from, to) pair ``trigger`` is allowed to apply."""
    for status, moves in ALLOWED_TRANSITIONS.items():
        if trigger in moves:
            return status, moves[trigger]
    raise ValueError(f"No transition defined for {trigger}")
