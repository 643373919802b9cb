# paylink/services/lifecycle.py
"""Allowed status transitions for payment links.

Every status must have an entry in ``ALLOWED_TRANSITIONS``; the services never
write a status change that this table does not allow.
"""
from typing import Dict, FrozenSet
from ..exceptions import InvalidStateError
from ..models.payment_link import PaymentLink, PaymentLinkStatus

ALLOWED_TRANSITIONS: Dict[PaymentLinkStatus, FrozenSet[PaymentLinkStatus]] = {
    PaymentLinkStatus.PENDING: frozenset({PaymentLinkStatus.UPLOADED, PaymentLinkStatus.EXPIRED}),
    PaymentLinkStatus.UPLOADED: frozenset({PaymentLinkStatus.CONFIRMED, PaymentLinkStatus.EXPIRED}),
    PaymentLinkStatus.CONFIRMED: frozenset(),
    PaymentLinkStatus.EXPIRED: frozenset(),
}

# the status a transition must start from
REQUIRED_SOURCE = {
    PaymentLinkStatus.UPLOADED: PaymentLinkStatus.PENDING,
    PaymentLinkStatus.CONFIRMED: PaymentLinkStatus.UPLOADED,
}


def can_transition(from_status: PaymentLinkStatus, to_status: PaymentLinkStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS[from_status]


def rejection_message(link: PaymentLink, target: PaymentLinkStatus) -> str:
    status = link.status.value
    if target == PaymentLinkStatus.UPLOADED:
        return f"Payment link is not in pending status (current status '{status}')"
    if target == PaymentLinkStatus.CONFIRMED:
        return (
            f"Cannot confirm payment with status '{status}'. "
            "Payment must be in 'uploaded' status."
        )
    return f"Cannot move payment link from '{status}' to '{target.value}'"


def ensure_transition(link: PaymentLink, target: PaymentLinkStatus):
    """Raise InvalidStateError unless ``link`` may move to ``target``"""
    required = REQUIRED_SOURCE.get(target)
    allowed = can_transition(link.status, target)
    if not allowed or (required is not None and link.status != required):
        raise InvalidStateError(rejection_message(link, target), status=link.status.value)
