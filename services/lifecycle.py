"""
Due Lifecycle
State machine for a single due:

    payable:      pending/due -> pending/done -> cleared/done
    non-payable:  pending/due -> cleared/due

Both transitions go through the authorization gate first; a deny leaves the
due untouched. confirm_payment and clear_due only change the object in hand;
the save_* variants also write it back with a compare-and-set UPDATE so that
concurrent requests cannot both win.
"""
import datetime
import logging
from dataclasses import dataclass
from typing import Optional

from models.enums import Category, DueStatus, PaymentStatus
from services.authorization import Action, Principal, authorize
from services.errors import PreconditionFailed

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    due: object
    changed: bool
    message: str


def utc_today() -> datetime.date:
    return datetime.datetime.now(datetime.timezone.utc).date()


def confirm_payment(principal: Principal, due) -> TransitionResult:
    """
    Accounts attests that money was received for a payable due.
    Re-confirming an already confirmed payment is a no-op, not an error.
    """
    authorize(principal, Action.CONFIRM_PAYMENT, due=due)

    if due.category != Category.PAYABLE.value:
        raise PreconditionFailed("Only payable dues need a payment confirmation")

    if due.payment_status == PaymentStatus.DONE.value:
        logger.info("Payment for due %s already confirmed", due.id)
        return TransitionResult(due, False, "Payment already confirmed")

    if due.status != DueStatus.PENDING.value:
        raise PreconditionFailed("Due is already cleared")

    due.payment_status = PaymentStatus.DONE.value
    logger.info("Payment confirmed for due %s by %s", due.id, principal.department)
    return TransitionResult(due, True, "Payment confirmed")


def clear_due(principal: Principal, due, today: Optional[datetime.date] = None) -> TransitionResult:
    """
    The owning department finalizes a due.
    Payable dues need a confirmed payment first. Clearing twice is an error
    because clear_date must only ever be set once.
    """
    authorize(principal, Action.CLEAR_DUE, due=due)

    if due.status == DueStatus.CLEARED.value:
        raise PreconditionFailed("Due is already cleared")

    if due.status != DueStatus.PENDING.value:
        raise PreconditionFailed(f"Due has unexpected status '{due.status}'")

    if due.category == Category.PAYABLE.value and due.payment_status != PaymentStatus.DONE.value:
        logger.warning("Clear blocked for due %s: payment not confirmed", due.id)
        raise PreconditionFailed("Payment must be completed by Accounts before clearing")

    clear_date = today or utc_today()
    # clear_date may never precede date_added
    if due.date_added and clear_date < due.date_added:
        clear_date = due.date_added

    due.status = DueStatus.CLEARED.value
    due.clear_date = clear_date
    logger.info("Due %s cleared by %s on %s", due.id, principal.department, clear_date)
    return TransitionResult(due, True, "Due cleared")


# ==========================================
#   PERSISTENCE (compare-and-set)
# ==========================================

def state_of(due) -> dict:
    return {"status": due.status, "payment_status": due.payment_status}


def write_if_unchanged(db, due, expected: dict) -> bool:
    """
    Write the due's state columns only while the row still holds `expected`.
    Two requests may both pass the guards on the same stale row; exactly one
    UPDATE matches, the other affects no rows. Works without row locks
    (SQLite ignores SELECT ... FOR UPDATE).
    """
    model = type(due)
    query = db.query(model).filter(model.id == due.id)
    for name, value in expected.items():
        query = query.filter(getattr(model, name) == value)
    written = query.update(
        {
            "status": due.status,
            "payment_status": due.payment_status,
            "clear_date": due.clear_date,
        },
        synchronize_session=False,
    )
    return written == 1


def _detach(db, due) -> None:
    # The loaded object is only a scratch copy; the guarded UPDATE is the sole write
    if due in db:
        db.expunge(due)


def save_payment_confirmation(db, principal: Principal, due) -> TransitionResult:
    """confirm_payment + guarded write. Losing a race to another confirmation is a no-op."""
    expected = state_of(due)
    _detach(db, due)
    result = confirm_payment(principal, due)
    if result.changed and not write_if_unchanged(db, due, expected):
        logger.info("Payment for due %s was confirmed by a concurrent request", due.id)
        return TransitionResult(due, False, "Payment already confirmed")
    return result


def save_clearance(db, principal: Principal, due, today: Optional[datetime.date] = None) -> TransitionResult:
    """clear_due + guarded write. Losing a race to another clearance is a 409."""
    expected = state_of(due)
    _detach(db, due)
    result = clear_due(principal, due, today=today)
    if not write_if_unchanged(db, due, expected):
        logger.warning("Clear of due %s lost to a concurrent change", due.id)
        raise PreconditionFailed("Due is already cleared")
    return result
