"""
DERIVED FIELDS
==============

Values computed at read time and never stored:
- plan end date
- payment overdue flag

Plus the JSON projections the routes return.
"""

from datetime import date

from pardna.models import Frequency
from pardna.services.calendar_service import add_interval


def plan_end_date(plan):
    """
    start_date + duration units of the LEDGER's frequency.

    Ledgers without a recorded frequency are treated as MONTHLY. The
    plan's own frequency column is not consulted here.
    """
    frequency = None
    if plan.ledger is not None:
        frequency = plan.ledger.frequency

    return add_interval(plan.start_date, frequency or Frequency.MONTHLY, plan.duration)


def payment_overdue(payment, today=None):
    """Due date in the past and not yet settled."""
    today = today or date.today()
    return payment.due_date < today and not payment.settled


def _iso(value):
    return value.isoformat() if value is not None else None


# ============================================================
# SERIALIZERS
# ============================================================

def serialize_participant(participant):
    return {
        'id': participant.id,
        'name': participant.name,
        'email': participant.email,
    }


def serialize_payment(payment, today=None):
    return {
        'id': payment.id,
        'type': payment.type,
        'due_date': _iso(payment.due_date),
        'settled': payment.settled,
        'settled_date': _iso(payment.settled_date),
        'overdue': payment_overdue(payment, today),
        'participant': serialize_participant(payment.participant),
    }


def serialize_period(period, today=None):
    return {
        'id': period.id,
        'type': period.type,
        'number': period.number,
        'payments': [serialize_payment(p, today) for p in period.payments],
    }


def serialize_ledger(ledger, today=None):
    if ledger is None:
        return None
    return {
        'id': ledger.id,
        'frequency': ledger.frequency,
        'periods': [serialize_period(p, today) for p in ledger.periods],
    }


def serialize_plan(plan, today=None, include_ledger=True):
    data = {
        'id': plan.id,
        'name': plan.name,
        'banker_id': plan.banker_id,
        'contribution_amount': plan.contribution_amount,
        'banker_fee': plan.banker_fee,
        'start_date': _iso(plan.start_date),
        'end_date': _iso(plan_end_date(plan)),
        'duration': plan.duration,
        'frequency': plan.frequency,
        'version': plan.version,
        'participant_count': plan.get_participant_count(),
        'participants': [serialize_participant(p) for p in plan.participants],
    }
    if include_ledger:
        data['ledger'] = serialize_ledger(plan.ledger, today)
    return data
