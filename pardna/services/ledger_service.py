"""
LEDGER SERVICE
==============

Generates a plan's ledger in memory.

No database access happens here: the result is a LedgerDraft that
PlanService turns into Ledger / Period / Payment rows. Identical
inputs always produce equal drafts.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from pardna.models import Frequency, PaymentType, PeriodType
from pardna.services.calendar_service import (
    add_interval, enumerate_intervals, period_type_for, to_frequency
)
from pardna.services.errors import LedgerGenerationError, ValidationError

DEFAULT_DURATION = 12


# ============================================================
# DRAFTS
# ============================================================

@dataclass(frozen=True)
class ParticipantDraft:
    """Who a payment belongs to, resolved later by email."""
    name: str
    email: str


@dataclass(frozen=True)
class PaymentDraft:
    type: PaymentType
    due_date: date
    participant: ParticipantDraft


@dataclass(frozen=True)
class PeriodDraft:
    type: PeriodType
    number: int
    payments: Tuple[PaymentDraft, ...] = ()


@dataclass(frozen=True)
class LedgerDraft:
    frequency: Frequency
    start_date: date
    duration: int
    periods: Tuple[PeriodDraft, ...] = field(default_factory=tuple)

    @property
    def end_date(self):
        return add_interval(self.start_date, self.frequency, self.duration)

    @property
    def payment_count(self):
        return sum(len(period.payments) for period in self.periods)


# ============================================================
# GENERATION
# ============================================================

def _participant_drafts(participants):
    """Accepts request inputs, ORM Participants or drafts alike."""
    return [ParticipantDraft(name=p.name, email=p.email) for p in participants or []]


def generate_ledger(frequency: Optional[Frequency] = None,
                    participants: Optional[List] = None,
                    start_date: Optional[date] = None,
                    duration: Optional[int] = None) -> LedgerDraft:
    """
    Build the full period / payment schedule for a plan.

    Period i (1..duration) holds one CONTRIBUTION per participant, due
    on boundary i of enumerate_intervals(start, end, frequency).
    """
    if start_date is None:
        raise ValidationError("start_date is required to generate a ledger")

    frequency = to_frequency(frequency)
    if duration is None:
        duration = DEFAULT_DURATION
    if duration < 0:
        raise ValidationError("duration cannot be negative")

    end_date = add_interval(start_date, frequency, duration)
    period_type = period_type_for(frequency)
    boundaries = enumerate_intervals(start_date, end_date, frequency)
    people = _participant_drafts(participants)

    periods = []
    for number in range(1, duration + 1):
        if number >= len(boundaries):
            raise LedgerGenerationError(
                f"No {frequency.value} boundary for period {number} "
                f"({len(boundaries)} boundaries between {start_date} and {end_date})"
            )

        due_date = boundaries[number]
        payments = tuple(
            PaymentDraft(type=PaymentType.CONTRIBUTION, due_date=due_date, participant=person)
            for person in people
        )
        periods.append(PeriodDraft(type=period_type, number=number, payments=payments))

    return LedgerDraft(
        frequency=frequency,
        start_date=start_date,
        duration=duration,
        periods=tuple(periods),
    )
