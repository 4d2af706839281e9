"""Tests for in-memory ledger generation."""

from datetime import date

import pytest

from pardna.models import Frequency, PaymentType, PeriodType
from pardna.services.errors import LedgerGenerationError, ValidationError
from pardna.services.ledger_service import ParticipantDraft, generate_ledger
from pardna.services.requests import ParticipantInput


@pytest.fixture
def people():
    return [
        ParticipantInput(name='Ann', email='ann@example.com'),
        ParticipantInput(name='Bob', email='bob@example.com'),
    ]


def test_monthly_three_periods(people):
    draft = generate_ledger(Frequency.MONTHLY, people, date(2024, 1, 1), 3)

    assert draft.frequency == Frequency.MONTHLY
    assert [p.number for p in draft.periods] == [1, 2, 3]
    assert all(p.type == PeriodType.MONTH for p in draft.periods)
    assert all(len(p.payments) == 2 for p in draft.periods)
    assert draft.end_date == date(2024, 4, 1)

    due_dates = [p.payments[0].due_date for p in draft.periods]
    assert due_dates == [date(2024, 2, 1), date(2024, 3, 1), date(2024, 4, 1)]


def test_every_payment_is_a_contribution_for_a_participant(people):
    draft = generate_ledger(Frequency.MONTHLY, people, date(2024, 1, 1), 2)

    for period in draft.periods:
        assert [p.type for p in period.payments] == [PaymentType.CONTRIBUTION] * 2
        assert [p.participant for p in period.payments] == [
            ParticipantDraft('Ann', 'ann@example.com'),
            ParticipantDraft('Bob', 'bob@example.com'),
        ]
        assert len({p.due_date for p in period.payments}) == 1


def test_weekly_without_participants():
    draft = generate_ledger(Frequency.WEEKLY, [], date(2024, 1, 1), 4)

    assert len(draft.periods) == 4
    assert all(p.type == PeriodType.WEEK for p in draft.periods)
    assert all(p.payments == () for p in draft.periods)
    assert draft.payment_count == 0


def test_daily_due_dates():
    draft = generate_ledger(Frequency.DAILY, [ParticipantInput('Ann', 'ann@example.com')],
                            date(2024, 1, 1), 3)
    assert [p.payments[0].due_date for p in draft.periods] == [
        date(2024, 1, 2), date(2024, 1, 3), date(2024, 1, 4),
    ]


def test_defaults():
    draft = generate_ledger(start_date=date(2024, 1, 1))

    assert draft.frequency == Frequency.MONTHLY
    assert draft.duration == 12
    assert len(draft.periods) == 12
    assert draft.payment_count == 0


def test_zero_duration_has_no_periods(people):
    draft = generate_ledger(Frequency.MONTHLY, people, date(2024, 1, 1), 0)
    assert draft.periods == ()


def test_start_date_is_required(people):
    with pytest.raises(ValidationError):
        generate_ledger(Frequency.MONTHLY, people, None, 3)


def test_negative_duration_is_rejected(people):
    with pytest.raises(ValidationError):
        generate_ledger(Frequency.MONTHLY, people, date(2024, 1, 1), -1)


def test_missing_boundary_raises(monkeypatch, people):
    monkeypatch.setattr(
        'pardna.services.ledger_service.enumerate_intervals',
        lambda start, end, frequency: [start, end],
    )
    with pytest.raises(LedgerGenerationError):
        generate_ledger(Frequency.MONTHLY, people, date(2024, 1, 1), 3)


def test_identical_inputs_give_identical_drafts(people):
    first = generate_ledger(Frequency.WEEKLY, people, date(2024, 3, 5), 6)
    second = generate_ledger(Frequency.WEEKLY, list(people), date(2024, 3, 5), 6)
    assert first == second


@pytest.mark.parametrize("frequency", list(Frequency))
@pytest.mark.parametrize("duration", [0, 1, 5, 12, 30])
@pytest.mark.parametrize("size", [0, 1, 4])
def test_period_and_payment_counts(frequency, duration, size):
    people = [ParticipantInput(f'P{i}', f'p{i}@example.com') for i in range(size)]
    draft = generate_ledger(frequency, people, date(2024, 1, 31), duration)

    assert [p.number for p in draft.periods] == list(range(1, duration + 1))
    assert draft.payment_count == size * duration
