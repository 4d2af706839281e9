"""
REQUEST TYPES
=============

Typed inputs for the plan operations, validated at the boundary so the
services never see raw JSON. from_dict() raises ValidationError naming
the offending field.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional

from pardna.models import Frequency
from pardna.services.errors import ValidationError


# ============================================================
# FIELD PARSERS
# ============================================================

def parse_date(value, field_name):
    """ISO-8601 string or epoch milliseconds -> date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"{field_name}: expected a date")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            raise ValidationError(f"{field_name}: {value} is out of range for a date")
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace('Z', '+00:00')).date()
        except ValueError:
            pass
    raise ValidationError(f"{field_name}: '{value}' is not a valid date")


def parse_frequency(value, field_name='frequency'):
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(str(value).strip().upper())
    except ValueError:
        choices = ', '.join(f.value for f in Frequency)
        raise ValidationError(f"{field_name}: must be one of {choices}")


def parse_duration(value, field_name='duration'):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name}: must be a whole number")
    if value < 1:
        raise ValidationError(f"{field_name}: must be at least 1")
    return value


def parse_amount(value, field_name):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name}: must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{field_name}: must be a finite number")
    if value < 0:
        raise ValidationError(f"{field_name}: cannot be negative")
    return float(value)


def parse_name(value, field_name='name'):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name}: is required")
    return value.strip()


def parse_email(value, field_name='email'):
    if not isinstance(value, str) or '@' not in value:
        raise ValidationError(f"{field_name}: '{value}' is not a valid email")
    return value.strip().lower()


def _require_mapping(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _require_list(data, key):
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError(f"{key}: must be a list")
    return items


# ============================================================
# PARTICIPANTS
# ============================================================

@dataclass(frozen=True)
class ParticipantInput:
    name: str
    email: str

    @classmethod
    def from_dict(cls, data, field_name='participants'):
        if not isinstance(data, dict):
            raise ValidationError(f"{field_name}: each participant must be an object")
        return cls(
            name=parse_name(data.get('name'), f"{field_name}.name"),
            email=parse_email(data.get('email'), f"{field_name}.email"),
        )


@dataclass(frozen=True)
class ParticipantRef:
    """Points at an existing participant by id or by email."""
    id: Optional[int] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data, field_name='remove_participants'):
        if not isinstance(data, dict):
            raise ValidationError(f"{field_name}: each entry must be an object")

        participant_id = data.get('id')
        email = data.get('email')

        if participant_id is None and email is None:
            raise ValidationError(f"{field_name}: give an id or an email")
        if participant_id is not None and (isinstance(participant_id, bool)
                                           or not isinstance(participant_id, int)):
            raise ValidationError(f"{field_name}.id: must be an integer")

        return cls(
            id=participant_id,
            email=parse_email(email, f"{field_name}.email") if email is not None else None,
        )


def _parse_participants(data, key):
    participants = [ParticipantInput.from_dict(item, key) for item in _require_list(data, key)]

    emails = [p.email for p in participants]
    duplicates = sorted({e for e in emails if emails.count(e) > 1})
    if duplicates:
        raise ValidationError(f"{key}: duplicate emails {', '.join(duplicates)}")

    return participants


# ============================================================
# PLAN REQUESTS
# ============================================================

@dataclass
class CreatePlanRequest:
    name: str
    start_date: date
    frequency: Frequency = Frequency.MONTHLY
    participants: List[ParticipantInput] = field(default_factory=list)
    duration: int = 12
    contribution_amount: float = 0.0
    banker_fee: Optional[float] = None

    @classmethod
    def from_dict(cls, data):
        data = _require_mapping(data)

        if data.get('start_date') is None:
            raise ValidationError("start_date: is required")

        request = cls(
            name=parse_name(data.get('name')),
            start_date=parse_date(data['start_date'], 'start_date'),
            participants=_parse_participants(data, 'participants'),
        )

        if data.get('frequency') is not None:
            request.frequency = parse_frequency(data['frequency'])
        if data.get('duration') is not None:
            request.duration = parse_duration(data['duration'])
        if data.get('contribution_amount') is not None:
            request.contribution_amount = parse_amount(data['contribution_amount'],
                                                       'contribution_amount')
        if data.get('banker_fee') is not None:
            request.banker_fee = parse_amount(data['banker_fee'], 'banker_fee')

        return request


@dataclass
class UpdatePlanRequest:
    """
    None means 'leave as is'.

    banker_fee cannot be cleared through None, so an explicit null in the
    body sets clear_banker_fee instead.
    """
    name: Optional[str] = None
    frequency: Optional[Frequency] = None
    start_date: Optional[date] = None
    duration: Optional[int] = None
    contribution_amount: Optional[float] = None
    banker_fee: Optional[float] = None
    clear_banker_fee: bool = False
    add_participants: List[ParticipantInput] = field(default_factory=list)
    remove_participants: List[ParticipantRef] = field(default_factory=list)
    expected_version: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        data = _require_mapping(data)
        request = cls(
            add_participants=_parse_participants(data, 'add_participants'),
            remove_participants=[
                ParticipantRef.from_dict(item)
                for item in _require_list(data, 'remove_participants')
            ],
        )

        if data.get('name') is not None:
            request.name = parse_name(data['name'])
        if data.get('frequency') is not None:
            request.frequency = parse_frequency(data['frequency'])
        if data.get('start_date') is not None:
            request.start_date = parse_date(data['start_date'], 'start_date')
        if data.get('duration') is not None:
            request.duration = parse_duration(data['duration'])
        if data.get('contribution_amount') is not None:
            request.contribution_amount = parse_amount(data['contribution_amount'],
                                                       'contribution_amount')
        if data.get('banker_fee') is not None:
            request.banker_fee = parse_amount(data['banker_fee'], 'banker_fee')
        elif 'banker_fee' in data:
            request.clear_banker_fee = True

        expected_version = data.get('expected_version')
        if expected_version is not None:
            if isinstance(expected_version, bool) or not isinstance(expected_version, int):
                raise ValidationError("expected_version: must be an integer")
            request.expected_version = expected_version

        return request
