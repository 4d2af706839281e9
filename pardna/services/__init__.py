# This makes 'services' a Python package
"""
Services Package
================

Business logic layer for Pardna.

Ledger generation, plan lifecycle and payment settlement live here.
Routes should call these services, not manipulate models directly.
"""

from pardna.services.errors import (
    PardnaError,
    ValidationError,
    PastStartDateError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    PersistenceError,
    LedgerGenerationError
)

from pardna.services.calendar_service import (
    add_interval,
    enumerate_intervals,
    period_type_for
)

from pardna.services.ledger_service import (
    generate_ledger,
    LedgerDraft,
    PeriodDraft,
    PaymentDraft,
    ParticipantDraft
)

from pardna.services.requests import (
    CreatePlanRequest,
    UpdatePlanRequest,
    ParticipantInput,
    ParticipantRef
)

from pardna.services.plan_service import PlanService, financial_changes
from pardna.services.payment_service import PaymentService

from pardna.services.resolvers import (
    plan_end_date,
    payment_overdue,
    serialize_plan,
    serialize_payment
)
