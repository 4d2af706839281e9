"""
PLAN SERVICE - LEDGER LIFECYCLE
===============================

CRITICAL BUSINESS RULES:
1. A plan has at most one ledger at any time
2. Regeneration is delete-then-recreate, never an incremental patch
3. Financially impacting edits are refused once the start date has passed
4. Every operation is ONE transaction: commit on success, rollback on any error
5. Participants are matched by email and reused, never duplicated

Regenerating a ledger throws away settlement history on the old payments.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from pardna.models import Plan, Participant, Ledger, Period, Payment, User
from pardna.services.authorization_service import can_manage_plan, require_authorization
from pardna.services.calendar_service import is_past
from pardna.services.errors import (
    PardnaError, NotFoundError, PastStartDateError, ConflictError, PersistenceError
)
from pardna.services.ledger_service import generate_ledger

logger = logging.getLogger(__name__)


# ============================================================
# FINANCIAL CHANGE DETECTION
# ============================================================

def financial_changes(plan, request):
    """
    Names of the fields in an UpdatePlanRequest that would change the money.

    A field counts when it is supplied and differs from what is stored.
    Any participant addition or removal counts.
    """
    changes = []

    if request.frequency is not None and request.frequency.value != plan.frequency:
        changes.append('frequency')
    if request.start_date is not None and request.start_date != plan.start_date:
        changes.append('start_date')
    if request.contribution_amount is not None and \
            request.contribution_amount != plan.contribution_amount:
        changes.append('contribution_amount')
    if request.banker_fee is not None and request.banker_fee != plan.banker_fee:
        changes.append('banker_fee')
    elif request.clear_banker_fee and plan.banker_fee is not None:
        changes.append('banker_fee')
    if request.duration is not None and request.duration != plan.duration:
        changes.append('duration')
    if request.add_participants:
        changes.append('add_participants')
    if request.remove_participants:
        changes.append('remove_participants')

    return changes


class PlanService:
    """
    Creates, updates and deletes plans together with their ledgers.

    session is any SQLAlchemy session; today is a callable returning the
    current date.
    """

    def __init__(self, session, today=date.today):
        self.session = session
        self.today = today

    # ============================================================
    # READS
    # ============================================================

    def get_plan(self, plan_id):
        plan = self.session.get(Plan, plan_id)
        if plan is None:
            raise NotFoundError(f"Pardna {plan_id} does not exist")
        return plan

    def list_plans(self, banker_id=None):
        query = select(Plan).order_by(Plan.start_date, Plan.id)
        if banker_id is not None:
            query = query.filter_by(banker_id=banker_id)
        return self.session.scalars(query).all()

    # ============================================================
    # PARTICIPANTS
    # ============================================================

    def _connect_or_create_participant(self, name, email, cache):
        """Reuse the participant with this email, or create one."""
        participant = cache.get(email)
        if participant is not None:
            return participant

        participant = self.session.scalars(
            select(Participant).filter_by(email=email)
        ).first()

        if participant is None:
            participant = Participant(name=name, email=email)
            self.session.add(participant)

        cache[email] = participant
        return participant

    def _remove_participant(self, plan, ref):
        for participant in plan.participants:
            if (ref.id is not None and participant.id == ref.id) or \
                    (ref.email is not None and participant.email == ref.email):
                plan.participants.remove(participant)
                return participant

        raise NotFoundError(
            f"Participant {ref.id if ref.id is not None else ref.email} "
            f"is not part of pardna {plan.id}"
        )

    # ============================================================
    # LEDGER MATERIALISATION
    # ============================================================

    def _build_ledger(self, draft, cache):
        """Turn a LedgerDraft into unsaved Ledger / Period / Payment rows."""
        ledger = Ledger(frequency=draft.frequency.value)

        for period_draft in draft.periods:
            period = Period(type=period_draft.type.value, number=period_draft.number)

            for payment_draft in period_draft.payments:
                person = payment_draft.participant
                period.payments.append(Payment(
                    type=payment_draft.type.value,
                    due_date=payment_draft.due_date,
                    participant=self._connect_or_create_participant(
                        person.name, person.email, cache
                    ),
                    settled=False,
                ))

            ledger.periods.append(period)

        return ledger

    # ============================================================
    # CREATE
    # ============================================================

    def create_plan(self, banker_id, request):
        """
        Create a plan, link its participants and generate its ledger.

        ATOMIC: plan, participants, ledger, periods and payments are
        committed together or not at all.
        """
        try:
            banker = self.session.get(User, banker_id)
            if banker is None:
                raise NotFoundError(f"User {banker_id} does not exist")

            with self.session.no_autoflush:
                plan = Plan(
                    name=request.name,
                    banker_id=banker.id,
                    contribution_amount=request.contribution_amount,
                    banker_fee=request.banker_fee,
                    start_date=request.start_date,
                    duration=request.duration,
                    frequency=request.frequency.value,
                    version=1,
                )
                self.session.add(plan)

                cache = {}
                for person in request.participants:
                    plan.participants.append(
                        self._connect_or_create_participant(person.name, person.email, cache)
                    )

                draft = generate_ledger(
                    request.frequency,
                    request.participants,
                    request.start_date,
                    request.duration,
                )
                plan.ledger = self._build_ledger(draft, cache)

            self.session.commit()

            logger.info(
                f"Pardna #{plan.id} '{plan.name}' created: {len(draft.periods)} "
                f"{draft.frequency.value} periods, {draft.payment_count} payments"
            )
            return plan

        except PardnaError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Failed to create pardna")
            raise PersistenceError(f"Failed to create pardna: {str(e)}") from e
        except Exception:
            self.session.rollback()
            logger.exception("Unexpected error, rolled back")
            raise

    # ============================================================
    # UPDATE
    # ============================================================

    def update_plan(self, plan_id, request, acting_user_id=None):
        """
        Apply an UpdatePlanRequest.

        Steps:
        1. Load the plan (and check banker / expected version)
        2. Refuse financially impacting changes once the start date has passed
        3. Apply field changes and participant additions / removals
        4. If anything financial changed: delete the ledger and regenerate it
        5. Commit and return the plan
        """
        try:
            plan = self.get_plan(plan_id)

            if acting_user_id is not None:
                require_authorization(can_manage_plan, acting_user_id, plan)

            if request.expected_version is not None and request.expected_version != plan.version:
                logger.warning(
                    f"Version conflict on pardna #{plan.id}: "
                    f"expected {request.expected_version}, found {plan.version}"
                )
                raise ConflictError(
                    f"Pardna {plan.id} has changed (version {plan.version}); reload and try again"
                )

            changes = financial_changes(plan, request)

            if changes and is_past(plan.start_date, self.today()):
                logger.warning(
                    f"Refused {', '.join(changes)} on pardna #{plan.id}: "
                    f"started {plan.start_date}"
                )
                raise PastStartDateError()

            with self.session.no_autoflush:
                if request.name is not None:
                    plan.name = request.name
                if request.frequency is not None:
                    plan.frequency = request.frequency.value
                if request.start_date is not None:
                    plan.start_date = request.start_date
                if request.contribution_amount is not None:
                    plan.contribution_amount = request.contribution_amount
                if request.banker_fee is not None:
                    plan.banker_fee = request.banker_fee
                elif request.clear_banker_fee:
                    plan.banker_fee = None
                if request.duration is not None:
                    plan.duration = request.duration

                cache = {p.email: p for p in plan.participants}

                for person in request.add_participants:
                    participant = self._connect_or_create_participant(
                        person.name, person.email, cache
                    )
                    if participant not in plan.participants:
                        plan.participants.append(participant)

                for ref in request.remove_participants:
                    self._remove_participant(plan, ref)

            if changes:
                self._regenerate_ledger(plan, cache)

            plan.version = (plan.version or 1) + 1
            self.session.commit()

            return plan

        except PardnaError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(f"Failed to update pardna {plan_id}")
            raise PersistenceError(f"Failed to update pardna: {str(e)}") from e
        except Exception:
            self.session.rollback()
            logger.exception("Unexpected error, rolled back")
            raise

    def _regenerate_ledger(self, plan, cache):
        """Delete the current ledger (cascading) and attach a fresh one."""
        discarded = 0

        if plan.ledger is not None:
            discarded = plan.ledger.get_payment_count()
            self.session.delete(plan.ledger)
            plan.ledger = None
            self.session.flush()

        with self.session.no_autoflush:
            draft = generate_ledger(
                plan.frequency,
                list(plan.participants),
                plan.start_date,
                plan.duration,
            )
            plan.ledger = self._build_ledger(draft, cache)

        logger.info(
            f"Pardna #{plan.id} ledger regenerated: {len(draft.periods)} periods, "
            f"{draft.payment_count} payments ({discarded} previous payments discarded)"
        )

    # ============================================================
    # DELETE
    # ============================================================

    def delete_plan(self, plan_id, acting_user_id=None):
        """Delete a plan; its ledger, periods and payments go with it."""
        try:
            plan = self.get_plan(plan_id)

            if acting_user_id is not None:
                require_authorization(can_manage_plan, acting_user_id, plan)

            self.session.delete(plan)
            self.session.commit()

            logger.info(f"Pardna #{plan_id} deleted")
            return True

        except PardnaError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(f"Failed to delete pardna {plan_id}")
            raise PersistenceError(f"Failed to delete pardna: {str(e)}") from e
        except Exception:
            self.session.rollback()
            logger.exception("Unexpected error, rolled back")
            raise
