"""
PAYMENT SERVICE
===============

Handles:
- Marking payments settled / unsettled
- Listing a plan's overdue payments
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from pardna.models import Payment, Period, Ledger
from pardna.services.authorization_service import can_settle_payment, require_authorization
from pardna.services.errors import PardnaError, NotFoundError, PersistenceError
from pardna.services.resolvers import payment_overdue

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self, session, today=date.today):
        self.session = session
        self.today = today

    def get_payment(self, payment_id):
        payment = self.session.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} does not exist")
        return payment

    # ============================================================
    # SETTLEMENT
    # ============================================================

    def settle_payment(self, payment_id, settled=True, acting_user_id=None):
        """
        Set a payment's settled flag.

        settled_date becomes today when settled, and is cleared otherwise.
        """
        try:
            payment = self.get_payment(payment_id)

            if acting_user_id is not None:
                require_authorization(can_settle_payment, acting_user_id, payment)

            payment.mark_settled(settled, self.today())
            self.session.commit()

            state = "settled" if payment.settled else "unsettled"
            logger.info(f"Payment #{payment.id} marked {state}")
            return payment

        except PardnaError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(f"Failed to settle payment {payment_id}")
            raise PersistenceError(f"Failed to settle payment: {str(e)}") from e
        except Exception:
            self.session.rollback()
            logger.exception("Unexpected error, rolled back")
            raise

    # ============================================================
    # OVERDUE
    # ============================================================

    def list_overdue_payments(self, plan_id):
        """Payments of the plan that are overdue today, earliest first."""
        today = self.today()
        query = (
            select(Payment)
            .join(Period, Payment.period_id == Period.id)
            .join(Ledger, Period.ledger_id == Ledger.id)
            .filter(Ledger.plan_id == plan_id, Payment.due_date < today)
            .order_by(Payment.due_date, Payment.id)
        )
        return [p for p in self.session.scalars(query).all() if payment_overdue(p, today)]
