import enum
from datetime import datetime
from flask_login import UserMixin
from pardna.extensions import db


# ============================================================
# ENUMS
# ============================================================
class Frequency(enum.Enum):
    """How often contributions fall due."""
    DAILY = 'DAILY'
    WEEKLY = 'WEEKLY'
    MONTHLY = 'MONTHLY'


class PeriodType(enum.Enum):
    DAY = 'DAY'
    WEEK = 'WEEK'
    MONTH = 'MONTH'


class PaymentType(enum.Enum):
    CONTRIBUTION = 'CONTRIBUTION'
    PAYOUT = 'PAYOUT'
    BANKERFEE = 'BANKERFEE'


# Links plans to the participants taking part in them
plan_participants = db.Table(
    'plan_participants',
    db.Column('plan_id', db.Integer, db.ForeignKey('plans.id', ondelete='CASCADE'),
              primary_key=True),
    db.Column('participant_id', db.Integer, db.ForeignKey('participants.id', ondelete='CASCADE'),
              primary_key=True),
)


# ============================================================
# USER MODEL
# ============================================================
class User(UserMixin, db.Model):
    """
    A registered user. Users bank (own and manage) plans.
    Credentials live with the surrounding application, not here.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    plans_banked = db.relationship('Plan', backref='banker', lazy='dynamic')

    def __repr__(self):
        return f'<User {self.name}>'


# ============================================================
# PLAN (PARDNA) MODEL
# ============================================================
class Plan(db.Model):
    """
    A pardna: a rotating savings arrangement run by a banker.

    The plan owns exactly one Ledger. The ledger is regenerated from
    scratch whenever a financially impacting field changes.
    """
    __tablename__ = 'plans'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    banker_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    contribution_amount = db.Column(db.Float, default=0.0, nullable=False)
    banker_fee = db.Column(db.Float, nullable=True)

    start_date = db.Column(db.Date, nullable=False)
    duration = db.Column(db.Integer, default=12, nullable=False)  # number of periods
    frequency = db.Column(db.String(10), default=Frequency.MONTHLY.value, nullable=False)

    # Bumped on every successful update (optimistic concurrency)
    version = db.Column(db.Integer, default=1, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    ledger = db.relationship('Ledger', backref='plan', uselist=False,
                             cascade='all, delete-orphan')
    participants = db.relationship('Participant', secondary=plan_participants,
                                   backref=db.backref('plans', lazy='dynamic'),
                                   order_by='Participant.id')

    def get_participant_count(self):
        return len(self.participants)

    def __repr__(self):
        return f'<Plan {self.name} start={self.start_date} duration={self.duration}>'


# ============================================================
# PARTICIPANT MODEL
# ============================================================
class Participant(db.Model):
    """
    Someone contributing to one or more plans.
    Participants are matched by email and reused across ledger regenerations.
    """
    __tablename__ = 'participants'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    payments = db.relationship('Payment', backref='participant', lazy='dynamic')

    def __repr__(self):
        return f'<Participant {self.email}>'


# ============================================================
# LEDGER MODEL
# ============================================================
class Ledger(db.Model):
    """
    The generated schedule for a plan.

    frequency records what the ledger was generated with. It may be
    NULL on legacy rows, in which case readers assume MONTHLY.
    """
    __tablename__ = 'ledgers'

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id', ondelete='CASCADE'),
                        unique=True, nullable=False)
    frequency = db.Column(db.String(10), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    periods = db.relationship('Period', backref='ledger', order_by='Period.number',
                              cascade='all, delete-orphan')

    def get_payment_count(self):
        return sum(len(period.payments) for period in self.periods)

    def __repr__(self):
        return f'<Ledger plan={self.plan_id} periods={len(self.periods)}>'


# ============================================================
# PERIOD MODEL
# ============================================================
class Period(db.Model):
    """One day, week or month of a ledger."""
    __tablename__ = 'periods'

    id = db.Column(db.Integer, primary_key=True)
    ledger_id = db.Column(db.Integer, db.ForeignKey('ledgers.id', ondelete='CASCADE'),
                          nullable=False)
    type = db.Column(db.String(10), nullable=False)
    number = db.Column(db.Integer, nullable=False)  # 1-based

    payments = db.relationship('Payment', backref='period', order_by='Payment.id',
                               cascade='all, delete-orphan')

    __table_args__ = (
        db.UniqueConstraint('ledger_id', 'number', name='unique_ledger_period'),
    )

    def __repr__(self):
        return f'<Period {self.type} #{self.number}>'


# ============================================================
# PAYMENT MODEL
# ============================================================
class Payment(db.Model):
    """
    A single obligation due within a period.

    settled_date is set if and only if settled is True.
    Overdue status is never stored, see services.resolvers.
    """
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    period_id = db.Column(db.Integer, db.ForeignKey('periods.id', ondelete='CASCADE'),
                          nullable=False)
    participant_id = db.Column(db.Integer, db.ForeignKey('participants.id'), nullable=False)

    type = db.Column(db.String(20), default=PaymentType.CONTRIBUTION.value, nullable=False)
    due_date = db.Column(db.Date, nullable=False)

    settled = db.Column(db.Boolean, default=False, nullable=False)
    settled_date = db.Column(db.Date, nullable=True)

    def mark_settled(self, settled, on_date):
        """Set the settled flag and keep settled_date in step with it."""
        self.settled = bool(settled)
        self.settled_date = on_date if self.settled else None

    @property
    def plan(self):
        return self.period.ledger.plan

    def __repr__(self):
        return f'<Payment {self.type} due={self.due_date} settled={self.settled}>'
