"""
AUTHORIZATION SERVICE
=====================

Permission checks for plans and payments.
Only a plan's banker may change the plan or settle its payments.
"""

from pardna.services.errors import AuthorizationError


def is_plan_banker(user_id, plan):
    """Check if user banks this plan"""
    return plan is not None and plan.banker_id == user_id


def can_view_plan(user_id, plan):
    """
    Check if user can see the plan, its participants and its ledger.

    Returns: (allowed, reason)
    """
    if plan is None:
        return False, "Plan not found"

    if not is_plan_banker(user_id, plan):
        return False, "Only the banker can view this pardna"

    return True, None


def can_manage_plan(user_id, plan):
    """
    Check if user can update or delete the plan.

    Returns: (allowed, reason)
    """
    if plan is None:
        return False, "Plan not found"

    if not is_plan_banker(user_id, plan):
        return False, "Only the banker can change this pardna"

    return True, None


def can_settle_payment(user_id, payment):
    """Check if user can mark a payment settled / unsettled"""
    if payment is None:
        return False, "Payment not found"

    if not is_plan_banker(user_id, payment.plan):
        return False, "Only the banker can settle payments on this pardna"

    return True, None


def require_authorization(check, *args):
    """Run a can_* check and raise AuthorizationError if it fails"""
    allowed, reason = check(*args)
    if not allowed:
        raise AuthorizationError(reason)
