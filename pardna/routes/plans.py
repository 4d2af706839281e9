"""
PLAN ROUTES
===========

JSON endpoints over PlanService.
Service errors are turned into responses by handle_service_error.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from pardna.extensions import db
from pardna.services.authorization_service import can_view_plan, require_authorization
from pardna.services.plan_service import PlanService
from pardna.services.payment_service import PaymentService
from pardna.services.requests import CreatePlanRequest, UpdatePlanRequest
from pardna.services.resolvers import serialize_plan, serialize_payment

plans_bp = Blueprint('plans', __name__)


# ============== LIST MY PLANS ==============
@plans_bp.route('/plans')
@login_required
def list_plans():
    plans = PlanService(db.session).list_plans(banker_id=current_user.id)
    return jsonify([serialize_plan(p, include_ledger=False) for p in plans])


# ============== CREATE PLAN ==============
@plans_bp.route('/plans', methods=['POST'])
@login_required
def create_plan():
    plan_request = CreatePlanRequest.from_dict(request.get_json(silent=True))
    plan = PlanService(db.session).create_plan(current_user.id, plan_request)
    return jsonify(serialize_plan(plan)), 201


# ============== VIEW SINGLE PLAN ==============
@plans_bp.route('/plans/<int:plan_id>')
@login_required
def view_plan(plan_id):
    plan = PlanService(db.session).get_plan(plan_id)
    require_authorization(can_view_plan, current_user.id, plan)
    return jsonify(serialize_plan(plan))


# ============== UPDATE PLAN ==============
@plans_bp.route('/plans/<int:plan_id>', methods=['PATCH'])
@login_required
def update_plan(plan_id):
    plan_request = UpdatePlanRequest.from_dict(request.get_json(silent=True))
    plan = PlanService(db.session).update_plan(
        plan_id, plan_request, acting_user_id=current_user.id
    )
    return jsonify(serialize_plan(plan))


# ============== DELETE PLAN ==============
@plans_bp.route('/plans/<int:plan_id>', methods=['DELETE'])
@login_required
def delete_plan(plan_id):
    PlanService(db.session).delete_plan(plan_id, acting_user_id=current_user.id)
    return '', 204


# ============== OVERDUE PAYMENTS ==============
@plans_bp.route('/plans/<int:plan_id>/overdue')
@login_required
def overdue_payments(plan_id):
    plan = PlanService(db.session).get_plan(plan_id)
    require_authorization(can_view_plan, current_user.id, plan)
    payments = PaymentService(db.session).list_overdue_payments(plan_id)
    return jsonify([serialize_payment(p) for p in payments])
