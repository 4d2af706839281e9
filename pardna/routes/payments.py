"""
PAYMENT ROUTES
==============
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from pardna.extensions import db
from pardna.services.errors import ValidationError
from pardna.services.payment_service import PaymentService
from pardna.services.resolvers import serialize_payment

payments_bp = Blueprint('payments', __name__)


# ============== SETTLE / UNSETTLE PAYMENT ==============
@payments_bp.route('/payments/<int:payment_id>/settle', methods=['POST'])
@login_required
def settle_payment(payment_id):
    data = request.get_json(silent=True) or {}
    settled = data.get('settled', True)

    if not isinstance(settled, bool):
        raise ValidationError("settled: must be true or false")

    payment = PaymentService(db.session).settle_payment(
        payment_id, settled=settled, acting_user_id=current_user.id
    )
    return jsonify(serialize_payment(payment))
