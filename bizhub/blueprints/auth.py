"""Auth blueprint: registration, sign-in, sign-out and the CSRF token for JSON clients."""
from flask import Blueprint, g, current_app
from flask_wtf.csrf import generate_csrf

from bizhub.database import get_session
from bizhub.middleware import require_login, start_user_session, end_user_session
from bizhub.services.auth_service import authenticate, register_user, get_business_for_user
from bizhub.utils.request_data import request_payload

auth_bp = Blueprint('auth', __name__)


def _session_payload(user, business):
    return {
        'status': 'success',
        'user': user.to_dict(),
        'business': business.to_dict() if business else None,
        'needs_onboarding': business is None,
    }


@auth_bp.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header; it is bound to the cookie session."""
    return {'csrf_token': generate_csrf()}


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and sign in; onboarding creates the business next."""
    session = get_session()
    user = register_user(session, request_payload())
    start_user_session(user)
    current_app.logger.info(f"New account registered: {user.email}")
    return _session_payload(user, None), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request_payload()
    session = get_session()
    user = authenticate(session, (data.get('email') or '').strip(), data.get('password') or '')
    start_user_session(user)
    return _session_payload(user, get_business_for_user(session, user.id))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    end_user_session()
    return {'status': 'success'}


@auth_bp.route('/me')
@require_login
def me():
    return _session_payload(g.ctx.user, g.ctx.business)
