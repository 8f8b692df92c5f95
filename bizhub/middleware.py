"""Middleware for authentication and business context."""
from functools import wraps

from flask import session, g, current_app

from bizhub.database import get_session
from bizhub.exceptions import OnboardingRequiredError, UnauthorizedError
from bizhub.models import AppUser
from bizhub.services.auth_service import get_business_for_user


class RequestContext:
    """
    Signed-in user and their business for the current request.

    Built once per request from the cookie session and stored on `g.ctx`;
    handlers pass `ctx.business_id` to the services explicitly.
    """

    def __init__(self, user=None, business=None):
        self.user = user
        self.business = business

    @property
    def is_authenticated(self):
        return self.user is not None

    @property
    def user_id(self):
        return self.user.id if self.user else None

    @property
    def business_id(self):
        return self.business.id if self.business else None

    def to_dict(self):
        return {
            'user': self.user.to_dict() if self.user else None,
            'business': self.business.to_dict() if self.business else None,
        }


def load_request_context():
    """
    Load current user and business into g.ctx.

    Called before each request. A user id in the cookie that no longer
    points at an active user is dropped from the session.
    """
    g.ctx = RequestContext()

    user_id = session.get('user_id')
    if not user_id:
        return

    try:
        db_session = get_session()
        user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
        if user is None:
            session.clear()
            return
        g.ctx = RequestContext(user, get_business_for_user(db_session, user.id))
    except Exception as e:
        # Avoid crashing the whole app if context loading fails
        current_app.logger.error(f"Error in load_request_context: {e}")


def start_user_session(user):
    """Sign a user in (cookie session)."""
    session.clear()
    session['user_id'] = user.id
    session.permanent = True


def end_user_session():
    session.clear()
    g.ctx = RequestContext()


def require_login(f):
    """Decorator: respond 401 unless a user is signed in."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.ctx.is_authenticated:
            raise UnauthorizedError('You must sign in to access this page.')
        return f(*args, **kwargs)
    return decorated_function


def require_business(f):
    """
    Decorator: respond 409 until onboarding has created a business profile.

    Must be used AFTER require_login.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.ctx.business is None:
            raise OnboardingRequiredError()
        return f(*args, **kwargs)
    return decorated_function
