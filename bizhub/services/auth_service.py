"""
Authentication service for user management.

Handles email/password registration and sign-in.
"""
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from bizhub.exceptions import UnauthorizedError, ValidationError
from bizhub.models import AppUser, BusinessProfile

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def is_valid_email(email: str) -> bool:
    """Validate email format."""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email or '') is not None


def _validate_registration(data: Dict) -> List[str]:
    """Validate registration fields and return list of errors."""
    errors = []
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    password_confirm = data.get('password_confirm')

    if not email or not is_valid_email(email):
        errors.append('Invalid email address.')

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')

    if password_confirm is not None and password != password_confirm:
        errors.append('Passwords do not match.')

    return errors


def find_user_by_email(session, email: str) -> Optional[AppUser]:
    return session.query(AppUser).filter(
        func.lower(AppUser.email) == (email or '').strip().lower()
    ).first()


def register_user(session, data: Dict) -> AppUser:
    """
    Create a new user account.

    Args:
        session: SQLAlchemy session
        data: dict with email, password, optional password_confirm,
              first_name and last_name

    Returns:
        AppUser: the new user (no business profile yet; onboarding creates it)

    Raises:
        ValidationError: If a field is invalid or the email is already registered
    """
    errors = _validate_registration(data)
    if errors:
        raise ValidationError(" ".join(errors))

    email = data['email'].strip().lower()
    if find_user_by_email(session, email):
        raise ValidationError('This email is already registered. Sign in instead.')

    try:
        user = AppUser(
            email=email,
            first_name=(data.get('first_name') or '').strip() or None,
            last_name=(data.get('last_name') or '').strip() or None,
            active=True
        )
        user.set_password(data['password'])
        session.add(user)
        session.commit()
        logger.info(f"Registered new user: {email}")
        return user
    except IntegrityError as e:
        session.rollback()
        logger.error(f"Error creating user (IntegrityError): {str(e)}")
        raise ValidationError('This email is already registered. Sign in instead.') from e


def authenticate(session, email: str, password: str) -> AppUser:
    """
    Check credentials and return the active user.

    Raises:
        ValidationError: If email or password is empty
        UnauthorizedError: If the credentials do not match an active user
    """
    if not email or not password:
        raise ValidationError('Email and password are required.')

    user = find_user_by_email(session, email)
    if not user or not user.active or not user.check_password(password):
        logger.warning(f"Failed login attempt for {email}")
        raise UnauthorizedError('Incorrect email or password.')
    return user


def get_business_for_user(session, user_id) -> Optional[BusinessProfile]:
    """The business profile owned by a user, or None before onboarding."""
    return session.query(BusinessProfile).filter(
        BusinessProfile.owner_id == user_id
    ).order_by(BusinessProfile.id).first()
