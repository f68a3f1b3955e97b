from flask import Blueprint, request
from flask_jwt_extended import create_access_token, get_jwt
from fieldops import get_workspace
from fieldops.decorators.auth import login_required, current_actor
from fieldops.errors import Unauthorized, ValidationError
from fieldops.services.policy import authorize

auth_bp = Blueprint('auth', __name__)


def issue_session(user: dict, impersonated_by: str = None) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    claims = {'role': user['role']}
    if impersonated_by:
        claims['impersonated_by'] = impersonated_by
    return create_access_token(identity=str(user['id']), additional_claims=claims)


@auth_bp.post('/login')
def login():
    """Stub login: no credential check, the e-mail alone selects an active account."""
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    if not email:
        raise ValidationError(description='email required')
    user = get_workspace().users.find_by_email(email)
    if user is None:
        raise Unauthorized(description='Unknown account')
    authorize(user)
    return {'access_token': issue_session(user), 'user': user}


@auth_bp.post('/logout')
@login_required
def logout():
    claims = get_jwt()
    get_workspace().sessions.revoke(claims['jti'], user_id=current_actor()['id'])
    return {'ok': True}


@auth_bp.get('/me')
@login_required
def me():
    claims = get_jwt()
    return {**current_actor(), 'impersonated_by': claims.get('impersonated_by')}
