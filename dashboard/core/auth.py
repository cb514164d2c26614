"""Login/logout against the tenant API's auth endpoints"""
import logging

from .envelope import Result, extract_message
from .exceptions import RequestError

logger = logging.getLogger(__name__)

AUTH_LOGIN_PATH = '/t/auth/login'
AUTH_PIN_LOGIN_PATH = '/t/auth/pin-login'
AUTH_LOGOUT_PATH = '/t/auth/logout'
AUTH_PROFILE_PATH = '/t/auth/me'


def _read_token(body):
    """Backend answers {status, message, result: {token, user}} or a flat {token, user}"""
    if not isinstance(body, dict):
        return None, {}
    result = body.get('result') if isinstance(body.get('result'), dict) else {}
    token = result.get('token') or body.get('token') or body.get('accessToken')
    user = result.get('user') or body.get('user') or {}
    return token, user


def _authenticate(client, path, payload, tenant_slug=None):
    if tenant_slug:
        client.session.tenant_slug = tenant_slug
    try:
        body = client.post(path, payload)
    except RequestError as e:
        logger.warning(f"Login failed: {e}")
        return Result.fail(e.message)

    token, user = _read_token(body)
    if not token:
        return Result.fail(extract_message(body, 'Login response did not include a token'))

    tenant = user.get('tenant') if isinstance(user.get('tenant'), dict) else {}
    client.session.authenticate(
        token,
        user=user,
        tenant_slug=tenant.get('slug') or tenant_slug,
        tenant_id=tenant.get('_id') or tenant.get('id'),
    )
    return Result.ok(client.session.public_dict(), extract_message(body, 'Login successful'))


def login(client, email, password, tenant_slug=None):
    return _authenticate(client, AUTH_LOGIN_PATH, {'email': email, 'password': password}, tenant_slug)


def pin_login(client, pin, branch_id=None, tenant_slug=None):
    payload = {'pin': pin}
    if branch_id:
        payload['branchId'] = branch_id
    return _authenticate(client, AUTH_PIN_LOGIN_PATH, payload, tenant_slug)


def logout(client):
    """Tell the backend, then clear the session whatever it answered"""
    if client.session.token:
        try:
            client.post(AUTH_LOGOUT_PATH)
        except RequestError as e:
            logger.warning(f"Remote logout failed, clearing local session anyway: {e}")
    client.session.clear()
    return Result.ok(client.session.public_dict(), 'Logged out successfully.')


def fetch_profile(client):
    try:
        body = client.get(AUTH_PROFILE_PATH)
    except RequestError as e:
        return Result.fail(e.message)
    if isinstance(body, dict):
        result = body.get('result') if isinstance(body.get('result'), dict) else body
        user = result.get('user') or result
    else:
        user = {}
    return Result.ok(user)
