import hmac
from functools import wraps

from flask import current_app, jsonify
from flask_login import UserMixin, current_user


class AdminPrincipal(UserMixin):
    """The operator calling the admin API with the shared admin token"""

    id = 'admin'
    role = 'admin'


def register_admin_loader(manager):
    """Authenticate admin requests from an 'Authorization: Bearer <token>' header"""

    @manager.request_loader
    def load_admin_from_request(req):
        expected = current_app.config.get('ADMIN_API_TOKEN')
        if not expected:
            return None
        scheme, _, token = req.headers.get('Authorization', '').partition(' ')
        if scheme.lower() != 'bearer' or not token:
            return None
        if hmac.compare_digest(token.strip().encode('utf-8'), expected.encode('utf-8')):
            return AdminPrincipal()
        return None

    @manager.unauthorized_handler
    def unauthorized():
        return jsonify({'ok': False, 'error': 'Admin authentication required'}), 401


def admin_required(f):
    """Decorator to require admin role"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or getattr(current_user, 'role', None) != 'admin':
            return jsonify({'ok': False, 'error': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated_function
