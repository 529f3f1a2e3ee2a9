from flask import current_app, jsonify, request
from flask_babel import Babel
from flask_babel import gettext as _
from flask_login import LoginManager
from flask_migrate import Migrate

from core.db import db

migrate = Migrate()
login_manager = LoginManager()
babel = Babel()

login_manager.login_message = None


@login_manager.user_loader
def load_user(user_id):
    from core.models.user import User

    try:
        numeric_id = int(user_id)
    except (TypeError, ValueError):
        return None

    user = db.session.get(User, numeric_id)
    if user is None:
        current_app.logger.debug(
            "Session refers to unknown user",
            extra={"event": "auth.user_loader.missing", "user_id": numeric_id},
        )
        return None
    return user


@login_manager.unauthorized_handler
def handle_unauthorized():
    current_app.logger.info("401 %s", request.path, extra={"event": "auth.unauthorized"})
    return jsonify({"error": _("Authentication required")}), 401


__all__ = ["babel", "db", "login_manager", "migrate"]
