# retailpos/extensions.py
from flask import current_app
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from .utils.api import err


class PosExtension:
    """Binds a PosState to each app; `pos.<attr>` reads the current app's state."""

    key = "retailpos"

    def init_app(self, app, state=None):
        from .state import PosState
        app.extensions[self.key] = state or PosState.from_config(app.config)
        return app.extensions[self.key]

    @property
    def state(self):
        return current_app.extensions[self.key]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.state, name)


jwt = JWTManager()
cors = CORS()
pos = PosExtension()


@jwt.unauthorized_loader
def _missing_token(reason):
    return err(reason, 401)


@jwt.invalid_token_loader
def _invalid_token(reason):
    return err(reason, 401)


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return err("Token has expired", 401)
