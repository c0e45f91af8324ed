import atexit
import logging

from flask import Flask

from .config import Config
from .errors import register_error_handlers
from .extensions import cors, jwt, pos
from .utils.api import ok

log = logging.getLogger(__name__)


def create_app(config_object=Config, overrides: dict | None = None, state=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    pos_state = pos.init_app(app, state)
    if app.config.get("POS_SEED_DATA"):
        from .seed import seed_state
        seed_state(pos_state)
    if app.config.get("POS_CATALOG_FILE"):
        from .services.import_export import read_products
        products = read_products(app.config["POS_CATALOG_FILE"], first_id=pos_state.catalog.next_id())
        pos_state.catalog.load(products)
        log.info("loaded %d products from %s", len(products), app.config["POS_CATALOG_FILE"])
    if pos_state.fbr.enabled:
        pos_state.tax_rates.refresh()
    if not app.testing:
        atexit.register(pos_state.shutdown, False)

    register_error_handlers(app)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .customer import bp as customer_bp; app.register_blueprint(customer_bp)
    from .user import bp as user_bp; app.register_blueprint(user_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .receipt import bp as receipt_bp; app.register_blueprint(receipt_bp)
    from .settings import bp as settings_bp; app.register_blueprint(settings_bp)
    from .insights import bp as insights_bp; app.register_blueprint(insights_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return ok("API running", {"currency": pos_state.currency.code})

    return app
