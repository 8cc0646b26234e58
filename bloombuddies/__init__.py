import time

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from .errors import UpstreamFailure
from .extensions import db, login_manager, migrate, cors, rq


def create_app(config_object="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db, directory="alembic")
    login_manager.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": _origins(app.config.get("CORS_ORIGINS"))}})
    rq.init_app(app)

    from . import models  # noqa: F401  register tables on db.metadata

    _init_admission(app)
    _init_auth(app)

    from .blueprints.interviews import bp as interviews_bp
    from .blueprints.scheduling import bp as scheduling_bp
    from .blueprints.manage import bp as manage_bp
    from .blueprints.candidates import bp as candidates_bp
    from .blueprints.auth import bp as auth_bp
    from .api.webhooks import bp as webhooks_bp
    app.register_blueprint(interviews_bp, url_prefix="/api")
    app.register_blueprint(scheduling_bp, url_prefix="/api")
    app.register_blueprint(manage_bp, url_prefix="/api/manage")
    app.register_blueprint(candidates_bp, url_prefix="/api/candidates")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(webhooks_bp)

    _register_error_handlers(app)

    started = time.monotonic()

    @app.get("/")
    def index():
        return jsonify({"service": "Bloom Buddies interview API", "status": "OK"})

    @app.get("/health")
    def health():
        return jsonify({"status": "OK", "uptime": round(time.monotonic() - started, 1)})

    return app


def _origins(value):
    if not value or value.strip() == "*":
        return "*"
    return [o.strip() for o in value.split(",") if o.strip()]


def _init_admission(app):
    # built once per app; request code reaches these through get_store()/get_admission()
    from .services.admission import AdmissionControl
    from .services.locks import TokenLocks
    from .services.store import build_store
    from .services.window import WindowPolicy

    store = build_store(app.config, db)
    locks = TokenLocks(rq.redis, timeout=app.config["ADMISSION_LOCK_TIMEOUT"],
                       wait=app.config["ADMISSION_LOCK_WAIT"])
    app.extensions["candidate_store"] = store
    app.extensions["admission"] = AdmissionControl(store, WindowPolicy.from_config(app.config), locks)
    app.logger.info("candidate store: %s", type(store).__name__)


def _init_auth(app):
    from flask import request
    from .models.user import User
    from .services.tokens import bearer_token, decode_access_token

    @login_manager.request_loader
    def load_user_from_request(req):
        token = bearer_token(req)
        if not token:
            return None
        payload = decode_access_token(token)
        if not payload:
            return None
        try:
            return db.session.get(User, int(payload["sub"]))
        except (KeyError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        app.logger.info("unauthorized request to %s", request.path)
        return jsonify({"error": "Authentication required"}), 401


def _register_error_handlers(app):
    @app.errorhandler(UpstreamFailure)
    def upstream_failure(e):
        app.logger.exception("upstream failure: %s", e)
        return jsonify({"error": "Service temporarily unavailable"}), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description, "status": e.code}), e.code
