from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
from .extensions import db, login_manager, rq
from .services.errors import VerificationError

migrate = Migrate()

def create_app(config_object="config.Config"):
    """App factory. Tests pass ``config.TestConfig``."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    rq.init_app(app)

    from .models.user import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": {"error_code": "UNAUTHORIZED", "message": "Login required"}}), 401

    from .blueprints.auth import bp as auth_bp
    from .blueprints.verification import bp as verification_bp
    from .blueprints.admin import bp as admin_bp
    from .blueprints.files import bp as files_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(verification_bp, url_prefix="/verification")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(files_bp, url_prefix="/files")

    @app.errorhandler(VerificationError)
    def handle_verification_error(e):
        if e.status_code >= 500:
            app.logger.error('%s: %s', e.error_code, e.message)
        else:
            app.logger.info('%s: %s', e.error_code, e.message)
        return jsonify({"error": e.to_dict()}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        code = e.name.upper().replace(" ", "_")
        return jsonify({"error": {"error_code": code, "message": e.description}}), e.code

    @app.get('/health')
    def health():
        return jsonify({"status": "ok"})

    @app.get('/educators')
    def public_educators():
        """Public search: only verified, visible profiles."""
        from .models.educator import EducatorProfile
        items = EducatorProfile.visible_query().order_by(EducatorProfile.last_name).all()
        return jsonify({"items": [
            {"id": e.id, "first_name": e.first_name, "last_name": e.last_name,
             "profession_type": e.profession_type, "verification_badge": e.verification_badge}
            for e in items
        ]})

    return app
