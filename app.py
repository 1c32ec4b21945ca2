# app.py - application factory
from flask import Flask, jsonify, render_template, request
from flask_wtf import CSRFProtect
from flask_session import Session
from flask_wtf.csrf import CSRFError, generate_csrf
from dotenv import load_dotenv
from config import Config
from pathlib import Path
import logging

# Import blueprints
from routes.main_routes import main_bp
from routes.quiz_routes import quiz_bp


def _wants_json():
    return request.path.startswith('/quiz/') or request.is_json


def create_app(test_config: dict | None = None):
    # Load environment variables from .env when running via python wsgi.py
    load_dotenv()
    app = Flask(__name__, static_folder="static", template_folder="templates",
                instance_path=Config.INSTANCE_PATH)
    app.config.from_object(Config)

    # Allow overriding config for testing
    if test_config:
        app.config.update(test_config)
        # Disable CSRF in tests to simplify posting
        if app.config.get('TESTING'):
            app.config.setdefault('WTF_CSRF_ENABLED', False)

    # Initialize extensions
    CSRFProtect(app)
    Path(app.config['SESSION_FILE_DIR']).mkdir(parents=True, exist_ok=True)
    Session(app)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(quiz_bp)

    # Inject csrf_token() helper for templates without FlaskForm
    @app.context_processor
    def inject_csrf_token():
        return dict(csrf_token=generate_csrf)

    # Error handlers
    @app.errorhandler(404)
    def not_found(e):
        if _wants_json():
            return jsonify({"error": "not found"}), 404
        return render_template("404.html"), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        if _wants_json():
            return jsonify({"error": "method not allowed"}), 405
        return e

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.exception("Unhandled server error")
        if _wants_json():
            return jsonify({"error": "internal server error"}), 500
        return render_template("500.html"), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning("csrf_rejected path=%s reason=%s", request.path, e.description)
        return jsonify({"error": "Your session expired. Reload the page and try again."}), 400

    # Health check endpoint for uptime monitoring
    @app.route('/healthz', methods=['GET'])
    def healthz():
        return {"status": "ok"}, 200

    # Basic security headers & proxy fix
    @app.after_request
    def set_security_headers(resp):
        resp.headers.setdefault('X-Frame-Options', 'DENY')
        resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
        resp.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
        resp.headers.setdefault('Permissions-Policy', 'geolocation=(), microphone=(), camera=()')
        resp.headers.setdefault('Content-Security-Policy', "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self';")
        return resp

    # Respect X-Forwarded-Proto for HTTPS redirects behind a proxy
    @app.before_request
    def _detect_proxy_scheme():
        xf_proto = request.headers.get('X-Forwarded-Proto')
        if xf_proto:
            request.environ['wsgi.url_scheme'] = xf_proto

    # Basic logging configuration with LOG_LEVEL override
    log_level_name = app.config.get('LOG_LEVEL', 'INFO')
    level = getattr(logging, log_level_name, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s %(message)s')
    app.logger.info("startup log_level=%s max_questions=%s", log_level_name, app.config['QUIZ_MAX_QUESTIONS'])

    return app
