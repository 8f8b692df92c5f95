"""Flask application factory."""
from flask import Flask, jsonify, request
from flask_wtf.csrf import CSRFProtect, CSRFError
from werkzeug.exceptions import HTTPException

from bizhub.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize CSRF protection
    CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({'status': 'error', 'message': 'Your session has expired. Reload the page.'}), 400

    # Error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
        )

    # Production: trust X-Forwarded-* headers from the reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    # Initialize database
    init_db(app)

    from bizhub.middleware import load_request_context

    @app.before_request
    def before_request_handler():
        """Load user and business context for each request."""
        load_request_context()

    # Error Handlers
    from bizhub.exceptions import BizHubError

    @app.errorhandler(BizHubError)
    def handle_bizhub_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"BizHubError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"BizHubError [{error.status_code}] {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'status': 'error', 'message': error.name}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from bizhub.blueprints.auth import auth_bp
    from bizhub.blueprints.onboarding import onboarding_bp
    from bizhub.blueprints.profile import profile_bp
    from bizhub.blueprints.dashboard import dashboard_bp
    from bizhub.blueprints.customers import customers_bp
    from bizhub.blueprints.leads import leads_bp
    from bizhub.blueprints.sales import sales_bp
    from bizhub.blueprints.quotes import quotes_bp
    from bizhub.blueprints.tasks import tasks_bp
    from bizhub.blueprints.compliance import compliance_bp
    from bizhub.blueprints.website import website_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(onboarding_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(leads_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(quotes_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(compliance_bp)
    app.register_blueprint(website_bp)

    # Register CLI commands
    from bizhub.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
