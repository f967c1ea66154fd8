"""Flask application factory."""
from flask import Flask, request, jsonify
from flask_wtf.csrf import CSRFProtect, CSRFError, generate_csrf
from werkzeug.exceptions import HTTPException
from backoffice.database import init_db
import logging


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Form posts carry a CSRF token (header X-CSRFToken for JSON clients)
    CSRFProtect(app)

    # Sentry only in production, and only when a DSN is configured
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import os
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    from backoffice.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Behind Nginx in production
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    init_db(app)

    # Error Handlers
    from backoffice.exceptions import AppError

    @app.errorhandler(AppError)
    def handle_app_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"AppError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"AppError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        app.logger.warning(f"CSRF Error: {error.description}")
        return jsonify({'status': 'error', 'message': 'La sesión ha expirado. Recarga la página.'}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    @app.route('/csrf-token')
    def csrf_token():
        return {'csrf_token': generate_csrf()}

    # Register blueprints
    from backoffice.blueprints.dashboard import dashboard_bp
    from backoffice.blueprints.brands import brands_bp
    from backoffice.blueprints.categories import categories_bp
    from backoffice.blueprints.products import products_bp
    from backoffice.blueprints.customers import customers_bp
    from backoffice.blueprints.orders import orders_bp
    from backoffice.blueprints.metrics import metrics_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(brands_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(metrics_bp)

    from backoffice.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
