from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_mail import Mail
from werkzeug.exceptions import HTTPException
from config import Config

# Use PyMySQL as the MySQLdb driver for the default MySQL URI
import pymysql
pymysql.install_as_MySQLdb()

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
mail = Mail()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    with app.app_context():
        # Import models and routes here to register with the app
        from okfees.models import (User, Profile, Student, FeePayment, Announcement, Event, LiveClass,
                                   TopperStudent, InstituteInfo, StudentSummary, RecoveryCode, UserActivity)
        from okfees.routes import (main, auth, password_recovery, students, fees, announcements, blog,
                                   dashboard, settings, public)
        from okfees import session as session_guard

        # Register blueprints
        app.register_blueprint(main.bp)
        app.register_blueprint(auth.bp)
        app.register_blueprint(password_recovery.bp)
        app.register_blueprint(students.bp)
        app.register_blueprint(fees.bp)
        app.register_blueprint(announcements.bp)
        app.register_blueprint(blog.bp)
        app.register_blueprint(dashboard.bp)
        app.register_blueprint(settings.bp)
        app.register_blueprint(public.bp)

        # Create all database tables (if not already created)
        db.create_all()

        # Register error handlers
        register_error_handlers(app)
        session_guard.init_app(app)

    return app

def register_error_handlers(app):
    """Register global error handlers"""
    from okfees.session import SessionEnded

    def error_response(status, message):
        return jsonify({'success': False, 'message': message}), status

    @app.errorhandler(400)
    def bad_request_error(error):
        return error_response(400, 'Bad request')

    @app.errorhandler(403)
    def forbidden_error(error):
        return error_response(403, 'Forbidden')

    @app.errorhandler(404)
    def not_found_error(error):
        return error_response(404, 'Not found')

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return error_response(405, 'Method not allowed')

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return error_response(500, 'Internal server error')

    @app.errorhandler(SessionEnded)
    def session_ended(error):
        # Data access through an ended session is treated like no session at all
        return login_manager.unauthorized()

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return error_response(e.code, e.description or e.name)

        # Log the error
        app.logger.error(f'Unhandled exception: {str(e)}')
        db.session.rollback()
        return error_response(500, 'Internal server error')
