from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()


def _env_float(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    try:
        return float(value)
    except ValueError:
        return default


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL') or 'sqlite:///press_ids.db'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max upload
    app.config['APP_BASE_URL'] = (os.environ.get('APP_BASE_URL') or 'http://localhost:5051').rstrip('/')
    app.config['GENERATED_FOLDER'] = os.environ.get('GENERATED_FOLDER') or os.path.join(app.root_path, 'static', 'generated')
    app.config['CARD_TEMPLATE_DIR'] = os.environ.get('CARD_TEMPLATE_DIR') or os.path.join(app.root_path, 'static', 'templates')
    app.config['CARD_BACKGROUND'] = os.environ.get('CARD_BACKGROUND') or 'press-card-bg.png'
    app.config['CARD_SEAL'] = os.environ.get('CARD_SEAL') or 'press-coa.png'
    app.config['CARD_ID_PREFIX'] = os.environ.get('CARD_ID_PREFIX') or 'KAP'
    app.config['CARD_ID_MAX_ATTEMPTS'] = int(os.environ.get('CARD_ID_MAX_ATTEMPTS') or 50)
    app.config['DEFAULT_MINT_ROLE'] = os.environ.get('DEFAULT_MINT_ROLE') or 'PRESS'
    app.config['DEFAULT_PRINT_ROLE'] = os.environ.get('DEFAULT_PRINT_ROLE') or 'Journalist'
    app.config['ADMIN_API_TOKEN'] = os.environ.get('ADMIN_API_TOKEN')

    # Content-addressed publishing (optional)
    app.config['IPFS_API_URL'] = os.environ.get('IPFS_API_URL')
    app.config['IPFS_API_TOKEN'] = os.environ.get('IPFS_API_TOKEN')
    app.config['IPFS_GATEWAY_HOST'] = os.environ.get('IPFS_GATEWAY_HOST') or 'storacha.link'
    app.config['IPFS_TIMEOUT'] = _env_float('IPFS_TIMEOUT', 30.0)

    # On-chain ledger (optional)
    app.config['RPC_URL'] = os.environ.get('RPC_URL')
    app.config['ADMIN_PRIVATE_KEY'] = os.environ.get('ADMIN_PRIVATE_KEY')
    app.config['PRESS_ID_CONTRACT_ADDRESS'] = os.environ.get('PRESS_ID_CONTRACT_ADDRESS')
    app.config['LEDGER_TIMEOUT'] = _env_float('LEDGER_TIMEOUT', 30.0)

    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    # Create tables
    with app.app_context():
        from presscard import models  # noqa: F401
        db.create_all()

    # Create output directories
    os.makedirs(app.config['GENERATED_FOLDER'], exist_ok=True)

    from presscard.auth import register_admin_loader
    register_admin_loader(login_manager)

    # Register blueprints
    from presscard.routes.cards import cards_bp
    from presscard.routes.admin import admin_bp
    from presscard.routes.files import files_bp

    app.register_blueprint(cards_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(files_bp)

    from presscard.errors import CardIssuanceError

    @app.errorhandler(CardIssuanceError)
    def handle_issuance_error(error):
        app.logger.warning(f"Issuance rejected: {error}")
        return jsonify(error.to_dict()), error.status_code

    return app
