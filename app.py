import os
import logging
from decimal import Decimal
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from dotenv import load_dotenv
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flasgger import Swagger
from flask_cors import CORS

from api import swagger_config, swagger_template
from api.decorators import documentar_endpoints
from blueprints import init_payments_blueprint
from core.redsys import RedsysConfig, ConfigurationError

logger = logging.getLogger(__name__)


# ==========================================
# CUSTOM JSON PROVIDER FOR DECIMAL
# ==========================================
class CustomJSONProvider(DefaultJSONProvider):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


# ==========================================
# 1. CONFIGURACIÓN DE LOGS
# ==========================================
def configurar_logging(log_file='app.log', level=logging.INFO):
    """Logging con rotación (max 10MB, 5 backups) + consola"""
    log_handler = RotatingFileHandler(
        log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    log_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    logging.basicConfig(
        level=level,
        handlers=[log_handler, logging.StreamHandler()]
    )


# ==========================================
# 2. FACTORÍA DE LA APLICACIÓN
# ==========================================
def create_app(redsys_config=None, store=None, testing=False, client=None):
    """Crea la app Flask con el blueprint de pagos Redsys.

    Sin configuración explícita se lee del entorno; una clave Redsys inválida
    detiene el arranque.
    """
    load_dotenv()

    if redsys_config is None:
        try:
            redsys_config = RedsysConfig.from_env()
        except ConfigurationError as e:
            logger.critical(f"🚨 CRITICAL: configuración de Redsys inválida: {e}")
            raise SystemExit("❌ FATAL: Redsys no configurado") from e

    if store is None:
        from database import ReservaStore, Session
        store = ReservaStore(Session)

    app = Flask(__name__)
    app.json = CustomJSONProvider(app)
    app.config['TESTING'] = testing

    # Clave secreta para sesiones de Flask
    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        if os.getenv("FLASK_ENV") == "production":
            logger.critical("⚠️ SECRET_KEY es OBLIGATORIA en producción!")
            raise SystemExit("SECRET_KEY no configurada")
        secret_key = os.urandom(32).hex()
    app.config['SECRET_KEY'] = secret_key

    CORS(app, resources={r"/pagos/redsys/checkout": {"origins": os.getenv("CORS_ORIGINS", "*")}})

    # 🔒 Rate Limiting Configuration
    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=[],
        storage_uri=os.getenv("REDIS_URL", "memory://"),
        strategy="fixed-window",
        enabled=not testing
    )

    metrics = None
    if not testing and os.getenv('METRICS_ENABLED', 'true').lower() == 'true':
        from monitoring.prometheus_metrics import init_metrics
        metrics = init_metrics(app)

    app.register_blueprint(init_payments_blueprint(
        store,
        redsys_config,
        limiter=limiter,
        metrics=metrics,
        client=client
    ))

    documentar_endpoints(app)
    Swagger(app, config=swagger_config, template=swagger_template)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok', 'redsys_environment': redsys_config.environment})

    logger.info(f"✅ App de pagos iniciada (Redsys {redsys_config.environment})")
    return app


if __name__ == '__main__':
    configurar_logging()
    create_app().run(host='0.0.0.0', port=int(os.getenv('PORT', '8000')))
