"""
Configuración de Prometheus para monitoreo de pagos
"""

from prometheus_flask_exporter import PrometheusMetrics
from prometheus_client import Counter, Histogram, REGISTRY
import logging

logger = logging.getLogger(__name__)


class AppMetrics:
    """Clase para gestionar métricas de la aplicación"""

    def __init__(self, app=None, registry=REGISTRY):
        self.metrics = None
        self.app = app
        self.registry = registry

        self.operaciones_firmadas = Counter(
            'agencia_redsys_operaciones_firmadas_total',
            'Operaciones Redsys firmadas',
            ['tipo'],  # DS_MERCHANT_TRANSACTIONTYPE
            registry=registry
        )

        self.notificaciones = Counter(
            'agencia_redsys_notificaciones_total',
            'Notificaciones Redsys recibidas por resultado',
            ['resultado'],  # AUTHORIZED, DECLINED, INVALID_SIGNATURE, MALFORMED_CALLBACK
            registry=registry
        )

        self.monto_pagos = Histogram(
            'agencia_monto_pagos_euros',
            'Montos de pagos autorizados en euros',
            ['tipo'],
            buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000],
            registry=registry
        )

        self.errores_pasarela = Counter(
            'agencia_redsys_errores_total',
            'Errores de comunicación con la API REST de Redsys',
            ['endpoint'],
            registry=registry
        )

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Inicializa las métricas con la aplicación Flask"""
        self.app = app

        self.metrics = PrometheusMetrics(
            app,
            registry=self.registry,
            group_by='endpoint',
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
            path='/metrics',
            export_defaults=True,
            defaults_prefix='flask'
        )

        logger.info("✅ Prometheus metrics initialized")

    def track_signed_operation(self, tipo):
        """Registra una operación firmada"""
        self.operaciones_firmadas.labels(tipo=tipo).inc()

    def track_notification(self, resultado, monto=None, tipo='reserva'):
        """Registra una notificación; el importe solo cuenta si está autorizada"""
        self.notificaciones.labels(resultado=resultado).inc()
        if monto is not None and resultado == 'AUTHORIZED':
            self.monto_pagos.labels(tipo=tipo).observe(float(monto))

    def track_gateway_error(self, endpoint):
        """Registra un error de la pasarela"""
        self.errores_pasarela.labels(endpoint=endpoint).inc()


def init_metrics(app, registry=REGISTRY):
    """Initialize Prometheus metrics with the Flask app."""
    return AppMetrics(app, registry=registry)
