"""
Configuración del TPV virtual Redsys

Se carga una sola vez al arrancar (variables de entorno / .env) y se pasa
explícitamente al constructor de transacciones, al validador y al cliente.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .cipher import PADDING_MODES, PADDING_PKCS7
from .errors import ConfigurationError
from .keys import decode_shared_secret

logger = logging.getLogger(__name__)

GATEWAY_URLS = {
    'test': 'https://sis-t.redsys.es:25443/sis/realizarPago',
    'production': 'https://sis.redsys.es/sis/realizarPago',
}

REST_URLS = {
    'test': 'https://sis-t.redsys.es:25443/sis/rest/trataPeticionREST',
    'production': 'https://sis.redsys.es/sis/rest/trataPeticionREST',
}

# ISO-4217 numérico
CURRENCIES = {
    '978': 'EUR',
    '840': 'USD',
    '826': 'GBP',
    '392': 'JPY',
    '756': 'CHF',
}

MAX_MERCHANT_NAME = 25


@dataclass(frozen=True)
class RedsysConfig:
    merchant_code: str
    terminal: str
    secret: bytes = field(repr=False)
    currency: str = '978'
    environment: str = 'test'
    gateway_url: str = GATEWAY_URLS['test']
    rest_url: str = REST_URLS['test']
    order_padding: str = PADDING_PKCS7
    merchant_name: str = 'Agencia de Viajes'
    site_url: str = 'http://localhost:8000'
    timeout: float = 20.0

    def __post_init__(self):
        if not self.merchant_code or not self.merchant_code.isdigit() or len(self.merchant_code) > 9:
            raise ConfigurationError("REDSYS_MERCHANT_CODE debe ser numérico (máximo 9 dígitos)")
        if not self.terminal or not self.terminal.isdigit() or len(self.terminal) > 3:
            raise ConfigurationError("REDSYS_TERMINAL debe ser numérico (máximo 3 dígitos)")
        if self.currency not in CURRENCIES:
            raise ConfigurationError(f"REDSYS_CURRENCY no soportada: {self.currency}")
        if self.order_padding not in PADDING_MODES:
            raise ConfigurationError(f"REDSYS_ORDER_PADDING debe ser uno de {PADDING_MODES}")
        if len(self.secret) not in (16, 24):
            raise ConfigurationError("La clave secreta debe tener 16 o 24 bytes")

    @property
    def is_production(self):
        return self.environment == 'production'

    @classmethod
    def from_env(cls, environ=None):
        """Build the configuration from environment variables.

        Raises ConfigurationError when a required value is missing or invalid.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        merchant_code = environ.get('REDSYS_MERCHANT_CODE', '').strip()
        secret_b64 = environ.get('REDSYS_SECRET_KEY', '').strip()
        if not merchant_code or not secret_b64:
            raise ConfigurationError("Configuración de Redsys incompleta (REDSYS_MERCHANT_CODE / REDSYS_SECRET_KEY)")

        environment = environ.get('REDSYS_ENVIRONMENT', 'test').strip().lower()
        if environment not in GATEWAY_URLS:
            raise ConfigurationError(f"REDSYS_ENVIRONMENT desconocido: {environment}")

        try:
            timeout = float(environ.get('REDSYS_TIMEOUT_SECONDS', '20'))
        except ValueError:
            raise ConfigurationError("REDSYS_TIMEOUT_SECONDS debe ser numérico") from None

        config = cls(
            merchant_code=merchant_code,
            terminal=environ.get('REDSYS_TERMINAL', '1').strip(),
            secret=decode_shared_secret(secret_b64),
            currency=environ.get('REDSYS_CURRENCY', '978').strip(),
            environment=environment,
            gateway_url=environ.get('REDSYS_GATEWAY_URL') or GATEWAY_URLS[environment],
            rest_url=environ.get('REDSYS_REST_URL') or REST_URLS[environment],
            order_padding=environ.get('REDSYS_ORDER_PADDING', PADDING_PKCS7).strip().lower(),
            merchant_name=environ.get('REDSYS_MERCHANT_NAME', 'Agencia de Viajes')[:MAX_MERCHANT_NAME],
            site_url=environ.get('SITE_URL', 'http://localhost:8000').rstrip('/'),
            timeout=timeout,
        )
        logger.info(f"✅ Redsys configurado: comercio {config.merchant_code}, terminal {config.terminal}, entorno {config.environment}")
        return config
