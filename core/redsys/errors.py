"""
Errores y resultados del módulo de pagos Redsys
"""

from enum import Enum


class RedsysError(Exception):
    """Base de todos los errores de pagos Redsys"""


class ConfigurationError(RedsysError):
    """Clave secreta o configuración del comercio inválida (fatal al arrancar)"""


class ValidationError(RedsysError):
    """Petición de pago mal formada; no se envía a la pasarela"""


class CryptoError(RedsysError):
    """Datos fuera de rango para el cifrado del número de pedido"""


class GatewayError(RedsysError):
    """Error de transporte o rechazo técnico de la API REST de Redsys"""

    def __init__(self, message, error_code=None):
        super().__init__(message)
        self.error_code = error_code


class PaymentOutcome(str, Enum):
    """Resultado de validar una notificación de la pasarela"""

    AUTHORIZED = 'AUTHORIZED'
    DECLINED = 'DECLINED'
    INVALID_SIGNATURE = 'INVALID_SIGNATURE'
    MALFORMED_CALLBACK = 'MALFORMED_CALLBACK'

    @property
    def is_valid(self):
        return self in (PaymentOutcome.AUTHORIZED, PaymentOutcome.DECLINED)
