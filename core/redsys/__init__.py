"""
Redsys package
Firma HMAC_SHA256_V1, construcción de operaciones y validación de notificaciones
"""

from .errors import (
    RedsysError,
    ConfigurationError,
    ValidationError,
    CryptoError,
    GatewayError,
    PaymentOutcome
)
from .keys import decode_shared_secret
from .cipher import derive_order_key, PADDING_PKCS7, PADDING_ZEROS
from .canonical import MerchantParameters, canonicalize, canonical_json, decode_parameters
from .signature import sign, verify, verify_encoded, SIGNATURE_VERSION
from .config import RedsysConfig
from .transactions import (
    TransactionBuilder,
    TransactionType,
    SignedPayload,
    amount_to_minor_units,
    order_id_from_reservation,
    generate_order_id
)
from .callbacks import CallbackValidator, CallbackResult, CallbackData, classify_response, describe_response
from .client import RedsysClient

__all__ = [
    # Errores
    'RedsysError',
    'ConfigurationError',
    'ValidationError',
    'CryptoError',
    'GatewayError',
    'PaymentOutcome',
    # Firma
    'decode_shared_secret',
    'derive_order_key',
    'PADDING_PKCS7',
    'PADDING_ZEROS',
    'MerchantParameters',
    'canonicalize',
    'canonical_json',
    'decode_parameters',
    'sign',
    'verify',
    'verify_encoded',
    'SIGNATURE_VERSION',
    # Operaciones
    'RedsysConfig',
    'TransactionBuilder',
    'TransactionType',
    'SignedPayload',
    'amount_to_minor_units',
    'order_id_from_reservation',
    'generate_order_id',
    'CallbackValidator',
    'CallbackResult',
    'CallbackData',
    'classify_response',
    'describe_response',
    'RedsysClient'
]
