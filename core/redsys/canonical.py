"""
Parámetros del comercio y su serialización canónica

La firma se calcula sobre el Base64 del JSON de parámetros, así que el JSON
tiene que ser idéntico byte a byte en cada ejecución: claves ordenadas
alfabéticamente, sin espacios, UTF-8.
"""

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError

# Nombre del campo Redsys para cada atributo del registro
FIELD_NAMES = {
    'amount': 'DS_MERCHANT_AMOUNT',
    'order': 'DS_MERCHANT_ORDER',
    'merchant_code': 'DS_MERCHANT_MERCHANTCODE',
    'currency': 'DS_MERCHANT_CURRENCY',
    'transaction_type': 'DS_MERCHANT_TRANSACTIONTYPE',
    'terminal': 'DS_MERCHANT_TERMINAL',
    'merchant_url': 'DS_MERCHANT_MERCHANTURL',
    'url_ok': 'DS_MERCHANT_URLOK',
    'url_ko': 'DS_MERCHANT_URLKO',
    'product_description': 'DS_MERCHANT_PRODUCTDESCRIPTION',
    'merchant_name': 'DS_MERCHANT_MERCHANTNAME',
    'consumer_language': 'DS_MERCHANT_CONSUMERLANGUAGE',
    'merchant_data': 'DS_MERCHANT_MERCHANTDATA',
}


@dataclass(frozen=True)
class MerchantParameters:
    """Parámetros de una operación (importe ya en céntimos, 12 dígitos)"""

    amount: str
    order: str
    merchant_code: str
    currency: str
    transaction_type: str
    terminal: str
    merchant_url: Optional[str] = None
    url_ok: Optional[str] = None
    url_ko: Optional[str] = None
    product_description: Optional[str] = None
    merchant_name: Optional[str] = None
    consumer_language: Optional[str] = None
    merchant_data: Optional[str] = None

    def to_dict(self):
        """Redsys field names to string values; unset optional fields are left out."""
        result = {}
        for attr, field_name in FIELD_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                result[field_name] = str(value)
        return result


def _as_mapping(params):
    if isinstance(params, MerchantParameters):
        return params.to_dict()
    if not isinstance(params, Mapping):
        raise ValidationError("Los parámetros del comercio deben ser un objeto")

    for key, value in params.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValidationError(f"El parámetro {key!r} no es una cadena")
    return params


def canonical_json(params):
    """Return the canonical UTF-8 JSON bytes for ``params``."""
    mapping = _as_mapping(params)
    text = json.dumps(mapping, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    return text.encode('utf-8')


def canonicalize(params):
    """Return ``(canonical_bytes, canonical_base64)`` for ``params``."""
    raw = canonical_json(params)
    return raw, base64.b64encode(raw).decode('ascii')


def strict_b64decode(value):
    """Decode standard or URL-safe Base64, rejecting non-canonical encodings.

    Whitespace, stray characters and non-zero trailing bits are all errors, so
    two different strings never decode to the same bytes.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("Valor Base64 vacío")

    normalized = value.replace('-', '+').replace('_', '/')
    normalized += '=' * (-len(normalized) % 4)
    raw = base64.b64decode(normalized, validate=True)
    if base64.b64encode(raw).decode('ascii') != normalized:
        raise ValueError("Base64 no canónico")
    return raw


def decode_parameters(merchant_parameters_b64):
    """Decode a Ds_MerchantParameters value into a dict.

    Accepts standard and URL-safe Base64. Raises ValueError when the value is
    not Base64 of a JSON object.
    """
    raw = strict_b64decode(merchant_parameters_b64)
    try:
        decoded = json.loads(raw.decode('utf-8'))
    except RecursionError:
        raise ValueError("Ds_MerchantParameters demasiado anidado") from None
    if not isinstance(decoded, dict):
        raise ValueError("Ds_MerchantParameters no es un objeto JSON")
    return decoded
