"""
Construcción de operaciones firmadas para Redsys

Convierte una reserva (id + importe) en el formulario firmado que se envía a
la pasarela: DS_MERCHANT_ORDER, importe en céntimos a 12 dígitos y la firma
HMAC_SHA256_V1. No hace llamadas de red.
"""

import logging
import re
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from .canonical import MerchantParameters, canonicalize
from .cipher import MAX_ORDER_LENGTH, derive_order_key
from .config import CURRENCIES
from .errors import ValidationError
from .signature import SIGNATURE_VERSION, sign

logger = logging.getLogger(__name__)

AMOUNT_WIDTH = 12
MAX_URL_LENGTH = 250
MAX_DESCRIPTION_LENGTH = 125
NON_ALPHANUMERIC = re.compile(r'[^A-Za-z0-9]')

LANGUAGES = {
    'es': '001',
    'en': '002',
    'ca': '003',
    'fr': '004',
    'de': '005',
    'nl': '006',
    'it': '007',
    'sv': '008',
    'pt': '009',
    'pl': '011',
    'gl': '012',
    'eu': '013',
    'da': '208',
}


class TransactionType(str, Enum):
    PAYMENT = '0'
    AUTHORIZATION = '1'         # preautorización: reserva fondos
    CAPTURE = '2'               # confirmación de preautorización
    REFUND = '3'
    CANCEL_AUTHORIZATION = '9'


# Operaciones que pasan por la página de pago (llevan URLOK / URLKO)
REDIRECT_TYPES = (TransactionType.PAYMENT, TransactionType.AUTHORIZATION)


def order_id_from_reservation(reservation_id):
    """Strip non-alphanumerics from the reservation id and keep 12 characters."""
    cleaned = NON_ALPHANUMERIC.sub('', str(reservation_id or ''))
    if not cleaned:
        raise ValidationError("El ID de reserva no puede estar vacío")
    return cleaned[:MAX_ORDER_LENGTH]


def generate_order_id(reservation_id, now=None):
    """Fresh order number for a new attempt: 8 timestamp digits + last 4 chars of the reservation.

    Redsys rejects a repeated DS_MERCHANT_ORDER, so every retry of the same
    reservation needs a new one. The first 4 characters are always digits.
    """
    suffix = order_id_from_reservation(reservation_id)[-4:]
    millis = int((time.time() if now is None else now) * 1000)
    return f"{millis % 10 ** 8:08d}{suffix}"


def amount_to_minor_units(amount):
    """Convert an amount in euros to the 12-digit cents string Redsys expects.

    >>> amount_to_minor_units('18.00')
    '000000001800'
    """
    if isinstance(amount, bool) or amount is None:
        raise ValidationError("Importe inválido")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Importe inválido: {amount!r}") from None

    if not value.is_finite() or value <= 0:
        raise ValidationError("El importe debe ser mayor que 0")

    if value >= Decimal(10) ** (AMOUNT_WIDTH - 2):
        raise ValidationError("El importe excede el máximo admitido por la pasarela")

    cents = int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    if cents <= 0:
        raise ValidationError("El importe en céntimos debe ser mayor que 0")

    formatted = str(cents).zfill(AMOUNT_WIDTH)
    if len(formatted) > AMOUNT_WIDTH:
        raise ValidationError("El importe excede el máximo admitido por la pasarela")
    return formatted


def _transaction_type(value):
    try:
        return TransactionType(str(value.value if isinstance(value, Enum) else value))
    except ValueError:
        raise ValidationError(f"Tipo de transacción no soportado: {value!r}") from None


@dataclass(frozen=True)
class SignedPayload:
    merchant_parameters: str
    signature: str
    signature_version: str
    order_id: str
    parameters: MerchantParameters

    def as_form(self):
        """Fields of the form POST (redirect page or REST body)."""
        return {
            'Ds_SignatureVersion': self.signature_version,
            'Ds_MerchantParameters': self.merchant_parameters,
            'Ds_Signature': self.signature,
        }


class TransactionBuilder:
    """Crea operaciones firmadas a partir de una configuración de comercio"""

    def __init__(self, config):
        self.config = config

    def _urls(self, reservation_id):
        base = self.config.site_url
        return {
            'merchant_url': f"{base}/pagos/redsys/notificacion"[:MAX_URL_LENGTH],
            'url_ok': f"{base}/pago/exito?reserva_id={reservation_id}"[:MAX_URL_LENGTH],
            'url_ko': f"{base}/pago/error?reserva_id={reservation_id}"[:MAX_URL_LENGTH],
        }

    def build(self, reservation_id, amount, currency=None,
              transaction_type=TransactionType.AUTHORIZATION,
              order_id=None, description=None, language='es'):
        """Validate, assemble and sign one operation. Returns a SignedPayload."""
        if reservation_id is None or not str(reservation_id).strip():
            raise ValidationError("El ID de reserva no puede estar vacío")

        currency = str(currency or self.config.currency)
        if currency not in CURRENCIES:
            raise ValidationError(f"Moneda no soportada: {currency}")

        tx_type = _transaction_type(transaction_type)
        minor_amount = amount_to_minor_units(amount)

        if order_id is None:
            order_id = order_id_from_reservation(reservation_id)
        elif (not isinstance(order_id, str) or NON_ALPHANUMERIC.search(order_id)
              or not 0 < len(order_id) <= MAX_ORDER_LENGTH):
            raise ValidationError(f"Número de pedido inválido: {order_id!r}")

        extra = {}
        if tx_type in REDIRECT_TYPES:
            extra.update(self._urls(reservation_id))
            extra['merchant_name'] = self.config.merchant_name
            extra['consumer_language'] = LANGUAGES.get(language, LANGUAGES['es'])
            if description:
                extra['product_description'] = str(description)[:MAX_DESCRIPTION_LENGTH]

        params = MerchantParameters(
            amount=minor_amount,
            order=order_id,
            merchant_code=self.config.merchant_code,
            currency=currency,
            transaction_type=tx_type.value,
            terminal=self.config.terminal,
            merchant_data=str(reservation_id),
            **extra,
        )
        return self.sign_parameters(params)

    def sign_parameters(self, params):
        """Canonicalize and sign an already assembled MerchantParameters."""
        _, canonical_b64 = canonicalize(params)
        derived_key = derive_order_key(self.config.secret, params.order, self.config.order_padding)
        signature = sign(derived_key, canonical_b64)

        logger.info(f"🔐 Operación Redsys firmada: pedido {params.order}, tipo {params.transaction_type}, importe {params.amount}")
        return SignedPayload(
            merchant_parameters=canonical_b64,
            signature=signature,
            signature_version=SIGNATURE_VERSION,
            order_id=params.order,
            parameters=params,
        )

    def authorize(self, reservation_id, amount, **kwargs):
        return self.build(reservation_id, amount, transaction_type=TransactionType.AUTHORIZATION, **kwargs)

    def capture(self, reservation_id, amount, order_id, **kwargs):
        """Confirm a pre-authorization; must reuse the original order id."""
        return self.build(reservation_id, amount, transaction_type=TransactionType.CAPTURE,
                          order_id=order_id, **kwargs)

    def refund(self, reservation_id, amount, order_id, **kwargs):
        return self.build(reservation_id, amount, transaction_type=TransactionType.REFUND,
                          order_id=order_id, **kwargs)
