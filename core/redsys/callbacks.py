"""
Validación de notificaciones de Redsys (notificación online / respuesta REST)

Recibido -> Válido (AUTHORIZED / DECLINED) | Inválido (INVALID_SIGNATURE /
MALFORMED_CALLBACK). Un resultado inválido nunca debe tocar la reserva.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .canonical import decode_parameters
from .errors import PaymentOutcome
from .signature import SIGNATURE_VERSION, verify, verify_encoded
from .transactions import TransactionType

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')

AUTHORIZED_THRESHOLD = 100
CONFIRMATION_OK_CODE = 900

RESPONSE_CODES = {
    '0000': 'Transacción autorizada',
    '0099': 'Transacción autorizada',
    '0900': 'Transacción autorizada para devoluciones y confirmaciones',
    '0400': 'Transacción autorizada para anulaciones',
    '0101': 'Tarjeta caducada',
    '0102': 'Tarjeta en excepción transitoria o bajo sospecha de fraude',
    '0104': 'Operación no permitida para esa tarjeta o terminal',
    '0116': 'Disponible insuficiente',
    '0118': 'Tarjeta no registrada',
    '0129': 'Código de seguridad (CVV2/CVC2) incorrecto',
    '0180': 'Tarjeta ajena al servicio',
    '0184': 'Error en la autenticación del titular',
    '0190': 'Denegación sin especificar motivo',
    '0191': 'Fecha de caducidad errónea',
    '0202': 'Tarjeta en excepción transitoria o bajo sospecha de fraude con retirada de tarjeta',
    '0912': 'Emisor no disponible',
    '9912': 'Emisor no disponible',
    '9915': 'Pago cancelado por el usuario',
    '9928': 'Anulación de preautorización en diferido realizada por el SIS',
    '9929': 'Anulación de preautorización en diferido realizada por el comercio',
    '9997': 'Otra transacción en curso con la misma tarjeta',
}


def _first(params, *names):
    for name in names:
        value = params.get(name)
        if value not in (None, ''):
            return value
    return None


def describe_response(code):
    if code is None:
        return 'Sin código de respuesta'
    return RESPONSE_CODES.get(str(code).zfill(4), f"Código {code}")


def classify_response(code, transaction_type=None, threshold=AUTHORIZED_THRESHOLD):
    """Map a Ds_Response code to AUTHORIZED or DECLINED.

    Codes below ``threshold`` are authorizations; 0900 also is for
    confirmations and refunds. Anything unparsable is a decline.
    """
    try:
        value = int(str(code).strip())
    except (TypeError, ValueError):
        return PaymentOutcome.DECLINED

    if 0 <= value < threshold:
        return PaymentOutcome.AUTHORIZED
    if value == CONFIRMATION_OK_CODE and str(transaction_type) in (
            TransactionType.CAPTURE.value, TransactionType.REFUND.value):
        return PaymentOutcome.AUTHORIZED
    return PaymentOutcome.DECLINED


@dataclass(frozen=True)
class CallbackData:
    order_id: str
    amount: Optional[str] = None
    currency: Optional[str] = None
    response_code: Optional[str] = None
    authorisation_code: Optional[str] = None
    transaction_type: Optional[str] = None
    merchant_code: Optional[str] = None
    terminal: Optional[str] = None
    merchant_data: Optional[str] = None
    card_country: Optional[str] = None
    card_brand: Optional[str] = None

    @classmethod
    def from_parameters(cls, order_id, params):
        return cls(
            order_id=order_id,
            amount=_first(params, 'Ds_Amount', 'DS_AMOUNT', 'DS_MERCHANT_AMOUNT'),
            currency=_first(params, 'Ds_Currency', 'DS_CURRENCY', 'DS_MERCHANT_CURRENCY'),
            response_code=_first(params, 'Ds_Response', 'DS_RESPONSE'),
            authorisation_code=_first(params, 'Ds_AuthorisationCode', 'DS_AUTHORISATIONCODE'),
            transaction_type=_first(params, 'Ds_TransactionType', 'DS_TRANSACTIONTYPE',
                                    'DS_MERCHANT_TRANSACTIONTYPE'),
            merchant_code=_first(params, 'Ds_MerchantCode', 'DS_MERCHANTCODE', 'DS_MERCHANT_MERCHANTCODE'),
            terminal=_first(params, 'Ds_Terminal', 'DS_TERMINAL', 'DS_MERCHANT_TERMINAL'),
            merchant_data=_first(params, 'Ds_MerchantData', 'DS_MERCHANTDATA', 'DS_MERCHANT_MERCHANTDATA'),
            card_country=_first(params, 'Ds_Card_Country', 'DS_CARD_COUNTRY'),
            card_brand=_first(params, 'Ds_Card_Brand', 'DS_CARD_BRAND'),
        )


@dataclass(frozen=True)
class CallbackResult:
    outcome: PaymentOutcome
    order_id: Optional[str] = None
    data: Optional[CallbackData] = None
    reason: Optional[str] = None

    @property
    def is_valid(self):
        return self.outcome.is_valid

    @property
    def is_authorized(self):
        return self.outcome == PaymentOutcome.AUTHORIZED

    @property
    def response_code(self):
        return self.data.response_code if self.data else None


class CallbackValidator:
    """Valida Ds_MerchantParameters + Ds_Signature con la clave del comercio"""

    def __init__(self, config, threshold=AUTHORIZED_THRESHOLD):
        self.config = config
        self.threshold = threshold

    def _reject(self, outcome, reason, order_id=None):
        security_logger.warning(f"⚠️ Notificación Redsys rechazada ({outcome.value}): {reason} [pedido {order_id or '-'}]")
        return CallbackResult(outcome=outcome, order_id=order_id, reason=reason)

    def _signature_ok(self, order_id, params, merchant_parameters_b64, signature):
        padding_mode = self.config.order_padding
        # Forma canónica primero; si la pasarela serializó distinto, vale la cadena recibida tal cual
        if verify(self.config.secret, order_id, params, signature, padding_mode):
            return True
        return verify_encoded(self.config.secret, order_id, merchant_parameters_b64, signature, padding_mode)

    def validate(self, merchant_parameters_b64, signature, signature_version=None):
        """Validate one notification. Never raises; always returns a CallbackResult."""
        if signature_version is not None and signature_version != SIGNATURE_VERSION:
            return self._reject(PaymentOutcome.MALFORMED_CALLBACK,
                                f"versión de firma no soportada: {signature_version!r}")

        try:
            params = decode_parameters(merchant_parameters_b64)
        except ValueError:
            return self._reject(PaymentOutcome.MALFORMED_CALLBACK, "Ds_MerchantParameters no decodificable")

        order_id = _first(params, 'Ds_Order', 'DS_ORDER', 'Ds_Merchant_Order', 'DS_MERCHANT_ORDER')
        if not isinstance(order_id, str):
            return self._reject(PaymentOutcome.MALFORMED_CALLBACK, "falta el número de pedido")

        if not signature or not self._signature_ok(order_id, params, merchant_parameters_b64, signature):
            return self._reject(PaymentOutcome.INVALID_SIGNATURE, "firma no coincide", order_id)

        data = CallbackData.from_parameters(order_id, params)
        outcome = classify_response(data.response_code, data.transaction_type, self.threshold)

        logger.info(f"✅ Notificación Redsys válida: pedido {order_id}, respuesta {data.response_code} "
                    f"({describe_response(data.response_code)}) -> {outcome.value}")
        return CallbackResult(outcome=outcome, order_id=order_id, data=data)
