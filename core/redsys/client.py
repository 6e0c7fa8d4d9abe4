"""
Cliente REST de Redsys (trataPeticionREST)

Se usa para operaciones sin intervención del cliente, sobre todo la
confirmación (captura) de una preautorización. La respuesta viene firmada y
se valida igual que una notificación.
"""

import logging

import requests

from .callbacks import CallbackValidator
from .errors import GatewayError

logger = logging.getLogger(__name__)


class RedsysClient:
    def __init__(self, config, session=None, validator=None):
        self.config = config
        self.session = session or requests.Session()
        self.validator = validator or CallbackValidator(config)

    def submit(self, payload):
        """POST a SignedPayload and return the validated CallbackResult.

        Raises GatewayError on transport failures or when Redsys answers with
        an ``errorCode`` instead of signed parameters.
        """
        try:
            resp = self.session.post(
                self.config.rest_url,
                json=payload.as_form(),
                headers={'Content-Type': 'application/json'},
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Error de conexión con Redsys (pedido {payload.order_id}): {e}")
            raise GatewayError(f"Error de conexión con Redsys: {e}") from e

        if resp.status_code >= 300:
            logger.error(f"❌ Redsys respondió HTTP {resp.status_code} para pedido {payload.order_id}")
            raise GatewayError(f"Redsys respondió HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError:
            raise GatewayError("Respuesta de Redsys no es JSON") from None

        if not isinstance(body, dict):
            raise GatewayError("Respuesta de Redsys inesperada")

        if body.get('errorCode'):
            logger.error(f"❌ Redsys rechazó el pedido {payload.order_id}: {body['errorCode']}")
            raise GatewayError(f"Redsys rechazó la operación: {body['errorCode']}", error_code=body['errorCode'])

        result = self.validator.validate(
            body.get('Ds_MerchantParameters'),
            body.get('Ds_Signature'),
            body.get('Ds_SignatureVersion'),
        )
        if result.is_valid and result.order_id != payload.order_id:
            logger.error(f"❌ Respuesta Redsys para otro pedido: esperado {payload.order_id}, recibido {result.order_id}")
            raise GatewayError("La respuesta de Redsys no corresponde al pedido enviado")

        logger.info(f"💰 Respuesta REST Redsys pedido {payload.order_id}: {result.outcome.value}")
        return result
