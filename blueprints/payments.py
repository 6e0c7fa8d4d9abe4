"""
Blueprint para rutas de pagos (Redsys)
"""

from flask import Blueprint, request, jsonify
import logging

from core.redsys import (
    TransactionBuilder,
    TransactionType,
    CallbackValidator,
    RedsysClient,
    PaymentOutcome,
    ValidationError,
    CryptoError,
    GatewayError,
    amount_to_minor_units,
    generate_order_id,
)
from database.models import (
    ESTADO_PREAUTORIZADO,
    ESTADO_PAGADO,
    ESTADO_RECHAZADO,
)

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')


def estado_para_resultado(result):
    """Estado de pago que corresponde a una notificación válida (None = no tocar)"""
    tipo = result.data.transaction_type if result.data else None

    if result.outcome == PaymentOutcome.AUTHORIZED:
        if tipo == TransactionType.AUTHORIZATION.value:
            return ESTADO_PREAUTORIZADO
        if tipo in (TransactionType.PAYMENT.value, TransactionType.CAPTURE.value):
            return ESTADO_PAGADO
        return None

    if result.outcome == PaymentOutcome.DECLINED:
        # Una captura denegada deja la preautorización como estaba
        if tipo in (TransactionType.PAYMENT.value, TransactionType.AUTHORIZATION.value, None):
            return ESTADO_RECHAZADO
    return None


def init_payments_blueprint(store, config, limiter=None, metrics=None, client=None):
    """Inicializa el blueprint con dependencias"""

    payments_bp = Blueprint('payments', __name__, url_prefix='/pagos/redsys')
    builder = TransactionBuilder(config)
    validator = CallbackValidator(config)
    client = client or RedsysClient(config, validator=validator)

    def checkout():
        """Crear preautorización Redsys para una reserva"""
        try:
            data = request.get_json(silent=True) or {}
            reserva_id = data.get('reserva_id')

            if not reserva_id:
                return jsonify({'error': 'reserva_id requerido'}), 400

            reserva = store.get(reserva_id)
            if not reserva:
                return jsonify({'error': 'Reserva no encontrada'}), 404

            # Un pago RECHAZADO se puede reintentar con un pedido nuevo
            if reserva.estado_pago in (ESTADO_PREAUTORIZADO, ESTADO_PAGADO):
                return jsonify({'error': f'La reserva ya está {reserva.estado_pago}'}), 409

            order_id = generate_order_id(reserva.id)
            payload = builder.authorize(
                reserva.id,
                reserva.importe_total,
                currency=reserva.moneda,
                order_id=order_id,
                description=data.get('descripcion'),
                language=data.get('idioma', 'es'),
            )
            store.assign_order(reserva.id, payload.order_id)

            if metrics:
                metrics.track_signed_operation(TransactionType.AUTHORIZATION.value)

            return jsonify({
                'url': config.gateway_url,
                'form': payload.as_form(),
                'order': payload.order_id,
            })

        except (ValidationError, CryptoError) as e:
            logger.warning(f"⚠️ Checkout Redsys rechazado: {e}")
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"❌ Error checkout Redsys: {e}")
            return jsonify({'error': 'Error al crear la preautorización'}), 500

    if limiter is not None:
        checkout = limiter.limit("5 per minute")(checkout)
    payments_bp.add_url_rule('/checkout', view_func=checkout, methods=['POST'])

    @payments_bp.route('/notificacion', methods=['POST'])
    def notificacion():
        """Notificación online de Redsys (form POST)"""
        merchant_parameters = request.form.get('Ds_MerchantParameters')
        signature = request.form.get('Ds_Signature')
        version = request.form.get('Ds_SignatureVersion')

        result = validator.validate(merchant_parameters, signature, version)
        if metrics:
            metrics.track_notification(result.outcome.value)

        try:
            store.log_notification(
                result.order_id,
                result.outcome.value,
                result.response_code,
                merchant_parameters,
            )
        except Exception as e:
            logger.error(f"❌ Error registrando notificación Redsys: {e}")

        if not result.is_valid:
            return jsonify(success=False), 400

        try:
            reserva = store.find_by_order(result.order_id)
            if not reserva:
                logger.error(f"❌ Notificación para pedido desconocido {result.order_id}")
                return jsonify(success=False, error='Pedido no encontrado'), 404

            if result.data.amount and str(result.data.amount).zfill(12) != amount_to_minor_units(reserva.importe_total):
                security_logger.warning(
                    f"⚠️ Importe notificado {result.data.amount} no coincide con la reserva {reserva.id}"
                )
                return jsonify(success=False), 400

            estado = estado_para_resultado(result)
            if estado:
                store.update_payment(
                    result.order_id,
                    estado,
                    result.response_code,
                    result.data.authorisation_code,
                )

            logger.info(f"💰 Pedido {result.order_id}: {result.outcome.value} (reserva {reserva.id})")
            return jsonify(success=True, estado=estado or reserva.estado_pago), 200

        except Exception as e:
            logger.error(f"❌ Error procesando notificación Redsys: {e}")
            return jsonify(success=False), 500

    @payments_bp.route('/confirmar', methods=['POST'])
    def confirmar():
        """Confirmar (capturar) una preautorización vía REST"""
        try:
            data = request.get_json(silent=True) or {}
            reserva_id = data.get('reserva_id')

            if not reserva_id:
                return jsonify({'error': 'reserva_id requerido'}), 400

            reserva = store.get(reserva_id)
            if not reserva:
                return jsonify({'error': 'Reserva no encontrada'}), 404

            if reserva.estado_pago != ESTADO_PREAUTORIZADO:
                return jsonify({'error': 'El pago no está preautorizado'}), 409

            payload = builder.capture(
                reserva.id,
                reserva.importe_total,
                order_id=reserva.order_number,
                currency=reserva.moneda,
            )
            if metrics:
                metrics.track_signed_operation(TransactionType.CAPTURE.value)

            result = client.submit(payload)
            if not result.is_authorized:
                logger.warning(f"⚠️ Confirmación no autorizada para {reserva.id}: {result.outcome.value}")
                return jsonify({
                    'success': False,
                    'resultado': result.outcome.value,
                    'codigo_respuesta': result.response_code,
                }), 402

            store.update_payment(
                reserva.order_number,
                ESTADO_PAGADO,
                result.response_code,
                result.data.authorisation_code,
            )
            if metrics:
                metrics.track_notification(result.outcome.value, monto=reserva.importe_total)

            return jsonify({
                'success': True,
                'codigo_autorizacion': result.data.authorisation_code,
                'codigo_respuesta': result.response_code,
            })

        except (ValidationError, CryptoError) as e:
            return jsonify({'error': str(e)}), 400
        except GatewayError as e:
            if metrics:
                metrics.track_gateway_error('trataPeticionREST')
            logger.error(f"❌ Error de pasarela confirmando {data.get('reserva_id')}: {e}")
            return jsonify({'error': 'Error de comunicación con la pasarela'}), 502
        except Exception as e:
            logger.error(f"❌ Error confirmando preautorización: {e}")
            return jsonify({'error': 'Error al confirmar la preautorización'}), 500

    return payments_bp
