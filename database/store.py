"""
Acceso a reservas para el flujo de pago Redsys
"""

import logging
from contextlib import contextmanager
from datetime import datetime

from .models import (
    Reserva,
    PagoRedsys,
    ESTADO_PENDIENTE,
    ESTADO_PAGADO,
    ESTADO_RECHAZADO,
)

logger = logging.getLogger(__name__)

ESTADOS_FINALES = (ESTADO_PAGADO, ESTADO_RECHAZADO)


class ReservaStore:
    """Lecturas y escrituras de reservas usadas por el pago"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get(self, reserva_id):
        with self._session() as db:
            reserva = db.get(Reserva, str(reserva_id))
            if reserva:
                db.expunge(reserva)
            return reserva

    def find_by_order(self, order_number):
        with self._session() as db:
            reserva = db.query(Reserva).filter_by(order_number=order_number).first()
            if reserva:
                db.expunge(reserva)
            return reserva

    def assign_order(self, reserva_id, order_number):
        """Asocia un nuevo DS_MERCHANT_ORDER a la reserva y la deja pendiente"""
        with self._session() as db:
            reserva = db.get(Reserva, str(reserva_id))
            if not reserva:
                return False
            reserva.order_number = order_number
            reserva.estado_pago = ESTADO_PENDIENTE
            reserva.codigo_respuesta = None
            reserva.codigo_autorizacion = None
            return True

    def update_payment(self, order_number, estado_pago, codigo_respuesta=None, codigo_autorizacion=None):
        """Actualiza el estado de pago de la reserva con ese pedido.

        Devuelve False si no existe o si ya estaba en ese estado (notificación repetida).
        """
        with self._session() as db:
            reserva = db.query(Reserva).filter_by(order_number=order_number).first()
            if not reserva:
                logger.warning(f"⚠️ No hay reserva para el pedido {order_number}")
                return False

            if reserva.estado_pago == estado_pago or reserva.estado_pago in ESTADOS_FINALES:
                logger.info(f"Reserva {reserva.id} ya en estado {reserva.estado_pago}, sin cambios")
                return False

            reserva.estado_pago = estado_pago
            reserva.codigo_respuesta = codigo_respuesta
            if codigo_autorizacion:
                reserva.codigo_autorizacion = codigo_autorizacion
            if estado_pago == ESTADO_PAGADO:
                reserva.fecha_pago = datetime.utcnow()

            logger.info(f"✅ Reserva {reserva.id} marcada como {estado_pago}")
            return True

    def log_notification(self, order_number, resultado, codigo_respuesta=None, merchant_parameters=None):
        with self._session() as db:
            db.add(PagoRedsys(
                order_number=(order_number or '')[:12] or None,
                resultado=resultado,
                codigo_respuesta=str(codigo_respuesta)[:10] if codigo_respuesta else None,
                merchant_parameters=merchant_parameters,
            ))
