"""
Tests unitarios para ReservaStore (SQLite en memoria)
"""

import unittest
from decimal import Decimal
import sys
import os

# Añadir el directorio raíz al path para imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault('DATABASE_URL', 'sqlite://')

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import (
    Base,
    Reserva,
    PagoRedsys,
    ReservaStore,
    ESTADO_PENDIENTE,
    ESTADO_PREAUTORIZADO,
    ESTADO_PAGADO,
    ESTADO_RECHAZADO,
)


class TestReservaStore(unittest.TestCase):
    """Suite de tests para ReservaStore"""

    def setUp(self):
        engine = create_engine('sqlite://')
        Base.metadata.create_all(engine)
        self.Session = sessionmaker(bind=engine)
        self.store = ReservaStore(self.Session)

        db = self.Session()
        db.add(Reserva(id='reserva-1', importe_total=Decimal('180.00'), moneda='978'))
        db.commit()
        db.close()

    def test_get(self):
        reserva = self.store.get('reserva-1')
        self.assertEqual(reserva.importe_total, Decimal('180.00'))
        self.assertEqual(reserva.estado_pago, ESTADO_PENDIENTE)
        self.assertIsNone(self.store.get('no-existe'))

    def test_assign_order(self):
        self.assertTrue(self.store.assign_order('reserva-1', '00012500res1'))
        self.assertEqual(self.store.find_by_order('00012500res1').id, 'reserva-1')
        self.assertFalse(self.store.assign_order('no-existe', '000000000001'))
        self.assertIsNone(self.store.find_by_order('000000000001'))

    def test_nuevo_pedido_reinicia_el_estado(self):
        self.store.assign_order('reserva-1', '000000000001')
        self.store.update_payment('000000000001', ESTADO_PREAUTORIZADO, '0000', '111111')
        self.store.assign_order('reserva-1', '000000000002')

        reserva = self.store.get('reserva-1')
        self.assertEqual(reserva.estado_pago, ESTADO_PENDIENTE)
        self.assertIsNone(reserva.codigo_autorizacion)

    def test_flujo_preautorizacion_y_captura(self):
        self.store.assign_order('reserva-1', '000000000001')

        self.assertTrue(self.store.update_payment('000000000001', ESTADO_PREAUTORIZADO, '0000', '123456'))
        reserva = self.store.get('reserva-1')
        self.assertEqual(reserva.estado_pago, ESTADO_PREAUTORIZADO)
        self.assertEqual(reserva.codigo_autorizacion, '123456')
        self.assertIsNone(reserva.fecha_pago)

        self.assertTrue(self.store.update_payment('000000000001', ESTADO_PAGADO, '0900'))
        reserva = self.store.get('reserva-1')
        self.assertEqual(reserva.estado_pago, ESTADO_PAGADO)
        self.assertEqual(reserva.codigo_respuesta, '0900')
        self.assertEqual(reserva.codigo_autorizacion, '123456')
        self.assertIsNotNone(reserva.fecha_pago)

    def test_notificacion_repetida(self):
        self.store.assign_order('reserva-1', '000000000001')
        self.assertTrue(self.store.update_payment('000000000001', ESTADO_PREAUTORIZADO, '0000'))
        self.assertFalse(self.store.update_payment('000000000001', ESTADO_PREAUTORIZADO, '0000'))

    def test_estado_final_no_cambia(self):
        self.store.assign_order('reserva-1', '000000000001')
        self.store.update_payment('000000000001', ESTADO_RECHAZADO, '0190')

        self.assertFalse(self.store.update_payment('000000000001', ESTADO_PAGADO, '0000'))
        self.assertEqual(self.store.get('reserva-1').estado_pago, ESTADO_RECHAZADO)

    def test_pedido_desconocido(self):
        self.assertFalse(self.store.update_payment('999999999999', ESTADO_PAGADO))

    def test_log_notification(self):
        self.store.log_notification('000000000001', 'AUTHORIZED', '0000', 'eyJhIjoiYiJ9')
        self.store.log_notification(None, 'MALFORMED_CALLBACK')

        db = self.Session()
        registros = db.query(PagoRedsys).order_by(PagoRedsys.id).all()
        db.close()

        self.assertEqual(len(registros), 2)
        self.assertEqual(registros[0].order_number, '000000000001')
        self.assertEqual(registros[0].codigo_respuesta, '0000')
        self.assertIsNone(registros[1].order_number)
        self.assertEqual(registros[1].resultado, 'MALFORMED_CALLBACK')


if __name__ == "__main__":
    unittest.main()
