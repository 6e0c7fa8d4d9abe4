"""
Modelos de base de datos para los pagos de reservas
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()

# Estados de pago de una reserva
# PENDIENTE -> PREAUTORIZADO -> PAGADO
#           -> RECHAZADO
ESTADO_PENDIENTE = 'PENDIENTE'
ESTADO_PREAUTORIZADO = 'PREAUTORIZADO'
ESTADO_PAGADO = 'PAGADO'
ESTADO_RECHAZADO = 'RECHAZADO'


class Reserva(Base):
    """Reserva de un servicio; solo los campos que lee y escribe el pago"""
    __tablename__ = 'reservas'

    id = Column(String(36), primary_key=True)
    importe_total = Column(Numeric(10, 2), nullable=False)
    moneda = Column(String(3), default='978', nullable=False)

    # Redsys
    order_number = Column(String(12), unique=True, index=True)  # DS_MERCHANT_ORDER vigente
    estado_pago = Column(String(20), default=ESTADO_PENDIENTE, index=True)
    codigo_respuesta = Column(String(10))  # Ds_Response
    codigo_autorizacion = Column(String(20))  # Ds_AuthorisationCode

    fecha_creacion = Column(DateTime, default=datetime.utcnow)
    fecha_actualizacion = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    fecha_pago = Column(DateTime)

    def __repr__(self):
        return f"<Reserva {self.id} ({self.estado_pago})>"


class PagoRedsys(Base):
    """Registro de cada notificación recibida de Redsys (auditoría)"""
    __tablename__ = 'pagos_redsys'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_number = Column(String(12), index=True)
    resultado = Column(String(30), nullable=False)  # PaymentOutcome
    codigo_respuesta = Column(String(10))
    merchant_parameters = Column(Text)  # Ds_MerchantParameters tal cual llegó
    fecha_creacion = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_pago_order_fecha', 'order_number', 'fecha_creacion'),
    )

    def __repr__(self):
        return f"<PagoRedsys {self.order_number} {self.resultado}>"
