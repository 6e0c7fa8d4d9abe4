"""
Database package
Módulo de base de datos - Configuración centralizada
"""

import logging

from .connection import (
    engine,
    Session,
    get_db_session,
    close_session,
    test_connection,
    DATABASE_URL
)

from .models import (
    Base,
    Reserva,
    PagoRedsys,
    ESTADO_PENDIENTE,
    ESTADO_PREAUTORIZADO,
    ESTADO_PAGADO,
    ESTADO_RECHAZADO
)

from .store import ReservaStore

logger = logging.getLogger(__name__)

__all__ = [
    # Connection
    'engine',
    'Session',
    'get_db_session',
    'close_session',
    'test_connection',
    'DATABASE_URL',
    # Models
    'Base',
    'Reserva',
    'PagoRedsys',
    'ESTADO_PENDIENTE',
    'ESTADO_PREAUTORIZADO',
    'ESTADO_PAGADO',
    'ESTADO_RECHAZADO',
    'ReservaStore'
]


def init_db(bind=None):
    """
    Inicializa todas las tablas en la base de datos
    """
    bind = bind or engine
    Base.metadata.create_all(bind)

    from sqlalchemy import inspect
    tablas = inspect(bind).get_table_names()
    logger.info(f"✅ Tablas disponibles: {', '.join(tablas)}")
