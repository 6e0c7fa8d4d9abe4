"""
Configuración de conexión a PostgreSQL
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import QueuePool
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Configuración desde variables de entorno
DB_HOST = os.getenv('DB_HOST', 'localhost')
DB_PORT = os.getenv('DB_PORT', '5432')
DB_USER = os.getenv('DB_USER', 'agencia_user')
DB_PASSWORD = os.getenv('DB_PASSWORD', '')
DB_NAME = os.getenv('DB_NAME', 'agencia_db')

# DATABASE_URL completa tiene prioridad (p. ej. sqlite para desarrollo)
DATABASE_URL = os.getenv(
    'DATABASE_URL',
    f'postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
)


def build_engine(url=DATABASE_URL):
    """Engine con pool para PostgreSQL; configuración por defecto para otros motores"""
    if url.startswith('postgresql'):
        return create_engine(
            url,
            poolclass=QueuePool,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,        # Verificar conexión antes de usar
            pool_recycle=3600,         # Reciclar conexiones cada hora
            connect_args={
                "options": "-c timezone=utc",
                "application_name": "agencia_pagos"
            }
        )
    return create_engine(url)


engine = build_engine()

# Session factory con scoped_session para thread-safety
session_factory = sessionmaker(bind=engine)
Session = scoped_session(session_factory)


def get_db_session():
    """
    Sesión suelta
    IMPORTANTE: Cerrar manualmente con db.close()
    """
    return Session()


def close_session():
    """Cierra la sesión scoped"""
    Session.remove()


def test_connection():
    """Verifica que la conexión a la base de datos funciona"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✅ Conexión a base de datos correcta")
        return True
    except Exception as e:
        logger.error(f"❌ Error de conexión: {e}")
        return False
