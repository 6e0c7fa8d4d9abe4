import sys
import uuid
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

from database import init_db, get_db_session, Reserva, test_connection

print("🔌 Conectando a la base de datos...")
if not test_connection():
    sys.exit(1)

print("🔧 Creando tablas de reservas y pagos...")
init_db()

# Reserva de prueba opcional: python setup_db.py 18.00
if len(sys.argv) > 1:
    session = get_db_session()
    try:
        reserva = Reserva(id=str(uuid.uuid4()), importe_total=Decimal(sys.argv[1]), moneda='978')
        session.add(reserva)
        session.commit()
        print(f"✅ Reserva de prueba creada: {reserva.id} ({reserva.importe_total}€)")
    finally:
        session.close()
