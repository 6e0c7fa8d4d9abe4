"""
Simula la notificación online de Redsys para una reserva pendiente.

Firma los parámetros con la misma clave que usa la app, así que el endpoint
los acepta como si vinieran de la pasarela. Solo para entornos de prueba.

Uso: python scripts/simulate_payment.py <order_number> <importe> [codigo_respuesta] [tipo]
"""

import os
import sys

import requests

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.redsys import (
    RedsysConfig,
    canonicalize,
    derive_order_key,
    sign,
    amount_to_minor_units,
    SIGNATURE_VERSION,
)

BASE_URL = os.getenv('SIMULATE_BASE_URL', 'http://127.0.0.1:8000')


def build_notification(config, order_number, importe, codigo='0000', tipo='1'):
    """Parámetros Ds_* de una notificación firmada"""
    params = {
        'Ds_Amount': amount_to_minor_units(importe).lstrip('0'),
        'Ds_Currency': config.currency,
        'Ds_Order': order_number,
        'Ds_MerchantCode': config.merchant_code,
        'Ds_Terminal': config.terminal,
        'Ds_Response': codigo,
        'Ds_AuthorisationCode': '123456' if int(codigo) < 100 else '',
        'Ds_TransactionType': tipo,
        'Ds_SecurePayment': '1',
    }
    _, merchant_parameters = canonicalize(params)
    key = derive_order_key(config.secret, order_number, config.order_padding)
    return {
        'Ds_SignatureVersion': SIGNATURE_VERSION,
        'Ds_MerchantParameters': merchant_parameters,
        'Ds_Signature': sign(key, merchant_parameters),
    }


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)

    config = RedsysConfig.from_env()
    if config.is_production:
        print("❌ No se simulan pagos contra configuración de producción")
        sys.exit(1)

    order_number, importe = sys.argv[1], sys.argv[2]
    codigo = sys.argv[3] if len(sys.argv) > 3 else '0000'
    tipo = sys.argv[4] if len(sys.argv) > 4 else '1'

    print(f"🚀 Simulando notificación Redsys: pedido {order_number}, {importe}€, respuesta {codigo}")
    form = build_notification(config, order_number, importe, codigo, tipo)
    resp = requests.post(f"{BASE_URL}/pagos/redsys/notificacion", data=form, timeout=10)
    print(f"{'✅' if resp.ok else '❌'} HTTP {resp.status_code}: {resp.text}")
