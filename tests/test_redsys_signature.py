"""
Tests unitarios para la firma Redsys (clave, cifrado del pedido, canonicalización, HMAC)
"""

import unittest
import base64
import json
import hmac
import hashlib
import sys
import os

# Añadir el directorio raíz al path para imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from core.redsys import (
    decode_shared_secret,
    derive_order_key,
    canonicalize,
    canonical_json,
    decode_parameters,
    sign,
    verify,
    verify_encoded,
    MerchantParameters,
    ConfigurationError,
    CryptoError,
    ValidationError,
    PADDING_ZEROS,
)

# Clave de pruebas pública del entorno de integración de Redsys
CLAVE_PRUEBAS = 'sq7HjrUOBfKmC576ILgskD5srU870gJ7'

ESCENARIO = {
    'DS_MERCHANT_AMOUNT': '000000018000',
    'DS_MERCHANT_ORDER': 'testreservat',
    'DS_MERCHANT_MERCHANTCODE': '367529286',
    'DS_MERCHANT_CURRENCY': '978',
    'DS_MERCHANT_TRANSACTIONTYPE': '1',
    'DS_MERCHANT_TERMINAL': '1',
}


def firmar(secret, order_id, params):
    _, canonical_b64 = canonicalize(params)
    return sign(derive_order_key(secret, order_id), canonical_b64)


class TestClaveSecreta(unittest.TestCase):
    """Suite de tests para decode_shared_secret"""

    def test_clave_24_bytes(self):
        key = decode_shared_secret(CLAVE_PRUEBAS)
        self.assertEqual(len(key), 24)

    def test_clave_16_bytes(self):
        key = decode_shared_secret(base64.b64encode(b'k' * 16).decode())
        self.assertEqual(key, b'k' * 16)

    def test_longitudes_invalidas(self):
        """Cualquier longitud distinta de 16 o 24 se rechaza"""
        for size in (0, 1, 8, 15, 17, 23, 25, 32):
            with self.subTest(size=size):
                with self.assertRaises(ConfigurationError):
                    decode_shared_secret(base64.b64encode(b'x' * size).decode())

    def test_base64_invalido(self):
        with self.assertRaises(ConfigurationError):
            decode_shared_secret('esto no es base64!!')

    def test_vacia(self):
        with self.assertRaises(ConfigurationError):
            decode_shared_secret('')
        with self.assertRaises(ConfigurationError):
            decode_shared_secret(None)

    def test_mensaje_no_contiene_la_clave(self):
        secreto = base64.b64encode(b'secretisimo-123456789').decode()
        with self.assertRaises(ConfigurationError) as ctx:
            decode_shared_secret(secreto)
        self.assertNotIn(secreto, str(ctx.exception))
        self.assertNotIn('secretisimo', str(ctx.exception))


class TestCifradoPedido(unittest.TestCase):
    """Suite de tests para derive_order_key"""

    def setUp(self):
        self.secret = decode_shared_secret(CLAVE_PRUEBAS)

    def test_determinista(self):
        self.assertEqual(
            derive_order_key(self.secret, 'testreservat'),
            derive_order_key(self.secret, 'testreservat')
        )

    def test_pedidos_distintos_claves_distintas(self):
        self.assertNotEqual(
            derive_order_key(self.secret, '123456789012'),
            derive_order_key(self.secret, '123456789013')
        )

    def test_cbc_iv_cero_pkcs7(self):
        """Coincide con 3DES-CBC, IV a cero y relleno PKCS#7 hecho a mano"""
        order = b'testreservat'
        padded = order + bytes([4]) * 4
        encryptor = Cipher(TripleDES(self.secret), modes.CBC(b'\0' * 8)).encryptor()
        esperado = encryptor.update(padded) + encryptor.finalize()
        self.assertEqual(derive_order_key(self.secret, 'testreservat'), esperado)

    def test_relleno_ceros(self):
        order = b'testreservat'
        encryptor = Cipher(TripleDES(self.secret), modes.CBC(b'\0' * 8)).encryptor()
        esperado = encryptor.update(order + b'\0' * 4) + encryptor.finalize()
        self.assertEqual(derive_order_key(self.secret, 'testreservat', PADDING_ZEROS), esperado)

    def test_longitud_con_relleno(self):
        """PKCS#7 siempre añade relleno; el de ceros solo completa el bloque"""
        self.assertEqual(len(derive_order_key(self.secret, '12345678')), 16)
        self.assertEqual(len(derive_order_key(self.secret, '1234567890ab')), 16)
        self.assertEqual(len(derive_order_key(self.secret, '12345678', PADDING_ZEROS)), 8)

    def test_clave_16_bytes(self):
        secret16 = decode_shared_secret(base64.b64encode(b'0123456789abcdef').decode())
        self.assertEqual(len(derive_order_key(secret16, '1234')), 8)

    def test_pedido_vacio(self):
        with self.assertRaises(CryptoError):
            derive_order_key(self.secret, '')

    def test_pedido_demasiado_largo(self):
        with self.assertRaises(CryptoError):
            derive_order_key(self.secret, '1234567890123')

    def test_pedido_no_ascii(self):
        with self.assertRaises(CryptoError):
            derive_order_key(self.secret, 'reservaño')


class TestCanonicalizacion(unittest.TestCase):
    """Suite de tests para canonicalize"""

    def test_json_compacto_ordenado(self):
        raw, b64 = canonicalize({'b': '2', 'a': '1'})
        self.assertEqual(raw, b'{"a":"1","b":"2"}')
        self.assertEqual(base64.b64decode(b64), raw)

    def test_independiente_del_orden_de_insercion(self):
        primero = dict(ESCENARIO)
        segundo = {}
        for key in reversed(list(ESCENARIO)):
            segundo[key] = ESCENARIO[key]
        self.assertEqual(canonicalize(primero), canonicalize(segundo))

    def test_registro_tipado_igual_que_dict(self):
        params = MerchantParameters(
            amount='000000018000',
            order='testreservat',
            merchant_code='367529286',
            currency='978',
            transaction_type='1',
            terminal='1',
        )
        self.assertEqual(params.to_dict(), ESCENARIO)
        self.assertEqual(canonicalize(params), canonicalize(ESCENARIO))

    def test_utf8_sin_escapar(self):
        raw = canonical_json({'DS_MERCHANT_PRODUCTDESCRIPTION': 'Excursión'})
        self.assertIn('Excursión'.encode('utf-8'), raw)

    def test_valores_no_cadena(self):
        with self.assertRaises(ValidationError):
            canonicalize({'DS_MERCHANT_AMOUNT': 1800})
        with self.assertRaises(ValidationError):
            canonicalize(['no', 'es', 'objeto'])

    def test_decode_parameters(self):
        _, b64 = canonicalize(ESCENARIO)
        self.assertEqual(decode_parameters(b64), ESCENARIO)

    def test_decode_parameters_url_safe(self):
        raw = json.dumps({'Ds_Order': '?>?>?>'}).encode()
        urlsafe = base64.urlsafe_b64encode(raw).decode()
        self.assertEqual(decode_parameters(urlsafe), {'Ds_Order': '?>?>?>'})

    def test_decode_parameters_invalido(self):
        for value in ('', '%%%', base64.b64encode(b'no json').decode(), base64.b64encode(b'[1]').decode()):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    decode_parameters(value)


class TestFirma(unittest.TestCase):
    """Suite de tests para sign / verify"""

    def setUp(self):
        self.secret = decode_shared_secret(CLAVE_PRUEBAS)

    def test_hmac_sha256_base64(self):
        key = derive_order_key(self.secret, 'testreservat')
        _, b64 = canonicalize(ESCENARIO)
        esperado = base64.b64encode(hmac.new(key, b64.encode(), hashlib.sha256).digest()).decode()
        self.assertEqual(sign(key, b64), esperado)
        self.assertEqual(len(base64.b64decode(sign(key, b64))), 32)

    def test_determinista(self):
        self.assertEqual(
            firmar(self.secret, 'testreservat', ESCENARIO),
            firmar(self.secret, 'testreservat', ESCENARIO)
        )

    def test_escenario_reserva(self):
        """Firma estable que verifica, y que falla si cambia el importe"""
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        self.assertTrue(verify(self.secret, 'testreservat', ESCENARIO, firma))

        alterado = dict(ESCENARIO, DS_MERCHANT_AMOUNT='000000019000')
        self.assertFalse(verify(self.secret, 'testreservat', alterado, firma))

    def test_ida_y_vuelta(self):
        for order in ('1', '12345678', 'ABCdef123456'):
            params = dict(ESCENARIO, DS_MERCHANT_ORDER=order)
            with self.subTest(order=order):
                firma = firmar(self.secret, order, params)
                self.assertTrue(verify(self.secret, order, params, firma))

    def test_firma_url_safe(self):
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        urlsafe = firma.replace('+', '-').replace('/', '_')
        self.assertTrue(verify(self.secret, 'testreservat', ESCENARIO, urlsafe))

    def test_alterar_un_bit_de_la_firma(self):
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        for pos in range(len(firma)):
            for bit in (0x01, 0x02, 0x04, 0x20):
                alterada = firma[:pos] + chr(ord(firma[pos]) ^ bit) + firma[pos + 1:]
                with self.subTest(pos=pos, bit=bit):
                    self.assertFalse(verify(self.secret, 'testreservat', ESCENARIO, alterada))

    def test_alterar_un_caracter_de_los_parametros(self):
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        for key, value in ESCENARIO.items():
            for pos in range(len(value)):
                alterado = dict(ESCENARIO)
                alterado[key] = value[:pos] + chr(ord(value[pos]) ^ 0x01) + value[pos + 1:]
                with self.subTest(key=key, pos=pos):
                    self.assertFalse(verify(self.secret, 'testreservat', alterado, firma))

    def test_otro_pedido_u_otra_clave(self):
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        self.assertFalse(verify(self.secret, 'testreservaX', ESCENARIO, firma))
        otra = decode_shared_secret(base64.b64encode(b'z' * 24).decode())
        self.assertFalse(verify(otra, 'testreservat', ESCENARIO, firma))

    def test_verify_nunca_lanza(self):
        firma = firmar(self.secret, 'testreservat', ESCENARIO)
        self.assertFalse(verify(self.secret, 'testreservat', ESCENARIO, 'no-es-base64!!'))
        self.assertFalse(verify(self.secret, 'testreservat', ESCENARIO, ''))
        self.assertFalse(verify(self.secret, 'testreservat', ESCENARIO, None))
        self.assertFalse(verify(self.secret, '', ESCENARIO, firma))
        self.assertFalse(verify(self.secret, 'x' * 20, ESCENARIO, firma))
        self.assertFalse(verify(self.secret, 'testreservat', {'a': 1}, firma))
        self.assertFalse(verify(b'corta', 'testreservat', ESCENARIO, firma))

    def test_verify_encoded(self):
        _, b64 = canonicalize(ESCENARIO)
        firma = sign(derive_order_key(self.secret, 'testreservat'), b64)
        self.assertTrue(verify_encoded(self.secret, 'testreservat', b64, firma))
        self.assertFalse(verify_encoded(self.secret, 'testreservat', b64 + 'AAAA', firma))


if __name__ == "__main__":
    unittest.main()
