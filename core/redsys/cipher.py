"""
Cifrado del número de pedido (clave derivada por operación)

Redsys deriva una clave distinta para cada pedido cifrando DS_MERCHANT_ORDER
con 3DES en modo CBC y vector de inicialización a cero. El IV no es secreto:
las dos partes tienen que obtener exactamente la misma clave.
"""

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from .errors import CryptoError

MAX_ORDER_LENGTH = 12
BLOCK_SIZE = 8
ZERO_IV = b'\0' * BLOCK_SIZE

PADDING_PKCS7 = 'pkcs7'
PADDING_ZEROS = 'zeros'
PADDING_MODES = (PADDING_PKCS7, PADDING_ZEROS)


def _pad(data, mode):
    if mode == PADDING_PKCS7:
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        return padder.update(data) + padder.finalize()
    if mode == PADDING_ZEROS:
        # Relleno con ceros hasta múltiplo de 8 (sin bloque extra si ya encaja)
        remainder = len(data) % BLOCK_SIZE
        if remainder:
            data += b'\0' * (BLOCK_SIZE - remainder)
        return data
    raise CryptoError(f"Modo de relleno desconocido: {mode}")


def validate_order_id(order_id):
    """Return the ASCII bytes of ``order_id`` or raise CryptoError."""
    if not isinstance(order_id, str) or not order_id:
        raise CryptoError("El número de pedido no puede estar vacío")
    if len(order_id) > MAX_ORDER_LENGTH:
        raise CryptoError(
            f"Longitud de pedido incorrecta: {len(order_id)} caracteres (máximo {MAX_ORDER_LENGTH})"
        )
    try:
        return order_id.encode('ascii')
    except UnicodeEncodeError:
        raise CryptoError("El número de pedido solo admite caracteres ASCII") from None


def derive_order_key(secret, order_id, padding_mode=PADDING_PKCS7):
    """Encrypt the order id under the merchant secret.

    Deterministic: the same secret and order always give the same key, so the
    outbound signature and the inbound verification derive it independently.
    """
    data = validate_order_id(order_id)
    try:
        cipher = Cipher(TripleDES(secret), modes.CBC(ZERO_IV))
    except (TypeError, ValueError) as e:
        raise CryptoError(f"Clave 3DES inválida: {type(e).__name__}") from None

    encryptor = cipher.encryptor()
    return encryptor.update(_pad(data, padding_mode)) + encryptor.finalize()
