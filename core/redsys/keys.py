"""Decodificación de la clave secreta del comercio."""

import base64
import binascii

from .errors import ConfigurationError

# Tamaños válidos de clave 3DES (dos o tres claves DES)
VALID_KEY_SIZES = (16, 24)


def decode_shared_secret(secret_b64):
    """Decode the base64 merchant secret and enforce the 3DES key size.

    The key bytes never appear in error messages.
    """
    if not secret_b64 or not isinstance(secret_b64, str):
        raise ConfigurationError("La clave secreta de Redsys está vacía")

    try:
        key = base64.b64decode(secret_b64.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise ConfigurationError("La clave secreta de Redsys no es Base64 válido") from None

    if len(key) not in VALID_KEY_SIZES:
        raise ConfigurationError(
            f"Longitud de clave incorrecta: {len(key)} bytes (se esperan 16 o 24)"
        )
    return key
