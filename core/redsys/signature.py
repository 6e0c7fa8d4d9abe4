"""
Firma HMAC_SHA256_V1 de Redsys

1. Derivar la clave del pedido (3DES sobre DS_MERCHANT_ORDER)
2. HMAC-SHA256 sobre el Base64 de los parámetros, con la clave derivada
3. Codificar el resultado en Base64
"""

import base64
import binascii
import hashlib
import hmac
import logging

from .canonical import canonicalize, strict_b64decode
from .cipher import PADDING_PKCS7, derive_order_key
from .errors import RedsysError

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = 'HMAC_SHA256_V1'


def sign(derived_key, canonical_b64):
    """HMAC-SHA256 of the UTF-8 bytes of ``canonical_b64``, base64 encoded."""
    if isinstance(canonical_b64, str):
        canonical_b64 = canonical_b64.encode('utf-8')
    digest = hmac.new(derived_key, canonical_b64, hashlib.sha256).digest()
    return base64.b64encode(digest).decode('ascii')


def decode_signature(signature):
    """Decode a standard or URL-safe base64 signature to raw digest bytes.

    Returns None when the value is not valid base64.
    """
    try:
        return strict_b64decode(signature)
    except (binascii.Error, ValueError):
        return None


def signatures_match(expected_b64, claimed_signature):
    """Constant-time comparison of two base64 signatures (any alphabet)."""
    expected = decode_signature(expected_b64)
    claimed = decode_signature(claimed_signature)
    if expected is None or claimed is None:
        return False
    return hmac.compare_digest(expected, claimed)


def verify_encoded(secret, order_id, merchant_parameters_b64, claimed_signature,
                   padding_mode=PADDING_PKCS7):
    """Verify a signature over an already encoded Ds_MerchantParameters string."""
    try:
        derived_key = derive_order_key(secret, order_id, padding_mode)
        expected = sign(derived_key, merchant_parameters_b64)
    except (RedsysError, TypeError, ValueError) as e:
        logger.debug(f"Verificación de firma abortada: {type(e).__name__}")
        return False
    return signatures_match(expected, claimed_signature)


def verify(secret, order_id, params, claimed_signature, padding_mode=PADDING_PKCS7):
    """Recompute the signature for ``params`` and compare it in constant time.

    Never raises: malformed input of any kind gives False.
    """
    try:
        _, canonical_b64 = canonicalize(params)
    except (RedsysError, TypeError, ValueError) as e:
        logger.debug(f"Parámetros no canonicalizables: {type(e).__name__}")
        return False
    return verify_encoded(secret, order_id, canonical_b64, claimed_signature, padding_mode)
