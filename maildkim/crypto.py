# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2008 Greg Hewgill http://hewgill.com
#
# This has been modified from the original software.
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

__all__ = [
    'DigestTooLargeError',
    'dkim_dns_record',
    'load_private_key',
    'parse_pem_private_key',
    'RSASSA_PKCS1_v1_5_sign',
    'UnparsableKeyError',
    ]

import base64

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


class DigestTooLargeError(Exception):
    """The digest is too large to fit within the requested length."""
    pass


class UnparsableKeyError(Exception):
    """The data could not be parsed as a key."""
    pass


def parse_pem_private_key(data):
    """Parse a PEM RSA private key.

    Both PKCS#1 ("BEGIN RSA PRIVATE KEY") and unencrypted PKCS#8
    ("BEGIN PRIVATE KEY") encodings are accepted.

    @param data: RSA private key in PEM format, as bytes or str.
    @return: RSA private key
    """
    if isinstance(data, str):
        data = data.encode('ascii', 'replace')
    try:
        pk = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise UnparsableKeyError(str(e) or "Private key not found")
    if not isinstance(pk, rsa.RSAPrivateKey):
        raise UnparsableKeyError(
            "Not an RSA private key: %s" % type(pk).__name__)
    return pk


def load_private_key(key):
    """Return an RSA private key object for a key object or PEM text."""
    if isinstance(key, rsa.RSAPrivateKey):
        return key
    if isinstance(key, (bytes, str)):
        return parse_pem_private_key(key)
    raise UnparsableKeyError(
        "Unsupported private key type: %s" % type(key).__name__)


def RSASSA_PKCS1_v1_5_sign(data, private_key):
    """Sign data with RFC3447 RSASSA-PKCS1-v1_5 using SHA-256.

    @param data: byte string to sign
    @param private_key: RSA private key
    @return: signed digest byte string
    """
    try:
        return private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    except ValueError:
        raise DigestTooLargeError()


def dkim_dns_record(private_key):
    """Render the DKIM TXT record value for the public half of a key.

    >>> from cryptography.hazmat.primitives.asymmetric import rsa
    >>> key = rsa.generate_private_key(public_exponent=65537, key_size=1024)
    >>> dkim_dns_record(key).startswith('v=DKIM1; t=s; h=sha256; p=MIGf')
    True
    """
    der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return "v=DKIM1; t=s; h=sha256; p=%s;" % base64.b64encode(der).decode('ascii')
