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
#
# This has been modified from the original software.
# Copyright (c) 2016 Scott Kitterman <scott@kitterman.com>
#


import base64
import re
import time

from maildkim.canonicalization import (
    body_hash,
    parse_headers,
    Relaxed,
    select_headers,
    SIGNED_HEADERS,
    split_message,
    )
from maildkim.config import Config
from maildkim.crypto import (
    DigestTooLargeError,
    load_private_key,
    RSASSA_PKCS1_v1_5_sign,
    UnparsableKeyError,
    )
from maildkim.errors import (
    ConfigurationError,
    DKIMException,
    KeyFormatError,
    MalformedMessageError,
    SigningError,
    )
from maildkim.identity import (
    check_identity,
    Domain,
    select_identity,
    SigningIdentity,
    )
from maildkim.util import get_default_logger

__all__ = [
    "Config",
    "ConfigurationError",
    "DKIM",
    "DKIMException",
    "Domain",
    "KeyFormatError",
    "MalformedMessageError",
    "select_identity",
    "sign",
    "SigningError",
    "SigningIdentity",
]

SIGNATURE_ALGORITHM = b'rsa-sha256'
CANONICALIZATION = Relaxed.name + b'/' + Relaxed.name
RE_DOMAIN = re.compile(br'[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?\Z')


def message_bytes(message):
    """Return the message as bytes; text is encoded as UTF-8.

    >>> message_bytes('Subject: caf\\xe9')
    b'Subject: caf\\xc3\\xa9'
    """
    if isinstance(message, bytes):
        return message
    try:
        return message.encode('utf-8')
    except UnicodeEncodeError as e:
        raise MalformedMessageError("Message cannot be encoded: %s" % e)


def identity_bytes(identity):
    """Return (domain, selector) of a SigningIdentity as ASCII bytes.

    Internationalized domain names are converted to their A-label form.
    """
    domain, selector = identity.domain_name, identity.selector
    try:
        if isinstance(domain, bytes):
            domain.decode('ascii')
        else:
            domain = domain.encode('idna')
        if isinstance(selector, bytes):
            selector.decode('ascii')
        else:
            selector = selector.encode('ascii')
    except UnicodeError as e:
        raise ConfigurationError("Invalid signing identity %r: %s"
                                 % (identity.domain_name, e))
    for x in (domain, selector):
        if RE_DOMAIN.match(x) is None:
            raise ConfigurationError("Invalid signing identity: %r" % x)
    return domain, selector


def signature_tags(domain, selector, timestamp, bodyhash, header_names):
    """Return the DKIM-Signature tags that precede b=, in order.

    v=1 is rendered separately, ahead of these.
    """
    return [
        (b'a', SIGNATURE_ALGORITHM),
        (b'c', CANONICALIZATION),
        (b'd', domain),
        (b's', selector),
        (b't', str(int(timestamp)).encode('ascii')),
        (b'bh', bodyhash),
        (b'h', b':'.join(header_names)),
    ]


def render_properties(tags, signature=b''):
    """Render tags as they follow "v=1;" in the header, ending in b=.

    >>> render_properties([(b'a', b'rsa-sha256'), (b'd', b'example.com')])
    b' a=rsa-sha256; d=example.com; b='
    """
    return b''.join(b' ' + k + b'=' + v + b';' for k, v in tags) \
        + b' b=' + signature


#: Hold a message and options during DKIM signing.
class DKIM(object):

  #: Header fields which are signed when present.
  SIGNED_HEADERS = SIGNED_HEADERS

  #: Create a DKIM instance to sign rfc5322 messages.
  #:
  #: @param message: an RFC822 formatted message to be signed
  #: (with either \\n or \\r\\n line endings), bytes or str
  #: @param logger: a logger to which debug info will be written (default None)
  #: @param minkey: the minimum key size to accept
  def __init__(self, message=None, logger=None, minkey=1024):
    if logger is None:
        logger = get_default_logger()
    self.logger = logger
    #: Minimum private key size.  Shorter keys raise SigningError. The
    #: default is 1024
    self.minkey = minkey
    self.set_message(message)

  #: Load a new message to be signed.
  #: @param message: an RFC822 formatted message to be signed
  #: @raise MalformedMessageError: when the header block cannot be parsed
  def set_message(self, message):
    if message:
      header_block, self.body = split_message(message_bytes(message))
      self.headers = parse_headers(header_block)
    else:
      self.headers, self.body = [], b''
    #: The DKIM signing domain last signed.
    self.domain = None
    #: The DKIM key selector last signed.
    self.selector = None
    #: Signature tags of the last signature, including b=.
    self.signature_fields = {}
    #: The canonicalized (name, value) pairs last signed.
    self.signed_headers = []

  #: Sign the message and return the DKIM-Signature header line.
  #:
  #: Every header field in SIGNED_HEADERS that is present is signed, in
  #: message order; repeated fields are each signed.
  #:
  #: @param identity: the SigningIdentity to sign with
  #: @param timestamp: the t= value (default now)
  #: @return: DKIM-Signature header field, without a line terminator
  #: @raise DKIMException: when the message, identity, or key are badly
  #: formed.
  def sign(self, identity, timestamp=None):
    check_identity(identity)
    domain, selector = identity_bytes(identity)

    try:
        pk = load_private_key(identity.private_key)
    except UnparsableKeyError as e:
        raise KeyFormatError(str(e))
    keysize = pk.key_size
    if keysize < self.minkey:
        raise SigningError("%d bit key is smaller than the %d bit minimum"
                           % (keysize, self.minkey))

    if not self.headers:
        raise MalformedMessageError("No message to sign")
    sign_headers = select_headers(self.headers, self.SIGNED_HEADERS)
    cheaders = Relaxed.canonicalize_headers(sign_headers)
    header_names = [x for x, y in cheaders]
    if b'from' not in header_names:
        self.logger.warning("signing message without a From header field")

    bodyhash = body_hash(self.body)
    self.logger.debug("bh: %s" % bodyhash)

    if timestamp is None:
        timestamp = time.time()
    tags = signature_tags(domain, selector, timestamp, bodyhash, header_names)

    # the dkim sig is hashed with an empty b= and no trailing crlf
    signable = b"\r\n".join(
        [x + b":" + y for x, y in cheaders]
        + [b"dkim-signature:v=1;" + render_properties(tags)])
    self.logger.debug("sign headers: %r" % header_names)

    try:
        sig = RSASSA_PKCS1_v1_5_sign(signable, pk)
    except DigestTooLargeError:
        raise SigningError("digest too large for modulus")
    b = base64.b64encode(sig)

    self.domain = domain
    self.selector = selector
    self.signed_headers = cheaders
    self.signature_fields = dict([(b'v', b'1')] + tags + [(b'b', b)])
    header = b'DKIM-Signature: v=1;' + render_properties(tags, b)
    return header.decode('ascii')


def sign(message, identity=None, domain=None, config=None, logger=None,
         timestamp=None, minkey=1024):
    """Sign an RFC822 message and return the DKIM-Signature header line.

    The identity is either given directly or chosen from the domain and
    the server-wide configuration (see L{select_identity}), and is checked
    before the message is examined.

    @param message: an RFC822 formatted message (with either \\n or \\r\\n
    line endings), bytes or str
    @param identity: the SigningIdentity to sign with
    @param domain: the sending Domain, or None, when identity is not given
    @param config: the Config supplying the fallback identity
    @param logger: a logger to which debug info will be written
    @param timestamp: the t= value (default now)
    @param minkey: the minimum key size to accept
    @return: DKIM-Signature header field as str, without a line terminator
    @raise DKIMException: when the message, identity, or key are badly formed
    """
    if identity is None:
        identity = select_identity(domain, config, logger=logger)
    # fail before the message is parsed
    check_identity(identity)
    identity_bytes(identity)
    d = DKIM(message, logger=logger, minkey=minkey)
    return d.sign(identity, timestamp=timestamp)
