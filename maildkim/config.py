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

"""Server-wide signing configuration.

The return path host and the fallback signing key are read once from the
environment and the configuration directory, then treated as read-only.

MAILDKIM_CONFIG_ROOT        directory holding signing.key (default ./config)
MAILDKIM_SIGNING_KEY_PATH   explicit path of the fallback signing key
MAILDKIM_RETURN_PATH        return path host (default rp.postal.example.com)
MAILDKIM_SKIP_CONFIG_CHECK  set to 1 to skip the key file existence check
"""

import os

from maildkim.crypto import (
    dkim_dns_record,
    parse_pem_private_key,
    UnparsableKeyError,
    )
from maildkim.errors import ConfigurationError
from maildkim.util import get_default_logger

__all__ = [
    'check_config',
    'Config',
    'config_root',
    'signing_key_path',
    ]

DEFAULT_RETURN_PATH = 'rp.postal.example.com'


def config_root(environ=None):
    if environ is None:
        environ = os.environ
    return environ.get('MAILDKIM_CONFIG_ROOT') or os.path.join(
        os.getcwd(), 'config')


def signing_key_path(environ=None):
    if environ is None:
        environ = os.environ
    return environ.get('MAILDKIM_SIGNING_KEY_PATH') or os.path.join(
        config_root(environ), 'signing.key')


def check_config(environ=None):
    """Make sure the fallback signing key exists.

    @raise ConfigurationError: if there is no key file
    """
    if environ is None:
        environ = os.environ
    if environ.get('MAILDKIM_SKIP_CONFIG_CHECK', '0').strip() == '1':
        return
    path = signing_key_path(environ)
    if not os.path.exists(path):
        raise ConfigurationError("No signing key found at %s" % path)


class Config(object):
    """Return path host and fallback signing key."""

    def __init__(self, return_path_host, signing_key):
        if not return_path_host:
            raise ConfigurationError("No return path host configured")
        self.return_path_host = return_path_host
        self.signing_key = signing_key

    def __repr__(self):
        return "Config(return_path_host=%r)" % self.return_path_host

    @classmethod
    def from_environ(cls, environ=None, logger=None):
        """Load the configuration from the environment.

        @raise ConfigurationError: if the key file is missing or unreadable,
        or is not an RSA private key
        """
        if environ is None:
            environ = os.environ
        if logger is None:
            logger = get_default_logger()
        check_config(environ)
        path = signing_key_path(environ)
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except (IOError, OSError) as e:
            raise ConfigurationError(
                "Cannot read signing key %s: %s" % (path, e))
        try:
            key = parse_pem_private_key(data)
        except UnparsableKeyError as e:
            raise ConfigurationError("Bad signing key %s: %s" % (path, e))
        return_path = environ.get('MAILDKIM_RETURN_PATH', DEFAULT_RETURN_PATH)
        logger.debug("loaded signing key %s for %s" % (path, return_path))
        return cls(return_path, key)

    def dns_record(self):
        """TXT record value to publish at postal._domainkey.<return path>."""
        return dkim_dns_record(self.signing_key)
