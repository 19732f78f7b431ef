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

from collections import namedtuple

from maildkim.errors import ConfigurationError
from maildkim.util import get_default_logger

__all__ = [
    'check_identity',
    'DEFAULT_SELECTOR',
    'Domain',
    'select_identity',
    'SigningIdentity',
    ]

#: Selector used with the server-wide fallback key.
DEFAULT_SELECTOR = 'postal'

#: DKIM readiness status of a domain whose key is published in DNS.
DKIM_STATUS_OK = 'OK'

#: The domain, selector and key a message is signed with.
SigningIdentity = namedtuple(
    'SigningIdentity', ['domain_name', 'selector', 'private_key'])

#: A sending domain as supplied by the domain lookup.  Any object with
#: these attributes may be passed to select_identity().
Domain = namedtuple(
    'Domain', ['name', 'dkim_status', 'dkim_key', 'dkim_identifier'])


def select_identity(domain, config, logger=None):
    """Choose the signing identity for a message.

    A domain whose DKIM status is OK signs with its own key and selector.
    Anything else (no domain, or a domain with an unverified key) falls
    back to the return path host, the server-wide signing key and the
    "postal" selector.

    @param domain: a Domain, or None
    @param config: a maildkim.config.Config
    @param logger: a logger to which debug info will be written
    @return: a SigningIdentity
    @raise ConfigurationError: if the chosen identity has no key, no
    selector or no domain name
    """
    if logger is None:
        logger = get_default_logger()
    if domain is not None and domain.dkim_status == DKIM_STATUS_OK:
        identity = SigningIdentity(
            domain.name, domain.dkim_identifier, domain.dkim_key)
    else:
        if domain is not None:
            logger.debug("domain %s has DKIM status %r, using return path key"
                         % (domain.name, domain.dkim_status))
        if config is None:
            raise ConfigurationError("No configuration for fallback signing key")
        identity = SigningIdentity(
            config.return_path_host, DEFAULT_SELECTOR, config.signing_key)
    check_identity(identity)
    return identity


def check_identity(identity):
    """Raise ConfigurationError unless identity can be used for signing."""
    if not identity.domain_name:
        raise ConfigurationError("Signing identity has no domain name")
    if not identity.selector:
        raise ConfigurationError(
            "No DKIM selector for %s" % identity.domain_name)
    if identity.private_key is None:
        raise ConfigurationError(
            "No DKIM signing key for %s" % identity.domain_name)
