#!/usr/bin/env python

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

import argparse
import logging
import sys

import maildkim
from maildkim.identity import DEFAULT_SELECTOR


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Produce DKIM signature for email messages.',
        epilog='Without --domain and --key the return path identity from '
               'the MAILDKIM_* environment is used.')
    parser.add_argument('--domain', help='Signing domain (d= tag).')
    parser.add_argument('--selector', default=DEFAULT_SELECTOR,
                        help='Key selector (s= tag): default=%(default)s')
    parser.add_argument('--key', dest='privatekeyfile',
                        help='PEM file holding the RSA private key.')
    parser.add_argument('--timestamp', type=int,
                        help='Signature timestamp (t= tag): default=now')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debugging information to stderr.')
    return parser.parse_args(argv)


def get_identity(args):
    if args.domain or args.privatekeyfile:
        if not (args.domain and args.privatekeyfile):
            raise maildkim.ConfigurationError(
                "--domain and --key must be given together")
        try:
            with open(args.privatekeyfile, "rb") as f:
                key = f.read()
        except (IOError, OSError) as e:
            raise maildkim.ConfigurationError(str(e))
        return maildkim.SigningIdentity(args.domain, args.selector, key)
    return maildkim.select_identity(None, maildkim.Config.from_environ())


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    message = sys.stdin.buffer.read()
    try:
        sig = maildkim.sign(message, identity=get_identity(args),
                            timestamp=args.timestamp)
    except maildkim.DKIMException as e:
        print(e, file=sys.stderr)
        return 1
    eol = b"\r\n" if b"\r\n" in message else b"\n"
    sys.stdout.buffer.write(sig.encode('ascii') + eol)
    sys.stdout.buffer.write(message)
    return 0


if __name__ == '__main__':
    sys.exit(main())
