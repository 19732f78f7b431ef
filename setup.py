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
# Copyright (c) 2011 Scott Kitterman <scott@kitterman.com>

from setuptools import setup

version = "1.0"

setup(
    name = "maildkim",
    version = version,
    description = "DKIM signing for outbound mail",
    long_description =
    """maildkim signs outbound RFC 5322 messages with DKIM (DomainKeys
Identified Mail) using relaxed/relaxed canonicalization and rsa-sha256,
choosing between a domain's own key and a server-wide return path key.""",
    license = "BSD-like",
    python_requires = ">=3.7",
    packages = ["maildkim", "maildkim.tests"],
    package_data = {"maildkim.tests": ["data/*"]},
    scripts = ["dkimsign.py"],
    install_requires = ["cryptography"],
)
