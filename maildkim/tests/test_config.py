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

import os.path
import shutil
import tempfile
import unittest

from maildkim.config import (
    check_config,
    Config,
    config_root,
    signing_key_path,
    )
from maildkim.errors import ConfigurationError
from maildkim.tests.test_dkim import read_test_data


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()
        self.key_path = os.path.join(self.root, 'signing.key')
        with open(self.key_path, 'wb') as f:
            f.write(read_test_data("test.private"))

    def tearDown(self):
        shutil.rmtree(self.root)

    def test_paths(self):
        environ = {'MAILDKIM_CONFIG_ROOT': self.root}
        self.assertEqual(self.root, config_root(environ))
        self.assertEqual(self.key_path, signing_key_path(environ))

    def test_default_root(self):
        self.assertEqual(
            os.path.join(os.getcwd(), 'config'), config_root({}))

    def test_key_path_override(self):
        environ = {'MAILDKIM_CONFIG_ROOT': '/nowhere',
                   'MAILDKIM_SIGNING_KEY_PATH': self.key_path}
        self.assertEqual(self.key_path, signing_key_path(environ))

    def test_from_environ(self):
        config = Config.from_environ({
            'MAILDKIM_CONFIG_ROOT': self.root,
            'MAILDKIM_RETURN_PATH': 'rp.example.net'})
        self.assertEqual('rp.example.net', config.return_path_host)
        self.assertEqual(2048, config.signing_key.key_size)

    def test_default_return_path(self):
        config = Config.from_environ({'MAILDKIM_CONFIG_ROOT': self.root})
        self.assertEqual('rp.postal.example.com', config.return_path_host)

    def test_empty_return_path(self):
        self.assertRaises(
            ConfigurationError, Config.from_environ,
            {'MAILDKIM_CONFIG_ROOT': self.root, 'MAILDKIM_RETURN_PATH': ''})

    def test_missing_key(self):
        environ = {'MAILDKIM_CONFIG_ROOT': os.path.join(self.root, 'none')}
        self.assertRaises(ConfigurationError, check_config, environ)
        self.assertRaises(ConfigurationError, Config.from_environ, environ)

    def test_skip_config_check(self):
        environ = {'MAILDKIM_CONFIG_ROOT': os.path.join(self.root, 'none'),
                   'MAILDKIM_SKIP_CONFIG_CHECK': '1'}
        check_config(environ)

    def test_bad_key(self):
        with open(self.key_path, 'wb') as f:
            f.write(b'not a key')
        self.assertRaises(
            ConfigurationError, Config.from_environ,
            {'MAILDKIM_CONFIG_ROOT': self.root})

    def test_dns_record(self):
        config = Config.from_environ({'MAILDKIM_CONFIG_ROOT': self.root})
        record = config.dns_record()
        self.assertTrue(record.startswith('v=DKIM1; t=s; h=sha256; p=MIIB'))


def test_suite():
    from unittest import TestLoader
    return TestLoader().loadTestsFromName(__name__)
