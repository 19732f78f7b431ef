import doctest
import sys
import unittest

import maildkim
import maildkim.canonicalization
import maildkim.crypto
from maildkim.tests import test_suite

failures = 0
for module in (maildkim, maildkim.canonicalization, maildkim.crypto):
    failures += doctest.testmod(module).failed
result = unittest.TextTestRunner().run(test_suite())
sys.exit(0 if failures == 0 and result.wasSuccessful() else 1)
