# Copyright (c) 2017-2019 by Ron Frederick <ronf@timeheart.net> and others.
#
# This program and the accompanying materials are made available under
# the terms of the Eclipse Public License v2.0 which accompanies this
# distribution and is available at:
#
#     http://www.eclipse.org/legal/epl-2.0/
#
# This program may also be made available under the following secondary
# licenses when the conditions for such availability set forth in the
# Eclipse Public License v2.0 are satisfied:
#
#    GNU General Public License, Version 2.0, or any later versions of
#    that license
#
# SPDX-License-Identifier: EPL-2.0 OR GPL-2.0-or-later
#
# Contributors:
#     Ron Frederick - initial implementation, API, and documentation

"""Unit tests for sshkex logging API"""

import threading
import unittest

from hashlib import sha1

import sshkex

from sshkex.kex import get_kex
from sshkex.logging import hexdump, logger

from .util import get_test_rsa_key, make_context
from .util import ScriptedChannel, ServerStub


def _approve_all(host_key_data):
    """Host key verifier which trusts any key"""

    # pylint: disable=unused-argument

    return True


def _run_exchange():
    """Run a key exchange against a server stub"""

    context = make_context()
    stub = ServerStub(get_test_rsa_key(), context, sha1,
                      sig_algorithm=b'ssh-rsa')

    channel = ScriptedChannel()
    channel.expect(stub.handle_init)

    return sshkex.exchange_keys('diffie-hellman-group1-sha1', context,
                                channel, _approve_all)


class _TestLogging(unittest.TestCase):
    """Unit tests for sshkex logging API"""

    def tearDown(self):
        sshkex.set_debug_level(1)
        sshkex.set_log_level('NOTSET')

    def test_logging(self):
        """Test sshkex logging"""

        sshkex.set_log_level('INFO')

        with self.assertLogs(level='INFO') as log:
            logger.info('Test')

        self.assertEqual(len(log.records), 1)
        self.assertEqual(log.records[0].msg, 'Test')
        self.assertEqual(log.records[0].name, 'sshkex')

    def test_debug_levels(self):
        """Test log debug levels"""

        sshkex.set_log_level('DEBUG')

        for debug_level in range(1, 4):
            with self.subTest(debug_level=debug_level):
                sshkex.set_debug_level(debug_level)

                with self.assertLogs(level='DEBUG') as log:
                    logger.debug1('DEBUG')
                    logger.debug2('DEBUG')
                    logger.packet(b'', 'DEBUG')

                self.assertEqual(len(log.records), debug_level)

                for record in log.records:
                    self.assertEqual(record.getMessage(), record.levelname)

    def test_packet_logging(self):
        """Test message dumps"""

        sshkex.set_log_level('DEBUG')
        sshkex.set_debug_level(3)

        with self.assertLogs(level='DEBUG') as log:
            logger.packet(bytes(range(0x10, 0x30)), 'Sent %s', 'KEXDH_INIT')

        self.assertEqual(log.records[0].getMessage(), 'Sent KEXDH_INIT\n' +
                         '  0000  10 11 12 13 14 15 16 17 18 ' +
                         '19 1a 1b 1c 1d 1e 1f  ................\n' +
                         '  0010  20 21 22 23 24 25 26 27 28 ' +
                         '29 2a 2b 2c 2d 2e 2f   !"#$%&\'()*+,-./')

    def test_hexdump_short_line(self):
        """Test that a partial last line keeps the text column aligned"""

        self.assertEqual(hexdump(b'ab\x7f'),
                         '\n  0000  61 62 7f' + 39 * ' ' + '  ab.')
        self.assertEqual(hexdump(b''), '')

    def test_bytes_args(self):
        """Test logging byte string and list arguments"""

        sshkex.set_log_level('INFO')

        with self.assertLogs(level='INFO') as log:
            logger.info('%s: %s', b'alg', [b'a', b'b'])

        self.assertEqual(log.records[0].getMessage(), 'alg: a,b')

    def test_child_context(self):
        """Test context added by child loggers"""

        sshkex.set_log_level('INFO')

        child = logger.get_child(context='kex=1').get_child(context='x=2')

        with self.assertLogs(level='INFO') as log:
            child.info('Test')

        self.assertEqual(log.records[0].msg, '[kex=1, x=2] Test')

    def test_kex_log(self):
        """Test key exchange logging"""

        sshkex.set_log_level('DEBUG')

        with self.assertLogs(level='DEBUG') as log:
            _run_exchange()

        messages = [record.getMessage() for record in log.records]

        self.assertEqual(len(messages), 2)
        self.assertRegex(messages[0], r'\[kex=\d+\] Beginning key exchange: '
                         r'diffie-hellman-group1-sha1')
        self.assertRegex(messages[1], r'\[kex=\d+\] Completed key exchange')

    def test_kex_packet_log(self):
        """Test key exchange state and packet logging"""

        sshkex.set_log_level('DEBUG')
        sshkex.set_debug_level(3)

        with self.assertLogs(level='DEBUG') as log:
            _run_exchange()

        messages = [record.getMessage() for record in log.records]

        self.assertTrue(any('Sent KEXDH_INIT (30)' in msg
                            for msg in messages))
        self.assertTrue(any('Received KEXDH_REPLY (31)' in msg
                            for msg in messages))
        self.assertTrue(any('Sent NEWKEYS (21), 1 byte' in msg
                            for msg in messages))
        self.assertTrue(any('Key exchange state: keys_confirmed' in msg
                            for msg in messages))

    def test_kex_abort_log(self):
        """Test logging when a key exchange is aborted"""

        sshkex.set_log_level('DEBUG')

        channel = ScriptedChannel()
        channel.expect(lambda chan, packet: None)

        with self.assertLogs(level='DEBUG') as log:
            with self.assertRaises(sshkex.ChannelClosed):
                sshkex.exchange_keys('diffie-hellman-group1-sha1',
                                     make_context(), channel, _approve_all)

        self.assertRegex(log.records[-1].getMessage(),
                         r'\[kex=\d+\] Key exchange aborted')

    def test_invalid_debug_level(self):
        """Test invalid debug level"""

        with self.assertRaises(ValueError):
            sshkex.set_debug_level(5)

    def test_kex_ids(self):
        """Test that each key exchange logs with its own id"""

        def _make_kexes(count):
            """Create key exchanges from a worker thread"""

            for _ in range(count):
                kex = get_kex('diffie-hellman-group1-sha1', make_context(),
                              _approve_all)
                contexts.append(kex.logger.context)

        contexts = []
        threads = [threading.Thread(target=_make_kexes, args=(50,))
                   for _ in range(4)]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        self.assertEqual(len(contexts), 200)
        self.assertEqual(len(set(contexts)), 200)

        for context in contexts:
            self.assertRegex(context[0], r'^kex=\d+$')
