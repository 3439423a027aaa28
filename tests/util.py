# Copyright (c) 2015-2022 by Ron Frederick <ronf@timeheart.net> and others.
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

"""Utility functions for unit tests"""

import asyncio
import functools
import unittest

from sshkex.dh import get_dh_group
from sshkex.kex_dh import ExchangeContext, MSG_KEXDH_REPLY
from sshkex.packet import Byte, MPInt, SSHPacket, String, encode_fields
from sshkex.public_key import generate_private_key
from sshkex.rsa import _RSAKey


_test_keys = {}


def asynctest(coro):
    """Decorator for async tests, for use with AsyncTestCase"""

    @functools.wraps(coro)
    def async_wrapper(self, *args, **kwargs):
        """Run a coroutine and wait for it to finish"""

        return self.loop.run_until_complete(coro(self, *args, **kwargs))

    return async_wrapper


def get_test_key(alg_name, key_id=0, **kwargs):
    """Generate or return a key with the requested parameters"""

    params = tuple((alg_name, key_id)) + tuple(kwargs.items())

    try:
        key = _test_keys[params]
    except KeyError:
        key = generate_private_key(alg_name, **kwargs)
        _test_keys[params] = key

    return key


def get_test_rsa_key():
    """Return the RSA host key used by key exchange tests"""

    return get_test_key('ssh-rsa', key_size=1024)


def get_small_rsa_key():
    """Return a fixed 368-bit RSA key, the smallest that fits SHA-1

       Current cryptography releases refuse to generate keys this
       small, so the key is built from a pair of fixed primes.

    """

    # pylint: disable=invalid-name

    p = 0xd5523b881af759b74d11b0a4d5cb4c97aa0e3321d2773b
    q = 0xfb4f06f40e7d9a62ecf65785e0792c71d109afe579df89
    e = 65537

    n = p * q
    d = pow(e, -1, (p - 1) * (q - 1))

    return _RSAKey.make_private(n, e, d, p, q, d % (p - 1), d % (q - 1),
                                pow(q, -1, p))


def make_context(host_key_alg=b'ssh-rsa', **kwargs):
    """Return an exchange context filled in with fixed test strings"""

    return ExchangeContext(client_version='client version string',
                           server_version='server version string',
                           client_kexinit='client algorithm packet',
                           server_kexinit='server algorithm packet',
                           host_key_alg=host_key_alg, **kwargs)


def exchange_hash(hash_alg, context, host_key_data, e, f, k, group_data=b''):
    """Compute an exchange hash the way a server would"""

    data = encode_fields(('string', context.client_version),
                         ('string', context.server_version),
                         ('string', context.client_kexinit),
                         ('string', context.server_kexinit),
                         ('string', host_key_data))

    data += group_data
    data += encode_fields(('mpint', e), ('mpint', f), ('mpint', k))

    return hash_alg(data).digest()


def make_reply(host_key_data, f, sig, pkttype=MSG_KEXDH_REPLY):
    """Construct a DH reply message"""

    return b''.join((Byte(pkttype), String(host_key_data),
                     MPInt(f), String(sig)))


class ScriptedChannel:
    """Blocking channel driven by a script of expected messages

       Each message sent by the client is passed to the next handler
       registered with :meth:`expect`, which can inspect it and queue
       messages for the client with :meth:`provide`. Reading when
       nothing has been provided reports the channel as closed.

    """

    def __init__(self):
        self.sent = []

        self._expectations = []
        self._queue = []

    def expect(self, handler):
        """Register a handler for the next message sent by the client"""

        self._expectations.append(handler)

    def provide(self, data):
        """Queue a message or exception for the client to receive"""

        self._queue.append(data)

    def sent_types(self):
        """Return the message types sent by the client so far"""

        return [data[0] for data in self.sent]

    def send(self, data):
        """Record a message sent by the client and run its handler"""

        self.sent.append(data)

        if not self._expectations:
            raise AssertionError('got %r but was not expecting anything' %
                                 data)

        handler = self._expectations.pop(0)
        handler(self, SSHPacket(data))

    def _next(self):
        """Return the next queued message"""

        if not self._queue:
            raise EOFError('expected a message from the server but '
                           'nothing was ready to send')

        data = self._queue.pop(0)

        if isinstance(data, BaseException):
            raise data

        return data

    def receive_next(self):
        """Return the next message for the client"""

        return self._next()


class AsyncScriptedChannel(ScriptedChannel):
    """Asyncio version of the scripted channel

       When nothing has been provided, reading waits forever so that
       timeouts can be exercised.

    """

    async def send(self, data):
        """Record a message sent by the client and run its handler"""

        await asyncio.sleep(0)
        super().send(data)

    async def receive_next(self):
        """Return the next message for the client"""

        if not self._queue:
            await asyncio.get_event_loop().create_future()

        return self._next()


class ServerStub:
    """Server side of a Diffie-Hellman exchange for scripted channels"""

    def __init__(self, host_key, context, hash_alg, group_name='group1',
                 sig_algorithm=None, reply_type=MSG_KEXDH_REPLY):
        self.host_key = host_key
        self.group = get_dh_group(group_name) if group_name else None

        self._context = context
        self._hash_alg = hash_alg
        self._sig_algorithm = sig_algorithm or host_key.sig_algorithms[0]
        self._reply_type = reply_type

        self.k = None
        self.h = None

    def reply(self, e, group_data=b''):
        """Return a valid reply to a client's public value"""

        keypair = self.group.generate_keypair(32)
        f = keypair.e

        self.k = self.group.compute_shared_secret(keypair, e)
        keypair.clear()

        host_key_data = self.host_key.public_data
        self.h = exchange_hash(self._hash_alg, self._context, host_key_data,
                               e, f, self.k, group_data)

        sig = self.host_key.sign(self.h, self._sig_algorithm)

        return make_reply(host_key_data, f, sig, self._reply_type)

    def handle_init(self, channel, packet):
        """Answer a KEXDH init message and then expect new keys"""

        packet.get_byte()
        e = packet.get_mpint()
        packet.check_end()

        channel.provide(self.reply(e))
        channel.expect(self.handle_newkeys)

    def handle_newkeys(self, channel, packet):
        """Answer a new keys message with our own"""

        self.check_newkeys(packet)
        channel.provide(Byte(21))

    @staticmethod
    def check_newkeys(packet):
        """Confirm a message is a bare new keys message"""

        if packet.get_byte() != 21:
            raise AssertionError('expected NEWKEYS')

        packet.check_end()


class AsyncTestCase(unittest.TestCase):
    """Unit test class which supports tests using asyncio"""

    loop = None

    @classmethod
    def setUpClass(cls):
        """Set up event loop to run async tests"""

        super().setUpClass()

        cls.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(cls.loop)

    @classmethod
    def tearDownClass(cls):
        """Close event loop"""

        cls.loop.close()
        asyncio.set_event_loop(None)

        super().tearDownClass()
