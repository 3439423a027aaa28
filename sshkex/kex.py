# Copyright (c) 2013-2022 by Ron Frederick <ronf@timeheart.net> and others.
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

"""SSH key exchange handlers"""

import asyncio
import inspect
import itertools
import socket
import threading

from contextlib import contextmanager

from .logging import logger
from .misc import ChannelClosed, ExchangeTimeout, KeyExchangeFailed
from .misc import Options, ProtocolError, plural
from .packet import MPInt


# SSH KEX group exchange key sizes
KEX_DH_GEX_MIN_SIZE        = 1024
KEX_DH_GEX_PREFERRED_SIZE  = 2048
KEX_DH_GEX_MAX_SIZE        = 8192


_kex_algs = []
_default_kex_algs = []
_kex_handlers = {}

_active_channels = set()
_active_lock = threading.Lock()

_kex_ids = itertools.count(1)


class Kex:
    """Parent class for key exchange handlers"""

    _message_names = {}

    def __init__(self, alg, hash_alg, options):
        self.algorithm = alg

        self._hash_alg = hash_alg
        self._options = options

        self._logger = logger.get_child(context='kex=%d' % next(_kex_ids))

    @property
    def logger(self):
        """A logger associated with this key exchange"""

        return self._logger

    @property
    def options(self):
        """The options in effect for this key exchange"""

        return self._options

    @property
    def hash_alg(self):
        """The hash constructor used by this key exchange"""

        return self._hash_alg

    def get_message_name(self, pkttype):
        """Return a printable name for a key exchange message type"""

        return self._message_names.get(pkttype, 'message')

    def log_message(self, direction, data):
        """Dump a sent or received key exchange message"""

        pkttype = data[0]

        self._logger.packet(data, '%s %s (%d), %s', direction,
                            self.get_message_name(pkttype), pkttype,
                            plural(len(data), 'byte'))

    def start(self):
        """Begin the exchange, returning the messages to send"""

        raise NotImplementedError

    def process_packet(self, data):
        """Consume one inbound message, returning the messages to send"""

        raise NotImplementedError

    def abort(self, exc):
        """Abandon the exchange after a failure"""

        raise NotImplementedError


def compute_key(hash_alg, k, h, x, session_id, keylen):
    """Compute keys from output of key exchange

       This derives `keylen` bytes of transport key material for the
       key letter `x` (one of b'A' through b'F'), per RFC 4253.

    """

    key = b''
    while len(key) < keylen:
        hash_obj = hash_alg()
        hash_obj.update(MPInt(k))
        hash_obj.update(h)
        hash_obj.update(key if key else x + session_id)
        key += hash_obj.digest()

    return key[:keylen]


class SSHKexOptions(Options):
    """SSH key exchange options

       :param kex_algs: (optional)
           A list of key exchange algorithms this side is willing to
           complete, defaulting to all default algorithms
       :param need_bytes: (optional)
           The minimum size in bytes of the private DH exponent, used
           when the exchange context doesn't specify one. If not set,
           the digest size of the exchange hash is used.
       :param timeout: (optional)
           The time in seconds to wait for each message from the peer
           when running the exchange on an asyncio channel
       :param gex_min_size: (optional)
           The minimum DH prime size to request in a group exchange
       :param gex_preferred_size: (optional)
           The preferred DH prime size to request in a group exchange
       :param gex_max_size: (optional)
           The maximum DH prime size to request in a group exchange
       :type kex_algs: `list` of `str` or `bytes`
       :type need_bytes: `int`
       :type timeout: `int` or `float`
       :type gex_min_size: `int`
       :type gex_preferred_size: `int`
       :type gex_max_size: `int`

    """

    # pylint: disable=arguments-differ
    def prepare(self, kex_algs=(), need_bytes=None, timeout=None,
                gex_min_size=KEX_DH_GEX_MIN_SIZE,
                gex_preferred_size=KEX_DH_GEX_PREFERRED_SIZE,
                gex_max_size=KEX_DH_GEX_MAX_SIZE):
        """Prepare key exchange options"""

        if kex_algs:
            kex_algs = [alg.encode('ascii') if isinstance(alg, str) else alg
                        for alg in kex_algs]

            for alg in kex_algs:
                if alg not in _kex_handlers:
                    raise ValueError('Unknown kex algorithm: %s' %
                                     alg.decode('ascii', errors='replace'))
        else:
            kex_algs = get_default_kex_algs()

        if need_bytes is not None and need_bytes <= 0:
            raise ValueError('need_bytes must be positive')

        if timeout is not None and timeout <= 0:
            raise ValueError('Key exchange timeout must be positive')

        if not gex_min_size <= gex_preferred_size <= gex_max_size:
            raise ValueError('Group exchange sizes must satisfy '
                             'min <= preferred <= max')

        self.kex_algs = kex_algs
        self.need_bytes = need_bytes
        self.timeout = timeout
        self.gex_min_size = gex_min_size
        self.gex_preferred_size = gex_preferred_size
        self.gex_max_size = gex_max_size


def register_kex_alg(alg, handler, hash_alg, args, default):
    """Register a key exchange algorithm"""

    _kex_algs.append(alg)

    if default:
        _default_kex_algs.append(alg)

    _kex_handlers[alg] = (handler, hash_alg, args)


def get_kex_algs():
    """Return supported key exchange algorithms"""

    return _kex_algs


def get_default_kex_algs():
    """Return default key exchange algorithms"""

    return _default_kex_algs


def get_kex(alg, context, verifier, options=None):
    """Return a key exchange handler

       The function looks up a key exchange algorithm and returns a
       handler which can perform that type of key exchange.

    """

    if isinstance(alg, str):
        alg = alg.encode('ascii')

    options = SSHKexOptions(options)

    if alg not in options.kex_algs:
        raise KeyExchangeFailed('Key exchange algorithm not enabled: %s' %
                                alg.decode('ascii', errors='replace'))

    handler, hash_alg, args = _kex_handlers[alg]

    return handler(alg, context, verifier, hash_alg, options, *args)


@contextmanager
def _exclusive(channel):
    """Allow only one key exchange at a time on a channel"""

    with _active_lock:
        if id(channel) in _active_channels:
            raise ProtocolError('Key exchange already in progress')

        _active_channels.add(id(channel))

    try:
        yield
    finally:
        with _active_lock:
            _active_channels.discard(id(channel))


@contextmanager
def _channel_errors(kex):
    """Map channel failures to key exchange errors"""

    try:
        yield
    except (asyncio.TimeoutError, socket.timeout, TimeoutError) as exc:
        raise kex.abort(ExchangeTimeout('Timed out waiting for '
                                        'key exchange message')) from exc
    except (EOFError, ConnectionError) as exc:
        raise kex.abort(ChannelClosed('Channel closed during '
                                      'key exchange')) from exc


def _check_message(kex, data):
    """Treat an empty read as the channel being closed"""

    if not data:
        raise kex.abort(ChannelClosed('Channel closed during key exchange'))

    return data


def exchange_keys(alg, context, channel, verifier, options=None):
    """Run a key exchange over a blocking channel

       The channel must provide `send(data)`, and `receive_next()`
       which blocks until the next message payload arrives. The
       verifier is consulted about the server host key, either through
       an `approve(host_key_data)` method or by being called directly.

       :returns: :class:`ExchangeResult <sshkex.kex_dh.ExchangeResult>`

       :raises: :exc:`ProtocolError`, :exc:`InvalidPeerValue`,
                :exc:`UntrustedHostKey`,
                :exc:`SignatureVerificationFailed`,
                :exc:`MalformedHostKey`, :exc:`ChannelClosed` or
                :exc:`ExchangeTimeout`

    """

    kex = get_kex(alg, context, verifier, options)

    with _exclusive(channel):
        try:
            for data in kex.start():
                with _channel_errors(kex):
                    channel.send(data)

            while not kex.done:
                with _channel_errors(kex):
                    data = channel.receive_next()

                for reply in kex.process_packet(_check_message(kex, data)):
                    with _channel_errors(kex):
                        channel.send(reply)
        except BaseException as exc:
            kex.abort(exc)
            raise

    return kex.get_result()


async def exchange_keys_async(alg, context, channel, verifier,
                              options=None):
    """Run a key exchange over an asyncio channel

       This is the coroutine form of :func:`exchange_keys`. Here
       `channel.receive_next()` is a coroutine, and `channel.send()`
       may be either a plain function or a coroutine. If the options
       set a timeout, each wait for a message from the peer is bounded
       by it.

    """

    kex = get_kex(alg, context, verifier, options)
    timeout = kex.options.timeout

    async def _send(data):
        """Send a message, waiting for it if the channel is async"""

        with _channel_errors(kex):
            result = channel.send(data)

            if inspect.isawaitable(result):
                await result

    with _exclusive(channel):
        try:
            for data in kex.start():
                await _send(data)

            while not kex.done:
                with _channel_errors(kex):
                    data = await asyncio.wait_for(channel.receive_next(),
                                                  timeout)

                for reply in kex.process_packet(_check_message(kex, data)):
                    await _send(reply)
        except BaseException as exc:
            kex.abort(exc)
            raise

    return kex.get_result()
