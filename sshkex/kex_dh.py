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

"""SSH Diffie-Hellman key exchange handlers"""

from collections import namedtuple
from hashlib import sha1, sha256, sha512

from .constants import MSG_NEWKEYS
from .dh import DHGroup, get_dh_group
from .host_keys import approve_host_key
from .kex import Kex, compute_key, register_kex_alg
from .misc import InvalidPeerValue, ProtocolError
from .misc import SignatureVerificationFailed, UntrustedHostKey
from .misc import get_symbol_names
from .packet import Byte, MPInt, PacketDecodeError, SSHPacket, String, UInt32
from .public_key import decode_ssh_public_key, get_key_algorithm


# pylint: disable=bad-whitespace

# SSH KEX DH message values
MSG_KEXDH_INIT  = 30
MSG_KEXDH_REPLY = 31

# SSH KEX DH group exchange message values
MSG_KEX_DH_GEX_GROUP       = 31
MSG_KEX_DH_GEX_INIT        = 32
MSG_KEX_DH_GEX_REPLY       = 33
MSG_KEX_DH_GEX_REQUEST     = 34

# Key exchange states
KEX_NEW                = 'new'
KEX_GROUP_REQUESTED    = 'group_requested'
KEX_INIT_SENT          = 'init_sent'
KEX_REPLY_RECEIVED     = 'reply_received'
KEX_HOST_KEY_VERIFIED  = 'host_key_verified'
KEX_SIGNATURE_VERIFIED = 'signature_verified'
KEX_NEWKEYS_SENT       = 'newkeys_sent'
KEX_KEYS_CONFIRMED     = 'keys_confirmed'
KEX_ABORTED            = 'aborted'

# pylint: enable=bad-whitespace

_newkeys_names = {MSG_NEWKEYS: 'NEWKEYS'}

_dh_message_names = get_symbol_names(globals(), 'MSG_KEXDH_', 4)
_dh_message_names.update(_newkeys_names)

_gex_message_names = get_symbol_names(globals(), 'MSG_KEX_DH_GEX_', 4)
_gex_message_names.update(_newkeys_names)

# Short variable names are used here, matching names in RFC 4253
# pylint: disable=invalid-name


class ExchangeContext(namedtuple('ExchangeContext',
                                 'client_version, server_version, '
                                 'client_kexinit, server_kexinit, '
                                 'host_key_alg, need_bytes, session_id',
                                 defaults=(b'', b'', b'', b'', b'ssh-rsa',
                                           None, None))):
    """Inputs to a key exchange collected by the transport

       The version strings are those sent by each side without the
       trailing CR LF, and the KEXINIT values are the full payloads of
       each side's KEXINIT message. The host key algorithm is the one
       selected during algorithm negotiation.

       If `need_bytes` is set, the private DH exponent is at least
       that many bytes long. If `session_id` is set, as it should be
       when re-keying, it is reported as the session id of the result
       in place of the new exchange hash.

       A context can't be changed once built. Use :meth:`_replace` to
       derive the context for a re-key from the previous one.

    """

    __slots__ = ()


class ExchangeResult(namedtuple('ExchangeResult',
                                'session_id, server_key, shared_secret, '
                                'hashing_algorithm, exchange_hash, '
                                'algorithm')):
    """Result of a completed key exchange

       .. attribute:: session_id

          The session identifier, which is the exchange hash of the
          first key exchange on a connection

       .. attribute:: server_key

          The server host key, as an :class:`SSHKey` public key

       .. attribute:: shared_secret

          The shared secret K, as an integer

       .. attribute:: hashing_algorithm

          The hash constructor used by this exchange, such as
          `hashlib.sha1`

       .. attribute:: exchange_hash

          The exchange hash H computed by this exchange

       .. attribute:: algorithm

          The name of the key exchange algorithm which was run

    """

    __slots__ = ()

    def compute_key(self, x, keylen):
        """Derive transport key material for key letter `x`"""

        return compute_key(self.hashing_algorithm, self.shared_secret,
                           self.exchange_hash, x, self.session_id, keylen)


def _to_bytes(value):
    """Convert a negotiated algorithm name to bytes"""

    return value.encode('ascii') if isinstance(value, str) else value


class _KexDHBase(Kex):
    """Client side of a Diffie-Hellman key exchange

       The handler doesn't do any I/O itself. Calling :meth:`start`
       and :meth:`process_packet` returns the messages which need to
       be sent to the server, and the caller feeds each message from
       the server back in until :attr:`done` becomes true.

    """

    _init_type = None
    _reply_type = None
    packet_handlers = {}

    def __init__(self, alg, context, verifier, hash_alg, options, group):
        super().__init__(alg, hash_alg, options)

        self._context = context
        self._verifier = verifier
        self._group = group
        self._host_key_alg = _to_bytes(context.host_key_alg)
        self._need_bytes = (context.need_bytes or options.need_bytes or
                            hash_alg().digest_size)

        self._state = KEX_NEW
        self._expected = None
        self._outbound = []
        self._keypair = None
        self._result = None

    @property
    def state(self):
        """The current state of this key exchange"""

        return self._state

    @property
    def done(self):
        """Whether this key exchange has finished, successfully or not"""

        return self._state in (KEX_KEYS_CONFIRMED, KEX_ABORTED)

    @property
    def keypair(self):
        """The ephemeral DH key pair, cleared once the exchange ends"""

        return self._keypair

    def _set_state(self, state):
        """Advance to a new state"""

        self.logger.debug2('Key exchange state: %s', state)
        self._state = state

    def _send_packet(self, pkttype, *args):
        """Queue a kex packet to be sent"""

        payload = Byte(pkttype) + b''.join(args)

        self.log_message('Sent', payload)
        self._outbound.append(payload)

    def _run(self, handler, *args):
        """Run a step of the exchange and collect the messages it sends"""

        try:
            handler(*args)
        except BaseException as exc:
            self.abort(exc)
            raise

        outbound, self._outbound = self._outbound, []
        return outbound

    def _get_name(self, pkttype):
        """Return a message type name for error reports"""

        return '%s (%d)' % (self.get_message_name(pkttype), pkttype)

    def start(self):
        """Begin the exchange, returning the messages to send"""

        if self._state != KEX_NEW:
            raise ProtocolError('Key exchange already started')

        self.logger.debug1('Beginning key exchange: %s', self.algorithm)

        return self._run(self._start)

    def process_packet(self, data):
        """Consume one inbound message, returning the messages to send"""

        if self.done:
            raise ProtocolError('Key exchange already finished')

        if self._expected is None:
            raise ProtocolError('Key exchange not started')

        return self._run(self._dispatch, data)

    def abort(self, exc):
        """Abandon the exchange, discarding any secret state"""

        if self._state != KEX_ABORTED:
            self.logger.debug1('Key exchange aborted: %s', exc)
            self._state = KEX_ABORTED

        self._expected = None
        self._outbound = []
        self._result = None

        if self._keypair:
            self._keypair.clear()

        return exc

    def _dispatch(self, data):
        """Check the type of an inbound message and process it"""

        packet = SSHPacket(data)

        try:
            pkttype = packet.get_byte()
        except PacketDecodeError as exc:
            raise ProtocolError('Empty key exchange message') from exc

        self.log_message('Received', data)

        if pkttype != self._expected:
            raise ProtocolError('Unexpected key exchange message: '
                                'expected %s, got %s' %
                                (self._get_name(self._expected),
                                 self._get_name(pkttype)))

        self._expected = None

        try:
            self.packet_handlers[pkttype](self, pkttype, packet)
        except PacketDecodeError as exc:
            raise ProtocolError('Invalid %s message: %s' %
                                (self._get_name(pkttype), exc)) from exc

    def _start(self):
        """Send the first message of the exchange"""

        self._send_init()

    def _send_init(self):
        """Generate a DH key pair and send its public value"""

        self._keypair = self._group.generate_keypair(self._need_bytes)

        self._send_packet(self._init_type, MPInt(self._keypair.e))

        self._set_state(KEX_INIT_SENT)
        self._expected = self._reply_type

    def _get_group_hash_data(self):
        """Return group parameters included in the exchange hash"""

        # pylint: disable=no-self-use

        return b''

    def compute_hash(self, host_key_data, e, f, k):
        """Compute the exchange hash H"""

        context = self._context

        hash_obj = self._hash_alg()
        hash_obj.update(String(context.client_version))
        hash_obj.update(String(context.server_version))
        hash_obj.update(String(context.client_kexinit))
        hash_obj.update(String(context.server_kexinit))
        hash_obj.update(String(host_key_data))
        hash_obj.update(self._get_group_hash_data())
        hash_obj.update(MPInt(e))
        hash_obj.update(MPInt(f))
        hash_obj.update(MPInt(k))
        return hash_obj.digest()

    def _verify_host_key(self, host_key_data, h, sig):
        """Check the host key is trusted and signed the exchange hash"""

        if not approve_host_key(self._verifier, host_key_data):
            raise UntrustedHostKey('Host key is not trusted')

        self._set_state(KEX_HOST_KEY_VERIFIED)

        host_key = decode_ssh_public_key(host_key_data)

        if host_key.algorithm != get_key_algorithm(self._host_key_alg):
            raise ProtocolError('Host key type %s does not match '
                                'negotiated algorithm %s' %
                                (host_key.get_algorithm(),
                                 self._host_key_alg.decode('ascii',
                                                           'replace')))

        if not host_key.verify(h, sig, self._host_key_alg):
            raise SignatureVerificationFailed('Key exchange hash mismatch')

        self._set_state(KEX_SIGNATURE_VERIFIED)
        return host_key

    def _process_reply(self, pkttype, packet):
        """Process a DH reply message"""

        # pylint: disable=unused-argument

        host_key_data = packet.get_string()
        f = packet.get_mpint()
        sig = packet.get_string()
        packet.check_end()

        self._set_state(KEX_REPLY_RECEIVED)

        e = self._keypair.e
        k = self._group.compute_shared_secret(self._keypair, f)

        if k <= 1: # pragma: no cover, shouldn't be possible with valid p
            raise InvalidPeerValue('Kex DH k out of range')

        h = self.compute_hash(host_key_data, e, f, k)

        host_key = self._verify_host_key(host_key_data, h, sig)

        self._keypair.clear()

        self._result = ExchangeResult(self._context.session_id or h,
                                      host_key, k, self._hash_alg, h,
                                      self.algorithm)

        self._send_packet(MSG_NEWKEYS)

        self._set_state(KEX_NEWKEYS_SENT)
        self._expected = MSG_NEWKEYS

    def _process_newkeys(self, pkttype, packet):
        """Process the server's new keys message"""

        # pylint: disable=unused-argument

        packet.check_end()

        self._set_state(KEX_KEYS_CONFIRMED)
        self.logger.debug1('Completed key exchange: %s', self.algorithm)

    def get_result(self):
        """Return the result of a successful exchange, or `None`"""

        return self._result if self._state == KEX_KEYS_CONFIRMED else None


class _KexDH(_KexDHBase):
    """Handler for Diffie-Hellman key exchange with a fixed group"""

    _init_type = MSG_KEXDH_INIT
    _reply_type = MSG_KEXDH_REPLY
    _message_names = _dh_message_names

    def __init__(self, alg, context, verifier, hash_alg, options, group_name):
        super().__init__(alg, context, verifier, hash_alg, options,
                         get_dh_group(group_name))

    packet_handlers = {
        MSG_KEXDH_REPLY:    _KexDHBase._process_reply,
        MSG_NEWKEYS:        _KexDHBase._process_newkeys
    }


class _KexDHGex(_KexDHBase):
    """Handler for Diffie-Hellman group exchange"""

    _init_type = MSG_KEX_DH_GEX_INIT
    _reply_type = MSG_KEX_DH_GEX_REPLY
    _message_names = _gex_message_names

    def __init__(self, alg, context, verifier, hash_alg, options):
        super().__init__(alg, context, verifier, hash_alg, options, None)

        self._min_size = options.gex_min_size
        self._max_size = options.gex_max_size

        self._request = (UInt32(options.gex_min_size) +
                         UInt32(options.gex_preferred_size) +
                         UInt32(options.gex_max_size))

    def _start(self):
        """Request a DH group from the server"""

        self._send_packet(MSG_KEX_DH_GEX_REQUEST, self._request)

        self._set_state(KEX_GROUP_REQUESTED)
        self._expected = MSG_KEX_DH_GEX_GROUP

    def _get_group_hash_data(self):
        """Return group parameters included in the exchange hash"""

        return b''.join((self._request, MPInt(self._group.p),
                         MPInt(self._group.g)))

    def _process_group(self, pkttype, packet):
        """Process a DH gex group message"""

        # pylint: disable=unused-argument

        p = packet.get_mpint()
        g = packet.get_mpint()
        packet.check_end()

        if not self._min_size <= p.bit_length() <= self._max_size:
            raise InvalidPeerValue('DH group size %d outside requested '
                                   'range' % p.bit_length())

        self._group = DHGroup.from_params(p, g)

        self._send_init()

    packet_handlers = {
        MSG_KEX_DH_GEX_GROUP:   _process_group,
        MSG_KEX_DH_GEX_REPLY:   _KexDHBase._process_reply,
        MSG_NEWKEYS:            _KexDHBase._process_newkeys
    }


# pylint: disable=bad-whitespace

register_kex_alg(b'diffie-hellman-group-exchange-sha256', _KexDHGex, sha256,
                 (), True)
register_kex_alg(b'diffie-hellman-group16-sha512',        _KexDH,    sha512,
                 ('group16',), True)
register_kex_alg(b'diffie-hellman-group18-sha512',        _KexDH,    sha512,
                 ('group18',), True)
register_kex_alg(b'diffie-hellman-group14-sha256',        _KexDH,    sha256,
                 ('group14',), True)
register_kex_alg(b'diffie-hellman-group14-sha1',          _KexDH,    sha1,
                 ('group14',), True)
register_kex_alg(b'diffie-hellman-group-exchange-sha1',   _KexDHGex, sha1,
                 (), True)
register_kex_alg(b'diffie-hellman-group1-sha1',           _KexDH,    sha1,
                 ('group1',), True)
