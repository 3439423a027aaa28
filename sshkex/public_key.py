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

"""SSH host key handlers"""

from .packet import PacketDecodeError, SSHPacket, String


_public_key_algs = []
_public_key_alg_map = {}
_sig_alg_map = {}


class KeyGenerationError(ValueError):
    """Key generation error

       This exception is raised by :func:`generate_private_key` when
       the requested parameters are unsupported.

    """


class KeyImportError(ValueError):
    """Key import error

       This exception is raised by key import functions when the
       data provided cannot be imported as a valid key.

    """


class MalformedHostKey(KeyImportError):
    """Host key blob sent by the server could not be decoded"""


class SSHKey:
    """Parent class which holds an asymmetric encryption key"""

    algorithm = None
    sig_algorithms = None
    all_sig_algorithms = None

    def __init__(self, key=None):
        self._key = key

    def __eq__(self, other):
        return (isinstance(other, SSHKey) and
                self.public_data == other.public_data)

    def __hash__(self):
        return hash(self.public_data)

    @property
    def pyca_key(self):
        """Return the PyCA key wrapped by this key"""

        return self._key.pyca_key

    @property
    def public_data(self):
        """Return the SSH wire encoding of the public key"""

        return self.get_ssh_public_key()

    def get_algorithm(self):
        """Return the algorithm associated with this key"""

        return self.algorithm.decode('ascii')

    def sign_ssh(self, data, sig_algorithm):
        """Abstract method to compute an SSH-encoded signature"""

        raise NotImplementedError

    def verify_ssh(self, data, sig_algorithm, sig):
        """Abstract method to verify an SSH-encoded signature"""

        raise NotImplementedError

    def sign(self, data, sig_algorithm):
        """Return an SSH-encoded signature of the specified data"""

        if sig_algorithm not in self.all_sig_algorithms:
            raise ValueError('Unrecognized signature algorithm')

        return b''.join((String(sig_algorithm),
                         String(self.sign_ssh(data, sig_algorithm))))

    def verify(self, data, sig, sig_algorithm=None):
        """Verify an SSH signature of the specified data using this key

           A signature which is malformed, uses an algorithm this key
           doesn't support, or doesn't match results in `False` being
           returned rather than an exception. If `sig_algorithm` is
           set, the signature must also have been made with it.

        """

        try:
            packet = SSHPacket(sig)
            alg = packet.get_string()
            sig = packet.get_string()
            packet.check_end()
        except PacketDecodeError:
            return False

        if alg not in self.all_sig_algorithms:
            return False

        if sig_algorithm is not None and alg != sig_algorithm:
            return False

        return self.verify_ssh(data, alg, sig)

    def encode_ssh_public(self):
        """Export parameters associated with an OpenSSH public key"""

        raise NotImplementedError

    def get_ssh_public_key(self):
        """Return OpenSSH public key in binary format"""

        return String(self.algorithm) + self.encode_ssh_public()


def register_public_key_alg(algorithm, handler, sig_algorithms=None):
    """Register a new public key algorithm"""

    if not sig_algorithms:
        sig_algorithms = handler.sig_algorithms

    _public_key_alg_map[algorithm] = handler
    _public_key_algs.extend(sig_algorithms)

    for sig_algorithm in sig_algorithms:
        _sig_alg_map[sig_algorithm] = algorithm


def get_public_key_algs():
    """Return supported public key algorithms"""

    return _public_key_algs


def get_key_algorithm(sig_algorithm):
    """Return the key algorithm which signs with a host key algorithm"""

    return _sig_alg_map.get(sig_algorithm)


def decode_ssh_public_key(data):
    """Decode a packetized SSH public key"""

    try:
        packet = SSHPacket(data)
        alg = packet.get_string()
    except PacketDecodeError:
        raise MalformedHostKey('Invalid public key') from None

    handler = _public_key_alg_map.get(alg)

    if not handler:
        raise MalformedHostKey('Unknown key algorithm: %s' %
                               alg.decode('ascii', errors='replace'))

    try:
        key_params = handler.decode_ssh_public(packet)
        packet.check_end()

        key = handler.make_public(*key_params)
    except (PacketDecodeError, ValueError):
        raise MalformedHostKey('Invalid public key') from None

    key.algorithm = alg
    return key


def generate_private_key(alg_name, **kwargs):
    """Generate a new private key

       This function generates a new private key of a type matching
       the requested SSH algorithm. It is mainly useful for creating
       host keys for a test peer.

       Available algorithms include:

           ssh-rsa, ssh-ed25519

       For ssh-rsa, the key size can be specified using the `key_size`
       parameter, and the RSA public exponent can be changed using the
       `exponent` parameter. By default, generated keys are 2048 bits
       with a public exponent of 65537.

       :param alg_name:
           The SSH algorithm name corresponding to the desired type of key.
       :param key_size: (optional)
           The key size in bits for RSA keys.
       :param exponent: (optional)
           The public exponent for RSA keys.
       :type alg_name: `str`
       :type key_size: `int`
       :type exponent: `int`

       :returns: An :class:`SSHKey` private key

       :raises: :exc:`KeyGenerationError` if the requested key parameters
                are unsupported
    """

    algorithm = alg_name.encode('utf-8')
    handler = _public_key_alg_map.get(algorithm)

    if handler:
        try:
            return handler.generate(algorithm, **kwargs)
        except (TypeError, ValueError) as exc:
            raise KeyGenerationError(str(exc)) from None
    else:
        raise KeyGenerationError('Unknown algorithm: %s' % alg_name)
