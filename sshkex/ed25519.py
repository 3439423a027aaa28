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

"""Ed25519 host key handler"""

from .crypto import EdDSAPrivateKey, EdDSAPublicKey
from .packet import String
from .public_key import SSHKey, register_public_key_alg


class _Ed25519Key(SSHKey):
    """Handler for Ed25519 public key encryption"""

    algorithm = b'ssh-ed25519'
    sig_algorithms = (algorithm,)
    all_sig_algorithms = set(sig_algorithms)

    def __init__(self, key, private=False):
        super().__init__(key)

        self._private = private

    @classmethod
    def generate(cls, algorithm):
        """Generate a new Ed25519 private key"""

        # pylint: disable=unused-argument

        return cls(EdDSAPrivateKey.generate(), True)

    @classmethod
    def make_public(cls, vk):
        """Construct an Ed25519 public key"""

        return cls(EdDSAPublicKey.construct(vk))

    @classmethod
    def decode_ssh_public(cls, packet):
        """Decode an SSH format Ed25519 public key"""

        vk = packet.get_string()

        return (vk,)

    def encode_ssh_public(self):
        """Encode an SSH format Ed25519 public key"""

        return String(self._key.public_value)

    def sign_ssh(self, data, sig_algorithm):
        """Return an SSH-encoded signature of the specified data"""

        # pylint: disable=unused-argument

        if not self._private:
            raise ValueError('Private key needed for signing')

        return self._key.sign(data)

    def verify_ssh(self, data, sig_algorithm, sig):
        """Verify an SSH-encoded signature of the specified data"""

        # pylint: disable=unused-argument

        return self._key.verify(data, sig)


register_public_key_alg(b'ssh-ed25519', _Ed25519Key)
