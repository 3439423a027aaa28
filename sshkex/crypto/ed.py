# Copyright (c) 2014-2021 by Ron Frederick <ronf@timeheart.net> and others.
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


"""A shim around PyCA for Ed25519 keys"""

from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.hazmat.primitives.serialization import PublicFormat

from .misc import PyCAKey


def _raw_public(pub_key):
    """Return the raw 32-byte encoding of a public key"""

    return pub_key.public_bytes(Encoding.Raw, PublicFormat.Raw)


class _EdKey(PyCAKey):
    """Base class for shim around PyCA for Ed25519 keys"""

    def __init__(self, pyca_key, pub_key):
        super().__init__(pyca_key, pub_key)

        self._pub = _raw_public(pub_key)

    @property
    def public_value(self):
        """Return the public value encoded as a byte string"""

        return self._pub

    def verify(self, data, sig):
        """Verify the signature on a block of data"""

        return self.check_signature(sig, data)


class EdDSAPrivateKey(_EdKey):
    """A shim around PyCA for Ed25519 private keys"""

    @classmethod
    def generate(cls):
        """Generate a new Ed25519 private key"""

        priv_key = ed25519.Ed25519PrivateKey.generate()

        return cls(priv_key, priv_key.public_key())

    def sign(self, data):
        """Sign a block of data"""

        return self.pyca_key.sign(data)


class EdDSAPublicKey(_EdKey):
    """A shim around PyCA for Ed25519 public keys"""

    @classmethod
    def construct(cls, pub):
        """Construct an Ed25519 public key from its raw encoding"""

        pub_key = ed25519.Ed25519PublicKey.from_public_bytes(pub)

        return cls(pub_key, pub_key)
