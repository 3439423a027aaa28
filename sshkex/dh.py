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

"""SSH Diffie-Hellman groups and ephemeral key pairs"""

from .misc import InvalidPeerValue, randrange


# pylint: disable=bad-whitespace,line-too-long

# Smallest prime accepted from a group exchange
DH_MIN_PRIME_BITS = 1024

# SSH Diffie-Hellman group 1 parameters
_group1_g = 2
_group1_p = 0xffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd129024e088a67cc74020bbea63b139b22514a08798e3404ddef9519b3cd3a431b302b0a6df25f14374fe1356d6d51c245e485b576625e7ec6f44c42e9a637ed6b0bff5cb6f406b7edee386bfb5a899fa5ae9f24117c4b1fe649286651ece65381ffffffffffffffff

# SSH Diffie-Hellman group 14 parameters
_group14_g = 2
_group14_p = 0xffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd129024e088a67cc74020bbea63b139b22514a08798e3404ddef9519b3cd3a431b302b0a6df25f14374fe1356d6d51c245e485b576625e7ec6f44c42e9a637ed6b0bff5cb6f406b7edee386bfb5a899fa5ae9f24117c4b1fe649286651ece45b3dc2007cb8a163bf0598da48361c55d39a69163fa8fd24cf5f83655d23dca3ad961c62f356208552bb9ed529077096966d670c354e4abc9804f1746c08ca18217c32905e462e36ce3be39e772c180e86039b2783a2ec07a28fb5c55df06f4c52c9de2bcbf6955817183995497cea956ae515d2261898fa051015728e5a8aacaa68ffffffffffffffff

# SSH Diffie-Hellman group 16 parameters
_group16_g = 2
_group16_p = 0xffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd129024e088a67cc74020bbea63b139b22514a08798e3404ddef9519b3cd3a431b302b0a6df25f14374fe1356d6d51c245e485b576625e7ec6f44c42e9a637ed6b0bff5cb6f406b7edee386bfb5a899fa5ae9f24117c4b1fe649286651ece45b3dc2007cb8a163bf0598da48361c55d39a69163fa8fd24cf5f83655d23dca3ad961c62f356208552bb9ed529077096966d670c354e4abc9804f1746c08ca18217c32905e462e36ce3be39e772c180e86039b2783a2ec07a28fb5c55df06f4c52c9de2bcbf6955817183995497cea956ae515d2261898fa051015728e5a8aaac42dad33170d04507a33a85521abdf1cba64ecfb850458dbef0a8aea71575d060c7db3970f85a6e1e4c7abf5ae8cdb0933d71e8c94e04a25619dcee3d2261ad2ee6bf12ffa06d98a0864d87602733ec86a64521f2b18177b200cbbe117577a615d6c770988c0bad946e208e24fa074e5ab3143db5bfce0fd108e4b82d120a92108011a723c12a787e6d788719a10bdba5b2699c327186af4e23c1a946834b6150bda2583e9ca2ad44ce8dbbbc2db04de8ef92e8efc141fbecaa6287c59474e6bc05d99b2964fa090c3a2233ba186515be7ed1f612970cee2d7afb81bdd762170481cd0069127d5b05aa993b4ea988d8fddc186ffb7dc90a6c08f4df435c934063199ffffffffffffffff

# SSH Diffie-Hellman group 18 parameters
_group18_g = 2
_group18_p = 0xffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd129024e088a67cc74020bbea63b139b22514a08798e3404ddef9519b3cd3a431b302b0a6df25f14374fe1356d6d51c245e485b576625e7ec6f44c42e9a637ed6b0bff5cb6f406b7edee386bfb5a899fa5ae9f24117c4b1fe649286651ece45b3dc2007cb8a163bf0598da48361c55d39a69163fa8fd24cf5f83655d23dca3ad961c62f356208552bb9ed529077096966d670c354e4abc9804f1746c08ca18217c32905e462e36ce3be39e772c180e86039b2783a2ec07a28fb5c55df06f4c52c9de2bcbf6955817183995497cea956ae515d2261898fa051015728e5a8aaac42dad33170d04507a33a85521abdf1cba64ecfb850458dbef0a8aea71575d060c7db3970f85a6e1e4c7abf5ae8cdb0933d71e8c94e04a25619dcee3d2261ad2ee6bf12ffa06d98a0864d87602733ec86a64521f2b18177b200cbbe117577a615d6c770988c0bad946e208e24fa074e5ab3143db5bfce0fd108e4b82d120a92108011a723c12a787e6d788719a10bdba5b2699c327186af4e23c1a946834b6150bda2583e9ca2ad44ce8dbbbc2db04de8ef92e8efc141fbecaa6287c59474e6bc05d99b2964fa090c3a2233ba186515be7ed1f612970cee2d7afb81bdd762170481cd0069127d5b05aa993b4ea988d8fddc186ffb7dc90a6c08f4df435c93402849236c3fab4d27c7026c1d4dcb2602646dec9751e763dba37bdf8ff9406ad9e530ee5db382f413001aeb06a53ed9027d831179727b0865a8918da3edbebcf9b14ed44ce6cbaced4bb1bdb7f1447e6cc254b332051512bd7af426fb8f401378cd2bf5983ca01c64b92ecf032ea15d1721d03f482d7ce6e74fef6d55e702f46980c82b5a84031900b1c9e59e7c97fbec7e8f323a97a7e36cc88be0f1d45b7ff585ac54bd407b22b4154aacc8f6d7ebf48e1d814cc5ed20f8037e0a79715eef29be32806a1d58bb7c5da76f550aa3d8a1fbff0eb19ccb1a313d55cda56c9ec2ef29632387fe8d76e3c0468043e8f663f4860ee12bf2d5b0b7474d6e694f91e6dbe115974a3926f12fee5e438777cb6a932df8cd8bec4d073b931ba3bc832b68d9dd300741fa7bf8afc47ed2576f6936ba424663aab639c5ae4f5683423b4742bf1c978238f16cbe39d652de3fdb8befc848ad922222e04a4037c0713eb57a81a23f0c73473fc646cea306b4bcbc8862f8385ddfa9d4b7fa2c087e879683303ed5bdd3a062b3cf5b3a278a66d2a13f83f44f82ddf310ee074ab6a364597e899a0255dc164f31cc50846851df9ab48195ded7ea1b1d510bd7ee74d73faf36bc31ecfa268359046f4eb879f924009438b481c6cd7889a002ed5ee382bc9190da6fc026e479558e4475677e9aa9e3050e2765694dfc81f56e880b96e7160c980dd98edd3dfffffffffffffffff

# pylint: enable=bad-whitespace,line-too-long

# Short variable names are used here, matching names in RFC 4253
# pylint: disable=invalid-name


_dh_groups = {}


class DHKeyPair:
    """An ephemeral Diffie-Hellman key pair

       The private exponent is owned by a single key exchange. It is
       never included in the repr, can't be copied or pickled, and is
       discarded by :meth:`clear` once the exchange is over.

    """

    def __init__(self, p, g, x):
        self.p = p
        self.g = g
        self._x = x
        self.e = pow(g, x, p)

    def __repr__(self):
        return 'DHKeyPair(p=<%d bits>, g=%d, e=%#x%s)' % \
            (self.p.bit_length(), self.g, self.e,
             '' if self._x else ', cleared')

    def __copy__(self):
        raise TypeError('DH key pairs cannot be copied')

    def __deepcopy__(self, memo):
        raise TypeError('DH key pairs cannot be copied')

    def __reduce__(self):
        raise TypeError('DH key pairs cannot be pickled')

    @property
    def cleared(self):
        """Return whether the private exponent has been discarded"""

        return self._x is None

    def compute(self, f):
        """Raise the peer's public value to the private exponent"""

        if self._x is None:
            raise ValueError('DH private exponent has been cleared')

        return pow(f, self._x, self.p)

    def clear(self):
        """Discard the private exponent"""

        self._x = None


class DHGroup:
    """A Diffie-Hellman prime and generator"""

    def __init__(self, name, g, p):
        self.name = name
        self.g = g
        self.p = p
        self.q = (p - 1) // 2

    def __repr__(self):
        return 'DHGroup(%s, %d bits)' % (self.name, self.p.bit_length())

    @classmethod
    def from_params(cls, p, g):
        """Construct a group from parameters sent by the peer"""

        if p.bit_length() < DH_MIN_PRIME_BITS:
            raise InvalidPeerValue('DH prime too small: %d bits' %
                                   p.bit_length())

        if not 1 < g < p - 1:
            raise InvalidPeerValue('DH generator out of range')

        return cls('gex-%d' % p.bit_length(), g, p)

    def _exponent_range(self, need_bytes):
        """Return the range to pick a private exponent from"""

        bits = 8 * need_bytes

        if 0 < bits < self.q.bit_length():
            return 1 << (bits - 1), 1 << bits
        else:
            return 2, self.q

    def generate_keypair(self, need_bytes):
        """Generate an ephemeral key pair

           The private exponent is `8 * need_bytes` bits long when that
           is smaller than the group order, and otherwise drawn from the
           full order of the group. Exponents producing a degenerate
           public value are discarded.

        """

        lo, hi = self._exponent_range(need_bytes)

        while True:
            keypair = DHKeyPair(self.p, self.g, randrange(lo, hi))

            if 1 < keypair.e < self.p - 1:
                return keypair

            keypair.clear()

    def validate_peer_value(self, f):
        """Check that a public value received from the peer is in range"""

        if not 1 < f < self.p - 1:
            raise InvalidPeerValue('Kex DH peer value out of range')

    def compute_shared_secret(self, keypair, f):
        """Compute the shared secret from the peer's public value"""

        self.validate_peer_value(f)

        return keypair.compute(f)


def register_dh_group(name, g, p):
    """Register a well-known Diffie-Hellman group"""

    group = DHGroup(name, g, p)
    _dh_groups[name] = group
    return group


def get_dh_group(name):
    """Return a registered Diffie-Hellman group"""

    return _dh_groups[name]


# pylint: disable=bad-whitespace

register_dh_group('group1',  _group1_g,  _group1_p)
register_dh_group('group14', _group14_g, _group14_p)
register_dh_group('group16', _group16_g, _group16_p)
register_dh_group('group18', _group18_g, _group18_p)
