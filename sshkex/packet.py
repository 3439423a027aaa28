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


"""SSH wire format encoders and decoder, per RFC 4251 section 5"""


class PacketDecodeError(ValueError):
    """Packet decoding error"""


class BufferUnderrun(PacketDecodeError):
    """Packet ended before the requested data could be read"""


# Encoder names follow the RFC 4251 data type names
# pylint: disable=invalid-name

def Byte(value):
    """Encode a single byte"""

    return bytes((value,))


def Boolean(value):
    """Encode a boolean as a single 0 or 1 byte"""

    return b'\x01' if value else b'\x00'


def UInt32(value):
    """Encode a 32-bit unsigned integer"""

    return value.to_bytes(4, 'big')


def UInt64(value):
    """Encode a 64-bit unsigned integer"""

    return value.to_bytes(8, 'big')


def String(value):
    """Encode a length-prefixed string, UTF-8 encoding str values"""

    if isinstance(value, str):
        value = value.encode('utf-8')

    return UInt32(len(value)) + value


def MPInt(value):
    """Encode an integer in its shortest two's-complement form

       Zero is sent as an empty string. A positive value whose top bit
       is set gets a leading zero byte so it doesn't read as negative.

    """

    data = value.to_bytes(value.bit_length() // 8 + 1, 'big', signed=True)

    if value == 0:
        data = b''
    elif len(data) > 1 and data[0] == 0xff and data[1] & 0x80:
        data = data[1:]

    return String(data)


def NameList(value):
    """Encode a list of byte strings as a comma-separated string"""

    return String(b','.join(value))

# pylint: enable=invalid-name


_encoders = {
    'byte':     Byte,
    'boolean':  Boolean,
    'uint32':   UInt32,
    'uint64':   UInt64,
    'string':   String,
    'mpint':    MPInt,
    'namelist': NameList
}


def encode_fields(*fields):
    """Encode a sequence of (kind, value) pairs

       Each kind is one of `'byte'`, `'boolean'`, `'uint32'`,
       `'uint64'`, `'string'`, `'mpint'` or `'namelist'`, and the
       encoded values are concatenated in the order given.

    """

    try:
        return b''.join(_encoders[kind](value) for kind, value in fields)
    except KeyError as exc:
        raise ValueError('Unknown field type: %s' % exc.args[0]) from None


class SSHPacket:
    """Bounds-checked reader over the fields of an SSH message"""

    _getters = {}

    def __init__(self, packet):
        self._packet = packet
        self._idx = 0

    def __bool__(self):
        return self._idx < len(self._packet)

    def check_end(self):
        """Confirm that all of the data in the packet has been consumed"""

        if self:
            raise PacketDecodeError('%d bytes of trailing data' %
                                    (len(self._packet) - self._idx))

    def get_bytes(self, size):
        """Extract the requested number of bytes from the packet"""

        end = self._idx + size

        if end > len(self._packet):
            raise BufferUnderrun('Needed %d bytes, only %d left' %
                                 (size, len(self._packet) - self._idx))

        value = self._packet[self._idx:end]
        self._idx = end
        return value

    def get_byte(self):
        """Extract a single byte from the packet"""

        return self.get_bytes(1)[0]

    def get_boolean(self):
        """Extract a boolean from the packet"""

        return self.get_byte() != 0

    def get_uint32(self):
        """Extract a 32-bit integer from the packet"""

        return int.from_bytes(self.get_bytes(4), 'big')

    def get_uint64(self):
        """Extract a 64-bit integer from the packet"""

        return int.from_bytes(self.get_bytes(8), 'big')

    def get_string(self):
        """Extract a length-prefixed byte string from the packet"""

        return self.get_bytes(self.get_uint32())

    def get_mpint(self):
        """Extract a two's-complement integer from the packet"""

        return int.from_bytes(self.get_string(), 'big', signed=True)

    def get_namelist(self):
        """Extract a comma-separated list of byte strings from the packet"""

        names = self.get_string()
        return names.split(b',') if names else []

    def get_fields(self, *kinds):
        """Extract a sequence of typed fields from the packet

           The kinds are the same as those accepted by
           :func:`encode_fields`. All of them are checked before
           anything is read.

        """

        try:
            getters = [self._getters[kind] for kind in kinds]
        except KeyError as exc:
            raise ValueError('Unknown field type: %s' % exc.args[0]) from None

        return tuple(getter(self) for getter in getters)


SSHPacket._getters = {kind: getattr(SSHPacket, 'get_' + kind)
                      for kind in _encoders}
