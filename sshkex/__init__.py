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

"""SSH Diffie-Hellman key exchange for Python"""

from .version import __author__, __author_email__, __version__

# pylint: disable=wildcard-import

from .constants import *

# pylint: enable=wildcard-import

from .dh import DHGroup, DHKeyPair, get_dh_group

from .host_keys import SSHHostKeyVerifier, CallbackHostKeyVerifier
from .host_keys import KnownHostKeysVerifier

from .kex import SSHKexOptions, exchange_keys, exchange_keys_async
from .kex import get_kex, get_kex_algs, get_default_kex_algs

from .kex_dh import ExchangeContext, ExchangeResult

from .logging import logger, set_debug_level, set_log_level

from .misc import Error, DisconnectError, ConnectionLost, ChannelClosed
from .misc import ExchangeTimeout, HostKeyNotVerifiable, UntrustedHostKey
from .misc import KeyExchangeFailed, InvalidPeerValue
from .misc import SignatureVerificationFailed, ProtocolError

from .packet import PacketDecodeError, BufferUnderrun

from .public_key import SSHKey, KeyGenerationError, KeyImportError
from .public_key import MalformedHostKey
from .public_key import decode_ssh_public_key, generate_private_key

# Import these explicitly to trigger register calls in them
from . import ed25519, rsa, kex_dh
