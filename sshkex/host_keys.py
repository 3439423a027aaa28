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

"""Host key trust verifiers"""

from .public_key import SSHKey


class SSHHostKeyVerifier:
    """Base class for deciding whether to trust a server host key

       Key exchange presents the server's host key blob to the
       :meth:`approve` method of a verifier before checking the
       signature made with that key. Returning `False` aborts the
       exchange with :exc:`UntrustedHostKey`.

    """

    def approve(self, host_key_data):
        """Return whether the host key in SSH wire format is trusted"""

        raise NotImplementedError


class CallbackHostKeyVerifier(SSHHostKeyVerifier):
    """Host key verifier which defers to a callable"""

    def __init__(self, callback):
        self._callback = callback

    def approve(self, host_key_data):
        """Return the callback's decision on this host key"""

        return bool(self._callback(host_key_data))


class KnownHostKeysVerifier(SSHHostKeyVerifier):
    """Host key verifier backed by a fixed set of keys

       :param trusted_keys:
           Keys to accept, as :class:`SSHKey` objects or wire-format blobs
       :param revoked_keys: (optional)
           Keys to reject even if they also appear in `trusted_keys`

    """

    def __init__(self, trusted_keys, revoked_keys=()):
        self._trusted = {self._key_data(key) for key in trusted_keys}
        self._revoked = {self._key_data(key) for key in revoked_keys}

    @staticmethod
    def _key_data(key):
        """Return the wire format of a key"""

        return key.public_data if isinstance(key, SSHKey) else bytes(key)

    def approve(self, host_key_data):
        """Accept keys in the trusted set which haven't been revoked"""

        return (host_key_data in self._trusted and
                host_key_data not in self._revoked)


def approve_host_key(verifier, host_key_data):
    """Ask a verifier or plain callable whether to trust a host key"""

    if hasattr(verifier, 'approve'):
        return bool(verifier.approve(host_key_data))
    else:
        return bool(verifier(host_key_data))
