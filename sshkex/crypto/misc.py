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


"""Common base for the PyCA key shims"""

from cryptography.exceptions import InvalidSignature


class PyCAKey:
    """Base class for PyCA private/public keys

       Signatures are always checked against the public half of the
       key, so a private key can verify the signatures it makes.

    """

    def __init__(self, pyca_key, verifying_key=None):
        self._pyca_key = pyca_key
        self._verifying_key = verifying_key or pyca_key

    @property
    def pyca_key(self):
        """Return the PyCA object associated with this key"""

        return self._pyca_key

    def check_signature(self, sig, data, *args):
        """Return whether sig is valid for data under the public key"""

        try:
            self._verifying_key.verify(sig, data, *args)
        except InvalidSignature:
            return False

        return True
