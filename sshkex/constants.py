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

"""SSH transport constants used during key exchange"""

# pylint: disable=bad-whitespace

# Default language for error messages
DEFAULT_LANG                 = 'en-US'

# SSH new keys message, which ends every key exchange
MSG_NEWKEYS                  = 21

# SSH disconnect reason codes raised during key exchange
DISC_PROTOCOL_ERROR          = 2
DISC_KEY_EXCHANGE_FAILED     = 3
DISC_HOST_KEY_NOT_VERIFIABLE = 9
DISC_CONNECTION_LOST         = 10

# pylint: enable=bad-whitespace
