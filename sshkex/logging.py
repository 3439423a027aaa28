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


"""Logging for key exchanges

   Everything is logged through the ``sshkex`` logger. Messages about
   a particular exchange are prefixed with its context, such as
   ``[kex=3]``, and key exchange messages are dumped in hex only at
   debug level 3.

"""

import logging


_debug_level = 1


def _to_text(arg):
    """Convert byte strings and lists of names to text for logging"""

    if isinstance(arg, (list, tuple)):
        if arg and isinstance(arg[0], bytes):
            arg = b','.join(arg)
        else:
            arg = ','.join(str(item) for item in arg)

    if isinstance(arg, bytes):
        arg = arg.decode('ascii', errors='replace')

    return arg


def hexdump(data, width=16):
    """Return data as indented lines of offset, hex bytes and ASCII"""

    lines = []

    for offset in range(0, len(data), width):
        chunk = data[offset:offset+width]
        text = ''.join(chr(b) if 0x20 <= b < 0x7f else '.' for b in chunk)

        lines.append('\n  %04x  %-*s  %s' %
                     (offset, 3 * width - 1, chunk.hex(' '), text))

    return ''.join(lines)


class KexLogger(logging.LoggerAdapter):
    """Adapter which tags log messages with key exchange context"""

    def __init__(self, base_logger, context=()):
        super().__init__(base_logger, {})

        self._context = tuple(context)

    @property
    def context(self):
        """The context labels prefixed to messages from this logger"""

        return self._context

    def get_child(self, child=None, context=None):
        """Return a child logger with optional added context"""

        base_logger = self.logger.getChild(child) if child else self.logger
        extra = (context,) if context else ()

        return type(self)(base_logger, self._context + extra)

    def log(self, level, msg, *args, **kwargs):
        """Log a message, converting byte string arguments to text"""

        super().log(level, msg, *(_to_text(arg) for arg in args), **kwargs)

    def process(self, msg, kwargs):
        if self._context:
            msg = '[%s] %s' % (', '.join(self._context), msg)

        return msg, kwargs

    def debug1(self, msg, *args, **kwargs):
        """Write a level 1 debug log message"""

        self.debug(msg, *args, **kwargs)

    def debug2(self, msg, *args, **kwargs):
        """Write a level 2 debug log message"""

        if _debug_level >= 2:
            self.debug(msg, *args, **kwargs)

    def packet(self, data, msg, *args, **kwargs):
        """Write a level 3 debug log message followed by a dump of data"""

        if _debug_level >= 3:
            self.debug(msg + '%s', *args, hexdump(data), **kwargs)


def set_log_level(level):
    """Set the sshkex log level

       This function sets the log level of the sshkex logger. It
       defaults to `'NOTSET`', meaning that it will track the debug
       level set on the root Python logger.

       :param level:
           The log level to set, as defined by the `logging` module
       :type level: `int` or `str`

    """

    logger.setLevel(level)


def set_debug_level(level):
    """Set the sshkex debug log level

       This function sets the level of debugging logging done by the
       sshkex logger, from the following options:

           ===== ================================================
           Level Description
           ===== ================================================
           1     Start, completion and abort of each exchange
           2     Also each state change of the exchange
           3     Also a hex dump of every key exchange message
           ===== ================================================

       The debug level defaults to level 1.

       .. note:: For this setting to have any effect, the effective log
                 level of the sshkex logger must be set to DEBUG.

       .. warning:: Level 3 dumps the public values and host key
                    signature of each exchange.

       :param level:
           The debug level to set, as defined above.
       :type level: `int`

    """

    global _debug_level # pylint: disable=global-statement

    if level not in (1, 2, 3):
        raise ValueError('Debug log level must be between 1 and 3')

    _debug_level = level


logger = KexLogger(logging.getLogger(__package__))
