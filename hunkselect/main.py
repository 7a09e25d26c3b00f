# hunkselect entry point and configuration helpers
#
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from gettext import gettext as _
from typing import Optional

import argparse
import os
import sys

from . import recorder
from .util import Abort, systemcall


class Config:
    def get(self, section, item, default=None) -> Optional[str]:
        try:
            return systemcall(
                ['git', 'config', '--get', '%s.%s' % (section, item)],
                onerr=KeyError,
                encoding="UTF-8",
            ).rstrip('\n')
        except (KeyError, OSError):
            return default

    def getint(self, section, item, default=None) -> Optional[int]:
        value = self.get(section, item)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise Abort(_("%s.%s is not a number: %r") % (section, item, value))


class Ui:
    def __init__(self):
        self.config = Config()
        self.debuglevel = 0

    def print_message(self, *msg, debuglevel: int, **opts):
        if self.debuglevel < debuglevel:
            return

        sys.stdout.flush()
        print(*msg, **opts, file=sys.stderr)
        sys.stderr.flush()

    def debug(self, *msg, **opts):
        self.print_message(*msg, debuglevel=2, **opts)

    def info(self, *msg, **opts):
        self.print_message(*msg, debuglevel=1, **opts)

    def warn(self, *msg, **opts):
        self.print_message(*msg, debuglevel=0, **opts)

    def status(self, *msg, **opts):
        print(*msg, **opts)

    def setdebuglevel(self, level):
        self.debuglevel = level

    @property
    def tabwidth(self) -> int:
        width = self.config.getint('hunkselect', 'tabwidth', 4)
        if width < 0:
            raise Abort(_("hunkselect.tabwidth must not be negative"))
        return width


def tabwidth(value):
    width = int(value)
    if width < 0:
        raise argparse.ArgumentTypeError(_("tab width must not be negative"))
    return width


def main(argv=None):
    prog = os.path.basename(sys.argv[0])
    if prog in ('main.py', '__main__.py'):
        prog = 'hunkselect'

    parser = argparse.ArgumentParser(
        description='select hunks from a patch and write them to a filtered patch',
        prog=prog,
    )
    parser.add_argument('input', help='input patch file (unified diff)')
    parser.add_argument('-o', '--output', required=True,
                        help='output patch file, rewritten whenever a hunk is (de)selected')
    parser.add_argument('--tab-width', metavar='N', type=tabwidth, default=None,
                        help='spaces to replace each tab with (default: hunkselect.tabwidth or 4)')
    parser.add_argument('--select', metavar='LIST', default=None,
                        help='select the comma-separated hunk numbers (or "all") without the interactive interface')
    parser.add_argument('--list', action='store_true', default=False,
                        help='list the hunks with their numbers and exit')
    parser.add_argument('-v', '--verbose', default=0, action='count', help='be more verbose')
    parser.add_argument('--debug', action='store_const', const=2, dest='verbose', help='be debuggingly verbose')
    args = parser.parse_args(argv)

    opts = vars(args)

    ui = Ui()
    ui.setdebuglevel(opts['verbose'])

    try:
        if opts['tab_width'] is None:
            opts['tab_width'] = ui.tabwidth
        return recorder.doselect(ui, **opts)
    except Abort as inst:
        sys.stderr.write(_("abort: %s\n") % inst)
        sys.exit(1)


if __name__ == '__main__':
    sys.exit(main())
