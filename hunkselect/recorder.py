# Hunk selection process driver
#
# Copyright 2008—2011, 2014 Mark Edgington <edgimar@gmail.com>
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from gettext import gettext as _

from .hunk_selector import hunkselector
from .hunkpatch import Patch, parsepatch
from .selection import Selection, batchselector
from .text import TABWIDTH, normalize
from .util import Abort, readfile


def loadpatch(ui, path, tabwidth=TABWIDTH) -> Patch:
    """Read, normalize and parse the input patch.

    A patch without a single hunk leaves nothing to select, so it is
    refused here rather than by the parser.
    """
    patch = parsepatch(normalize(readfile(path), tabwidth))
    ui.debug('parsed %d file(s), %d hunk(s) from %s' % (
        len(patch.files), len(patch.hunks), path))
    if not patch.hunks:
        raise Abort(_("no hunks found in %s") % path)
    return patch


def dolist(ui, patch: Patch):
    width = len(str(len(patch.hunks)))
    for number, hunk in enumerate(patch.hunks, 1):
        ui.status('%*d  %s  %s' % (width, number, patch.filelabel(hunk),
                                   hunk.preview))


def doselect(ui, input, **opts):
    """This is the generic selection driver.

    Its job is to load the input patch and hand it to a selector, which
    marks hunks and keeps the output patch in sync with the marks:
     - with --list, the hunks are only printed;
     - with --select, the listed hunks are marked and written once;
     - otherwise the curses interface lets the user mark hunks, and the
       output is rewritten after every change.
    """
    tabwidth = opts.get('tab_width')
    if tabwidth is None:
        tabwidth = TABWIDTH
    patch = loadpatch(ui, input, tabwidth)

    if opts.get('list'):
        dolist(ui, patch)
        return 0

    selection = Selection(patch, opts['output'], ui)

    if opts.get('select') is not None:
        selector = batchselector(opts['select'])
    else:
        selector = hunkselector

    selector(opts, selection, ui)
    ui.info(_('%d of %d hunk(s) selected') % (
        patch.markedcount(), len(patch.hunks)))
    return 0
