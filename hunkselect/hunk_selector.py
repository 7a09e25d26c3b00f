# Hunk selector text user interface
#
# Copyright 2008—2011, 2014 Mark Edgington <edgimar@gmail.com>
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# Much of this interface is based on the chunk selector of git-crecord.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

from collections.abc import Sequence
from gettext import gettext as _

from . import text
from . import util

import re
import sys
import struct
import signal

from .hunkpatch import Hunk, Patch
from .selection import Selection

import curses
import fcntl
import termios


_origstdout = sys.__stdout__  # used by gethw()

# milliseconds to wait for a key before redrawing the screen
KEY_TIMEOUT = 250


def gethw() -> tuple[int, int]:
    """
    Magically get the current height and width of the window (without initscr)

    This is a rip-off of a rip-off - taken from the bpython code.  It is
    useful / necessary because otherwise curses.initscr() must be called,
    which can leave the terminal in a nasty state after exiting.

    """
    h, w = struct.unpack(
        "hhhh", fcntl.ioctl(_origstdout, termios.TIOCGWINSZ, b"\0"*8))[0:2]
    return h, w


def hunkselector(opts, selection: Selection, ui):
    """
    Curses interface to mark hunks, rewriting the output patch after
    every change of a mark.

    """
    selector = CursesHunkSelector(selection, ui)
    # This is required for ncurses to display non-ASCII characters in default user
    # locale encoding correctly.  --immerrr
    import locale
    locale.setlocale(locale.LC_ALL, '')

    # write errors go to the status line while curses owns the terminal
    selection.ui = None
    f = signal.getsignal(signal.SIGTSTP)
    try:
        curses.wrapper(selector.main, opts)
    finally:
        selection.ui = ui
    if selection.failed and ui is not None:
        ui.warn(_("failed to write %s: %s") % (selection.output, selection.failed))
    if selector.initerr is not None:
        raise util.Abort(selector.initerr)
    # ncurses does not restore signal handler for SIGTSTP
    signal.signal(signal.SIGTSTP, f)


def checkbox(hunk: Hunk) -> str:
    return hunk.marked and '[x]' or '[ ]'


def listentry(patch: Patch, hunk: Hunk) -> str:
    """One line of the hunk list: mark, file label and preview"""
    return '%s %s  %s' % (checkbox(hunk), patch.filelabel(hunk), hunk.preview)


_linepairs = {
    '+': 'addition',
    '-': 'deletion',
    '\\': 'nonewline',
}


def previewlines(hunk: Hunk | None) -> Sequence[tuple[str, str]]:
    r"""Lines of the preview pane with the colour pair used for each.

    >>> previewlines(Hunk('@@ -1 +1 @@', [' a', '-b', '+c', '\\ x'], 0))
    [('@@ -1 +1 @@', 'header'), (' a', 'normal'), ('-b', 'deletion'),
     ('+c', 'addition'), ('\\ x', 'nonewline')]
    >>> previewlines(None)
    [('No hunk selected', 'normal')]
    """
    if hunk is None:
        return [(_('No hunk selected'), 'normal')]
    lines = [(hunk.header, 'header')]
    for line in hunk.lines:
        lines.append((line, _linepairs.get(line[:1], 'normal')))
    return lines


class CursesHunkSelector:
    def __init__(self, selection: Selection, ui):
        self.selection = selection
        self.patch = selection.patch
        self.ui = ui

        # dictionary mapping (fgcolor, bgcolor) pairs to the
        # corresponding curses color-pair value.
        self.colorpairs = {}
        # maps custom nicknames of color-pairs to curses color-pair values
        self.colorpairnames = {}

        self.usecolor = True

        # the first entry of the hunk list which is visible on the screen
        self.firstlineoflist = 0

        self.numstatuslines = 2

        # error during initialization, cannot be printed in the curses
        # interface, it should be printed by the calling code
        self.initerr = None

    def printstring(self, window, y, text_, pairname="normal",
                    attrlist=None, x=0, width=None):
        """
        Print the string, text_, on line y of the window using the colour
        pair registered as pairname, padded with spaces to fill 'width'
        columns (by default the rest of the line).

        attrlist is a list containing text attributes in the form of
        curses.A_XXXX, where XXXX can be: [BOLD, DIM, NORMAL, STANDOUT,
        UNDERLINE].

        """
        if width is None:
            width = window.getmaxyx()[1] - x - 1
        if width <= 0:
            return

        # Strip \n, and convert control characters to ^[char] representation
        text_ = re.sub(
            r'[\x00-\x08\x0a-\x1f]',
            lambda m: '^' + chr(ord(m.group()) + 64), text_.strip('\n')
        )
        text_ = text.trim(text_, width, ellipsis='>')
        text_ += ' ' * (width - text.ucolwidth(text_))

        colorpair = self.getcolorpair(name=pairname, attrlist=attrlist)
        window.addstr(y, x, text_, colorpair)

    def _getstatuslinesegments(self):
        """-> [str]. return segments"""
        hunk = self.selection.current
        selected = hunk is not None and hunk.marked
        segments = [
            _('[x]=selected'),
            _('arrow keys: move'),
            _('space: deselect and save') if selected else _('space: select and save'),
            _('q: quit'),
            _('?: help'),
        ]
        return segments

    def _getstatuslines(self) -> Sequence[str]:
        """() -> [str]. return the message and the short help used in the
        top status window"""
        message = self.selection.status or _(
            '%d of %d hunk(s) selected, saved to %s on every change') % (
            self.patch.markedcount(), len(self.patch.hunks),
            self.selection.output)
        lines = [message, '  '.join(self._getstatuslinesegments())]
        return [text.ellipsis(line, self.xscreensize - 1) for line in lines]

    @property
    def listheight(self) -> int:
        """Number of hunk entries which fit in the list window"""
        return max(self.listwin.getmaxyx()[0] - 2, 1)

    def updatescroll(self):
        """Scroll the hunk list to show the entry under the cursor"""
        cursor = self.selection.cursor
        if cursor < self.firstlineoflist:
            self.firstlineoflist = cursor
        elif cursor >= self.firstlineoflist + self.listheight:
            self.firstlineoflist = cursor - self.listheight + 1

    def printlist(self):
        window = self.listwin
        window.erase()
        window.box()
        self.printstring(window, 0, _(' Hunks '), x=2,
                         width=text.ucolwidth(_(' Hunks ')))
        width = window.getmaxyx()[1] - 2
        visible = self.selection.order[
            self.firstlineoflist:self.firstlineoflist + self.listheight]
        for row, hunkindex in enumerate(visible):
            position = self.firstlineoflist + row
            hunk = self.patch.hunks[hunkindex]
            if position == self.selection.cursor:
                pairname = "selected"
            else:
                pairname = "normal"
            self.printstring(window, row + 1, listentry(self.patch, hunk),
                             pairname=pairname, x=1, width=width)
        window.noutrefresh()

    def printpreview(self):
        window = self.previewwin
        window.erase()
        window.box()
        self.printstring(window, 0, _(' Preview '), x=2,
                         width=text.ucolwidth(_(' Preview ')))
        height, width = window.getmaxyx()
        height -= 2
        width -= 2
        row = 0
        for line, pairname in previewlines(self.selection.current):
            attrlist = None
            if pairname == "header":
                pairname = "normal"
                attrlist = [curses.A_BOLD]
            for piece in text.wrap(line, width):
                if row >= height:
                    break
                self.printstring(window, row + 1, piece, pairname=pairname,
                                 attrlist=attrlist, x=1, width=width)
                row += 1
        window.noutrefresh()

    def updatescreen(self):
        self.statuswin.erase()
        try:
            for y, line in enumerate(self._getstatuslines()):
                self.printstring(self.statuswin, y, line, pairname="legend")
            self.statuswin.noutrefresh()
            self.updatescroll()
            self.printlist()
            self.printpreview()
            curses.doupdate()
        except curses.error:
            pass

    def layout(self):
        """(Re)create the status, list and preview windows for the
        current screen size"""
        self.yscreensize, self.xscreensize = self.stdscr.getmaxyx()
        bodyheight = self.yscreensize - self.numstatuslines
        if bodyheight < 3 or self.xscreensize < 20:
            return False

        listwidth = self.xscreensize * 45 // 100
        # newwin([height, width,] begin_y, begin_x)
        self.statuswin = curses.newwin(self.numstatuslines, self.xscreensize, 0, 0)
        self.statuswin.keypad(True)  # interpret arrow-key, etc. ESC sequences
        self.statuswin.timeout(KEY_TIMEOUT)
        self.listwin = curses.newwin(bodyheight, listwidth,
                                     self.numstatuslines, 0)
        self.previewwin = curses.newwin(bodyheight,
                                        self.xscreensize - listwidth,
                                        self.numstatuslines, listwidth)
        return True

    def sigwinchhandler(self, n, frame):
        """Handle window resizing"""
        try:
            curses.endwin()
            curses.resizeterm(*gethw())
            self.layout()
            self.stdscr.clear()
            self.stdscr.refresh()
        except curses.error:
            pass

    def getcolorpair(self, fgcolor=None, bgcolor=None, name=None,
                     attrlist=None):
        """
        Get a curses color pair, adding it to self.colorPairs if it is not
        already defined.  An optional string, name, can be passed as a shortcut
        for referring to the color-pair.  By default, if no arguments are
        specified, the white foreground / black background color-pair is
        returned.

        It is expected that this function will be used exclusively for
        initializing color pairs, and NOT curses.init_pair().

        attrlist is used to 'flavor' the returned color-pair.  This information
        is not stored in self.colorpairs.  It contains attribute values like
        curses.A_BOLD.

        """
        if (name is not None) and name in self.colorpairnames:
            # then get the associated color pair and return it
            colorpair = self.colorpairnames[name]
        else:
            if fgcolor is None:
                fgcolor = -1
            if bgcolor is None:
                bgcolor = -1
            if (fgcolor, bgcolor) in self.colorpairs:
                colorpair = self.colorpairs[(fgcolor, bgcolor)]
                if name is not None:
                    self.colorpairnames[name] = colorpair
            else:
                pairindex = len(self.colorpairs) + 1
                if self.usecolor:
                    curses.init_pair(pairindex, fgcolor, bgcolor)
                    colorpair = self.colorpairs[(fgcolor, bgcolor)] = (
                        curses.color_pair(pairindex))
                    if name is not None:
                        self.colorpairnames[name] = curses.color_pair(pairindex)
                else:
                    cval = 0
                    if name is not None:
                        if name == 'selected':
                            cval = curses.A_REVERSE
                        self.colorpairnames[name] = cval
                    colorpair = self.colorpairs[(fgcolor, bgcolor)] = cval

        # add attributes if possible
        if attrlist is None:
            attrlist = []
        if colorpair < 256:
            # then it is safe to apply all attributes
            for textattr in attrlist:
                colorpair |= textattr
        else:
            # just apply a select few (safe?) attributes
            for textattrib in (curses.A_UNDERLINE, curses.A_BOLD):
                if textattrib in attrlist:
                    colorpair |= textattrib
        return colorpair

    def initcolorpair(self, *args, **kwargs):
        """Same as getcolorpair."""
        self.getcolorpair(*args, **kwargs)

    def helpwindow(self):
        """Print a help window to the screen.  Exit after any keypress."""
        helptext = """            [press any key to return to the hunk list]

hunkselect lets you choose hunks of a patch one by one.  Every time a hunk
is selected or deselected, the output patch is written again from scratch,
so it always holds exactly the selected hunks, each one under the headers of
the file it belongs to.  Files with no selected hunks are left out.
The following are valid keystrokes:

         [SPACE]/[ENTER] : (un-)select hunk and save the output patch
     Up/Down-arrow [k/j] : go to previous/next hunk
         PgUp/PgDn [K/J] : go up/down by one page
          Home/End [g/G] : go to the first/last hunk
                  ctrl-l : redraw the screen
                       q : quit (the output patch is already saved)
                       ? : help (what you're currently reading)"""

        helpwin = curses.newwin(self.yscreensize, 0, 0, 0)
        helplines = helptext.split("\n")
        helplines = helplines + [" "]*(
            self.yscreensize - len(helplines) - 1)
        try:
            self.printstring(helpwin, 0, helplines[0], pairname="legend")
            for y, line in enumerate(helplines[1:self.yscreensize - 1]):
                self.printstring(helpwin, y + 1, line, pairname="normal")
        except curses.error:
            pass
        helpwin.refresh()
        helpwin.timeout(-1)
        try:
            helpwin.getkey()
        except curses.error:
            pass

    def handlekeypressed(self, keypressed):
        """
        Perform actions based on pressed keys.

        Return true to exit the main loop.
        """
        if keypressed in ["k", "KEY_UP"]:
            self.selection.move(-1)
        elif keypressed in ["K", "KEY_PPAGE"]:
            self.selection.move(-self.listheight)
        elif keypressed in ["j", "KEY_DOWN"]:
            self.selection.move(1)
        elif keypressed in ["J", "KEY_NPAGE"]:
            self.selection.move(self.listheight)
        elif keypressed in ["g", "KEY_HOME"]:
            self.selection.first()
        elif keypressed in ["G", "KEY_END"]:
            self.selection.last()
        elif keypressed in [" ", "\n", "KEY_ENTER"]:
            self.selection.toggleandsave()
        elif keypressed in ["q"]:
            return True
        elif keypressed in ["?"]:
            self.helpwindow()
            self.stdscr.clear()
            self.stdscr.refresh()
        elif keypressed in ["KEY_RESIZE"]:
            self.layout()
        elif len(keypressed) == 1 and curses.unctrl(keypressed) in [b"^L"]:
            # redraw everything
            self.stdscr.clear()
            self.stdscr.refresh()
        return False

    def main(self, stdscr, opts):
        """
        Method to be wrapped by curses.wrapper() for selecting hunks.

        """
        origsigwinch = sentinel = object()
        if hasattr(signal, 'SIGWINCH'):
            origsigwinch = signal.signal(signal.SIGWINCH,
                                         self.sigwinchhandler)
        try:
            return self._main(stdscr)
        finally:
            if origsigwinch is not sentinel:
                signal.signal(signal.SIGWINCH, origsigwinch)

    def _main(self, stdscr):
        self.stdscr = stdscr

        curses.start_color()
        try:
            curses.use_default_colors()
        except curses.error:
            self.usecolor = False

        self.stdscr.clear()
        self.stdscr.refresh()

        # don't display the cursor
        try:
            curses.curs_set(0)
        except curses.error:
            pass

        # available colors: black, blue, cyan, green, magenta, white, yellow
        # init_pair(color_id, foreground_color, background_color)
        self.initcolorpair(None, None, name="normal")
        self.initcolorpair(curses.COLOR_WHITE, curses.COLOR_MAGENTA,
                           name="selected")
        self.initcolorpair(curses.COLOR_RED, None, name="deletion")
        self.initcolorpair(curses.COLOR_GREEN, None, name="addition")
        self.initcolorpair(curses.COLOR_CYAN, None, name="nonewline")
        self.initcolorpair(curses.COLOR_WHITE, curses.COLOR_BLUE, name="legend")

        if not self.layout():
            self.initerr = _('the terminal is too small to display the hunks')
            return

        while True:
            self.updatescreen()
            try:
                keypressed = self.statuswin.getkey()
            except curses.error:
                # no key within KEY_TIMEOUT, just redraw
                continue
            if self.handlekeypressed(keypressed):
                break
