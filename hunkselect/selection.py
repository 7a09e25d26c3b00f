# Hunk selection state and the non-interactive selector
#
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

from gettext import gettext as _
from pathlib import Path
from typing import Optional, Sequence, Union

from .hunkpatch import Hunk, Patch, writepatch
from .util import Abort, writefile


class Selection:
    """Cursor over the hunks of a patch and the file their marks go to.

    The hunks are presented in parse order.  The cursor never leaves the
    list and never wraps; with no hunks at all it stays at 0 and there is
    no current hunk.
    """

    def __init__(self, patch: Patch, output: Union[str, Path], ui=None):
        self.patch = patch
        self.output = Path(output)
        self.ui = ui
        self.order: list[int] = list(range(len(patch.hunks)))
        self.cursor = 0
        self.status = ''
        # error of the last write, None once a write succeeds
        self.failed: Optional[OSError] = None

    def __len__(self) -> int:
        return len(self.order)

    @property
    def current(self) -> Optional[Hunk]:
        if not self.order:
            return None
        return self.patch.hunks[self.order[self.cursor]]

    def move(self, delta: int) -> None:
        if not self.order:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor + delta, len(self.order) - 1))

    def first(self) -> None:
        self.move(-len(self.order))

    def last(self) -> None:
        self.move(len(self.order))

    def toggle_current(self) -> Optional[Hunk]:
        """Flip the mark of the hunk under the cursor and return it"""
        hunk = self.current
        if hunk is not None:
            hunk.marked = not hunk.marked
        return hunk

    def render(self) -> str:
        return writepatch(self.patch.files, self.patch.hunks)

    def save(self) -> None:
        """Rewrite the output file from the current marks"""
        writefile(self.output, self.render())

    def toggleandsave(self) -> bool:
        """
        Toggle the current hunk and rewrite the output file straight away.

        A failed write is reported through the status message and does not
        undo the toggle; toggling again retries the write.
        """
        self.toggle_current()
        try:
            self.save()
        except OSError as inst:
            self.failed = inst
            self.status = _("ERROR: %s") % inst
            if self.ui is not None:
                self.ui.warn(_("failed to write %s: %s") % (self.output, inst))
            return False

        self.failed = None
        self.status = _("Saved %d selected hunk(s) → %s") % (
            self.patch.markedcount(), self.output)
        if self.ui is not None:
            self.ui.debug(self.status)
        return True


def parseselection(spec: str, count: int) -> Sequence[int]:
    """Turn a comma-separated list of 1-based hunk numbers into indices.

    >>> parseselection('1,3', 4)
    [0, 2]
    >>> parseselection('all', 3)
    [0, 1, 2]
    >>> parseselection('2, 2 ,', 2)
    [1]
    >>> parseselection('5', 4)
    Traceback (most recent call last):
        ...
    hunkselect.util.Abort: no hunk 5 (the patch has 4 hunks)
    """
    if spec.strip() == 'all':
        return list(range(count))

    indices = []
    for item in spec.split(','):
        item = item.strip()
        if not item:
            continue
        try:
            number = int(item)
        except ValueError:
            raise Abort(_("invalid hunk number: %r") % item)
        if not 1 <= number <= count:
            raise Abort(_("no hunk %d (the patch has %d hunks)") % (number, count))
        if number - 1 not in indices:
            indices.append(number - 1)
    return indices


def batchselector(spec: str):
    """
    Build a selector which marks the hunks listed in spec and writes the
    output once, without any user interaction.
    """
    def selector(opts, selection: Selection, ui):
        for index in parseselection(spec, len(selection)):
            selection.cursor = index
            selection.toggle_current()
        try:
            selection.save()
        except OSError as inst:
            raise Abort(_("failed to write %s: %s") % (selection.output, inst))
        ui.info(_("wrote %d selected hunk(s) to %s") % (
            selection.patch.markedcount(), selection.output))

    return selector
