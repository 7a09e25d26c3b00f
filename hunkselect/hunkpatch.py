# Unified diff parser, patch model and filtered patch writer
#
# Copyright 2008—2011, 2014 Mark Edgington <edgimar@gmail.com>
# Copyright 2016, 2018—2022 Andrej Shadura <andrew@shadura.me>
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of
# the GNU General Public License, incorporated herein by reference.
#
# This code is based on the patch parser of git-crecord.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

import io
from typing import IO, Optional, Sequence

FILE_MARKER = 'diff --git '
RANGE_MARKERS = ('@@ ', '@@-', '@@+')
OLDPATH_MARKER = '--- '
NEWPATH_MARKER = '+++ '


def splitlines(text: str) -> list[str]:
    r"""Split text on newlines only, dropping the empty tail after a final one.

    >>> splitlines('a\nb\n')
    ['a', 'b']
    >>> splitlines('a\n\nb')
    ['a', '', 'b']
    >>> splitlines('')
    []
    """
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return lines


def classifyline(line: str) -> str:
    """Classify a patch line as 'file', 'range' or 'line'.

    >>> classifyline('diff --git a/f b/f')
    'file'
    >>> classifyline('@@ -1 +1 @@ int main()')
    'range'
    >>> classifyline('@@-1 +1 @@')
    'range'
    >>> classifyline('@@@ -1 +1 @@@')
    'line'
    >>> classifyline('--- a/f')
    'line'
    """
    if line.startswith(FILE_MARKER):
        return 'file'
    elif line.startswith(RANGE_MARKERS):
        return 'range'
    else:
        return 'line'


class FileSection:
    """Header block of one file and the indices of its hunks"""

    headers: list[str]
    hunks: list[int]
    label: str

    def __init__(self, headers: Sequence[str]):
        self.headers = list(headers)
        self.hunks = []
        self.label = ''

    def makelabel(self) -> str:
        """Summarise the old and new paths of the file for display.

        The ---/+++ lines win over the diff --git line when present:

        >>> FileSection(['diff --git a/x b/y', 'index 1..2 100644']).makelabel()
        'a/x → b/y'
        >>> FileSection(['diff --git a/x b/y', '--- /dev/null', '+++ b/y']).makelabel()
        '/dev/null → b/y'
        >>> FileSection(['+++ b/y']).makelabel()
        '? → b/y'
        >>> FileSection([]).makelabel()
        'file'
        """
        fromfile = tofile = ''
        for line in self.headers:
            if line.startswith(FILE_MARKER):
                parts = line.split()
                if len(parts) >= 4:
                    fromfile, tofile = parts[2], parts[3]
            elif line.startswith(OLDPATH_MARKER):
                fromfile = line[len(OLDPATH_MARKER):]
            elif line.startswith(NEWPATH_MARKER):
                tofile = line[len(NEWPATH_MARKER):]

        if not fromfile and not tofile:
            return 'file'
        return '%s → %s' % (fromfile or '?', tofile or '?')

    def write(self, fp: IO[str]) -> None:
        for line in self.headers:
            fp.write(line + '\n')

    def __repr__(self) -> str:
        return '<file %r %r>' % (self.label, self.hunks)


class Hunk:
    """One hunk of a file, kept as the raw lines it was parsed from"""

    header: str
    lines: list[str]
    fileindex: int
    marked: bool
    preview: str

    def __init__(self, header: str, lines: Sequence[str], fileindex: int):
        self.header = header
        self.lines = list(lines)
        self.fileindex = fileindex
        self.marked = False
        self.preview = self.makepreview()

    def makepreview(self) -> str:
        """Build the one-line description shown in the hunk list.

        >>> Hunk('@@ -1,2 +1,2 @@ ', ['  ', '-old', '+new'], 0).makepreview()
        '@@ -1,2 +1,2 @@'
        >>> Hunk('@@ -1 +1 @@', ['\\\\ No newline at end of file', '-  old'], 0).makepreview()
        '@@ -1 +1 @@  —  -  old'
        """
        header = self.header.strip()
        for line in self.lines:
            if line.startswith((' ', '+', '-')):
                first = line.strip()
                if first:
                    return '%s  —  %s' % (header, first)
                break
        return header

    def write(self, fp: IO[str]) -> None:
        fp.write(self.header + '\n')
        for line in self.lines:
            fp.write(line + '\n')

    def __repr__(self) -> str:
        return '<hunk %r@%d%s>' % (self.header, self.fileindex,
                                   self.marked and ' marked' or '')


def writepatch(files: Sequence[FileSection], hunks: Sequence[Hunk]) -> str:
    r"""Serialise the marked hunks, each file's headers in front of its own.

    Files with no marked hunks are left out entirely.

    >>> patch = parsepatch('diff --git a/f b/f\n@@ -1 +1 @@\n-a\n+b\n@@ -5 +5 @@\n-c\n+d\n')
    >>> writepatch(patch.files, patch.hunks)
    ''
    >>> patch.hunks[1].marked = True
    >>> print(writepatch(patch.files, patch.hunks), end='')
    diff --git a/f b/f
    @@ -5 +5 @@
    -c
    +d
    """
    with io.StringIO() as fp:
        for file in files:
            selected = [hunks[i] for i in file.hunks if hunks[i].marked]
            if not selected:
                continue
            file.write(fp)
            for hunk in selected:
                hunk.write(fp)
        return fp.getvalue()


class Patch:
    """The parsed patch: flat lists of files and hunks.

    Files refer to their hunks and hunks refer back to their file by
    index, so either list can be walked on its own.
    """

    files: list[FileSection]
    hunks: list[Hunk]

    def __init__(self, files: Sequence[FileSection], hunks: Sequence[Hunk]):
        self.files = list(files)
        self.hunks = list(hunks)

    def __repr__(self) -> str:
        return '<patch %d files, %d hunks>' % (len(self.files), len(self.hunks))

    def filelabel(self, hunk: Hunk) -> str:
        return self.files[hunk.fileindex].label

    def markedhunks(self, file: FileSection) -> list[Hunk]:
        return [self.hunks[i] for i in file.hunks if self.hunks[i].marked]

    def markedcount(self) -> int:
        return len([h for h in self.hunks if h.marked])

    def write(self, fp: IO[str]) -> None:
        fp.write(writepatch(self.files, self.hunks))

    def __str__(self) -> str:
        return writepatch(self.files, self.hunks)


class Parser:
    """patch parsing state machine

    The state is one of 'preamble' (no file seen yet), 'file' (reading
    file headers) or 'hunk' (reading a hunk body); events are the line
    classes returned by classifyline().
    """

    def __init__(self):
        self.files: list[FileSection] = []
        self.hunks: list[Hunk] = []
        self.current: Optional[int] = None
        self.pending: list[str] = []
        self.header = ''
        self.body: list[str] = []

    def closehunk(self):
        """
        Store the hunk being captured, if any, and attach it to the current
        file.  Without a recorded header there is nothing to store.
        """
        if not self.header:
            return
        h = Hunk(self.header, self.body, self.current)
        self.files[self.current].hunks.append(len(self.hunks))
        self.hunks.append(h)
        self.header = ''
        self.body = []

    def startfile(self, headers):
        self.files.append(FileSection(headers))
        self.current = len(self.files) - 1

    def placeholderfile(self):
        """
        A range line arrived before any file line: create a file from
        whatever preamble was collected so the hunk has an owner.
        """
        self.startfile(self.pending)
        self.pending = []

    def newfile(self, line):
        self.closehunk()
        self.pending = []
        self.startfile([line])
        return 'file'

    def newhunk(self, line):
        self.closehunk()
        if self.current is None:
            self.placeholderfile()
        self.header = line
        self.body = []
        return 'hunk'

    def addpreamble(self, line):
        self.pending.append(line)
        return 'preamble'

    def addheader(self, line):
        self.files[self.current].headers.append(line)
        return 'file'

    def addbody(self, line):
        self.body.append(line)
        return 'hunk'

    def finished(self) -> Patch:
        self.closehunk()
        for f in self.files:
            f.label = f.makelabel()
        return Patch(self.files, self.hunks)

    transitions = {
        'preamble': {'file': newfile,
                     'range': newhunk,
                     'line': addpreamble},
        'file': {'file': newfile,
                 'range': newhunk,
                 'line': addheader},
        'hunk': {'file': newfile,
                 'range': newhunk,
                 'line': addbody},
    }


def parsepatch(text: str) -> Patch:
    r"""Parse normalized unified diff text into files and hunks.

    Parsing never fails; text that contains no hunks gives an empty patch.

    >>> rawpatch = '''diff --git a/folder1/g b/folder1/g
    ... --- a/folder1/g
    ... +++ b/folder1/g
    ... @@ -1,3 +1,3 @@ some context
    ...  1
    ... -2
    ... +two
    ... @@ -8,2 +8,3 @@
    ...  8
    ... +9
    ... \\ No newline at end of file
    ... '''
    >>> patch = parsepatch(rawpatch)
    >>> patch
    <patch 1 files, 2 hunks>
    >>> patch.files
    [<file 'a/folder1/g → b/folder1/g' [0, 1]>]
    >>> patch.hunks[0].preview
    '@@ -1,3 +1,3 @@ some context  —  1'
    >>> patch.hunks[1].lines
    [' 8', '+9', '\\ No newline at end of file']

    A hunk with no file line in front of it still gets a file:
    >>> patch = parsepatch('@@ -1 +1 @@\n-a\n+b\n')
    >>> patch.files
    [<file 'file' [0]>]

    Anything else is not a patch at all:
    >>> parsepatch('hello\nworld\n')
    <patch 0 files, 0 hunks>
    """
    p = Parser()

    # run the state-machine
    state = 'preamble'
    for line in splitlines(text):
        state = p.transitions[state][classifyline(line)](p, line)
    return p.finished()
