# Utility functions
#
#  Copyright 2006, 2015 Matt Mackall <mpm@selenic.com>
#  Copyright 2016, 2022 Andrej Shadura <andrew@shadura.me>
#  Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of the
# GNU General Public License version 2 or any later version
#
# Some of these utilities were originally taken from Mercurial.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations

from gettext import gettext as _
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Sequence, Union


closefds = os.name == 'posix'


def explainexit(code):
    """return a 2-tuple (desc, code) describing a subprocess status
    (codes from kill are negative - not os.system/wait encoding)

    >>> explainexit(1)
    ('exited with status 1', 1)
    >>> explainexit(-9)
    ('killed by signal 9', 9)
    """
    if (code < 0) and (os.name == 'posix'):
        return _("killed by signal %d") % -code, -code
    else:
        return _("exited with status %d") % code, code


class Abort(Exception):
    pass


def systemcall(
        cmd: Sequence[str],
        encoding: Optional[str] = None,
        dir: Optional[os.PathLike | str] = None,
        onerr=None,
        errprefix=None
):
    try:
        sys.stdout.flush()
    except Exception:
        pass

    p = subprocess.Popen(cmd, cwd=dir, stdout=subprocess.PIPE,
                         stderr=subprocess.DEVNULL, close_fds=closefds)
    out = b''
    for line in iter(p.stdout.readline, b''):
        out = out + line
    p.wait()
    rc = p.returncode

    if rc and onerr:
        errmsg = '%s %s' % (os.path.basename(cmd[0]),
                            explainexit(rc)[0])
        if errprefix:
            errmsg = '%s: %s' % (errprefix, errmsg)
        raise onerr(errmsg)

    if encoding == "fs":
        return os.fsdecode(out)
    elif encoding:
        return out.decode(encoding)
    else:
        return out


def readfile(path: Union[str, Path]) -> str:
    """Read a UTF-8 text file, turning any failure into Abort"""
    try:
        return Path(path).read_bytes().decode("UTF-8")
    except (OSError, UnicodeDecodeError) as inst:
        raise Abort(_("failed to read %s: %s") % (path, inst))


def writefile(path: Union[str, Path], text: str) -> None:
    """Replace the whole contents of a file with text.

    Newlines are written as they are, with no platform translation.
    Errors are left to the caller.
    """
    with open(path, 'w', encoding="UTF-8", newline='') as f:
        f.write(text)
