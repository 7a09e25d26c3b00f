# Text normalization and display width helpers
#
# Copyright 2009, 2010 Matt Mackall <mpm@selenic.com>
# Copyright 2010, 2011 FUJIWARA Katsunori <foozy@lares.dti.ne.jp>
# Copyright 2025 The hunkselect authors
#
# This software may be used and distributed according to the terms of the
# GNU General Public License version 2 or any later version.
#
# SPDX-License-Identifier: GPL-2.0-or-later

import unicodedata


# How to treat ambiguous-width characters. Set to 'WFA' to treat as wide.
wide = "WF"

TABWIDTH = 4


def normalize(text: str, tabwidth: int = TABWIDTH) -> str:
    r"""Prepare raw patch text for parsing.

    Carriage returns of CRLF pairs are collapsed and every tab becomes
    a fixed run of spaces, regardless of its column:

    >>> normalize('a\r\n\tb\r\n')
    'a\n    b\n'
    >>> normalize('x\ty', tabwidth=2)
    'x  y'
    """
    return text.replace('\r\n', '\n').replace('\t', ' ' * tabwidth)


def ucolwidth(d: str) -> int:
    """Find the column width of a Unicode string for display"""
    eaw = getattr(unicodedata, 'east_asian_width', None)
    if eaw is not None:
        return sum([eaw(c) in wide and 2 or 1 for c in d])
    return len(d)


def wrap(s: str, width: int) -> list[str]:
    """Cut a string into pieces of at most 'width' display columns.

    Whitespace is kept as it is, so the pieces join back into 's'.

    >>> wrap('+abcdef', 3)
    ['+ab', 'cde', 'f']
    >>> wrap('', 3)
    ['']
    >>> wrap('あいう', 4)
    ['あい', 'う']
    """
    pieces = []
    piece = ''
    for c in s:
        if piece and ucolwidth(piece + c) > width:
            pieces.append(piece)
            piece = ''
        piece += c
    pieces.append(piece)
    return pieces


def ellipsis(text: str, maxlength: int = 400) -> str:
    """Trim string to at most maxlength (default: 400) columns in display."""
    return trim(text, maxlength, ellipsis='...')


def trim(s: str, width: int, ellipsis: str = '') -> str:
    """Trim string 's' to at most 'width' columns (including 'ellipsis').

    >>> trim('1234567890', 12, ellipsis='+++')
    '1234567890'
    >>> trim('1234567890', 8, ellipsis='+++')
    '12345+++'
    >>> trim('1234567890', 8)
    '12345678'
    >>> trim('1234567890', 1, ellipsis='+++')
    '+'
    >>> trim('あいうえお', 8, ellipsis='+++')
    'あい+++'
    """
    if ucolwidth(s) <= width:  # trimming is not needed
        return s

    width -= len(ellipsis)
    if width <= 0:  # no enough room even for ellipsis
        return ellipsis[:width + len(ellipsis)]

    for i in range(1, len(s)):
        usub = s[:-i]
        if ucolwidth(usub) <= width:
            return usub + ellipsis
    return ellipsis  # no enough room for multi-column characters
