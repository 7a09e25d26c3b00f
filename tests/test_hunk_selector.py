from pathlib import Path

import pytest

from hunkselect import hunk_selector
from hunkselect.hunk_selector import CursesHunkSelector, hunkselector, listentry, previewlines
from hunkselect.hunkpatch import parsepatch
from hunkselect.selection import Selection


class FakeWindow:
    def __init__(self, height: int, width: int):
        self.height = height
        self.width = width

    def getmaxyx(self):
        return self.height, self.width


@pytest.fixture
def selector(tmp_path: Path, two_file_patch: str) -> CursesHunkSelector:
    selection = Selection(parsepatch(two_file_patch), tmp_path / "out.patch")
    selector = CursesHunkSelector(selection, None)
    selector.listwin = FakeWindow(4, 40)
    return selector


def test_listentry(selector: CursesHunkSelector):
    patch = selector.patch

    assert listentry(patch, patch.hunks[2]) == '[ ] a/README → b/README  @@ -1 +1 @@  —  -Hello'
    patch.hunks[2].marked = True
    assert listentry(patch, patch.hunks[2]).startswith('[x] ')


def test_previewlines(selector: CursesHunkSelector):
    lines = previewlines(selector.patch.hunks[2])

    assert lines == [
        ('@@ -1 +1 @@', 'header'),
        ('-Hello', 'deletion'),
        ('+Hello, world', 'addition'),
        ('\\ No newline at end of file', 'nonewline'),
    ]


@pytest.mark.parametrize(
    ("keys", "cursor"),
    [
        pytest.param(["j"], 1, id="j"),
        pytest.param(["KEY_DOWN", "KEY_DOWN", "KEY_DOWN"], 2, id="down"),
        pytest.param(["G", "k"], 1, id="end and up"),
        pytest.param(["KEY_END", "KEY_HOME"], 0, id="end and home"),
        pytest.param(["J"], 2, id="page down"),
        pytest.param(["J", "K"], 0, id="page down and up"),
    ],
)
def test_movement_keys(selector: CursesHunkSelector, keys, cursor):
    for key in keys:
        assert not selector.handlekeypressed(key)

    assert selector.selection.cursor == cursor


@pytest.mark.parametrize("key", [" ", "\n", "KEY_ENTER"])
def test_toggle_keys_save(selector: CursesHunkSelector, key):
    selector.handlekeypressed("j")
    selector.handlekeypressed(key)

    assert selector.patch.hunks[1].marked
    assert '@@ -20,3 +20,4 @@ def main():' in selector.selection.output.read_text()


def test_quit(selector: CursesHunkSelector):
    assert selector.handlekeypressed("q")
    assert not selector.selection.output.exists()


def test_scrolling(selector: CursesHunkSelector):
    # two entries fit between the borders of a four line window
    assert selector.listheight == 2

    selector.selection.last()
    selector.updatescroll()
    assert selector.firstlineoflist == 1

    selector.selection.first()
    selector.updatescroll()
    assert selector.firstlineoflist == 0


class RecordingUi:
    def __init__(self):
        self.warnings = []

    def warn(self, *msg, **opts):
        self.warnings.append(msg)

    def debug(self, *msg, **opts):
        pass


def test_write_failure_is_reported_after_curses_exits(monkeypatch, tmp_path: Path,
                                                      two_file_patch: str):
    ui = RecordingUi()
    selection = Selection(parsepatch(two_file_patch),
                          tmp_path / "missing" / "out.patch", ui)
    warnings_during_session = []

    def wrapper(func, opts):
        # toggle once while the terminal belongs to curses
        selector = func.__self__
        selector.listwin = FakeWindow(4, 40)
        selector.handlekeypressed(" ")
        warnings_during_session.extend(ui.warnings)

    monkeypatch.setattr(hunk_selector.curses, "wrapper", wrapper)
    hunkselector({}, selection, ui)

    assert warnings_during_session == []
    assert selection.status.startswith('ERROR: ')
    assert selection.patch.hunks[0].marked
    assert len(ui.warnings) == 1
    assert ui.warnings[0][0].startswith('failed to write %s: ' % selection.output)
    assert selection.ui is ui


def test_no_warning_once_a_later_write_succeeds(monkeypatch, tmp_path: Path,
                                                two_file_patch: str):
    ui = RecordingUi()
    selection = Selection(parsepatch(two_file_patch),
                          tmp_path / "missing" / "out.patch", ui)

    def wrapper(func, opts):
        selector = func.__self__
        selector.handlekeypressed(" ")
        (tmp_path / "missing").mkdir()
        selector.handlekeypressed(" ")

    monkeypatch.setattr(hunk_selector.curses, "wrapper", wrapper)
    hunkselector({}, selection, ui)

    assert ui.warnings == []
    assert selection.output.read_text() == ''
