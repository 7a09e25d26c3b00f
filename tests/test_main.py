import shutil
from pathlib import Path

import pytest

from hunkselect.main import Ui
from hunkselect.recorder import loadpatch
from hunkselect.util import Abort


def test_select(run_hunkselect, patch_file: Path, tmp_path: Path):
    output = tmp_path / "subset.patch"
    p = run_hunkselect(str(patch_file), "-o", str(output), "--select", "3")

    assert p.returncode == 0, p.stderr
    assert output.read_text() == (
        'diff --git a/README b/README\n'
        'index 1111111..2222222 100644\n'
        '--- a/README\n'
        '+++ b/README\n'
        '@@ -1 +1 @@\n'
        '-Hello\n'
        '+Hello, world\n'
        '\\ No newline at end of file\n'
    )


def test_select_all_reproduces_input(run_hunkselect, patch_file: Path, tmp_path: Path):
    output = tmp_path / "subset.patch"
    p = run_hunkselect(str(patch_file), "--output", str(output), "--select", "all")

    assert p.returncode == 0, p.stderr
    assert output.read_text() == patch_file.read_text()


def test_list(run_hunkselect, patch_file: Path, tmp_path: Path):
    output = tmp_path / "subset.patch"
    p = run_hunkselect(str(patch_file), "-o", str(output), "--list")

    assert p.returncode == 0, p.stderr
    assert p.stdout.splitlines() == [
        '1  a/src/app.py → b/src/app.py  @@ -1,4 +1,4 @@  —  import os',
        '2  a/src/app.py → b/src/app.py  @@ -20,3 +20,4 @@ def main():  —  run()',
        '3  a/README → b/README  @@ -1 +1 @@  —  -Hello',
    ]
    assert not output.exists()


def test_crlf_and_tabs_are_normalized(run_hunkselect, tmp_path: Path):
    patch_file = tmp_path / "crlf.patch"
    patch_file.write_bytes(b'diff --git a/f b/f\r\n@@ -1 +1 @@\r\n-\told\r\n+\tnew\r\n')
    output = tmp_path / "subset.patch"
    p = run_hunkselect(str(patch_file), "-o", str(output), "--select", "1",
                       "--tab-width", "2")

    assert p.returncode == 0, p.stderr
    assert output.read_bytes() == b'diff --git a/f b/f\n@@ -1 +1 @@\n-  old\n+  new\n'


def test_missing_input(run_hunkselect, tmp_path: Path):
    p = run_hunkselect(str(tmp_path / "nonexistent.patch"), "-o", "out.patch")

    assert p.returncode == 1
    assert p.stderr.startswith('abort: failed to read ')


def test_undecodable_input(run_hunkselect, tmp_path: Path):
    patch_file = tmp_path / "latin1.patch"
    patch_file.write_bytes(b'diff --git a/f b/f\n@@ -1 +1 @@\n-caf\xe9\n')
    p = run_hunkselect(str(patch_file), "-o", "out.patch", "--select", "1")

    assert p.returncode == 1
    assert p.stderr.startswith('abort: failed to read ')


def test_no_hunks(run_hunkselect, tmp_path: Path):
    patch_file = tmp_path / "empty.patch"
    patch_file.write_text('this is not a patch\n')
    p = run_hunkselect(str(patch_file), "-o", "out.patch")

    assert p.returncode == 1
    assert p.stderr == 'abort: no hunks found in %s\n' % patch_file
    assert not (tmp_path / "out.patch").exists()


def test_bad_selection(run_hunkselect, patch_file: Path):
    p = run_hunkselect(str(patch_file), "-o", "out.patch", "--select", "7")

    assert p.returncode == 1
    assert p.stderr == 'abort: no hunk 7 (the patch has 3 hunks)\n'


def test_output_is_required(run_hunkselect, patch_file: Path):
    p = run_hunkselect(str(patch_file), "--select", "1")

    assert p.returncode == 2
    assert '--output' in p.stderr


def test_loadpatch(patch_file: Path):
    patch = loadpatch(Ui(), patch_file)

    assert len(patch.hunks) == 3


def test_loadpatch_rejects_empty(tmp_path: Path):
    empty = tmp_path / "empty.patch"
    empty.write_text('')

    with pytest.raises(Abort, match='no hunks found'):
        loadpatch(Ui(), empty)


def test_ui_levels(capsys):
    ui = Ui()
    ui.debug('hidden')
    ui.info('hidden too')
    ui.warn('shown')
    ui.setdebuglevel(2)
    ui.debug('debugging')
    ui.status('status')

    captured = capsys.readouterr()
    assert captured.err == 'shown\ndebugging\n'
    assert captured.out == 'status\n'


@pytest.mark.skipif(shutil.which("git") is None, reason="needs git")
def test_tabwidth_from_git_config(run_hunkselect, tmp_path: Path):
    config = tmp_path / ".gitconfig"
    config.write_text('[hunkselect]\n\ttabwidth = 2\n')
    patch_file = tmp_path / "tabs.patch"
    patch_file.write_text('diff --git a/f b/f\n@@ -1 +1 @@\n-\told\n+\tnew\n')
    output = tmp_path / "out.patch"
    p = run_hunkselect(str(patch_file), "-o", str(output), "--select", "1",
                       env={'HOME': str(tmp_path), 'GIT_CONFIG_GLOBAL': str(config)})

    assert p.returncode == 0, p.stderr
    assert output.read_text() == 'diff --git a/f b/f\n@@ -1 +1 @@\n-  old\n+  new\n'


@pytest.mark.skipif(shutil.which("git") is None, reason="needs git")
def test_negative_tabwidth_in_git_config(run_hunkselect, tmp_path: Path):
    config = tmp_path / ".gitconfig"
    config.write_text('[hunkselect]\n\ttabwidth = -2\n')
    patch_file = tmp_path / "tabs.patch"
    patch_file.write_text('diff --git a/f b/f\n@@ -1 +1 @@\n-\told\n+\tnew\n')
    output = tmp_path / "out.patch"
    p = run_hunkselect(str(patch_file), "-o", str(output), "--select", "1",
                       env={'HOME': str(tmp_path), 'GIT_CONFIG_GLOBAL': str(config)})

    assert p.returncode == 1
    assert p.stderr == 'abort: hunkselect.tabwidth must not be negative\n'
    assert not output.exists()
