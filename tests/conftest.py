import os
import subprocess
import sys
from textwrap import dedent

import pytest


@pytest.fixture
def run_hunkselect(tmp_path):
    def run(*args: str, env=None) -> subprocess.CompletedProcess:
        env = dict(os.environ, **(env or {}))
        env['PYTHONPATH'] = os.getcwd()
        env['PYTHONIOENCODING'] = 'utf-8'
        return subprocess.run(
            [sys.executable, "-m", "hunkselect.main", *args],
            env=env,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            encoding='utf-8',
            cwd=tmp_path,
            timeout=30,
        )
    return run


@pytest.fixture
def two_file_patch() -> str:
    return dedent(
        '''
        diff --git a/src/app.py b/src/app.py
        index 83db48f..bf269f4 100644
        --- a/src/app.py
        +++ b/src/app.py
        @@ -1,4 +1,4 @@
         import os
        -import sys
        +import logging

         def main():
        @@ -20,3 +20,4 @@ def main():
             run()
        +    cleanup()
             return 0
        diff --git a/README b/README
        index 1111111..2222222 100644
        --- a/README
        +++ b/README
        @@ -1 +1 @@
        -Hello
        +Hello, world
        \\ No newline at end of file
        ''',
    ).lstrip('\n')


@pytest.fixture
def patch_file(tmp_path, two_file_patch):
    path = tmp_path / "changes.patch"
    path.write_text(two_file_patch)
    return path
