"""Run the installed hooks in a real interpreter, with real process exit."""

import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

import faultline

PACKAGE_ROOT = Path(faultline.__file__).resolve().parents[1]


@pytest.fixture
def run_script(tmp_path):
    env = {key: value for key, value in os.environ.items() if not key.startswith("FAULTLINE_")}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PACKAGE_ROOT), env.get("PYTHONPATH")]))

    def _run(source: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, "-c", textwrap.dedent(source)],
            cwd=tmp_path,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

    return _run


class TestProcessExit:
    def test_fatal_last_error_reported_at_exit(self, run_script):
        result = run_script(
            """
            import faultline

            pipeline = faultline.install()
            pipeline.record_error(faultline.Severity.ERROR, "out of memory", "job.py", 12)
            """
        )

        assert result.returncode == 1
        assert result.stdout.startswith("FatalError [ Fatal Error ]: out of memory")
        assert "FatalError [ 1 ]: out of memory ~ job.py [ 12 ]" in result.stderr

    def test_non_fatal_last_error_exits_cleanly(self, run_script):
        result = run_script(
            """
            import faultline

            pipeline = faultline.install()
            pipeline.record_error(faultline.Severity.CORE_WARNING, "slow start")
            """
        )

        assert result.returncode == 0
        assert result.stdout == ""

    def test_uncaught_exception(self, run_script):
        result = run_script(
            """
            import faultline

            faultline.install()

            def validate(x):
                raise ValueError("bad input")

            validate(5)
            """
        )

        assert result.returncode != 0
        assert result.stdout.startswith("ValueError [ 0 ]: bad input")
        assert "validate(x=5)" in result.stdout
        assert "Traceback" not in result.stderr

    def test_broken_renderer_writes_one_line_and_exits(self, run_script):
        result = run_script(
            """
            import faultline

            def renderer(event):
                print("<html><body><h1>partial")
                raise RuntimeError("template broke")

            faultline.install(renderer=renderer)
            raise ValueError("original")
            """
        )

        assert result.returncode == 1
        assert result.stdout.startswith("RuntimeError [ 0 ]: template broke ~ ")
        assert result.stdout.count("\n") == 1
        assert "<html>" not in result.stdout
        assert "ValueError [ 0 ]: original" in result.stderr

    def test_thread_exception_is_reported(self, run_script):
        result = run_script(
            """
            import threading

            import faultline

            faultline.install()

            def work(x):
                raise ValueError("in thread")

            worker = threading.Thread(target=work, args=(7,))
            worker.start()
            worker.join()
            print("main thread done")
            """
        )

        assert result.returncode == 0
        assert result.stdout.startswith("ValueError [ 0 ]: in thread")
        assert "work(x=7)" in result.stdout
        assert result.stdout.rstrip().endswith("main thread done")
        assert "Exception in thread" not in result.stderr
