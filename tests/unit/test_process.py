"""
Unit tests for the subprocess runner.

Uses the current Python interpreter as the external command so the tests do
not depend on node being installed.
"""

import sys
import time
from pathlib import Path

import pytest

from render_service.core.process import (
    MAX_ERROR_OUTPUT,
    ProcessFailed,
    ProcessTimeout,
    run_process,
    truncate_output,
)


class TestRunProcess:
    """Tests for run_process."""

    @pytest.mark.asyncio
    async def test_captures_stdout(self):
        result = await run_process([sys.executable, "-c", "print('hello')"], timeout_seconds=30)

        assert result.returncode == 0
        assert result.stdout.strip() == "hello"

    @pytest.mark.asyncio
    async def test_runs_in_cwd(self, tmp_path: Path):
        result = await run_process(
            [sys.executable, "-c", "import os; print(os.getcwd())"],
            cwd=tmp_path,
            timeout_seconds=30,
        )

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        cmd = [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]

        with pytest.raises(ProcessFailed) as exc_info:
            await run_process(cmd, timeout_seconds=30)

        assert exc_info.value.returncode == 3
        assert exc_info.value.output == "boom"
        assert "boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_binary_raises(self):
        with pytest.raises(ProcessFailed, match="Could not start"):
            await run_process(["definitely-not-a-real-binary-xyz"], timeout_seconds=5)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        start = time.time()

        with pytest.raises(ProcessTimeout):
            await run_process(
                [sys.executable, "-c", "import time; time.sleep(30)"],
                timeout_seconds=0.5,
            )

        assert time.time() - start < 10


class TestTruncateOutput:
    """Tests for truncate_output."""

    def test_short_output_unchanged(self):
        assert truncate_output("  error  \n") == "error"

    def test_long_output_keeps_tail(self):
        text = "a" * MAX_ERROR_OUTPUT + "TAIL"
        truncated = truncate_output(text)

        assert len(truncated) == MAX_ERROR_OUTPUT
        assert truncated.endswith("TAIL")
