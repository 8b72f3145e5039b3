"""
Tests for UpscaleExecutor.
"""
import asyncio
import sys
import pytest
from pathlib import Path

from upscalebot.config import BotConfig
from upscalebot.core.errors import ExecutionError, NoOutputError
from upscalebot.upscaler import UpscaleExecutor

from fakes import RecordingRunner, save_image


@pytest.fixture
def esrgan_dir(temp_dir) -> Path:
    folder = temp_dir / "ESRGAN"
    for sub in ("LR", "results", "models"):
        (folder / sub).mkdir(parents=True)
    (folder / "test.py").write_text("")
    return folder


def _executor(esrgan_dir, runner):
    return UpscaleExecutor(
        script=esrgan_dir / "test.py",
        models_dir=esrgan_dir / "models",
        python_executable="python3",
        runner=runner
    )


class TestUpscaleExecutor:
    """Tests for UpscaleExecutor class."""

    def test_build_command(self, esrgan_dir):
        executor = _executor(esrgan_dir, RecordingRunner())

        cmd = executor.build_command(esrgan_dir / "LR", esrgan_dir / "results", "4xBox.pth")

        assert cmd == [
            "python3",
            str(esrgan_dir / "test.py"),
            str(esrgan_dir / "models" / "4xBox.pth"),
            f"--input={esrgan_dir / 'LR'}/",
            f"--output={esrgan_dir / 'results'}/",
        ]

    def test_defaults_to_current_interpreter(self, esrgan_dir):
        executor = UpscaleExecutor(esrgan_dir / "test.py", esrgan_dir / "models")
        assert executor.python_executable == sys.executable

    def test_from_config(self, esrgan_dir):
        executor = UpscaleExecutor.from_config(BotConfig(esrgan_path=esrgan_dir, python_executable="py"))

        assert executor.script == esrgan_dir / "test.py"
        assert executor.models_dir == esrgan_dir / "models"
        assert executor.python_executable == "py"

    def test_run_returns_new_files(self, esrgan_dir):
        output_dir = esrgan_dir / "results"
        save_image(output_dir / "stale.png")

        def upscale(cmd):
            save_image(output_dir / "cat_tile_001_rlt.png")
            save_image(output_dir / "cat_tile_000_rlt.png")

        runner = RecordingRunner(on_run=upscale)
        executor = _executor(esrgan_dir, runner)

        result = asyncio.run(executor.run(esrgan_dir / "LR", output_dir, "4xBox.pth"))

        assert [p.name for p in result.paths] == ["cat_tile_000_rlt.png", "cat_tile_001_rlt.png"]
        assert runner.cwds == [esrgan_dir]

    def test_no_output_raises(self, esrgan_dir):
        executor = _executor(esrgan_dir, RecordingRunner())

        with pytest.raises(NoOutputError):
            asyncio.run(executor.run(esrgan_dir / "LR", esrgan_dir / "results", "4xBox.pth"))

    def test_process_failure_raises(self, esrgan_dir):
        executor = _executor(esrgan_dir, RecordingRunner(fail=True))

        with pytest.raises(ExecutionError, match="simulated failure") as exc_info:
            asyncio.run(executor.run(esrgan_dir / "LR", esrgan_dir / "results", "4xBox.pth"))

        assert not isinstance(exc_info.value, NoOutputError)

    def test_missing_interpreter_raises(self, esrgan_dir):
        executor = UpscaleExecutor(
            esrgan_dir / "test.py", esrgan_dir / "models",
            python_executable="no-such-python-xyz"
        )

        with pytest.raises(ExecutionError, match="executable not found"):
            asyncio.run(executor.run(esrgan_dir / "LR", esrgan_dir / "results", "4xBox.pth"))
