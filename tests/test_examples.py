"""
Tests for the standalone example scripts.
"""
import asyncio
import importlib.util
from pathlib import Path

import pytest

from upscalebot.upscale_queue import UpscaleQueue

from fakes import make_job, make_pipeline

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def upscale_local():
    spec = importlib.util.spec_from_file_location("upscale_local", EXAMPLES_DIR / "upscale_local.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestConsoleReplyTarget:
    """Tests for the console reply target in upscale_local.py."""

    def test_result_outlives_workspace_clear(self, upscale_local, workspace, temp_dir, capsys):
        destination = temp_dir / "saved"
        target = upscale_local.ConsoleReplyTarget(destination)

        async def scenario():
            queue = UpscaleQueue(make_pipeline(workspace), workspace)
            queue.enqueue(make_job("cat.png", reply_target=target))
            await queue.join()

        asyncio.run(scenario())

        saved = destination / "cat_rlt.png"
        assert workspace.output_files() == []
        assert saved.is_file()
        assert str(saved) in capsys.readouterr().out

    def test_defaults_to_current_directory(self, upscale_local, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert upscale_local.ConsoleReplyTarget().destination.resolve() == temp_dir.resolve()
