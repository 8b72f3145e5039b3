"""
Runs the ESRGAN upscaling script over the staged input directory.
"""
import sys
from pathlib import Path
from typing import Optional, Set
import logging
import time

from natsort import natsorted

from ..core.interfaces import IUpscaleExecutor, ArtifactPaths
from ..core.errors import ExecutionError, NoOutputError
from ..tools.runner import ToolRunner, TOOL_FAILURES, describe_failure

logger = logging.getLogger(__name__)


class UpscaleExecutor(IUpscaleExecutor):
    """
    Invokes ``test.py <model> --input=<dir>/ --output=<dir>/`` once per job.

    The process gets the whole input directory, so every tile of a split
    image is upscaled in the same run. There is no timeout: a hung process
    blocks the queue until it exits.
    """

    def __init__(
        self,
        script: Path,
        models_dir: Path,
        python_executable: Optional[str] = None,
        runner: Optional[ToolRunner] = None
    ):
        self.script = Path(script)
        self.models_dir = Path(models_dir)
        self.python_executable = python_executable or sys.executable
        self.runner = runner or ToolRunner()

    @classmethod
    def from_config(cls, config, runner: Optional[ToolRunner] = None) -> "UpscaleExecutor":
        return cls(
            script=config.upscale_script,
            models_dir=config.models_dir,
            python_executable=config.python_executable,
            runner=runner
        )

    async def run(self, input_dir: Path, output_dir: Path, model: str) -> ArtifactPaths:
        """
        Upscale all images in input_dir with model.

        Raises:
            ExecutionError: the process failed to start or exited non-zero
            NoOutputError: the process exited cleanly but wrote no file
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        before = self._snapshot(output_dir)
        cmd = self.build_command(input_dir, output_dir, model)

        logger.info(f"Upscaling {input_dir} with {model}")
        start_time = time.time()

        try:
            await self.runner.run(cmd, cwd=self.script.parent)
        except TOOL_FAILURES as e:
            reason = describe_failure(e)
            logger.error(f"Upscale failed: {reason}")
            raise ExecutionError(f"Sorry, there was an error processing your image. ({reason})") from e

        produced = natsorted(output_dir / name for name in self._snapshot(output_dir) - before)
        if not produced:
            logger.error(f"Upscale produced no output in {output_dir}")
            raise NoOutputError("Sorry, there was an error processing your image. (no output produced)")

        elapsed = time.time() - start_time
        logger.info(f"Upscaled {len(produced)} file(s) in {elapsed:.2f}s")
        return ArtifactPaths(produced)

    def build_command(self, input_dir: Path, output_dir: Path, model: str) -> list:
        return [
            self.python_executable,
            str(self.script),
            str(self.models_dir / model),
            f"--input={input_dir}/",
            f"--output={output_dir}/",
        ]

    @staticmethod
    def _snapshot(folder: Path) -> Set[str]:
        return {f.name for f in folder.iterdir() if f.is_file()}
