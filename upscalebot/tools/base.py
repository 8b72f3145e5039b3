"""
Shared behaviour for external tool adapters.
"""
from pathlib import Path
from typing import Iterable, Optional, Sequence, Type
import logging

from ..core.interfaces import IToolAdapter
from ..core.errors import ToolError
from .runner import ToolRunner, TOOL_FAILURES, describe_failure

logger = logging.getLogger(__name__)


class ExternalTool(IToolAdapter):
    """
    Base adapter: runs a command and maps failures to a named ToolError.

    Partial outputs listed by the caller are removed before the error
    propagates, so a failed tool never leaves files behind.
    """

    error_class: Type[ToolError] = ToolError

    def __init__(self, runner: Optional[ToolRunner] = None, binary: str = "magick"):
        self.runner = runner or ToolRunner()
        self.binary = binary

    async def _execute(
        self,
        cmd: Sequence[str],
        partial_outputs: Iterable[Path] = (),
        cwd: Optional[Path] = None
    ) -> str:
        partial_outputs = list(partial_outputs)
        try:
            return await self.runner.run(cmd, cwd=cwd)
        except TOOL_FAILURES as e:
            self._remove(partial_outputs)
            reason = describe_failure(e)
            logger.error(f"{self.kind.value} failed: {reason}")
            raise self.error_class(f"{self.error_class.default_message} ({reason})") from e

    @staticmethod
    def _remove(paths: Iterable[Path]) -> None:
        for path in paths:
            Path(path).unlink(missing_ok=True)
