"""
commands.py

Thin wrapper around subprocess for external tools (ffmpeg, whisper).
Every invocation returns a CommandResult so failures are handled the same way
everywhere, and tests can swap in a fake runner instead of real processes.
"""

import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import CommandError

# Exit status reported when the executable itself cannot be started (same as the shell)
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished external command."""

    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """
    Runs external commands synchronously and captures their output.
    """

    def run(self, args: Sequence[str], cwd: Optional[str] = None, stream: bool = False) -> CommandResult:
        """
        Run a command and wait for it to finish.

        Args:
            args: Program name followed by its arguments
            cwd: Working directory for the command (default: inherit)
            stream: Echo output line by line while the command runs. stderr is
                merged into stdout in this mode.

        Returns:
            CommandResult: exit status and captured stdout/stderr
        """
        args = tuple(str(arg) for arg in args)
        try:
            if stream:
                return self._run_streaming(args, cwd)
            completed = subprocess.run(
                args,
                cwd=cwd,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as e:
            return CommandResult(args=args, returncode=COMMAND_NOT_FOUND, stderr=str(e))

        return CommandResult(
            args=args,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def _run_streaming(self, args: Tuple[str, ...], cwd: Optional[str]) -> CommandResult:
        lines: List[str] = []
        with subprocess.Popen(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        ) as process:
            for line in process.stdout:
                sys.stdout.write(line)
                sys.stdout.flush()
                lines.append(line)
            returncode = process.wait()

        return CommandResult(args=args, returncode=returncode, stdout="".join(lines))

    def check(self, args: Sequence[str], cwd: Optional[str] = None, stream: bool = False) -> CommandResult:
        """
        Run a command and raise CommandError unless it succeeded.
        """
        result = self.run(args, cwd=cwd, stream=stream)
        if not result.success:
            raise CommandError(result)
        return result
