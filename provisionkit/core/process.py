"""
Synchronous execution of external commands.

Every package-manager, toolchain-manager and build call goes through
CommandRunner so the result is always a CommandResult with exit status and
output, and so extra tool directories (e.g. ~/.cargo/bin) are on the search
path for both lookups and child processes.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "timed out"
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass
class CommandResult:
    """Result of running an external command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """True if the command exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        return (self.stdout or "") + (self.stderr or "")

    def describe(self) -> str:
        """Short diagnostic line for logs and error messages."""
        text = " ".join(self.command)
        detail = (self.stderr or self.stdout or "").strip().splitlines()
        if detail:
            return f"'{text}' exited with {self.returncode}: {detail[-1]}"
        return f"'{text}' exited with {self.returncode}"


class CommandRunner:
    """
    Runs external commands and locates executables.

    Attributes:
        extra_paths: Directories searched before PATH
        timeout: Optional timeout in seconds for every command (None = wait)
    """

    def __init__(
        self,
        extra_paths: Optional[Iterable[Path]] = None,
        timeout: Optional[float] = None,
    ):
        self.extra_paths = [Path(p).expanduser() for p in (extra_paths or [])]
        self.timeout = timeout

    def search_path(self) -> str:
        """
        Return PATH with extra directories prepended.

        Extra directories win over PATH so a toolchain installed into
        ~/.cargo/bin shadows an older system rustc.
        """
        extras = [str(extra) for extra in self.extra_paths]
        entries = [
            p
            for p in os.environ.get("PATH", "").split(os.pathsep)
            if p and p not in extras
        ]
        return os.pathsep.join(extras + entries)

    def environment(self) -> Dict[str, str]:
        """Environment for child processes."""
        env = dict(os.environ)
        env["PATH"] = self.search_path()
        return env

    def which(self, name: str) -> Optional[Path]:
        """
        Find executable on the search path.

        Args:
            name: Executable name

        Returns:
            Path to executable or None if not found
        """
        found = shutil.which(name, path=self.search_path())
        return Path(found) if found else None

    def run(
        self,
        command: Sequence[str],
        cwd: Optional[Path] = None,
        capture: bool = True,
    ) -> CommandResult:
        """
        Run a command and wait for it.

        Args:
            command: Command and arguments
            cwd: Working directory
            capture: Capture output; when False output goes to the terminal

        Returns:
            CommandResult (never raises for non-zero exit or missing executable)
        """
        command = [str(part) for part in command]
        logger.debug(f"Running: {' '.join(command)}")

        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                env=self.environment(),
                capture_output=capture,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            return CommandResult(
                command, EXIT_NOT_FOUND, stderr=f"{command[0]}: command not found"
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                command, EXIT_TIMEOUT, stderr=f"timed out after {self.timeout}s"
            )

        result = CommandResult(
            command,
            completed.returncode,
            completed.stdout or "",
            completed.stderr or "",
        )
        logger.debug(f"Exit status {result.returncode}: {' '.join(command)}")
        return result

    def run_pipeline(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """
        Run ``producer | consumer``.

        The pipeline fails if either side fails.

        Args:
            producer: Command whose stdout feeds the consumer
            consumer: Command reading from stdin
            cwd: Working directory

        Returns:
            CommandResult for the whole pipeline
        """
        producer = [str(part) for part in producer]
        consumer = [str(part) for part in consumer]
        shown = producer + ["|"] + consumer
        logger.debug(f"Running: {' '.join(shown)}")

        env = self.environment()
        try:
            upstream = subprocess.Popen(
                producer,
                cwd=str(cwd) if cwd else None,
                env=env,
                stdout=subprocess.PIPE,
            )
        except FileNotFoundError:
            return CommandResult(
                shown, EXIT_NOT_FOUND, stderr=f"{producer[0]}: command not found"
            )

        try:
            downstream = subprocess.Popen(
                consumer,
                cwd=str(cwd) if cwd else None,
                env=env,
                stdin=upstream.stdout,
            )
        except FileNotFoundError:
            upstream.kill()
            upstream.wait()
            return CommandResult(
                shown, EXIT_NOT_FOUND, stderr=f"{consumer[0]}: command not found"
            )

        # Let the producer see SIGPIPE if the consumer exits early
        upstream.stdout.close()
        try:
            consumer_status = downstream.wait(timeout=self.timeout)
            producer_status = upstream.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            for process in (downstream, upstream):
                process.kill()
                process.wait()
            return CommandResult(
                shown, EXIT_TIMEOUT, stderr=f"timed out after {self.timeout}s"
            )

        returncode = producer_status or consumer_status
        return CommandResult(shown, returncode)
