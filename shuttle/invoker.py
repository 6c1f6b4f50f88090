"""
Backend invoker: runs the backend executable and reports what happened.

Execution styles
- run_captured(command, args)    → Outcome(stdout, stderr, succeeded)
- run_interactive(command, args) → bool; the child inherits the terminal (stdin,
  stdout, stderr) and is never timed out, since it may be a shell or a long,
  user-driven operation.
- run_structured(command, args)  → decoded JSON document or None; the backend's
  structured-output flag is appended to the arguments.

Every call funnels through Backend._spawn(), the single place that touches
subprocess. Tests replace it to script the backend.

Timeouts
- Captured calls accept a timeout (Unset → the backend default, None → unbounded).
  subprocess.run() kills the child when it expires; the call then reports a failed
  Outcome whose stderr explains the timeout.
"""
import json
import logging
import subprocess
import sys
from collections import namedtuple

from .faults import BackendNotFoundError
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

STRUCTURED_FLAG = "--json-output"

Outcome = namedtuple("Outcome", ("stdout", "stderr", "succeeded"))
Outcome.__doc__ = "captured result of one backend process (stdout, stderr, succeeded)"


class Backend:
    """
    Handle on the backend executable.

    Parameters
    - executable: name or path of the backend tool (looked up on PATH).
    - timeout: default timeout, in seconds, for captured calls; None disables it.
    """

    def __init__(self, executable, /, timeout=None):
        if not isinstance(executable, str) or not executable.strip():
            raise TypeError("backend executable must be a non-empty string")
        self.executable = executable.strip()
        self.timeout = timeout
        self._version = Unset

    def argv(self, command, args=(), /):
        """
        build the argument vector: <backend> <command> [args...]
        """
        return [self.executable, *((command,) if command else ()), *args]

    def _spawn(self, argv, /, *, capture, timeout):
        """
        launch one process and wait for it; returns (returncode, stdout, stderr).

        stdout/stderr are None when not captured.
        """
        logger.debug("running %s (capture=%s, timeout=%s)", argv, capture, timeout)
        try:
            process = subprocess.run(
                argv,
                capture_output=capture,
                text=capture,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError:
            raise BackendNotFoundError(
                f"backend executable {self.executable!r} was not found",
                hint=f"install {self.executable!r} or put it on your PATH",
                executable=self.executable,
            ) from None
        return process.returncode, process.stdout, process.stderr

    def run_captured(self, command, args=(), /, *, timeout=Unset):
        timeout = coalesce(timeout, self.timeout)
        argv = self.argv(command, args)
        try:
            returncode, stdout, stderr = self._spawn(argv, capture=True, timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("%s timed out after %ss", " ".join(argv), timeout)
            return Outcome("", f"{' '.join(argv)} timed out after {timeout:g}s\n", False)
        logger.debug("%s exited with %d", " ".join(argv), returncode)
        return Outcome(stdout or "", stderr or "", returncode == 0)

    def run_interactive(self, command, args=(), /):
        argv = self.argv(command, args)
        returncode, _, _ = self._spawn(argv, capture=False, timeout=None)
        logger.debug("%s exited with %d", " ".join(argv), returncode)
        return returncode == 0

    def run_structured(self, command, args=(), /, *, timeout=Unset):
        outcome = self.run_captured(command, [*args, STRUCTURED_FLAG], timeout=timeout)
        if not outcome.succeeded:
            return None
        try:
            document = json.loads(outcome.stdout)
        except ValueError:
            logger.debug("no structured document from %s %s", command, " ".join(args))
            return None
        # ddev wraps the payload of --json-output in {"raw": ...}
        if isinstance(document, dict) and "raw" in document:
            document = document["raw"]
        return document

    def run_text(self, command, args=(), /, *, timeout=Unset):
        """
        stdout on success, stderr otherwise; for help scraping where either may hold text.
        """
        outcome = self.run_captured(command, args, timeout=timeout)
        return outcome.stdout if outcome.succeeded else outcome.stderr

    def interactive_supported(self):
        """
        whether a child process can be attached to a real terminal.
        """
        try:
            return sys.stdin.isatty() and sys.stdout.isatty()
        except (AttributeError, ValueError):
            return False

    def version(self):
        if self._version is Unset:
            outcome = self.run_captured("-v")
            self._version = outcome.stdout.strip() if outcome.succeeded and outcome.stdout.strip() else "UNKNOWN"
        return self._version

    def __repr__(self):
        return f"backend(executable={self.executable!r}, timeout={self.timeout!r})"


__all__ = (
    "STRUCTURED_FLAG",
    "Outcome",
    "Backend",
)
