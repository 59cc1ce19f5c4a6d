"""
External process handles.

Every capture, normalise, or playback invocation owns exactly one child
process. ``spawn`` starts it without blocking and returns a handle the
caller can wait on or terminate.
"""

import logging
import subprocess
import threading

from ..errors import ProcessFailureError

logger = logging.getLogger(__name__)

# Seconds to wait after SIGTERM before escalating to SIGKILL
TERMINATE_GRACE_SECS = 2.0


class ProcessHandle:
    """
    Handle on a running external process.

    Example:
        handle = spawn(["ffplay", "-nodisp", "-autoexit", "kiwi.wav"], "playback")
        handle.wait()
        handle.check()  # raises ProcessFailureError on non-zero exit
    """

    def __init__(self, process: subprocess.Popen, command: list[str], description: str):
        self._process = process
        self._lock = threading.Lock()
        self._stderr: str = ""
        self._reaped = False
        self.command = command
        self.description = description

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        """Exit code, or None while the process is still running."""
        return self._process.poll()

    @property
    def running(self) -> bool:
        return self._process.poll() is None

    @property
    def stderr(self) -> str:
        """Captured stderr (populated once the process has been waited on)."""
        return self._stderr

    def wait(self, timeout: float | None = None) -> int:
        """
        Wait for the process to exit.

        Args:
            timeout: Seconds to wait (None = forever)

        Returns:
            Process exit code

        Raises:
            subprocess.TimeoutExpired: If the process is still running after timeout
        """
        with self._lock:
            if not self._reaped:
                _, stderr = self._process.communicate(timeout=timeout)
                self._stderr = stderr or ""
                self._reaped = True
            return self._process.returncode

    def terminate(self, grace: float = TERMINATE_GRACE_SECS) -> int:
        """
        Stop the process, escalating to kill if it ignores SIGTERM.

        Safe to call while another thread is blocked in wait().

        Returns:
            Process exit code
        """
        if self.running:
            logger.debug(f"Terminating {self.description} (pid {self.pid})")
            self._process.terminate()
            try:
                self._process.wait(timeout=grace)
            except subprocess.TimeoutExpired:
                logger.warning(f"{self.description} ignored SIGTERM, killing pid {self.pid}")
                self._process.kill()
                self._process.wait()
        return self.wait()

    def check(self) -> None:
        """Raise ProcessFailureError if the process exited non-zero."""
        code = self.returncode
        if code is not None and code != 0:
            raise ProcessFailureError(
                f"{self.description} failed with exit code {code}",
                command=self.command,
                returncode=code,
                stderr=self._stderr.strip() or None,
            )


def spawn(command: list[str], description: str) -> ProcessHandle:
    """
    Start an external command without waiting for it.

    Args:
        command: Argument vector
        description: Short label used in logs and error messages

    Returns:
        ProcessHandle for the child process

    Raises:
        ProcessFailureError: If the executable cannot be started
    """
    logger.debug(f"Starting {description}: {' '.join(command)}")
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        raise ProcessFailureError(
            f"Could not start {description}: {e}",
            command=command,
        ) from e
    return ProcessHandle(process, command, description)
