"""Custom exceptions for bros-runner.

This module defines the exception hierarchy:
- RunnerError (base)
- RunnerStateError
- DockerUnavailableError
- ImagePullError
- ComposeError
- SmokeTestError
- ExecTransportError

Runner errors carry the captured process output so the caller can act on
them without re-running anything.
"""

from __future__ import annotations


class RunnerError(Exception):
    """Base exception for all workspace runner operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class RunnerStateError(RunnerError):
    """Operation is not valid in the project's current state.

    Raised when exec() targets a container that is missing or not running.
    The caller must run up() first.

    Example:
        >>> try:
        ...     runner.exec("ls")
        ... except RunnerStateError as e:
        ...     print(e.container_name, e.state)
    """

    def __init__(
        self,
        container_name: str,
        state: str | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            if state is None:
                message = f"Container {container_name} not found. Did you call up()?"
            else:
                message = f"Container {container_name} is not running (status: {state})."
        details = {"container": container_name}
        if state is not None:
            details["state"] = state
        super().__init__(message, details=details)
        self.container_name = container_name
        self.state = state


class DockerUnavailableError(RunnerError):
    """The Docker daemon or CLI cannot be reached."""

    def __init__(self, message: str = "Docker is not available", *, cause: str | None = None) -> None:
        super().__init__(message, details={"cause": cause} if cause else None)
        self.cause = cause


class ImagePullError(RunnerError):
    """The container image is absent locally and could not be pulled."""

    def __init__(self, image: str, *, cause: str | None = None) -> None:
        details = {"image": image}
        if cause:
            details["cause"] = cause
        super().__init__(f"Failed to pull image {image}", details=details)
        self.image = image
        self.cause = cause


class ComposeError(RunnerError):
    """A compose CLI invocation exited non-zero.

    Attributes:
        action: Compose action ("up" or "down").
        project: Compose project name.
        returncode: Process exit code.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        action: str,
        project: str,
        *,
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        output = (stderr or stdout).strip()
        message = f"docker compose {action} failed for project {project} with code {returncode}"
        if output:
            message = f"{message}: {output}"
        super().__init__(message)
        self.action = action
        self.project = project
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class SmokeTestError(RunnerError):
    """The smoke command exited non-zero at the end of up().

    The message embeds stderr (or stdout when stderr is empty).
    """

    def __init__(self, command: str, *, code: int, stdout: str = "", stderr: str = "") -> None:
        output = (stderr or stdout).strip()
        super().__init__(f"Smoke test '{command}' failed with code {code}: {output}")
        self.command = command
        self.code = code
        self.stdout = stdout
        self.stderr = stderr


class ExecTransportError(RunnerError):
    """The exec output stream was malformed or broke before completion."""

    pass
