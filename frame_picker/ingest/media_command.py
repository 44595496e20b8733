from __future__ import annotations

import subprocess
from dataclasses import dataclass

SHARED_LIBRARY_MARKER = "error while loading shared libraries"
STDERR_TAIL_CHARS = 600


class MediaToolError(RuntimeError):
    """Raised when an external media binary cannot produce the requested output."""


@dataclass(slots=True)
class MediaCommandResult:
    stdout: str
    stderr: str


def run_media_command(
    command: list[str],
    *,
    timeout_seconds: float | None = None,
    input_bytes: bytes | None = None,
) -> MediaCommandResult:
    """Run one ffmpeg/ffprobe invocation and normalize every failure to MediaToolError."""

    tool_name = command[0] if command else "media tool"
    timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    try:
        completed = subprocess.run(
            command,
            check=True,
            capture_output=True,
            input=input_bytes,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise MediaToolError(
            f"{tool_name} executable was not found. Install FFmpeg so {tool_name} is available on PATH."
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise MediaToolError(f"{tool_name} timed out after {timeout:g}s.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = _decode(exc.stderr).strip()
        if SHARED_LIBRARY_MARKER in stderr:
            raise MediaToolError(
                f"{tool_name} is installed but failed to start because required shared libraries are missing. "
                f"{tool_name} stderr: {stderr}"
            ) from exc
        details = f" {tool_name} stderr: {stderr[-STDERR_TAIL_CHARS:]}" if stderr else ""
        raise MediaToolError(f"{tool_name} exited with status {exc.returncode}.{details}") from exc

    return MediaCommandResult(stdout=_decode(completed.stdout), stderr=_decode(completed.stderr))


def _decode(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    return raw.decode("utf-8", errors="replace")
