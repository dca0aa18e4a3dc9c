"""Thin wrapper around :func:`subprocess.run` for the external binaries."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(args: Sequence[str], *, timeout_s: Optional[float] = None) -> RunResult:
    """Run ``args`` to completion and capture its output as text.

    Raises:
        OSError: If the binary cannot be launched.
        subprocess.TimeoutExpired: If ``timeout_s`` elapses.
    """
    logger.info("Executing command: %s", " ".join(args))
    cp = subprocess.run(
        list(args),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        timeout=timeout_s,
        check=False,
    )
    return RunResult(returncode=int(cp.returncode), stdout=cp.stdout or "", stderr=cp.stderr or "")
