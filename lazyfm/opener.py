"""Launch external programs for files, chosen by extension.

Background openers are detached and never waited on. Rules marked
``terminal = true`` run in the foreground with the TUI released, the way an
``$EDITOR`` launch works.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path

from .config import OpenerConfig
from .errors import OpenerError

logger = logging.getLogger(__name__)


class FileOpener:
    """Resolve a file's opener rule and start it."""

    def __init__(
        self,
        config: OpenerConfig,
        release_terminal: Callable[[], AbstractContextManager[object]] | None = None,
        popen: Callable[..., object] = subprocess.Popen,
        run: Callable[..., object] = subprocess.run,
    ) -> None:
        self._config = config
        self._release_terminal = release_terminal
        self._popen = popen
        self._run = run

    def open(self, target: Path) -> str:
        """Open ``target`` and return a short status message.

        Raises ``OpenerError`` when no rule matches or the process cannot be
        started.
        """
        if not target.suffix[1:]:
            raise OpenerError(f"Could not determine file extension of {target.name}")
        rule = self._config.rule_for(target)
        if rule is None:
            raise OpenerError(f"No opener configured for {target.suffix.lower()} files")

        argv = rule.command(target)
        try:
            if rule.terminal and self._release_terminal is not None:
                with self._release_terminal():
                    self._run(argv, check=False)
            else:
                self._popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
        except OSError as exc:
            raise OpenerError(f"Failed to launch {argv[0]}: {exc.strerror or exc}") from exc

        logger.info("opened %s with %s", target, argv[0])
        return f"Opened {target.name} with {argv[0]}"


__all__ = ["FileOpener"]
