# process.py
from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path
from typing import Dict, Mapping, Optional

from . import settings
from .errors import ExecutionError, PathResolutionError
from .model import CommandDefinition
from .ui.console import get_console


def expand(command: str, env: Mapping[str, str]) -> str:
    """
    Replace every `$KEY` in `command` with env[KEY].

    Single pass: substituted values are not expanded again, and longer keys
    are tried first so `$FOOBAR` is never clobbered by `$FOO`.
    Placeholders with no matching key are left as they are.
    """
    keys = sorted((k for k in env if k), key=len, reverse=True)
    if not keys:
        return command
    pattern = re.compile(r"\$(" + "|".join(re.escape(k) for k in keys) + ")")
    return pattern.sub(lambda m: env[m.group(1)], command)


class CommandRunner:
    """
    Runs one command template through `sh -c`.

    Two modes:
      - run():  capture output, leave the host process untouched
      - exec(): merge the environment overlay into os.environ for good,
                then capture output the same way

    The working directory is handed to the spawn call; the host's current
    directory is never changed.
    """

    def __init__(
        self,
        command: str,
        working_directory: str | None = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.command = command
        self.working_directory = working_directory
        self.env: Dict[str, str] = dict(env or {})

    @classmethod
    def from_definition(
        cls,
        definition: CommandDefinition,
        env: Optional[Mapping[str, str]] = None,
        working_directory: str | None = None,
    ) -> CommandRunner:
        return cls(definition.command, working_directory=working_directory, env=env)

    def __repr__(self) -> str:
        return f"CommandRunner(command={self.command!r}, working_directory={self.working_directory!r})"

    # ------------------------------------------------------------------
    # Environment / template
    # ------------------------------------------------------------------

    def effective_env(self, override_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        env = dict(self.env)
        env.update(override_env or {})
        return env

    def expand_template(self, override_env: Optional[Mapping[str, str]] = None) -> str:
        return expand(self.command, self.effective_env(override_env))

    def cwd(self, override_env: Optional[Mapping[str, str]] = None) -> Path:
        """
        Resolve the working directory for this command.

        Precedence: explicit working_directory, then the `cwd` key of the
        effective environment, then ".".

        Raises:
            PathResolutionError: path missing, not canonicalizable, or not a directory
        """
        raw = self.working_directory
        if raw is None:
            raw = self.effective_env(override_env).get(settings.CWD_KEY, ".")

        try:
            resolved = Path(raw).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise PathResolutionError(path=str(raw), reason=str(e)) from e

        if not resolved.is_dir():
            raise PathResolutionError(path=str(resolved), reason="not a directory")
        return resolved

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(
        self,
        override_env: Optional[Mapping[str, str]] = None,
        *,
        timeout: float | None = None,
        check: bool = False,
    ) -> str:
        """
        Capture mode: run the command and return its stdout.

        The child sees os.environ plus the effective environment; os.environ
        itself is not modified.
        """
        env = self.effective_env(override_env)
        child_env = os.environ.copy()
        child_env.update(env)
        return self._spawn(env, child_env, timeout=timeout, check=check)

    def exec(
        self,
        override_env: Optional[Mapping[str, str]] = None,
        *,
        timeout: float | None = None,
        check: bool = False,
    ) -> str:
        """
        Replace mode: install the effective environment into os.environ,
        then run the command and return its stdout.

        The os.environ update is permanent for the life of the process and
        accumulates across calls.
        """
        env = self.effective_env(override_env)
        for key, val in env.items():
            os.environ[key] = val
        return self._spawn(env, None, timeout=timeout, check=check)

    def _spawn(
        self,
        env: Dict[str, str],
        child_env: Optional[Dict[str, str]],
        *,
        timeout: float | None,
        check: bool,
    ) -> str:
        console = get_console()
        cwd = self.cwd(env)
        cmd = expand(self.command, env)
        console.print_debug(f"cwd={cwd}")
        console.print_debug(f"{settings.SHELL} -c {cmd!r}")

        try:
            proc = subprocess.run(
                [settings.SHELL, "-c", cmd],
                cwd=str(cwd),
                env=child_env,  # None inherits os.environ
                stdout=subprocess.PIPE,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                command=cmd,
                reason=f"timed out after {timeout}s",
                details={"cwd": str(cwd)},
            ) from e
        except OSError as e:
            raise ExecutionError(
                command=cmd,
                reason=f"could not spawn {settings.SHELL}: {e}",
                details={"cwd": str(cwd)},
            ) from e

        try:
            output = proc.stdout.decode(settings.ENCODING)
        except UnicodeDecodeError as e:
            raise ExecutionError(
                command=cmd,
                reason="output is not valid text",
                exit_code=proc.returncode,
                details={"encoding": settings.ENCODING},
            ) from e

        if check and proc.returncode != 0:
            raise ExecutionError(
                command=cmd,
                reason="command exited with non-zero status",
                exit_code=proc.returncode,
                details={"stdout": output[-4000:]},
            )

        console.print_debug(f"exit={proc.returncode}")
        return output
