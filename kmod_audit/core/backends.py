# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Execution backends.

A backend bundles everything an audit resource needs from the target:

  - ``run(command)``     execute a :class:`ProbeCommand`, return a :class:`CommandResult`
  - ``read_file(path)``  file contents or ``None``
  - ``os``               the detected :class:`OSInfo`

Two backends ship with kmod-audit:

``local``
    Runs pipelines as chained processes on this host.  No shell is involved,
    so arguments such as module names are never shell-interpreted.

``mock``
    Maps literal command lines and file paths to canned fixture files, for
    deterministic tests without a live OS.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from ..config.config import Config
from ..config.constants import KmodAuditConstants
from .commands import ProbeCommand
from .exceptions import BackendError, CommandExecutionError
from .models import CommandResult, OSInfo
from .platform import detect_os

logger = logging.getLogger(__name__)


class Backend(ABC):
    """Base class for execution backends."""

    name: str = "base"

    def __init__(self, config: Config | None = None, os_info: OSInfo | None = None):
        self.config = config or Config()
        self._os_info = os_info

    @abstractmethod
    def run(self, command: ProbeCommand) -> CommandResult:
        """Execute *command* and return its result."""

    @abstractmethod
    def read_file(self, path: str) -> str | None:
        """Return the contents of *path*, or ``None`` when it cannot be read."""

    @property
    def os(self) -> OSInfo:
        """OS descriptor, detected on first access."""
        if self._os_info is None:
            self._os_info = detect_os(self)
        return self._os_info


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------


class LocalBackend(Backend):
    """Runs probe pipelines on the local host."""

    name = "local"

    def run(self, command: ProbeCommand) -> CommandResult:
        pipeline = command.argv_pipeline
        if not pipeline:
            raise CommandExecutionError("Cannot run an empty command pipeline")

        result = self._run_pipeline(pipeline)
        logger.debug("Ran %r -> exit %d", command.command_line, result.exit_status)
        return result

    def _run_pipeline(self, pipeline: list[list[str]]) -> CommandResult:
        """Chain *pipeline* stages stdout-to-stdin.

        Mirrors shell semantics without ``pipefail``: the pipeline's exit
        status is the last stage's.  A stage that cannot be started feeds an
        empty stream to the next one.
        """
        procs: list[subprocess.Popen] = []
        finished = False
        try:
            result = self._start_and_collect(pipeline, procs)
            finished = True
            return result
        finally:
            self._reap(procs, kill=not finished)

    def _start_and_collect(self, pipeline: list[list[str]], procs: list[subprocess.Popen]) -> CommandResult:
        upstream: Any = subprocess.DEVNULL
        last_index = len(pipeline) - 1

        for index, argv in enumerate(pipeline):
            is_last = index == last_index
            try:
                # Tool output is not guaranteed to be UTF-8
                proc = subprocess.Popen(
                    argv,
                    stdin=upstream,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE if is_last else subprocess.DEVNULL,
                    encoding="utf-8",
                    errors="replace",
                )
            except (FileNotFoundError, PermissionError) as e:
                logger.debug("Cannot start %s: %s", argv[0], e)
                if upstream is not subprocess.DEVNULL:
                    upstream.close()
                upstream = subprocess.DEVNULL
                if is_last:
                    return CommandResult(
                        exit_status=KmodAuditConstants.EXIT_COMMAND_NOT_FOUND,
                        stderr=f"{argv[0]}: command not found",
                    )
                continue

            # Parent must drop its copy so upstream sees SIGPIPE if downstream exits
            if upstream is not subprocess.DEVNULL:
                upstream.close()
            upstream = proc.stdout
            procs.append(proc)

        last = procs[-1]
        try:
            stdout, stderr = last.communicate(timeout=self.config.command_timeout_seconds)
        except subprocess.TimeoutExpired:
            logger.warning(
                "Command timed out after %ss: %s",
                self.config.command_timeout_seconds,
                " | ".join(" ".join(argv) for argv in pipeline),
            )
            for proc in procs:
                proc.kill()
            last.communicate()
            return CommandResult(exit_status=KmodAuditConstants.EXIT_TIMEOUT, stderr="timed out")

        return CommandResult(exit_status=last.returncode, stdout=stdout or "", stderr=stderr or "")

    @staticmethod
    def _reap(procs: list[subprocess.Popen], kill: bool = False) -> None:
        """Wait for every started stage; kill them first when the run was aborted."""
        for proc in procs:
            if kill and proc.poll() is None:
                proc.kill()
            proc.wait()

    def read_file(self, path: str) -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Cannot read %s: %s", path, e)
            return None


# ---------------------------------------------------------------------------
# Mock backend
# ---------------------------------------------------------------------------


class MockBackend(Backend):
    """Serves canned outputs for literal command lines and file paths.

    ``commands`` maps a command line to either a fixture path (stdout is the
    file's contents, exit status 0) or a :class:`CommandResult` returned
    as-is.  Unmapped commands exit with status 1 and no output, which is what
    ``grep`` reports when nothing matched.
    """

    name = "mock"

    def __init__(
        self,
        files: dict[str, str | Path] | None = None,
        commands: dict[str, str | Path | CommandResult] | None = None,
        os_info: OSInfo | None = None,
        config: Config | None = None,
    ):
        super().__init__(config=config, os_info=os_info)
        self._files = {path: Path(fixture) for path, fixture in (files or {}).items()}
        self._commands = dict(commands or {})
        self.executed: list[str] = []

    def run(self, command: ProbeCommand) -> CommandResult:
        key = command.command_line
        self.executed.append(key)

        mapped = self._commands.get(key)
        if mapped is None:
            logger.debug("No mock mapping for %r", key)
            return CommandResult(exit_status=KmodAuditConstants.EXIT_NO_MATCH)
        if isinstance(mapped, CommandResult):
            return mapped
        return CommandResult(exit_status=0, stdout=self._read_fixture(Path(mapped)))

    def read_file(self, path: str) -> str | None:
        fixture = self._files.get(path)
        if fixture is None:
            return None
        return self._read_fixture(fixture)

    @staticmethod
    def _read_fixture(fixture: Path) -> str:
        try:
            return fixture.read_text(encoding="utf-8")
        except OSError as e:
            raise CommandExecutionError(f"Mock fixture unreadable: {fixture}: {e}") from e

    @classmethod
    def from_manifest(cls, manifest_path: str | Path, config: Config | None = None) -> MockBackend:
        """Load a mock backend from a YAML manifest.

        Fixture paths are resolved relative to the manifest's directory:

        .. code-block:: yaml

            os: {name: ubuntu, family: debian, release: "22.04"}
            files:
              /etc/os-release: files/os-release-ubuntu
            commands:
              lsmod: cmd/lsmod
              "modprobe --showconfig | grep blacklist | grep sstfb":
                exit_status: 1
        """
        manifest_path = Path(manifest_path)
        try:
            with open(manifest_path) as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            raise BackendError(f"Mock manifest not found: {manifest_path}") from e
        except yaml.YAMLError as e:
            raise BackendError(f"Invalid mock manifest {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise BackendError(f"Mock manifest {manifest_path} must be a mapping")

        base = manifest_path.parent
        files = {path: base / fixture for path, fixture in (data.get("files") or {}).items()}

        commands: dict[str, str | Path | CommandResult] = {}
        for cmd, entry in (data.get("commands") or {}).items():
            if isinstance(entry, dict):
                fixture = entry.get("fixture")
                try:
                    stdout = (base / fixture).read_text(encoding="utf-8") if fixture else entry.get("stdout", "")
                except OSError as e:
                    raise BackendError(f"Mock fixture for {cmd!r} unreadable: {e}") from e
                commands[cmd] = CommandResult(
                    exit_status=int(entry.get("exit_status", 0)),
                    stdout=stdout,
                    stderr=entry.get("stderr", ""),
                )
            else:
                commands[cmd] = base / str(entry)

        os_info = None
        if os_data := data.get("os"):
            os_info = OSInfo(
                name=str(os_data.get("name", "")),
                family=str(os_data.get("family", "")),
                release=str(os_data.get("release", "")),
                kernel=str(os_data.get("kernel", "Linux")),
            )

        return cls(files=files, commands=commands, os_info=os_info, config=config)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

BACKENDS: dict[str, type[Backend]] = {
    LocalBackend.name: LocalBackend,
    MockBackend.name: MockBackend,
}


def get_backend(name: str) -> type[Backend]:
    """Look up a backend class by name."""
    try:
        return BACKENDS[name]
    except KeyError:
        raise BackendError(f"Unknown backend '{name}'. Available: {', '.join(sorted(BACKENDS))}") from None


def create_backend(config: Config) -> Backend:
    """Build the backend selected by *config*."""
    backend_cls = get_backend(config.backend)
    if backend_cls is MockBackend:
        if not config.mock_manifest:
            raise BackendError("The mock backend requires a manifest (--mock-manifest or KMOD_AUDIT_MOCK_MANIFEST)")
        return MockBackend.from_manifest(config.mock_manifest, config=config)
    return backend_cls(config=config)
