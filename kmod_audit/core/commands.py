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
Probe command construction.

A probe command is a pipeline of argv lists.  Every stage carries two views:

  - ``argv``      what the local backend actually executes (no shell)
  - ``rendered``  the shell-style text used as the command line

The rendered command line is the lookup key for mock backends and the text
shown in reports, so it must stay byte-for-byte stable:

.. code-block:: text

    modprobe --showconfig | grep "^install" | grep "/bin" | grep -E "(true|false)" | grep bridge

Module names are only ever passed as a discrete argv element.  When a name
contains shell metacharacters its rendering is ``shlex.quote``-d, so the
command line stays an honest description of what runs.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from ..config.constants import KmodAuditConstants
from .models import OSInfo

_DOUBLE_QUOTE_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "$": "\\$", "`": "\\`"})


@dataclass(frozen=True)
class PipelineStage:
    """One process in a probe pipeline."""

    argv: tuple[str, ...]
    rendered: str


def stage(*argv: str) -> PipelineStage:
    """Build a stage whose rendering shell-quotes each argument as needed."""
    return PipelineStage(argv=tuple(argv), rendered=" ".join(shlex.quote(a) for a in argv))


def operand_stage(*argv: str, operand: str) -> PipelineStage:
    """Build a stage ending in *operand*, separated from the options by ``--``.

    The ``--`` only appears in argv, so a module name starting with ``-`` is
    never parsed as an option while the rendered text stays unchanged.
    """
    rendered = " ".join(shlex.quote(a) for a in (*argv, operand))
    return PipelineStage(argv=(*argv, "--", operand), rendered=rendered)


def grep(pattern: str, *, extended: bool = False, quoted: bool = True) -> PipelineStage:
    """Build a ``grep`` stage.

    ``quoted`` renders the pattern inside double quotes, which is how the
    configuration filters have always been written on the command line.
    """
    argv = ("grep", "-E", pattern) if extended else ("grep", pattern)
    if quoted:
        shown = '"' + pattern.translate(_DOUBLE_QUOTE_ESCAPES) + '"'
    else:
        shown = shlex.quote(pattern)
    prefix = "grep -E" if extended else "grep"
    return PipelineStage(argv=argv, rendered=f"{prefix} {shown}")


@dataclass(frozen=True)
class ProbeCommand:
    """An immutable command pipeline."""

    stages: tuple[PipelineStage, ...]

    @classmethod
    def simple(cls, *argv: str) -> ProbeCommand:
        return cls(stages=(stage(*argv),))

    def pipe(self, *stages: PipelineStage) -> ProbeCommand:
        """Return a new command with *stages* appended."""
        return ProbeCommand(stages=self.stages + tuple(stages))

    @property
    def command_line(self) -> str:
        return " | ".join(s.rendered for s in self.stages)

    @property
    def argv_pipeline(self) -> list[list[str]]:
        return [list(s.argv) for s in self.stages]

    def __str__(self) -> str:
        return self.command_line


@dataclass(frozen=True)
class ModuleCommandSet:
    """Kernel module tooling resolved once for a target OS.

    Red Hat family hosts and Fedora get absolute ``/sbin`` paths because the
    tools are not on an unprivileged user's ``PATH`` there.
    """

    lsmod: str
    modprobe: str
    modinfo: str

    @classmethod
    def for_os(cls, os_info: OSInfo) -> ModuleCommandSet:
        if os_info.is_redhat_family() or os_info.name == "fedora":
            return cls(
                lsmod=KmodAuditConstants.SBIN_LSMOD,
                modprobe=KmodAuditConstants.SBIN_MODPROBE,
                modinfo=KmodAuditConstants.SBIN_MODINFO,
            )
        return cls(
            lsmod=KmodAuditConstants.LSMOD,
            modprobe=KmodAuditConstants.MODPROBE,
            modinfo=KmodAuditConstants.MODINFO,
        )

    def list_modules(self) -> ProbeCommand:
        return ProbeCommand.simple(self.lsmod)

    def _showconfig(self) -> ProbeCommand:
        return ProbeCommand.simple(self.modprobe, "--showconfig")

    def blacklist(self, module: str) -> ProbeCommand:
        return self._showconfig().pipe(grep("blacklist", quoted=False), operand_stage("grep", operand=module))

    def _install_lines(self) -> ProbeCommand:
        return self._showconfig().pipe(grep("^install"), grep("/bin"))

    def disabled(self, module: str) -> ProbeCommand:
        return self._install_lines().pipe(grep("(true|false)", extended=True), operand_stage("grep", operand=module))

    def disabled_via(self, module: str, binary: str) -> ProbeCommand:
        """Install lines redirecting *module* to ``/bin/true`` or ``/bin/false``."""
        if binary not in ("true", "false"):
            raise ValueError(f"binary must be 'true' or 'false', got {binary!r}")
        return self._install_lines().pipe(grep(binary), operand_stage("grep", operand=module))

    def version(self, module: str) -> ProbeCommand:
        return ProbeCommand(stages=(operand_stage(self.modinfo, "-F", "version", operand=module),))
