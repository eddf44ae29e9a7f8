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
The ``kernel_module`` audit resource.

Answers questions about one Linux kernel module by running the module
tooling (``lsmod``, ``modprobe --showconfig``, ``modinfo``) through a backend:

.. code-block:: python

    probe = load_resource("kernel_module", backend, "bridge")
    probe.is_loaded()          # True
    probe.is_blacklisted()     # None
    probe.version()            # "2.3"

Every call runs its command afresh; nothing is cached.  A failing command is
never an error for the caller: boolean facts become ``False`` and string
facts become ``None``.  Use :meth:`KernelModule.query` when "not found" and
"the tool failed" need to be told apart.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..config.constants import KmodAuditConstants as C
from ..core.commands import ModuleCommandSet, ProbeCommand
from ..core.exceptions import UnsupportedPlatformError
from ..core.models import ProbeOutcome, ProbeStatus
from ..core.resource import Resource, register_resource

if TYPE_CHECKING:
    from ..core.backends import Backend

logger = logging.getLogger(__name__)


@register_resource("kernel_module")
class KernelModule(Resource):
    """Kernel module state on a Linux target."""

    description = (
        "Test kernel modules on Linux platforms: whether a module is loaded, "
        "blacklisted, or disabled via an install line pointing at /bin/true "
        "or /bin/false, and which version modinfo reports."
    )

    def __init__(self, backend: Backend, module_name: str):
        if not module_name:
            raise ValueError("kernel_module requires a non-empty module name")
        self.module_name = module_name
        super().__init__(backend)

        self._commands: ModuleCommandSet | None = None
        if not self.os.is_linux():
            self.skip_resource("The `kernel_module` resource is not supported on your OS.")
            return
        self._commands = ModuleCommandSet.for_os(self.os)

    # -- Predicates ---------------------------------------------------------

    def is_loaded(self) -> bool:
        """True if ``lsmod`` lists the module."""
        if self.resource_skipped:
            return False
        return bool(self._probe_loaded(C.FACT_LOADED).value)

    # Same query under a second name; it is not computed from is_disabled()
    is_enabled = is_loaded

    def is_blacklisted(self) -> str | None:
        """Matching ``blacklist`` configuration line(s), or ``None``."""
        return self._config_value(C.FACT_BLACKLISTED)

    def is_disabled(self) -> str | None:
        """Matching ``install ... /bin/true|/bin/false`` line(s), or ``None``."""
        # TODO: also honour kernel.modules_disabled from the grub kernel command line
        return self._config_value(C.FACT_DISABLED)

    def is_disabled_via_bin_true(self) -> str | None:
        return self._config_value(C.FACT_DISABLED_VIA_BIN_TRUE)

    def is_disabled_via_bin_false(self) -> str | None:
        return self._config_value(C.FACT_DISABLED_VIA_BIN_FALSE)

    def version(self) -> str | None:
        """Version field reported by ``modinfo``, or ``None``."""
        return self._config_value(C.FACT_VERSION)

    # -- Tri-state access ---------------------------------------------------

    def query(self, fact: str) -> ProbeOutcome:
        """Run the command behind *fact* and classify its result.

        Raises:
            UnsupportedPlatformError: the resource is skipped on this OS
            ValueError: *fact* is not a kernel module fact
        """
        if fact not in C.ALL_FACTS:
            raise ValueError(f"Unknown kernel module fact '{fact}'. Known facts: {', '.join(C.ALL_FACTS)}")
        if self.resource_skipped:
            raise UnsupportedPlatformError(self.skip_message)

        if fact in C.BOOLEAN_FACTS:
            return self._probe_loaded(fact)
        return self._probe_output(fact, self._command_for(fact))

    def facts(self) -> dict[str, Any]:
        """Snapshot of every fact, using the collapsed predicate values."""
        predicates: dict[str, Callable[[], Any]] = {
            C.FACT_LOADED: self.is_loaded,
            C.FACT_ENABLED: self.is_enabled,
            C.FACT_BLACKLISTED: self.is_blacklisted,
            C.FACT_DISABLED: self.is_disabled,
            C.FACT_DISABLED_VIA_BIN_TRUE: self.is_disabled_via_bin_true,
            C.FACT_DISABLED_VIA_BIN_FALSE: self.is_disabled_via_bin_false,
            C.FACT_VERSION: self.version,
        }
        return {fact: predicate() for fact, predicate in predicates.items()}

    # -- Internals ----------------------------------------------------------

    def _command_for(self, fact: str) -> ProbeCommand:
        commands = self._commands
        if commands is None:
            raise UnsupportedPlatformError(self.skip_message or f"{self} has no commands for this OS")
        name = self.module_name
        if fact == C.FACT_BLACKLISTED:
            return commands.blacklist(name)
        if fact == C.FACT_DISABLED:
            return commands.disabled(name)
        if fact == C.FACT_DISABLED_VIA_BIN_TRUE:
            return commands.disabled_via(name, "true")
        if fact == C.FACT_DISABLED_VIA_BIN_FALSE:
            return commands.disabled_via(name, "false")
        if fact == C.FACT_VERSION:
            return commands.version(name)
        return commands.list_modules()

    def _config_value(self, fact: str) -> str | None:
        if self.resource_skipped:
            return None
        value = self._probe_output(fact, self._command_for(fact)).value
        return value if isinstance(value, str) else None

    def _probe_loaded(self, fact: str) -> ProbeOutcome:
        command = self._command_for(C.FACT_LOADED)
        result = self.backend.run(command)

        if not result.succeeded:
            status, value = ProbeStatus.EXECUTION_ERROR, False
        else:
            # Name followed by whitespace, so "video" does not match "videobuf"
            pattern = re.compile("^" + re.escape(self.module_name) + r"\s", re.MULTILINE)
            found = pattern.search(result.stdout) is not None
            status = ProbeStatus.FOUND if found else ProbeStatus.NOT_FOUND
            value = found

        logger.debug("%s %s: %s (exit %d)", self, fact, status.value, result.exit_status)
        return ProbeOutcome(
            fact=fact, status=status, value=value, exit_status=result.exit_status, command=command.command_line
        )

    def _probe_output(self, fact: str, command: ProbeCommand) -> ProbeOutcome:
        result = self.backend.run(command)

        value: str | None = None
        if result.succeeded:
            status = ProbeStatus.FOUND
            value = result.stdout.replace("\n", "")
        elif result.exit_status == C.EXIT_NO_MATCH:
            status = ProbeStatus.NOT_FOUND
        else:
            status = ProbeStatus.EXECUTION_ERROR

        logger.debug("%s %s: %s (exit %d)", self, fact, status.value, result.exit_status)
        return ProbeOutcome(
            fact=fact, status=status, value=value, exit_status=result.exit_status, command=command.command_line
        )

    def __str__(self) -> str:
        return f"Kernel Module {self.module_name}"

    def __repr__(self) -> str:
        return f"KernelModule({self.module_name!r})"
