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
Data models for command results, probe outcomes and audit reports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

REDHAT_FAMILY = "redhat"
FEDORA_FAMILY = "fedora"
DEBIAN_FAMILY = "debian"
SUSE_FAMILY = "suse"
ARCH_FAMILY = "arch"
GENERIC_LINUX_FAMILY = "linux"
UNKNOWN_FAMILY = "unknown"

LINUX_FAMILIES = frozenset(
    {REDHAT_FAMILY, FEDORA_FAMILY, DEBIAN_FAMILY, SUSE_FAMILY, ARCH_FAMILY, GENERIC_LINUX_FAMILY}
)


@dataclass(frozen=True)
class CommandResult:
    """Output of a single command invocation."""

    exit_status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0


class ProbeStatus(str, Enum):
    """Tri-state classification of a probe command."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True)
class ProbeOutcome:
    """A single fact derived from a probe command.

    ``value`` is a bool for ``loaded``/``enabled`` and an optional string for
    the configuration and version facts.
    """

    fact: str
    status: ProbeStatus
    value: bool | str | None
    exit_status: int
    command: str

    @property
    def found(self) -> bool:
        return self.status == ProbeStatus.FOUND

    def to_dict(self) -> dict[str, Any]:
        return {
            "fact": self.fact,
            "status": self.status.value,
            "value": self.value,
            "exit_status": self.exit_status,
            "command": self.command,
        }


@dataclass(frozen=True)
class OSInfo:
    """Operating system descriptor consumed by audit resources."""

    name: str
    family: str
    release: str = ""
    kernel: str = ""

    def is_linux(self) -> bool:
        return self.kernel.lower() == "linux" or self.family in LINUX_FAMILIES

    def is_redhat_family(self) -> bool:
        return self.family == REDHAT_FAMILY

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "family": self.family, "release": self.release, "kernel": self.kernel}


class ControlStatus(str, Enum):
    """Outcome of an audit control."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ExpectationResult:
    """Comparison of one expected fact against its observed value."""

    fact: str
    expected: bool | str
    actual: bool | str | None
    passed: bool

    @property
    def message(self) -> str:
        verb = "is" if self.passed else "expected"
        if isinstance(self.expected, bool):
            prefix = "" if self.expected else "not "
            if self.passed:
                return f"{verb} {prefix}{self.fact}"
            return f"{verb} {prefix}{self.fact}, got {self.actual!r}"
        if self.passed:
            return f"{self.fact} {verb} {self.expected!r}"
        return f"{self.fact} {verb} {self.expected!r}, got {self.actual!r}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "fact": self.fact,
            "expected": self.expected,
            "actual": self.actual,
            "passed": self.passed,
            "message": self.message,
        }


@dataclass
class ControlResult:
    """Result of evaluating one control against one kernel module."""

    control_id: str
    module: str
    title: str = ""
    impact: float = 0.5
    status: ControlStatus = ControlStatus.PASSED
    expectations: list[ExpectationResult] = field(default_factory=list)
    skip_message: str | None = None

    @property
    def failed_expectations(self) -> list[ExpectationResult]:
        return [e for e in self.expectations if not e.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.control_id,
            "module": self.module,
            "title": self.title,
            "impact": self.impact,
            "status": self.status.value,
            "skip_message": self.skip_message,
            "expectations": [e.to_dict() for e in self.expectations],
        }


@dataclass
class AuditReport:
    """Aggregated results from running an audit profile."""

    profile_name: str
    os_info: OSInfo | None = None
    results: list[ControlResult] = field(default_factory=list)
    passed_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def add_result(self, result: ControlResult):
        """Add a control result and update counters."""
        self.results.append(result)
        if result.status == ControlStatus.PASSED:
            self.passed_count += 1
        elif result.status == ControlStatus.FAILED:
            self.failed_count += 1
        else:
            self.skipped_count += 1

    @property
    def total_controls(self) -> int:
        return len(self.results)

    @property
    def is_compliant(self) -> bool:
        """True when no control failed. Skipped controls do not count against compliance."""
        return self.failed_count == 0

    def get_results_by_status(self, status: ControlStatus) -> list[ControlResult]:
        return [r for r in self.results if r.status == status]

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "summary": {
                "profile": self.profile_name,
                "os": self.os_info.to_dict() if self.os_info else None,
                "total_controls": self.total_controls,
                "passed": self.passed_count,
                "failed": self.failed_count,
                "skipped": self.skipped_count,
                "is_compliant": self.is_compliant,
                "duration_seconds": self.duration_seconds,
                "timestamp": self.timestamp.isoformat(),
            },
            "results": [r.to_dict() for r in self.results],
        }
