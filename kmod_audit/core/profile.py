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
Audit profiles – declarative kernel module expectations.

A profile is a YAML file listing controls.  Each control names a module and
the facts expected of it:

.. code-block:: yaml

    name: cis-modules
    controls:
      - id: no-floppy
        module: floppy
        title: Floppy driver must not auto-load
        impact: 0.7
        expect:
          blacklisted: true
          enabled: false
      - module: sstfb
        expect: {loaded: false, disabled: true, disabled_via_bin_false: true}
      - module: bridge
        expect: {version: "2.3"}

A boolean expectation on a configuration fact asks whether the fact is
present at all; a string expectation compares the fact's value exactly.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from ..config.constants import KmodAuditConstants
from .exceptions import ProfileError
from .models import AuditReport, ControlResult, ControlStatus, ExpectationResult
from .resource import load_resource

if TYPE_CHECKING:
    from ..resources.kernel_module import KernelModule
    from .backends import Backend

logger = logging.getLogger(__name__)

_PREDICATES = {
    KmodAuditConstants.FACT_LOADED: "is_loaded",
    KmodAuditConstants.FACT_ENABLED: "is_enabled",
    KmodAuditConstants.FACT_BLACKLISTED: "is_blacklisted",
    KmodAuditConstants.FACT_DISABLED: "is_disabled",
    KmodAuditConstants.FACT_DISABLED_VIA_BIN_TRUE: "is_disabled_via_bin_true",
    KmodAuditConstants.FACT_DISABLED_VIA_BIN_FALSE: "is_disabled_via_bin_false",
    KmodAuditConstants.FACT_VERSION: "version",
}


@dataclass
class ModuleControl:
    """One control: a module plus the facts expected of it."""

    control_id: str
    module: str
    expect: dict[str, bool | str]
    title: str = ""
    impact: float = KmodAuditConstants.DEFAULT_IMPACT


@dataclass
class AuditProfile:
    """A named list of module controls."""

    name: str
    controls: list[ModuleControl] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: str | Path) -> AuditProfile:
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ProfileError(f"Profile not found: {path}") from e
        except yaml.YAMLError as e:
            raise ProfileError(f"Invalid YAML in profile {path}: {e}") from e

        return cls.from_dict(data, default_name=path.stem)

    @classmethod
    def from_dict(cls, data: Any, default_name: str = "profile") -> AuditProfile:
        if not isinstance(data, dict):
            raise ProfileError("Profile must be a mapping with a 'controls' list")

        raw_controls = data.get("controls") or []
        if not isinstance(raw_controls, list):
            raise ProfileError("'controls' must be a list")

        controls = [_parse_control(entry, index) for index, entry in enumerate(raw_controls, start=1)]
        return cls(name=str(data.get("name") or default_name), controls=controls)


def _parse_control(entry: Any, index: int) -> ModuleControl:
    if not isinstance(entry, dict):
        raise ProfileError(f"Control #{index} must be a mapping")

    module = entry.get("module")
    if not module:
        raise ProfileError(f"Control #{index} is missing 'module'")
    module = str(module)

    raw_expect = entry.get("expect") or {}
    if not isinstance(raw_expect, dict) or not raw_expect:
        raise ProfileError(f"Control #{index} ({module}) needs a non-empty 'expect' mapping")

    expect: dict[str, bool | str] = {}
    for fact, expected in raw_expect.items():
        if fact not in _PREDICATES:
            raise ProfileError(
                f"Control #{index} ({module}): unknown fact '{fact}'. "
                f"Known facts: {', '.join(KmodAuditConstants.ALL_FACTS)}"
            )
        if fact in KmodAuditConstants.BOOLEAN_FACTS and not isinstance(expected, bool):
            raise ProfileError(f"Control #{index} ({module}): '{fact}' expects true or false")
        # YAML reads `version: 2.3` as a float
        expect[fact] = expected if isinstance(expected, bool) else str(expected)

    try:
        impact = float(entry.get("impact", KmodAuditConstants.DEFAULT_IMPACT))
    except (TypeError, ValueError) as e:
        raise ProfileError(f"Control #{index} ({module}): impact must be a number") from e

    return ModuleControl(
        control_id=str(entry.get("id") or f"{module}-{index}"),
        module=module,
        expect=expect,
        title=str(entry.get("title") or ""),
        impact=impact,
    )


class AuditRunner:
    """Evaluates profiles against a backend."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def run(self, profile: AuditProfile) -> AuditReport:
        start = time.time()
        report = AuditReport(profile_name=profile.name, os_info=self.backend.os)

        for control in profile.controls:
            result = self.evaluate(control)
            logger.info("Control %s (%s): %s", control.control_id, control.module, result.status.value)
            report.add_result(result)

        report.duration_seconds = time.time() - start
        return report

    def evaluate(self, control: ModuleControl) -> ControlResult:
        probe: KernelModule = load_resource("kernel_module", self.backend, control.module)  # type: ignore[assignment]
        result = ControlResult(
            control_id=control.control_id,
            module=control.module,
            title=control.title,
            impact=control.impact,
        )

        if probe.resource_skipped:
            result.status = ControlStatus.SKIPPED
            result.skip_message = probe.skip_message
            return result

        for fact, expected in control.expect.items():
            actual = getattr(probe, _PREDICATES[fact])()
            if isinstance(expected, bool):
                present = actual if isinstance(actual, bool) else actual is not None
                passed = present == expected
            else:
                passed = actual == expected
            result.expectations.append(ExpectationResult(fact=fact, expected=expected, actual=actual, passed=passed))

        result.status = ControlStatus.FAILED if result.failed_expectations else ControlStatus.PASSED
        return result
