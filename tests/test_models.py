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

"""Tests for data models."""

import dataclasses

import pytest

from kmod_audit.core.models import (
    AuditReport,
    CommandResult,
    ControlResult,
    ControlStatus,
    ExpectationResult,
    OSInfo,
    ProbeOutcome,
    ProbeStatus,
)


class TestCommandResult:
    def test_succeeded(self):
        assert CommandResult(exit_status=0, stdout="x").succeeded
        assert not CommandResult(exit_status=1).succeeded

    def test_immutable(self):
        result = CommandResult(exit_status=0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.exit_status = 1  # type: ignore[misc]


class TestOSInfo:
    @pytest.mark.parametrize("family", ["redhat", "fedora", "debian", "suse", "arch", "linux"])
    def test_linux_families(self, family):
        assert OSInfo(name="x", family=family).is_linux()

    def test_kernel_alone_means_linux(self):
        assert OSInfo(name="alpine", family="unknown", kernel="Linux").is_linux()

    def test_non_linux(self):
        assert not OSInfo(name="darwin", family="unknown", kernel="Darwin").is_linux()

    def test_redhat_family(self):
        assert OSInfo(name="centos", family="redhat").is_redhat_family()
        assert not OSInfo(name="fedora", family="fedora").is_redhat_family()


class TestProbeOutcome:
    def test_found(self):
        outcome = ProbeOutcome(fact="version", status=ProbeStatus.FOUND, value="2.3", exit_status=0, command="c")
        assert outcome.found
        assert outcome.to_dict()["status"] == "found"

    def test_not_found(self):
        outcome = ProbeOutcome(fact="version", status=ProbeStatus.NOT_FOUND, value=None, exit_status=1, command="c")
        assert not outcome.found


class TestAuditReport:
    def test_add_result_updates_counters(self):
        report = AuditReport(profile_name="p")
        report.add_result(ControlResult(control_id="a", module="m", status=ControlStatus.PASSED))
        report.add_result(ControlResult(control_id="b", module="m", status=ControlStatus.SKIPPED))

        assert report.total_controls == 2
        assert report.passed_count == 1
        assert report.skipped_count == 1
        assert report.is_compliant

    def test_empty_report_to_dict(self):
        data = AuditReport(profile_name="p").to_dict()
        assert data["summary"]["os"] is None
        assert data["results"] == []

    def test_failed_expectations(self):
        result = ControlResult(
            control_id="a",
            module="m",
            expectations=[
                ExpectationResult(fact="loaded", expected=True, actual=True, passed=True),
                ExpectationResult(fact="version", expected="1", actual=None, passed=False),
            ],
        )
        assert [e.fact for e in result.failed_expectations] == ["version"]
        assert result.failed_expectations[0].message == "version expected '1', got None"
