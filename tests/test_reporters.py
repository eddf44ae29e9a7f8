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

"""Tests for report generation across reporter formats."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from kmod_audit.core.models import (
    AuditReport,
    ControlResult,
    ControlStatus,
    ExpectationResult,
    OSInfo,
)
from kmod_audit.core.reporters.json_reporter import JSONReporter
from kmod_audit.core.reporters.markdown_reporter import MarkdownReporter


@pytest.fixture
def report() -> AuditReport:
    report = AuditReport(
        profile_name="baseline",
        os_info=OSInfo(name="ubuntu", family="debian", release="22.04", kernel="Linux"),
        timestamp=datetime(2026, 1, 2, 3, 4, 5),
    )
    report.add_result(
        ControlResult(
            control_id="bridge-active",
            module="bridge",
            title="Bridge module is active",
            status=ControlStatus.PASSED,
            expectations=[ExpectationResult(fact="loaded", expected=True, actual=True, passed=True)],
        )
    )
    report.add_result(
        ControlResult(
            control_id="floppy-gone",
            module="floppy",
            impact=0.7,
            status=ControlStatus.FAILED,
            expectations=[
                ExpectationResult(fact="loaded", expected=False, actual=False, passed=True),
                ExpectationResult(fact="blacklisted", expected=True, actual=None, passed=False),
            ],
        )
    )
    report.add_result(
        ControlResult(
            control_id="win",
            module="bridge",
            status=ControlStatus.SKIPPED,
            skip_message="The `kernel_module` resource is not supported on your OS.",
        )
    )
    return report


class TestJSONReporter:
    def test_summary(self, report):
        data = json.loads(JSONReporter().generate_report(report))
        summary = data["summary"]

        assert summary["profile"] == "baseline"
        assert summary["passed"] == 1
        assert summary["failed"] == 1
        assert summary["skipped"] == 1
        assert summary["is_compliant"] is False
        assert summary["os"]["family"] == "debian"
        assert summary["timestamp"] == "2026-01-02T03:04:05"

    def test_results(self, report):
        data = json.loads(JSONReporter().generate_report(report))
        failed = data["results"][1]

        assert failed["status"] == "failed"
        assert failed["expectations"][1] == {
            "fact": "blacklisted",
            "expected": True,
            "actual": None,
            "passed": False,
            "message": "expected blacklisted, got None",
        }

    def test_compact(self, report):
        output = JSONReporter(pretty=False).generate_report(report)
        assert "\n" not in output
        assert json.loads(output)["summary"]["total_controls"] == 3

    def test_save_report(self, report, tmp_path):
        target = tmp_path / "report.json"
        JSONReporter().save_report(report, str(target))
        assert json.loads(target.read_text())["summary"]["profile"] == "baseline"


class TestMarkdownReporter:
    def test_header(self, report):
        output = MarkdownReporter().generate_report(report)

        assert output.startswith("# Kernel Module Audit Report")
        assert "**Profile:** baseline" in output
        assert "**Target OS:** ubuntu 22.04 (debian)" in output
        assert "[FAIL] NON-COMPLIANT" in output
        assert "- **Skipped:** 1" in output

    def test_failed_controls_listed_first(self, report):
        output = MarkdownReporter().generate_report(report)
        assert output.index("[FAIL] floppy-gone") < output.index("[PASS] bridge-active")
        assert output.index("[PASS] bridge-active") < output.index("[SKIP] win")

    def test_detailed_lists_passing_expectations(self, report):
        output = MarkdownReporter(detailed=True).generate_report(report)
        assert "- [x] is not loaded" in output
        assert "- [ ] expected blacklisted, got None" in output

    def test_brief_lists_only_failures(self, report):
        output = MarkdownReporter(detailed=False).generate_report(report)
        assert "- [x] is not loaded" not in output
        assert "- [ ] expected blacklisted, got None" in output

    def test_skip_message(self, report):
        output = MarkdownReporter().generate_report(report)
        assert "**Skipped:** The `kernel_module` resource is not supported on your OS." in output

    def test_untitled_control_heading(self, report):
        output = MarkdownReporter().generate_report(report)
        assert "### [FAIL] floppy-gone: Kernel Module floppy" in output
