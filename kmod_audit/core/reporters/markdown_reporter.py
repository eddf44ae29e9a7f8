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
Markdown format reporter for audit reports.
"""

from ...core.models import AuditReport, ControlResult, ControlStatus

_STATUS_PREFIX = {
    ControlStatus.PASSED: "[PASS]",
    ControlStatus.FAILED: "[FAIL]",
    ControlStatus.SKIPPED: "[SKIP]",
}


class MarkdownReporter:
    """Generates Markdown format reports."""

    def __init__(self, detailed: bool = True):
        """
        Initialize Markdown reporter.

        Args:
            detailed: If True, list every expectation, not only failures
        """
        self.detailed = detailed

    def generate_report(self, report: AuditReport) -> str:
        lines = []

        # Header
        lines.append("# Kernel Module Audit Report")
        lines.append("")
        lines.append(f"**Profile:** {report.profile_name}")
        if report.os_info:
            os_line = report.os_info.name
            if report.os_info.release:
                os_line += f" {report.os_info.release}"
            lines.append(f"**Target OS:** {os_line} ({report.os_info.family})")
        lines.append(f"**Status:** {'[OK] COMPLIANT' if report.is_compliant else '[FAIL] NON-COMPLIANT'}")
        lines.append(f"**Duration:** {report.duration_seconds:.2f}s")
        lines.append(f"**Timestamp:** {report.timestamp.isoformat()}")
        lines.append("")

        # Summary
        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Total Controls:** {report.total_controls}")
        lines.append(f"- **Passed:** {report.passed_count}")
        lines.append(f"- **Failed:** {report.failed_count}")
        lines.append(f"- **Skipped:** {report.skipped_count}")
        lines.append("")

        if report.results:
            lines.append("## Controls")
            lines.append("")
            for status in (ControlStatus.FAILED, ControlStatus.PASSED, ControlStatus.SKIPPED):
                for result in report.get_results_by_status(status):
                    lines.extend(self._format_control(result))
                    lines.append("")

        return "\n".join(lines)

    def _format_control(self, result: ControlResult) -> list:
        lines = []
        heading = result.title or f"Kernel Module {result.module}"
        lines.append(f"### {_STATUS_PREFIX[result.status]} {result.control_id}: {heading}")
        lines.append("")
        lines.append(f"**Module:** {result.module}")
        lines.append(f"**Impact:** {result.impact}")

        if result.status == ControlStatus.SKIPPED:
            lines.append("")
            lines.append(f"**Skipped:** {result.skip_message}")
            return lines

        expectations = result.expectations if self.detailed else result.failed_expectations
        if expectations:
            lines.append("")
            for expectation in expectations:
                mark = "x" if expectation.passed else " "
                lines.append(f"- [{mark}] {expectation.message}")

        return lines

    def save_report(self, report: AuditReport, output_path: str):
        """
        Save Markdown report to file.

        Args:
            report: AuditReport object
            output_path: Path to save file
        """
        report_md = self.generate_report(report)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(report_md)
