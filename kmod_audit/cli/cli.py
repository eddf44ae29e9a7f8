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

"""Command-line interface for kmod-audit."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config.config import Config
from ..core.backends import Backend, create_backend
from ..core.exceptions import KmodAuditError
from ..core.models import AuditReport
from ..core.profile import AuditProfile, AuditRunner
from ..core.reporters.json_reporter import JSONReporter
from ..core.reporters.markdown_reporter import MarkdownReporter
from ..core.resource import load_resource, registry

logger = logging.getLogger("kmod_audit.cli")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _build_config(args: argparse.Namespace) -> Config:
    """Merge ``--env-file``, environment and CLI flags into a :class:`Config`."""
    env_file = getattr(args, "env_file", None)
    config = Config.from_file(Path(env_file)) if env_file else Config.from_env()

    if getattr(args, "backend", None):
        config.backend = args.backend
    if getattr(args, "mock_manifest", None):
        config.mock_manifest = args.mock_manifest
    if getattr(args, "timeout", None) is not None:
        config.command_timeout_seconds = args.timeout
    if getattr(args, "verbose", False):
        config.verbose = True
    return config


def _configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _make_backend(args: argparse.Namespace) -> Backend | None:
    """Build the backend and resolve the output format from config."""
    config = _build_config(args)
    _configure_logging(config)
    if getattr(args, "format", None) is None:
        args.format = config.output_format
    try:
        return create_backend(config)
    except KmodAuditError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write to ``--output`` if given, otherwise stdout."""
    output_path = getattr(args, "output", None)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Report saved to: {output_path}", file=sys.stderr)
    else:
        print(output)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def probe_command(args: argparse.Namespace) -> int:
    """Print every fact about one kernel module."""
    backend = _make_backend(args)
    if backend is None:
        return 1

    try:
        probe = load_resource("kernel_module", backend, args.module)
        if probe.resource_skipped:
            print(f"{probe}: skipped ({probe.skip_message})", file=sys.stderr)
            return 2
        facts = probe.facts()
        os_info = backend.os.to_dict()
    except (KmodAuditError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "json":
        output = json.dumps({"module": args.module, "os": os_info, "facts": facts}, indent=2)
    else:
        width = max(len(fact) for fact in facts)
        lines = [str(probe)]
        lines.extend(f"  {fact.ljust(width)}  {value if value is not None else '-'}" for fact, value in facts.items())
        output = "\n".join(lines)

    _write_output(args, output)
    return 0


def audit_command(args: argparse.Namespace) -> int:
    """Run an audit profile and report the results."""
    backend = _make_backend(args)
    if backend is None:
        return 1

    try:
        profile = AuditProfile.from_yaml(args.profile)
        report = AuditRunner(backend).run(profile)
    except KmodAuditError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _write_output(args, _format_report(args, report))

    if args.fail_on_findings and not report.is_compliant:
        return 1
    return 0


def list_resources_command(_args: argparse.Namespace) -> int:
    """List registered audit resources."""
    # Registration happens on import of the resources package
    from .. import resources  # noqa: F401

    for name in registry.names():
        resource_cls = registry.get(name)
        print(f"{name}: {resource_cls.description}")
    return 0


def _format_report(args: argparse.Namespace, report: AuditReport) -> str:
    if args.format == "json":
        return JSONReporter(pretty=not args.compact).generate_report(report)
    if args.format == "markdown":
        return MarkdownReporter(detailed=args.detailed).generate_report(report)
    return _generate_summary(report)


def _generate_summary(report: AuditReport) -> str:
    lines = []
    lines.append("=" * 60)
    lines.append(f"Profile: {report.profile_name}")
    lines.append("=" * 60)
    lines.append(f"Status: {'[OK] COMPLIANT' if report.is_compliant else '[FAIL] NON-COMPLIANT'}")
    lines.append(f"Controls: {report.total_controls}")
    lines.append(f"  Passed: {report.passed_count}")
    lines.append(f"  Failed: {report.failed_count}")
    lines.append(f"  Skipped: {report.skipped_count}")
    for result in report.results:
        lines.append(f"  [{result.status.value.upper()}] {result.control_id} ({result.module})")
        for expectation in result.failed_expectations:
            lines.append(f"      - {expectation.message}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {number}")
    return number


def _add_backend_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--backend", choices=["local", "mock"], help="Execution backend (default: local)")
    parser.add_argument("--mock-manifest", help="YAML manifest for the mock backend")
    parser.add_argument("--timeout", type=_positive_int, help="Per-command timeout in seconds")
    parser.add_argument("--env-file", help="Load settings from a .env file")
    parser.add_argument("--output", "-o", help="Output file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="kmod-audit - Audit Linux kernel module state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  kmod-audit probe bridge
  kmod-audit probe sstfb --format json
  kmod-audit audit profile.yaml --format markdown -o report.md
  kmod-audit audit profile.yaml --backend mock --mock-manifest tests/mock/manifest.yaml
  kmod-audit list-resources
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- probe -------------------------------------------------------------
    probe_p = subparsers.add_parser("probe", help="Show every fact about a kernel module")
    probe_p.add_argument("module", help="Kernel module name")
    probe_p.add_argument("--format", choices=["text", "json"], help="Output format (default: text)")
    _add_backend_flags(probe_p)

    # -- audit -------------------------------------------------------------
    audit_p = subparsers.add_parser("audit", help="Run an audit profile")
    audit_p.add_argument("profile", help="Path to profile YAML")
    audit_p.add_argument("--format", choices=["text", "json", "markdown"], help="Output format (default: text)")
    audit_p.add_argument("--compact", action="store_true", help="Compact JSON output")
    audit_p.add_argument("--detailed", action="store_true", help="List passing expectations too (Markdown only)")
    audit_p.add_argument("--fail-on-findings", action="store_true", help="Exit with error if any control fails")
    _add_backend_flags(audit_p)

    # -- list-resources ----------------------------------------------------
    subparsers.add_parser("list-resources", help="List available audit resources")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    dispatch = {
        "probe": probe_command,
        "audit": audit_command,
        "list-resources": list_resources_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
