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

"""Tests for the kmod-audit command-line interface."""

import argparse
import json

import pytest

from kmod_audit.cli.cli import _build_config, main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "KMOD_AUDIT_BACKEND",
        "KMOD_AUDIT_MOCK_MANIFEST",
        "KMOD_AUDIT_COMMAND_TIMEOUT",
        "KMOD_AUDIT_OUTPUT_FORMAT",
        "KMOD_AUDIT_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mock_flags(mock_dir):
    return ["--backend", "mock", "--mock-manifest", str(mock_dir / "manifest.yaml")]


class TestProbeCommand:
    def test_text_output(self, capsys, mock_flags):
        assert main(["probe", "sstfb", *mock_flags]) == 0
        out = capsys.readouterr().out

        assert out.startswith("Kernel Module sstfb")
        rows = {line.split()[0]: line.split(None, 1)[1] for line in out.splitlines()[1:]}
        assert rows["disabled_via_bin_false"] == "install sstfb /bin/false"
        assert rows["blacklisted"] == "-"
        assert rows["loaded"] == "False"

    def test_json_output(self, capsys, mock_flags):
        assert main(["probe", "bridge", "--format", "json", *mock_flags]) == 0
        data = json.loads(capsys.readouterr().out)

        assert data["module"] == "bridge"
        assert data["os"]["name"] == "ubuntu"
        assert data["facts"]["loaded"] is True
        assert data["facts"]["version"] == "2.3"

    def test_format_from_env(self, capsys, mock_flags, monkeypatch):
        monkeypatch.setenv("KMOD_AUDIT_OUTPUT_FORMAT", "json")
        assert main(["probe", "bridge", *mock_flags]) == 0
        assert json.loads(capsys.readouterr().out)["facts"]["enabled"] is True

    def test_unsupported_os(self, capsys, mock_dir):
        code = main(["probe", "bridge", "--backend", "mock", "--mock-manifest", str(mock_dir / "manifest-darwin.yaml")])
        assert code == 2
        assert "not supported" in capsys.readouterr().err

    def test_mock_without_manifest(self, capsys):
        assert main(["probe", "bridge", "--backend", "mock"]) == 1
        assert "requires a manifest" in capsys.readouterr().err

    def test_output_file(self, tmp_path, capsys, mock_flags):
        target = tmp_path / "facts.json"
        assert main(["probe", "floppy", "--format", "json", "-o", str(target), *mock_flags]) == 0
        assert json.loads(target.read_text())["facts"]["blacklisted"] == "blacklist floppy"

    def test_unreadable_fixture_reports_error(self, tmp_path, capsys):
        manifest = tmp_path / "manifest.yaml"
        manifest.write_text("os: {name: ubuntu, family: debian}\ncommands:\n  lsmod: cmd/nope\n")

        assert main(["probe", "bridge", "--backend", "mock", "--mock-manifest", str(manifest)]) == 1
        assert "Mock fixture unreadable" in capsys.readouterr().err


class TestAuditCommand:
    def test_summary(self, capsys, mock_flags, profile_path):
        assert main(["audit", str(profile_path), *mock_flags]) == 0
        out = capsys.readouterr().out

        assert "Profile: baseline" in out
        assert "[OK] COMPLIANT" in out
        assert "Passed: 5" in out

    def test_json(self, capsys, mock_flags, profile_path):
        assert main(["audit", str(profile_path), "--format", "json", "--compact", *mock_flags]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["total_controls"] == 5

    def test_markdown(self, capsys, mock_flags, profile_path):
        assert main(["audit", str(profile_path), "--format", "markdown", *mock_flags]) == 0
        assert "# Kernel Module Audit Report" in capsys.readouterr().out

    def test_fail_on_findings(self, tmp_path, capsys, mock_flags):
        profile = tmp_path / "strict.yaml"
        profile.write_text("controls:\n  - module: floppy\n    expect: {loaded: true}\n")

        assert main(["audit", str(profile), *mock_flags]) == 0
        assert main(["audit", str(profile), "--fail-on-findings", *mock_flags]) == 1
        assert "expected loaded, got False" in capsys.readouterr().out

    def test_bad_profile(self, tmp_path, capsys, mock_flags):
        assert main(["audit", str(tmp_path / "missing.yaml"), *mock_flags]) == 1
        assert "Profile not found" in capsys.readouterr().err


class TestMisc:
    def test_list_resources(self, capsys):
        assert main(["list-resources"]) == 0
        assert capsys.readouterr().out.startswith("kernel_module: ")

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestTimeoutFlag:
    @pytest.mark.parametrize("value", ["0", "-3", "soon"])
    def test_rejects_non_positive(self, value, capsys, mock_flags):
        with pytest.raises(SystemExit) as exc_info:
            main(["probe", "bridge", "--timeout", value, *mock_flags])
        assert exc_info.value.code == 2
        assert "--timeout" in capsys.readouterr().err

    def test_timeout_overrides_config(self):
        args = argparse.Namespace(env_file=None, backend=None, mock_manifest=None, timeout=5, verbose=False)
        assert _build_config(args).command_timeout_seconds == 5
