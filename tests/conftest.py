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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from kmod_audit.core.backends import MockBackend
from kmod_audit.core.models import CommandResult, OSInfo
from kmod_audit.core.resource import load_resource

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

project_root = Path(__file__).parent.parent
MOCK_DIR = Path(__file__).parent / "mock"
CMD_DIR = MOCK_DIR / "cmd"
FILES_DIR = MOCK_DIR / "files"


@pytest.fixture
def mock_dir() -> Path:
    return MOCK_DIR


@pytest.fixture
def profile_path() -> Path:
    return MOCK_DIR / "profile.yaml"


# ---------------------------------------------------------------------------
# OS descriptors
# ---------------------------------------------------------------------------


@pytest.fixture
def debian_os() -> OSInfo:
    return OSInfo(name="ubuntu", family="debian", release="22.04", kernel="Linux")


@pytest.fixture
def redhat_os() -> OSInfo:
    return OSInfo(name="centos", family="redhat", release="7", kernel="Linux")


@pytest.fixture
def fedora_os() -> OSInfo:
    return OSInfo(name="fedora", family="fedora", release="39", kernel="Linux")


@pytest.fixture
def windows_os() -> OSInfo:
    return OSInfo(name="windows", family="windows", release="10", kernel="Windows_NT")


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_backend() -> MockBackend:
    """Debian-family mock target built from tests/mock/manifest.yaml."""
    return MockBackend.from_manifest(MOCK_DIR / "manifest.yaml")


@pytest.fixture
def make_backend():
    """Factory for a mock backend with inline command mappings.

    String values are fixture names under ``tests/mock/cmd``; tuples are
    ``(exit_status, stdout)`` pairs.
    """

    def _make(os_info: OSInfo, commands: dict | None = None) -> MockBackend:
        mapped: dict = {}
        for cmd, value in (commands or {}).items():
            if isinstance(value, tuple):
                exit_status, stdout = value
                mapped[cmd] = CommandResult(exit_status=exit_status, stdout=stdout)
            else:
                mapped[cmd] = CMD_DIR / value
        return MockBackend(commands=mapped, os_info=os_info)

    return _make


@pytest.fixture
def load_mock_resource(mock_backend):
    """Build a registered resource against the default mock backend."""

    def _load(resource: str, *args):
        return load_resource(resource, mock_backend, *args)

    return _load
