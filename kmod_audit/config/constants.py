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
Constants for kmod-audit.
"""

from .._version import __version__ as PACKAGE_VERSION


class KmodAuditConstants:
    """Constants used throughout the auditor."""

    VERSION = PACKAGE_VERSION

    # Kernel module tooling
    LSMOD = "lsmod"
    MODPROBE = "modprobe"
    MODINFO = "modinfo"
    SBIN_LSMOD = "/sbin/lsmod"
    SBIN_MODPROBE = "/sbin/modprobe"
    SBIN_MODINFO = "/sbin/modinfo"

    # OS detection sources
    OS_RELEASE_PATH = "/etc/os-release"
    UNAME_COMMAND = ("uname", "-s")

    # Exit statuses synthesized by the local backend (same as the shell)
    EXIT_TIMEOUT = 124
    EXIT_COMMAND_NOT_FOUND = 127
    # grep and friends: "ran fine, selected nothing"
    EXIT_NO_MATCH = 1

    # Default values
    DEFAULT_BACKEND = "local"
    DEFAULT_COMMAND_TIMEOUT = 30
    DEFAULT_OUTPUT_FORMAT = "text"
    DEFAULT_IMPACT = 0.5

    # Facts a kernel_module probe can report
    FACT_LOADED = "loaded"
    FACT_ENABLED = "enabled"
    FACT_BLACKLISTED = "blacklisted"
    FACT_DISABLED = "disabled"
    FACT_DISABLED_VIA_BIN_TRUE = "disabled_via_bin_true"
    FACT_DISABLED_VIA_BIN_FALSE = "disabled_via_bin_false"
    FACT_VERSION = "version"

    BOOLEAN_FACTS = (FACT_LOADED, FACT_ENABLED)
    STRING_FACTS = (
        FACT_BLACKLISTED,
        FACT_DISABLED,
        FACT_DISABLED_VIA_BIN_TRUE,
        FACT_DISABLED_VIA_BIN_FALSE,
        FACT_VERSION,
    )
    ALL_FACTS = BOOLEAN_FACTS + STRING_FACTS
