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
kmod-audit - Audit Linux kernel module state.
"""

from ._version import __version__

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    Keeps ``python -m kmod_audit.cli.cli`` from importing every resource and
    backend before argument parsing.
    """
    _lazy_map = {
        "Config": (".config.config", "Config"),
        "KmodAuditConstants": (".config.constants", "KmodAuditConstants"),
        "LocalBackend": (".core.backends", "LocalBackend"),
        "MockBackend": (".core.backends", "MockBackend"),
        "CommandResult": (".core.models", "CommandResult"),
        "OSInfo": (".core.models", "OSInfo"),
        "ProbeOutcome": (".core.models", "ProbeOutcome"),
        "ProbeStatus": (".core.models", "ProbeStatus"),
        "AuditReport": (".core.models", "AuditReport"),
        "AuditProfile": (".core.profile", "AuditProfile"),
        "AuditRunner": (".core.profile", "AuditRunner"),
        "load_resource": (".core.resource", "load_resource"),
        "KernelModule": (".resources.kernel_module", "KernelModule"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        # Cache on the module so __getattr__ is only called once per symbol
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "KernelModule",
    "load_resource",
    "LocalBackend",
    "MockBackend",
    "CommandResult",
    "OSInfo",
    "ProbeOutcome",
    "ProbeStatus",
    "AuditProfile",
    "AuditRunner",
    "AuditReport",
    "Config",
    "KmodAuditConstants",
]
