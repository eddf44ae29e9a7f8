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

"""kmod-audit exceptions.

This module defines custom exceptions for kmod-audit operations.
All exceptions inherit from KmodAuditError for easy catching.

Note that a failing probe command is *not* an exception: predicates such as
``is_blacklisted()`` collapse a non-zero exit status into ``None``.

Example:
    >>> from kmod_audit.core.resource import load_resource
    >>> from kmod_audit.core.exceptions import ResourceNotFoundError
    >>>
    >>> try:
    ...     probe = load_resource("kernel_module", backend, "bridge")
    ... except ResourceNotFoundError as e:
    ...     print(f"Unknown resource: {e}")
"""


class KmodAuditError(Exception):
    """Base exception for all kmod-audit errors."""

    pass


class UnsupportedPlatformError(KmodAuditError):
    """Raised when a skipped resource is asked for a tri-state result.

    Resources never raise this at construction time; they mark themselves
    skipped instead (see :meth:`Resource.skip_resource`).
    """

    pass


class CommandExecutionError(KmodAuditError):
    """Raised when a backend cannot produce a result at all.

    This indicates:
    - A mock fixture file that does not exist
    - An empty command pipeline
    """

    pass


class BackendError(KmodAuditError):
    """Raised when a backend name is unknown or a backend is misconfigured."""

    pass


class ResourceNotFoundError(KmodAuditError):
    """Raised when no resource is registered under the requested name."""

    pass


class ProfileError(KmodAuditError):
    """Raised when an audit profile cannot be loaded.

    This indicates:
    - Missing profile file
    - Invalid YAML
    - Unknown expectation fact or missing module name
    """

    pass
