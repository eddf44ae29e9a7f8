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
Operating system detection.

The OS descriptor is derived from two sources read through the backend, so
that mock backends can describe any target:

  - ``uname -s``         kernel name (``Linux``, ``Darwin``, ...)
  - ``/etc/os-release``  distribution ``ID``, ``ID_LIKE`` and ``VERSION_ID``
"""

from __future__ import annotations

import logging
import shlex
from typing import TYPE_CHECKING

from ..config.constants import KmodAuditConstants
from .commands import ProbeCommand
from .models import (
    ARCH_FAMILY,
    DEBIAN_FAMILY,
    FEDORA_FAMILY,
    GENERIC_LINUX_FAMILY,
    REDHAT_FAMILY,
    SUSE_FAMILY,
    UNKNOWN_FAMILY,
    OSInfo,
)

if TYPE_CHECKING:
    from .backends import Backend

logger = logging.getLogger(__name__)

_REDHAT_IDS = frozenset(
    {"rhel", "redhat", "centos", "oracle", "ol", "scientific", "amazon", "amzn", "rocky", "almalinux", "cloudlinux"}
)
_DEBIAN_IDS = frozenset({"debian", "ubuntu", "linuxmint", "raspbian", "kali", "pop"})
_SUSE_IDS = frozenset({"suse", "opensuse", "opensuse-leap", "opensuse-tumbleweed", "sles", "sled"})
_ARCH_IDS = frozenset({"arch", "manjaro", "endeavouros"})


def parse_os_release(text: str) -> dict[str, str]:
    """Parse ``/etc/os-release`` content into a dict.

    Values may be bare or shell-quoted; malformed lines are skipped.
    """
    fields: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.debug("Skipping malformed os-release line: %r", raw)
            continue
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def classify_family(os_id: str, id_like: str = "", kernel: str = "") -> str:
    """Map an os-release ``ID``/``ID_LIKE`` pair to a platform family.

    Fedora is its own family: only RHEL and its rebuilds count
    as Red Hat family.
    """
    os_id = os_id.lower()
    likes = set(id_like.lower().split())

    if os_id == "fedora":
        return FEDORA_FAMILY
    if os_id in _REDHAT_IDS or "rhel" in likes:
        return REDHAT_FAMILY
    if os_id in _DEBIAN_IDS or "debian" in likes or "ubuntu" in likes:
        return DEBIAN_FAMILY
    if os_id in _SUSE_IDS or "suse" in likes:
        return SUSE_FAMILY
    if os_id in _ARCH_IDS or "arch" in likes:
        return ARCH_FAMILY
    if kernel.lower() == "linux":
        return GENERIC_LINUX_FAMILY
    return UNKNOWN_FAMILY


def os_info_from_release(text: str | None, kernel: str = "") -> OSInfo:
    """Build an :class:`OSInfo` from os-release text and a kernel name."""
    fields = parse_os_release(text) if text else {}
    os_id = fields.get("ID", "").lower()
    family = classify_family(os_id, fields.get("ID_LIKE", ""), kernel)
    name = os_id or kernel.lower() or UNKNOWN_FAMILY
    return OSInfo(name=name, family=family, release=fields.get("VERSION_ID", ""), kernel=kernel)


def detect_os(backend: Backend) -> OSInfo:
    """Detect the target OS through *backend*."""
    uname = backend.run(ProbeCommand.simple(*KmodAuditConstants.UNAME_COMMAND))
    kernel = uname.stdout.strip() if uname.succeeded else ""
    release_text = backend.read_file(KmodAuditConstants.OS_RELEASE_PATH)

    os_info = os_info_from_release(release_text, kernel)
    logger.debug("Detected OS: %s", os_info)
    return os_info
