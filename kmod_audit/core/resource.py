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
Audit resources and the resource registry.

A resource wraps one kind of system state (a kernel module, ...) and answers
questions about it through a :class:`~kmod_audit.core.backends.Backend`.
Resources register themselves by name so that profiles and the CLI can build
them from plain strings:

.. code-block:: python

    @register_resource("kernel_module")
    class KernelModule(Resource):
        ...

    probe = load_resource("kernel_module", backend, "bridge")

A resource that cannot run on the target marks itself *skipped* instead of
raising; callers check :attr:`Resource.resource_skipped`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import ResourceNotFoundError

if TYPE_CHECKING:
    from .backends import Backend
    from .models import OSInfo

logger = logging.getLogger(__name__)


class Resource:
    """Base class for audit resources."""

    resource_name: str = ""
    description: str = ""

    def __init__(self, backend: Backend):
        self.backend = backend
        self._skip_message: str | None = None

    @property
    def os(self) -> OSInfo:
        return self.backend.os

    def skip_resource(self, message: str) -> None:
        """Mark this resource as not applicable to the target."""
        logger.info("Skipping %s: %s", self, message)
        self._skip_message = message

    @property
    def resource_skipped(self) -> bool:
        return self._skip_message is not None

    @property
    def skip_message(self) -> str | None:
        return self._skip_message


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ResourceRegistry:
    """Catalog of resource classes keyed by resource name."""

    def __init__(self) -> None:
        self._resources: dict[str, type[Resource]] = {}

    def register(self, name: str, resource_cls: type[Resource]) -> None:
        """Register *resource_cls* under *name*.

        Raises :class:`ValueError` if *name* is already taken by a different
        class.  Re-registering the same class is a no-op.
        """
        existing = self._resources.get(name)
        if existing is not None and existing is not resource_cls:
            raise ValueError(
                f"Resource name collision: '{name}' is registered to both "
                f"{existing.__qualname__} and {resource_cls.__qualname__}"
            )
        self._resources[name] = resource_cls

    def get(self, name: str) -> type[Resource]:
        try:
            return self._resources[name]
        except KeyError:
            raise ResourceNotFoundError(f"No resource registered as '{name}'") from None

    def names(self) -> list[str]:
        return sorted(self._resources)

    def all_resources(self) -> dict[str, type[Resource]]:
        """Return a shallow copy of the catalog."""
        return dict(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, name: str) -> bool:
        return name in self._resources


registry = ResourceRegistry()


def register_resource(name: str):
    """Class decorator registering a resource in the global registry."""

    def decorator(cls: type[Resource]) -> type[Resource]:
        cls.resource_name = name
        registry.register(name, cls)
        return cls

    return decorator


def load_resource(name: str, backend: Backend, *args: Any) -> Resource:
    """Construct the resource registered as *name* with *backend* and *args*."""
    _ensure_builtin_resources()
    resource_cls = registry.get(name)
    return resource_cls(backend, *args)


def _ensure_builtin_resources() -> None:
    # Importing the package runs the @register_resource decorators
    from .. import resources  # noqa: F401
