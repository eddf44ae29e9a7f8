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
Configuration class for kmod-audit.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .constants import KmodAuditConstants

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """
    Configuration for kmod-audit.

    Explicit constructor arguments win; anything left at its default is
    filled from ``KMOD_AUDIT_*`` environment variables.
    """

    # Backend selection
    backend: str = KmodAuditConstants.DEFAULT_BACKEND
    mock_manifest: str | None = None

    # Command execution
    command_timeout_seconds: int = KmodAuditConstants.DEFAULT_COMMAND_TIMEOUT

    # Output Options
    output_format: str = KmodAuditConstants.DEFAULT_OUTPUT_FORMAT
    verbose: bool = False

    def __post_init__(self):
        """Load configuration from environment variables if not provided."""

        if self.backend == KmodAuditConstants.DEFAULT_BACKEND:
            if env_backend := os.getenv("KMOD_AUDIT_BACKEND"):
                self.backend = env_backend

        if self.mock_manifest is None:
            self.mock_manifest = os.getenv("KMOD_AUDIT_MOCK_MANIFEST")

        if self.command_timeout_seconds == KmodAuditConstants.DEFAULT_COMMAND_TIMEOUT:
            if env_timeout := os.getenv("KMOD_AUDIT_COMMAND_TIMEOUT"):
                try:
                    self.command_timeout_seconds = int(env_timeout)
                except ValueError:
                    logger.warning("Ignoring non-integer KMOD_AUDIT_COMMAND_TIMEOUT=%r", env_timeout)

        if self.output_format == KmodAuditConstants.DEFAULT_OUTPUT_FORMAT:
            if env_format := os.getenv("KMOD_AUDIT_OUTPUT_FORMAT"):
                self.output_format = env_format

        if os.getenv("KMOD_AUDIT_VERBOSE", "").lower() in ("true", "1"):
            self.verbose = True

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance with values from environment
        """
        return cls()

    @classmethod
    def from_file(cls, config_file: Path) -> "Config":
        """
        Load configuration from .env file.

        Values already present in the process environment are not overridden.

        Args:
            config_file: Path to .env file

        Returns:
            Config instance
        """
        if config_file.exists():
            load_dotenv(config_file, override=False)
        else:
            logger.debug("Config file %s not found, using environment only", config_file)

        return cls.from_env()
