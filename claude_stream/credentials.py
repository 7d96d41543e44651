"""API key lookup from the environment or a netrc file."""

from __future__ import annotations

import netrc
import os

import structlog

from claude_stream.llm.exceptions import ConfigurationError, CredentialNotFoundError

logger = structlog.get_logger(__name__)


class CredentialResolver:
    """Resolve the API key for a host.

    The environment variable wins; otherwise the password of the matching
    `machine` entry in the netrc file is used.
    """

    def __init__(self, netrc_path: str, env_var: str | None = None) -> None:
        self.netrc_path = netrc_path
        self.env_var = env_var

    def lookup(self, hostname: str) -> str:
        """Return the API key for `hostname`.

        Raises:
            CredentialNotFoundError: If no key is configured for the host.
            ConfigurationError: If the netrc file cannot be parsed.
        """
        if self.env_var and (api_key := os.getenv(self.env_var)):
            logger.debug("Using API key from environment", env_var=self.env_var)
            return api_key

        if not os.path.exists(self.netrc_path):
            raise CredentialNotFoundError(hostname, step="credentials")

        try:
            entries = netrc.netrc(self.netrc_path)
        except (netrc.NetrcParseError, OSError) as e:
            raise ConfigurationError(f"netrc: {e}", step="credentials") from e

        machine = entries.authenticators(hostname)
        if machine is None or not machine[2]:
            raise CredentialNotFoundError(hostname, step="credentials")

        logger.debug("Using API key from netrc", netrc_path=self.netrc_path)
        return machine[2]
