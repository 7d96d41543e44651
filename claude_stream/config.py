"""Configuration management for the completion client."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

CONFIG_PATH_ENV = "CLAUDE_STREAM_CONFIG"
TIMEOUT_KEYS = ["connect_timeout", "read_timeout", "write_timeout", "pool_timeout"]


class Configuration:
    """Manages configuration and environment variables for the client."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self.config_path = self._resolve_path(config_path)
        self._config = self._load_yaml_config(self.config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _resolve_path(config_path: str | None) -> str:
        if config_path:
            return config_path
        if env_path := os.getenv(CONFIG_PATH_ENV):
            return env_path
        return os.path.join(os.path.dirname(__file__), "config.yaml")

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    @staticmethod
    def _require(section: dict[str, Any], keys: list[str], where: str) -> None:
        for key in keys:
            if key not in section:
                raise ValueError(
                    f"{key} must be explicitly configured in config.yaml "
                    f"under {where}"
                )

    def _section(self, *path: str) -> dict[str, Any]:
        """Return the nested mapping at `path`; an absent or empty section is {}."""
        section: Any = self._config
        for depth, name in enumerate(path):
            section = section.get(name) or {}
            if not isinstance(section, dict):
                dotted = ".".join(path[: depth + 1])
                raise ValueError(f"{dotted} must be a mapping in config.yaml")
        return section

    def get_api_config(self) -> dict[str, Any]:
        """Get the completion API endpoint configuration.

        Returns:
            Dictionary with base_url, completion_path and version.

        Raises:
            ValueError: If a required key is missing or empty.
        """
        api_config = self._section("api")
        self._require(api_config, ["base_url", "completion_path", "version"], "api")

        for key in ("base_url", "completion_path", "version"):
            if not api_config[key]:
                raise ValueError(f"api.{key} must not be empty")

        return {
            "base_url": api_config["base_url"],
            "completion_path": api_config["completion_path"],
            "version": str(api_config["version"]),
        }

    def get_http_client_config(self) -> dict[str, Any]:
        """Get HTTP client timeouts.

        Returns:
            Timeout dictionary; a null value disables that timeout.

        Raises:
            ValueError: If a timeout is missing or not positive.
        """
        http_config = self._section("api", "http_client")
        self._require(http_config, TIMEOUT_KEYS, "api.http_client")

        for key in TIMEOUT_KEYS:
            value = http_config[key]
            if value is not None and value <= 0:
                raise ValueError(f"api.http_client.{key} must be positive or null")

        return {key: http_config[key] for key in TIMEOUT_KEYS}

    def get_credentials_config(self) -> dict[str, Any]:
        """Get credential lookup configuration.

        Returns:
            Dictionary with hostname, env_var and netrc_path.
        """
        cred_config = self._section("credentials")
        self._require(cred_config, ["hostname"], "credentials")

        return {
            "hostname": cred_config["hostname"],
            "env_var": cred_config.get("env_var"),
            "netrc_path": os.path.expanduser(
                cred_config.get("netrc_path") or "~/.netrc"
            ),
        }

    def get_completion_defaults(self) -> dict[str, Any]:
        """Get default model and token limit.

        Raises:
            ValueError: If max_tokens is not a positive integer.
        """
        completion_config = self._section("completion")
        self._require(completion_config, ["model", "max_tokens"], "completion")

        max_tokens = completion_config["max_tokens"]
        if not isinstance(max_tokens, int) or max_tokens < 1:
            raise ValueError("completion.max_tokens must be a positive integer")

        return {
            "model": completion_config["model"],
            "max_tokens": max_tokens,
        }

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._section("logging")
