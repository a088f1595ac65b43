"""Configuration management for codestream.

This module handles loading user configuration from ~/.config/codestream/init.py
and provides a sandboxed execution environment for user settings.
"""

from __future__ import annotations

import builtins
import os
import traceback
from pathlib import Path
from typing import Any, Optional


class CodestreamConfig:
    """Configuration container for codestream settings.

    This class stores configuration values that can be set by the user's init.py file.
    All settings have sensible defaults.
    """

    def __init__(self):
        # Transport settings
        self.transport: str = "http"  # http, direct
        self.base_url: str = "http://localhost:8000"
        self.timeout: float = 120.0

        # Model settings
        self.model: str = "gpt-4o-mini"
        self.provider: Optional[str] = None  # any-llm provider for direct transport
        self.api_key_env: Optional[str] = None  # e.g. OPENAI_API_KEY
        self.instructions: str = ""
        self.temperature: float = 0.7

        # Search mode settings
        self.search_instructions: str = ""
        self.search_size: str = "medium"

        # Mode selected when a client starts
        self.default_mode: str = "chat"

        # Custom settings (user can add any additional settings)
        self._custom: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self._custom[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self._custom.get(key, default)

    @property
    def api_key(self) -> Optional[str]:
        """API key read from the configured environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


def get_config_path() -> Path:
    """Get the path to the user's config directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "codestream"
    return Path.home() / ".config" / "codestream"


def get_init_script_path() -> Path:
    """Get the path to the user's init.py script."""
    return get_config_path() / "init.py"


# The only builtins visible to init.py
SANDBOX_BUILTINS = ("str", "int", "float", "bool", "list", "dict", "tuple", "range")


def _sandbox(config: CodestreamConfig) -> dict[str, Any]:
    allowed = {name: getattr(builtins, name) for name in SANDBOX_BUILTINS}
    return {"__builtins__": allowed, "config": config}


def load_config() -> tuple[CodestreamConfig, Optional[str]]:
    """Load configuration from ~/.config/codestream/init.py.

    The script runs with a ``config`` object in scope and only the builtins
    listed in ``SANDBOX_BUILTINS``. Settings applied before a failure are kept.

    Returns:
        A tuple of (config, error_message). If loading fails, error_message
        will contain details about the failure.
    """
    config = CodestreamConfig()
    init_path = get_init_script_path()

    if not init_path.exists():
        return config, None

    try:
        code = compile(init_path.read_text(), str(init_path), "exec")
        exec(code, _sandbox(config))
    except Exception:
        error_msg = f"Error loading config from {init_path}:\n{traceback.format_exc()}"
        return config, error_msg
    return config, None
