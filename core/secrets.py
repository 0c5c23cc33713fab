"""
Secrets Access for the Contact Relay

Single place where the service touches the process environment:
- Environment variable lookup with caching
- .env.local / .env loading through python-dotenv
- Log masking for API keys and addresses
"""

import os
import logging
from typing import Optional, List, Dict
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


class SecretManager:
    """
    Environment-backed secret lookup.

    Usage:
        from core.secrets import get_secret, mask_secret

        api_key = get_secret("RESEND_API_KEY")
        logger.info(f"Using key {mask_secret(api_key)}")
    """

    _instance: Optional["SecretManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "SecretManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if SecretManager._initialized:
            return

        self._secrets_cache: Dict[str, str] = {}
        self._env_file_path: Optional[Path] = None
        self._load_env_file()

        SecretManager._initialized = True

    def _load_env_file(self, env_path: Optional[str] = None) -> bool:
        """
        Load variables from a .env file without overriding the real environment.

        Args:
            env_path: Explicit file to load. Defaults to .env.local then .env
                      in the project root.

        Returns:
            True if a file was loaded
        """
        if env_path:
            search_paths = [Path(env_path)]
        else:
            search_paths = [PROJECT_ROOT / ".env.local", PROJECT_ROOT / ".env"]

        for path in search_paths:
            if path.exists():
                load_dotenv(path, override=False)
                self._env_file_path = path
                logger.info(f"Loaded environment from {path}")
                return True

        return False

    def get(
        self,
        name: str,
        default: Optional[str] = None,
        required: bool = False
    ) -> Optional[str]:
        """
        Get a secret value.

        Raises:
            ValueError: If required=True and the variable is not set
        """
        if name in self._secrets_cache:
            return self._secrets_cache[name]

        value = os.environ.get(name)

        if value is None:
            if required:
                raise ValueError(
                    f"Required secret '{name}' is not set. "
                    f"Set it via environment variable or .env file."
                )
            return default

        self._secrets_cache[name] = value
        return value

    def require(self, names: List[str]) -> Dict[str, str]:
        """Return all named secrets, raising ValueError listing every missing one."""
        missing = [name for name in names if os.environ.get(name) is None]
        if missing:
            raise ValueError(
                f"Missing required secrets: {', '.join(missing)}. "
                f"Set them via environment variables or .env file."
            )
        return {name: os.environ[name] for name in names}

    def mask(self, value: Optional[str], visible_chars: int = 4) -> str:
        """Mask a value as "****abcd" for safe logging."""
        if not value:
            return ""

        if len(value) <= visible_chars:
            return "*" * len(value)

        return "*" * (len(value) - visible_chars) + value[-visible_chars:]

    def clear_cache(self) -> None:
        """Forget cached lookups (tests and key rotation)."""
        self._secrets_cache.clear()


secrets_manager = SecretManager()


def get_secret(
    name: str,
    default: Optional[str] = None,
    required: bool = False
) -> Optional[str]:
    """
    Get a secret value from the environment.

    Example:
        api_key = get_secret("RESEND_API_KEY")
        receiver = get_secret("CONTACT_RECEIVER_EMAIL", default="contato@example.com")
    """
    return secrets_manager.get(name, default, required)


def require_secrets(names: List[str]) -> Dict[str, str]:
    """Validate that all named secrets exist."""
    return secrets_manager.require(names)


def mask_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask a secret value for safe logging."""
    return secrets_manager.mask(value, visible_chars)
