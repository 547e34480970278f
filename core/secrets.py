"""API key storage via OS keyring, with environment fallback."""

import logging
import os

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)
SERVICE_NAME = "agent-crd-wizard"


def is_keyring_available() -> bool:
    """True when a real OS keyring backend is active (not the fail stub)."""
    try:
        from keyring.backends.fail import Keyring as FailKeyring

        return not isinstance(keyring.get_keyring(), FailKeyring)
    except Exception:
        return False


def get_secret(name: str) -> str | None:
    """Resolve secret: keyring first, then os.environ (which includes .env after load_dotenv)."""
    try:
        value = keyring.get_password(SERVICE_NAME, name)
        if value:
            return value
    except KeyringError:
        logger.debug("keyring lookup failed for %s, falling back to env", name)
    return os.environ.get(name)


def set_secret(name: str, value: str) -> bool:
    """Store secret in the keyring. Returns False (and logs) when the backend refuses."""
    try:
        keyring.set_password(SERVICE_NAME, name, value)
        return True
    except KeyringError as e:
        logger.warning("Failed to store %s in keyring: %s", name, e)
        return False
