"""Bearer token discovery for rpcwire sessions.

Token sources, checked in order:
    1. RPCWIRE_TOKEN environment variable
    2. ~/.rpcwire/rpc.token

SECURITY: token files must not be readable by group or others. In strict
mode (the default) such files are skipped; otherwise a warning is logged and
the token is still used.

Example usage:
    token = discover_token()
    session = RpcSession("http://127.0.0.1:8332", token=token)
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from rpcwire.core.constants import TOKEN_ENV_VAR, get_token_path

logger = logging.getLogger(__name__)

# Token files must not be readable by group or others
SECURE_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


class InsecureTokenFileError(Exception):
    """Raised in strict mode when a token file is readable by group or others."""

    def __init__(self, path: Path, mode: int) -> None:
        self.path = path
        self.mode = mode
        mode_str = oct(mode)[-3:]
        super().__init__(
            f"Token file {path} has insecure permissions ({mode_str}). "
            f"Expected 0600 (owner read/write only). "
            f"Fix with: chmod 600 {path}"
        )


def check_token_file_permissions(path: Path, strict: bool = False) -> bool:
    """Check that a token file is only accessible by its owner.

    Args:
        path: Path to the token file.
        strict: If True, raise InsecureTokenFileError on insecure permissions.
                If False, log a warning and return False.

    Returns:
        True if permissions are 0600 or more restrictive.

    Raises:
        InsecureTokenFileError: If strict=True and permissions are insecure.
        OSError: If the file cannot be stat'd.
    """
    mode = path.stat().st_mode

    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        if strict:
            raise InsecureTokenFileError(path, mode)
        logger.warning(
            "Token file %s has insecure permissions (%s). "
            "Should be 0600 (owner read/write only). "
            "Fix with: chmod 600 %s",
            path, oct(mode)[-3:], path
        )
        return False

    return True


def _read_token_file(token_path: Path, strict_permissions: bool) -> str | None:
    """Read a token file, honouring the permission policy."""
    if not token_path.exists():
        return None
    try:
        is_secure = check_token_file_permissions(token_path, strict=False)
        if strict_permissions and not is_secure:
            logger.debug("Skipping insecure token file %s (strict mode)", token_path)
            return None

        token = token_path.read_text(encoding="utf-8").strip()
        return token or None
    except OSError as e:
        logger.debug("Failed to read token file %s: %s", token_path, e)
        return None


def discover_token(
    token_dir: Path | None = None,
    strict_permissions: bool = True,
) -> str | None:
    """Discover a bearer token for an rpcwire session.

    Args:
        token_dir: Directory holding rpc.token. Defaults to ~/.rpcwire.
        strict_permissions: If True, skip token files with insecure
                            permissions. If False, warn but still use them.

    Returns:
        The discovered token, or None if no token was found.
    """
    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token and env_token.strip():
        return env_token.strip()

    token_path = token_dir / "rpc.token" if token_dir is not None else get_token_path()
    return _read_token_file(token_path, strict_permissions)
