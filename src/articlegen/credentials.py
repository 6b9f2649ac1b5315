"""Credential persistence in small `KEY=VALUE` files.

The same line format serves `.env` files (read-only, merged into
`os.environ`) and the credential store, which keeps the API key under one
fixed key between runs.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger("articlegen.credentials")

DEFAULT_CREDENTIAL_KEY = "ARTICLEGEN_API_KEY"


def parse_key_values(text: str) -> dict[str, str]:
    """Parse a tiny subset of .env syntax (KEY=VALUE, no interpolation)."""

    out: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if len(value) >= 2 and value[0] in ("'", '"') and value[-1] == value[0]:
            value = value[1:-1]

        out[key] = value
    return out


def load_dotenv_into_environ(path: Path) -> bool:
    """Load `path` into `os.environ`, without overriding existing keys.

    Returns True if the file existed and was parsed, otherwise False.
    """

    if not path.is_file():
        return False

    try:
        vals = parse_key_values(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError):
        return False

    for k, v in vals.items():
        if k in os.environ:
            continue
        os.environ[k] = v
    return True


class CredentialStore:
    """One credential string stored under a fixed key in a local file."""

    def __init__(self, path: Path, key: str = DEFAULT_CREDENTIAL_KEY) -> None:
        self.path = path
        self.key = key

    def _read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        return parse_key_values(self.path.read_text(encoding="utf-8"))

    def _write_all(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        body = "".join(f"{k}={v}\n" for k, v in values.items())
        # New files start owner-only; the chmod below covers existing ones.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)

    def load(self) -> str:
        try:
            return self._read_all().get(self.key, "")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed reading credential store %s: %s", self.path, e)
            return ""

    def save(self, value: str) -> None:
        values = self._read_all()
        values[self.key] = value.strip()
        self._write_all(values)
        logger.debug("Saved credential %s to %s", self.key, self.path)

    def clear(self) -> bool:
        """Remove the stored credential. Returns True if one was present."""
        values = self._read_all()
        if self.key not in values:
            return False
        del values[self.key]
        self._write_all(values)
        return True


def resolve_credential(
    explicit: str | None,
    *,
    env_var: str | None,
    store: CredentialStore | None,
) -> str:
    """Pick the credential once at startup: explicit > environment > stored."""

    if explicit and explicit.strip():
        return explicit.strip()
    if env_var:
        from_env = (os.environ.get(env_var) or "").strip()
        if from_env:
            return from_env
    if store is not None:
        return store.load().strip()
    return ""
