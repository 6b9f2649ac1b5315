"""Project configuration loading for articlegen.

Only reads `articlegen.toml` and performs light validation. A missing file is
not an error: every setting has a default.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from articlegen.errors import ArticlegenConfigError

CONFIG_FILENAME = "articlegen.toml"

SUPPORTED_PROVIDERS = ("openai", "anthropic", "demo")


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    model: str
    api_key_env: str
    base_url: str | None = None
    max_tokens: int = 8192


@dataclass(frozen=True)
class CredentialsConfig:
    store_path: str
    key: str
    remember: bool


@dataclass(frozen=True)
class RenderConfig:
    styled: bool


@dataclass(frozen=True)
class OutputConfig:
    filename: str


@dataclass(frozen=True)
class PromptsConfig:
    system: str
    article: str


@dataclass(frozen=True)
class ArticlegenConfig:
    version: int
    root: Path
    llm: LLMConfig
    credentials: CredentialsConfig
    render: RenderConfig
    output: OutputConfig
    prompts: PromptsConfig

    def credential_store_path(self) -> Path:
        p = Path(self.credentials.store_path).expanduser()
        if not p.is_absolute():
            p = self.root / p
        return p


def find_project_root(start: Path) -> Path | None:
    """Walk upward from `start` (file or directory) looking for `articlegen.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        if (cur / CONFIG_FILENAME).is_file():
            return cur
        if cur.parent == cur:
            return None
        cur = cur.parent


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ArticlegenConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_bool(value: Any, *, name: str) -> bool:
    if not isinstance(value, bool):
        raise ArticlegenConfigError(f"Expected {name} to be a boolean.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ArticlegenConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise ArticlegenConfigError(f"Expected {name} to be a string.")
    return value


def default_config(root: Path | None = None) -> ArticlegenConfig:
    """Return the configuration used when no `articlegen.toml` exists."""

    return parse_config({"version": 1}, root=root or Path.cwd())


def parse_config(data: dict[str, Any], *, root: Path) -> ArticlegenConfig:
    version = data.get("version", None)
    if version is None:
        raise ArticlegenConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    version_i = _as_int(version, name="version")
    if version_i != 1:
        raise ArticlegenConfigError(f"Unsupported config version: {version_i} (expected 1).")

    llm_tbl = _as_table(data.get("llm"), name="llm")
    cred_tbl = _as_table(data.get("credentials"), name="credentials")
    render_tbl = _as_table(data.get("render"), name="render")
    output_tbl = _as_table(data.get("output"), name="output")
    prompts_tbl = _as_table(data.get("prompts"), name="prompts")

    provider = _as_str(llm_tbl.get("provider", "openai"), name="llm.provider")
    model = _as_str(llm_tbl.get("model", "gpt-5.2"), name="llm.model")
    api_key_env = _as_str(llm_tbl.get("api_key_env", "OPENAI_API_KEY"), name="llm.api_key_env")

    base_url: str | None = None
    if "base_url" in llm_tbl:
        base_url = _as_str(llm_tbl["base_url"], name="llm.base_url") or None

    max_tokens = _as_int(llm_tbl.get("max_tokens", 8192), name="llm.max_tokens")

    store_path = _as_str(
        cred_tbl.get("store_path", "~/.config/articlegen/credentials"),
        name="credentials.store_path",
    )
    cred_key = _as_str(cred_tbl.get("key", "ARTICLEGEN_API_KEY"), name="credentials.key")
    remember = _as_bool(cred_tbl.get("remember", True), name="credentials.remember")

    styled = _as_bool(render_tbl.get("styled", True), name="render.styled")

    filename = _as_str(output_tbl.get("filename", "educational-article.md"), name="output.filename")

    system_prompt = _as_str(prompts_tbl.get("system", ""), name="prompts.system")
    article_prompt = _as_str(prompts_tbl.get("article", ""), name="prompts.article")

    # Validation
    if provider not in SUPPORTED_PROVIDERS:
        raise ArticlegenConfigError(
            f"Invalid config: llm.provider must be one of {', '.join(SUPPORTED_PROVIDERS)}."
        )

    if max_tokens < 1:
        raise ArticlegenConfigError("Invalid config: llm.max_tokens must be >= 1.")

    if not cred_key or "=" in cred_key or any(c.isspace() for c in cred_key):
        raise ArticlegenConfigError(
            "Invalid config: credentials.key must be non-empty with no spaces or '='."
        )

    if not filename.strip():
        raise ArticlegenConfigError("Invalid config: output.filename must not be empty.")

    return ArticlegenConfig(
        version=version_i,
        root=root,
        llm=LLMConfig(
            provider=provider,
            model=model,
            api_key_env=api_key_env,
            base_url=base_url,
            max_tokens=max_tokens,
        ),
        credentials=CredentialsConfig(store_path=store_path, key=cred_key, remember=remember),
        render=RenderConfig(styled=styled),
        output=OutputConfig(filename=filename),
        prompts=PromptsConfig(system=system_prompt, article=article_prompt),
    )


def load_config(
    *, root: Path | None = None, config_path: Path | None = None
) -> ArticlegenConfig:
    """Load and validate `articlegen.toml`.

    If neither `root` nor `config_path` are provided, the project root is
    discovered by walking upward from the current working directory. When no
    config file is found, defaults are returned.
    """

    if config_path is None:
        if root is None:
            root = find_project_root(Path.cwd())
            if root is None:
                return default_config()
        config_path = root / CONFIG_FILENAME
        if not config_path.is_file():
            return default_config(root)
    elif root is None:
        root = config_path.parent

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise ArticlegenConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise ArticlegenConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ArticlegenConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ArticlegenConfigError(f"Invalid TOML in {config_path}: {e}") from e

    return parse_config(data, root=root)
