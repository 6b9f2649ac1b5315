from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from articlegen import __version__
from articlegen.credentials import CredentialStore, load_dotenv_into_environ, resolve_credential
from articlegen.errors import (
    ArticlegenConfigError,
    ArticlegenGenerationError,
    ArticlegenInputError,
)
from articlegen.notifications import (
    ARTICLE_GENERATED,
    Notification,
    article_saved,
    format_error,
    format_notification,
)
from articlegen.progress import Spinner
from articlegen.prompting import DEPTHS, FORMATS, TONES, ArticleRequest, resolve_option
from articlegen.render import MarkdownRenderer, RenderStyles

if TYPE_CHECKING:  # pragma: no cover
    from articlegen.config import ArticlegenConfig
    from articlegen.generate.base import GeneratorBackend
    from articlegen.generator import Article, ArticleGenerator


EXIT_OK = 0
EXIT_INPUT_OR_CONFIG = 2
EXIT_GENERATION_ERROR = 3

_DEFAULT_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _add_common_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=str,
        default=None,
        help="Project root (defaults to searching upward from cwd for articlegen.toml).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to articlegen.toml (defaults to <root>/articlegen.toml).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")


def _choices_help(table: dict[str, str]) -> str:
    return ", ".join(table)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="articlegen")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    gen_p = subparsers.add_parser("generate", help="Generate an educational article.")
    _add_common_flags(gen_p)
    gen_p.add_argument("--topic", type=str, default="", help="Topic or keywords.")
    gen_p.add_argument(
        "--topic-file",
        type=str,
        default=None,
        help="Read the topic (e.g. a syllabus outline) from a file.",
    )
    gen_p.add_argument("--tone", type=str, default="", help=_choices_help(TONES))
    gen_p.add_argument("--depth", type=str, default="", help=_choices_help(DEPTHS))
    gen_p.add_argument("--format", type=str, default="", help=_choices_help(FORMATS))
    gen_p.add_argument("--api-key", type=str, default=None, help="API key for the provider.")
    gen_p.add_argument(
        "--provider",
        type=str,
        default=None,
        help="Override llm.provider (openai, anthropic, demo).",
    )
    gen_p.add_argument("--model", type=str, default=None, help="Override llm.model.")
    gen_p.add_argument(
        "--markdown", action="store_true", help="Print markdown instead of the HTML fragment."
    )
    gen_p.add_argument(
        "--output",
        nargs="?",
        const="",
        default=None,
        help="Save the markdown (defaults to output.filename when no path is given).",
    )
    gen_p.add_argument("--html-output", type=str, default=None, help="Save the HTML fragment.")
    gen_p.add_argument("--plain", action="store_true", help="Emit tags without class attributes.")
    gen_p.add_argument(
        "--no-remember", action="store_true", help="Do not store the API key after success."
    )
    gen_p.add_argument("--no-progress", action="store_true", help="Disable the status spinner.")

    render_p = subparsers.add_parser("render", help="Render a markdown file to an HTML fragment.")
    _add_common_flags(render_p)
    render_p.add_argument("path", nargs="?", default="-", help="Markdown file, or '-' for stdin.")
    render_p.add_argument(
        "--plain", action="store_true", help="Emit tags without class attributes."
    )

    forget_p = subparsers.add_parser("forget-key", help="Remove the stored API key.")
    _add_common_flags(forget_p)

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(args: argparse.Namespace) -> tuple[Path, ArticlegenConfig]:
    from articlegen.config import load_config

    root = Path(args.root).resolve() if args.root else None
    config_path = Path(args.config).resolve() if args.config else None
    cfg = load_config(root=root, config_path=config_path)
    return cfg.root, cfg


def _apply_overrides(cfg: ArticlegenConfig, args: argparse.Namespace) -> ArticlegenConfig:
    llm = cfg.llm
    if args.provider:
        provider = args.provider.strip().lower()
        llm = dataclasses.replace(
            llm,
            provider=provider,
            api_key_env=_DEFAULT_KEY_ENV.get(provider, llm.api_key_env),
        )
    if args.model:
        llm = dataclasses.replace(llm, model=args.model)
    return dataclasses.replace(cfg, llm=llm)


def _build_backend(cfg: ArticlegenConfig) -> GeneratorBackend:
    provider = cfg.llm.provider
    if provider == "openai":
        from articlegen.generate.openai_backend import OpenAIBackend

        return OpenAIBackend(cfg.llm)
    if provider == "anthropic":
        from articlegen.generate.anthropic_backend import AnthropicBackend

        return AnthropicBackend(cfg.llm)
    if provider == "demo":
        from articlegen.generate.demo_backend import DemoBackend

        return DemoBackend()
    raise ArticlegenConfigError(f"Unsupported llm.provider: {provider!r}")


def _styles(cfg: ArticlegenConfig, args: argparse.Namespace) -> RenderStyles:
    if bool(getattr(args, "plain", False)) or not cfg.render.styled:
        return RenderStyles.plain()
    return RenderStyles()


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _maybe_load_dotenv(root: Path) -> None:
    # Best-effort; never override existing environment variables.
    load_dotenv_into_environ(root / ".env")


def _read_topic(args: argparse.Namespace) -> str:
    if args.topic_file:
        try:
            return Path(args.topic_file).read_text(encoding="utf-8")
        except OSError as e:
            raise ArticlegenInputError(
                "Topic Required", f"Could not read topic file {args.topic_file}: {e}"
            ) from e
    return args.topic or ""


def _credential_store(cfg: ArticlegenConfig) -> CredentialStore:
    return CredentialStore(cfg.credential_store_path(), cfg.credentials.key)


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ArticlegenConfigError(f"Failed writing {path}: {e}") from e


async def _submit(
    generator: ArticleGenerator,
    request: ArticleRequest,
    credential: str,
    spinner: Spinner | None,
) -> Article:
    if spinner is None:
        return await generator.submit(request, credential)
    return await spinner.run(generator.submit(request, credential))


def cmd_generate(args: argparse.Namespace) -> int:
    from articlegen.generator import ArticleGenerator
    from articlegen.prompting import load_templates

    try:
        root, cfg = _load_config(args)
        _maybe_load_dotenv(root)
        cfg = _apply_overrides(cfg, args)

        request = ArticleRequest(
            topic=_read_topic(args),
            tone=resolve_option("tone", args.tone),
            depth=resolve_option("depth", args.depth),
            format=resolve_option("format", args.format),
        )

        backend = _build_backend(cfg)
        store = _credential_store(cfg)
        # Read once; the flow only ever sees this injected value.
        credential = resolve_credential(args.api_key, env_var=cfg.llm.api_key_env, store=store)
        remember = cfg.credentials.remember and not bool(args.no_remember)

        generator = ArticleGenerator(
            backend,
            renderer=MarkdownRenderer(_styles(cfg, args)),
            templates=load_templates(cfg.prompts, root=root),
            store=store if remember else None,
        )

        spinner = None
        if (not bool(args.no_progress)) and sys.stderr.isatty():
            spinner = Spinner(label="Generating article...", stream=sys.stderr)

        article = asyncio.run(_submit(generator, request, credential, spinner))
        _eprint(format_notification(ARTICLE_GENERATED))

        if args.output is not None:
            md_path = Path(args.output or cfg.output.filename)
            _write_text(md_path, article.markdown + "\n")
            _eprint(format_notification(article_saved(md_path)))
        if args.html_output:
            html_path = Path(args.html_output)
            _write_text(html_path, article.html + "\n")
            _eprint(format_notification(article_saved(html_path, kind="HTML")))

        print(article.markdown if args.markdown else article.html)
        return EXIT_OK
    except (ArticlegenInputError, ArticlegenConfigError) as e:
        _eprint(format_error(e))
        return EXIT_INPUT_OR_CONFIG
    except ArticlegenGenerationError as e:
        _eprint(format_error(e))
        return EXIT_GENERATION_ERROR


def cmd_render(args: argparse.Namespace) -> int:
    try:
        _, cfg = _load_config(args)
        if args.path == "-":
            source = sys.stdin.read()
        else:
            try:
                source = Path(args.path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ArticlegenInputError(
                    "File Not Readable", f"Could not read {args.path}: {e}"
                ) from e
    except (ArticlegenInputError, ArticlegenConfigError) as e:
        _eprint(format_error(e))
        return EXIT_INPUT_OR_CONFIG

    print(MarkdownRenderer(_styles(cfg, args)).render(source))
    return EXIT_OK


def cmd_forget_key(args: argparse.Namespace) -> int:
    try:
        _, cfg = _load_config(args)
    except ArticlegenConfigError as e:
        _eprint(format_error(e))
        return EXIT_INPUT_OR_CONFIG

    store = _credential_store(cfg)
    try:
        removed = store.clear()
    except (OSError, UnicodeDecodeError) as e:
        _eprint(format_error(ArticlegenConfigError(f"Failed updating {store.path}: {e}")))
        return EXIT_INPUT_OR_CONFIG

    if removed:
        n = Notification("Key Removed", f"The stored API key was removed from {store.path}.")
    else:
        n = Notification("No Key Stored", f"No API key was stored in {store.path}.")
    _eprint(format_notification(n))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_INPUT_OR_CONFIG

    _configure_logging(bool(args.verbose))

    if args.command == "generate":
        return cmd_generate(args)
    if args.command == "render":
        return cmd_render(args)
    if args.command == "forget-key":
        return cmd_forget_key(args)

    return EXIT_INPUT_OR_CONFIG


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
