from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from articlegen import cli
from articlegen.config import load_config
from articlegen.credentials import CredentialStore
from articlegen.errors import ArticlegenConfigError
from articlegen.generate.openai_backend import OpenAIBackend


@pytest.fixture
def project(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "articlegen.toml").write_text(
        'version = 1\n\n[credentials]\nstore_path = "creds"\n', encoding="utf-8"
    )
    for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        # setenv first so teardown also undoes values loaded from .env files.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _form(*extra: str) -> list[str]:
    return [
        "--topic",
        "Volcanoes",
        "--tone",
        "engaging",
        "--depth",
        "advanced",
        "--format",
        "step guide",
        *extra,
    ]


def _store(project: Path) -> CredentialStore:
    return CredentialStore(project / "creds")


def test_render_file_plain(project: Path, capsys) -> None:
    (project / "a.md").write_text("# Title\n\nSome **bold** text.", encoding="utf-8")
    rc = cli.main(["render", "a.md", "--plain", "--root", str(project)])
    assert rc == cli.EXIT_OK
    out = capsys.readouterr().out
    assert out == "<h1>Title</h1></p><p>Some <strong>bold</strong> text.\n"


def test_render_reads_stdin(project: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("- a\n- b"))
    rc = cli.main(["render", "--plain", "--root", str(project)])
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out == "<ul><li>a</li>\n<li>b</li></ul>\n"


def test_render_styled_by_default(project: Path, capsys) -> None:
    (project / "a.md").write_text("# Title", encoding="utf-8")
    assert cli.main(["render", "a.md", "--root", str(project)]) == cli.EXIT_OK
    assert 'class="text-3xl' in capsys.readouterr().out


def test_render_missing_file(project: Path, capsys) -> None:
    rc = cli.main(["render", "missing.md", "--root", str(project)])
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "File Not Readable" in capsys.readouterr().err


def test_render_undecodable_file(project: Path, capsys) -> None:
    (project / "a.md").write_bytes(b"\xff\xfe# Title")
    rc = cli.main(["render", "a.md", "--root", str(project)])
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "File Not Readable" in capsys.readouterr().err


def test_generate_with_undecodable_store_asks_for_key(project: Path, capsys) -> None:
    (project / "creds").write_bytes(b"\xff\xfeARTICLEGEN_API_KEY=sk\n")
    rc = cli.main(["generate", "--root", str(project), *_form()])
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "API Key Required" in capsys.readouterr().err


def test_generate_with_demo_provider(project: Path, capsys) -> None:
    rc = cli.main(["generate", "--root", str(project), "--provider", "demo", "--plain", *_form()])
    assert rc == cli.EXIT_OK
    captured = capsys.readouterr()
    assert "<h1>Volcanoes: A Comprehensive Guide</h1>" in captured.out
    assert "<strong>Volcanoes</strong>" in captured.out
    assert "Article Generated!" in captured.err


def test_generate_markdown_and_output_files(project: Path, capsys) -> None:
    rc = cli.main(
        [
            "generate",
            "--root",
            str(project),
            "--provider",
            "demo",
            "--markdown",
            "--output",
            "--html-output",
            "out/article.html",
            *_form(),
        ]
    )
    assert rc == cli.EXIT_OK
    captured = capsys.readouterr()
    assert captured.out.startswith("# Volcanoes: A Comprehensive Guide")

    md = project / "educational-article.md"
    assert md.read_text(encoding="utf-8").startswith("# Volcanoes")
    html = (project / "out" / "article.html").read_text(encoding="utf-8")
    assert html.startswith("<h1 class=")
    assert captured.err.count("Article Saved") == 2


def test_generate_topic_from_file(project: Path, capsys) -> None:
    (project / "outline.txt").write_text("Plate tectonics\n", encoding="utf-8")
    rc = cli.main(
        [
            "generate",
            "--root",
            str(project),
            "--provider",
            "demo",
            "--markdown",
            "--topic-file",
            "outline.txt",
            "--tone",
            "Formal",
            "--depth",
            "Introductory",
            "--format",
            "FAQ Format",
        ]
    )
    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out.startswith("# Plate tectonics: A Comprehensive Guide")


def test_generate_missing_topic(project: Path, capsys) -> None:
    rc = cli.main(
        ["generate", "--root", str(project), "--provider", "demo", "--tone", "Casual"]
    )
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    err = capsys.readouterr().err
    assert "Topic Required" in err


def test_generate_missing_selection(project: Path, capsys) -> None:
    rc = cli.main(
        ["generate", "--root", str(project), "--provider", "demo", "--topic", "Rust"]
    )
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "Complete the Form" in capsys.readouterr().err


def test_generate_unknown_option(project: Path, capsys) -> None:
    rc = cli.main(["generate", "--root", str(project), *_form("--tone", "grumpy")])
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "Unknown tone" in capsys.readouterr().err


def test_generate_without_key_never_calls_upstream(project: Path, capsys, monkeypatch) -> None:
    calls: list[int] = []

    async def fake_call(self, messages, *, api_key):
        calls.append(1)
        return "# never"

    monkeypatch.setattr(OpenAIBackend, "_call_openai", fake_call)
    rc = cli.main(["generate", "--root", str(project), *_form()])

    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert calls == []
    err = capsys.readouterr().err
    assert "API Key Required" in err
    assert "hint:" in err


def test_generate_upstream_failure(project: Path, capsys, monkeypatch) -> None:
    async def fake_call(self, messages, *, api_key):
        raise ConnectionError("unreachable")

    monkeypatch.setattr(OpenAIBackend, "_call_openai", fake_call)
    rc = cli.main(["generate", "--root", str(project), "--api-key", "sk-x", *_form()])

    assert rc == cli.EXIT_GENERATION_ERROR
    captured = capsys.readouterr()
    assert "Generation Failed" in captured.err
    assert captured.out == ""
    assert _store(project).load() == ""


def test_generate_success_remembers_key(project: Path, capsys, monkeypatch) -> None:
    seen: list[str] = []

    async def fake_call(self, messages, *, api_key):
        seen.append(api_key)
        assert "Volcanoes" in messages[-1]["content"]
        return "# Volcanoes\n\nHot rocks."

    monkeypatch.setattr(OpenAIBackend, "_call_openai", fake_call)
    rc = cli.main(["generate", "--root", str(project), "--api-key", "sk-x", "--plain", *_form()])

    assert rc == cli.EXIT_OK
    assert capsys.readouterr().out == "<h1>Volcanoes</h1></p><p>Hot rocks.\n"
    assert seen == ["sk-x"]
    assert _store(project).load() == "sk-x"

    # Next run picks the stored key up without --api-key.
    rc = cli.main(["generate", "--root", str(project), *_form()])
    assert rc == cli.EXIT_OK
    assert seen == ["sk-x", "sk-x"]


def test_generate_env_key_and_no_remember(project: Path, capsys, monkeypatch) -> None:
    async def fake_call(self, messages, *, api_key):
        assert api_key == "sk-env"
        return "text"

    monkeypatch.setattr(OpenAIBackend, "_call_openai", fake_call)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    rc = cli.main(["generate", "--root", str(project), "--no-remember", *_form()])

    assert rc == cli.EXIT_OK
    assert not (project / "creds").exists()


def test_generate_reads_key_from_dotenv(project: Path, capsys, monkeypatch) -> None:
    (project / ".env").write_text("OPENAI_API_KEY=sk-dotenv\n", encoding="utf-8")

    async def fake_call(self, messages, *, api_key):
        assert api_key == "sk-dotenv"
        return "text"

    monkeypatch.setattr(OpenAIBackend, "_call_openai", fake_call)
    rc = cli.main(["generate", "--root", str(project), "--no-remember", *_form()])
    assert rc == cli.EXIT_OK


def test_forget_key(project: Path, capsys) -> None:
    _store(project).save("sk-old")
    assert cli.main(["forget-key", "--root", str(project)]) == cli.EXIT_OK
    assert "Key Removed" in capsys.readouterr().err
    assert _store(project).load() == ""

    assert cli.main(["forget-key", "--root", str(project)]) == cli.EXIT_OK
    assert "No Key Stored" in capsys.readouterr().err


def test_invalid_config_exit_code(tmp_path: Path, capsys) -> None:
    (tmp_path / "articlegen.toml").write_text("version = 9\n", encoding="utf-8")
    rc = cli.main(["render", "--root", str(tmp_path)])
    assert rc == cli.EXIT_INPUT_OR_CONFIG
    assert "Configuration Error" in capsys.readouterr().err


def test_parse_errors_return_exit_code(capsys) -> None:
    assert cli.main(["bogus"]) == 2
    assert cli.main(["--version"]) == 0


def test_build_backend_dispatch(project: Path) -> None:
    from articlegen.generate.demo_backend import DemoBackend

    cfg = load_config(root=project)
    assert isinstance(cli._build_backend(cfg), OpenAIBackend)

    args = cli.parse_args(["generate", "--provider", "demo"])
    assert isinstance(cli._build_backend(cli._apply_overrides(cfg, args)), DemoBackend)


def test_build_backend_anthropic(project: Path) -> None:
    pytest.importorskip("anthropic", reason="anthropic SDK not installed")
    from articlegen.generate.anthropic_backend import AnthropicBackend

    cfg = load_config(root=project)
    args = cli.parse_args(["generate", "--provider", "Anthropic", "--model", "claude-x"])
    cfg = cli._apply_overrides(cfg, args)
    assert cfg.llm.api_key_env == "ANTHROPIC_API_KEY"
    assert cfg.llm.model == "claude-x"
    assert isinstance(cli._build_backend(cfg), AnthropicBackend)


def test_build_backend_unsupported(project: Path) -> None:
    cfg = load_config(root=project)
    args = cli.parse_args(["generate", "--provider", "unsupported-provider"])
    with pytest.raises(ArticlegenConfigError, match="Unsupported llm.provider"):
        cli._build_backend(cli._apply_overrides(cfg, args))
