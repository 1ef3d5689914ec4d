"""Tests for top-level `switchboard providers` subcommands."""

from __future__ import annotations

import json

from click.testing import CliRunner

from switchboard.cli import cli as cli_module


def _run_cli(tmp_path, args: list[str], env: dict[str, str] | None = None):
    runner = CliRunner()
    run_env = {"SWITCHBOARD_CONFIG": str(tmp_path / "switchboard.json")}
    run_env.update(env or {})
    return runner.invoke(cli_module.cli, args, env=run_env)


def test_providers_group_help_renders(tmp_path):
    result = _run_cli(tmp_path, ["providers"])
    assert result.exit_code == 0
    assert "Inspect and manage model providers" in result.output
    assert "select" in result.output


def test_list_shows_built_in_provider(tmp_path):
    result = _run_cli(tmp_path, ["providers", "list", "--json"])
    assert result.exit_code == 0
    rows = json.loads(result.output)
    assert rows == [
        {
            "key": "openai",
            "name": "OpenAI",
            "wire_api": "responses",
            "url": "https://api.openai.com/v1/responses",
            "source": "built-in",
            "selected": True,
        }
    ]


def test_list_table_output(tmp_path):
    result = _run_cli(tmp_path, ["providers", "list"])
    assert result.exit_code == 0
    assert "openai" in result.output
    assert "built-in" in result.output


def test_add_show_select_remove_roundtrip(tmp_path):
    add_result = _run_cli(
        tmp_path,
        [
            "providers",
            "add",
            "--name",
            "Azure",
            "--base-url",
            "https://x.openai.azure.com/openai",
            "--env-key",
            "AZURE_OPENAI_API_KEY",
            "--env-key-instructions",
            "Copy the key from the Azure portal.",
            "--query",
            "api-version=2025-04-01-preview",
            "--header",
            "X-Tenant: ${TENANT}",
            "azure",
        ],
    )
    assert add_result.exit_code == 0, add_result.output
    assert "Added model provider 'azure'" in add_result.output

    show_result = _run_cli(
        tmp_path,
        ["providers", "show", "azure", "--json", "--reveal"],
        env={"TENANT": "acme"},
    )
    assert show_result.exit_code == 0, show_result.output
    payload = json.loads(show_result.output)
    assert payload["url"] == (
        "https://x.openai.azure.com/openai/chat/completions?api-version=2025-04-01-preview"
    )
    assert payload["source"] == "user"
    assert payload["headers"] == {"X-Tenant": "acme"}
    assert payload["credential"] == {
        "status": "missing",
        "env_key": "AZURE_OPENAI_API_KEY",
        "instructions": "Copy the key from the Azure portal.",
    }

    select_result = _run_cli(tmp_path, ["providers", "select", "azure"])
    assert select_result.exit_code == 0
    rows = json.loads(_run_cli(tmp_path, ["providers", "list", "--json"]).output)
    assert [row["key"] for row in rows if row["selected"]] == ["azure"]

    remove_result = _run_cli(tmp_path, ["providers", "remove", "azure"])
    assert remove_result.exit_code == 0
    assert "Removed model provider 'azure'" in remove_result.output

    rows = json.loads(_run_cli(tmp_path, ["providers", "list", "--json"]).output)
    assert [row["key"] for row in rows] == ["openai"]
    assert rows[0]["selected"] is True


def test_show_masks_headers_and_reports_set_credential(tmp_path):
    result = _run_cli(
        tmp_path,
        ["providers", "show", "openai", "--json"],
        env={
            "OPENAI_API_KEY": "sk-test",
            "SWITCHBOARD_CUSTOM_HEADERS": "X-Org: my-org",
        },
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["credential"]["status"] == "set"
    assert payload["headers"] == {"X-Org": "***"}
    assert "sk-test" not in result.output


def test_show_text_output(tmp_path):
    result = _run_cli(tmp_path, ["providers", "show", "openai"])
    assert result.exit_code == 0, result.output
    assert "OpenAI" in result.output
    assert "missing" in result.output


def test_show_unknown_provider_fails(tmp_path):
    result = _run_cli(tmp_path, ["providers", "show", "nope"])
    assert result.exit_code == 1
    assert "Unknown model provider 'nope'" in result.output


def test_add_duplicate_requires_overwrite(tmp_path):
    args = ["providers", "add", "--name", "Groq", "--base-url", "https://api.groq.com/openai/v1", "groq"]
    assert _run_cli(tmp_path, args).exit_code == 0

    duplicate = _run_cli(tmp_path, args)
    assert duplicate.exit_code == 1
    assert "--overwrite" in duplicate.output

    replaced = _run_cli(tmp_path, [*args, "--overwrite"])
    assert replaced.exit_code == 0
    assert "Updated model provider 'groq'" in replaced.output


def test_add_rejects_bad_entries(tmp_path):
    base = ["providers", "add", "--name", "P", "--base-url", "https://p"]
    bad_query = _run_cli(tmp_path, [*base, "--query", "novalue", "p"])
    assert bad_query.exit_code == 1
    assert "Expected KEY=VALUE" in bad_query.output

    bad_header = _run_cli(tmp_path, [*base, "--header", "NoColon", "p"])
    assert bad_header.exit_code == 1
    assert "Use 'Name: Value'" in bad_header.output


def test_remove_built_in_provider_fails(tmp_path):
    result = _run_cli(tmp_path, ["providers", "remove", "openai"])
    assert result.exit_code == 1
    assert "not user-defined" in result.output


def test_config_option_overrides_path(tmp_path):
    target = tmp_path / "other.json"
    result = _run_cli(
        tmp_path,
        [
            "--config",
            str(target),
            "providers",
            "add",
            "--name",
            "Local",
            "--base-url",
            "http://localhost:8000/v1",
            "local",
        ],
    )
    assert result.exit_code == 0, result.output
    saved = json.loads(target.read_text(encoding="utf-8"))
    assert saved["model_providers"]["local"]["base_url"] == "http://localhost:8000/v1"
    assert saved["model_providers"]["local"]["wire_api"] == "chat"


def test_log_file_option_writes_debug_log(tmp_path):
    log_file = tmp_path / "logs" / "switchboard.log"
    result = _run_cli(tmp_path, ["--log-file", str(log_file), "providers", "list", "--json"])
    assert result.exit_code == 0
    assert log_file.exists()
    assert "[cli] Starting" in log_file.read_text(encoding="utf-8")


def test_version_command(tmp_path):
    result = _run_cli(tmp_path, ["version"])
    assert result.exit_code == 0
    assert "Switchboard version" in result.output
