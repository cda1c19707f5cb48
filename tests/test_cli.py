"""Tests for the command-line entry point."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from conftest import PLAIN_ADDRESS
from contract_audit.auditing import AnalysisResult, AnalysisState
from contract_audit.errors import AnalysisCancelledError, ExplorerResponseError, UnauthorizedError
from main import EXIT_CANCELLED, EXIT_FAILED, EXIT_OK, main

MODEL = "openai/gpt-5.2"


def _run(tmp_path, *extra):
    return main(["--address", PLAIN_ADDRESS, "--output-dir", str(tmp_path), *extra])


def _patch_orchestrator(result: AnalysisResult):
    orchestrator = MagicMock()
    orchestrator.analyze = AsyncMock(return_value=result)
    return patch("main.AnalysisOrchestrator", return_value=orchestrator), orchestrator


def test_resolve_only_saves_bundle(tmp_path, bundle) -> None:
    with patch("main.resolve_contract", AsyncMock(return_value=bundle)):
        code = _run(tmp_path, "--resolve-only")

    assert code == EXIT_OK
    bundle_files = list(tmp_path.glob("bundle_Token_*.json"))
    assert len(bundle_files) == 1
    saved = json.loads(bundle_files[0].read_text(encoding="utf-8"))
    assert saved["address"] == PLAIN_ADDRESS
    assert saved["files"][0]["path"] == "Token.sol"


def test_resolution_error_prints_explorer_message(tmp_path, capsys) -> None:
    error = ExplorerResponseError("Failed to fetch contract source", status="0",
                                  explorer_message="NOTOK", result="Invalid API Key")
    with patch("main.resolve_contract", AsyncMock(side_effect=error)):
        code = _run(tmp_path)

    assert code == EXIT_FAILED
    err = capsys.readouterr().err
    assert "NOTOK" in err
    assert "Invalid API Key" in err


def test_unknown_chain_fails(tmp_path) -> None:
    assert _run(tmp_path, "--chain", "dogechain") == EXIT_FAILED


def test_audit_report_is_written(tmp_path, bundle, monkeypatch) -> None:
    monkeypatch.setenv("NEVERSIGHT_API_KEY", "sk-test")
    result = AnalysisResult(state=AnalysisState.SUCCEEDED, model=MODEL, markdown="# Report\n", attempts=1)
    orchestrator_patch, orchestrator = _patch_orchestrator(result)

    with patch("main.resolve_contract", AsyncMock(return_value=bundle)), orchestrator_patch:
        code = _run(tmp_path, "--model", MODEL, "--language", "french", "--no-super-prompt")

    assert code == EXIT_OK
    reports = list(tmp_path.glob("AUDIT_Token_openai-gpt-5.2_*.md"))
    assert len(reports) == 1
    assert reports[0].read_text(encoding="utf-8") == "# Report\n"

    config = orchestrator.analyze.call_args.args[1]
    assert config.selected_model == MODEL
    assert config.language == "french"
    assert config.super_prompt is False
    assert config.api_key == "sk-test"


def test_cancelled_analysis_exit_code(tmp_path, bundle) -> None:
    result = AnalysisResult(state=AnalysisState.CANCELLED, model=MODEL, error=AnalysisCancelledError("stop"))
    orchestrator_patch, _ = _patch_orchestrator(result)

    with patch("main.resolve_contract", AsyncMock(return_value=bundle)), orchestrator_patch:
        code = _run(tmp_path)

    assert code == EXIT_CANCELLED
    assert list(tmp_path.glob("AUDIT_*.md")) == []


def test_failed_analysis_exit_code(tmp_path, bundle, capsys) -> None:
    result = AnalysisResult(state=AnalysisState.FAILED, model=MODEL, error=UnauthorizedError("no key"))
    orchestrator_patch, _ = _patch_orchestrator(result)

    with patch("main.resolve_contract", AsyncMock(return_value=bundle)), orchestrator_patch:
        code = _run(tmp_path)

    assert code == EXIT_FAILED
    assert "Configuration problem" in capsys.readouterr().err
