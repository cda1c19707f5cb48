"""
Explorer `SourceCode` payload normalization.

Explorers deliver verified source in one of three shapes:
- a plain Solidity string (single-file verification)
- a Standard-JSON-Input document wrapped in one extra pair of braces (`{{...}}`)
- a flat JSON object mapping path -> content (or path -> {"content": ...})

Everything here is pure: no I/O, deterministic for a given input.
"""

import copy
import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...models import (
    DEFAULT_OPTIMIZER_RUNS,
    DEFAULT_OUTPUT_SELECTION,
    ROLE_PLAIN,
    CompilerSettings,
    OptimizerSettings,
    SourceFile,
    SourceRole,
)
from .shared import logger

DEFAULT_CONTRACT_NAME = "Contract"


def _file_name(path: str) -> str:
    return path.split("/")[-1] or path


def _extract_content(file_info: Any) -> str:
    if isinstance(file_info, str):
        return file_info
    if isinstance(file_info, dict) and isinstance(file_info.get("content"), str):
        return file_info["content"]
    return ""


def _single_file(raw_source_code: str, contract_name: str) -> List[SourceFile]:
    path = f"{contract_name or DEFAULT_CONTRACT_NAME}.sol"
    return [SourceFile(name=path, path=path, content=raw_source_code)]


def parse_packed_source(raw_source_code: str) -> Optional[Dict[str, Any]]:
    """
    Decode a multi-file `SourceCode` payload.

    The doubly-encoded form `{{...}}` loses exactly one leading and one trailing
    brace before parsing; a single-brace object is parsed as-is.

    Args:
        raw_source_code: Explorer `SourceCode` value

    Returns:
        Parsed JSON object, or None if the payload is not a JSON object
    """
    text = raw_source_code.strip()
    if not text.startswith("{"):
        return None
    if text.startswith("{{") and text.endswith("}}"):
        text = text[1:-1]

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Multi-file source is not valid JSON: {e}")
        return None

    return parsed if isinstance(parsed, dict) else None


def normalize_source(raw_source_code: str, contract_name: str) -> List[SourceFile]:
    """
    Turn an explorer `SourceCode` value into an ordered list of source files.

    Unknown or malformed multi-file shapes fall back to one file holding the raw
    string verbatim, so non-empty input never yields an empty list.

    Args:
        raw_source_code: Explorer `SourceCode` value
        contract_name: Explorer `ContractName`, names the single-file fallback

    Returns:
        List of SourceFile in explorer order, all with the plain role
    """
    if not raw_source_code.lstrip().startswith("{"):
        return _single_file(raw_source_code, contract_name)

    parsed = parse_packed_source(raw_source_code)
    if parsed is None:
        logger.warning(f"Could not parse multi-file source for {contract_name}, keeping it as a single file")
        return _single_file(raw_source_code, contract_name)

    files: List[SourceFile] = []
    sources = parsed.get("sources")
    if isinstance(sources, dict):
        for path, file_info in sources.items():
            files.append(SourceFile(name=_file_name(path), path=path, content=_extract_content(file_info)))
    elif "sources" in parsed:
        logger.warning(f"Multi-file source for {contract_name} has a non-object 'sources', keeping it as a single file")
        return _single_file(raw_source_code, contract_name)
    else:
        for path, file_info in parsed.items():
            if isinstance(file_info, str) or (isinstance(file_info, dict) and "content" in file_info):
                files.append(SourceFile(name=_file_name(path), path=path, content=_extract_content(file_info)))

    if not files:
        logger.warning(f"Multi-file source for {contract_name} has no recognizable files, keeping it as a single file")
        return _single_file(raw_source_code, contract_name)

    logger.debug(f"Normalized {len(files)} source files for {contract_name}")
    return files


def prefix_files(files: List[SourceFile], role: SourceRole) -> List[SourceFile]:
    """
    Tag files with a role, prefixing their paths with `<role>/` unless plain.

    Args:
        files: Normalized (plain) source files
        role: plain, proxy or implementation

    Returns:
        New SourceFile list; names are unchanged
    """
    if role == ROLE_PLAIN:
        return [f.model_copy(update={"role": role}) for f in files]
    return [f.model_copy(update={"path": f"{role}/{f.path}", "role": role}) for f in files]


def _parse_runs(runs: Any) -> int:
    try:
        value = int(str(runs).strip())
    except (TypeError, ValueError):
        return DEFAULT_OPTIMIZER_RUNS
    return value or DEFAULT_OPTIMIZER_RUNS


def parse_compiler_settings(
    raw_source_code: str,
    optimization_used: Any = None,
    runs: Any = None,
) -> CompilerSettings:
    """
    Compiler settings for a verified contract. Never returns None.

    Args:
        raw_source_code: Explorer `SourceCode` value
        optimization_used: Explorer `OptimizationUsed` flag ("1"/"0")
        runs: Explorer `Runs` value

    Returns:
        The packed `settings` object when present and well-formed, otherwise
        settings synthesized from the flat explorer fields
    """
    parsed = parse_packed_source(raw_source_code) if raw_source_code else None
    packed = parsed.get("settings") if parsed else None
    if isinstance(packed, dict):
        try:
            return CompilerSettings.model_validate(packed)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed compiler settings from explorer: {e.error_count()} error(s)")

    return CompilerSettings(
        optimizer=OptimizerSettings(enabled=str(optimization_used).strip() == "1", runs=_parse_runs(runs)),
        remappings=[],
        metadata={"bytecodeHash": "none"},
        output_selection=copy.deepcopy(DEFAULT_OUTPUT_SELECTION),
    )
