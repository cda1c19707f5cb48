"""
Prompt construction for contract audits.

Only first-party logic goes into the prompt: vendored libraries and
interface-only files are dropped, the rest is concatenated under `// File:`
headers within a fixed character budget.
"""

import logging
import re
from typing import List

from ..config import AIConfig
from ..models import ContractBundle, SourceFile
from .rules import get_audit_template, get_super_prompt, language_directive

logger = logging.getLogger(__name__)

MAX_PROMPT_SOURCE_CHARS = 400_000

TRUNCATION_MARKER = "\n// ... truncated"

VENDORED_PATH_MARKERS = (
    "@openzeppelin/",
    "openzeppelin-contracts/",
    "openzeppelin-contracts-upgradeable/",
    "node_modules/",
    "lib/forge-std/",
    "forge-std/",
    "@chainlink/",
    "@uniswap/",
    "solmate/",
    "solady/",
    "@gnosis.pm/",
)

_COMMENTS = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)
_INTERFACE_DECL = re.compile(r"\binterface\s+\w+")
_IMPLEMENTATION_DECL = re.compile(r"\b(?:abstract\s+contract|contract|library)\s+\w+")


def is_vendored_file(source_file: SourceFile) -> bool:
    path = source_file.path.lower()
    return any(marker in path for marker in VENDORED_PATH_MARKERS)


def is_interface_only(source_file: SourceFile) -> bool:
    """True when the file declares interfaces and no contract or library."""
    code = _COMMENTS.sub("", source_file.content)
    return bool(_INTERFACE_DECL.search(code)) and not _IMPLEMENTATION_DECL.search(code)


def select_audit_files(files: List[SourceFile]) -> List[SourceFile]:
    """
    Drop vendored-library and interface-only files.

    Args:
        files: Bundle files in bundle order

    Returns:
        Files worth auditing; all files if the filters would drop everything
    """
    selected = [f for f in files if not is_vendored_file(f) and not is_interface_only(f)]
    if not selected:
        logger.info("All files look vendored or interface-only, keeping every file")
        return list(files)

    skipped = len(files) - len(selected)
    if skipped:
        logger.info(f"Skipping {skipped} vendored/interface file(s) from the audit prompt")
    return selected


def render_sources(files: List[SourceFile], max_chars: int = MAX_PROMPT_SOURCE_CHARS) -> str:
    """
    Concatenate files under path headers within a character budget.

    The file that crosses the budget is cut with a truncation marker; later
    files are left out.
    """
    blocks: List[str] = []
    used = 0
    for index, source_file in enumerate(files):
        block = f"// File: {source_file.path}\n{source_file.content}"
        remaining = max_chars - used
        if len(block) > remaining:
            if remaining > len(TRUNCATION_MARKER):
                blocks.append(block[:remaining - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER)
            logger.warning(f"⚠️  Prompt budget reached, left out {len(files) - index - 1} file(s) after {source_file.path}")
            break
        blocks.append(block)
        used += len(block) + 2

    return "\n\n".join(blocks)


def build_prompt(bundle: ContractBundle, config: AIConfig, max_chars: int = MAX_PROMPT_SOURCE_CHARS) -> str:
    """
    Build the user prompt for one audit.

    Args:
        bundle: Resolved contract bundle
        config: AI configuration (language and super prompt flag are used)
        max_chars: Budget for the concatenated source

    Returns:
        Prompt text: [super prompt] + audit template with sources + language directive
    """
    files = select_audit_files(list(bundle.files))

    if bundle.is_proxy:
        proxy_note = (
            f"This is a proxy contract. Files under `proxy/` are the proxy shell; "
            f"files under `implementation/` are the logic contract at `{bundle.implementation_address}`. "
            f"Focus the audit on the implementation and on the proxy/implementation interaction."
        )
        if bundle.is_partial:
            proxy_note += " The implementation source could not be retrieved, only the proxy shell is included."
    else:
        proxy_note = ""

    body = get_audit_template().safe_substitute(
        contract_name=bundle.contract_name or bundle.address,
        compiler_version=bundle.compiler_version or "unknown",
        address=bundle.address,
        chain_id=bundle.chain_id if bundle.chain_id is not None else "unknown",
        proxy_note=proxy_note,
        file_count=len(files),
        source_code=render_sources(files, max_chars),
    )

    sections = []
    if config.super_prompt:
        sections.append(get_super_prompt())
    sections.append(body)
    sections.append(language_directive(config.language))

    prompt = "\n\n".join(sections)
    logger.info(f"Built audit prompt: {len(files)} file(s), {len(prompt):,} chars")
    return prompt
