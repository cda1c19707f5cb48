"""Static prompt loading for contract audits."""

import logging
from importlib import resources
from pathlib import Path
from string import Template

from . import audit_rules

logger = logging.getLogger(__name__)


def read_rule(filename: str) -> str:
    """Read a prompt file from packaged audit_rules resources."""
    try:
        return resources.files(audit_rules).joinpath(filename).read_text(encoding="utf-8")
    except FileNotFoundError:
        # Fallback for source checkouts where package data was not bundled
        candidate = Path(__file__).resolve().parent / "audit_rules" / filename
        if candidate.exists():
            logger.warning(f"Using filesystem fallback for rule file: {candidate}")
            return candidate.read_text(encoding="utf-8")
        raise


# Cache these files to avoid reloading on every call
_SYSTEM_PROMPT = None
_AUDIT_TEMPLATE = None
_SUPER_PROMPT = None


def get_system_prompt() -> str:
    """Get the cached security-auditor persona."""
    global _SYSTEM_PROMPT
    if _SYSTEM_PROMPT is None:
        _SYSTEM_PROMPT = read_rule("system_prompt.md").strip()
    return _SYSTEM_PROMPT


def get_audit_template() -> Template:
    """Get the cached audit instruction template."""
    global _AUDIT_TEMPLATE
    if _AUDIT_TEMPLATE is None:
        _AUDIT_TEMPLATE = Template(read_rule("audit_template.md").strip())
    return _AUDIT_TEMPLATE


def get_super_prompt() -> str:
    """Get the cached deep-audit enhancement block."""
    global _SUPER_PROMPT
    if _SUPER_PROMPT is None:
        _SUPER_PROMPT = read_rule("super_prompt.md").strip()
    return _SUPER_PROMPT


def language_directive(language: str) -> str:
    return f"Write the entire report in {language.strip() or 'english'}."
