"""Normalization of model-generated audit Markdown."""

import re

ATTRIBUTION_TITLE = "Contract Audit AI"

_WRAPPING_FENCE = re.compile(r"^```(?:markdown|md)?[ \t]*\n(.*)\n```[ \t]*$", re.DOTALL | re.IGNORECASE)


def attribution_header(model: str) -> str:
    return (
        f"> Generated by {ATTRIBUTION_TITLE} using `{model}`. "
        f"AI findings can be incomplete or wrong; verify before acting on them.\n\n"
    )


def strip_wrapping_fence(markdown: str) -> str:
    """Remove a code fence wrapped around the whole body, if any."""
    text = markdown.strip()
    match = _WRAPPING_FENCE.match(text)
    return match.group(1).strip() if match else text


def normalize_report(markdown: str, model: str) -> str:
    """
    Clean a raw completion into the final report.

    Args:
        markdown: Raw completion text
        model: Model id, named in the attribution header

    Returns:
        Report Markdown starting with the attribution header
    """
    return attribution_header(model) + strip_wrapping_fence(markdown) + "\n"
