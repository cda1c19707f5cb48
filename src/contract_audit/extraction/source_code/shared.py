"""Shared logger for the source-code resolution flow."""

import logging

logger = logging.getLogger(__name__)
