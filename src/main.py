#!/usr/bin/env python3
"""
Main entry point for the contract audit tool.

This script orchestrates the audit workflow:
1. Parse command-line arguments
2. Resolve verified source (proxy + implementation) from the chain's explorer
3. Run the AI audit with retries, cancellable with Ctrl+C
4. Save the bundle and the Markdown report
"""

import argparse
import asyncio
import json
import logging
import os
import re
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from contract_audit.auditing import AnalysisOrchestrator, CancelToken
from contract_audit.chains import resolve_chain, supported_chains
from contract_audit.config import SUPPORTED_MODELS, EnvConfigStore, model_slug
from contract_audit.errors import ResolutionError
from contract_audit.extraction import resolve_contract
from contract_audit.models import ContractBundle

# Load environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130

NOISY_LOGGERS = ("openai", "httpx", "httpcore", "urllib3")


def configure_logging(debug: bool, output_dir: Path) -> None:
    if debug:
        output_dir.mkdir(parents=True, exist_ok=True)
        # Enable file logging when debug is True
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[logging.FileHandler(output_dir / 'contract_audit.log', encoding='utf-8')]
        )
    else:
        logging.basicConfig(
            level=logging.CRITICAL,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[logging.NullHandler()]
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def safe_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", value).strip("_") or "contract"


def build_parser() -> argparse.ArgumentParser:
    model_ids = ", ".join(m.id for m in SUPPORTED_MODELS)
    parser = argparse.ArgumentParser(
        description='Resolve verified contract source from an explorer and audit it with AI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Environment Variables (can also be set in .env file):
  ETHERSCAN_API_KEY     Explorer API key (fallback for every chain)
  BSCSCAN_API_KEY, ...  Per-chain explorer API keys
  NEVERSIGHT_API_KEY    Inference API key
  AI_MODEL              Model id (one of: {model_ids})
  AI_LANGUAGE           Report language (default: english)
  AI_SUPER_PROMPT       Prepend the deep-audit block (default: true)
  AI_MAX_RETRIES        Retries for temporary inference failures (default: 3)

Priority: Command-line arguments > Environment variables > Defaults
        """
    )
    parser.add_argument('--address', required=True, help='Contract address (0x...)')
    parser.add_argument(
        '--chain',
        default='ethereum',
        help=f"Chain name, alias or id (default: ethereum; known: {', '.join(supported_chains())})"
    )
    parser.add_argument('--model', default=None, help='Model id (env: AI_MODEL)')
    parser.add_argument('--language', default=None, help='Report language (env: AI_LANGUAGE)')
    parser.add_argument(
        '--no-super-prompt',
        action='store_true',
        default=False,
        help='Do not prepend the deep-audit enhancement block'
    )
    parser.add_argument(
        '--resolve-only',
        action='store_true',
        default=False,
        help='Only resolve and save the source bundle, skip the AI audit'
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=Path('output'),
        help='Directory for reports and logs (default: output)'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        default=False,
        help='Enable debug mode to log to file (default: False)'
    )
    return parser


def save_bundle(bundle: ContractBundle, output_dir: Path, timestamp: str) -> Path:
    name = safe_name(bundle.contract_name or bundle.address)
    bundle_file = output_dir / f"bundle_{name}_{timestamp}.json"
    bundle_file.write_text(json.dumps(bundle.to_summary(), indent=2), encoding='utf-8')
    return bundle_file


def print_bundle_summary(bundle: ContractBundle) -> None:
    print(f"Contract:  {bundle.contract_name or '(unnamed)'} at {bundle.address} (chain {bundle.chain_id})")
    print(f"Compiler:  {bundle.compiler_version or 'unknown'}")
    print(f"Files:     {len(bundle.files)}")
    print(f"ABI:       {len(bundle.abi)} entries")
    if bundle.is_proxy:
        print(f"Proxy:     implementation {bundle.implementation_address} "
              f"({len(bundle.implementation_abi)} ABI entries)")
        if bundle.proxy_partial is not None:
            print(f"Warning:   {bundle.proxy_partial}")


def _max_retries_from_env() -> int:
    raw = os.getenv('AI_MAX_RETRIES')
    try:
        return int(raw) if raw else 3
    except ValueError:
        logger.warning(f"Ignoring invalid AI_MAX_RETRIES={raw!r}")
        return 3


async def run(args: argparse.Namespace) -> int:
    output_dir: Path = args.output_dir
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    try:
        chain = resolve_chain(args.chain)
        bundle = await resolve_contract(args.address, chain)
    except ResolutionError as e:
        logger.error(f"❌ Resolution failed: {e.diagnostics()}")
        print(f"Error: {e}", file=sys.stderr)
        if e.explorer_message:
            print(f"Explorer said: {e.explorer_message} (status {e.status})", file=sys.stderr)
        if isinstance(e.result, str) and e.result:
            print(f"Explorer result: {e.result}", file=sys.stderr)
        return EXIT_FAILED

    output_dir.mkdir(parents=True, exist_ok=True)
    print_bundle_summary(bundle)
    bundle_file = save_bundle(bundle, output_dir, timestamp)
    print(f"Bundle:    {bundle_file}")

    if args.resolve_only:
        return EXIT_OK

    store = EnvConfigStore()
    config = store.read()
    overrides = {}
    if args.model:
        overrides['selected_model'] = args.model
    if args.language:
        overrides['language'] = args.language
    if args.no_super_prompt:
        overrides['super_prompt'] = False
    if overrides:
        config = config.model_copy(update=overrides)
        store.write(config)

    token = CancelToken()
    loop = asyncio.get_running_loop()
    handles_sigint = True
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        # Windows event loops: Ctrl+C raises KeyboardInterrupt instead
        handles_sigint = False
        logger.info("SIGINT handler not supported on this platform")

    print(f"Auditing with {config.selected_model}... (Ctrl+C to cancel)")
    orchestrator = AnalysisOrchestrator(max_retries=_max_retries_from_env())
    try:
        result = await orchestrator.analyze(bundle, config, token)
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    if result.cancelled:
        print(result.user_message)
        return EXIT_CANCELLED
    if not result.succeeded:
        print(f"Error: {result.user_message}", file=sys.stderr)
        return EXIT_FAILED

    name = safe_name(bundle.contract_name or bundle.address)
    report_file = output_dir / f"AUDIT_{name}_{model_slug(config)}_{timestamp}.md"
    report_file.write_text(result.markdown, encoding='utf-8')
    logger.info(f"✓ Audit report saved to {report_file} after {result.attempts} attempt(s)")
    print(f"Report:    {report_file}")
    return EXIT_OK


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug, args.output_dir)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("Analysis cancelled.")
        return EXIT_CANCELLED


if __name__ == '__main__':
    sys.exit(main())
