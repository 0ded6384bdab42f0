"""
formula-miner CLI.

Usage:
    formula-miner --config config.yml
    formula-miner --config config.yml --workers 16 --log-level DEBUG
"""
import argparse
import sys
from typing import Any, Dict, List, Optional

from formula_miner.common.config import DEFAULT_CONFIG_PATH, load_settings
from formula_miner.common.errors import BaseError
from formula_miner.common.logging_config import setup_logging
from formula_miner.service import MinerService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-miner",
        description="Mine dependency graphs, licenses and repository URLs from Homebrew formulae",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"YAML config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--workers", type=int, help="Override reader.max_workers")
    parser.add_argument("--output-dir", help="Override output_dir")
    parser.add_argument("--no-clone", action="store_true", help="Use the existing core repository directory")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=("text", "json"), help="Log format (default: LOG_FORMAT or text)")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.output_dir:
        overrides["output_dir"] = args.output_dir
    if args.workers is not None:
        overrides["reader"] = {"max_workers": args.workers}
    if args.no_clone:
        overrides["core_repo"] = {"clone": False}
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_format=args.log_format)

    try:
        settings = load_settings(args.config, **overrides_from_args(args))
        result = MinerService(settings).run()
    except BaseError as e:
        e.log()
        print(f"Mining failed: {e.message}")
        return 1

    print(f"Mined {result.formula_count} formulae, {result.dependency_count} dependencies -> {result.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
