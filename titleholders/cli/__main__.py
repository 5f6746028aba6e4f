from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from titleholders.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from titleholders.logging.init import log_summary, setup_logging
from titleholders.models.config_models import NormalizerConfig
from titleholders.services.pipeline import PipelineError, run_pipeline
from titleholders.services.summary import render_summary_line
from titleholders.source.reader import SchemaMismatchError, TableImportError, load_raw

"""CLI entrypoint.

Flow:
- Load .env (may set TITLEHOLDERS_CONFIG)
- Load and validate the YAML config
- Run the pipeline and log the top rows of both aggregate views
- Finish with one SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

CONFIG_ENV_VAR = "TITLEHOLDERS_CONFIG"


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="World's oldest person titleholder table normalizer")
    p.add_argument("--config", type=Path, default=None, help="Path to YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print renamed columns & first rows then exit")
    p.add_argument("--top", type=int, default=5, help="Rows of each aggregate view to log")
    return p.parse_args(argv)


def _resolve_config_path(arg: Path | None) -> Path:
    if arg is not None:
        return arg
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _inspect_data(cfg: NormalizerConfig) -> int:
    source = Path(cfg.source_file)
    try:
        raw = load_raw(source, expected_arity=len(cfg.columns), sheet_name=cfg.sheet_name)
    except (TableImportError, SchemaMismatchError) as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {source.name} rows={len(raw)}")
    print(f"  cols={list(cfg.columns)}")
    sample = raw.head(3).copy()
    sample.columns = list(cfg.columns)
    print("  sample_rows=", sample.to_dict(orient="records"))
    return EXIT_SUCCESS


def _log_view(logger, title: str, view: pd.DataFrame, top: int) -> None:
    logger.info(f"{title} (top {min(top, len(view))} of {len(view)})")
    for row in view.head(top).itertuples(index=False):
        key, value = row[0], row[1]
        if isinstance(value, float):
            logger.info(f"  {key or '<blank>'}: {value:.2f}")
        else:
            logger.info(f"  {key or '<blank>'}: {value}")


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む ([] はテストからの明示的な空引数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    config_path = _resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Normalizing: {cfg.source_file}")
    try:
        result = run_pipeline(cfg)
    except PipelineError as e:
        logger.error(f"pipeline: {e}")
        return EXIT_FATAL

    _log_view(logger, "Titleholders by birthplace", result.frequency, args.top)
    _log_view(logger, "Mean reign (years) by birthplace", result.mean_reign, args.top)

    summary_line = render_summary_line(result)
    # log_summary が "SUMMARY " を付けるので先頭を落とす
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
