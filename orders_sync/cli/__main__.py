from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from orders_sync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from orders_sync.logging.init import log_summary, set_debug, setup_logging
from orders_sync.models.config_models import SyncConfig
from orders_sync.models.edit_event import EditEvent
from orders_sync.models.sync_result import SyncResult
from orders_sync.services.orchestrator import SyncError, full_sync, handle_edit, incremental_sync
from orders_sync.services.summary import render_summary_line

"""CLI entrypoint.

Modes:
- (default) full sync of the source sheet into the Orders Database
- --row N: incremental sync of source row N
- --edit-row/--edit-col: replay an edit event through the edit trigger policy
- --inspect-data: print the canonical column map and first source rows
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_CONFLICTS = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so that PostgreSQL connection variables take precedence."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Orders Database sync (Order ID + Invoice # upsert)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print source columns & first rows then exit")
    p.add_argument("--no-progress", action="store_true", help="Never show the progress bar")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--row", type=int, help="Incremental sync of a single source row (>= 2)")
    mode.add_argument("--edit-row", type=int, help="First row of a simulated edit")
    p.add_argument("--edit-col", type=int, default=None, help="First column (1-based) of the edit")
    p.add_argument("--edit-rows", type=int, default=1, help="Number of edited rows")
    p.add_argument("--edit-cols", type=int, default=1, help="Number of edited columns")
    p.add_argument("--edit-sheet", default=None, help="Edited sheet name (default: source sheet)")
    args = p.parse_args(argv)
    if args.edit_row is not None and args.edit_col is None:
        p.error("--edit-row requires --edit-col")
    return args


def _inspect_data(cfg: SyncConfig) -> int:
    from orders_sync.excel.reader import SheetNotFoundError, normalize_source_sheet, read_sheet

    path = Path(cfg.source.workbook)
    try:
        df = read_sheet(path, cfg.source.sheet)
    except SheetNotFoundError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    sheet = normalize_source_sheet(df, cfg.source.sheet, require_columns=False)
    print(f"SHEET: {sheet.sheet_name} headers={sheet.headers}")
    print(f"  column_map={sheet.column_map}")
    for row in sheet.rows[:3]:
        safe = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.values.items()}
        print(f"  row {row.row_number}: {safe}")
    return EXIT_SUCCESS


def _exit_code(result: SyncResult | None) -> int:
    if result is not None and result.has_conflicts:
        return EXIT_CONFLICTS
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read the process arguments when none were given (tests call main([]))
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    progress = False if args.no_progress else None
    try:
        if args.row is not None:
            result = incremental_sync(cfg, args.row)
        elif args.edit_row is not None:
            event = EditEvent(
                sheet_name=args.edit_sheet or cfg.source.sheet,
                row=args.edit_row,
                column=args.edit_col,
                num_rows=args.edit_rows,
                num_columns=args.edit_cols,
            )
            result = handle_edit(cfg, event)
            if result is None:
                logger.info("edit ignored: no tracked column touched")
                return EXIT_SUCCESS
        else:
            logger.info(f"syncing '{cfg.source.sheet}' -> {cfg.target.backend} target")
            result = full_sync(cfg, progress=progress)
    except SyncError as e:
        logger.error(f"sync: {e}")
        return EXIT_FATAL

    if result.error_log_path is not None:
        logger.info(f"row issues written to {result.error_log_path}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))
    return _exit_code(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
