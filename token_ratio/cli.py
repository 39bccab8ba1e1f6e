from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Sequence

from token_ratio.api.deps import build_price_ratio_use_case
from token_ratio.application.dto.price_ratio import GetPriceRatioInput, GetPriceRatioOutput
from token_ratio.application.use_cases.get_price_ratio import GetPriceRatioUseCase
from token_ratio.domain.entities.price_series import INTERVALS
from token_ratio.domain.exceptions import DomainError
from token_ratio.domain.services.ratio_chart import format_time_label
from token_ratio.infrastructure.export.ratio_csv_writer import write_ratio_csv
from token_ratio.shared.config import Settings, get_settings, load_settings_file


logger = logging.getLogger("token_ratio.cli")

RECENT_RATIOS = 10
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="token-ratio",
        description="Chart the price ratio of two tokens (token A / token B) as ASCII.",
    )
    parser.add_argument("token_a", help="Token A contract address (0x + 40 hex chars).")
    parser.add_argument("token_b", help="Token B contract address (0x + 40 hex chars).")
    parser.add_argument("interval", nargs="?", choices=INTERVALS, help="Chart interval.")
    parser.add_argument("--csv", action="store_true", help="Save the ratio series as CSV.")
    parser.add_argument("--config", help="JSON config file overlaid on environment settings.")
    parser.add_argument("--network", help="GeckoTerminal network id (e.g. eth).")
    parser.add_argument("--chain", help="DexTools chain id (e.g. ether).")
    parser.add_argument("--api-key", dest="api_key", help="DexTools API key for the fallback.")
    parser.add_argument("--subscription", help="DexTools subscription (e.g. pro).")
    parser.add_argument("--host", help="DexTools host URL.")
    parser.add_argument("--version", dest="dextools_version", help="DexTools API version.")
    parser.add_argument("--csv-filename", dest="csv_filename", help="CSV output path.")
    parser.add_argument("--interval", dest="interval_flag", help="Chart interval when not positional.")
    parser.add_argument("--max-candles", dest="max_candles", type=int, help="Candles per fetch.")
    parser.add_argument(
        "--weekly-days",
        dest="weekly_days",
        type=int,
        help="Bucket size in days for weekly resampling.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level.",
    )
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    settings = base or get_settings()
    if args.config:
        settings = load_settings_file(args.config, settings)
    return settings.with_overrides(
        network=args.network,
        chain=args.chain,
        dextools_api_key=args.api_key,
        dextools_subscription=args.subscription,
        dextools_host=args.host,
        dextools_version=args.dextools_version,
        csv_filename=args.csv_filename,
        interval=args.interval or args.interval_flag,
        max_candles=args.max_candles,
        weekly_resample_days=args.weekly_days,
    )


def format_report(result: GetPriceRatioOutput) -> str:
    lines = [
        "",
        f"{result.token_a_info.display_name} / {result.token_b_info.display_name} ratio "
        f"({result.interval}, {len(result.points)} points) - Source: {result.source}",
        f"C.A.: {result.token_a} / {result.token_b}",
        "",
        result.chart,
        "",
        f"Recent ratios (last {RECENT_RATIOS}):",
    ]
    for point in result.points[-RECENT_RATIOS:]:
        lines.append(f"{format_time_label(point.timestamp_ms, result.interval)}: {point.ratio:.12f}")
    lines.append("")
    lines.append(f"Current ratio: {result.current_ratio:.12f}")
    return "\n".join(lines)


def main(
    argv: Sequence[str] | None = None,
    *,
    use_case_factory: Callable[[Settings], GetPriceRatioUseCase] = build_price_ratio_use_case,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        settings = resolve_settings(args)
    except (OSError, ValueError) as exc:
        print(f"Error loading config: {exc}", file=sys.stderr)
        return 1

    if not settings.has_dextools_key:
        logger.warning(
            "cli: dextools_key_missing fallback_to_current_prices=disabled "
            "hint='set DEXTOOLS_API_KEY or pass --api-key'"
        )

    use_case = use_case_factory(settings)
    try:
        result = use_case.execute(
            GetPriceRatioInput(
                token_a=args.token_a,
                token_b=args.token_b,
                interval=settings.interval,
                max_candles=settings.max_candles,
                weekly_resample_days=settings.weekly_resample_days,
                pool_limit=settings.pool_limit,
                chart_height=settings.chart_height,
            )
        )
    except DomainError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(format_report(result))
    if args.csv:
        try:
            path = write_ratio_csv(settings.csv_filename, result.points)
        except OSError as exc:
            print(f"Error saving CSV: {exc}", file=sys.stderr)
            return 1
        print(f"\nCSV saved as {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
