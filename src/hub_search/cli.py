import argparse
import sys

from structlog import get_logger

from hub_search.config.loader import (
    ConfigError,
    build_search_settings,
    load_settings,
    summarize_settings,
    validate_log_level,
)
from hub_search.observability.metrics import start_metrics_server
from hub_search.reporting import iter_text_lines, render_json
from hub_search.search.driver import SearchDriver
from hub_search.search.evaluator import DEFAULT_INT_BITS
from hub_search.search.expression_lang import parse_expression
from hub_search.utils.logging import configure_logging

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hub-search",
        description="Find the smallest expressions that build each hub number",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: search
    parser_search = subparsers.add_parser("search", help="Enumerate expressions and print the solution table")
    parser_search.add_argument("--max-number", type=int, help="Largest operand value (operands are 1..N)")
    parser_search.add_argument("--max-size", type=int, help="Largest number of operands per expression")
    parser_search.add_argument("--operations", type=str, help="Comma-separated subset of +,-,*,/ (default all)")
    parser_search.add_argument("--workers", type=int, help="Worker processes (default 1)")
    parser_search.add_argument("--chunk-size", type=int, help="Assignments per work unit")
    parser_search.add_argument("--int-bits", type=int, help="Signed integer width for overflow checks")
    parser_search.add_argument("--format", choices=("text", "json"), default="text", help="Output format")
    parser_search.add_argument("--show-missing", action="store_true", help="Print 'None' for unreachable values")
    parser_search.add_argument("--config", type=str, help="Path to a YAML settings file")
    parser_search.add_argument("--metrics-port", type=int, help="Expose Prometheus metrics on this port")
    parser_search.add_argument("--log-level", type=str, help="DEBUG, INFO, WARNING, ERROR")

    # Command: check
    parser_check = subparsers.add_parser("check", help="Evaluate one expression under the hub's integer rules")
    parser_check.add_argument("expression", help="Infix expression, e.g. '((2*6)-1)'")
    parser_check.add_argument("--int-bits", type=int, default=DEFAULT_INT_BITS)

    return parser


def cmd_search(args: argparse.Namespace) -> int:
    overrides = {
        "max_number": args.max_number,
        "max_size": args.max_size,
        "operations": args.operations,
        "workers": args.workers,
        "chunk_size": args.chunk_size,
        "int_bits": args.int_bits,
        "metrics_port": args.metrics_port,
        "log_level": args.log_level,
    }
    try:
        settings, _ = load_settings(overrides, path=args.config)
        configure_logging(validate_log_level(settings))
        search_settings = build_search_settings(settings)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    logger.info("Search settings", summary=summarize_settings(settings))
    if settings.get("metrics_port"):
        start_metrics_server(settings["metrics_port"])
        logger.info("Metrics server started", port=settings["metrics_port"])

    driver = SearchDriver(search_settings)
    try:
        result = driver.run()
    except KeyboardInterrupt:
        logger.warning("Search interrupted", sizes_done=len(driver.stats.sizes))
        return 130

    if args.format == "json":
        sys.stdout.write(render_json(result.solutions))
    else:
        for line in iter_text_lines(result.solutions, show_missing=args.show_missing):
            sys.stdout.write(line + "\n")
    logger.info(
        "Search complete",
        values=len(result.solutions),
        assignments=result.stats.assignments,
        accepted=result.stats.accepted,
        rejections=dict(result.stats.rejections),
    )
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    try:
        parsed = parse_expression(args.expression)
        outcome = parsed.evaluate_game(args.int_bits)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if outcome.accepted:
        print(f"value={outcome.value} size={parsed.size}")
        return 0
    print(f"rejected={outcome.reason.value}")
    return 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # search reconfigures once its settings name a level
    configure_logging(cache=args.command != "search")

    if args.command == "search":
        return cmd_search(args)
    elif args.command == "check":
        return cmd_check(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
