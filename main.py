import argparse
import sys
from typing import List, Optional

from cli.cli_analyze_command import handle_analyze_command
from cli.cli_report_command import handle_report_command
from core.config import REPORT_FORMATS


# --- CLI Setup ---
def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="restcov",
        description="📊 restcov: REST API test coverage from a Swagger contract",
        epilog="""Examples:
  restcov analyze swagger.yaml --filter /api/v1
  restcov report swagger.yaml --log calls.jsonl --format html --output coverage.html
  restcov report swagger.yaml --log audit.log --fail-under 80
  restcov-compare base.json current.json --only-regressions""",
        formatter_class=argparse.RawTextHelpFormatter
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="Available Commands",
        metavar="{analyze, report}"
    )

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Print the expected coverage units of a contract")
    analyze_parser.add_argument("contract", type=str, help="Path to the Swagger contract (YAML or JSON)")
    analyze_parser.add_argument("--filter", type=str, default="", help="Only include paths with this prefix")
    analyze_parser.add_argument("--output", type=str, help="Write the model to this file instead of stdout")
    analyze_parser.add_argument("--verbose", "-v", action="store_true")
    analyze_parser.set_defaults(func=handle_analyze_command)

    # report
    report_parser = subparsers.add_parser("report", help="Compute coverage from observed calls")
    report_parser.add_argument("contract", type=str, help="Path to the Swagger contract (YAML or JSON)")
    report_parser.add_argument("--log", action="append", required=True,
                               help="Line-delimited JSON log of observed calls (repeatable)")
    report_parser.add_argument("--filter", type=str, help="Only include paths with this prefix")
    report_parser.add_argument("--format", choices=REPORT_FORMATS)
    report_parser.add_argument("--output", type=str)
    report_parser.add_argument("--fail-under", type=float, help="Fail when total coverage is below this percentage")
    report_parser.add_argument("--no-color", action="store_true")
    report_parser.add_argument("--config", type=str, help="YAML config file (default: .restcov.yaml if present)")
    report_parser.add_argument("--verbose", "-v", action="store_true")
    report_parser.set_defaults(func=handle_report_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
