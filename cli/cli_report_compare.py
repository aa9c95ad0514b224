import json
from typing import Any, Dict, List, Tuple

import click
from colorama import Fore, Style, init
from tabulate import tabulate


def load_report(path: str) -> Dict[str, Any]:
    """Load a JSON coverage report; accepts both 'report --format json' and 'analyze' output."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return data.get("details", data)


def endpoint_percents(report: Dict[str, Any]) -> Dict[Tuple[str, str], float]:
    percents = {}
    for path, methods in report.get("endpoints", {}).items():
        for method, endpoint in methods.items():
            percents[(method, path)] = float(endpoint.get("percent", 0.0))
    return percents


def compare_coverage(base: Dict[str, Any], current: Dict[str, Any], threshold: float = 0.0) -> Dict[str, Any]:
    """
    Compare two coverage reports.

    Endpoints whose coverage changed by more than `threshold` points are listed
    as regressions or improvements; endpoints present on one side only are
    listed as added or removed.
    """
    base_percents = endpoint_percents(base)
    current_percents = endpoint_percents(current)

    regressions: List[Dict[str, Any]] = []
    improvements: List[Dict[str, Any]] = []
    for key in sorted(base_percents.keys() & current_percents.keys()):
        delta = current_percents[key] - base_percents[key]
        if abs(delta) <= threshold:
            continue
        row = {
            "method": key[0],
            "path": key[1],
            "base": base_percents[key],
            "current": current_percents[key],
            "delta": delta,
        }
        (regressions if delta < 0 else improvements).append(row)

    return {
        "base_percent": float(base.get("percent", 0.0)),
        "current_percent": float(current.get("percent", 0.0)),
        "delta": float(current.get("percent", 0.0)) - float(base.get("percent", 0.0)),
        "regressions": regressions,
        "improvements": improvements,
        "added": [f"{m.upper()} {p}" for m, p in sorted(current_percents.keys() - base_percents.keys())],
        "removed": [f"{m.upper()} {p}" for m, p in sorted(base_percents.keys() - current_percents.keys())],
    }


@click.command("compare")
@click.argument("base_report", type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True))
@click.argument("current_report", type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True))
@click.option("--threshold", "-t", type=float, default=0.0,
              help="Ignore per-endpoint changes up to this many percentage points")
@click.option("--include-improved/--only-regressions", default=True,
              help="Include improvements or only show regressions")
@click.option("--fail-on-regression", is_flag=True,
              help="Exit with status 1 when overall coverage decreased")
@click.option("--no-color", is_flag=True, help="Disable colored output")
def compare_reports(base_report, current_report, threshold, include_improved, fail_on_regression, no_color):
    """
    Compare two JSON coverage reports and highlight differences.

    BASE_REPORT: Path to the baseline report
    CURRENT_REPORT: Path to the newer report
    """
    use_color = not no_color
    if use_color:
        init()

    def colored(text, color):
        return f"{color}{text}{Style.RESET_ALL}" if use_color else text

    try:
        result = compare_coverage(load_report(base_report), load_report(current_report), threshold)
    except (json.JSONDecodeError, AttributeError) as e:
        raise click.ClickException(f"Invalid coverage report: {e}")

    delta = result["delta"]
    delta_color = Fore.GREEN if delta > 0 else Fore.RED if delta < 0 else Fore.WHITE
    click.echo(tabulate([
        ["Base Coverage", f"{result['base_percent']:.1f}%"],
        ["Current Coverage", f"{result['current_percent']:.1f}%"],
        ["Change", colored(f"{delta:+.1f}", delta_color)],
    ], tablefmt="simple", disable_numparse=True))

    rows = [
        [colored("REGRESSED", Fore.RED), r["method"].upper(), r["path"], f"{r['base']:.1f}%", f"{r['current']:.1f}%"]
        for r in result["regressions"]
    ]
    if include_improved:
        rows += [
            [colored("IMPROVED", Fore.GREEN), r["method"].upper(), r["path"], f"{r['base']:.1f}%", f"{r['current']:.1f}%"]
            for r in result["improvements"]
        ]
    if rows:
        click.echo("")
        click.echo(tabulate(rows, headers=["Change", "Method", "Endpoint", "Base", "Current"], tablefmt="grid"))

    for label, items in (("Added endpoints", result["added"]), ("Removed endpoints", result["removed"])):
        if items:
            click.echo(f"\n{label}:")
            for item in items:
                click.echo(f"  - {item}")

    if fail_on_regression and delta < 0:
        click.get_current_context().exit(1)
