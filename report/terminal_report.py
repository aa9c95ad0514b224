from colorama import Fore, Style
from tabulate import tabulate

from core.coverage_stats import Coverage
from report.report_section import sorted_endpoints


def render_terminal(coverage: Coverage, use_color: bool = True) -> str:
    """Render an aggregated coverage as terminal tables."""
    lines = []

    def colored(text, color):
        return f"{color}{text}{Style.RESET_ALL}" if use_color else text

    def percent_cell(percent: float) -> str:
        if percent >= 80:
            color = Fore.GREEN
        elif percent >= 50:
            color = Fore.YELLOW
        else:
            color = Fore.RED
        return colored(f"{percent:.1f}%", color)

    lines.append(colored("## REST API Coverage", Fore.CYAN))
    lines.append("")

    rows = []
    for e in sorted_endpoints(coverage):
        rows.append([
            e.method.upper(),
            e.path,
            f"{e.unique_hits}/{e.expected_unique_hits}",
            percent_cell(e.percent),
            e.calls,
        ])

    if rows:
        lines.append(tabulate(rows, headers=["Method", "Endpoint", "Hits", "Coverage", "Calls"], tablefmt="simple"))
        lines.append("")

    summary_table = [
        ["Endpoints", str(sum(1 for _ in coverage.iter_endpoints()))],
        ["Unique Hits", f"{coverage.unique_hits}/{coverage.expected_unique_hits}"],
        ["Total Coverage", percent_cell(coverage.percent)],
    ]
    lines.append(tabulate(summary_table, tablefmt="simple"))
    return "\n".join(lines)
