from abc import ABC, abstractmethod
from typing import Dict, List

from core.coverage_stats import Coverage, Endpoint


def sorted_endpoints(coverage: Coverage) -> List[Endpoint]:
    return sorted(coverage.iter_endpoints(), key=lambda e: (e.path, e.method))


class ReportSection(ABC):
    """
    A view over an aggregated Coverage with one renderer per output format.

    The endpoint lists are computed once; renderers only format them.
    """

    formats = ("markdown", "json", "html", "csv")

    def __init__(self, coverage: Coverage, title: str, description: str):
        self.coverage = coverage
        self.title = title
        self.description = description
        self.endpoints = sorted_endpoints(coverage)
        self.untested_endpoints = [e for e in self.endpoints if not e.method_called]
        self.partially_tested = [e for e in self.endpoints if e.method_called and e.percent < 100]

    def summary_line(self) -> str:
        called = len(self.endpoints) - len(self.untested_endpoints)
        return (
            f"{self.coverage.percent:.1f}% ({self.coverage.unique_hits}/{self.coverage.expected_unique_hits} units, "
            f"{called}/{len(self.endpoints)} endpoints called)"
        )

    def render(self, report_format: str):
        if report_format not in self.formats:
            raise ValueError(f"Unsupported report format: {report_format}")
        return getattr(self, f"to_{report_format}")()

    @abstractmethod
    def to_markdown(self) -> str:
        """Render this section in Markdown format."""

    @abstractmethod
    def to_json(self) -> Dict:
        """Render this section as a JSON-serializable dict."""

    @abstractmethod
    def to_html(self) -> str:
        pass

    @abstractmethod
    def to_csv(self) -> str:
        pass
