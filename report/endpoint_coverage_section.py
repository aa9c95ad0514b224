from html import escape
from typing import Dict, List

from core.coverage_stats import Coverage
from report.report_section import ReportSection


class EndpointCoverageSection(ReportSection):
    """Per-endpoint and per-parameter coverage of an aggregated Coverage."""

    def __init__(self, coverage: Coverage):
        super().__init__(
            coverage,
            title="REST API Coverage",
            description="Contract units exercised by observed calls",
        )

    def to_markdown(self) -> str:
        md = f"## {self.title}\n\n{self.description}\n\n"
        md += f"**Overall Coverage: {self.summary_line()}**\n\n"

        if self.untested_endpoints:
            md += "### ⚠️ Untested Endpoints\n\n"
            for endpoint in self.untested_endpoints:
                md += f"- `{endpoint.method.upper()} {endpoint.path}`\n"
            md += "\n"

        md += "### Endpoint Coverage Details\n\n"
        md += "| Method | Endpoint | Hits | Coverage % | Calls |\n"
        md += "|--------|----------|------|------------|-------|\n"
        for e in self.endpoints:
            md += (
                f"| {e.method.upper()} | `{e.path}` | {e.unique_hits}/{e.expected_unique_hits} "
                f"| {e.percent:.1f}% | {e.calls} |\n"
            )

        param_rows = self.param_rows()
        if param_rows:
            md += "\n### Parameter Hits\n\n"
            md += "| Method | Endpoint | Location | Parameter | Hits |\n"
            md += "|--------|----------|----------|-----------|------|\n"
            for row in param_rows:
                md += f"| {row['method']} | `{row['path']}` | {row['location']} | `{row['name']}` | {row['hits']} |\n"

        return md

    def to_html(self) -> str:
        html = f"<section class='coverage-section'><h2>{self.title}</h2><p>{self.description}</p>"
        html += f"<p><strong>Overall Coverage:</strong> {escape(self.summary_line())}</p>"

        if self.untested_endpoints:
            html += "<h3>⚠️ Untested Endpoints</h3><ul>"
            for endpoint in self.untested_endpoints:
                html += f"<li><code>{endpoint.method.upper()} {escape(endpoint.path)}</code></li>"
            html += "</ul>"

        html += (
            "<h3>Endpoint Coverage Details</h3><table><thead><tr><th>Method</th><th>Endpoint</th>"
            "<th>Hits</th><th>Coverage %</th><th>Calls</th></tr></thead><tbody>"
        )
        for e in self.endpoints:
            html += (
                f"<tr><td>{e.method.upper()}</td><td><code>{escape(e.path)}</code></td>"
                f"<td>{e.unique_hits}/{e.expected_unique_hits}</td><td>{e.percent:.1f}%</td><td>{e.calls}</td></tr>"
            )
        html += "</tbody></table></section>"
        return html

    def to_json(self) -> Dict:
        return {
            "title": self.title,
            "description": self.description,
            "summary": {
                "percent": self.coverage.percent,
                "uniqueHits": self.coverage.unique_hits,
                "expectedUniqueHits": self.coverage.expected_unique_hits,
                "untested": [f"{e.method.upper()} {e.path}" for e in self.untested_endpoints],
                "partial": [f"{e.method.upper()} {e.path}" for e in self.partially_tested],
            },
            "details": self.coverage.to_dict(),
        }

    def to_csv(self) -> str:
        csv = "Method,Endpoint,Unique Hits,Expected Hits,Coverage %,Calls\n"
        for e in self.endpoints:
            csv += f"{e.method.upper()},{e.path},{e.unique_hits},{e.expected_unique_hits},{e.percent:.1f},{e.calls}\n"
        return csv

    def param_rows(self) -> List[Dict]:
        rows = []
        for e in self.endpoints:
            details = e.params_hits_details
            for location, counters in (("query", details.query), ("body", details.body)):
                for name, hits in sorted(counters.items()):
                    rows.append({
                        "method": e.method.upper(),
                        "path": e.path,
                        "location": location,
                        "name": name,
                        "hits": hits,
                    })
        return rows
