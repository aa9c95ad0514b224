from jinja2 import Environment, select_autoescape

from core.coverage_stats import Coverage
from report.endpoint_coverage_section import EndpointCoverageSection

REPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{{ title }}</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 40px; background-color: #f7f7f7; color: #333; }
        h1, h2, h3 { color: #2c3e50; }
        table { width: 100%; border-collapse: collapse; margin-bottom: 30px; }
        th, td { border: 1px solid #ccc; padding: 10px; text-align: left; }
        th { background-color: #eee; }
        .section { margin-bottom: 50px; }
        .good { color: #27ae60; font-weight: bold; }
        .fair { color: #d35400; font-weight: bold; }
        .poor { color: #c0392b; font-weight: bold; }
    </style>
</head>
<body>
<h1>{{ title }}</h1>
<p><strong>Overall Coverage:</strong>
   <span class="{{ grade(coverage.percent) }}">{{ "%.1f"|format(coverage.percent) }}%</span>
   ({{ coverage.unique_hits }}/{{ coverage.expected_unique_hits }} units)</p>

<div class="section" id="endpoints">
<h2>Endpoints</h2>
<table>
<thead><tr><th>Method</th><th>Endpoint</th><th>Hits</th><th>Coverage %</th><th>Calls</th></tr></thead>
<tbody>
{% for e in endpoints %}
<tr>
  <td>{{ e.method|upper }}</td>
  <td><code>{{ e.path }}</code></td>
  <td>{{ e.unique_hits }}/{{ e.expected_unique_hits }}</td>
  <td class="{{ grade(e.percent) }}">{{ "%.1f"|format(e.percent) }}%</td>
  <td>{{ e.calls }}</td>
</tr>
{% endfor %}
</tbody>
</table>
</div>

{% if params %}
<div class="section" id="parameters">
<h2>Parameter Hits</h2>
<table>
<thead><tr><th>Method</th><th>Endpoint</th><th>Location</th><th>Parameter</th><th>Hits</th></tr></thead>
<tbody>
{% for row in params %}
<tr class="{{ 'good' if row.hits else 'poor' }}">
  <td>{{ row.method }}</td><td><code>{{ row.path }}</code></td><td>{{ row.location }}</td>
  <td><code>{{ row.name }}</code></td><td>{{ row.hits }}</td>
</tr>
{% endfor %}
</tbody>
</table>
</div>
{% endif %}
</body>
</html>
"""


def grade(percent: float) -> str:
    if percent >= 80:
        return "good"
    if percent >= 50:
        return "fair"
    return "poor"


class HtmlReportGenerator:
    def __init__(self, coverage: Coverage, title: str = "REST API Coverage Report"):
        """
        :param coverage: Aggregated coverage to render
        :param title: Page title
        """
        self.coverage = coverage
        self.title = title
        self.env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))

    def generate(self) -> str:
        section = EndpointCoverageSection(self.coverage)
        template = self.env.from_string(REPORT_TEMPLATE)
        return template.render(
            title=self.title,
            coverage=self.coverage,
            endpoints=section.endpoints,
            params=section.param_rows(),
            grade=grade,
        )
