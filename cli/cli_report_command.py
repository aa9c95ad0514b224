import json
import logging
from pathlib import Path

from cli.cli_exit_codes import EXIT_ERROR, exit_code_for
from cli.cli_logging import setup_logging
from contract.swagger_loader import SwaggerLoader, SwaggerLoadError
from core.config import load_config
from core.coverage_stats import Coverage
from core.exceptions import ConfigError, InvalidOperationFormat, ObservationLogError
from core.hit_recorder import HitRecorder
from core.model_builder import analyze_swagger
from core.observation_log import load_observation_log
from report.endpoint_coverage_section import EndpointCoverageSection
from report.html_report_generator import HtmlReportGenerator
from report.terminal_report import render_terminal

logger = logging.getLogger(__name__)


def render_report(coverage: Coverage, report_format: str, use_color: bool = True) -> str:
    """Render an aggregated coverage in one of the supported formats."""
    if report_format == "terminal":
        return render_terminal(coverage, use_color=use_color)
    if report_format == "html":
        return HtmlReportGenerator(coverage).generate()

    rendered = EndpointCoverageSection(coverage).render(report_format)
    if report_format == "json":
        return json.dumps(rendered, indent=2, sort_keys=True)
    return rendered


def handle_report_command(args) -> int:
    """
    Handles the 'report' command: replays observation logs against a contract
    and renders the resulting coverage.
    """
    setup_logging(args.verbose)

    try:
        config = load_config(args.config, overrides={
            "filter": args.filter,
            "format": args.format,
            "fail_under": args.fail_under,
            "output": args.output,
            "color": False if args.no_color else None,
        })
        document = SwaggerLoader.load_from_file(args.contract)
        recorder = HitRecorder(analyze_swagger(document, config.filter))
        for log_path in args.log:
            load_observation_log(log_path, recorder)
    except (ConfigError, SwaggerLoadError, ObservationLogError, InvalidOperationFormat) as e:
        logger.error(f"❌ Coverage report failed: {e}")
        print(f"\n❌ Coverage report failed: {getattr(e, 'message', e)}")
        return EXIT_ERROR

    coverage = recorder.snapshot()
    output = render_report(coverage, config.format, use_color=config.color and not config.output)

    if config.output:
        Path(config.output).write_text(output, encoding="utf-8")
        print(f"✅ {config.format} report written to {config.output}")
    else:
        print(output)

    if recorder.unmatched_calls:
        logger.warning(f"⚠️ {recorder.unmatched_calls} observed call(s) did not match any endpoint")

    exit_code = exit_code_for(coverage.percent, config.fail_under)
    if exit_code != 0:
        print(f"\n❌ Coverage {coverage.percent:.1f}% is below the required {config.fail_under:.1f}%")
    return exit_code
