import json
import logging
from pathlib import Path

from cli.cli_exit_codes import EXIT_ERROR, EXIT_OK
from cli.cli_logging import setup_logging
from contract.swagger_loader import SwaggerLoader, SwaggerLoadError
from core.coverage_calculator import calculate_coverage
from core.exceptions import InvalidOperationFormat
from core.model_builder import analyze_swagger

logger = logging.getLogger(__name__)


def handle_analyze_command(args) -> int:
    """
    Handles the 'analyze' command: prints the expected coverage units of a contract.
    """
    setup_logging(args.verbose)

    try:
        document = SwaggerLoader.load_from_file(args.contract)
        coverage = calculate_coverage(analyze_swagger(document, args.filter.lower()))
    except SwaggerLoadError as e:
        logger.error(f"❌ Failed to load contract: {e}")
        print(f"\n❌ Could not load contract: {e.message}")
        return EXIT_ERROR
    except InvalidOperationFormat as e:
        logger.error(f"❌ {e}")
        print(f"\n❌ {e}")
        return EXIT_ERROR

    output = json.dumps(coverage.to_dict(), indent=2, sort_keys=True)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"✅ Coverage model written to {args.output}")
    else:
        print(output)
    return EXIT_OK
