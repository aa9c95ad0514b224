import logging

from core.coverage_stats import Coverage

logger = logging.getLogger(__name__)


def calculate_coverage(coverage: Coverage) -> Coverage:
    """
    Derive per-endpoint and total coverage percentages.

    Recomputed from the stored observations on every call, so calling it
    repeatedly gives the same result.
    """
    coverage.expected_unique_hits = 0
    coverage.unique_hits = 0

    for endpoint in coverage.iter_endpoints():
        unique_hits = endpoint.observed_hits + (1 if endpoint.method_called else 0)

        # Traffic may touch more parameters than the contract declares,
        # coverage never goes above 100%
        if unique_hits > endpoint.expected_unique_hits:
            logger.debug(
                f"{endpoint.method.upper()} {endpoint.path}: {unique_hits} hits capped "
                f"at {endpoint.expected_unique_hits}"
            )
            unique_hits = endpoint.expected_unique_hits
        endpoint.unique_hits = unique_hits

        if endpoint.expected_unique_hits > 0:
            coverage.expected_unique_hits += endpoint.expected_unique_hits
            coverage.unique_hits += endpoint.unique_hits
            endpoint.percent = endpoint.unique_hits * 100 / endpoint.expected_unique_hits
        else:
            endpoint.percent = 0.0

    if coverage.expected_unique_hits > 0:
        coverage.percent = coverage.unique_hits * 100 / coverage.expected_unique_hits
    else:
        coverage.percent = 0.0

    return coverage
