"""
Builds the expected-coverage skeleton of an API contract.

Every operation becomes an Endpoint worth one unit for being called, plus one
unit per declared query parameter and one unit per leaf field of its request
body. Body fields are discovered by following local "#/definitions/..."
references down to their leaves.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Union

from contract.swagger_document import Parameter, Schema, SwaggerDocument
from core.coverage_stats import Coverage, Endpoint
from core.exceptions import InvalidOperationFormat

logger = logging.getLogger(__name__)

DEFINITIONS_MARKER = "definitions"


@dataclass(frozen=True)
class Resolved:
    """Reference resolved into `count` leaf units."""
    count: int

    @property
    def units(self) -> int:
        return self.count


@dataclass(frozen=True)
class Unsupported:
    """Reference that cannot be followed; contributes no units."""
    reason: str

    @property
    def units(self) -> int:
        return 0


RefResolution = Union[Resolved, Unsupported]


def analyze_swagger(document: SwaggerDocument, path_filter: str = "") -> Coverage:
    """
    Initialize a Coverage structure with the expected units of every endpoint.

    Args:
        document: Parsed contract
        path_filter: Only paths starting with this prefix (after lower-casing) are kept

    Returns:
        Coverage skeleton with all hit counters at zero

    Raises:
        InvalidOperationFormat: An operation is not a "METHOD PATH" pair
    """
    coverage = Coverage()

    for operation in document.operation_method_paths():
        tokens = operation.split(" ")
        if len(tokens) != 2:
            raise InvalidOperationFormat(operation)
        method, path = tokens[0].lower(), tokens[1].lower()

        if not path.startswith(path_filter):
            logger.debug(f"Skipping {method.upper()} {path}: outside of filter '{path_filter}'")
            continue

        methods = coverage.endpoints.setdefault(path, {})
        if method in methods:
            continue

        endpoint = Endpoint(path=path, method=method)
        methods[method] = endpoint
        add_swagger_params(endpoint, document.params_for(method, path), document.definitions)

    logger.info(
        f"Built coverage model: {sum(len(m) for m in coverage.endpoints.values())} endpoints, "
        f"{sum(e.expected_unique_hits for e in coverage.iter_endpoints())} expected units"
    )
    return coverage


def add_swagger_params(endpoint: Endpoint, params: Dict[str, Parameter], definitions: Dict[str, Schema]) -> None:
    """Register the query and body units of one operation on its endpoint."""
    for param in params.values():
        if param.location == "body":
            if param.schema_ is not None:
                result = resolve_schema_units(
                    param.schema_, definitions, param.name, endpoint.params_hits_details.body
                )
                if isinstance(result, Unsupported):
                    logger.debug(
                        f"{endpoint.method.upper()} {endpoint.path}: body '{param.name}' not counted ({result.reason})"
                    )
                endpoint.expected_unique_hits += result.units
            else:
                endpoint.params_hits_details.body[param.name] = 0
                endpoint.expected_unique_hits += 1
        elif param.location == "query":
            endpoint.params_hits_details.query[param.name] = 0
            endpoint.expected_unique_hits += 1


def resolve_schema_units(
    schema: Schema,
    definitions: Dict[str, Schema],
    param_path: str,
    params: Dict[str, int],
    visiting: FrozenSet[str] = frozenset(),
) -> RefResolution:
    """
    Register the leaf units reachable from `schema` under `param_path`.

    Only references into this document's definitions are followed. A
    definition already being expanded on the current path is counted as a
    single leaf so self-referencing models terminate.
    """
    tokens = schema.ref_tokens()
    if tokens is None:
        params[param_path] = 0
        return Resolved(1)

    if len(tokens) < 2:
        return Unsupported(f"unsupported reference '{schema.ref}'")

    ref_type, ref_name = tokens[0], tokens[1]
    if ref_type != DEFINITIONS_MARKER:
        return Unsupported(f"reference '{schema.ref}' is not a definition")

    definition = definitions.get(ref_name)
    if definition is None:
        return Unsupported(f"definition '{ref_name}' not found")

    if ref_name in visiting or not definition.properties:
        params[param_path] = 0
        return Resolved(1)

    count = 0
    for name, prop in definition.properties.items():
        result = resolve_schema_units(prop, definitions, f"{param_path}.{name}", params, visiting | {ref_name})
        if isinstance(result, Unsupported):
            logger.debug(f"Property '{param_path}.{name}' not counted ({result.reason})")
        count += result.units

    return Resolved(count)
