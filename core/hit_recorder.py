import copy
import logging
import re
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union
from urllib.parse import parse_qs, urlsplit

from core.coverage_calculator import calculate_coverage
from core.coverage_stats import Coverage, Endpoint

logger = logging.getLogger(__name__)

DEFAULT_BODY_ROOT = "body"
PATH_PARAM = re.compile(r"{[^{}/]+}")

QueryInput = Union[Mapping[str, Any], Iterable[str], None]


class HitRecorder:
    """
    Records observed API calls into a Coverage model.

    All writes go through a single lock, so one recorder can be shared by
    concurrently running test clients or request handlers.
    """

    def __init__(self, coverage: Coverage):
        self.coverage = coverage
        self.unmatched_calls = 0
        self._lock = threading.Lock()
        self._static: Dict[str, Dict[str, Endpoint]] = {}
        self._templates: List[Tuple[re.Pattern, Tuple[int, int], Dict[str, Endpoint]]] = []
        self._compile_routes()

    def _compile_routes(self) -> None:
        for path, methods in self.coverage.endpoints.items():
            key = _normalize_path(path)
            if "{" not in key:
                static = self._static.setdefault(key, {})
                for method, endpoint in methods.items():
                    static.setdefault(method, endpoint)
                continue
            segments = key.split("/")
            pattern_str = "/".join(_segment_pattern(segment) for segment in segments)
            # More literal segments, then more literal characters, is more specific
            specificity = (
                sum(1 for segment in segments if segment and not PATH_PARAM.search(segment)),
                len(PATH_PARAM.sub("", key)),
            )
            self._templates.append((re.compile(f"^{pattern_str}$"), specificity, methods))

        self._templates.sort(key=lambda t: t[1], reverse=True)

    def match(self, method: str, path: str) -> Optional[Endpoint]:
        """Find the endpoint a concrete request path belongs to."""
        method, path = method.lower(), _normalize_path(path.lower())

        methods = self._static.get(path)
        if methods and method in methods:
            return methods[method]

        for pattern, _, methods in self._templates:
            if method in methods and pattern.match(path):
                return methods[method]
        return None

    def record_call(
        self,
        method: str,
        url: str,
        body: Any = None,
        query: QueryInput = None,
    ) -> Optional[Endpoint]:
        """
        Record one observed call.

        Args:
            method: HTTP method
            url: Request path, optionally with a query string
            body: Decoded JSON request body, if any
            query: Extra query parameters (query string, mapping or iterable of names)

        Returns:
            The matched endpoint, or None when the call is not in the model
        """
        parts = urlsplit(url)
        query_names = set(parse_qs(parts.query, keep_blank_values=True))
        if isinstance(query, str):
            query_names.update(parse_qs(query, keep_blank_values=True))
        elif isinstance(query, Mapping):
            query_names.update(query.keys())
        elif query:
            query_names.update(query)

        with self._lock:
            endpoint = self.match(method, parts.path or "/")
            if endpoint is None:
                self.unmatched_calls += 1
                logger.debug(f"No endpoint for {method.upper()} {parts.path}")
                return None

            endpoint.method_called = True
            endpoint.calls += 1
            self._record_query(endpoint, query_names)
            if body is not None:
                self._record_body(endpoint, body)
            return endpoint

    def snapshot(self) -> Coverage:
        """Return an aggregated copy of the current coverage."""
        with self._lock:
            coverage = copy.deepcopy(self.coverage)
        return calculate_coverage(coverage)

    def _record_query(self, endpoint: Endpoint, names: Set[str]) -> None:
        declared = endpoint.params_hits_details.query
        for name in names:
            if name in declared:
                self._hit(endpoint, declared, name)
            else:
                self._extra(endpoint, f"query:{name}")

    def _record_body(self, endpoint: Endpoint, body: Any) -> None:
        declared = endpoint.params_hits_details.body
        roots = {key.split(".", 1)[0] for key in declared} or {DEFAULT_BODY_ROOT}

        for root in roots:
            paths: Set[str] = {root}
            leaves: Set[str] = set()
            _collect_body_paths(body, root, paths, leaves)

            for path in paths:
                if path in declared:
                    self._hit(endpoint, declared, path)

            for leaf in leaves:
                if leaf in declared or any(key.startswith(leaf + ".") for key in declared):
                    continue
                if any(leaf.startswith(key + ".") for key in declared):
                    continue
                self._extra(endpoint, f"body:{leaf}")

    @staticmethod
    def _hit(endpoint: Endpoint, counters: Dict[str, int], key: str) -> None:
        if counters[key] == 0:
            endpoint.observed_hits += 1
        counters[key] += 1

    @staticmethod
    def _extra(endpoint: Endpoint, name: str) -> None:
        if name not in endpoint.extra_params:
            endpoint.extra_params.add(name)
            endpoint.observed_hits += 1


def _collect_body_paths(value: Any, prefix: str, paths: Set[str], leaves: Set[str]) -> None:
    """Flatten a JSON body into dotted field paths; list items share their parent's path."""
    if isinstance(value, dict) and value:
        for key, child in value.items():
            path = f"{prefix}.{key}"
            paths.add(path)
            _collect_body_paths(child, path, paths, leaves)
    elif isinstance(value, list) and any(isinstance(item, dict) for item in value):
        for item in value:
            _collect_body_paths(item, prefix, paths, leaves)
    else:
        leaves.add(prefix)


def _normalize_path(path: str) -> str:
    if len(path) > 1:
        return path.rstrip("/") or "/"
    return path


def _segment_pattern(segment: str) -> str:
    """Regex for one path segment; each {param} matches any run of non-slash characters."""
    literals = PATH_PARAM.split(segment)
    return "[^/]+".join(re.escape(literal) for literal in literals)
