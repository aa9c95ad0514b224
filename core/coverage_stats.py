from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Set


@dataclass
class ParamsHitsDetails:
    """Hit counters per declared query parameter and body leaf field."""
    query: Dict[str, int] = field(default_factory=dict)
    body: Dict[str, int] = field(default_factory=dict)


@dataclass
class Endpoint:
    """Coverage units of one (path, method) pair."""
    path: str
    method: str
    expected_unique_hits: int = 1  # the invocation itself
    observed_hits: int = 0  # distinct parameter units seen in traffic, uncapped
    unique_hits: int = 0  # derived by calculate_coverage
    method_called: bool = False
    calls: int = 0
    params_hits_details: ParamsHitsDetails = field(default_factory=ParamsHitsDetails)
    extra_params: Set[str] = field(default_factory=set)
    percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "method": self.method,
            "expectedUniqueHits": self.expected_unique_hits,
            "uniqueHits": self.unique_hits,
            "methodCalled": self.method_called,
            "calls": self.calls,
            "percent": self.percent,
            "paramsHitsDetails": {
                "query": dict(self.params_hits_details.query),
                "body": dict(self.params_hits_details.body),
            },
            "extraParams": sorted(self.extra_params),
        }


@dataclass
class Coverage:
    """Root aggregate of one coverage run."""
    endpoints: Dict[str, Dict[str, Endpoint]] = field(default_factory=dict)
    expected_unique_hits: int = 0
    unique_hits: int = 0
    percent: float = 0.0

    def get_endpoint(self, method: str, path: str) -> Optional[Endpoint]:
        return self.endpoints.get(path.lower(), {}).get(method.lower())

    def iter_endpoints(self) -> Iterator[Endpoint]:
        for methods in self.endpoints.values():
            yield from methods.values()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expectedUniqueHits": self.expected_unique_hits,
            "uniqueHits": self.unique_hits,
            "percent": self.percent,
            "endpoints": {
                path: {method: endpoint.to_dict() for method, endpoint in methods.items()}
                for path, methods in self.endpoints.items()
            },
        }
