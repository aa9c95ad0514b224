import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.exceptions import ObservationLogError
from core.hit_recorder import HitRecorder

logger = logging.getLogger(__name__)

# Kubernetes audit verbs -> HTTP methods
AUDIT_VERB_METHODS = {
    "get": "get",
    "list": "get",
    "watch": "get",
    "create": "post",
    "update": "put",
    "patch": "patch",
    "delete": "delete",
    "deletecollection": "delete",
}


@dataclass
class ObservationStats:
    processed: int = 0
    skipped: int = 0
    unmatched: int = 0


def parse_observation(entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Normalize one log entry into method/url/body/query.

    Kubernetes audit events (verb, requestURI, requestObject) are accepted as
    well as plain {"method", "url"} records.
    """
    method = entry.get("method")
    if method is None and isinstance(entry.get("verb"), str):
        method = AUDIT_VERB_METHODS.get(entry["verb"].lower(), entry["verb"])
    url = entry.get("url") or entry.get("path") or entry.get("requestURI")
    if not isinstance(method, str) or not isinstance(url, str):
        return None

    query = entry.get("query")
    if not _valid_query(query):
        return None

    body = entry["body"] if "body" in entry else entry.get("requestObject")
    return {"method": method, "url": url, "body": body, "query": query}


def _valid_query(query: Any) -> bool:
    # a query string, a name -> value mapping or a list of names
    if query is None or isinstance(query, (str, dict)):
        return True
    return isinstance(query, list) and all(isinstance(name, str) for name in query)


def load_observation_log(log_path: Union[str, Path], recorder: HitRecorder) -> ObservationStats:
    """
    Replay a line-delimited JSON log of observed calls into `recorder`.

    Malformed lines and entries without a method or url are skipped.
    """
    log_path = Path(log_path)
    if not log_path.is_file():
        raise ObservationLogError("Observation log not found", str(log_path))

    stats = ObservationStats()
    try:
        with log_path.open("r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed line {line_no} in {log_path}")
                    stats.skipped += 1
                    continue

                observation = parse_observation(entry) if isinstance(entry, dict) else None
                if observation is None:
                    logger.warning(f"Skipping line {line_no} in {log_path}: missing method or url, or invalid query")
                    stats.skipped += 1
                    continue

                if recorder.record_call(**observation) is None:
                    stats.unmatched += 1
                stats.processed += 1
    except OSError as e:
        raise ObservationLogError("Failed to read observation log", str(log_path), e)

    logger.info(
        f"Replayed {stats.processed} calls from {log_path} "
        f"({stats.unmatched} unmatched, {stats.skipped} skipped)"
    )
    return stats
