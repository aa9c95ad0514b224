import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from contract.swagger_document import SwaggerDocument

logger = logging.getLogger(__name__)


class SwaggerLoadError(Exception):
    """Raised when a contract document cannot be loaded."""

    def __init__(self, message: str, file_path: Optional[str] = None, details: Optional[Any] = None):
        self.message = message
        self.file_path = file_path
        self.details = details
        full_message = f"{message}"
        if file_path:
            full_message += f" [File: {file_path}]"
        if details:
            full_message += f"\nDetails:\n{details}"
        super().__init__(full_message)


class SwaggerLoader:
    """Loads Swagger documents from YAML/JSON files or dictionaries."""

    @staticmethod
    def load_from_file(file_path: Union[str, Path]) -> SwaggerDocument:
        file_path = Path(file_path)
        if not file_path.exists():
            raise SwaggerLoadError("Contract file not found", str(file_path))

        try:
            with file_path.open("r", encoding="utf-8") as f:
                # JSON is a subset of YAML, so one parser covers both
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SwaggerLoadError("Failed to parse contract document", str(file_path), e)
        except OSError as e:
            raise SwaggerLoadError("Failed to read contract file", str(file_path), e)

        document = SwaggerLoader.load_from_dict(content, file_path)
        logger.info(f"Loaded contract with {len(document.paths)} paths from {file_path}")
        return document

    @staticmethod
    def load_from_dict(data: Dict[str, Any], source: Optional[Union[str, Path]] = None) -> SwaggerDocument:
        source_str = str(source) if source else "dictionary"

        if not isinstance(data, dict):
            raise SwaggerLoadError("Contract document must be a mapping", source_str)

        try:
            return SwaggerDocument.model_validate(data)
        except ValidationError as e:
            raise SwaggerLoadError(
                f"Contract document is malformed ({e.error_count()} error(s))",
                source_str,
                str(e),
            )
