import logging
from typing import Any, Dict, List, Optional

from jsonpointer import JsonPointer, JsonPointerException
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")


class Schema(BaseModel):
    """A Swagger schema object, reduced to what coverage needs."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ref: Optional[str] = Field(None, alias="$ref", description="Reference to a definition")
    type: Optional[str] = None
    description: Optional[str] = None
    properties: Dict[str, "Schema"] = Field(default_factory=dict)
    items: Optional["Schema"] = None

    @property
    def has_ref(self) -> bool:
        return bool(self.ref)

    def ref_tokens(self) -> Optional[List[str]]:
        """
        Decode the reference into JSON Pointer segments.

        Returns None when the schema has no reference and an empty list when
        the reference points outside this document or cannot be decoded.
        """
        if not self.ref:
            return None

        document, _, fragment = self.ref.partition("#")
        if document:
            return []
        try:
            return JsonPointer(fragment).parts
        except JsonPointerException as e:
            logger.debug(f"Cannot decode reference '{self.ref}': {e}")
            return []


Schema.model_rebuild()


class Parameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: Optional[str] = None
    location: Optional[str] = Field(None, alias="in", description="query, body, header, path or formData")
    ref: Optional[str] = Field(None, alias="$ref")
    schema_: Optional[Schema] = Field(None, alias="schema")
    required: bool = False
    type: Optional[str] = None
    description: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.location}#{self.name}"


class Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    operation_id: Optional[str] = Field(None, alias="operationId")
    summary: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    parameters: List[Parameter] = Field(default_factory=list)


class PathItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    parameters: List[Parameter] = Field(default_factory=list)

    def operations(self) -> Dict[str, Operation]:
        return {
            method: getattr(self, method)
            for method in HTTP_METHODS
            if getattr(self, method) is not None
        }


class SwaggerDocument(BaseModel):
    """In-memory object graph of a single Swagger 2.0 document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    swagger: Optional[str] = None
    info: Dict[str, Any] = Field(default_factory=dict)
    base_path: Optional[str] = Field(None, alias="basePath")
    paths: Dict[str, PathItem] = Field(default_factory=dict)
    definitions: Dict[str, Schema] = Field(default_factory=dict)
    parameters: Dict[str, Parameter] = Field(default_factory=dict)

    def operation_method_paths(self) -> List[str]:
        """Return every declared operation as a "METHOD PATH" string."""
        pairs = []
        for path, item in self.paths.items():
            for method in item.operations():
                pairs.append(f"{method.upper()} {path}")
        return pairs

    def params_for(self, method: str, path: str) -> Dict[str, Parameter]:
        """
        Effective parameters of one operation keyed by "<in>#<name>".

        Path-level parameters are inherited and overridden by operation-level
        parameters with the same key. Shared "#/parameters/..." references are
        resolved against this document.
        """
        item = self._find_path_item(method.lower(), path)
        if item is None:
            return {}
        operation = item.operations()[method.lower()]

        params: Dict[str, Parameter] = {}
        for param in list(item.parameters) + list(operation.parameters):
            resolved = self._resolve_parameter(param)
            if resolved is not None:
                params[resolved.key] = resolved
        return params

    def _find_path_item(self, method: str, path: str) -> Optional[PathItem]:
        """Path item declaring `method` at `path`, preferring an exact match over a case-insensitive one."""
        item = self.paths.get(path)
        if item is not None and method in item.operations():
            return item
        # Operation strings are lower-cased by the model builder
        for declared, item in self.paths.items():
            if declared.lower() == path.lower() and method in item.operations():
                return item
        return None

    def _resolve_parameter(self, param: Parameter) -> Optional[Parameter]:
        if not param.ref:
            return param

        document, _, fragment = param.ref.partition("#")
        try:
            tokens = JsonPointer(fragment).parts if not document else []
        except JsonPointerException:
            tokens = []

        if len(tokens) == 2 and tokens[0] == "parameters" and tokens[1] in self.parameters:
            return self.parameters[tokens[1]]

        logger.debug(f"Dropping unresolvable parameter reference '{param.ref}'")
        return None
