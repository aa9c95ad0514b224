import pytest

from contract.swagger_document import Schema
from contract.swagger_loader import SwaggerLoader
from core.exceptions import InvalidOperationFormat
from core.model_builder import Resolved, Unsupported, analyze_swagger, resolve_schema_units


def build(paths, definitions=None, path_filter="", **extra):
    document = SwaggerLoader.load_from_dict({
        "swagger": "2.0",
        "paths": paths,
        "definitions": definitions or {},
        **extra,
    })
    return analyze_swagger(document, path_filter)


def body_post(schema=None, name="body"):
    param = {"name": name, "in": "body"}
    if schema is not None:
        param["schema"] = schema
    return {"post": {"parameters": [param]}}


class StubDocument:
    """Minimal document exposing only operation strings."""

    def __init__(self, operations):
        self._operations = operations
        self.definitions = {}

    def operation_method_paths(self):
        return self._operations

    def params_for(self, method, path):
        return {}


def test_widgets_model(widgets_document):
    coverage = analyze_swagger(widgets_document)

    get = coverage.endpoints["/widgets"]["get"]
    post = coverage.endpoints["/widgets"]["post"]

    assert get.expected_unique_hits == 1
    assert post.expected_unique_hits == 4
    assert post.params_hits_details.query == {"limit": 0}
    assert post.params_hits_details.body == {"body.name": 0, "body.size": 0}
    assert post.unique_hits == 0
    assert not post.method_called


def test_method_and_path_are_lower_cased():
    coverage = build({"/API/Widgets": {"get": {}}})

    assert "/api/widgets" in coverage.endpoints
    assert coverage.get_endpoint("GET", "/API/Widgets").method == "get"


def test_filter_drops_paths_before_accounting():
    coverage = build({
        "/api/v1/widgets": {"get": {"parameters": [{"name": "q", "in": "query"}]}},
        "/admin/users": {"get": {"parameters": [{"name": "q", "in": "query"}]}},
    }, path_filter="/api")

    assert list(coverage.endpoints) == ["/api/v1/widgets"]
    assert sum(e.expected_unique_hits for e in coverage.iter_endpoints()) == 2


def test_same_path_multiple_methods_are_independent():
    coverage = build({"/widgets": {"get": {}, "delete": {}, "put": {}}})

    assert sorted(coverage.endpoints["/widgets"]) == ["delete", "get", "put"]
    assert all(e.expected_unique_hits == 1 for e in coverage.iter_endpoints())


def test_every_endpoint_counts_its_invocation():
    coverage = build({
        "/a": {"get": {}},
        "/b": {"post": {"parameters": [{"name": "X-Trace", "in": "header"}]}},
        "/c/{id}": {"get": {"parameters": [{"name": "id", "in": "path", "required": True}]}},
    })

    assert [e.expected_unique_hits for e in coverage.iter_endpoints()] == [1, 1, 1]


def test_header_path_and_form_parameters_are_ignored():
    coverage = build({
        "/upload/{id}": {"post": {"parameters": [
            {"name": "id", "in": "path", "required": True},
            {"name": "X-Token", "in": "header"},
            {"name": "file", "in": "formData"},
            {"name": "dry_run", "in": "query"},
        ]}},
    })

    endpoint = coverage.endpoints["/upload/{id}"]["post"]
    assert endpoint.expected_unique_hits == 2
    assert endpoint.params_hits_details.query == {"dry_run": 0}
    assert endpoint.params_hits_details.body == {}


def test_body_without_schema_is_one_unit():
    coverage = build({"/raw": body_post(name="payload")})

    endpoint = coverage.endpoints["/raw"]["post"]
    assert endpoint.params_hits_details.body == {"payload": 0}
    assert endpoint.expected_unique_hits == 2


def test_inline_schema_without_reference_is_one_leaf():
    coverage = build({"/raw": body_post({"type": "object", "properties": {"a": {"type": "string"}}})})

    endpoint = coverage.endpoints["/raw"]["post"]
    assert endpoint.params_hits_details.body == {"body": 0}
    assert endpoint.expected_unique_hits == 2


def test_nested_reference_sums_leaves_of_nested_definition():
    coverage = build(
        {"/orders": body_post({"$ref": "#/definitions/Order"})},
        definitions={
            "Order": {"properties": {
                "id": {"type": "string"},
                "widget": {"$ref": "#/definitions/Widget"},
            }},
            "Widget": {"properties": {"name": {"type": "string"}, "size": {"type": "integer"}}},
        },
    )

    endpoint = coverage.endpoints["/orders"]["post"]
    assert set(endpoint.params_hits_details.body) == {"body.id", "body.widget.name", "body.widget.size"}
    assert "body.widget" not in endpoint.params_hits_details.body
    assert endpoint.expected_unique_hits == 4


def test_definition_without_properties_is_single_leaf():
    coverage = build(
        {"/tags": body_post({"$ref": "#/definitions/Tag"})},
        definitions={"Tag": {"type": "string"}},
    )

    endpoint = coverage.endpoints["/tags"]["post"]
    assert endpoint.params_hits_details.body == {"body": 0}
    assert endpoint.expected_unique_hits == 2


@pytest.mark.parametrize("ref", [
    "#/definitions/Missing",
    "other.yaml#/definitions/Widget",
    "#/parameters/Widget",
    "#/definitions",
])
def test_unresolvable_reference_adds_no_units(ref):
    coverage = build(
        {"/widgets": body_post({"$ref": ref})},
        definitions={"Widget": {"properties": {"name": {"type": "string"}}}},
    )

    endpoint = coverage.endpoints["/widgets"]["post"]
    assert endpoint.expected_unique_hits == 1
    assert endpoint.params_hits_details.body == {}


def test_self_referencing_definition_terminates():
    coverage = build(
        {"/nodes": body_post({"$ref": "#/definitions/Node"})},
        definitions={"Node": {"properties": {
            "value": {"type": "string"},
            "next": {"$ref": "#/definitions/Node"},
        }}},
    )

    endpoint = coverage.endpoints["/nodes"]["post"]
    assert endpoint.params_hits_details.body == {"body.value": 0, "body.next": 0}
    assert endpoint.expected_unique_hits == 3


def test_mutually_referencing_definitions_terminate():
    coverage = build(
        {"/a": body_post({"$ref": "#/definitions/A"})},
        definitions={
            "A": {"properties": {"b": {"$ref": "#/definitions/B"}}},
            "B": {"properties": {"a": {"$ref": "#/definitions/A"}, "x": {"type": "integer"}}},
        },
    )

    endpoint = coverage.endpoints["/a"]["post"]
    assert set(endpoint.params_hits_details.body) == {"body.b.a", "body.b.x"}
    assert endpoint.expected_unique_hits == 3


def test_path_level_and_shared_parameters():
    coverage = build(
        {"/widgets": {
            "parameters": [{"name": "tenant", "in": "query"}],
            "get": {"parameters": [
                {"$ref": "#/parameters/limitParam"},
                {"$ref": "#/parameters/unknown"},
            ]},
        }},
        parameters={"limitParam": {"name": "limit", "in": "query"}},
    )

    endpoint = coverage.endpoints["/widgets"]["get"]
    assert endpoint.params_hits_details.query == {"tenant": 0, "limit": 0}
    assert endpoint.expected_unique_hits == 3


@pytest.mark.parametrize("operation", ["GET", "GET /x EXTRA"])
def test_malformed_operation_aborts_build(operation):
    document = StubDocument(["GET /ok", operation])

    with pytest.raises(InvalidOperationFormat) as exc_info:
        analyze_swagger(document)

    assert exc_info.value.operation == operation


def test_path_with_space_is_malformed():
    document = SwaggerLoader.load_from_dict({"paths": {"/x EXTRA": {"get": {}}}})

    with pytest.raises(InvalidOperationFormat):
        analyze_swagger(document)


class TestResolveSchemaUnits:
    definitions = {
        "Widget": Schema.model_validate({"properties": {"name": {"type": "string"}, "size": {"type": "integer"}}}),
    }

    def test_resolved_reference_registers_leaves(self):
        params = {}
        result = resolve_schema_units(Schema(ref="#/definitions/Widget"), self.definitions, "w", params)

        assert result == Resolved(2)
        assert params == {"w.name": 0, "w.size": 0}

    def test_missing_definition_is_unsupported(self):
        params = {}
        result = resolve_schema_units(Schema(ref="#/definitions/Gadget"), self.definitions, "w", params)

        assert isinstance(result, Unsupported)
        assert "Gadget" in result.reason
        assert result.units == 0
        assert params == {}

    def test_schema_without_reference_is_current_path(self):
        params = {}
        result = resolve_schema_units(Schema(type="string"), self.definitions, "w.name", params)

        assert result == Resolved(1)
        assert params == {"w.name": 0}
