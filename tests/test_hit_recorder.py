import threading

from contract.swagger_loader import SwaggerLoader
from core.hit_recorder import HitRecorder
from core.model_builder import analyze_swagger


def recorder_for(paths, definitions=None):
    document = SwaggerLoader.load_from_dict({"paths": paths, "definitions": definitions or {}})
    return HitRecorder(analyze_swagger(document))


def test_query_and_body_hits_are_counted(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))

    endpoint = recorder.record_call("post", "/widgets", body={"name": "a", "size": 2}, query={"limit": "5"})

    assert endpoint.method_called
    assert endpoint.calls == 1
    assert endpoint.params_hits_details.query == {"limit": 1}
    assert endpoint.params_hits_details.body == {"body.name": 1, "body.size": 1}
    assert endpoint.observed_hits == 3


def test_repeated_hits_count_once_towards_unique_hits(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))

    for _ in range(3):
        recorder.record_call("POST", "/widgets?limit=1", body={"name": "a"})

    endpoint = recorder.coverage.endpoints["/widgets"]["post"]
    assert endpoint.calls == 3
    assert endpoint.params_hits_details.query["limit"] == 3
    assert endpoint.params_hits_details.body["body.name"] == 3
    assert endpoint.observed_hits == 2


def test_undeclared_parameters_do_not_create_units(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))

    endpoint = recorder.record_call("POST", "/widgets?debug=1", body={"name": "a", "color": "red"})

    assert endpoint.params_hits_details.query == {"limit": 0}
    assert set(endpoint.params_hits_details.body) == {"body.name", "body.size"}
    assert endpoint.extra_params == {"query:debug", "body:body.color"}
    assert endpoint.observed_hits == 3

    coverage = recorder.snapshot()
    post = coverage.endpoints["/widgets"]["post"]
    assert post.unique_hits == 4
    assert post.percent == 100.0


def test_path_templates_match_concrete_paths():
    recorder = recorder_for({
        "/widgets/{id}": {"get": {}},
        "/widgets/search": {"get": {}},
        "/widgets/{id}/parts/{partId}": {"delete": {}},
    })

    assert recorder.record_call("GET", "/widgets/42").path == "/widgets/{id}"
    assert recorder.record_call("GET", "/widgets/search").path == "/widgets/search"
    assert recorder.record_call("DELETE", "/Widgets/7/parts/9/").path == "/widgets/{id}/parts/{partid}"


def test_unmatched_calls_are_counted():
    recorder = recorder_for({"/widgets": {"get": {}}})

    assert recorder.record_call("GET", "/gadgets") is None
    assert recorder.record_call("POST", "/widgets") is None
    assert recorder.unmatched_calls == 2
    assert not recorder.coverage.endpoints["/widgets"]["get"].method_called


def test_nested_body_fields_and_lists():
    recorder = recorder_for(
        {"/orders": {"post": {"parameters": [
            {"name": "order", "in": "body", "schema": {"$ref": "#/definitions/Order"}},
        ]}}},
        definitions={
            "Order": {"properties": {
                "id": {"type": "string"},
                "items": {"type": "array", "items": {"$ref": "#/definitions/Item"}},
                "customer": {"$ref": "#/definitions/Customer"},
            }},
            "Customer": {"properties": {"name": {"type": "string"}, "email": {"type": "string"}}},
        },
    )

    endpoint = recorder.record_call("POST", "/orders", body={
        "id": "o-1",
        "items": [{"sku": "a"}, {"sku": "b"}],
        "customer": {"name": "Ada"},
    })

    assert endpoint.params_hits_details.body == {
        "order.id": 1,
        "order.items": 1,
        "order.customer.name": 1,
        "order.customer.email": 0,
    }
    assert endpoint.extra_params == set()


def test_body_without_schema_is_hit_by_any_payload():
    recorder = recorder_for({"/raw": {"post": {"parameters": [{"name": "payload", "in": "body"}]}}})

    endpoint = recorder.record_call("POST", "/raw", body={"anything": True})

    assert endpoint.params_hits_details.body == {"payload": 1}
    assert endpoint.extra_params == set()


def test_snapshot_does_not_mutate_live_model(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))
    recorder.record_call("GET", "/widgets")

    snapshot = recorder.snapshot()

    assert snapshot.percent == 20.0
    assert recorder.coverage.percent == 0.0
    assert recorder.coverage.endpoints["/widgets"]["get"].unique_hits == 0


def test_concurrent_recording_is_serialized(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))

    def worker():
        for _ in range(200):
            recorder.record_call("POST", "/widgets?limit=1", body={"name": "a", "size": 1})

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    endpoint = recorder.coverage.endpoints["/widgets"]["post"]
    assert endpoint.calls == 1600
    assert endpoint.params_hits_details.query["limit"] == 1600
    assert endpoint.params_hits_details.body == {"body.name": 1600, "body.size": 1600}
    assert endpoint.observed_hits == 3


def test_declared_trailing_slash_paths_match():
    recorder = recorder_for({
        "/api/": {"get": {}},
        "/apis/{group}/": {"get": {}},
        "/": {"get": {}},
    })

    assert recorder.record_call("GET", "/api/").path == "/api/"
    assert recorder.record_call("GET", "/api").path == "/api/"
    assert recorder.record_call("GET", "/apis/apps/").path == "/apis/{group}/"
    assert recorder.record_call("GET", "/").path == "/"
    assert recorder.unmatched_calls == 0


def test_parameter_with_literal_suffix_matches():
    recorder = recorder_for({
        "/widgets/{id}": {"get": {}},
        "/widgets/{id}.json": {"get": {}},
    })

    assert recorder.record_call("GET", "/widgets/42.json").path == "/widgets/{id}.json"
    assert recorder.record_call("GET", "/widgets/42").path == "/widgets/{id}"
    assert recorder.record_call("GET", "/widgets/.json/parts") is None


def test_query_string_argument_is_parsed(widgets_document):
    recorder = HitRecorder(analyze_swagger(widgets_document))

    endpoint = recorder.record_call("POST", "/widgets", query="limit=5&debug")

    assert endpoint.params_hits_details.query == {"limit": 1}
    assert endpoint.extra_params == {"query:debug"}
