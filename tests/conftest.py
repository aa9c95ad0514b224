import copy

import pytest

from contract.swagger_loader import SwaggerLoader

WIDGETS_CONTRACT = {
    "swagger": "2.0",
    "info": {"title": "Widgets", "version": "1.0.0"},
    "paths": {
        "/widgets": {
            "get": {"responses": {"200": {"description": "ok"}}},
            "post": {
                "parameters": [
                    {"name": "limit", "in": "query", "type": "integer"},
                    {"name": "body", "in": "body", "schema": {"$ref": "#/definitions/Widget"}},
                ],
                "responses": {"201": {"description": "created"}},
            },
        },
    },
    "definitions": {
        "Widget": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "size": {"type": "integer"},
            },
        },
    },
}


@pytest.fixture
def widgets_contract():
    return copy.deepcopy(WIDGETS_CONTRACT)


@pytest.fixture
def widgets_document(widgets_contract):
    return SwaggerLoader.load_from_dict(widgets_contract)
