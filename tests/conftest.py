import json

import pytest


def _block(opcode, next_id=None, parent=None, inputs=None, fields=None, top_level=False, **extra):
    data = {
        "opcode": opcode,
        "next": next_id,
        "parent": parent,
        "inputs": inputs or {},
        "fields": fields or {},
        "shadow": False,
        "topLevel": top_level,
    }
    data.update(extra)
    return data


@pytest.fixture
def project_data():
    """A small saved project: a stage and one sprite with two scripts."""
    cat_blocks = {
        "flag": _block("event_whenflagclicked", "say", top_level=True, x=0, y=0),
        "say": _block(
            "looks_sayforsecs", "repeat", "flag",
            inputs={"MESSAGE": [1, [10, "Hello!"]], "SECS": [1, [4, "2"]]},
        ),
        "repeat": _block(
            "control_repeat", "if", "say",
            inputs={"TIMES": [1, [6, "3"]], "SUBSTACK": [2, "change"]},
        ),
        "change": _block(
            "data_changevariableby", None, "repeat",
            inputs={"VALUE": [1, [4, "1"]]},
            fields={"VARIABLE": ["my var", "v1"]},
        ),
        "if": _block(
            "control_if", None, "repeat",
            inputs={"CONDITION": [2, "key"], "SUBSTACK": [2, "show"]},
        ),
        "key": _block("sensing_keypressed", None, "if", inputs={"KEY_OPTION": [1, "keymenu"]}),
        "keymenu": dict(_block("sensing_keyoptions", None, "key", fields={"KEY_OPTION": ["space", None]}), shadow=True),
        "show": _block(
            "looks_say", None, "if",
            inputs={"MESSAGE": [3, [12, "my var", "v1"], [10, "hi"]]},
        ),
        "define": _block(
            "procedures_definition", "call", top_level=True, x=0, y=300,
            inputs={"custom_block": [1, "proto"]},
        ),
        "proto": dict(
            _block(
                "procedures_prototype", None, "define",
                mutation={
                    "tagName": "mutation",
                    "proccode": "hop %s",
                    "argumentids": "[\"arg1\"]",
                    "argumentnames": "[\"height\"]",
                    "argumentdefaults": "[\"\"]",
                    "warp": "false",
                },
            ),
            shadow=True,
        ),
        "call": _block(
            "procedures_call", None, "define",
            inputs={"arg1": [1, [10, "5"]]},
            mutation={"tagName": "mutation", "proccode": "hop %s", "argumentids": "[\"arg1\"]", "warp": "false"},
        ),
        "loose": [12, "my var", "v1", 10, 10],
    }
    return {
        "targets": [
            {
                "isStage": True,
                "name": "Stage",
                "variables": {"s1": ["score", 0]},
                "lists": {},
                "blocks": {},
                "costumes": [{"name": "backdrop1", "assetId": "bd0", "dataFormat": "svg"}],
                "sounds": [],
            },
            {
                "isStage": False,
                "name": "Cat",
                "layerOrder": 1,
                "variables": {"v1": ["my var", 0]},
                "lists": {"l1": ["things", ["a", "1"]]},
                "blocks": cat_blocks,
                "costumes": [{"name": "cat-a", "assetId": "c0ffee", "dataFormat": "svg"}],
                "sounds": [{"name": "meow", "assetId": "beef", "dataFormat": "wav"}],
            },
        ],
        "meta": {"semver": "3.0.0"},
    }


@pytest.fixture
def project_file(tmp_path, project_data):
    path = tmp_path / "project.json"
    path.write_text(json.dumps(project_data), encoding="utf-8")
    return path
