import json
import zipfile

import pytest

from scratch2py.assembler import compile_project
from scratch2py.diagnostics import DiagnosticContext, ProjectFormatError
from scratch2py.model import INPUT_BLOCK, INPUT_COLOR, VariableRef
from scratch2py.options import TranspileOptions
from scratch2py.project_io import extract_assets, hex_to_rgb, load_project, parse_input, parse_project


def write_sb3(path, project_data, assets=None):
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("project.json", json.dumps(project_data))
        for name, payload in (assets or {}).items():
            archive.writestr(name, payload)
    return path


def test_targets_and_data(project_file):
    project = load_project(str(project_file))
    assert project.stage.is_stage
    assert [sprite.name for sprite in project.sprites] == ["Cat"]

    cat = project.sprites[0]
    assert [(v.id, v.name, v.value) for v in cat.variables] == [("v1", "my var", 0)]
    assert cat.lists[0].value == ["a", "1"]
    assert cat.costumes[0].md5 == "c0ffee"
    assert cat.sounds[0].ext == "wav"


def test_scripts_are_split_into_hat_and_body(project_file):
    cat = load_project(str(project_file)).sprites[0]
    assert len(cat.scripts) == 2

    flag, define = cat.scripts
    assert flag.hat.opcode == "event_whenflagclicked"
    assert flag.name == "when green flag clicked"
    assert [b.opcode for b in flag.body] == ["looks_sayforsecs", "control_repeat", "control_if"]

    repeat = flag.body[1]
    assert repeat.inputs["SUBSTACK"].is_stack
    assert [b.opcode for b in repeat.inputs["SUBSTACK"].value] == ["data_changevariableby"]

    assert define.is_procedure
    assert define.name == "hop"
    assert define.y == 300


def test_shadow_menus_fold_to_their_value(project_file):
    flag = load_project(str(project_file)).sprites[0].scripts[0]
    key = flag.body[2].inputs["CONDITION"].value
    assert key.opcode == "sensing_keypressed"
    assert key.inputs["KEY_OPTION"].type == "menu"
    assert key.inputs["KEY_OPTION"].value == "space"


def test_variable_primitive_becomes_reporter(project_file):
    flag = load_project(str(project_file)).sprites[0].scripts[0]
    say = flag.body[2].inputs["SUBSTACK"].value[0]
    message = say.inputs["MESSAGE"]
    assert message.type == INPUT_BLOCK
    assert message.value.opcode == "data_variable"
    assert message.value.inputs["VARIABLE"].value == VariableRef("v1", "my var")


def test_prototype_arguments(project_file):
    define = load_project(str(project_file)).sprites[0].scripts[1]
    arguments = define.hat.inputs["ARGUMENTS"].value
    assert [(a.type, a.name) for a in arguments] == [("label", "hop"), ("numberOrString", "height")]
    assert define.hat.inputs["PROCCODE"].value == "hop %s"
    assert define.warp is False


def test_call_values_follow_argument_ids(project_file):
    define = load_project(str(project_file)).sprites[0].scripts[1]
    call = define.body[0]
    assert call.inputs["PROCCODE"].value == "hop %s"
    assert [v.value for v in call.inputs["INPUTS"].value] == ["5"]


def test_primitive_kinds():
    assert parse_input([1, [4, "10"]], {}).type == "number"
    assert parse_input([1, [10, "hi"]], {}).type == "string"
    color = parse_input([1, [9, "#ff8000"]], {})
    assert color.type == INPUT_COLOR
    assert color.value == {"r": 255, "g": 128, "b": 0}
    assert parse_input([1, "missing"], {}) is None


def test_hex_to_rgb_leaves_other_values():
    assert hex_to_rgb("#000000") == {"r": 0, "g": 0, "b": 0}
    assert hex_to_rgb("red") == "red"


def test_loads_sb3_archive(tmp_path, project_data):
    path = write_sb3(tmp_path / "game.sb3", project_data)
    assert load_project(str(path)).sprites[0].name == "Cat"


def test_archive_without_project_json(tmp_path):
    path = tmp_path / "empty.sb3"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("other.txt", "x")
    with pytest.raises(ProjectFormatError):
        load_project(str(path))


def test_invalid_files(tmp_path):
    with pytest.raises(ProjectFormatError):
        load_project(str(tmp_path / "nope.sb3"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ProjectFormatError):
        load_project(str(broken))


def test_project_needs_exactly_one_stage(project_data):
    project_data["targets"].append(dict(project_data["targets"][0]))
    with pytest.raises(ProjectFormatError):
        parse_project(project_data)
    with pytest.raises(ProjectFormatError):
        parse_project({"meta": {}})


def test_sprites_keep_project_order(project_data):
    dog = dict(project_data["targets"][1], name="Dog", layerOrder=0, blocks={})
    project_data["targets"].append(dog)
    assert [s.name for s in parse_project(project_data).sprites] == ["Cat", "Dog"]


def test_loaded_project_compiles(project_file):
    module = compile_project(load_project(str(project_file))).files["Cat/Cat.py"]
    assert "\n".join([
        "@martypy.trigger(Trigger.GREEN_FLAG)",
        "def whenGreenFlagClicked():",
        "    global myVar",
        '    martypy.sayAndWait("Hello!", 2)',
        "    for _ in range(3):",
        "        myVar += 1",
        '    if martypy.keyPressed("space"):',
        "        martypy.say(myVar)",
    ]) in module
    assert "def hop(height):\n    hop(5)" in module
    assert 'things = ["a", 1]' in module


def test_extract_assets(tmp_path, project_data):
    path = write_sb3(tmp_path / "game.sb3", project_data, {"c0ffee.svg": "<svg/>", "bd0.svg": "<svg/>"})
    project = load_project(str(path))
    result = compile_project(project)
    out = tmp_path / "out"

    copied = extract_assets(str(path), project, str(out), TranspileOptions().get_asset_url, result.diagnostics)

    assert copied == 2
    assert (out / "Cat" / "costumes" / "cat-a.svg").read_text() == "<svg/>"
    assert (out / "Stage" / "costumes" / "backdrop1.svg").exists()
    # The sound is missing from the archive.
    assert any("beef.wav" in d.message for d in result.diagnostics.get_warnings())


def test_asset_names_cannot_climb_out_of_output(tmp_path, project_data):
    project_data["targets"][1]["costumes"][0]["name"] = "../../../escaped"
    path = write_sb3(tmp_path / "game.sb3", project_data, {"c0ffee.svg": "<svg/>", "bd0.svg": "<svg/>"})
    project = load_project(str(path))
    out = tmp_path / "nested" / "out"

    extract_assets(str(path), project, str(out), TranspileOptions().get_asset_url)

    assert list(tmp_path.rglob("escaped.svg")) == []
    assert (out / "Cat" / "costumes" / "_________escaped.svg").exists()


def test_asset_urls_outside_output_are_skipped(tmp_path, project_data):
    path = write_sb3(tmp_path / "game.sb3", project_data, {"c0ffee.svg": "<svg/>", "bd0.svg": "<svg/>"})
    project = load_project(str(path))
    out = tmp_path / "out"
    diagnostics = DiagnosticContext()

    def climbing_url(asset_type, target_name, asset_name, md5, ext):
        return f"../{asset_name}.{ext}"

    copied = extract_assets(str(path), project, str(out), climbing_url, diagnostics)

    assert copied == 0
    assert not (tmp_path / "cat-a.svg").exists()
    assert any("leaves the output folder" in d.message for d in diagnostics.get_warnings())
