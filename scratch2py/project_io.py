"""Read a .sb3 archive or project.json into the in-memory project graph."""

import json
import os
import re
import shutil
import zipfile
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from .diagnostics import DiagnosticContext, ProjectFormatError
from .model import (
    INPUT_ARGUMENTS,
    INPUT_BLOCK,
    INPUT_BLOCKS,
    INPUT_CALL_VALUES,
    INPUT_COLOR,
    INPUT_LIST,
    INPUT_SOUND_EFFECT,
    INPUT_VARIABLE,
    Block,
    BlockInput,
    Costume,
    ProcedureArgument,
    Project,
    Script,
    ScratchList,
    Sound,
    Target,
    Variable,
    VariableRef,
)
from .opcodes import HAT_OPCODES, HAT_SCRIPT_NAMES, MENU_SHADOW_FIELDS, OpCode
from .options import is_absolute_reference
from .utils import ensure_dir, is_within, load_json_file

# Inputs holding a nested statement sequence rather than a reporter
STACK_INPUTS = {"SUBSTACK", "SUBSTACK2"}

# Primitive type codes used in serialized inputs
NUMBER_PRIMITIVES = {4, 5, 6, 7, 8}
COLOR_PRIMITIVE = 9
TEXT_PRIMITIVE = 10
BROADCAST_PRIMITIVE = 11
VARIABLE_PRIMITIVE = 12
LIST_PRIMITIVE = 13

_PROCCODE_TOKEN_RE = re.compile(r"(%[sbn])")


def load_project(path: str) -> Project:
    """Load a project from a .sb3 archive or a bare project.json."""
    if not os.path.exists(path):
        raise ProjectFormatError(f"{path} not found")

    if zipfile.is_zipfile(path):
        with zipfile.ZipFile(path, "r") as archive:
            if "project.json" not in archive.namelist():
                raise ProjectFormatError("project.json not found in the archive.")
            with archive.open("project.json") as handle:
                data = json.load(handle)
    else:
        try:
            data = load_json_file(path)
        except json.JSONDecodeError as exc:
            raise ProjectFormatError(f"{path} is not valid JSON: {exc}") from exc

    return parse_project(data)


def parse_project(data: Dict[str, Any]) -> Project:
    targets = data.get("targets") if isinstance(data, dict) else None
    if not isinstance(targets, list):
        raise ProjectFormatError("Project has no target list")

    stages = [t for t in targets if t.get("isStage")]
    if len(stages) != 1:
        raise ProjectFormatError(f"Project must have exactly one stage, found {len(stages)}")

    sprites = [t for t in targets if not t.get("isStage")]
    return Project(
        stage=parse_target(stages[0]),
        sprites=[parse_target(sprite) for sprite in sprites],
    )


def parse_target(target: Dict[str, Any]) -> Target:
    variables = [
        Variable(id=vid, name=payload[0], value=payload[1], cloud=len(payload) > 2 and payload[2] is True)
        for vid, payload in target.get("variables", {}).items()
    ]
    lists = [
        ScratchList(id=lid, name=payload[0], value=payload[1])
        for lid, payload in target.get("lists", {}).items()
    ]
    costumes = [
        Costume(name=c.get("name", "costume"), md5=c.get("assetId", ""), ext=c.get("dataFormat", "svg"))
        for c in target.get("costumes", [])
    ]
    sounds = [
        Sound(name=s.get("name", "sound"), md5=s.get("assetId", ""), ext=s.get("dataFormat", "wav"))
        for s in target.get("sounds", [])
    ]

    blocks = target.get("blocks", {})
    # Loose variable reporters are stored as bare arrays; they have no
    # effect and are skipped.
    top_level = [
        bid for bid, blk in blocks.items()
        if isinstance(blk, dict) and blk.get("topLevel") and not blk.get("shadow")
    ]
    scripts = [parse_script(bid, blocks) for bid in top_level]

    return Target(
        name=target.get("name", "Sprite"),
        is_stage=bool(target.get("isStage")),
        scripts=scripts,
        variables=variables,
        lists=lists,
        costumes=costumes,
        sounds=sounds,
    )


def parse_script(start_id: str, blocks: Dict[str, Dict[str, Any]]) -> Script:
    chain = parse_chain(start_id, blocks)
    top = blocks[start_id]

    hat: Optional[Block] = None
    if chain and chain[0].opcode in HAT_OPCODES:
        hat, chain = chain[0], chain[1:]

    return Script(
        hat=hat,
        body=chain,
        name=script_name(hat),
        x=top.get("x", 0) or 0,
        y=top.get("y", 0) or 0,
    )


def script_name(hat: Optional[Block]) -> str:
    if hat is None:
        return "script"
    if hat.opcode == OpCode.procedures_definition:
        proccode = hat.inputs["PROCCODE"].value
        return _PROCCODE_TOKEN_RE.sub("", proccode).strip() or "procedure"
    template = HAT_SCRIPT_NAMES.get(hat.opcode)
    if template is None:
        return hat.opcode
    values = defaultdict(str, {
        name: str(inp.value) for name, inp in hat.inputs.items() if not inp.is_block
    })
    return template.format_map(values)


def parse_chain(block_id: Optional[str], blocks: Dict[str, Dict[str, Any]]) -> List[Block]:
    chain: List[Block] = []
    current = block_id
    while current and current in blocks:
        chain.append(parse_block(current, blocks))
        current = blocks[current].get("next")
    return chain


def parse_block(block_id: str, blocks: Dict[str, Dict[str, Any]]) -> Block:
    raw = blocks[block_id]
    opcode = raw.get("opcode", "")
    block = Block(opcode=opcode, id=block_id)

    if opcode == OpCode.procedures_definition:
        prototype_id = raw.get("inputs", {}).get("custom_block", [None, None])[1]
        prototype = blocks.get(prototype_id, {}) if isinstance(prototype_id, str) else {}
        block.inputs.update(parse_prototype(prototype.get("mutation", {})))
        return block

    if opcode == OpCode.procedures_call:
        mutation = raw.get("mutation", {})
        try:
            argument_ids = json.loads(mutation.get("argumentids", "[]"))
        except json.JSONDecodeError:
            argument_ids = []
        inputs = raw.get("inputs", {})
        values = [
            parse_input(inputs[arg_id], blocks) if arg_id in inputs else None
            for arg_id in argument_ids
        ]
        block.inputs["PROCCODE"] = BlockInput("string", mutation.get("proccode", ""))
        block.inputs["INPUTS"] = BlockInput(INPUT_CALL_VALUES, values)
        return block

    for input_name, input_data in raw.get("inputs", {}).items():
        if input_name in STACK_INPUTS:
            stack_id = input_data[1] if len(input_data) > 1 else None
            block.inputs[input_name] = BlockInput(INPUT_BLOCKS, parse_chain(stack_id, blocks))
            continue
        parsed = parse_input(input_data, blocks)
        if parsed is not None:
            block.inputs[input_name] = parsed

    for field_name, field_data in raw.get("fields", {}).items():
        block.inputs[field_name] = parse_field(opcode, field_name, field_data)

    return block


def parse_prototype(mutation: Dict[str, Any]) -> Dict[str, BlockInput]:
    proccode = mutation.get("proccode", "")
    try:
        argument_names = json.loads(mutation.get("argumentnames", "[]"))
    except json.JSONDecodeError:
        argument_names = []

    arguments: List[ProcedureArgument] = []
    names = iter(argument_names)
    for part in _PROCCODE_TOKEN_RE.split(proccode):
        if part == "%b":
            arguments.append(ProcedureArgument("boolean", next(names, "")))
        elif part in ("%s", "%n"):
            arguments.append(ProcedureArgument("numberOrString", next(names, "")))
        elif part.strip():
            arguments.append(ProcedureArgument("label", part.strip()))

    warp = str(mutation.get("warp", "false")).lower() == "true"
    return {
        "PROCCODE": BlockInput("string", proccode),
        "ARGUMENTS": BlockInput(INPUT_ARGUMENTS, arguments),
        "WARP": BlockInput("boolean", warp),
    }


def parse_input(input_data: Any, blocks: Dict[str, Dict[str, Any]]) -> Optional[BlockInput]:
    if not input_data or len(input_data) < 2:
        return None

    val = input_data[1]

    if isinstance(val, str):
        child = blocks.get(val)
        if child is None:
            return None
        menu_field = MENU_SHADOW_FIELDS.get(child.get("opcode", ""))
        if child.get("shadow") and menu_field is not None:
            field = child.get("fields", {}).get(menu_field, [""])
            return BlockInput("menu", field[0])
        return BlockInput(INPUT_BLOCK, parse_block(val, blocks))

    if isinstance(val, list) and val:
        primitive_type = val[0]
        primitive_value = val[1] if len(val) > 1 else ""

        if primitive_type in NUMBER_PRIMITIVES:
            return BlockInput("number", primitive_value)
        if primitive_type == COLOR_PRIMITIVE:
            return BlockInput(INPUT_COLOR, hex_to_rgb(primitive_value))
        if primitive_type == TEXT_PRIMITIVE:
            return BlockInput("string", primitive_value)
        if primitive_type == BROADCAST_PRIMITIVE:
            return BlockInput("broadcast", primitive_value)
        if primitive_type == VARIABLE_PRIMITIVE:
            ref = VariableRef(id=val[2] if len(val) > 2 else "", name=primitive_value)
            reporter = Block(OpCode.data_variable, {"VARIABLE": BlockInput(INPUT_VARIABLE, ref)})
            return BlockInput(INPUT_BLOCK, reporter)
        if primitive_type == LIST_PRIMITIVE:
            ref = VariableRef(id=val[2] if len(val) > 2 else "", name=primitive_value)
            reporter = Block(OpCode.data_listcontents, {"LIST": BlockInput(INPUT_LIST, ref)})
            return BlockInput(INPUT_BLOCK, reporter)
        return BlockInput("string", primitive_value)

    return None


def parse_field(opcode: str, field_name: str, field_data: Any) -> BlockInput:
    value = field_data[0] if field_data else ""
    field_id = field_data[1] if field_data and len(field_data) > 1 else None
    if field_name == "VARIABLE":
        return BlockInput(INPUT_VARIABLE, VariableRef(id=field_id or "", name=value))
    if field_name == "LIST":
        return BlockInput(INPUT_LIST, VariableRef(id=field_id or "", name=value))
    if field_name == "EFFECT" and opcode.startswith("sound_"):
        return BlockInput(INPUT_SOUND_EFFECT, value)
    return BlockInput("field", value)


def hex_to_rgb(value: Any) -> Any:
    """'#rrggbb' as a dict of channels; anything else is returned unchanged."""
    text = str(value)
    if not re.fullmatch(r"#[0-9a-fA-F]{6}", text):
        return value
    return {
        "r": int(text[1:3], 16),
        "g": int(text[3:5], 16),
        "b": int(text[5:7], 16),
    }


def extract_assets(
    sb3_path: str,
    project: Project,
    output_dir: str,
    get_asset_url: Callable[[str, str, str, str, str], str],
    diagnostics: Optional[DiagnosticContext] = None,
) -> int:
    """Copy every costume and sound out of the archive to where the entry file expects it.

    Only relative asset URLs are written. Returns the number of files copied.
    """
    if not zipfile.is_zipfile(sb3_path):
        return 0

    copied = 0
    with zipfile.ZipFile(sb3_path, "r") as archive:
        members = set(archive.namelist())
        for target in project.targets:
            assets = [("costume", a) for a in target.costumes] + [("sound", a) for a in target.sounds]
            for asset_type, asset in assets:
                md5ext = f"{asset.md5}.{asset.ext}"
                url = get_asset_url(asset_type, target.name, asset.name, asset.md5, asset.ext)
                if is_absolute_reference(url):
                    continue
                if md5ext not in members:
                    if diagnostics is not None:
                        diagnostics.warning(f"{asset_type} asset {md5ext} not found in archive", target.name)
                    continue

                dest_path = os.path.normpath(os.path.join(output_dir, url))
                if not is_within(output_dir, dest_path):
                    if diagnostics is not None:
                        diagnostics.warning(f"{asset_type} asset path {url} leaves the output folder", target.name)
                    continue
                ensure_dir(os.path.dirname(dest_path))
                with archive.open(md5ext) as src, open(dest_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                copied += 1
    return copied
