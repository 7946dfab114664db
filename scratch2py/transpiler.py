"""Handlers for the standard Scratch blocks.

Importing this module fills ``dispatch.HANDLERS`` for every opcode in
``OpCode``, the robot blocks included, and fails at import time if any
opcode is left without a handler.
"""

import math
from typing import List, Optional, Tuple

from .constants import DEDENT_SENTINEL, NOT_IMPLEMENTED_YET, RUNTIME
from .context import BlockContext
from .diagnostics import UnknownProcedureError
from .dispatch import (
    HANDLERS,
    block_to_python,
    compile_input,
    field_value,
    handles,
    input_to_python,
    literal_number,
    stack_to_python,
    warn,
)
from .literals import format_number, string_literal
from .model import INPUT_COLOR, INPUT_SOUND_EFFECT, Block, BlockInput, VariableRef
from .naming import camel_case
from .opcodes import HAT_OPCODES, MENU_SHADOW_FIELDS, OpCode
from .shapes import InputShape, literal_to_python

__all__ = ["HANDLERS", "block_to_python", "input_to_python", "stack_to_python"]

R = RUNTIME


def _selected_variable(block: Block, ctx: BlockContext) -> Tuple[str, str]:
    """Source expression and watcher expression for a VARIABLE or LIST input.

    Stage data lives in the Stage module, so other targets reach it through
    the runtime's shared ``stage.vars`` namespace.
    """
    block_input = block.inputs.get("VARIABLE") or block.inputs.get("LIST")
    ref = block_input.value if block_input is not None else None
    if not isinstance(ref, VariableRef):
        warn(ctx, block, "Block has no variable selected")
        return "None", "None"

    name = ctx.compilation.variable_names.get(ref.id)
    if name is None:
        warn(ctx, block, f"Unknown variable '{ref.name}'")
        name = camel_case(ref.name)

    if ctx.compilation.is_local(ref.id, ctx.target):
        return name, f"{R}.watchers[{string_literal(name)}]"
    return f"{R}.stage.vars.{name}", f"{R}.stage.watchers[{string_literal(name)}]"


def _sprite_reference(block: Block, ctx: BlockContext, imported_name: str) -> str:
    new_name = ctx.compilation.target_names.get(imported_name)
    if new_name is None:
        warn(ctx, block, f"Unknown sprite '{imported_name}'")
        new_name = camel_case(imported_name, upper=True)
    return f"{R}.sprites[{string_literal(new_name)}]"


def _color(block: Block, name: str, ctx: BlockContext) -> str:
    block_input = block.inputs.get(name)
    if block_input is not None and block_input.type == INPUT_COLOR and isinstance(block_input.value, dict):
        rgb = block_input.value
        return f"Color.rgb({rgb.get('r', 0)}, {rgb.get('g', 0)}, {rgb.get('b', 0)})"
    return f"Color.num({compile_input(block, name, InputShape.NUMBER, ctx)})"


def increase(left: str, block: Block, name: str, ctx: BlockContext) -> str:
    """``left += n`` with a static sign folded into the operator.

    Python's increment form is ``+= 1`` itself, so a literal of 1 or -1 needs
    no special case.
    """
    n = literal_number(block.inputs.get(name))
    if n is None:
        return f"{left} += {compile_input(block, name, InputShape.NUMBER, ctx)}"
    if n >= 0:
        return f"{left} += {format_number(n)}"
    return f"{left} -= {format_number(-n)}"


def _loop(header: str, block: Block, ctx: BlockContext, body: str = "SUBSTACK") -> str:
    lines = [header, compile_input(block, body, InputShape.STACK, ctx) if body in block.inputs else "pass"]
    # Warp procedures run the whole loop in one go.
    if not ctx.warp:
        lines.append(DEDENT_SENTINEL)
    return "\n".join(lines)


def _branch(header: str, block: Block, body: str, ctx: BlockContext) -> List[str]:
    text = compile_input(block, body, InputShape.STACK, ctx) if body in block.inputs else "pass"
    return [header, text, DEDENT_SENTINEL]


def _repeat_count(block: Block, ctx: BlockContext) -> Optional[str]:
    """Rounded iteration count, or None for a literal that never runs out."""
    times = block.inputs.get("TIMES")
    n = literal_number(times)
    if n is None:
        if times is None or times.is_primitive:
            return "0"
        return f"math.floor({compile_input(block, 'TIMES', InputShape.NUMBER, ctx)} + 0.5)"
    if math.isinf(n):
        return None if n > 0 else "0"
    return format_number(math.floor(n + 0.5))


def _compare(block: Block, op: str, ctx: BlockContext) -> str:
    """A Scratch comparison between OPERAND1 and OPERAND2.

    Two reporters can hold anything, so they go through the runtime's
    compare(). A numeric literal against a reporter or another number makes
    it a numeric comparison. Anything else, including a number against a
    literal that is not one, compares as case-folded strings.
    """
    left = block.inputs.get("OPERAND1")
    right = block.inputs.get("OPERAND2")
    if (left is None or left.is_block) and (right is None or right.is_block):
        a = compile_input(block, "OPERAND1", InputShape.ANY, ctx)
        b = compile_input(block, "OPERAND2", InputShape.ANY, ctx)
        return f"({R}.compare({a}, {b}) {op} 0)"

    num1 = literal_number(left)
    num2 = literal_number(right)
    if num1 is not None and _numeric_operand(right, num2):
        return f"({format_number(num1)} {op} {compile_input(block, 'OPERAND2', InputShape.NUMBER, ctx)})"
    if num2 is not None and _numeric_operand(left, num1):
        return f"({compile_input(block, 'OPERAND1', InputShape.NUMBER, ctx)} {op} {format_number(num2)})"

    return f"({_folded_string(block, 'OPERAND1', ctx)} {op} {_folded_string(block, 'OPERAND2', ctx)})"


def _numeric_operand(block_input: Optional[BlockInput], number: Optional[float]) -> bool:
    """Whether the other side of a comparison may be compared as a number."""
    if block_input is None or not block_input.is_primitive:
        return True
    return number is not None


def _folded_string(block: Block, name: str, ctx: BlockContext) -> str:
    block_input = block.inputs.get(name)
    if block_input is not None and block_input.is_primitive:
        return string_literal(field_value(block, name).lower())
    return f"{compile_input(block, name, InputShape.STRING, ctx)}.lower()"


def _binary(block: Block, op: str, ctx: BlockContext, shape: InputShape = InputShape.NUMBER) -> str:
    a = compile_input(block, "NUM1", shape, ctx)
    b = compile_input(block, "NUM2", shape, ctx)
    return f"({a} {op} {b})"


def _offset(source: str, delta: float) -> str:
    if delta < 0:
        return f"{source} - {format_number(-delta)}"
    return f"{source} + {format_number(delta)}"


# Placeholders ------------------------------------------------------------

@handles(
    OpCode.motion_movesteps,
    OpCode.motion_turnright,
    OpCode.motion_turnleft,
    OpCode.motion_goto,
    OpCode.motion_gotoxy,
    OpCode.motion_glideto,
    OpCode.motion_glidesecstoxy,
    OpCode.motion_pointindirection,
    OpCode.motion_pointtowards,
    OpCode.motion_changexby,
    OpCode.motion_setx,
    OpCode.motion_changeyby,
    OpCode.motion_sety,
    OpCode.motion_ifonedgebounce,
    OpCode.motion_setrotationstyle,
    OpCode.motion_xposition,
    OpCode.motion_yposition,
    OpCode.motion_direction,
    OpCode.motion_scroll_right,
    OpCode.motion_scroll_up,
    OpCode.motion_align_scene,
    OpCode.motion_xscroll,
    OpCode.motion_yscroll,
    OpCode.looks_switchbackdroptoandwait,
    OpCode.control_create_clone_of,
    OpCode.control_delete_this_clone,
    OpCode.sensing_setdragmode,
    OpCode.sensing_loud,
    OpCode.music_playDrumForBeats,
    OpCode.music_restForBeats,
    OpCode.music_playNoteForBeats,
    OpCode.music_setInstrument,
    OpCode.music_setTempo,
    OpCode.music_changeTempo,
    OpCode.music_getTempo,
    OpCode.music_midiPlayDrumForBeats,
    OpCode.music_midiSetInstrument,
    OpCode.pen_setPenShadeToNumber,
    OpCode.pen_changePenShadeBy,
    OpCode.pen_setPenHueToNumber,
    OpCode.pen_changePenHueBy,
    OpCode.videoSensing_videoOn,
    OpCode.videoSensing_videoToggle,
    OpCode.videoSensing_setVideoTransparency,
    OpCode.wedo2_motorOnFor,
    OpCode.wedo2_motorOn,
    OpCode.wedo2_motorOff,
    OpCode.wedo2_startMotorPower,
    OpCode.wedo2_setMotorDirection,
    OpCode.wedo2_setLightHue,
    OpCode.wedo2_getDistance,
    OpCode.wedo2_isTilted,
    OpCode.wedo2_getTiltAngle,
    OpCode.wedo2_playNoteFor,
    OpCode.colour_picker_LED_eyes,
)
def _not_implemented(block, ctx, desired):
    ctx.diagnostics.info(f"Block '{block.opcode}' is not supported", ctx.target.name,
                         ctx.script.name if ctx.script else None, block.id)
    return NOT_IMPLEMENTED_YET, InputShape.ANY


@handles(*HAT_OPCODES, OpCode.procedures_prototype)
def _no_code(block, ctx, desired):
    # Hats and prototypes shape the enclosing function, not its body.
    return "", InputShape.STACK


@handles(*MENU_SHADOW_FIELDS)
def _menu(block, ctx, desired):
    return literal_to_python(field_value(block, MENU_SHADOW_FIELDS[block.opcode]), InputShape.STRING)


# Looks ------------------------------------------------------------------

@handles(OpCode.looks_sayforsecs)
def _say_for_secs(block, ctx, desired):
    message = compile_input(block, "MESSAGE", InputShape.ANY, ctx)
    secs = compile_input(block, "SECS", InputShape.NUMBER, ctx)
    return f"{R}.sayAndWait({message}, {secs})", InputShape.STACK


@handles(OpCode.looks_say)
def _say(block, ctx, desired):
    return f"{R}.say({compile_input(block, 'MESSAGE', InputShape.ANY, ctx)})", InputShape.STACK


@handles(OpCode.looks_thinkforsecs)
def _think_for_secs(block, ctx, desired):
    message = compile_input(block, "MESSAGE", InputShape.ANY, ctx)
    secs = compile_input(block, "SECS", InputShape.NUMBER, ctx)
    return f"{R}.thinkAndWait({message}, {secs})", InputShape.STACK


@handles(OpCode.looks_think)
def _think(block, ctx, desired):
    return f"{R}.think({compile_input(block, 'MESSAGE', InputShape.ANY, ctx)})", InputShape.STACK


@handles(OpCode.looks_switchcostumeto)
def _switch_costume(block, ctx, desired):
    return f"{R}.costume = {compile_input(block, 'COSTUME', InputShape.ANY, ctx)}", InputShape.STACK


@handles(OpCode.looks_nextcostume)
def _next_costume(block, ctx, desired):
    return f"{R}.costumeNumber += 1", InputShape.STACK


@handles(OpCode.looks_switchbackdropto)
def _switch_backdrop(block, ctx, desired):
    return f"{R}.stage.costume = {compile_input(block, 'BACKDROP', InputShape.ANY, ctx)}", InputShape.STACK


@handles(OpCode.looks_nextbackdrop)
def _next_backdrop(block, ctx, desired):
    return f"{R}.stage.costumeNumber += 1", InputShape.STACK


@handles(OpCode.looks_changesizeby)
def _change_size(block, ctx, desired):
    return increase(f"{R}.size", block, "CHANGE", ctx), InputShape.STACK


@handles(OpCode.looks_setsizeto)
def _set_size(block, ctx, desired):
    return f"{R}.size = {compile_input(block, 'SIZE', InputShape.NUMBER, ctx)}", InputShape.STACK


@handles(OpCode.looks_changeeffectby)
def _change_effect(block, ctx, desired):
    effect = field_value(block, "EFFECT").lower()
    return increase(f"{R}.effects.{effect}", block, "CHANGE", ctx), InputShape.STACK


@handles(OpCode.looks_seteffectto)
def _set_effect(block, ctx, desired):
    effect = field_value(block, "EFFECT").lower()
    value = compile_input(block, "VALUE", InputShape.NUMBER, ctx)
    return f"{R}.effects.{effect} = {value}", InputShape.STACK


@handles(OpCode.looks_cleargraphiceffects)
def _clear_effects(block, ctx, desired):
    return f"{R}.effects.clear()", InputShape.STACK


@handles(OpCode.looks_show, OpCode.looks_hide)
def _visibility(block, ctx, desired):
    visible = "True" if block.opcode == OpCode.looks_show else "False"
    return f"{R}.visible = {visible}", InputShape.STACK


@handles(OpCode.looks_gotofrontback)
def _front_back(block, ctx, desired):
    if field_value(block, "FRONT_BACK") == "front":
        return f"{R}.moveAhead()", InputShape.STACK
    return f"{R}.moveBehind()", InputShape.STACK


@handles(OpCode.looks_goforwardbackwardlayers)
def _layers(block, ctx, desired):
    num = compile_input(block, "NUM", InputShape.NUMBER, ctx)
    if field_value(block, "FORWARD_BACKWARD") == "forward":
        return f"{R}.moveAhead({num})", InputShape.STACK
    return f"{R}.moveBehind({num})", InputShape.STACK


@handles(OpCode.looks_hideallsprites, OpCode.looks_changestretchby, OpCode.looks_setstretchto)
def _obsolete_no_op(block, ctx, desired):
    return "", InputShape.STACK


@handles(OpCode.looks_costumenumbername, OpCode.looks_backdropnumbername)
def _costume_number_name(block, ctx, desired):
    owner = R if block.opcode == OpCode.looks_costumenumbername else f"{R}.stage"
    if field_value(block, "NUMBER_NAME") == "name":
        return f"{owner}.costume.name", InputShape.STRING
    return f"{owner}.costumeNumber", InputShape.NUMBER


@handles(OpCode.looks_size)
def _size(block, ctx, desired):
    return f"{R}.size", InputShape.NUMBER


# Sound ------------------------------------------------------------------

@handles(OpCode.sound_playuntildone)
def _play_until_done(block, ctx, desired):
    return f"{R}.playSoundUntilDone({compile_input(block, 'SOUND_MENU', InputShape.ANY, ctx)})", InputShape.STACK


@handles(OpCode.sound_play)
def _start_sound(block, ctx, desired):
    return f"{R}.startSound({compile_input(block, 'SOUND_MENU', InputShape.ANY, ctx)})", InputShape.STACK


@handles(OpCode.sound_setvolumeto)
def _set_volume(block, ctx, desired):
    return f"{R}.audioEffects.volume = {compile_input(block, 'VOLUME', InputShape.NUMBER, ctx)}", InputShape.STACK


@handles(OpCode.sound_changevolumeby)
def _change_volume(block, ctx, desired):
    return increase(f"{R}.audioEffects.volume", block, "VOLUME", ctx), InputShape.STACK


@handles(OpCode.sound_volume)
def _volume(block, ctx, desired):
    return f"{R}.audioEffects.volume", InputShape.NUMBER


def _audio_effect(block: Block, ctx: BlockContext) -> str:
    effect = block.inputs.get("EFFECT")
    if effect is not None and effect.type == INPUT_SOUND_EFFECT:
        return f"{R}.audioEffects.{str(effect.value).lower()}"
    return f"{R}.audioEffects[{compile_input(block, 'EFFECT', InputShape.ANY, ctx)}]"


@handles(OpCode.sound_seteffectto)
def _set_sound_effect(block, ctx, desired):
    value = compile_input(block, "VALUE", InputShape.NUMBER, ctx)
    return f"{_audio_effect(block, ctx)} = {value}", InputShape.STACK


@handles(OpCode.sound_changeeffectby)
def _change_sound_effect(block, ctx, desired):
    return increase(_audio_effect(block, ctx), block, "VALUE", ctx), InputShape.STACK


@handles(OpCode.sound_cleareffects)
def _clear_sound_effects(block, ctx, desired):
    return f"{R}.audioEffects.clear()", InputShape.STACK


@handles(OpCode.sound_stopallsounds)
def _stop_all_sounds(block, ctx, desired):
    return f"{R}.stopAllSounds()", InputShape.STACK


# Events -----------------------------------------------------------------

@handles(OpCode.event_broadcast)
def _broadcast(block, ctx, desired):
    return f"{R}.broadcast({compile_input(block, 'BROADCAST_INPUT', InputShape.STRING, ctx)})", InputShape.STACK


@handles(OpCode.event_broadcastandwait)
def _broadcast_and_wait(block, ctx, desired):
    return f"{R}.broadcastAndWait({compile_input(block, 'BROADCAST_INPUT', InputShape.STRING, ctx)})", InputShape.STACK


# Control ----------------------------------------------------------------

@handles(OpCode.control_wait)
def _wait(block, ctx, desired):
    return f"time.sleep({compile_input(block, 'DURATION', InputShape.NUMBER, ctx)})", InputShape.STACK


@handles(OpCode.control_repeat)
def _repeat(block, ctx, desired):
    count = _repeat_count(block, ctx)
    header = "while True:" if count is None else f"for _ in range({count}):"
    return _loop(header, block, ctx), InputShape.STACK


@handles(OpCode.control_forever)
def _forever(block, ctx, desired):
    return _loop("while True:", block, ctx), InputShape.STACK


@handles(OpCode.control_repeat_until)
def _repeat_until(block, ctx, desired):
    condition = compile_input(block, "CONDITION", InputShape.BOOLEAN, ctx)
    return _loop(f"while not {condition}:", block, ctx), InputShape.STACK


@handles(OpCode.control_while)
def _while(block, ctx, desired):
    condition = compile_input(block, "CONDITION", InputShape.BOOLEAN, ctx)
    return _loop(f"while {condition}:", block, ctx), InputShape.STACK


@handles(OpCode.control_wait_until)
def _wait_until(block, ctx, desired):
    condition = compile_input(block, "CONDITION", InputShape.BOOLEAN, ctx)
    return "\n".join([f"while not {condition}:", "time.sleep(0)", DEDENT_SENTINEL]), InputShape.STACK


@handles(OpCode.control_for_each)
def _for_each(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    n = literal_number(block.inputs.get("VALUE"))
    if n is not None and math.isfinite(n):
        stop = format_number(math.floor(n + 0.5) + 1)
    else:
        stop = f"math.floor({compile_input(block, 'VALUE', InputShape.NUMBER, ctx)} + 0.5) + 1"
    return _loop(f"for {name} in range(1, {stop}):", block, ctx), InputShape.STACK


@handles(OpCode.control_if)
def _if(block, ctx, desired):
    condition = compile_input(block, "CONDITION", InputShape.BOOLEAN, ctx)
    return "\n".join(_branch(f"if {condition}:", block, "SUBSTACK", ctx)), InputShape.STACK


@handles(OpCode.control_if_else)
def _if_else(block, ctx, desired):
    condition = compile_input(block, "CONDITION", InputShape.BOOLEAN, ctx)
    lines = _branch(f"if {condition}:", block, "SUBSTACK", ctx)
    lines += _branch("else:", block, "SUBSTACK2", ctx)
    return "\n".join(lines), InputShape.STACK


@handles(OpCode.control_all_at_once)
def _all_at_once(block, ctx, desired):
    return compile_input(block, "SUBSTACK", InputShape.STACK, ctx), InputShape.STACK


@handles(OpCode.control_stop)
def _stop(block, ctx, desired):
    option = field_value(block, "STOP_OPTION")
    if option == "this script":
        return "return", InputShape.STACK
    warn(ctx, block, f"Unsupported stop option '{option}'")
    return f"# TODO: Implement stop {option}", InputShape.STACK


@handles(OpCode.control_get_counter)
def _get_counter(block, ctx, desired):
    return f"{R}.stage.counter", InputShape.NUMBER


@handles(OpCode.control_incr_counter)
def _incr_counter(block, ctx, desired):
    return f"{R}.stage.counter += 1", InputShape.STACK


@handles(OpCode.control_clear_counter)
def _clear_counter(block, ctx, desired):
    return f"{R}.stage.counter = 0", InputShape.STACK


# Sensing ----------------------------------------------------------------

@handles(OpCode.sensing_touchingobject)
def _touching_object(block, ctx, desired):
    menu = block.inputs.get("TOUCHINGOBJECTMENU")
    if menu is not None and menu.is_block:
        return f"{R}.touching({compile_input(block, 'TOUCHINGOBJECTMENU', InputShape.ANY, ctx)})", InputShape.BOOLEAN
    value = field_value(block, "TOUCHINGOBJECTMENU")
    if value == "_mouse_":
        return f'{R}.touching("mouse")', InputShape.BOOLEAN
    if value == "_edge_":
        return f'{R}.touching("edge")', InputShape.BOOLEAN
    return f"{R}.touching({_sprite_reference(block, ctx, value)}.andClones())", InputShape.BOOLEAN


@handles(OpCode.sensing_touchingcolor)
def _touching_color(block, ctx, desired):
    return f"{R}.touching({_color(block, 'COLOR', ctx)})", InputShape.BOOLEAN


@handles(OpCode.sensing_coloristouchingcolor)
def _color_touching_color(block, ctx, desired):
    color1 = _color(block, "COLOR", ctx)
    color2 = _color(block, "COLOR2", ctx)
    return f"{R}.colorTouching({color1}, {color2})", InputShape.BOOLEAN


@handles(OpCode.sensing_distanceto)
def _distance_to(block, ctx, desired):
    value = field_value(block, "DISTANCETOMENU")
    if value == "_mouse_":
        coords = f"{R}.mouse"
    else:
        coords = _sprite_reference(block, ctx, value)
    return f"math.hypot({coords}.x - {R}.x, {coords}.y - {R}.y)", InputShape.NUMBER


@handles(OpCode.sensing_askandwait)
def _ask(block, ctx, desired):
    return f"{R}.askAndWait({compile_input(block, 'QUESTION', InputShape.ANY, ctx)})", InputShape.STACK


@handles(OpCode.sensing_answer)
def _answer(block, ctx, desired):
    return f"{R}.answer", InputShape.STRING


@handles(OpCode.sensing_keypressed)
def _key_pressed(block, ctx, desired):
    return f"{R}.keyPressed({compile_input(block, 'KEY_OPTION', InputShape.STRING, ctx)})", InputShape.BOOLEAN


@handles(OpCode.sensing_mousedown)
def _mouse_down(block, ctx, desired):
    return f"{R}.mouse.down", InputShape.BOOLEAN


@handles(OpCode.sensing_mousex, OpCode.sensing_mousey)
def _mouse_xy(block, ctx, desired):
    axis = "x" if block.opcode == OpCode.sensing_mousex else "y"
    return f"{R}.mouse.{axis}", InputShape.NUMBER


@handles(OpCode.sensing_loudness)
def _loudness(block, ctx, desired):
    return f"{R}.loudness", InputShape.NUMBER


@handles(OpCode.sensing_timer)
def _timer(block, ctx, desired):
    return f"{R}.timer", InputShape.NUMBER


@handles(OpCode.sensing_resettimer)
def _reset_timer(block, ctx, desired):
    return f"{R}.restartTimer()", InputShape.STACK


_OF_PROPERTIES = {
    "x position": ("x", InputShape.NUMBER),
    "y position": ("y", InputShape.NUMBER),
    "direction": ("direction", InputShape.NUMBER),
    "costume #": ("costumeNumber", InputShape.NUMBER),
    "backdrop #": ("costumeNumber", InputShape.NUMBER),
    "costume name": ("costume.name", InputShape.STRING),
    "backdrop name": ("costume.name", InputShape.STRING),
    "size": ("size", InputShape.NUMBER),
}


@handles(OpCode.sensing_of)
def _of(block, ctx, desired):
    prop = field_value(block, "PROPERTY")
    obj_input = block.inputs.get("OBJECT")
    if obj_input is not None and obj_input.is_block:
        warn(ctx, block, "Cannot read a property of a computed target")
        return f"# Cannot access property {prop} of target", InputShape.ANY
    obj = field_value(block, "OBJECT")

    if prop in _OF_PROPERTIES:
        prop_name, shape = _OF_PROPERTIES[prop]
    elif prop == "volume":
        warn(ctx, block, f"Cannot access property {prop} of target")
        return f"# Cannot access property {prop} of target", InputShape.ANY
    else:
        # Variables are looked up by name here, never by id, the same way
        # Scratch resolves the "of" block at run time.
        owner = ctx.compilation.project.stage if obj == "_stage_" else ctx.compilation.find_target(obj)
        variable = None
        if owner is not None:
            variable = next((v for v in owner.variables if v.name == prop), None)
        if variable is None:
            warn(ctx, block, f"Cannot access property {prop} of {obj}")
            return f"# Cannot access property {prop} of target", InputShape.ANY
        prop_name, shape = f"vars.{ctx.compilation.variable_names[variable.id]}", InputShape.ANY

    if obj == "_stage_":
        target_obj = f"{R}.stage"
    else:
        target_obj = _sprite_reference(block, ctx, obj)
    return f"{target_obj}.{prop_name}", shape


_CURRENT = {
    "YEAR": "datetime.datetime.now().year",
    "MONTH": "datetime.datetime.now().month",
    "DATE": "datetime.datetime.now().day",
    "DAYOFWEEK": "(datetime.datetime.now().isoweekday() % 7 + 1)",
    "HOUR": "datetime.datetime.now().hour",
    "MINUTE": "datetime.datetime.now().minute",
    "SECOND": "datetime.datetime.now().second",
}


@handles(OpCode.sensing_current)
def _current(block, ctx, desired):
    source = _CURRENT.get(field_value(block, "CURRENTMENU").upper())
    if source is None:
        return '""', InputShape.STRING
    return source, InputShape.NUMBER


@handles(OpCode.sensing_dayssince2000)
def _days_since_2000(block, ctx, desired):
    return (
        "((datetime.datetime.now() - datetime.datetime(2000, 1, 1)).total_seconds() / 86400)",
        InputShape.NUMBER,
    )


@handles(OpCode.sensing_username)
def _username(block, ctx, desired):
    return '""', InputShape.STRING


@handles(OpCode.sensing_userid)
def _userid(block, ctx, desired):
    return "None", InputShape.ANY


# Operators --------------------------------------------------------------

@handles(OpCode.operator_add)
def _add(block, ctx, desired):
    if desired == InputShape.INDEX:
        # Absorb the 0-based adjustment into a literal operand.
        num2 = literal_number(block.inputs.get("NUM2"))
        if num2 is not None:
            left = compile_input(block, "NUM1", InputShape.NUMBER, ctx)
            if num2 == 1:
                return left, InputShape.INDEX
            return _offset(left, num2 - 1), InputShape.INDEX
        num1 = literal_number(block.inputs.get("NUM1"))
        if num1 is not None:
            right = compile_input(block, "NUM2", InputShape.NUMBER, ctx)
            if num1 == 1:
                return right, InputShape.INDEX
            return f"{format_number(num1 - 1)} + {right}", InputShape.INDEX
    return _binary(block, "+", ctx), InputShape.NUMBER


@handles(OpCode.operator_subtract)
def _subtract(block, ctx, desired):
    if desired == InputShape.INDEX:
        num2 = literal_number(block.inputs.get("NUM2"))
        if num2 is not None:
            left = compile_input(block, "NUM1", InputShape.NUMBER, ctx)
            if num2 == -1:
                return left, InputShape.INDEX
            return _offset(left, -(num2 + 1)), InputShape.INDEX
        num1 = literal_number(block.inputs.get("NUM1"))
        if num1 is not None:
            right = compile_input(block, "NUM2", InputShape.NUMBER, ctx)
            if num1 == 1:
                # (1 - x) - 1 == -x
                return f"-{right}", InputShape.INDEX
            return f"{format_number(num1 - 1)} - {right}", InputShape.INDEX
    return _binary(block, "-", ctx), InputShape.NUMBER


@handles(OpCode.operator_multiply)
def _multiply(block, ctx, desired):
    return _binary(block, "*", ctx), InputShape.NUMBER


@handles(OpCode.operator_divide)
def _divide(block, ctx, desired):
    return _binary(block, "/", ctx), InputShape.NUMBER


@handles(OpCode.operator_mod)
def _mod(block, ctx, desired):
    return _binary(block, "%", ctx), InputShape.NUMBER


@handles(OpCode.operator_random)
def _random(block, ctx, desired):
    low = compile_input(block, "FROM", InputShape.NUMBER, ctx)
    high = compile_input(block, "TO", InputShape.NUMBER, ctx)
    return f"random.randint({low}, {high})", InputShape.NUMBER


@handles(OpCode.operator_gt)
def _gt(block, ctx, desired):
    return _compare(block, ">", ctx), InputShape.BOOLEAN


@handles(OpCode.operator_lt)
def _lt(block, ctx, desired):
    return _compare(block, "<", ctx), InputShape.BOOLEAN


@handles(OpCode.operator_equals)
def _equals(block, ctx, desired):
    return _compare(block, "==", ctx), InputShape.BOOLEAN


@handles(OpCode.operator_and, OpCode.operator_or)
def _and_or(block, ctx, desired):
    op = "and" if block.opcode == OpCode.operator_and else "or"
    a = compile_input(block, "OPERAND1", InputShape.BOOLEAN, ctx)
    b = compile_input(block, "OPERAND2", InputShape.BOOLEAN, ctx)
    return f"({a} {op} {b})", InputShape.BOOLEAN


@handles(OpCode.operator_not)
def _not(block, ctx, desired):
    return f"(not {compile_input(block, 'OPERAND', InputShape.BOOLEAN, ctx)})", InputShape.BOOLEAN


@handles(OpCode.operator_join)
def _join(block, ctx, desired):
    a = compile_input(block, "STRING1", InputShape.STRING, ctx)
    b = compile_input(block, "STRING2", InputShape.STRING, ctx)
    return f"({a} + {b})", InputShape.STRING


@handles(OpCode.operator_letter_of)
def _letter_of(block, ctx, desired):
    string = compile_input(block, "STRING", InputShape.STRING, ctx)
    index = compile_input(block, "LETTER", InputShape.INDEX, ctx)
    return f"{R}.letterOf({string}, {index})", InputShape.STRING


@handles(OpCode.operator_length)
def _length(block, ctx, desired):
    return f"len({compile_input(block, 'STRING', InputShape.STRING, ctx)})", InputShape.NUMBER


@handles(OpCode.operator_contains)
def _contains(block, ctx, desired):
    haystack = compile_input(block, "STRING1", InputShape.STRING, ctx)
    needle = compile_input(block, "STRING2", InputShape.STRING, ctx)
    return f"{R}.stringIncludes({haystack}, {needle})", InputShape.BOOLEAN


@handles(OpCode.operator_round)
def _round(block, ctx, desired):
    # Half rounds up, as in JavaScript; Python's round() would round to even.
    return f"math.floor({compile_input(block, 'NUM', InputShape.NUMBER, ctx)} + 0.5)", InputShape.NUMBER


_MATHOPS = {
    "abs": "abs({})",
    "floor": "math.floor({})",
    "ceiling": "math.ceil({})",
    "sqrt": "math.sqrt({})",
    "sin": "round(math.sin(math.radians({})), 10)",
    "cos": "round(math.cos(math.radians({})), 10)",
    "tan": "math.tan(math.radians({}))",
    "asin": "math.degrees(math.asin({}))",
    "acos": "math.degrees(math.acos({}))",
    "atan": "math.degrees(math.atan({}))",
    "ln": "math.log({})",
    "log": "math.log10({})",
    "e ^": "math.exp({})",
    "10 ^": "(10 ** {})",
}


@handles(OpCode.operator_mathop)
def _mathop(block, ctx, desired):
    operator = field_value(block, "OPERATOR")
    template = _MATHOPS.get(operator)
    if template is None:
        warn(ctx, block, f"Unknown math operation '{operator}'")
        return f"# TODO: Implement math operation {operator}", InputShape.ANY
    return template.format(compile_input(block, "NUM", InputShape.NUMBER, ctx)), InputShape.NUMBER


# Data -------------------------------------------------------------------

@handles(OpCode.data_variable)
def _variable(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return name, InputShape.ANY


@handles(OpCode.data_setvariableto)
def _set_variable(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f"{name} = {compile_input(block, 'VALUE', InputShape.ANY, ctx)}", InputShape.STACK


@handles(OpCode.data_changevariableby)
def _change_variable(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return increase(name, block, "VALUE", ctx), InputShape.STACK


@handles(OpCode.data_showvariable, OpCode.data_showlist, OpCode.data_hidevariable, OpCode.data_hidelist)
def _watcher_visibility(block, ctx, desired):
    _, watcher = _selected_variable(block, ctx)
    visible = block.opcode in (OpCode.data_showvariable, OpCode.data_showlist)
    return f"{watcher}.visible = {visible}", InputShape.STACK


@handles(OpCode.data_listcontents)
def _list_contents(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f'" ".join(str(item) for item in {name})', InputShape.STRING


@handles(OpCode.data_addtolist)
def _add_to_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f"{name}.append({compile_input(block, 'ITEM', InputShape.ANY, ctx)})", InputShape.STACK


# Positional list edits go through the runtime, which truncates the index
# and ignores positions outside the list the way Scratch does.

@handles(OpCode.data_deleteoflist)
def _delete_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    # Projects converted from Scratch 2 can carry "all" or "last" here.
    index = field_value(block, "INDEX")
    if index == "all":
        return f"{name}.clear()", InputShape.STACK
    if index == "last":
        return f"{R}.deleteOf({name}, len({name}) - 1)", InputShape.STACK
    return f"{R}.deleteOf({name}, {compile_input(block, 'INDEX', InputShape.INDEX, ctx)})", InputShape.STACK


@handles(OpCode.data_deletealloflist)
def _delete_all_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f"{name}.clear()", InputShape.STACK


@handles(OpCode.data_insertatlist)
def _insert_at_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    item = compile_input(block, "ITEM", InputShape.ANY, ctx)
    if field_value(block, "INDEX") == "last":
        return f"{name}.append({item})", InputShape.STACK
    index = compile_input(block, "INDEX", InputShape.INDEX, ctx)
    return f"{R}.insertAt({name}, {index}, {item})", InputShape.STACK


@handles(OpCode.data_replaceitemoflist)
def _replace_item_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    item = compile_input(block, "ITEM", InputShape.ANY, ctx)
    if field_value(block, "INDEX") == "last":
        return f"{R}.replaceAt({name}, len({name}) - 1, {item})", InputShape.STACK
    index = compile_input(block, "INDEX", InputShape.INDEX, ctx)
    return f"{R}.replaceAt({name}, {index}, {item})", InputShape.STACK


@handles(OpCode.data_itemoflist)
def _item_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    if field_value(block, "INDEX") == "last":
        return f"{R}.itemOf({name}, len({name}) - 1)", InputShape.ANY
    return f"{R}.itemOf({name}, {compile_input(block, 'INDEX', InputShape.INDEX, ctx)})", InputShape.ANY


@handles(OpCode.data_itemnumoflist)
def _item_num_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    item = compile_input(block, "ITEM", InputShape.ANY, ctx)
    if desired == InputShape.INDEX:
        return f"{R}.indexInArray({name}, {item})", InputShape.INDEX
    return f"({R}.indexInArray({name}, {item}) + 1)", InputShape.NUMBER


@handles(OpCode.data_lengthoflist)
def _length_of_list(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f"len({name})", InputShape.NUMBER


@handles(OpCode.data_listcontainsitem)
def _list_contains_item(block, ctx, desired):
    name, _ = _selected_variable(block, ctx)
    return f"{R}.arrayIncludes({name}, {compile_input(block, 'ITEM', InputShape.ANY, ctx)})", InputShape.BOOLEAN


# Custom blocks ----------------------------------------------------------

@handles(OpCode.procedures_call)
def _call(block, ctx, desired):
    proccode = field_value(block, "PROCCODE")
    definition = next(
        (
            script for script in ctx.target.scripts
            if script.is_procedure and field_value(script.hat, "PROCCODE") == proccode
        ),
        None,
    )
    if definition is None:
        raise UnknownProcedureError(proccode, ctx.target.name)

    parameters = definition.hat.inputs.get("ARGUMENTS")
    kinds = [arg.type for arg in (parameters.value if parameters else []) if arg.type != "label"]
    values = block.inputs.get("INPUTS")
    args = []
    for idx, value in enumerate(values.value if values is not None else []):
        shape = InputShape.BOOLEAN if idx < len(kinds) and kinds[idx] == "boolean" else InputShape.ANY
        args.append(input_to_python(value, shape, ctx))
    arg_list = ", ".join(args)

    # Warp-ness carries over to everything a warp procedure calls.
    if ctx.warp:
        return f"{R}.warp({definition.name})({arg_list})", InputShape.STACK
    return f"{definition.name}({arg_list})", InputShape.STACK


@handles(OpCode.argument_reporter_string_number, OpCode.argument_reporter_boolean)
def _argument(block, ctx, desired):
    # Reporters dragged outside their definition report 0.
    if ctx.script is None:
        return "0", InputShape.NUMBER
    name = ctx.compilation.argument_names.get(ctx.script, {}).get(field_value(block, "VALUE"))
    if name is None:
        return "0", InputShape.NUMBER
    if block.opcode == OpCode.argument_reporter_boolean:
        return name, InputShape.BOOLEAN
    return name, InputShape.ANY


# Pen --------------------------------------------------------------------

@handles(OpCode.pen_clear)
def _pen_clear(block, ctx, desired):
    return f"{R}.clearPen()", InputShape.STACK


@handles(OpCode.pen_stamp)
def _pen_stamp(block, ctx, desired):
    return f"{R}.stamp()", InputShape.STACK


@handles(OpCode.pen_penDown, OpCode.pen_penUp)
def _pen_up_down(block, ctx, desired):
    down = block.opcode == OpCode.pen_penDown
    return f"{R}.penDown = {down}", InputShape.STACK


@handles(OpCode.pen_setPenColorToColor)
def _set_pen_color(block, ctx, desired):
    return f"{R}.penColor = {_color(block, 'COLOR', ctx)}", InputShape.STACK


_PEN_CHANNELS = {"color": "h", "saturation": "s", "brightness": "v"}


@handles(OpCode.pen_changePenColorParamBy)
def _change_pen_color_param(block, ctx, desired):
    param = field_value(block, "colorParam")
    if param in _PEN_CHANNELS:
        return increase(f"{R}.penColor.{_PEN_CHANNELS[param]}", block, "VALUE", ctx), InputShape.STACK
    if param == "transparency":
        value = compile_input(block, "VALUE", InputShape.NUMBER, ctx)
        return f"{R}.penColor.a -= {value} / 100", InputShape.STACK
    warn(ctx, block, f"Unknown pen color parameter '{param}'")
    return NOT_IMPLEMENTED_YET, InputShape.STACK


@handles(OpCode.pen_setPenColorParamTo)
def _set_pen_color_param(block, ctx, desired):
    param = field_value(block, "colorParam")
    value = compile_input(block, "VALUE", InputShape.NUMBER, ctx)
    if param in _PEN_CHANNELS:
        return f"{R}.penColor.{_PEN_CHANNELS[param]} = {value}", InputShape.STACK
    if param == "transparency":
        return f"{R}.penColor.a = 1 - {value} / 100", InputShape.STACK
    warn(ctx, block, f"Unknown pen color parameter '{param}'")
    return NOT_IMPLEMENTED_YET, InputShape.STACK


@handles(OpCode.pen_setPenSizeTo)
def _set_pen_size(block, ctx, desired):
    return f"{R}.penSize = {compile_input(block, 'SIZE', InputShape.NUMBER, ctx)}", InputShape.STACK


@handles(OpCode.pen_changePenSizeBy)
def _change_pen_size(block, ctx, desired):
    return increase(f"{R}.penSize", block, "SIZE", ctx), InputShape.STACK


# Robot blocks register themselves into HANDLERS.
from . import marty  # noqa: E402,F401

_missing = sorted(op.value for op in OpCode if op not in HANDLERS)
if _missing:
    raise RuntimeError(f"Opcodes without a handler: {', '.join(_missing)}")
