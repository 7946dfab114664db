"""Handlers for Marty the robot's blocks.

Robot calls use the runtime's snake_case API. Durations are entered in
seconds and the robot expects milliseconds.
"""

import json
from typing import List, Sequence

from .constants import RUNTIME
from .context import BlockContext
from .dispatch import compile_input, handles, warn
from .literals import string_literal
from .model import INPUT_COLOR, Block
from .opcodes import OpCode
from .shapes import InputShape, static_number

R = RUNTIME

SIDES = ["left", "right"]
LEAN_SIDES = ["left", "right", "forward", "back"]
HAND_POSITIONS = ["open", "close"]
JOINTS = [
    "left hip", "left twist", "left knee",
    "right hip", "right twist", "right knee",
    "left arm", "right arm", "eyes",
]
EYE_POSES = {
    "eyesExcited": "excited",
    "eyesWide": "wide",
    "eyesAngry": "angry",
    "wiggleEyes": "wiggle",
    "eyesNormal": "normal",
}

# The colour the LED picker shows for an unlit LED
PICKER_OFF_COLOUR = "#5ba591"

UNAVAILABLE = "  # not implemented in python"


def _choice(block: Block, name: str, options: List[str], ctx: BlockContext) -> str:
    """Quoted option picked by a numeric menu input."""
    block_input = block.inputs.get(name)
    if block_input is not None and block_input.is_primitive:
        n = static_number(block_input.value)
        if n is not None and float(n).is_integer() and 0 <= n < len(options):
            return string_literal(options[int(n)])
        warn(ctx, block, f"Menu value {block_input.value!r} is out of range")
        return "None"
    index = compile_input(block, name, InputShape.NUMBER, ctx)
    return f"{json.dumps(options)}[int({index})]"


def _millis(block: Block, name: str, ctx: BlockContext) -> str:
    return f"{compile_input(block, name, InputShape.NUMBER, ctx)} * 1000"


def _rgb_tuple(block: Block, name: str, ctx: BlockContext) -> str:
    block_input = block.inputs.get(name)
    if block_input is not None and block_input.type == INPUT_COLOR and isinstance(block_input.value, dict):
        rgb = block_input.value
        return f"({rgb.get('r', 0)}, {rgb.get('g', 0)}, {rgb.get('b', 0)})"
    return compile_input(block, name, InputShape.ANY, ctx)


def _call(name: str, args: Sequence[str] = (), unavailable: bool = False) -> str:
    source = f"{R}.{name}({', '.join(args)})"
    return source + UNAVAILABLE if unavailable else source


# Motion -----------------------------------------------------------------

@handles(OpCode.mv2_dance)
def _dance(block, ctx, desired):
    return _call("dance"), InputShape.STACK


@handles(OpCode.mv2_getReady)
def _get_ready(block, ctx, desired):
    return _call("get_ready"), InputShape.STACK


@handles(OpCode.mv2_wiggle)
def _wiggle(block, ctx, desired):
    return _call("wiggle"), InputShape.STACK


@handles(OpCode.mv2_circle)
def _circle(block, ctx, desired):
    side = _choice(block, "SIDE", SIDES, ctx)
    return _call("circle_dance", [side, _millis(block, "MOVETIME", ctx)]), InputShape.STACK


@handles(OpCode.mv2_eyes)
def _eyes(block, ctx, desired):
    command = block.inputs.get("COMMAND")
    if command is not None and command.is_primitive:
        pose = EYE_POSES.get(str(command.value))
        if pose is None:
            warn(ctx, block, f"Unknown eye pose {command.value!r}")
            return _call("eyes", ["None"]), InputShape.STACK
        return _call("eyes", [string_literal(pose)]), InputShape.STACK
    return _call("eyes", [compile_input(block, "COMMAND", InputShape.STRING, ctx)]), InputShape.STACK


@handles(OpCode.mv2_kick, OpCode.mv2_liftFoot, OpCode.mv2_lowerFoot, OpCode.mv2_wave)
def _one_sided(block, ctx, desired):
    names = {
        OpCode.mv2_kick: "kick",
        OpCode.mv2_liftFoot: "lift_foot",
        OpCode.mv2_lowerFoot: "lower_foot",
        OpCode.mv2_wave: "wave",
    }
    return _call(names[block.opcode], [_choice(block, "SIDE", SIDES, ctx)]), InputShape.STACK


@handles(OpCode.mv2_hold)
def _hold(block, ctx, desired):
    return _call("hold_position", [_millis(block, "MOVETIME", ctx)]), InputShape.STACK


@handles(OpCode.mv2_standStraight)
def _stand_straight(block, ctx, desired):
    return _call("stand_straight", [_millis(block, "MOVETIME", ctx)]), InputShape.STACK


@handles(OpCode.mv2_lean)
def _lean(block, ctx, desired):
    side = _choice(block, "SIDE", LEAN_SIDES, ctx)
    args = [f"direction={side}", f"move_time={_millis(block, 'MOVETIME', ctx)}"]
    return _call("lean", args), InputShape.STACK


@handles(OpCode.mv2_moveJoint)
def _move_joint(block, ctx, desired):
    args = [
        f"joint_name_or_num={_choice(block, 'SERVOCHOICE', JOINTS, ctx)}",
        f"position={compile_input(block, 'ANGLE', InputShape.NUMBER, ctx)}",
        f"move_time={_millis(block, 'MOVETIME', ctx)}",
    ]
    return _call("move_joint", args), InputShape.STACK


@handles(OpCode.mv2_slide)
def _slide(block, ctx, desired):
    side = _choice(block, "SIDE", SIDES, ctx)
    return _call("sidestep", [side, compile_input(block, "STEPS", InputShape.NUMBER, ctx)]), InputShape.STACK


@handles(OpCode.mv2_slideMsLength)
def _slide_ms_length(block, ctx, desired):
    args = [
        _choice(block, "SIDE", SIDES, ctx),
        compile_input(block, "STEPS", InputShape.NUMBER, ctx),
        compile_input(block, "STEPLEN", InputShape.NUMBER, ctx),
        _millis(block, "MOVETIME", ctx),
    ]
    return _call("sidestep", args), InputShape.STACK


@handles(OpCode.mv2_turn)
def _turn(block, ctx, desired):
    steps = compile_input(block, "STEPS", InputShape.NUMBER, ctx)
    side = block.inputs.get("SIDE")
    # Side 1 turns right, everything else left.
    if side is not None and side.is_primitive:
        angle = "-20" if static_number(side.value) == 1 else "20"
    else:
        angle = f"(-20 if {compile_input(block, 'SIDE', InputShape.NUMBER, ctx)} == 1 else 20)"
    return _call("walk", [f"num_steps={steps}", f"turn={angle}"]), InputShape.STACK


@handles(OpCode.mv2_walk_fw, OpCode.mv2_walk_bw)
def _walk_straight(block, ctx, desired):
    steps = compile_input(block, "STEPS", InputShape.NUMBER, ctx)
    length = "25" if block.opcode == OpCode.mv2_walk_fw else "-25"
    return _call("walk", [f"num_steps={steps}", "turn=0", f"step_length={length}"]), InputShape.STACK


@handles(OpCode.mv2_walk)
def _walk(block, ctx, desired):
    turn_input = block.inputs.get("TURN")
    if turn_input is not None and turn_input.is_primitive:
        # The robot refuses turns sharper than 25 degrees either way.
        value = static_number(turn_input.value) or 0
        turn = str(int(max(-25, min(25, value))))
    else:
        turn = f"max(-25, min(25, int({compile_input(block, 'TURN', InputShape.NUMBER, ctx)})))"
    args = [
        f"num_steps={compile_input(block, 'STEPS', InputShape.NUMBER, ctx)}",
        f"turn={turn}",
        f"step_length={compile_input(block, 'STEPLEN', InputShape.NUMBER, ctx)}",
        f"move_time={_millis(block, 'MOVETIME', ctx)}",
    ]
    return _call("walk", args), InputShape.STACK


@handles(OpCode.mv2_gripperArmBasic)
def _gripper(block, ctx, desired):
    position = _choice(block, "HAND_POSITION", HAND_POSITIONS, ctx)
    return _call("gripper", [position], unavailable=True), InputShape.STACK


@handles(OpCode.mv2_gripperArmTimed)
def _gripper_timed(block, ctx, desired):
    position = _choice(block, "HAND_POSITION", HAND_POSITIONS, ctx)
    return _call("gripper", [position, _millis(block, "MOVETIME", ctx)], unavailable=True), InputShape.STACK


# Lights -----------------------------------------------------------------

@handles(OpCode.mv2_discoChangeBlockPattern)
def _disco_pattern(block, ctx, desired):
    args = [
        f"add_on={compile_input(block, 'BOARDTYPE', InputShape.ANY, ctx)}",
        f"pattern={compile_input(block, 'PATTERN', InputShape.ANY, ctx)}",
    ]
    return _call("disco_named_pattern", args), InputShape.STACK


@handles(OpCode.mv2_LEDEyesColour)
def _led_eyes_colour(block, ctx, desired):
    args = [
        f"color={_rgb_tuple(block, 'COLOUR_LED_EYES', ctx)}",
        f"add_on={compile_input(block, 'BOARDTYPE', InputShape.ANY, ctx)}",
        "api='led'",
    ]
    return _call("disco_color", args), InputShape.STACK


@handles(OpCode.mv2_LEDEyesColour_SpecificLED)
def _led_eyes_specific(block, ctx, desired):
    args = [
        f"color={_rgb_tuple(block, 'COLOUR_LED_EYES', ctx)}",
        f"add_on={compile_input(block, 'BOARDTYPE', InputShape.ANY, ctx)}",
        f"led_id={compile_input(block, 'LED_POSITION', InputShape.ANY, ctx)}",
    ]
    return _call("disco_color_specific_led", args), InputShape.STACK


@handles(OpCode.mv2_LEDEyesColourLEDs)
def _led_eyes_picker(block, ctx, desired):
    colour = block.inputs.get("COLOUR")
    if colour is not None and colour.is_primitive:
        try:
            picked = json.loads(str(colour.value))
        except json.JSONDecodeError:
            picked = colour.value
        # Unlit LEDs are shown in the picker's background colour.
        if isinstance(picked, list):
            picked = ["#000000" if c == PICKER_OFF_COLOUR else c for c in picked]
        elif picked == PICKER_OFF_COLOUR:
            picked = "#000000"
        colours = json.dumps(picked)
    else:
        colours = compile_input(block, "COLOUR", InputShape.ANY, ctx)
    args = [f"colours={colours}", f"add_on={compile_input(block, 'SIDE', InputShape.ANY, ctx)}"]
    return _call("disco_color_eyepicker", args), InputShape.STACK


@handles(OpCode.mv2_discoChangeRegionColour)
def _disco_region(block, ctx, desired):
    args = [
        f"region={compile_input(block, 'REGION', InputShape.ANY, ctx)}",
        f"add_on={compile_input(block, 'BOARDTYPE', InputShape.ANY, ctx)}",
        f"color={_rgb_tuple(block, 'COLOR', ctx)}",
        "api='led'",
    ]
    return _call("disco_color", args), InputShape.STACK


@handles(OpCode.mv2_RGBOperator)
def _rgb_operator(block, ctx, desired):
    # The runtime takes red, blue, green in that order.
    args = [compile_input(block, name, InputShape.ANY, ctx) for name in ("NUM_R", "NUM_B", "NUM_G")]
    return _call("rgb_operator", args), InputShape.ANY


@handles(OpCode.mv2_HSLOperator)
def _hsl_operator(block, ctx, desired):
    args = [compile_input(block, name, InputShape.ANY, ctx) for name in ("NUM_H", "NUM_S", "NUM_L")]
    return _call("hsv_operator", args), InputShape.ANY


@handles(OpCode.mv2_discoChangeBackColour)
def _back_colour(block, ctx, desired):
    args = [f"colour={_rgb_tuple(block, 'COLOR', ctx)}", 'breathe="on"']
    return _call("function_led", args), InputShape.STACK


@handles(OpCode.mv2_discoSetBreatheBackColour)
def _breathe_back_colour(block, ctx, desired):
    args = [
        f"colour={_rgb_tuple(block, 'COLOR', ctx)}",
        'breathe="breathe"',
        f"breath_ms={compile_input(block, 'MILLISECONDS', InputShape.ANY, ctx)}",
    ]
    return _call("function_led", args), InputShape.STACK


@handles(OpCode.mv2_discoTurnOffBackColour)
def _back_colour_off(block, ctx, desired):
    return _call("function_led_off"), InputShape.STACK


# Sound ------------------------------------------------------------------

_SOUND_CALLS = {
    OpCode.mv2_playSoundUntilDone: ("play_sound_until_done", ["SOUND_MENU"]),
    OpCode.mv2_playSound: ("play_sound", ["SOUND_MENU"]),
    OpCode.mv2_playNote: ("play_note", ["NOTES_MENU"]),
    OpCode.mv2_playTone: ("play_tone", ["HZ1", "HZ2", "SECONDS"]),
    OpCode.mv2_stopSounds: ("stop_sound", []),
    OpCode.mv2_changePitchEffect: ("change_pitch_effect", ["VALUE"]),
    OpCode.mv2_setPitchEffect: ("set_pitch_effect", ["VALUE"]),
    OpCode.mv2_clearSoundEffects: ("clear_sound_effects", []),
    OpCode.mv2_changeVolume: ("change_volume", ["VOLUME"]),
    OpCode.mv2_setVolume: ("set_volume", ["VOLUME"]),
    OpCode.text2speech_marty_speakAndWait: ("speak", ["WORDS"]),
}


@handles(*_SOUND_CALLS)
def _sound(block, ctx, desired):
    name, inputs = _SOUND_CALLS[block.opcode]
    args = [compile_input(block, input_name, InputShape.ANY, ctx) for input_name in inputs]
    return _call(name, args, unavailable=True), InputShape.STACK


# Sensors ----------------------------------------------------------------

@handles(OpCode.XAxisMovement, OpCode.YAxisMovement, OpCode.ZAxisMovement)
def _accelerometer(block, ctx, desired):
    axis = {OpCode.XAxisMovement: "0", OpCode.YAxisMovement: "1", OpCode.ZAxisMovement: "2"}[block.opcode]
    return _call("get_accelerometer", ["True", axis]), InputShape.NUMBER


@handles(OpCode.BatteryPercentage)
def _battery(block, ctx, desired):
    return _call("get_battery_remaining"), InputShape.NUMBER


_SENSORS = {
    OpCode.ServoCurrent: ("get_joint_current", InputShape.NUMBER, False),
    OpCode.ServoPosition: ("get_joint_position", InputShape.NUMBER, False),
    OpCode.mv2_obstaclesense: ("foot_obstacle_sensed", InputShape.BOOLEAN, False),
    OpCode.mv2_groundsense: ("foot_on_ground", InputShape.BOOLEAN, False),
    OpCode.mv2_distancesense: ("get_distance_sensor", InputShape.NUMBER, False),
    OpCode.mv2_coloursense: ("get_colour_sensor", InputShape.ANY, True),
    OpCode.mv2_coloursense_hex: ("get_colour_sensor_hex", InputShape.STRING, True),
    OpCode.mv2_coloursenseraw: ("get_colour_sensor_raw", InputShape.ANY, True),
    OpCode.mv2_lightsense: ("get_light_sensor", InputShape.NUMBER, True),
    OpCode.mv2_noisesense: ("get_noise_sensor", InputShape.NUMBER, True),
}


@handles(*_SENSORS)
def _sensor(block, ctx, desired):
    name, shape, unavailable = _SENSORS[block.opcode]
    if unavailable:
        # A trailing comment would swallow the rest of the enclosing expression.
        warn(ctx, block, f"{R}.{name} is not available in the Python runtime")
    return _call(name, [compile_input(block, "SERVOCHOICE", InputShape.ANY, ctx)]), shape
