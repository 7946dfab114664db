from dataclasses import replace

import pytest
from helpers import (
    block,
    call,
    field,
    lst,
    make_project,
    num,
    procedure,
    reporter,
    sprite_context,
    substack,
    text,
    var,
    variable_reporter,
)

from scratch2py.constants import DEDENT_SENTINEL, NOT_IMPLEMENTED_YET
from scratch2py.diagnostics import DiagnosticLevel, UnknownProcedureError
from scratch2py.dispatch import HANDLERS, block_to_python, stack_to_python
from scratch2py.model import BlockInput, ScratchList, Target, Variable
from scratch2py.opcodes import OpCode
from scratch2py.shapes import InputShape


class Scene:
    def __init__(self, scripts=None):
        self.x = Variable("var-x", "X", 0)
        self.items = ScratchList("list-items", "my items", [])
        self.score = Variable("var-score", "score", 0)
        self.sprite = Target(name="Cat", variables=[self.x], lists=[self.items], scripts=list(scripts or []))
        self.project = make_project(self.sprite, stage_variables=[self.score])
        self.compilation, self.ctx = sprite_context(self.project)

    def x_reporter(self):
        return reporter(variable_reporter(self.x))


@pytest.fixture
def scene():
    return Scene()


def flat(*lines):
    return "\n".join(lines)


def test_every_opcode_has_a_handler():
    assert [op for op in OpCode if op not in HANDLERS] == []


# Index folding ----------------------------------------------------------

def test_add_one_folds_into_index(scene):
    add = block("operator_add", NUM1=scene.x_reporter(), NUM2=num(1))
    assert block_to_python(add, scene.ctx, InputShape.INDEX) == "martypy.toNumber(x)"


def test_add_literal_folds_remaining_offset(scene):
    add = block("operator_add", NUM1=scene.x_reporter(), NUM2=num(3))
    assert block_to_python(add, scene.ctx, InputShape.INDEX) == "martypy.toNumber(x) + 2"

    add = block("operator_add", NUM1=num(5), NUM2=scene.x_reporter())
    assert block_to_python(add, scene.ctx, InputShape.INDEX) == "4 + martypy.toNumber(x)"

    add = block("operator_add", NUM1=num(1), NUM2=scene.x_reporter())
    assert block_to_python(add, scene.ctx, InputShape.INDEX) == "martypy.toNumber(x)"


def test_subtract_folds_into_index(scene):
    sub = block("operator_subtract", NUM1=scene.x_reporter(), NUM2=num(1))
    assert block_to_python(sub, scene.ctx, InputShape.INDEX) == "martypy.toNumber(x) - 2"

    sub = block("operator_subtract", NUM1=scene.x_reporter(), NUM2=num(-1))
    assert block_to_python(sub, scene.ctx, InputShape.INDEX) == "martypy.toNumber(x)"

    sub = block("operator_subtract", NUM1=num(1), NUM2=scene.x_reporter())
    assert block_to_python(sub, scene.ctx, InputShape.INDEX) == "-martypy.toNumber(x)"


def test_add_outside_index_is_plain_arithmetic(scene):
    add = block("operator_add", NUM1=scene.x_reporter(), NUM2=num(1))
    assert block_to_python(add, scene.ctx) == "(martypy.toNumber(x) + 1)"


def test_item_of_list_uses_zero_based_index(scene):
    item = block("data_itemoflist", LIST=lst(scene.items), INDEX=num(1))
    assert block_to_python(item, scene.ctx) == "martypy.itemOf(myItems, 0)"

    add = block("operator_add", NUM1=scene.x_reporter(), NUM2=num(1))
    item = block("data_itemoflist", LIST=lst(scene.items), INDEX=reporter(add))
    assert block_to_python(item, scene.ctx) == "martypy.itemOf(myItems, martypy.toNumber(x))"


def test_item_number_is_one_based_unless_used_as_index(scene):
    find = block("data_itemnumoflist", LIST=lst(scene.items), ITEM=text("a"))
    assert block_to_python(find, scene.ctx) == '(martypy.indexInArray(myItems, "a") + 1)'
    assert block_to_python(find, scene.ctx, InputShape.INDEX) == 'martypy.indexInArray(myItems, "a")'


def test_delete_of_list(scene):
    delete = block("data_deleteoflist", LIST=lst(scene.items), INDEX=num(2))
    assert block_to_python(delete, scene.ctx) == "martypy.deleteOf(myItems, 1)"

    delete = block("data_deleteoflist", LIST=lst(scene.items), INDEX=text("all"))
    assert block_to_python(delete, scene.ctx) == "myItems.clear()"

    delete = block("data_deleteoflist", LIST=lst(scene.items), INDEX=text("last"))
    assert block_to_python(delete, scene.ctx) == "martypy.deleteOf(myItems, len(myItems) - 1)"


def test_positional_list_edits_leave_bounds_to_runtime(scene):
    # Position 0 and positions past the end must not reach Python indexing.
    delete = block("data_deleteoflist", LIST=lst(scene.items), INDEX=num(0))
    assert block_to_python(delete, scene.ctx) == "martypy.deleteOf(myItems, -1)"

    insert = block("data_insertatlist", LIST=lst(scene.items), ITEM=text("a"), INDEX=num(99))
    assert block_to_python(insert, scene.ctx) == 'martypy.insertAt(myItems, 98, "a")'

    replace = block("data_replaceitemoflist", LIST=lst(scene.items), ITEM=text("b"), INDEX=scene.x_reporter())
    assert block_to_python(replace, scene.ctx) == 'martypy.replaceAt(myItems, martypy.toNumber(x) - 1, "b")'


def test_insert_at_last_appends(scene):
    insert = block("data_insertatlist", LIST=lst(scene.items), ITEM=text("a"), INDEX=text("last"))
    assert block_to_python(insert, scene.ctx) == 'myItems.append("a")'


# Comparisons ------------------------------------------------------------

def test_equals_with_numeric_literal_is_numeric(scene):
    equals = block("operator_equals", OPERAND1=text("5"), OPERAND2=num(5))
    assert block_to_python(equals, scene.ctx) == "(5 == 5)"

    equals = block("operator_equals", OPERAND1=scene.x_reporter(), OPERAND2=num(10))
    assert block_to_python(equals, scene.ctx) == "(martypy.toNumber(x) == 10)"


def test_comparing_two_reporters_uses_runtime_compare(scene):
    equals = block("operator_equals", OPERAND1=scene.x_reporter(), OPERAND2=scene.x_reporter())
    assert block_to_python(equals, scene.ctx) == "(martypy.compare(x, x) == 0)"

    greater = block("operator_gt", OPERAND1=scene.x_reporter(), OPERAND2=scene.x_reporter())
    assert block_to_python(greater, scene.ctx) == "(martypy.compare(x, x) > 0)"


def test_string_comparison_is_case_insensitive(scene):
    equals = block("operator_equals", OPERAND1=text("Hello"), OPERAND2=reporter(block("sensing_answer")))
    assert block_to_python(equals, scene.ctx) == '("hello" == martypy.answer.lower())'


def test_number_against_non_numeric_literal_compares_as_strings(scene):
    equals = block("operator_equals", OPERAND1=num(0), OPERAND2=text("abc"))
    assert block_to_python(equals, scene.ctx) == '("0" == "abc")'

    less = block("operator_lt", OPERAND1=text("ABC"), OPERAND2=num(7))
    assert block_to_python(less, scene.ctx) == '("abc" < "7")'


# Variables --------------------------------------------------------------

def test_change_variable_folds_sign(scene):
    change = block("data_changevariableby", VARIABLE=var(scene.x), VALUE=num(1))
    assert block_to_python(change, scene.ctx) == "x += 1"

    change = block("data_changevariableby", VARIABLE=var(scene.x), VALUE=num(-2))
    assert block_to_python(change, scene.ctx) == "x -= 2"

    change = block("data_changevariableby", VARIABLE=var(scene.x), VALUE=scene.x_reporter())
    assert block_to_python(change, scene.ctx) == "x += martypy.toNumber(x)"


def test_watchers_of_local_and_stage_variables(scene):
    show = block("data_showvariable", VARIABLE=var(scene.x))
    assert block_to_python(show, scene.ctx) == 'martypy.watchers["x"].visible = True'

    hide = block("data_hidevariable", VARIABLE=var(scene.score))
    assert block_to_python(hide, scene.ctx) == 'martypy.stage.watchers["score"].visible = False'


def test_sprite_reaches_stage_variables_through_runtime(scene):
    change = block("data_changevariableby", VARIABLE=var(scene.score), VALUE=num(1))
    assert block_to_python(change, scene.ctx) == "martypy.stage.vars.score += 1"

    read = block("operator_add", NUM1=reporter(variable_reporter(scene.score)), NUM2=num(1))
    assert block_to_python(read, scene.ctx) == "(martypy.toNumber(martypy.stage.vars.score) + 1)"


def test_list_contents_joins_items(scene):
    contents = block("data_listcontents", LIST=lst(scene.items))
    assert block_to_python(contents, scene.ctx) == '" ".join(str(item) for item in myItems)'


# Control ----------------------------------------------------------------

def test_repeat_loop_closes_its_body(scene):
    repeat = block(
        "control_repeat",
        TIMES=num(3),
        SUBSTACK=substack(block("data_changevariableby", VARIABLE=var(scene.x), VALUE=num(1))),
    )
    assert block_to_python(repeat, scene.ctx) == flat("for _ in range(3):", "x += 1", DEDENT_SENTINEL)


def test_repeat_count_rounding(scene):
    assert block_to_python(block("control_repeat", TIMES=num("2.5")), scene.ctx).startswith("for _ in range(3):")
    assert block_to_python(block("control_repeat", TIMES=text("abc")), scene.ctx).startswith("for _ in range(0):")
    assert block_to_python(block("control_repeat", TIMES=num("Infinity")), scene.ctx).startswith("while True:")

    dynamic = block("control_repeat", TIMES=scene.x_reporter())
    assert block_to_python(dynamic, scene.ctx).startswith("for _ in range(math.floor(martypy.toNumber(x) + 0.5)):")


def test_loops_in_warp_context_have_no_sentinel(scene):
    warp_ctx = replace(scene.ctx, warp=True)
    forever = block("control_forever", SUBSTACK=substack(block("looks_say", MESSAGE=text("hi"))))
    assert block_to_python(forever, warp_ctx) == flat("while True:", 'martypy.say("hi")')


def test_if_else_with_empty_branch(scene):
    branch = block(
        "control_if_else",
        CONDITION=scene.x_reporter(),
        SUBSTACK=substack(block("data_setvariableto", VARIABLE=var(scene.x), VALUE=num(1))),
    )
    assert block_to_python(branch, scene.ctx) == flat(
        "if martypy.toBoolean(x):", "x = 1", DEDENT_SENTINEL, "else:", "pass", DEDENT_SENTINEL,
    )


def test_wait_until_polls(scene):
    wait = block("control_wait_until", CONDITION=reporter(block("sensing_mousedown")))
    assert block_to_python(wait, scene.ctx) == flat("while not martypy.mouse.down:", "time.sleep(0)", DEDENT_SENTINEL)


def test_stop_this_script_returns(scene):
    assert block_to_python(block("control_stop", STOP_OPTION=field("this script")), scene.ctx) == "return"


# Placeholders -----------------------------------------------------------

def test_unknown_opcode_becomes_comment_and_warning(scene):
    assert block_to_python(block("foo_bar"), scene.ctx) == "# TODO: Implement foo_bar"
    warnings = scene.ctx.diagnostics.get_warnings()
    assert len(warnings) == 1
    assert "foo_bar" in warnings[0].message


def test_placeholder_in_expression_position_is_cast_none(scene):
    add = block("operator_add", NUM1=reporter(block("foo_bar")), NUM2=num(2))
    assert block_to_python(add, scene.ctx) == "(martypy.toNumber(None) + 2)"


def test_missing_number_input_is_cast_none(scene):
    add = block("operator_add", NUM2=num(2))
    assert block_to_python(add, scene.ctx) == "(martypy.toNumber(None) + 2)"
    assert "Missing input NUM1" in scene.ctx.diagnostics.get_warnings()[0].message


def test_unsupported_block_keeps_body_valid(scene):
    source = stack_to_python([block("motion_movesteps", STEPS=num(10))], scene.ctx)
    assert source == flat(NOT_IMPLEMENTED_YET, "pass")
    assert scene.ctx.diagnostics.diagnostics[0].level == DiagnosticLevel.INFO


def test_empty_stack_is_pass(scene):
    assert stack_to_python([], scene.ctx) == "pass"


def test_missing_input_is_reported(scene):
    assert block_to_python(block("looks_say"), scene.ctx) == "martypy.say(None)"
    assert "Missing input MESSAGE" in scene.ctx.diagnostics.get_warnings()[0].message


# Sensing ----------------------------------------------------------------

def test_sensing_of_stage_variable(scene):
    of = block("sensing_of", OBJECT=BlockInput("menu", "_stage_"), PROPERTY=field("score"))
    assert block_to_python(of, scene.ctx) == "martypy.stage.vars.score"


def test_sensing_of_sprite_property(scene):
    of = block("sensing_of", OBJECT=BlockInput("menu", "Cat"), PROPERTY=field("x position"))
    assert block_to_python(of, scene.ctx) == 'martypy.sprites["Cat"].x'


def test_sensing_of_unknown_property_warns(scene):
    of = block("sensing_of", OBJECT=BlockInput("menu", "_stage_"), PROPERTY=field("volume"))
    assert block_to_python(of, scene.ctx) == "# Cannot access property volume of target"
    assert scene.ctx.diagnostics.has_warnings()


# Custom blocks ----------------------------------------------------------

def procedure_scene(warp=False):
    hop = procedure("hop %s", [("label", "hop"), ("numberOrString", "height")], warp=warp)
    check = procedure("check %b", [("label", "check"), ("boolean", "flag")])
    return Scene(scripts=[hop, check]), hop


def test_procedure_call():
    scene, _ = procedure_scene()
    assert block_to_python(call("hop %s", num(10)), scene.ctx) == "hop(10)"


def test_procedure_call_casts_boolean_slots():
    scene, _ = procedure_scene()
    assert block_to_python(call("check %b", text("")), scene.ctx) == "check(False)"


def test_procedure_call_inside_warp_procedure():
    scene, _ = procedure_scene()
    warp_ctx = replace(scene.ctx, warp=True)
    assert block_to_python(call("hop %s", num(10)), warp_ctx) == "martypy.warp(hop)(10)"


def test_call_without_definition_is_fatal(scene):
    with pytest.raises(UnknownProcedureError) as excinfo:
        block_to_python(call("missing"), scene.ctx)
    assert excinfo.value.proccode == "missing"
    assert excinfo.value.target_name == "Cat"


def test_argument_reporter_inside_and_outside_its_procedure():
    scene, hop = procedure_scene()
    argument = block("argument_reporter_string_number", VALUE=field("height"))
    assert block_to_python(argument, scene.ctx.for_script(hop)) == "height"
    assert block_to_python(argument, scene.ctx) == "0"


# Robot blocks -----------------------------------------------------------

def test_kick_picks_side_from_menu(scene):
    assert block_to_python(block("mv2_kick", SIDE=num(1)), scene.ctx) == 'martypy.kick("right")'


def test_out_of_range_menu_value_warns(scene):
    assert block_to_python(block("mv2_kick", SIDE=num(5)), scene.ctx) == "martypy.kick(None)"
    assert scene.ctx.diagnostics.has_warnings()


def test_walk_clamps_turn(scene):
    walk = block("mv2_walk", STEPS=num(2), TURN=num(40), STEPLEN=num(30), MOVETIME=num(1.5))
    assert block_to_python(walk, scene.ctx) == (
        "martypy.walk(num_steps=2, turn=25, step_length=30, move_time=1.5 * 1000)"
    )


def test_accelerometer(scene):
    assert block_to_python(block("XAxisMovement"), scene.ctx) == "martypy.get_accelerometer(True, 0)"


def test_led_eyes_colour(scene):
    colour = block(
        "mv2_LEDEyesColour",
        COLOUR_LED_EYES=BlockInput("color", {"r": 255, "g": 0, "b": 0}),
        BOARDTYPE=text("LEDEye"),
    )
    assert block_to_python(colour, scene.ctx) == 'martypy.disco_color(color=(255, 0, 0), add_on="LEDEye", api=\'led\')'


def test_eye_picker_turns_off_colour_black(scene):
    picker = block("mv2_LEDEyesColourLEDs", COLOUR=text('["#5ba591", "#ff0000"]'), SIDE=text("left"))
    assert block_to_python(picker, scene.ctx) == (
        'martypy.disco_color_eyepicker(colours=["#000000", "#ff0000"], add_on="left")'
    )


def test_unavailable_sound_is_marked(scene):
    source = block_to_python(block("mv2_playSound", SOUND_MENU=text("excited")), scene.ctx)
    assert source == 'martypy.play_sound("excited")  # not implemented in python'
