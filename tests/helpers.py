"""Small builders for in-memory projects used across the test modules."""

from typing import Any, List, Optional, Tuple

from scratch2py.context import BlockContext, CompilationContext, rename_project
from scratch2py.model import (
    INPUT_ARGUMENTS,
    INPUT_BLOCK,
    INPUT_BLOCKS,
    INPUT_CALL_VALUES,
    INPUT_LIST,
    INPUT_VARIABLE,
    Block,
    BlockInput,
    ProcedureArgument,
    Project,
    Script,
    ScratchList,
    Target,
    Variable,
    VariableRef,
)

import scratch2py.transpiler  # noqa: F401  registers the block handlers


def num(value: Any) -> BlockInput:
    return BlockInput("number", value)


def text(value: Any) -> BlockInput:
    return BlockInput("string", value)


def field(value: Any) -> BlockInput:
    return BlockInput("field", value)


def reporter(block: Block) -> BlockInput:
    return BlockInput(INPUT_BLOCK, block)


def substack(*blocks: Block) -> BlockInput:
    return BlockInput(INPUT_BLOCKS, list(blocks))


def var(variable: Variable) -> BlockInput:
    return BlockInput(INPUT_VARIABLE, VariableRef(variable.id, variable.name))


def lst(data: ScratchList) -> BlockInput:
    return BlockInput(INPUT_LIST, VariableRef(data.id, data.name))


def block(opcode: str, **inputs: BlockInput) -> Block:
    return Block(opcode=opcode, inputs=dict(inputs))


def variable_reporter(variable: Variable) -> Block:
    return block("data_variable", VARIABLE=var(variable))


def procedure(proccode: str, params: List[Tuple[str, str]], warp: bool = False, body=None, y: float = 0) -> Script:
    """A custom block definition; ``params`` are (type, name) pairs, labels included."""
    hat = block(
        "procedures_definition",
        PROCCODE=text(proccode),
        ARGUMENTS=BlockInput(INPUT_ARGUMENTS, [ProcedureArgument(kind, name) for kind, name in params]),
        WARP=BlockInput("boolean", warp),
    )
    return Script(hat=hat, body=list(body or []), name=proccode.split(" %")[0], y=y)


def call(proccode: str, *values: Optional[BlockInput]) -> Block:
    return block("procedures_call", PROCCODE=text(proccode), INPUTS=BlockInput(INPUT_CALL_VALUES, list(values)))


def green_flag_script(*body: Block, name: str = "when green flag clicked", y: float = 0) -> Script:
    return Script(hat=block("event_whenflagclicked"), body=list(body), name=name, y=y)


def make_project(
    sprite: Optional[Target] = None,
    stage_variables: Optional[List[Variable]] = None,
    stage_scripts: Optional[List[Script]] = None,
) -> Project:
    stage = Target(
        name="Stage",
        is_stage=True,
        variables=list(stage_variables or []),
        scripts=list(stage_scripts or []),
    )
    return Project(stage=stage, sprites=[sprite] if sprite is not None else [])


def sprite_context(project: Project, script: Optional[Script] = None) -> Tuple[CompilationContext, BlockContext]:
    """Rename ``project`` and return a block context inside its first sprite."""
    compilation = rename_project(project)
    target = project.sprites[0] if project.sprites else project.stage
    ctx = BlockContext(compilation, target)
    if script is not None:
        ctx = ctx.for_script(script)
    return compilation, ctx
