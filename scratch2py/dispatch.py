"""Opcode dispatch for block-to-Python code generation.

Every opcode maps to a handler ``(block, ctx, desired) -> (source, shape)``.
Handlers return flat, unindented source: a statement that opens a body ends
with ":" and the body is closed with ``DEDENT_SENTINEL``; the indentation
pass turns that into nested Python.

Handlers live in ``transpiler`` and ``marty`` and register themselves with
``@handles``.
"""

from typing import Callable, Dict, List, Optional, Tuple

from .constants import DEDENT_SENTINEL
from .context import BlockContext
from .model import Block, BlockInput
from .shapes import InputShape, literal_to_python, resolve, static_number

Handler = Callable[[Block, BlockContext, Optional[InputShape]], Tuple[str, InputShape]]

HANDLERS: Dict[str, Handler] = {}


def handles(*opcodes: str) -> Callable[[Handler], Handler]:
    """Register the decorated function as the handler for ``opcodes``."""
    def register(func: Handler) -> Handler:
        for opcode in opcodes:
            if opcode in HANDLERS:
                raise ValueError(f"Opcode {opcode} already has a handler")
            HANDLERS[opcode] = func
        return func
    return register


def _is_expression(shape: Optional[InputShape]) -> bool:
    return shape is not None and shape != InputShape.STACK


def _missing_value(desired: Optional[InputShape]) -> str:
    return resolve("None", InputShape.ANY, desired)


def block_to_python(block: Block, ctx: BlockContext, desired: Optional[InputShape] = None) -> str:
    handler = HANDLERS.get(block.opcode)
    if handler is None:
        warn(ctx, block, f"Unknown block '{block.opcode}'")
        source, shape = f"# TODO: Implement {block.opcode}", InputShape.ANY
    else:
        source, shape = handler(block, ctx, desired)

    # A comment can't stand in for a value; None keeps the expression valid.
    if _is_expression(desired) and source.lstrip().startswith("#"):
        return _missing_value(desired)
    return resolve(source, shape, desired)


def input_to_python(block_input: Optional[BlockInput], desired: Optional[InputShape], ctx: BlockContext) -> str:
    if block_input is None:
        return _missing_value(desired)
    if block_input.is_block:
        if block_input.value is None:
            return _missing_value(desired)
        return block_to_python(block_input.value, ctx, desired)
    if block_input.is_stack:
        return stack_to_python(block_input.value or [], ctx)
    source, _ = literal_to_python(block_input.value, desired)
    return source


def _is_statement(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#") and DEDENT_SENTINEL not in stripped


def stack_to_python(blocks: List[Block], ctx: BlockContext) -> str:
    """Source for a statement sequence; ``pass`` when nothing would execute."""
    source = "\n".join(block_to_python(block, ctx) for block in blocks)
    if not any(_is_statement(line) for line in source.splitlines()):
        source = f"{source}\npass" if source.strip() else "pass"
    return source


def compile_input(block: Block, name: str, desired: Optional[InputShape], ctx: BlockContext) -> str:
    """Source for the input ``name`` of ``block``, warning when it is missing."""
    block_input = block.inputs.get(name)
    if block_input is None:
        warn(ctx, block, f"Missing input {name}")
    return input_to_python(block_input, desired, ctx)


def field_value(block: Block, name: str) -> str:
    """The static value of a menu or field input, as text."""
    block_input = block.inputs.get(name)
    if block_input is None or block_input.is_block or block_input.value is None:
        return ""
    return str(block_input.value)


def literal_number(block_input: Optional[BlockInput]) -> Optional[float]:
    """The number a primitive input stands for; None for reporters and non-numbers."""
    if block_input is None or not block_input.is_primitive:
        return None
    return static_number(block_input.value)


def warn(ctx: BlockContext, block: Block, message: str) -> None:
    script = ctx.script.name if ctx.script is not None else None
    ctx.diagnostics.warning(message, ctx.target.name, script, block.id)
