"""In-memory project graph consumed by the transpiler.

The graph is built by an importer (see ``project_io``) and handed to the
transpiler as is. The renaming phase mutates ``Target.name``,
``Script.name`` and procedure argument names in place; nothing else in the
graph is ever written by the transpiler.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

# BlockInput type tags with structural meaning. Every other tag is a
# primitive ("string", "number", "boolean", "color", or a menu kind such
# as "key", "costume" or "soundEffect").
INPUT_BLOCK = "block"
INPUT_BLOCKS = "blocks"
INPUT_VARIABLE = "variable"
INPUT_LIST = "list"
INPUT_ARGUMENTS = "arguments"
INPUT_CALL_VALUES = "callValues"
INPUT_COLOR = "color"
INPUT_SOUND_EFFECT = "soundEffect"


@dataclass
class BlockInput:
    """A block input: a nested reporter, a nested stack, or a primitive."""

    type: str
    value: Any = None

    @property
    def is_block(self) -> bool:
        return self.type == INPUT_BLOCK

    @property
    def is_stack(self) -> bool:
        return self.type == INPUT_BLOCKS

    @property
    def is_primitive(self) -> bool:
        return self.type not in (INPUT_BLOCK, INPUT_BLOCKS, INPUT_CALL_VALUES)


@dataclass
class VariableRef:
    """What a VARIABLE or LIST input holds: a reference by id."""

    id: str
    name: str = ""


@dataclass
class ProcedureArgument:
    """One slot of a custom block signature: a label, or a named parameter."""

    type: str
    name: str
    original_name: Optional[str] = field(default=None, repr=False, compare=False)

    def set_name(self, name: str) -> None:
        if self.original_name is None:
            self.original_name = self.name
        self.name = name

    @property
    def source_name(self) -> str:
        return self.name if self.original_name is None else self.original_name


@dataclass(eq=False)
class Block:
    opcode: str
    inputs: Dict[str, BlockInput] = field(default_factory=dict)
    id: str = ""

    def walk(self) -> Iterator["Block"]:
        """Yield this block and every block nested in its inputs, depth first."""
        yield self
        for block_input in self.inputs.values():
            if block_input.type == INPUT_BLOCK and block_input.value is not None:
                yield from block_input.value.walk()
            elif block_input.type == INPUT_BLOCKS:
                for child in block_input.value or []:
                    yield from child.walk()
            elif block_input.type == INPUT_CALL_VALUES:
                for argument in block_input.value or []:
                    if argument is not None and argument.type == INPUT_BLOCK:
                        yield from argument.value.walk()


@dataclass(eq=False)
class Script:
    hat: Optional[Block] = None
    body: List[Block] = field(default_factory=list)
    name: str = "script"
    x: float = 0
    y: float = 0
    original_name: Optional[str] = field(default=None, repr=False, compare=False)

    def set_name(self, name: str) -> None:
        if self.original_name is None:
            self.original_name = self.name
        self.name = name

    @property
    def source_name(self) -> str:
        return self.name if self.original_name is None else self.original_name

    @property
    def blocks(self) -> Iterator[Block]:
        if self.hat is not None:
            yield from self.hat.walk()
        for block in self.body:
            yield from block.walk()

    @property
    def is_procedure(self) -> bool:
        return self.hat is not None and self.hat.opcode == "procedures_definition"

    @property
    def warp(self) -> bool:
        """Whether this script is a procedure defined to run without screen refresh."""
        if not self.is_procedure:
            return False
        warp_input = self.hat.inputs.get("WARP")
        return bool(warp_input and warp_input.value)


@dataclass
class Variable:
    id: str
    name: str
    value: Any = 0
    cloud: bool = False


@dataclass
class ScratchList:
    id: str
    name: str
    value: Any = field(default_factory=list)


@dataclass
class Costume:
    name: str
    md5: str = ""
    ext: str = "svg"


@dataclass
class Sound:
    name: str
    md5: str = ""
    ext: str = "wav"


@dataclass(eq=False)
class Target:
    name: str
    is_stage: bool = False
    scripts: List[Script] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    lists: List[ScratchList] = field(default_factory=list)
    costumes: List[Costume] = field(default_factory=list)
    sounds: List[Sound] = field(default_factory=list)
    original_name: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def blocks(self) -> Iterator[Block]:
        for script in self.scripts:
            yield from script.blocks

    def set_name(self, name: str) -> None:
        if self.original_name is None:
            self.original_name = self.name
        self.name = name

    @property
    def source_name(self) -> str:
        """The name the project was imported with, before any renaming."""
        return self.name if self.original_name is None else self.original_name


@dataclass
class Project:
    stage: Target
    sprites: List["Target"] = field(default_factory=list)

    @property
    def targets(self) -> List["Target"]:
        """Stage first, then sprites in project order."""
        return [self.stage, *self.sprites]
