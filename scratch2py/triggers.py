"""Hat blocks to trigger descriptors for the runtime's event scheduler."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .constants import RUNTIME
from .context import BlockContext
from .literals import string_literal
from .model import Script
from .opcodes import OpCode
from .shapes import InputShape, literal_to_python
from .transpiler import input_to_python


class TriggerKind(Enum):
    GREEN_FLAG = "GREEN_FLAG"
    KEY_PRESSED = "KEY_PRESSED"
    CLICKED = "CLICKED"
    BROADCAST = "BROADCAST"
    GREATER_THAN = "GREATER_THAN"
    CLONE_START = "CLONE_START"


@dataclass
class TriggerDescriptor:
    """When a script runs. Option values are Python source text."""

    kind: TriggerKind
    options: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        args = [f"Trigger.{self.kind.value}"]
        args.extend(f"{name}={value}" for name, value in self.options.items())
        return f"@{RUNTIME}.trigger({', '.join(args)})"


def _input_value(script: Script, name: str) -> str:
    block_input = script.hat.inputs.get(name)
    if block_input is None or block_input.value is None:
        return ""
    return str(block_input.value)


def trigger_for(script: Script, ctx: BlockContext) -> Optional[TriggerDescriptor]:
    """Descriptor for the script's hat, or None when nothing starts it automatically."""
    hat = script.hat
    if hat is None:
        return None

    opcode = hat.opcode
    if opcode == OpCode.event_whenflagclicked:
        return TriggerDescriptor(TriggerKind.GREEN_FLAG)
    if opcode == OpCode.event_whenkeypressed:
        return TriggerDescriptor(
            TriggerKind.KEY_PRESSED, {"key": string_literal(_input_value(script, "KEY_OPTION"))}
        )
    if opcode in (OpCode.event_whenthisspriteclicked, OpCode.event_whenstageclicked):
        return TriggerDescriptor(TriggerKind.CLICKED)
    if opcode == OpCode.event_whenbroadcastreceived:
        return TriggerDescriptor(
            TriggerKind.BROADCAST, {"name": string_literal(_input_value(script, "BROADCAST_OPTION"))}
        )
    if opcode == OpCode.event_whengreaterthan:
        value_input = hat.inputs.get("VALUE")
        # A reporter may depend on state that changes, so it is re-evaluated
        # every time the scheduler checks the trigger.
        if value_input is not None and value_input.is_block:
            value = "lambda: " + input_to_python(value_input, InputShape.NUMBER, ctx.for_script(script))
        else:
            value, _ = literal_to_python(
                value_input.value if value_input is not None else 0, InputShape.NUMBER
            )
        channel = _input_value(script, "WHENGREATERTHANMENU").upper()
        return TriggerDescriptor(
            TriggerKind.GREATER_THAN, {"channel": string_literal(channel), "value": value}
        )
    if opcode == OpCode.control_start_as_clone:
        return TriggerDescriptor(TriggerKind.CLONE_START)
    return None
