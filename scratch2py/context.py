"""Renaming phase and the read-only context threaded through code generation."""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Set

from .constants import (
    GENERATED_MODULE_NAMES,
    PYTHON_RESERVED_WORDS,
    RUNTIME_RESERVED_NAMES,
    SPRITE_RESERVED_NAMES,
)
from .diagnostics import DiagnosticContext
from .model import INPUT_ARGUMENTS, Project, Script, Target
from .naming import IdentifierAllocator, camel_case
from .opcodes import OpCode
from .options import TranspileOptions


@dataclass(frozen=True)
class CompilationContext:
    """Lookup tables built once by ``rename_project`` and only read afterwards."""

    project: Project
    options: TranspileOptions
    diagnostics: DiagnosticContext
    # imported sprite name -> generated name
    target_names: Mapping[str, str]
    # variable/list id -> generated name
    variable_names: Mapping[str, str]
    stage_variable_ids: FrozenSet[str]
    # script -> {imported parameter name -> generated name}
    argument_names: Mapping[Script, Mapping[str, str]]

    def is_local(self, variable_id: str, target: Target) -> bool:
        """Whether ``target`` owns the variable, as opposed to reading a Stage one."""
        return target.is_stage or variable_id not in self.stage_variable_ids

    def find_target(self, imported_name: str) -> Optional[Target]:
        new_name = self.target_names.get(imported_name)
        if new_name is None:
            return None
        return next((t for t in self.project.targets if t.name == new_name), None)


@dataclass(frozen=True)
class BlockContext:
    """Where a block sits: passed by value down the transpiler recursion."""

    compilation: CompilationContext
    target: Target
    script: Optional[Script] = None
    warp: bool = False

    def for_script(self, script: Script) -> "BlockContext":
        return replace(self, script=script, warp=script.warp)

    @property
    def diagnostics(self) -> DiagnosticContext:
        return self.compilation.diagnostics


def rename_project(
    project: Project,
    options: Optional[TranspileOptions] = None,
    diagnostics: Optional[DiagnosticContext] = None,
) -> CompilationContext:
    """Give every sprite, variable, script and parameter a unique Python name.

    Target, script and parameter names are rewritten in place. Renaming
    always starts from the imported names, so running it again on the same
    graph yields the same names.
    """
    sprite_names = IdentifierAllocator(SPRITE_RESERVED_NAMES | PYTHON_RESERVED_WORDS)
    target_names: Dict[str, str] = {}
    variable_names: Dict[str, str] = {}
    argument_names: Dict[Script, Mapping[str, str]] = {}

    stage_variable_ids = frozenset(
        data.id for data in [*project.stage.variables, *project.stage.lists]
    )

    for target in project.targets:
        new_target_name = sprite_names.allocate(camel_case(target.source_name, upper=True))
        target_names[target.source_name] = new_target_name
        target.set_name(new_target_name)

        # Variables become module-level names of the generated file.
        unique_variable_name = IdentifierAllocator(PYTHON_RESERVED_WORDS | GENERATED_MODULE_NAMES)
        for data in [*target.lists, *target.variables]:
            variable_names[data.id] = unique_variable_name.allocate(camel_case(data.name))

        # Scripts become functions next to those variables, and must also
        # stay clear of what the runtime exposes on every target.
        unique_script_name = IdentifierAllocator(
            RUNTIME_RESERVED_NAMES
            | PYTHON_RESERVED_WORDS
            | GENERATED_MODULE_NAMES
            | unique_variable_name.used
        )

        script_names: Set[str] = set()
        for script in target.scripts:
            script.set_name(unique_script_name.allocate(camel_case(script.source_name)))
            script_names.add(script.name)

        # Parameters must not hide a module variable or a procedure the body calls.
        hidden_names = unique_variable_name.used | script_names

        for script in target.scripts:
            unique_param_name = IdentifierAllocator(
                PYTHON_RESERVED_WORDS | GENERATED_MODULE_NAMES | hidden_names
            )
            arg_map: Dict[str, str] = {}
            for block in script.blocks:
                if block.opcode != OpCode.procedures_definition:
                    continue
                arguments = block.inputs.get("ARGUMENTS")
                if arguments is None or arguments.type != INPUT_ARGUMENTS:
                    continue
                for argument in arguments.value:
                    if argument.type == "label":
                        continue
                    new_name = unique_param_name.allocate(camel_case(argument.source_name))
                    arg_map[argument.source_name] = new_name
                    argument.set_name(new_name)
            argument_names[script] = MappingProxyType(arg_map)

    return CompilationContext(
        project=project,
        options=options or TranspileOptions(),
        diagnostics=diagnostics if diagnostics is not None else DiagnosticContext(),
        target_names=MappingProxyType(target_names),
        variable_names=MappingProxyType(variable_names),
        stage_variable_ids=stage_variable_ids,
        argument_names=MappingProxyType(argument_names),
    )
