"""Assemble generated scripts into one Python module per target."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .constants import DEDENT_SENTINEL, RUNTIME
from .context import BlockContext, CompilationContext, rename_project
from .diagnostics import DiagnosticContext
from .indentation import format_indentation
from .literals import string_literal, to_python_literal
from .model import INPUT_ARGUMENTS, Project, Script, Target, VariableRef
from .opcodes import OpCode
from .options import TranspileOptions, relative_reference
from .transpiler import stack_to_python
from .triggers import trigger_for

# Blocks that rebind a module-level variable
ASSIGNING_OPCODES = frozenset({
    OpCode.data_setvariableto,
    OpCode.data_changevariableby,
    OpCode.control_for_each,
})


@dataclass
class CompilationResult:
    """Everything one compilation produced."""
    # "<target>/<target>.py" -> module source
    files: Dict[str, str]
    index: str
    diagnostics: DiagnosticContext = field(default_factory=DiagnosticContext)

    @property
    def artifact(self) -> str:
        return concatenate(self.files)


def order_scripts(scripts: List[Script]) -> List[Script]:
    """Top to bottom as laid out in the editor; ties keep project order."""
    return sorted(scripts, key=lambda script: script.y)


def assigned_variables(script: Script, target: Target, compilation: CompilationContext) -> List[str]:
    """Module-level names the script rebinds. Stage data seen from a sprite is
    written through the runtime, so it needs no declaration."""
    names: List[str] = []
    for block in script.blocks:
        if block.opcode not in ASSIGNING_OPCODES:
            continue
        variable_input = block.inputs.get("VARIABLE")
        ref = variable_input.value if variable_input is not None else None
        if not isinstance(ref, VariableRef) or not compilation.is_local(ref.id, target):
            continue
        name = compilation.variable_names.get(ref.id)
        if name is not None and name not in names:
            names.append(name)
    return names


def parameter_names(script: Script, compilation: CompilationContext) -> List[str]:
    arguments = script.hat.inputs.get("ARGUMENTS") if script.hat is not None else None
    if arguments is None or arguments.type != INPUT_ARGUMENTS:
        return []
    mapping = compilation.argument_names.get(script, {})
    return [mapping[arg.source_name] for arg in arguments.value if arg.type != "label"]


def script_to_python(script: Script, target: Target, compilation: CompilationContext) -> str:
    """One script as a formatted function definition."""
    ctx = BlockContext(compilation, target).for_script(script)
    lines: List[str] = []

    if script.is_procedure:
        params = ", ".join(parameter_names(script, compilation))
        lines.append(f"def {script.name}({params}):")
    else:
        trigger = trigger_for(script, ctx)
        if trigger is not None:
            lines.append(trigger.render())
        lines.append(f"def {script.name}():")

    globals_ = assigned_variables(script, target, compilation)
    if globals_:
        lines.append(f"global {', '.join(globals_)}")
    lines.append(stack_to_python(script.body, ctx))
    lines.append(DEDENT_SENTINEL)

    return format_indentation("\n".join(lines), compilation.options.indent)


def file_header(target: Target, options: TranspileOptions) -> str:
    runtime = relative_reference(options.runtime_url, "sibling")
    return "\n".join([
        f"# {target.name}, generated for {RUNTIME} ({runtime})",
        "import datetime",
        "import math",
        "import random",
        "import time",
        "",
        f"import {RUNTIME}",
        f"from {RUNTIME} import Color, Trigger",
    ])


def target_to_python(target: Target, compilation: CompilationContext) -> str:
    sections = [file_header(target, compilation.options)]

    initial = [
        f"{compilation.variable_names[data.id]} = {to_python_literal(data.value)}"
        for data in [*target.variables, *target.lists]
    ]
    if initial:
        sections.append("\n".join(initial))

    for script in order_scripts(target.scripts):
        sections.append(script_to_python(script, target, compilation))

    return "\n\n\n".join(sections) + "\n"


def target_path(target: Target) -> str:
    return f"{target.name}/{target.name}.py"


def build_index(project: Project, options: TranspileOptions) -> str:
    """Entry module that loads every target and, with autoplay, starts the project."""
    indent = options.indent
    lines = [
        f"# Entry point, generated for {RUNTIME}",
        f"# Runtime: {relative_reference(options.runtime_url, 'index')}",
        f"# Stylesheet: {relative_reference(options.stylesheet_url, 'index')}",
        f"import {RUNTIME}",
        "",
    ]

    def load(target: Target) -> List[str]:
        kind = "Stage" if target.is_stage else "Sprite"
        costumes = ", ".join(
            f"({string_literal(c.name)}, {string_literal(options.get_asset_url('costume', target.name, c.name, c.md5, c.ext))})"
            for c in target.costumes
        )
        sounds = ", ".join(
            f"({string_literal(s.name)}, {string_literal(options.get_asset_url('sound', target.name, s.name, s.md5, s.ext))})"
            for s in target.sounds
        )
        return [
            f"{RUNTIME}.{kind}(",
            f"{indent}{string_literal(target.name)},",
            f"{indent}module={string_literal(options.get_target_path(target.name, 'index'))},",
            f"{indent}costumes=[{costumes}],",
            f"{indent}sounds=[{sounds}],",
            ")",
        ]

    lines.append("stage = " + "\n".join(load(project.stage)))
    lines.append("")
    lines.append("sprites = {")
    for sprite in project.sprites:
        loaded = load(sprite)
        lines.append(f"{indent}{string_literal(sprite.name)}: {loaded[0]}")
        lines.extend(indent + line for line in loaded[1:-1])
        lines.append(f"{indent}),")
    lines.append("}")
    lines.append("")
    lines.append(f"project = {RUNTIME}.Project(stage, sprites)")
    if options.autoplay:
        lines.append("project.run()")
    return "\n".join(lines) + "\n"


def concatenate(files: Dict[str, str]) -> str:
    """All files in one text, one labelled section each, sorted by path."""
    out = []
    for path in sorted(files):
        title = path.split("/")[0]
        out.append(f"######## {title} ########\n{files[path]}\n########\n\n")
    return "".join(out)


def compile_project(
    project: Project,
    options: Optional[TranspileOptions] = None,
    diagnostics: Optional[DiagnosticContext] = None,
) -> CompilationResult:
    """Rename the project in place and generate a module for every target.

    Raises UnknownProcedureError when a custom block call has no
    definition; everything else degrades to placeholders reported in the
    result's diagnostics.
    """
    compilation = rename_project(project, options, diagnostics)

    files: Dict[str, str] = {}
    for target in project.targets:
        files[target_path(target)] = target_to_python(target, compilation)

    return CompilationResult(
        files=files,
        index=build_index(project, compilation.options),
        diagnostics=compilation.diagnostics,
    )


def to_python(project: Project, options: Optional[TranspileOptions] = None) -> str:
    return compile_project(project, options).artifact
