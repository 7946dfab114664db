import argparse
import os
import sys
from typing import List, Optional

from scratch2py.assembler import compile_project
from scratch2py.diagnostics import DiagnosticContext, TranspileError, UnknownProcedureError
from scratch2py.options import DEFAULT_RUNTIME_URL, TranspileOptions
from scratch2py.project_io import extract_assets, load_project
from scratch2py.utils import write_text_file


def print_diagnostics(diagnostics: DiagnosticContext) -> None:
    if not diagnostics.diagnostics:
        return
    print(file=sys.stderr)
    for diagnostic in diagnostics.diagnostics:
        print(diagnostic, file=sys.stderr)
    print(file=sys.stderr)
    print(f"Conversion completed with {diagnostics.summary()}", file=sys.stderr)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert a Scratch project into Python source for the martypy runtime.")
    parser.add_argument("input", help="Path to the .sb3 archive or project.json")
    parser.add_argument("-o", "--output", help="Write the combined Python source here instead of stdout")
    parser.add_argument("--split", metavar="DIR", help="Write one module per target plus index.py into DIR")
    parser.add_argument("--no-autoplay", action="store_true", help="Do not start the project from index.py")
    parser.add_argument("--runtime-url", default=DEFAULT_RUNTIME_URL, help="Reference to the runtime library")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    options = TranspileOptions(runtime_url=args.runtime_url, autoplay=not args.no_autoplay)
    diagnostics = DiagnosticContext()

    try:
        project = load_project(args.input)
        result = compile_project(project, options, diagnostics)
    except UnknownProcedureError as exc:
        diagnostics.error(str(exc), exc.target_name)
    except TranspileError as exc:
        diagnostics.error(str(exc), os.path.basename(args.input))

    if diagnostics.has_errors():
        print_diagnostics(diagnostics)
        return 1

    if args.split:
        for path, text in result.files.items():
            write_text_file(os.path.join(args.split, path), text)
        write_text_file(os.path.join(args.split, options.index_path), result.index)
        extract_assets(args.input, project, args.split, options.get_asset_url, diagnostics)
        print(f"Successfully converted {args.input} to {args.split}")
    elif args.output:
        write_text_file(args.output, result.artifact)
        print(f"Successfully converted {args.input} to {args.output}")
    else:
        sys.stdout.write(result.artifact)

    print_diagnostics(diagnostics)
    return 0


if __name__ == "__main__":
    sys.exit(main())
