"""CLI entry point: run `gos file.gos` or `python -m gos file.gos`."""

import logging
import sys
from pathlib import Path


def main(argv=None) -> int:
    import argparse
    from .driver import ParseOptions, parse
    from .utils.config import DEFAULT_SOURCE_NAME, OUTPUT_FORMATS, STDIN_PATH
    from .utils.io_utils import read_source, write_output
    from .utils.serialization import dumps_json, dumps_sexpr

    parser = argparse.ArgumentParser(prog="gos", description="Parse and validate a GOS (.gos) file.")
    parser.add_argument("file", help="Path to .gos source file, or - for standard input")
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, default="json",
                        help="Output format for the AST (default: json)")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write the AST here instead of stdout")
    parser.add_argument("--debug", action="store_true", help="Print the concrete syntax tree to stderr")
    parser.add_argument("--error", action="store_true", help="Report every error instead of stopping at the first")
    parser.add_argument("--strict", action="store_true", help="Treat deprecated syntax as an error")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    if args.file == STDIN_PATH:
        source_name = DEFAULT_SOURCE_NAME
    else:
        path = Path(args.file)
        if not path.exists():
            sys.stderr.write(f"gos: error: file not found: {path}\n")
            return 1
        if not path.is_file():
            sys.stderr.write(f"gos: error: not a file: {path}\n")
            return 1
        source_name = str(path)

    try:
        source = read_source(args.file)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"gos: error: could not read file: {e}\n")
        return 1

    options = ParseOptions(
        collect_errors=args.error,
        allow_deprecated=not args.strict,
        debug=args.debug,
        source_name=source_name,
    )
    result = parse(source, options)

    if args.debug:
        for fragment in result.cst:
            sys.stderr.write(f"# fragment at offset {fragment.offset}\n{fragment.tree.pretty()}")

    if not result.diagnostics.is_empty():
        sys.stderr.write(result.diagnostics.format_all() + "\n")

    if not result.ok:
        return 1

    if args.format == "json":
        text = dumps_json(result.module)
    else:
        text = dumps_sexpr(result.module)
    try:
        write_output(text, args.output)
    except OSError as e:
        sys.stderr.write(f"gos: error: could not write output: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
