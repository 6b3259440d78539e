"""
Tagsmith CLI Main Module
========================

Command line entry point.

Examples:
  tagsmith compile app.tag -o app.js
  tagsmith compile app.tag --entities --exclude css
  tagsmith template todo.html --brackets "[ ]"
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from tagsmith import __version__
from tagsmith.compiler.elements import TagCompiler
from tagsmith.compiler.errors import CompilerError
from tagsmith.compiler.options import EXCLUDABLE, CompilerOptions
from tagsmith.compiler.preprocessors import PreprocessorRegistry
from tagsmith.core.config import Config, ConfigError, load_config
from tagsmith.template.builder import TemplateBuilder
from tagsmith.template.parser import MarkupParser
from tagsmith.utils.logger import configure_logging, get_logger

logger = get_logger("tagsmith.cli")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="tagsmith",
        description="Custom element compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tagsmith compile app.tag             Print generated code
  tagsmith compile app.tag -o app.js   Write generated code to a file
  tagsmith compile app.tag --entities  Print component records as JSON
  tagsmith template todo.html          Print skeleton and bindings as JSON
        """,
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"tagsmith {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Minimum log level (default: from config, else warning)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log output format",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (.py or .json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compile command
    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile custom elements into component code",
    )
    compile_parser.add_argument(
        "source",
        help="Source file, or - for stdin",
    )
    compile_parser.add_argument(
        "-o", "--output",
        help="Output file (default: stdout)",
    )
    compile_parser.add_argument(
        "--entities",
        action="store_true",
        default=None,
        help="Output component records as JSON",
    )
    compile_parser.add_argument(
        "--brackets",
        help='Expression brackets, e.g. "[ ]"',
    )
    compile_parser.add_argument(
        "--whitespace",
        action="store_true",
        default=None,
        help="Keep whitespace in markup",
    )
    compile_parser.add_argument(
        "--compact",
        action="store_true",
        default=None,
        help="Remove whitespace between tags",
    )
    compile_parser.add_argument(
        "--exclude",
        action="append",
        choices=sorted(EXCLUDABLE),
        help="Leave a component part out (repeatable)",
    )
    compile_parser.add_argument(
        "--type",
        help="Default script language",
    )
    compile_parser.add_argument(
        "--style",
        help="Default style language",
    )
    compile_parser.add_argument(
        "--template",
        help="Template language of the whole source",
    )
    compile_parser.add_argument(
        "--expr",
        action="store_true",
        default=None,
        help="Run expressions through the script preprocessor",
    )

    # Template command
    template_parser = subparsers.add_parser(
        "template",
        help="Build the skeleton and bindings of a template",
    )
    template_parser.add_argument(
        "source",
        help="Template file, or - for stdin",
    )
    template_parser.add_argument(
        "--brackets",
        help='Expression brackets, e.g. "[ ]"',
    )

    return parser


def cli(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    handlers = {
        "compile": handle_compile,
        "template": handle_template,
    }

    handler = handlers.get(parsed.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        config = load_config(parsed.config)
        setup_logging(parsed, config)
        return handler(parsed, config)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130
    except (CompilerError, ConfigError, OSError, ValueError) as e:
        logger.debug("Command failed", command=parsed.command, error=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def setup_logging(args: argparse.Namespace, config: Config) -> None:
    configure_logging(
        level=args.log_level or config.get("logging.level", "warning"),
        format=args.log_format or config.get("logging.format", "text"),
        log_file=config.get("logging.file"),
    )


def read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def write_output(text: str, output: Optional[str] = None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        logger.info("Wrote output", path=output, size=len(text))
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")


def dump_json(data: Any) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


def compiler_options(args: argparse.Namespace, config: Config) -> CompilerOptions:
    """Options from the configuration, overridden by command line flags."""
    options = CompilerOptions.from_config(config)
    overrides: Dict[str, Any] = {
        name: getattr(args, name)
        for name in ("brackets", "whitespace", "compact", "type", "style", "template", "expr", "entities")
        if getattr(args, name) is not None
    }
    if args.exclude:
        overrides["exclude"] = options.exclude | frozenset(args.exclude)
    return options.replace(**overrides)


def handle_compile(args: argparse.Namespace, config: Config) -> int:
    """Handle compile command."""
    options = compiler_options(args, config)
    registry = PreprocessorRegistry()
    registry.load_entry_points()

    url = "" if args.source == "-" else args.source
    result = TagCompiler(options, registry).compile(read_source(args.source), url)

    if options.entities:
        write_output(dump_json([c.to_dict() for c in result]), args.output)
    else:
        write_output(result, args.output)
    return 0


def handle_template(args: argparse.Namespace, config: Config) -> int:
    """Handle template command."""
    options = CompilerOptions.from_config(config)
    if args.brackets:
        options = options.replace(brackets=args.brackets)

    root = MarkupParser(options.get_brackets()).parse(read_source(args.source))
    template = TemplateBuilder().build_template(root)
    write_output(dump_json(template.to_dict()))
    return 0


def main() -> None:
    """Main entry point."""
    sys.exit(cli())
