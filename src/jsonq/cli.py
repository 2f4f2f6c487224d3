"""Command-line interface for jsonq.

Enables ``jsonq get``, ``jsonq select``, ``jsonq extract``,
``jsonq validate`` and ``jsonq schema`` after install.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# ── Human-readable help strings ──────────────────────────────────────────────

_TOP_DESCRIPTION = """\
Path queries over JSON documents.

Reads a JSON (or YAML) document and evaluates dotted path queries with
bracketed filters against it, e.g.:

  issue.fields.project.name
  issue.changelog.items[fieldId=="assignee"][0]
  ?issue.fields.resolution

Use this tool to PICK values out of a document or to turn matched values
into flat records. It does not modify documents, and it has no arithmetic
or functions.
"""

_TOP_EPILOG = """\
For a machine-readable JSON description of this CLI:

  jsonq schema

Quick examples:
  jsonq get issue.key event.json
  jsonq select 'issue.changelog.items[fieldId=="assignee"]' --document event.json
  jsonq extract assignment.yaml event.json
  jsonq validate 'items[priority<100][0]'
"""

_QUERY_SYNTAX = """\
Query syntax:
  a.b.c                 key navigation (quoted keys: "a-b".c)
  ?a.b                  optional path: a missing key is "no value", not an error
  items[k=="x"]         keep array elements whose field k equals "x"
  items[n<10 && n>=2]   comparisons: == != < <= > >=, combined with && ||
  items[0]              keep the element at index 0 (after earlier filters)
"""

_GET_DESCRIPTION = """\
Evaluate one query against a document and print the result as JSON.

With --type the result must be exactly one value of that type; the
string type reads null as "".
""" + "\n" + _QUERY_SYNTAX

_SELECT_DESCRIPTION = """\
Run one or more queries as a chain. Each query is applied to every value
selected by the previous one; arrays are flattened into the selection.
Prints the final selection as a JSON array.
""" + "\n" + _QUERY_SYNTAX

_EXTRACT_DESCRIPTION = """\
Run an extraction spec (YAML) against a document and print the records.
"""

_EXTRACT_EPILOG = """\
Spec format:

  select:                      # queries applied in order (optional)
    - issue.changelog.items[fieldId=="assignee"]
  many: true                   # list of records instead of exactly one
  fields:
    previous: "?fromString"    # shorthand for a string field
    current:
      query: "?toString"
      type: string             # string | number | integer | boolean
      nullable: false
      default: "nobody"
  template: "{{ record.previous }} -> {{ record.current }}"

Output: a JSON array of records (one object when many is false), or one
rendered line per record when the spec has a template.
"""

_VALIDATE_DESCRIPTION = """\
Statically validate a query, or an extraction spec with --spec, without
reading any document.
"""

_VALIDATE_EPILOG = """\
Diagnostic output format (written to stderr on failure):
  [error]   location: message  -- must be fixed
  [warning] location: message  -- may cause issues at runtime

Exit codes:
  0 -- valid
  1 -- one or more errors found
"""

_SCHEMA_DESCRIPTION = """\
Print a machine-readable JSON description of this CLI to stdout.
"""


# ── Structured JSON schema (for `jsonq schema`) ──────────────────────────────

def _cli_schema() -> dict[str, Any]:
    """Return a structured JSON description of the entire CLI."""
    document_arg = {
        "type": "string",
        "format": "file path or '-'",
        "required": True,
        "description": (
            "JSON document to query. '.yaml'/'.yml' files are read as YAML; "
            "'-' reads JSON from stdin."
        ),
    }
    log_dir_arg = {
        "type": "string",
        "format": "directory path",
        "required": False,
        "description": "Write JSON-lines debug events to DIR/jsonq.log.",
    }
    return {
        "tool": "jsonq",
        "description": "Dotted path queries with filters over JSON documents.",
        "query_syntax": {
            "path": "key ('.' key)*, keys are identifiers or double-quoted strings",
            "optional": "leading '?' makes missing keys yield no value",
            "filter": "'[' comparison (('&&' | '||') comparison)* ']' or '[' integer ']'",
            "operators": ["==", "!=", "<", "<=", ">", ">=", "&&", "||"],
        },
        "commands": [
            {
                "name": "get",
                "description": "Evaluate a query and print the result as JSON.",
                "arguments": {
                    "query": {"type": "string", "required": True, "description": "Query to evaluate."},
                    "document": document_arg,
                    "--type": {
                        "type": "string",
                        "enum": ["any", "string", "number", "integer", "boolean"],
                        "required": False,
                        "description": "Require exactly one value of this type.",
                    },
                    "--log-dir": log_dir_arg,
                },
                "exit_codes": {"0": "success", "1": "query or document error"},
                "examples": [
                    {"description": "Read a nested string", "command": "jsonq get issue.fields.project.name event.json"},
                    {"description": "Read a number", "command": "jsonq get issue.count event.json --type integer"},
                ],
            },
            {
                "name": "select",
                "description": "Chain queries and print the final selection as a JSON array.",
                "arguments": {
                    "queries": {"type": "array of string", "required": True, "description": "Queries applied in order."},
                    "--document": document_arg,
                    "--log-dir": log_dir_arg,
                },
                "exit_codes": {"0": "success", "1": "query or document error"},
                "examples": [
                    {
                        "description": "Select assignee changes",
                        "command": "jsonq select 'issue.changelog.items[fieldId==\"assignee\"]' --document event.json",
                    },
                ],
            },
            {
                "name": "extract",
                "description": "Run a YAML extraction spec and print records as JSON or rendered lines.",
                "arguments": {
                    "spec": {"type": "string", "format": "file path", "required": True, "description": "Extraction spec YAML."},
                    "document": document_arg,
                    "--output": {
                        "type": "string",
                        "format": "file path",
                        "required": False,
                        "description": "Write output to this file instead of stdout.",
                    },
                    "--log-dir": log_dir_arg,
                },
                "exit_codes": {"0": "success", "1": "spec, query, document or extraction error"},
                "examples": [
                    {"description": "Extract assignments", "command": "jsonq extract assignment.yaml event.json"},
                ],
            },
            {
                "name": "validate",
                "description": "Statically validate a query or, with --spec, an extraction spec file.",
                "arguments": {
                    "target": {"type": "string", "required": True, "description": "Query text, or spec path with --spec."},
                    "--spec": {"type": "boolean", "required": False, "description": "Treat target as a spec file."},
                },
                "exit_codes": {"0": "valid", "1": "one or more errors found"},
                "examples": [
                    {"description": "Check a query", "command": "jsonq validate 'items[priority<100][0]'"},
                    {"description": "Check a spec", "command": "jsonq validate --spec assignment.yaml"},
                ],
            },
            {
                "name": "schema",
                "description": "Print this machine-readable JSON schema to stdout.",
                "arguments": {},
                "exit_codes": {"0": "always succeeds"},
                "examples": [{"description": "Print the CLI schema", "command": "jsonq schema"}],
            },
        ],
    }


# ── Argument parser ───────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonq",
        description=_TOP_DESCRIPTION,
        epilog=_TOP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    # ── get ──────────────────────────────────────────────────────────────────
    get_p = sub.add_parser(
        "get",
        help="Evaluate a query and print the result as JSON",
        description=_GET_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    get_p.add_argument("query", help="Query to evaluate")
    get_p.add_argument("document", help="JSON/YAML document path, or '-' for stdin")
    get_p.add_argument(
        "--type", "-t",
        choices=["any", "string", "number", "integer", "boolean"],
        default="any",
        help="Require exactly one value of this type (default: any)",
    )
    get_p.add_argument("--log-dir", type=Path, metavar="DIR", help="Write JSON-lines logs to DIR/jsonq.log")

    # ── select ───────────────────────────────────────────────────────────────
    sel_p = sub.add_parser(
        "select",
        help="Chain queries and print the selection as a JSON array",
        description=_SELECT_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sel_p.add_argument("queries", nargs="+", metavar="QUERY", help="Queries applied in order")
    sel_p.add_argument(
        "--document", "-d",
        required=True,
        help="JSON/YAML document path, or '-' for stdin",
    )
    sel_p.add_argument("--log-dir", type=Path, metavar="DIR", help="Write JSON-lines logs to DIR/jsonq.log")

    # ── extract ──────────────────────────────────────────────────────────────
    ext_p = sub.add_parser(
        "extract",
        help="Run a YAML extraction spec against a document",
        description=_EXTRACT_DESCRIPTION,
        epilog=_EXTRACT_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ext_p.add_argument("spec", type=Path, help="Path to the extraction spec YAML")
    ext_p.add_argument("document", help="JSON/YAML document path, or '-' for stdin")
    ext_p.add_argument(
        "--output", "-o",
        type=Path,
        metavar="FILE",
        help="Write output to FILE instead of stdout.",
    )
    ext_p.add_argument("--log-dir", type=Path, metavar="DIR", help="Write JSON-lines logs to DIR/jsonq.log")

    # ── validate ─────────────────────────────────────────────────────────────
    val_p = sub.add_parser(
        "validate",
        help="Statically validate a query or extraction spec",
        description=_VALIDATE_DESCRIPTION,
        epilog=_VALIDATE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    val_p.add_argument("target", help="Query text, or a spec path with --spec")
    val_p.add_argument("--spec", action="store_true", help="Treat TARGET as an extraction spec file")

    # ── schema ───────────────────────────────────────────────────────────────
    sub.add_parser(
        "schema",
        help="Print a machine-readable JSON schema of this CLI to stdout",
        description=_SCHEMA_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    return parser


# ── Command handlers ──────────────────────────────────────────────────────────

def _emit(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text + "\n")
        print(f"Output written to {output}", file=sys.stderr)
    else:
        print(text)


def _cmd_get(args: argparse.Namespace) -> int:
    from jsonq import get, get_boolean, get_integer, get_number, get_string
    from jsonq.loader import load_document

    getters = {
        "any": get,
        "string": get_string,
        "number": get_number,
        "integer": get_integer,
        "boolean": get_boolean,
    }
    document = load_document(args.document)
    result = getters[args.type](document, args.query)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def _cmd_select(args: argparse.Namespace) -> int:
    from jsonq import new_context
    from jsonq.loader import load_document

    document = load_document(args.document)
    context = new_context(document)
    for query in args.queries:
        context.select(query)
    if context.error is not None:
        raise context.error
    print(json.dumps(context.selection, indent=2, ensure_ascii=False))
    return 0


def _cmd_extract(args: argparse.Namespace) -> int:
    from jsonq.loader import load_document, load_extraction_spec
    from jsonq.runner import run_extraction

    spec = load_extraction_spec(args.spec)
    document = load_document(args.document)
    result = run_extraction(spec, document)

    if result.lines is not None:
        text = "\n".join(result.lines)
    elif spec.many:
        text = json.dumps(result.records, indent=2, ensure_ascii=False)
    else:
        text = json.dumps(result.records[0], indent=2, ensure_ascii=False)

    _emit(text, args.output)
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    from jsonq.validator import ValidationResult, load_and_validate_spec, validate_query

    if args.spec:
        spec, result = load_and_validate_spec(args.target)
        summary = f"Spec is valid ({len(spec.fields)} fields)"
    else:
        result = ValidationResult(diagnostics=validate_query(args.target))
        summary = "Query is valid"

    for d in result.diagnostics:
        print(f"[{d.severity.value}] {d.location}: {d.message}", file=sys.stderr)

    if result.ok:
        print(summary)
        return 0

    error_count = len(result.errors)
    warning_count = len(result.warnings)
    print(f"\n{error_count} error(s), {warning_count} warning(s)", file=sys.stderr)
    return 1


def _cmd_schema() -> int:
    print(json.dumps(_cli_schema(), indent=2))
    return 0


# ── Entry point ───────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    from jsonq import JsonqError, configure_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if getattr(args, "log_dir", None):
        configure_logging(args.log_dir)

    handlers = {
        "get": _cmd_get,
        "select": _cmd_select,
        "extract": _cmd_extract,
        "validate": _cmd_validate,
    }

    if args.command == "schema":
        sys.exit(_cmd_schema())

    try:
        code = handlers[args.command](args)
    except JsonqError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
