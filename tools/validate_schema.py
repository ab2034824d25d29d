#!/usr/bin/env python3
"""
samplecutter Manifest Checker

Checks segment manifests written by `samplecutter cut --manifest` against
the JSON schemas in schemas/. Not part of the installed package.

Usage:
    python tools/validate_schema.py [--schema NAME] FILE [FILE ...]

Without --schema, the schema is picked from the file name
(<input>.segments.json -> manifest).

Exit codes:
    0  every file conforms
    1  at least one file is unreadable or does not conform
"""

import argparse
import json
import sys
from pathlib import Path

import jsonschema


SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

SCHEMA_FILES = {
    "manifest": "manifest.schema.json",
}

# File name suffix -> schema name
SUFFIXES = {
    ".segments.json": "manifest",
}


def load_schema(schema_name: str) -> dict:
    """
    Read a schema from schemas/.

    Raises:
        ValueError: If the name is not one of SCHEMA_FILES.
    """
    try:
        filename = SCHEMA_FILES[schema_name]
    except KeyError:
        raise ValueError(
            f"Unknown schema: {schema_name}. Known: {', '.join(sorted(SCHEMA_FILES))}"
        ) from None
    return json.loads((SCHEMA_DIR / filename).read_text())


def validate_document(document: dict, schema: dict) -> list[str]:
    """
    Check a parsed document.

    Returns:
        One "<dotted.path>: <message>" line per violation, sorted by path;
        empty if the document conforms.
    """
    validator = jsonschema.Draft7Validator(schema)
    problems = []
    for error in validator.iter_errors(document):
        where = ".".join(str(part) for part in error.absolute_path) or "(root)"
        problems.append((list(map(str, error.absolute_path)), f"{where}: {error.message}"))
    return [line for _, line in sorted(problems)]


def schema_for(path: Path) -> str | None:
    """Schema name implied by a file name, if any."""
    for suffix, schema_name in SUFFIXES.items():
        if path.name.endswith(suffix):
            return schema_name
    return None


def check_file(path: Path, schema_name: str | None = None) -> list[str]:
    """
    Check one file on disk.

    Returns:
        Problems found; unreadable files and unknown schemas are problems too.
    """
    schema_name = schema_name or schema_for(path)
    if schema_name is None:
        return [f"(file): cannot tell which schema applies to {path.name}; use --schema"]

    try:
        document = json.loads(path.read_text())
    except FileNotFoundError:
        return ["(file): not found"]
    except json.JSONDecodeError as e:
        return [f"(file): invalid JSON: {e}"]

    return validate_document(document, load_schema(schema_name))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check samplecutter manifests against their JSON schema."
    )
    parser.add_argument(
        "--schema",
        choices=sorted(SCHEMA_FILES),
        help="Schema to apply to every file (default: from the file name).",
    )
    parser.add_argument("files", metavar="FILE", type=Path, nargs="+")
    args = parser.parse_args()

    failed = 0
    for path in args.files:
        problems = check_file(path, args.schema)
        if problems:
            failed += 1
            print(f"{path}: INVALID")
            for problem in problems:
                print(f"  - {problem}")
        else:
            print(f"{path}: ok")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
