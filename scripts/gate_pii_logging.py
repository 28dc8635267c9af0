#!/usr/bin/env python3
"""Gate: no raw PII in log calls under src/.

Fails if:
- print( found in runtime code (src/**)
- A logger call line mentions a phone, chat id, message body or raw payload
  without going through a redaction helper or a hash

Usage:
    python scripts/gate_pii_logging.py
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

SENSITIVE_KEYWORDS = (
    "phone",
    "chat_id",
    "body",
    "payload",
    "request.json",
    "session_data",
)

PRINT_PATTERN = re.compile(r"\bprint\s*\(")

LOGGER_CALL_PATTERN = re.compile(
    r"logger\.(debug|info|warning|error|critical|exception)\s*\("
)

SAFE_PATTERNS = (
    "safe_log_context",
    "redact_value",
    "redact_string",
    "hash_identifier",
)


def check_file(filepath: Path) -> list[str]:
    """Return one error string per violating line of ``filepath``."""
    try:
        content = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return []

    errors = []
    for lineno, line in enumerate(content.splitlines(), start=1):
        code = line.split("#", 1)[0]
        if not code.strip():
            continue

        if PRINT_PATTERN.search(code):
            errors.append(f"{filepath}:{lineno}: print() not allowed in runtime code")

        if not LOGGER_CALL_PATTERN.search(code):
            continue
        if any(p in code for p in SAFE_PATTERNS):
            continue
        lowered = code.lower()
        for keyword in SENSITIVE_KEYWORDS:
            if keyword in lowered:
                errors.append(
                    f"{filepath}:{lineno}: logger call with '{keyword}' "
                    "must use redaction (safe_log_context/hash_identifier)"
                )
    return errors


def main(src_dir: Path | None = None) -> int:
    if src_dir is None:
        src_dir = Path(__file__).resolve().parent.parent / "src"
    if not src_dir.exists():
        sys.stderr.write(f"Error: {src_dir} not found\n")
        return 1

    all_errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_file(pyfile))

    if all_errors:
        sys.stderr.write("PII gate FAILED:\n")
        for err in all_errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("PII gate passed\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
