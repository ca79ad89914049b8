"""
Safe .env file parser.

Parses KEY=value files without shell execution, and converts values to the
types the engine configuration needs.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipe / OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def parse_env(text: str) -> dict[str, str]:
    """
    Parse env file content, return dict.

    Raises:
        ValueError: if syntax invalid or forbidden pattern found
    """
    result = {}

    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()

        if not line or line.startswith('#'):
            continue

        # Tolerate "export KEY=value" lines
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        if '=' not in line:
            raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = value.strip()

        if not KEY_PATTERN.match(key):
            raise ValueError(f"Line {lineno}: Invalid key '{key}'")

        quoted = len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'")
        if quoted:
            value = value[1:-1]
        elif ' #' in value:
            # Trailing comment on an unquoted value
            value = value.split(' #', 1)[0].rstrip()

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"Line {lineno}: Forbidden pattern in value for {key}")

        result[key] = value

    return result


def load_env(filepath: Path, missing_ok: bool = False) -> dict[str, str]:
    """
    Parse env file safely, return dict.

    Args:
        filepath: Path to the env file
        missing_ok: Return an empty dict instead of raising if the file is absent

    Raises:
        FileNotFoundError: if file doesn't exist and missing_ok is False
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        if missing_ok:
            return {}
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text())


def parse_bool(value: str) -> bool:
    """Parse a boolean env value.

    Raises:
        ValueError: if the value is not a recognised boolean
    """
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: '{value}'")
