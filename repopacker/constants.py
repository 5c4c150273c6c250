"""
Built-in pattern lists, presets and prompts.

The default ignore list is always applied first (unless disabled), so later
sources can re-include anything it excludes with a ``!`` rule.
"""

from __future__ import annotations

from typing import Dict, List


DEFAULT_IGNORE_PATTERNS: List[str] = [
    "node_modules",
    ".git",
    ".next",
    "dist",
    "build",
    "coverage",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.gif",
    "*.svg",
    "*.ico",
    "*.pdf",
    "*.zip",
    "*.tar",
    "*.gz",
    ".DS_Store",
]

# Token thresholds used to grade a pack against common context windows
TOKEN_LIMIT_WARNING = 128_000
TOKEN_LIMIT_DANGER = 200_000

GITIGNORE_FILENAME = ".gitignore"
REPOMIXIGNORE_FILENAME = ".repomixignore"

PRESET_FILTERS: Dict[str, List[str]] = {
    "default": list(DEFAULT_IGNORE_PATTERNS),
    "docs_only": [
        "*",
        "!*.md",
        "!*.txt",
        "!*.rst",
        "!docs/",
        "!documentation/",
        "!LICENSE",
        "!CONTRIBUTING.md",
        "!README.md",
    ],
    "code_only": [
        *DEFAULT_IGNORE_PATTERNS,
        "*.md",
        "*.txt",
        "docs/",
        "LICENSE",
        "assets/",
        "images/",
    ],
    "tests_only": [
        "*",
        "!*.test.ts",
        "!*.test.js",
        "!*.test.tsx",
        "!*.spec.ts",
        "!*.spec.js",
        "!*.spec.tsx",
        "!tests/",
        "!__tests__/",
    ],
}

PREDEFINED_PROMPTS: Dict[str, str] = {
    "none": "",
    "readme": (
        "Based on the codebase provided, write a comprehensive README.md. "
        "Include what the project does, how to install it, how to configure it, "
        "and examples of usage."
    ),
    "wins": (
        'Identify "low-hanging fruit" in this repository: changes that are easy '
        "to implement but provide significant value (refactoring, performance, "
        "security, or readability)."
    ),
    "arch": (
        "Analyze the file structure and code to explain the software architecture. "
        "Identify key modules, patterns used, and data flow. Point out any "
        "questionable architectural decisions."
    ),
    "audit": (
        "Perform a security and code quality audit on the following code. "
        "Identify potential bugs, security risks, and areas for improvement."
    ),
    "explain": "Explain how this code works, focusing on the main architecture and data flow.",
}
