"""
Build script for lexhtml with optional mypyc compilation.

Usage:
    # Pure Python build (default)
    python -m build

    # Compiled with mypyc
    LEXHTML_USE_MYPYC=1 pip install .
"""

import os
import sys
from pathlib import Path

from setuptools import find_packages, setup

USE_MYPYC = os.environ.get("LEXHTML_USE_MYPYC", "0") == "1"

# The state machine and the reference resolver are the hot path.
# stream.py and arena.py stay interpreted; they are thin and mypyc gains nothing there.
MYPYC_MODULES = [
    "src/lexhtml/tokenizer.py",
    "src/lexhtml/entities.py",
    "src/lexhtml/entity_trie.py",
]


def build_with_mypyc() -> list:
    """Build extension modules using mypyc."""
    try:
        from mypyc.build import mypycify
    except ImportError:
        print(
            "ERROR: mypyc is not installed. Install with: pip install mypy",
            file=sys.stderr,
        )
        print("Or install with mypyc support: pip install lexhtml[mypyc]", file=sys.stderr)
        sys.exit(1)

    for module_path in MYPYC_MODULES:
        if not Path(module_path).exists():
            print(f"ERROR: Module not found: {module_path}", file=sys.stderr)
            sys.exit(1)

    print("=" * 70)
    print("Building lexhtml with mypyc compilation")
    print("=" * 70)
    print(f"Compiling {len(MYPYC_MODULES)} modules:")
    for module in MYPYC_MODULES:
        print(f"  - {module}")
    print("=" * 70)

    mypyc_options = {
        "opt_level": os.environ.get("MYPYC_OPT_LEVEL", "3"),
        "debug_level": os.environ.get("MYPYC_DEBUG_LEVEL", "0"),
        "verbose": True,
        "separate": False,
        "multi_file": False,
    }

    return mypycify(MYPYC_MODULES, **mypyc_options)


if __name__ == "__main__":
    ext_modules = []

    if USE_MYPYC:
        ext_modules = build_with_mypyc()
    else:
        print("Building lexhtml in pure Python mode (no mypyc compilation)")
        print("To enable mypyc: LEXHTML_USE_MYPYC=1 pip install .")

    setup(
        name="lexhtml",
        version="0.1.0",
        description="A WHATWG-style HTML tokenizer producing a lazy token stream",
        package_dir={"": "src"},
        packages=find_packages("src"),
        python_requires=">=3.9",
        extras_require={
            "test": ["pytest"],
            "mypyc": ["mypy"],
        },
        ext_modules=ext_modules,
    )
