#!/usr/bin/env python3
"""
Source-checkout entrypoint.

Allows running the release tool without installing it:
  python3 ipa_shipit.py -w App -s App --upload
"""

import os
import sys

# Put `src/` on sys.path so a plain checkout can import the package.
_HERE = os.path.dirname(os.path.abspath(__file__))
_SRC = os.path.join(_HERE, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

# Behave like a package shim when imported as `ipa_shipit`, so that
# `src/ipa_shipit/` is not shadowed during test/import usage.
__path__ = [os.path.join(_SRC, "ipa_shipit")]


def main(argv: list[str] | None = None) -> int:
    from ipa_shipit.cli import main as _main

    return _main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
