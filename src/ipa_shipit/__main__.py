"""
`python -m ipa_shipit` entrypoint.

This is mainly for convenience; the installed console script `ipa-shipit` calls
the same `ipa_shipit.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
