"""Allow ``python -m jvmdeps``."""

from jvmdeps.cli import main

main()
