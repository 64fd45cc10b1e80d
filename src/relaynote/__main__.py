"""Allow ``python -m relaynote``."""

from relaynote.cli.main import main

main()
