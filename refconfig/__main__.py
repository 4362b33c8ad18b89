"""Allow ``python -m refconfig``."""

from __future__ import annotations

from refconfig.cli import main

raise SystemExit(main())
