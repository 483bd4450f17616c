"""Allow running the audit with ``python -m tenant_usage``."""

from .cli import main

raise SystemExit(main())
