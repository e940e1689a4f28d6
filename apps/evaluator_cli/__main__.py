from __future__ import annotations

from apps.evaluator_cli.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
