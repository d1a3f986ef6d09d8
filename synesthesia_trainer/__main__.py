from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python synesthesia_trainer/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve
    correctly.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m synesthesia_trainer
    from .app import run  # type: ignore[attr-defined]
    from .config import load_config  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (absolute path, IDE "Run Python File", etc.)
    _ensure_repo_root_on_path()
    from synesthesia_trainer.app import run  # type: ignore[attr-defined]
    from synesthesia_trainer.config import load_config  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running the trainer from the command line."""
    config = load_config()
    logging.basicConfig(
        level=config.logging_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return run(config=config)


if __name__ == "__main__":
    raise SystemExit(main())
