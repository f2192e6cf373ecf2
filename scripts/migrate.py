#!/usr/bin/env python
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gradestore.core.config import cfg  # noqa: E402
from gradestore.core.logging import setup_logging  # noqa: E402
from gradestore.core.store import provision  # noqa: E402
from gradestore.db.schema import list_tables  # noqa: E402

logger = logging.getLogger("gradestore.migrate")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging(cfg.log_level)
    path = argv[0] if argv else cfg.sqlite_path
    with provision(path) as store:
        tables = sorted(list_tables(store.conn))
    logger.info("[migrate] %s: %s", path, ", ".join(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
