from __future__ import annotations

import logging
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
	logging.basicConfig(
		level=getattr(logging, (level or "INFO").upper()),
		format=LOG_FORMAT,
		handlers=[logging.StreamHandler(sys.stderr)],
		force=True,
	)
