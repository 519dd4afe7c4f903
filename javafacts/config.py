from __future__ import annotations

import os
from pathlib import Path

JAVA_EXTENSIONS = (".java",)

IGNORED_DIRS = frozenset({
    ".git",
    ".gradle",
    ".idea",
    "build",
    "target",
    "out",
    "node_modules",
    "__pycache__",
    "__MACOSX",
})

MAX_WORKERS = int(os.getenv("JAVAFACTS_MAX_WORKERS", "4"))
OUTPUT_PATH = Path(os.getenv("JAVAFACTS_OUTPUT_PATH", "parsed_output.json"))
LOG_LEVEL = (os.getenv("JAVAFACTS_LOG_LEVEL") or "").strip().upper() or "WARNING"

# sequential below this many files, thread pool above
PARALLEL_THRESHOLD = 8
