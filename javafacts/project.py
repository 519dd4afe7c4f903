"""
Project-level orchestration: discover Java files under a root, extract every
file independently, collect documents and per-file errors.

Each file is processed by one task that owns its whole extraction state. The
only shared object is the DocumentCollector; a file's documents are appended
under its lock as one batch, so documents of different files never interleave.
"""

import json
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from javafacts import config
from javafacts.adapters.java_adapter import JavaAdapter
from javafacts.errors import OutputWriteError
from javafacts.facts.document import assemble_all
from javafacts.facts.model import ExtractionResult

logger = logging.getLogger(__name__)


class DocumentCollector:
    """Append-only sink shared by worker tasks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.documents: List[Dict[str, Any]] = []
        self.errors: List[Dict[str, str]] = []

    def add(self, result: ExtractionResult) -> None:
        with self._lock:
            if result.ok:
                self.documents.extend(result.documents)
            else:
                self.errors.append({"file": result.file_path, "error": result.error or ""})


class ProjectParser:
    def __init__(self, root: Union[str, Path], max_workers: Optional[int] = None) -> None:
        self.root = Path(root)
        self.max_workers = max_workers or config.MAX_WORKERS
        self.adapter = JavaAdapter()
        self.collector = DocumentCollector()

    @property
    def documents(self) -> List[Dict[str, Any]]:
        return self.collector.documents

    @property
    def errors(self) -> List[Dict[str, str]]:
        return self.collector.errors

    # ---------------- Discovery ----------------

    def discover_files(self) -> List[Path]:
        """All Java sources under root, build and VCS directories skipped, sorted."""
        if self.root.is_file():
            return [self.root] if self.root.name.endswith(config.JAVA_EXTENSIONS) else []

        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [d for d in dirnames if d not in config.IGNORED_DIRS]
            for name in filenames:
                if name.endswith(config.JAVA_EXTENSIONS):
                    found.append(Path(dirpath) / name)
        return sorted(found)

    def relative_path(self, path: Path) -> str:
        base = self.root.parent if self.root.is_file() else self.root
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            return path.as_posix()

    # ---------------- Extraction ----------------

    def parse_file(self, path: Path) -> ExtractionResult:
        rel = self.relative_path(path)
        try:
            code = path.read_text(encoding="utf-8")
            models = self.adapter.extract_types(code, file_path=rel)
        except (OSError, ValueError) as e:
            # SourceParseError and UnicodeDecodeError are both ValueErrors
            logger.warning("Skipping %s: %s", rel, e)
            return ExtractionResult(file_path=rel, error=str(e))
        except Exception as e:
            # one file must never abort the batch
            logger.exception("Unexpected failure extracting %s", rel)
            return ExtractionResult(file_path=rel, error=f"{type(e).__name__}: {e}")

        logger.debug("Extracted %d types from %s", len(models), rel)
        return ExtractionResult(file_path=rel, documents=assemble_all(models))

    def parse_files(self, files: Iterable[Path]) -> List[Dict[str, Any]]:
        files = list(files)
        if len(files) < config.PARALLEL_THRESHOLD or self.max_workers <= 1:
            for path in files:
                self.collector.add(self.parse_file(path))
            return self.documents

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.parse_file, path): path for path in files}
            for future in as_completed(futures):
                self.collector.add(future.result())
        return self.documents

    def parse(self) -> List[Dict[str, Any]]:
        files = self.discover_files()
        logger.info("Found %d Java files under %s", len(files), self.root)
        return self.parse_files(files)

    # ---------------- Output ----------------

    def write_output(self, path: Union[str, Path], documents: Optional[List[Dict[str, Any]]] = None) -> Path:
        path = Path(path)
        docs = self.documents if documents is None else documents
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(docs, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise OutputWriteError(f"Failed to write {path}: {e}") from e
        logger.info("Wrote %d documents to %s", len(docs), path)
        return path
