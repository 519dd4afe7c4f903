import logging
import re
from pathlib import PurePath
from typing import Optional, Tuple

from javafacts.config import JAVA_EXTENSIONS

logger = logging.getLogger(__name__)

EXTENSION_CONFIDENCE = 0.95
ACCEPT_THRESHOLD = 0.6

# suffix -> language; only java is extracted
LANGUAGE_BY_SUFFIX = {
    **{ext: "java" for ext in JAVA_EXTENSIONS},
    ".py": "python",
    ".ts": "typescript",
    ".js": "javascript",
    ".kt": "kotlin",
}

# (pattern, weight); structural Java markers weigh more than generic C-family syntax
JAVA_SIGNALS = tuple(
    (re.compile(pattern, re.M), weight)
    for pattern, weight in (
        (r"^\s*package\s+[\w.]+\s*;", 3),
        (r"^\s*import\s+(static\s+)?[\w.]+(\.\*)?\s*;", 2),
        (r"\b(class|interface|enum)\s+[A-Z]\w*", 2),
        (r"\bpublic\s+static\s+void\s+main\s*\(", 2),
        (r"^\s*@[A-Z]\w*", 1),
        (r"\b(public|private|protected)\s+(final\s+)?[A-Z]\w*(<[\w<>, ?]*>)?\s+\w+", 1),
        (r"\b(extends|implements|throws)\s+[A-Z]\w*", 1),
        (r"System\.(out|err)\.print", 1),
        (r"\bnew\s+[A-Z]\w*\s*(<[^>]*>)?\s*\(", 1),
        (r"\bthis\.\w+\s*=", 1),
        (r"\breturn\b[^;\n]*;", 1),
    )
)
# weight at which confidence saturates
SATURATION_WEIGHT = 10


def java_confidence(code: str) -> float:
    weight = sum(w for pattern, w in JAVA_SIGNALS if pattern.search(code))
    logger.debug("java signal weight %d", weight)
    return round(min(weight / SATURATION_WEIGHT, 1.0), 2)


def detect_language(code: str, filename: Optional[str] = None) -> Tuple[str, float, str]:
    """(language, confidence, source) where source is `extension`, `heuristic` or `none`."""
    if filename:
        lang = LANGUAGE_BY_SUFFIX.get(PurePath(filename).suffix.lower())
        if lang:
            return lang, EXTENSION_CONFIDENCE, "extension"

    conf = java_confidence(code)
    if conf >= ACCEPT_THRESHOLD:
        return "java", conf, "heuristic"
    return "unknown", 0.0, "none"
