from typing import Any, Dict, List, Optional

from javafacts.adapters.java_adapter import JavaAdapter
from javafacts.config import JAVA_EXTENSIONS
from javafacts.facts.document import assemble_all

java_adapter = JavaAdapter()


def extract_documents(code: str, file_path: str = "") -> List[Dict[str, Any]]:
    """One assembled document per top-level type of a single compilation unit."""
    return assemble_all(java_adapter.extract_types(code, file_path=file_path))


def extract_best(code: str, filename: Optional[str]) -> Dict[str, Any]:
    if filename and filename.endswith(JAVA_EXTENSIONS):
        return {"language": java_adapter.language, "documents": extract_documents(code, filename)}
    else:
        return {"error": "Unsupported file type for Java parser"}
