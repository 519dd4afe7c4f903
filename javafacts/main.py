from fastapi import FastAPI, HTTPException  # type: ignore
from pydantic import BaseModel  # type: ignore

from javafacts.detect import detect_language
from javafacts.errors import SourceParseError
from javafacts.facts.graph import build_call_graph
from javafacts.registry import extract_documents

app = FastAPI(title="javafacts")


class Req(BaseModel):
    code: str
    filename: str | None = None


def _java_documents(req: Req):
    lang, _, _ = detect_language(req.code, req.filename)
    if lang != "java":
        raise HTTPException(status_code=400, detail=f"Extraction not implemented for language: {lang}")
    try:
        return extract_documents(req.code, req.filename or "")
    except SourceParseError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/detect")
def detect(req: Req):
    lang, conf, source = detect_language(req.code, req.filename)
    return {
        "language": lang,
        "confidence": conf,
        "source": source
    }


@app.post("/extract")
def extract(req: Req):
    return {"language": "java", "documents": _java_documents(req)}


@app.post("/extract/graph")
def extract_graph(req: Req):
    graph = build_call_graph(_java_documents(req))
    return graph.to_debug_json()
