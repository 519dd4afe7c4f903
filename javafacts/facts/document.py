"""
Document assembler: TypeModel → JSON-ready dict.

Sets in the model have no meaningful order; they are emitted sorted so two
runs over the same source give identical output. Lists (fields, methods,
endpoints, nested types) keep declaration order.
"""

import json
from typing import Any, Dict, Iterable, List

from javafacts.facts.model import (
    Annotation,
    CallEdge,
    Endpoint,
    FieldModel,
    MethodModel,
    PersistenceOperation,
    TypeModel,
)


def _annotation_texts(annotations: Iterable[Annotation]) -> List[str]:
    return sorted({a.text for a in annotations})


def _pairs(pairs) -> Dict[str, str]:
    return {name: type_name for name, type_name in pairs}


def _call_key(call: CallEdge):
    return (call.line, call.name, call.scope, call.from_class, call.from_package or "")


def _operation_key(op: PersistenceOperation):
    return (op.line, op.operation, op.method, op.details)


def assemble_field(field: FieldModel) -> Dict[str, Any]:
    return {
        "type": field.type_name,
        "access": field.access,
        "annotations": _annotation_texts(field.annotations),
    }


def assemble_call(call: CallEdge) -> Dict[str, Any]:
    return {
        "MethodName": call.name,
        "Scope": call.scope,
        "FromClass": call.from_class,
        "FromPackage": call.from_package,
        "Line": call.line,
        "IsDatabaseOperation": call.is_persistence,
    }


def assemble_endpoint(endpoint: Endpoint) -> Dict[str, Any]:
    return {
        "MethodName": endpoint.method,
        "Annotation": endpoint.annotation,
        "Path": endpoint.path,
        "HTTPMethod": endpoint.http_method,
        "Parameters": _pairs(endpoint.parameters),
        "RequestBodyParameters": _pairs(endpoint.request_body),
        "ResponseType": endpoint.response_type,
        "ResponseGenericType": endpoint.response_generic_type,
        "ResponsePackage": endpoint.response_package,
        "ResponseGenericPackage": endpoint.response_generic_package,
        "ReturnedBody": endpoint.returned_body,
        "ReturnedBodyPackage": endpoint.returned_body_package,
    }


def assemble_method(method: MethodModel, endpoints: Iterable[Endpoint]) -> Dict[str, Any]:
    details: Dict[str, Any] = {
        "methodAccess": method.access,
        "ReturnType": method.return_type,
        "StartLine": method.start_line,
        "EndLine": method.end_line,
        "Code": method.code,
        "methodParameters": _pairs(method.parameters),
        "RequestBodyParameters": _pairs(method.request_body),
    }
    if method.entry_arguments is not None:
        details["EntryPointArguments"] = list(method.entry_arguments)
    details["MethodCalls"] = [assemble_call(c) for c in sorted(method.calls, key=_call_key)]

    return {
        "MethodName": method.name,
        "ReturnType": method.return_type,
        "Annotations": _annotation_texts(method.annotations),
        "Details": details,
        "Endpoints": [assemble_endpoint(e) for e in endpoints if e.method == method.name],
    }


def assemble(model: TypeModel) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "structType": model.kind,
        "className": model.name,
        "packageName": model.package,
        "classAccess": model.access,
    }
    if model.superclass:
        doc["extend"] = model.superclass
    if model.interfaces:
        doc["implementList"] = list(model.interfaces)

    doc.update({
        "importList": list(model.imports),
        "ClassAnnotations": _annotation_texts(model.annotations),
        "FieldAnnotations": _annotation_texts(model.field_annotations),
        "fieldList": {f.name: assemble_field(f) for f in model.fields},
        "methodList": [assemble_method(m, model.endpoints) for m in model.methods],
        "ObjectCreations": sorted(model.object_creations),
        "DatabaseOperations": [
            {"Operation": op.operation, "Method": op.method, "Line": op.line, "Details": op.details}
            for op in sorted(model.persistence_operations, key=_operation_key)
        ],
        "Endpoints": [assemble_endpoint(e) for e in model.endpoints],
        "innerClassList": [assemble(n) for n in model.nested],
        "Code": model.code,
        "FilePath": model.file_path,
        "parent_class": model.parent_type,
    })
    return doc


def assemble_all(models: Iterable[TypeModel]) -> List[Dict[str, Any]]:
    return [assemble(m) for m in models]


def to_json(documents: List[Dict[str, Any]], indent: int = 2) -> str:
    return json.dumps(documents, indent=indent, ensure_ascii=False)
