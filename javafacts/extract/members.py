from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from javafacts.extract.calls import record_call
from javafacts.extract.context import TypeContext, to_annotation
from javafacts.extract.endpoints import synthesize_endpoints
from javafacts.facts.model import FieldModel, MethodModel, PersistenceOperation
from javafacts.syntax import (
    ConstructorNode,
    FieldNode,
    MethodNode,
    Node,
    NodeKind,
    ParameterNode,
    walk,
)

logger = logging.getLogger(__name__)

PERSISTENCE_FIELD_ANNOTATIONS = frozenset({
    "PersistenceContext",
    "PersistenceUnit",
    "Transactional",
    "Query",
})
REQUEST_BODY_ANNOTATION = "RequestBody"

ENTRY_POINT_NAME = "main"
_STRING_TYPES = ("String", "java.lang.String")


# ---------------- Fields ----------------

def extract_fields(node: FieldNode, ctx: TypeContext) -> List[FieldModel]:
    """One FieldModel per declared variable of a field declaration."""
    annotations = frozenset(to_annotation(a) for a in node.annotations)
    ctx.field_annotations.update(annotations)

    out: List[FieldModel] = []
    for name in node.variables:
        model = FieldModel(
            name=name,
            type_name=node.type_name,
            access=node.access,
            annotations=annotations,
            line=node.line,
        )
        ctx.fields[name] = model
        out.append(model)

        for annotation in node.annotations:
            if annotation.name in PERSISTENCE_FIELD_ANNOTATIONS:
                ctx.persistence_operations.add(
                    PersistenceOperation(
                        operation=annotation.name,
                        method=name,
                        line=annotation.line if annotation.span.known else node.line,
                        details=annotation.text or f"@{annotation.name}",
                    )
                )
    return out


def collect_creations(nodes: List[Node], ctx: TypeContext) -> None:
    """Record every `new T(...)` below `nodes` (nested types excluded)."""
    for root in nodes:
        for n in walk(root):
            if n.kind is NodeKind.CREATION:
                ctx.object_creations.add(n.type_name)


# ---------------- Methods ----------------

def _display_type(param: ParameterNode) -> str:
    return f"{param.type_name}..." if param.varargs else param.type_name


def is_entry_point(node: MethodNode) -> bool:
    if node.name != ENTRY_POINT_NAME or "static" not in node.modifiers:
        return False
    if len(node.parameters) != 1:
        return False
    param = node.parameters[0]
    if param.varargs:
        return param.type_name in _STRING_TYPES
    return param.type_name in tuple(t + "[]" for t in _STRING_TYPES)


def split_parameters(
    params: List[ParameterNode],
) -> Tuple[Tuple[Tuple[str, str], ...], Tuple[Tuple[str, str], ...]]:
    """(plain parameters, @RequestBody parameters), both as ordered (name, type) pairs."""
    plain: List[Tuple[str, str]] = []
    body: List[Tuple[str, str]] = []
    for p in params:
        target = body if any(a.name == REQUEST_BODY_ANNOTATION for a in p.annotations) else plain
        target.append((p.name, _display_type(p)))
    return tuple(plain), tuple(body)


def method_signature(node: MethodNode) -> MethodModel:
    """MethodModel without calls: everything readable from the declaration itself."""
    entry_arguments: Optional[Tuple[str, ...]] = None
    if is_entry_point(node):
        parameters: Tuple[Tuple[str, str], ...] = ()
        request_body: Tuple[Tuple[str, str], ...] = ()
        entry_arguments = tuple(f"{_display_type(p)} {p.name}" for p in node.parameters)
    else:
        parameters, request_body = split_parameters(node.parameters)

    return MethodModel(
        name=node.name,
        return_type=node.return_type,
        access=node.access,
        parameters=parameters,
        request_body=request_body,
        entry_arguments=entry_arguments,
        start_line=node.span.start,
        end_line=node.span.end,
        code=node.text,
        annotations=frozenset(to_annotation(a) for a in node.annotations),
    )


def extract_method(node: MethodNode, ctx: TypeContext) -> MethodModel:
    method = method_signature(node)

    calls = set()
    for n in walk(node):
        if n.kind is NodeKind.CALL:
            calls.add(record_call(n, ctx, method))
        elif n.kind is NodeKind.CREATION:
            ctx.object_creations.add(n.type_name)

    method = replace(method, calls=frozenset(calls))
    ctx.add_method(method)
    ctx.endpoints.extend(synthesize_endpoints(node, method, ctx))
    logger.debug("Extracted %s.%s with %d calls", ctx.type_name, method.name, len(calls))
    return method


def extract_constructor(node: ConstructorNode, ctx: TypeContext) -> None:
    # constructors are not part of methodList; they only contribute creations
    collect_creations(node.body, ctx)
