"""
Declaration extractor.

Walks one type declaration in two phases:
  1. register every field and every method name, so resolution of a call
     does not depend on where the callee is declared in the body
  2. visit members in source order: methods (calls, creations, endpoints),
     constructors and initializer blocks (creations), nested types (recursion
     with a fresh context sharing the file)

Nested type members are never visited by the enclosing type.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from javafacts.extract.context import FileContext, TypeContext
from javafacts.extract.endpoints import base_path_for
from javafacts.extract.members import (
    collect_creations,
    extract_constructor,
    extract_fields,
    extract_method,
)
from javafacts.facts.model import TypeModel
from javafacts.syntax import CompilationUnitNode, Node, NodeKind, TypeDeclNode

logger = logging.getLogger(__name__)


def _visit_field(member: Node, ctx: TypeContext) -> None:
    collect_creations(member.initializers, ctx)


def _visit_method(member: Node, ctx: TypeContext) -> None:
    extract_method(member, ctx)


def _visit_constructor(member: Node, ctx: TypeContext) -> None:
    extract_constructor(member, ctx)


def _visit_nested(member: Node, ctx: TypeContext) -> None:
    ctx.nested.append(extract_type(member, ctx.file))


def _visit_block(member: Node, ctx: TypeContext) -> None:
    # initializer blocks and enum constants
    collect_creations([member], ctx)


_MEMBER_VISITORS: Dict[NodeKind, Callable[[Node, TypeContext], None]] = {
    NodeKind.FIELD: _visit_field,
    NodeKind.METHOD: _visit_method,
    NodeKind.CONSTRUCTOR: _visit_constructor,
    NodeKind.TYPE_DECL: _visit_nested,
    NodeKind.BLOCK: _visit_block,
    NodeKind.CREATION: _visit_block,
}


def extract_type(node: TypeDeclNode, file: FileContext) -> TypeModel:
    ctx = TypeContext.for_declaration(node, file)
    ctx.base_path = base_path_for(node)

    for member in node.members:
        if member.kind is NodeKind.FIELD:
            extract_fields(member, ctx)
        elif member.kind is NodeKind.METHOD:
            ctx.method_names.add(member.name)

    for member in node.members:
        visit = _MEMBER_VISITORS.get(member.kind)
        if visit is not None:
            visit(member, ctx)

    model = ctx.build()
    logger.debug(
        "Extracted %s %s: %d fields, %d methods, %d nested",
        model.kind, model.qualified_name, len(model.fields), len(model.methods), len(model.nested),
    )
    return model


def file_context(unit: CompilationUnitNode, file_path: str = "", code: Optional[str] = None) -> FileContext:
    return FileContext(
        file_path=file_path.replace("\\", "/"),
        package=unit.package.name if unit.package is not None else "",
        imports=tuple(imp.name for imp in unit.imports),
        code=unit.text if code is None else code,
    )


def extract_compilation_unit(
    unit: CompilationUnitNode,
    file_path: str = "",
    code: Optional[str] = None,
) -> List[TypeModel]:
    """One TypeModel per top-level type declaration, in source order."""
    file = file_context(unit, file_path, code)
    return [extract_type(t, file) for t in unit.types]
