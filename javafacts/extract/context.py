"""
Traversal state for one type declaration.

The extractor never keeps state on itself: a FileContext is shared read-only
by every type of a compilation unit, and each type declaration (nested ones
included) gets its own TypeContext builder that is threaded explicitly through
the member, call and endpoint extractors, then frozen into a TypeModel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from javafacts.facts.model import (
    Annotation,
    Endpoint,
    FieldModel,
    MethodModel,
    PersistenceOperation,
    TypeModel,
)
from javafacts.syntax import AnnotationNode, TypeDeclNode


def to_annotation(node: AnnotationNode) -> Annotation:
    raw = node.value if node.value is not None else node.pairs.get("value", node.pairs.get("path"))
    value = raw.replace('"', "") if raw is not None else None
    return Annotation(name=node.name, text=node.text or f"@{node.name}", value=value, line=node.line)


@dataclass(frozen=True)
class FileContext:
    file_path: str
    package: str = ""
    imports: Tuple[str, ...] = ()
    code: str = ""


@dataclass
class TypeContext:
    file: FileContext
    node: TypeDeclNode
    superclass: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    base_path: str = ""

    fields: Dict[str, FieldModel] = field(default_factory=dict)
    method_names: Set[str] = field(default_factory=set)
    methods: Dict[str, MethodModel] = field(default_factory=dict)
    annotations: Set[Annotation] = field(default_factory=set)
    field_annotations: Set[Annotation] = field(default_factory=set)
    object_creations: Set[str] = field(default_factory=set)
    persistence_operations: Set[PersistenceOperation] = field(default_factory=set)
    endpoints: List[Endpoint] = field(default_factory=list)
    nested: List[TypeModel] = field(default_factory=list)

    @classmethod
    def for_declaration(cls, node: TypeDeclNode, file: FileContext) -> "TypeContext":
        return cls(
            file=file,
            node=node,
            superclass=node.extends[0] if node.extends else None,
            interfaces=tuple(dict.fromkeys(node.implements)),
            annotations={to_annotation(a) for a in node.annotations},
        )

    @property
    def type_name(self) -> str:
        return self.node.name

    @property
    def package(self) -> str:
        return self.file.package

    @property
    def imports(self) -> Tuple[str, ...]:
        return self.file.imports

    def add_method(self, method: MethodModel) -> None:
        # keyed by name: a later overload replaces an earlier one in place
        self.methods[method.name] = method

    def build(self) -> TypeModel:
        node = self.node
        return TypeModel(
            kind=node.type_kind.value,
            name=node.name,
            package=self.package,
            access=node.access,
            superclass=self.superclass,
            interfaces=self.interfaces,
            annotations=frozenset(self.annotations),
            field_annotations=frozenset(self.field_annotations),
            fields=tuple(self.fields.values()),
            methods=tuple(self.methods.values()),
            nested=tuple(self.nested),
            object_creations=frozenset(self.object_creations),
            imports=self.imports,
            persistence_operations=frozenset(self.persistence_operations),
            endpoints=tuple(self.endpoints),
            code=node.text or self.file.code,
            file_path=self.file.file_path,
            start_line=node.span.start,
            end_line=node.span.end,
        )
