"""
Tagged-union syntax tree consumed by the extraction engine.

The tree producer (javalang, see adapters/java_adapter.py) lowers its own AST
into these node classes. Every node carries:
  - kind      (NodeKind tag used for dispatch)
  - span      (start/end line, -1 when the producer has no position)
  - text      (raw source text of the node, best effort)
  - children  (child nodes in source order)

Extraction code dispatches on `kind` and never looks at producer types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple

UNKNOWN_LINE = -1


class NodeKind(str, Enum):
    COMPILATION_UNIT = "compilation_unit"
    PACKAGE = "package"
    IMPORT = "import"
    ANNOTATION = "annotation"
    TYPE_DECL = "type_decl"
    FIELD = "field"
    PARAMETER = "parameter"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    CALL = "call"
    CREATION = "creation"
    RETURN = "return"
    BLOCK = "block"


class TypeKind(str, Enum):
    CLASS = "Class"
    INTERFACE = "Interface"
    ENUM = "Enum"
    RECORD = "Record"


@dataclass(frozen=True)
class Span:
    start: int = UNKNOWN_LINE
    end: int = UNKNOWN_LINE

    @property
    def known(self) -> bool:
        return self.start != UNKNOWN_LINE


@dataclass
class Node:
    kind: ClassVar[NodeKind]
    span: Span = field(default_factory=Span, kw_only=True)
    text: str = field(default="", kw_only=True)

    @property
    def children(self) -> List["Node"]:
        return []

    @property
    def line(self) -> int:
        return self.span.start


@dataclass
class PackageNode(Node):
    name: str = ""

    kind: ClassVar[NodeKind] = NodeKind.PACKAGE


@dataclass
class ImportNode(Node):
    name: str = ""
    static: bool = False
    wildcard: bool = False

    kind: ClassVar[NodeKind] = NodeKind.IMPORT


@dataclass
class AnnotationNode(Node):
    """
    name  : simple annotation name (RequestMapping)
    value : rendered single-member value, quotes kept ("/api")
    pairs : rendered named members, quotes kept ({"path": "\"/api\""})
    """

    name: str = ""
    value: Optional[str] = None
    pairs: Dict[str, str] = field(default_factory=dict)

    kind: ClassVar[NodeKind] = NodeKind.ANNOTATION


@dataclass
class ParameterNode(Node):
    name: str = ""
    type_name: str = ""
    annotations: List[AnnotationNode] = field(default_factory=list)
    varargs: bool = False

    kind: ClassVar[NodeKind] = NodeKind.PARAMETER

    @property
    def children(self) -> List[Node]:
        return list(self.annotations)


@dataclass
class CallNode(Node):
    """A method invocation. `scope` is the receiver text, None when unqualified."""

    name: str = ""
    scope: Optional[str] = None
    arguments: List[Node] = field(default_factory=list)
    receiver: Optional[Node] = None

    kind: ClassVar[NodeKind] = NodeKind.CALL

    @property
    def children(self) -> List[Node]:
        head: List[Node] = [self.receiver] if self.receiver is not None else []
        return [*head, *self.arguments]


@dataclass
class CreationNode(Node):
    type_name: str = ""
    body: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.CREATION

    @property
    def children(self) -> List[Node]:
        return list(self.body)


@dataclass
class ReturnNode(Node):
    expression: Optional[Node] = None

    kind: ClassVar[NodeKind] = NodeKind.RETURN

    @property
    def children(self) -> List[Node]:
        return [self.expression] if self.expression is not None else []


@dataclass
class BlockNode(Node):
    """Any statement or expression the engine has no dedicated kind for."""

    items: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.BLOCK

    @property
    def children(self) -> List[Node]:
        return list(self.items)


@dataclass
class FieldNode(Node):
    type_name: str = ""
    access: str = "package"
    variables: List[str] = field(default_factory=list)
    annotations: List[AnnotationNode] = field(default_factory=list)
    initializers: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.FIELD

    @property
    def children(self) -> List[Node]:
        return [*self.annotations, *self.initializers]


@dataclass
class MethodNode(Node):
    name: str = ""
    return_type: str = "void"
    access: str = "package"
    modifiers: Tuple[str, ...] = ()
    parameters: List[ParameterNode] = field(default_factory=list)
    annotations: List[AnnotationNode] = field(default_factory=list)
    body: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.METHOD

    @property
    def children(self) -> List[Node]:
        return [*self.annotations, *self.parameters, *self.body]


@dataclass
class ConstructorNode(Node):
    name: str = ""
    access: str = "package"
    parameters: List[ParameterNode] = field(default_factory=list)
    annotations: List[AnnotationNode] = field(default_factory=list)
    body: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.CONSTRUCTOR

    @property
    def children(self) -> List[Node]:
        return [*self.annotations, *self.parameters, *self.body]


@dataclass
class TypeDeclNode(Node):
    name: str = ""
    type_kind: TypeKind = TypeKind.CLASS
    access: str = "package"
    extends: List[str] = field(default_factory=list)
    implements: List[str] = field(default_factory=list)
    annotations: List[AnnotationNode] = field(default_factory=list)
    members: List[Node] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.TYPE_DECL

    @property
    def children(self) -> List[Node]:
        return [*self.annotations, *self.members]


@dataclass
class CompilationUnitNode(Node):
    package: Optional[PackageNode] = None
    imports: List[ImportNode] = field(default_factory=list)
    types: List[TypeDeclNode] = field(default_factory=list)

    kind: ClassVar[NodeKind] = NodeKind.COMPILATION_UNIT

    @property
    def children(self) -> List[Node]:
        head: List[Node] = [self.package] if self.package is not None else []
        return [*head, *self.imports, *self.types]


def walk(node: Node, *, into_types: bool = False) -> Iterator[Node]:
    """
    Depth-first pre-order traversal in source order.
    Nested type declarations are not entered unless `into_types` is set.
    """
    stack: List[Node] = [node]
    while stack:
        n = stack.pop()
        yield n
        children = n.children
        if not into_types:
            children = [c for c in children if c.kind is not NodeKind.TYPE_DECL]
        stack.extend(reversed(children))
