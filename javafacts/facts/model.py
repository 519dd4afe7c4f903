from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

StructType = Literal["Class", "Interface", "Enum", "Record"]

UNKNOWN_CLASS = "Unknown"
UNKNOWN_PACKAGE = "Unknown Package"
NO_PARENT = "None"
SELF_SCOPE = "this"


@dataclass(frozen=True)
class Annotation:
    name: str
    text: str                 # raw source form, e.g. @GetMapping("/{id}")
    value: Optional[str] = None
    line: int = -1


@dataclass(frozen=True)
class FieldModel:
    name: str
    type_name: str
    access: str = "package"
    annotations: frozenset = frozenset()
    line: int = -1


@dataclass(frozen=True)
class CallEdge:
    name: str
    scope: str = SELF_SCOPE
    from_class: str = UNKNOWN_CLASS
    from_package: Optional[str] = None
    line: int = -1
    is_persistence: bool = False


@dataclass(frozen=True)
class PersistenceOperation:
    operation: str
    method: str
    line: int = -1
    details: str = ""


@dataclass(frozen=True)
class MethodModel:
    name: str
    return_type: str
    access: str = "package"
    parameters: Tuple[Tuple[str, str], ...] = ()      # ordered (name, type)
    request_body: Tuple[Tuple[str, str], ...] = ()
    entry_arguments: Optional[Tuple[str, ...]] = None  # only set on an entry point
    start_line: int = -1
    end_line: int = -1
    code: str = ""
    annotations: frozenset = frozenset()
    calls: frozenset = frozenset()

    def parameter_type(self, name: str) -> Optional[str]:
        for pname, ptype in (*self.parameters, *self.request_body):
            if pname == name:
                return ptype
        return None


@dataclass(frozen=True)
class Endpoint:
    method: str
    annotation: str
    http_method: str
    path: str
    parameters: Tuple[Tuple[str, str], ...] = ()
    request_body: Tuple[Tuple[str, str], ...] = ()
    response_type: str = "void"
    response_generic_type: Optional[str] = None
    response_package: str = UNKNOWN_PACKAGE
    response_generic_package: Optional[str] = None
    returned_body: Optional[str] = None
    returned_body_package: str = UNKNOWN_PACKAGE


@dataclass(frozen=True)
class TypeModel:
    kind: StructType
    name: str
    package: str = ""
    access: str = "package"
    superclass: Optional[str] = None
    interfaces: Tuple[str, ...] = ()           # de-duplicated, declaration order
    annotations: frozenset = frozenset()
    field_annotations: frozenset = frozenset()
    fields: Tuple[FieldModel, ...] = ()
    methods: Tuple[MethodModel, ...] = ()
    nested: Tuple["TypeModel", ...] = ()
    object_creations: frozenset = frozenset()
    imports: Tuple[str, ...] = ()
    persistence_operations: frozenset = frozenset()
    endpoints: Tuple[Endpoint, ...] = ()
    code: str = ""
    file_path: str = ""
    start_line: int = -1
    end_line: int = -1

    @property
    def parent_type(self) -> str:
        if self.superclass:
            return self.superclass
        for iface in self.interfaces:
            return iface
        return NO_PARENT

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    def find_field(self, name: str) -> Optional[FieldModel]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class ExtractionResult:
    """Per-file outcome: documents for each top-level type, or the error that stopped it."""

    file_path: str
    documents: list = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
