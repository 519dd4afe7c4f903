import logging
from bisect import bisect_left
from typing import Any, List, Optional

import javalang  # type: ignore
from javalang import tree as jt  # type: ignore
from javalang.ast import Node as JavaNode  # type: ignore

from javafacts.errors import SourceParseError
from javafacts.facts.model import TypeModel
from javafacts.syntax import (
    UNKNOWN_LINE,
    AnnotationNode,
    BlockNode,
    CallNode,
    CompilationUnitNode,
    ConstructorNode,
    CreationNode,
    FieldNode,
    ImportNode,
    MethodNode,
    Node,
    PackageNode,
    ParameterNode,
    ReturnNode,
    Span,
    TypeDeclNode,
    TypeKind,
)
from javafacts.adapters.java_render import (
    render_annotation,
    render_element_value,
    render_expression,
    render_primary,
    render_selector,
    render_type,
    simple_type_name,
    visibility_from_mods,
)

logger = logging.getLogger(__name__)

_TYPE_KINDS = (
    (jt.ClassDeclaration, TypeKind.CLASS),
    (jt.EnumDeclaration, TypeKind.ENUM),
    (jt.InterfaceDeclaration, TypeKind.INTERFACE),
    # annotation types are interfaces in the language model
    (jt.AnnotationDeclaration, TypeKind.INTERFACE),
)

_TYPE_DECLARATIONS = tuple(cls for cls, _ in _TYPE_KINDS)


class SourceIndex:
    """
    Line/position lookups over one compilation unit's text.

    javalang nodes only carry a start position. End lines are recovered from
    the token stream: starting at the declaration's first token, braces are
    matched at parenthesis depth 0 (so annotation arrays and anonymous
    classes inside argument lists are skipped); a `;` at depth 0 ends
    body-less declarations.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        self.lines = code.splitlines()
        self._tokens: Optional[list] = None
        self._starts: List[tuple] = []

    @property
    def tokens(self) -> list:
        if self._tokens is None:
            self._tokens = list(javalang.tokenizer.tokenize(self.code))
            self._starts = [(t.position.line, t.position.column) for t in self._tokens]
        return self._tokens

    def end_line(self, position: Any) -> int:
        if position is None:
            return UNKNOWN_LINE
        tokens = self.tokens
        start = bisect_left(self._starts, (position.line, position.column))

        paren = 0
        brace = 0
        for tok in tokens[start:]:
            value = tok.value
            if value == "(":
                paren += 1
            elif value == ")":
                paren -= 1
            elif paren == 0:
                if value == "{":
                    brace += 1
                elif value == "}":
                    brace -= 1
                    if brace <= 0:
                        return tok.position.line
                elif value == ";" and brace == 0:
                    return tok.position.line
        return UNKNOWN_LINE

    def span_of(self, node: Any) -> Span:
        position = getattr(node, "position", None)
        if position is None:
            return Span()
        return Span(position.line, self.end_line(position))

    def declaration_span(self, node: Any) -> Span:
        """Span of a declaration, starting at its first annotation when it has any."""
        span = self.span_of(node)
        if not span.known:
            return span
        annotation_lines = [
            a.position.line
            for a in getattr(node, "annotations", None) or []
            if getattr(a, "position", None) is not None
        ]
        return Span(min([span.start, *annotation_lines]), span.end)

    def text_of(self, span: Span) -> str:
        if not span.known or span.end == UNKNOWN_LINE:
            return self.code
        return "\n".join(self.lines[span.start - 1:span.end])


def _line_of(node: Any, fallback: int) -> int:
    position = getattr(node, "position", None)
    return position.line if position is not None else fallback


class JavaAdapter:
    """
    javalang → syntax tree lowering.

    Turns one compilation unit into the tagged-union tree of javafacts.syntax:
      - package / imports / type declarations (nested types kept in place)
      - fields, methods, constructors with their parameters and annotations
      - method bodies reduced to CALL / CREATION / RETURN / BLOCK nodes

    Selector chains (`repo.findAll().stream()`) become nested CALL nodes whose
    scope is the rendered text of everything before the call.
    """

    language = "java"

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str):
        try:
            return javalang.parse.parse(code)
        except javalang.parser.JavaSyntaxError as e:
            description = getattr(e, "description", None) or str(e)
            raise SourceParseError(f"Java syntax error: {description}") from e
        except Exception as e:
            raise SourceParseError(f"Failed to parse Java code: {type(e).__name__}: {e}") from e

    def parse_to_syntax(self, code: str) -> CompilationUnitNode:
        tree = self.parse_to_ast(code)
        return self.lower_compilation_unit(tree, SourceIndex(code))

    def extract_types(self, code: str, file_path: str = "") -> List[TypeModel]:
        """Parse one compilation unit and extract a TypeModel per top-level type."""
        from javafacts.extract.declarations import extract_compilation_unit

        try:
            unit = self.parse_to_syntax(code)
            return extract_compilation_unit(unit, file_path=file_path, code=code)
        except RecursionError as e:
            raise SourceParseError(f"Source nests too deeply to extract: {e}") from e

    # ---------------- Declarations ----------------

    def lower_compilation_unit(self, tree, index: SourceIndex) -> CompilationUnitNode:
        package = None
        if getattr(tree, "package", None) is not None:
            package = PackageNode(
                name=tree.package.name,
                span=index.span_of(tree.package),
                text=f"package {tree.package.name};",
            )

        imports = [self._lower_import(imp, index) for imp in tree.imports or []]
        types = [
            self._lower_type(t, index)
            for t in tree.types or []
            if isinstance(t, _TYPE_DECLARATIONS)
        ]
        logger.debug("Lowered compilation unit: %d imports, %d types", len(imports), len(types))
        return CompilationUnitNode(
            package=package,
            imports=imports,
            types=types,
            span=Span(1, len(index.lines)),
            text=index.code,
        )

    def _lower_import(self, imp, index: SourceIndex) -> ImportNode:
        name = f"{imp.path}.*" if imp.wildcard else imp.path
        keyword = "import static" if imp.static else "import"
        return ImportNode(
            name=name,
            static=bool(imp.static),
            wildcard=bool(imp.wildcard),
            span=index.span_of(imp),
            text=f"{keyword} {name};",
        )

    def _lower_annotations(self, annotations, line: int) -> List[AnnotationNode]:
        out: List[AnnotationNode] = []
        for a in annotations or []:
            element = a.element
            value = None
            pairs = {}
            if isinstance(element, list):
                pairs = {p.name: render_element_value(p.value) for p in element}
            elif element is not None:
                value = render_element_value(element)
            ann_line = _line_of(a, line)
            out.append(
                AnnotationNode(
                    name=a.name.split(".")[-1],
                    value=value,
                    pairs=pairs,
                    span=Span(ann_line, ann_line),
                    text=render_annotation(a),
                )
            )
        return out

    def _lower_type(self, t, index: SourceIndex) -> TypeDeclNode:
        kind = next(k for cls, k in _TYPE_KINDS if isinstance(t, cls))
        span = index.declaration_span(t)

        extends_attr = getattr(t, "extends", None)
        if extends_attr is None:
            extends = []
        elif isinstance(extends_attr, list):
            extends = [simple_type_name(e) for e in extends_attr]
        else:
            extends = [simple_type_name(extends_attr)]
        implements = [simple_type_name(i) for i in getattr(t, "implements", None) or []]

        body = t.body
        members_src: List[Any] = []
        if isinstance(t, jt.EnumDeclaration) and body is not None:
            members_src.extend(getattr(body, "constants", None) or [])
            members_src.extend(getattr(body, "declarations", None) or [])
        else:
            members_src.extend(body or [])

        members = [self._lower_member(m, index, span.start) for m in members_src]
        return TypeDeclNode(
            name=t.name,
            type_kind=kind,
            access=visibility_from_mods(t.modifiers),
            extends=extends,
            implements=implements,
            annotations=self._lower_annotations(t.annotations, span.start),
            members=[m for m in members if m is not None],
            span=span,
            text=index.text_of(span),
        )

    def _lower_parameters(self, params, line: int) -> List[ParameterNode]:
        out: List[ParameterNode] = []
        for p in params or []:
            p_line = _line_of(p, line)
            type_name = render_type(p.type)
            out.append(
                ParameterNode(
                    name=p.name,
                    type_name=type_name,
                    annotations=self._lower_annotations(getattr(p, "annotations", None), p_line),
                    varargs=bool(getattr(p, "varargs", False)),
                    span=Span(p_line, p_line),
                    text=f"{type_name} {p.name}",
                )
            )
        return out

    def _lower_member(self, m, index: SourceIndex, line: int) -> Optional[Node]:
        if isinstance(m, _TYPE_DECLARATIONS):
            return self._lower_type(m, index)

        span = index.declaration_span(m)
        m_line = span.start if span.known else line

        if isinstance(m, jt.FieldDeclaration):
            return FieldNode(
                type_name=render_type(m.type),
                access=visibility_from_mods(m.modifiers),
                variables=[d.name for d in m.declarators],
                annotations=self._lower_annotations(m.annotations, m_line),
                initializers=self._lower_all([d.initializer for d in m.declarators], m_line),
                span=span,
                text=index.text_of(span) if span.known else "",
            )

        if isinstance(m, (jt.MethodDeclaration, jt.AnnotationMethod)):
            return MethodNode(
                name=m.name,
                return_type=render_type(m.return_type),
                access=visibility_from_mods(m.modifiers),
                modifiers=tuple(sorted(m.modifiers or ())),
                parameters=self._lower_parameters(getattr(m, "parameters", None), m_line),
                annotations=self._lower_annotations(m.annotations, m_line),
                body=self._lower_all(getattr(m, "body", None), m_line),
                span=span,
                text=index.text_of(span) if span.known else "",
            )

        if isinstance(m, jt.ConstructorDeclaration):
            return ConstructorNode(
                name=m.name,
                access=visibility_from_mods(m.modifiers),
                parameters=self._lower_parameters(m.parameters, m_line),
                annotations=self._lower_annotations(m.annotations, m_line),
                body=self._lower_all(m.body, m_line),
                span=span,
                text=index.text_of(span) if span.known else "",
            )

        # initializer blocks, enum constants, stray statements
        return self._lower(m, m_line)

    # ---------------- Bodies ----------------

    def _lower_all(self, items, line: int) -> List[Node]:
        lowered = [self._lower(i, line) for i in items or []]
        return [n for n in lowered if n is not None]

    def _lower(self, obj: Any, line: int) -> Optional[Node]:
        if obj is None:
            return None
        if isinstance(obj, (list, tuple)):
            items = self._lower_all(obj, line)
            return BlockNode(items=items, span=Span(line, line)) if items else None
        if not isinstance(obj, JavaNode):
            return None

        line = _line_of(obj, line)

        if isinstance(obj, jt.ReturnStatement):
            expr = render_expression(obj.expression)
            return ReturnNode(
                expression=self._lower(obj.expression, line),
                span=Span(line, line),
                text=f"return {expr};" if expr else "return;",
            )
        if isinstance(obj, jt.BinaryOperation):
            return self._lower_operands(obj, line)
        if isinstance(obj, jt.Primary) and not isinstance(obj, (jt.LambdaExpression, jt.MethodReference)):
            return self._lower_primary(obj, line)
        return self._lower_generic(obj, line)

    def _lower_operands(self, obj: Any, line: int) -> BlockNode:
        # long `a + b + c ...` chains nest to the left; unwind them without recursion
        operands: List[Any] = []
        node = obj
        while isinstance(node, jt.BinaryOperation):
            operands.append(node.operandr)
            node = node.operandl
        operands.append(node)
        operands.reverse()
        return BlockNode(
            items=self._lower_all(operands, line),
            span=Span(line, line),
            text=render_expression(obj),
        )

    def _lower_generic(self, obj: Any, line: int, skip: tuple = ()) -> BlockNode:
        values = [getattr(obj, attr, None) for attr in obj.attrs if attr not in skip]
        return BlockNode(
            items=self._lower_all(values, line),
            span=Span(line, line),
            text=render_expression(obj),
        )

    def _lower_primary(self, obj: Any, line: int) -> Node:
        base_text = render_primary(obj, with_selectors=False)

        current: Node
        if isinstance(obj, jt.MethodInvocation):
            current = CallNode(
                name=obj.member,
                scope=obj.qualifier or None,
                arguments=self._lower_all(obj.arguments, line),
                span=Span(line, line),
                text=base_text,
            )
        elif isinstance(obj, jt.SuperMethodInvocation):
            current = CallNode(
                name=obj.member,
                scope="super",
                arguments=self._lower_all(obj.arguments, line),
                span=Span(line, line),
                text=base_text,
            )
        elif isinstance(obj, (jt.ClassCreator, jt.InnerClassCreator)):
            current = CreationNode(
                type_name=simple_type_name(obj.type),
                body=self._lower_all([*(obj.arguments or []), *(obj.body or [])], line),
                span=Span(line, line),
                text=base_text,
            )
        else:
            current = self._lower_generic(obj, line, skip=("selectors",))
            current.text = base_text

        scope_text = base_text
        for sel in getattr(obj, "selectors", None) or []:
            sel_line = _line_of(sel, line)
            if isinstance(sel, jt.MethodInvocation):
                current = CallNode(
                    name=sel.member,
                    scope=scope_text,
                    arguments=self._lower_all(sel.arguments, sel_line),
                    receiver=current,
                    span=Span(sel_line, sel_line),
                    text=scope_text + render_selector(sel),
                )
            else:
                extra = self._lower(sel, sel_line)
                if extra is not None and (extra.children or isinstance(extra, CreationNode)):
                    current = BlockNode(items=[current, extra], span=Span(line, line))
            scope_text += render_selector(sel)
            current.text = scope_text
        return current
