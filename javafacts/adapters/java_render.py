"""
Render javalang nodes back into compact Java source text.

javalang keeps no source spans for expressions, so call scopes, persistence
details and annotation forms are rebuilt from the tree. The output follows
the usual pretty-printed shape: `List<Item>`, `repo.findById(id)`,
`@GetMapping("/{id}")`.
"""

from __future__ import annotations

from typing import Any, Optional, Set

from javalang import tree as jt  # type: ignore
from javalang.ast import Node as JavaNode  # type: ignore


def visibility_from_mods(mods: Optional[Set[str]]) -> str:
    mods = mods or set()
    if "public" in mods:
        return "public"
    if "private" in mods:
        return "private"
    if "protected" in mods:
        return "protected"
    return "package"


# ---------------- Types ----------------

def render_type(t: Any) -> str:
    """Full type text, e.g. `Map<String, List<Item>>`, `int[]`, `java.util.Date`."""
    if t is None:
        return "void"
    if isinstance(t, str):
        return t

    text = t.name
    args = getattr(t, "arguments", None)
    if args:
        text += "<" + ", ".join(_render_type_argument(a) for a in args) + ">"
    elif isinstance(args, list):
        # diamond: `new ArrayList<>()`
        text += "<>"
    sub = getattr(t, "sub_type", None)
    if sub is not None:
        text += "." + render_type(sub)
    dims = getattr(t, "dimensions", None) or []
    return text + "[]" * len(dims)


def _render_type_argument(arg: Any) -> str:
    pattern = getattr(arg, "pattern_type", None)
    if pattern == "?":
        return "?"
    inner = render_type(arg.type) if getattr(arg, "type", None) is not None else ""
    if pattern in ("extends", "super"):
        return f"? {pattern} {inner}"
    return inner


def simple_type_name(t: Any) -> str:
    """Last identifier of a (possibly qualified) reference type: `java.util.List<X>` → `List`."""
    if t is None:
        return ""
    while getattr(t, "sub_type", None) is not None:
        t = t.sub_type
    return t.name


# ---------------- Annotations ----------------

def render_element_value(value: Any) -> str:
    if isinstance(value, jt.ElementArrayValue):
        return "{" + ", ".join(render_element_value(v) for v in value.values or []) + "}"
    if isinstance(value, jt.Annotation):
        return render_annotation(value)
    return render_expression(value)


def render_annotation(annotation: Any) -> str:
    text = "@" + annotation.name
    element = annotation.element
    if element is None:
        return text
    if isinstance(element, list):
        pairs = ", ".join(f"{p.name} = {render_element_value(p.value)}" for p in element)
        return f"{text}({pairs})"
    return f"{text}({render_element_value(element)})"


# ---------------- Expressions ----------------

def _args(arguments: Any) -> str:
    return ", ".join(render_expression(a) for a in arguments or [])


def render_selector(selector: Any) -> str:
    if isinstance(selector, jt.ArraySelector):
        return f"[{render_expression(selector.index)}]"
    return "." + render_primary(selector)


def render_primary(node: Any, with_selectors: bool = True) -> str:
    qualifier = getattr(node, "qualifier", None)
    prefix = f"{qualifier}." if qualifier else ""

    if isinstance(node, jt.MethodInvocation):
        core = f"{prefix}{node.member}({_args(node.arguments)})"
    elif isinstance(node, jt.SuperMethodInvocation):
        core = f"super.{node.member}({_args(node.arguments)})"
    elif isinstance(node, jt.SuperConstructorInvocation):
        core = f"super({_args(node.arguments)})"
    elif isinstance(node, jt.ExplicitConstructorInvocation):
        core = f"this({_args(node.arguments)})"
    elif isinstance(node, jt.SuperMemberReference):
        core = f"super.{node.member}"
    elif isinstance(node, jt.MemberReference):
        core = f"{prefix}{node.member}"
    elif isinstance(node, jt.This):
        core = f"{prefix}this"
    elif isinstance(node, jt.Literal):
        core = str(node.value)
    elif isinstance(node, jt.ClassReference):
        core = f"{prefix}{render_type(node.type)}.class"
    elif isinstance(node, jt.ArrayCreator):
        dims = "".join(f"[{render_expression(d) if d is not None else ''}]" for d in node.dimensions or [])
        core = f"new {render_type(node.type)}{dims}"
        if node.initializer is not None:
            core += " " + render_expression(node.initializer)
    elif isinstance(node, (jt.ClassCreator, jt.InnerClassCreator)):
        # `outer.new Inner()` keeps its qualifier
        outer = prefix if isinstance(node, jt.InnerClassCreator) else ""
        core = f"{outer}new {render_type(node.type)}({_args(node.arguments)})"
        if node.body:
            core += " {...}"
    elif isinstance(node, jt.LambdaExpression):
        params = ", ".join(getattr(p, "name", None) or render_expression(p) for p in node.parameters or [])
        body = node.body
        rendered_body = "{...}" if isinstance(body, list) else render_expression(body)
        core = f"({params}) -> {rendered_body}"
    else:
        core = type(node).__name__

    text = "".join(getattr(node, "prefix_operators", None) or []) + core
    if with_selectors:
        text += "".join(render_selector(s) for s in getattr(node, "selectors", None) or [])
    return text + "".join(getattr(node, "postfix_operators", None) or [])


def render_expression(node: Any) -> str:
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, (list, tuple)):
        return ", ".join(render_expression(n) for n in node)
    if isinstance(node, jt.BinaryOperation):
        # left-nested chains are unwound iteratively
        tail = []
        while isinstance(node, jt.BinaryOperation):
            tail.append(f" {node.operator} {render_expression(node.operandr)}")
            node = node.operandl
        return render_expression(node) + "".join(reversed(tail))
    if isinstance(node, jt.TernaryExpression):
        return (
            f"{render_expression(node.condition)} ? {render_expression(node.if_true)}"
            f" : {render_expression(node.if_false)}"
        )
    if isinstance(node, jt.Assignment):
        return f"{render_expression(node.expressionl)} {node.type} {render_expression(node.value)}"
    if isinstance(node, jt.Cast):
        return f"({render_type(node.type)}) {render_expression(node.expression)}"
    if isinstance(node, jt.MethodReference):
        return f"{render_expression(node.expression)}::{render_expression(node.method)}"
    if isinstance(node, jt.ArrayInitializer):
        return "{" + _args(node.initializers) + "}"
    if isinstance(node, jt.Primary):
        return render_primary(node)
    if isinstance(node, JavaNode) and hasattr(node, "name"):
        return str(node.name)
    return type(node).__name__
