from __future__ import annotations

from typing import List, Optional

from javafacts.extract.calls import lookup_package
from javafacts.extract.context import TypeContext
from javafacts.facts.model import UNKNOWN_PACKAGE, Endpoint, MethodModel
from javafacts.syntax import AnnotationNode, MethodNode, NodeKind, TypeDeclNode, walk

HTTP_VERBS = {
    "GetMapping": "GET",
    "PostMapping": "POST",
    "PutMapping": "PUT",
    "DeleteMapping": "DELETE",
}
GENERIC_VERB = "REQUEST"

BASE_PATH_ANNOTATION = "RequestMapping"
ROUTING_ANNOTATIONS = frozenset({*HTTP_VERBS, "RequestMapping", "PatchMapping"})


def http_method_for(annotation_name: str) -> str:
    return HTTP_VERBS.get(annotation_name, GENERIC_VERB)


def path_from_annotation(annotation: AnnotationNode) -> str:
    """Literal path of a routing annotation: single member, else `value` / `path`, else ""."""
    raw = annotation.value
    if raw is None:
        raw = annotation.pairs.get("value", annotation.pairs.get("path"))
    if raw is None:
        return ""
    raw = raw.strip()
    if raw.startswith("{") and raw.endswith("}"):
        # array of paths: the first one names the route
        raw = raw[1:-1].split(",")[0].strip()
    return raw.replace('"', "")


def combine_paths(base_path: str, method_path: str) -> str:
    if not base_path.startswith("/"):
        base_path = "/" + base_path
    if base_path.endswith("/"):
        base_path = base_path[:-1]
    if not method_path.startswith("/"):
        method_path = "/" + method_path
    return base_path + method_path


def base_path_for(node: TypeDeclNode) -> str:
    for annotation in node.annotations:
        if annotation.name == BASE_PATH_ANNOTATION:
            return path_from_annotation(annotation)
    return ""


def generic_argument(type_text: str) -> Optional[str]:
    """`ResponseEntity<List<User>>` → `List<User>`; None unless exactly one argument."""
    start = type_text.find("<")
    end = type_text.rfind(">")
    if start < 0 or end < start:
        return None
    inner = type_text[start + 1:end].strip()
    depth = 0
    for ch in inner:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "," and depth == 0:
            return None
    return inner or None


def returned_body(method: MethodNode) -> Optional[str]:
    """Classify the first `return <expr>` of a method body."""
    for node in walk(method):
        if node.kind is not NodeKind.RETURN:
            continue
        expr = node.expression
        if expr is None:
            continue
        if expr.kind is NodeKind.CREATION:
            return expr.type_name
        if expr.kind is NodeKind.CALL:
            return expr.name
        if expr.text:
            return expr.text
        return node.text.removeprefix("return").rstrip(";").strip() or None
    return None


def _package_or_unknown(type_text: Optional[str], ctx: TypeContext) -> str:
    if not type_text:
        return UNKNOWN_PACKAGE
    return lookup_package(type_text, ctx) or UNKNOWN_PACKAGE


def synthesize_endpoints(node: MethodNode, method: MethodModel, ctx: TypeContext) -> List[Endpoint]:
    """One Endpoint per routing annotation on the method."""
    endpoints: List[Endpoint] = []
    for annotation in node.annotations:
        if annotation.name not in ROUTING_ANNOTATIONS:
            continue

        response_type = method.return_type
        generic = generic_argument(response_type)
        outer = response_type[: response_type.find("<")] if generic else response_type
        body = returned_body(node)

        endpoints.append(
            Endpoint(
                method=method.name,
                annotation=annotation.name,
                http_method=http_method_for(annotation.name),
                path=combine_paths(ctx.base_path, path_from_annotation(annotation)),
                parameters=method.parameters,
                request_body=method.request_body,
                response_type=response_type,
                response_generic_type=generic,
                response_package=_package_or_unknown(outer, ctx),
                response_generic_package=_package_or_unknown(generic, ctx) if generic else None,
                returned_body=body,
                returned_body_package=_package_or_unknown(body, ctx),
            )
        )
    return endpoints
