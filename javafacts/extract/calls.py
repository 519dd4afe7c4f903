"""
Best-effort attribution of call expressions to an originating type.

Resolution order (first match wins):
  1. receiver is a field of the enclosing type      → field's declared type
  2. receiver is an import (exact or dotted suffix) → import's simple name
  3. receiver is a parameter of the current method  → parameter's declared type
  4. receiver is `this` or the enclosing type name  → enclosing type
  5. no receiver: method of the enclosing type, then superclass / interfaces
     (through member_exists), then static imports by `.name` suffix
  6. well-known factory names                       → hardcoded type
  7. otherwise                                      → "Unknown", no package

This is a heuristic, not a type checker: nothing here ever raises for an
unresolvable symbol.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, NamedTuple, Optional, Tuple

from javafacts.extract.context import TypeContext
from javafacts.facts.model import (
    SELF_SCOPE,
    UNKNOWN_CLASS,
    CallEdge,
    MethodModel,
    PersistenceOperation,
)
from javafacts.syntax import CallNode

logger = logging.getLogger(__name__)

PERSISTENCE_OPERATIONS = frozenset({
    "executeQuery",
    "executeUpdate",
    "execute",
    "prepareStatement",
    "createStatement",
    "setAutoCommit",
    "commit",
    "rollback",
    "close",
})

# factory calls whose owner is known without looking at imports
KNOWN_FACTORIES = {
    "ok": "ResponseEntity",
    "noContent": "ResponseEntity",
    "created": "ResponseEntity",
    "accepted": "ResponseEntity",
    "badRequest": "ResponseEntity",
    "notFound": "ResponseEntity",
}


class Resolution(NamedTuple):
    from_class: str
    from_package: Optional[str] = None


UNRESOLVED = Resolution(UNKNOWN_CLASS, None)

_QUALIFIED_NAME = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)+$")


# ---------------- Import helpers ----------------

def base_type_name(type_text: str) -> str:
    """`List<User>[]` → `List`; `java.util.Date` stays qualified."""
    return type_text.split("<", 1)[0].replace("[]", "").replace("...", "").strip()


def split_qualified(name: str) -> Tuple[str, Optional[str]]:
    """`com.acme.Repo` → (`Repo`, `com.acme`)."""
    if "." not in name:
        return name, None
    package, simple = name.rsplit(".", 1)
    return simple, package


def resolve_from_imports(imports: Iterable[str], name: str) -> Optional[str]:
    for imp in imports:
        if imp == name or imp.endswith("." + name):
            return imp
    return None


def lookup_package(type_text: str, ctx: TypeContext) -> Optional[str]:
    base = base_type_name(type_text)
    if not base:
        return None
    imp = resolve_from_imports(ctx.imports, base)
    if imp is not None:
        return split_qualified(imp)[1]
    if _QUALIFIED_NAME.match(base):
        return split_qualified(base)[1]
    if base == ctx.type_name:
        return ctx.package
    return None


def member_exists(type_name: str, method_name: str) -> bool:
    """
    Whether `type_name` declares `method_name`.

    Types outside the current declaration are never loaded, so this always
    answers False and unscoped calls are not attributed to a superclass or
    interface.
    """
    return False


# ---------------- Resolution ----------------

def _resolve_scoped(scope: str, ctx: TypeContext, method: Optional[MethodModel]) -> Optional[Resolution]:
    field = ctx.fields.get(scope)
    if field is not None:
        return Resolution(field.type_name, lookup_package(field.type_name, ctx))

    imp = resolve_from_imports(ctx.imports, scope)
    if imp is not None:
        return Resolution(*split_qualified(imp))

    if method is not None:
        param_type = method.parameter_type(scope)
        if param_type is not None:
            return Resolution(param_type, lookup_package(param_type, ctx))

    if scope == SELF_SCOPE or scope == ctx.type_name:
        return Resolution(ctx.type_name, ctx.package)
    return None


def _resolve_unscoped(name: str, ctx: TypeContext) -> Optional[Resolution]:
    if name in ctx.method_names:
        return Resolution(ctx.type_name, ctx.package)

    if ctx.superclass and member_exists(ctx.superclass, name):
        return Resolution(ctx.superclass, lookup_package(ctx.superclass, ctx))

    for iface in ctx.interfaces:
        if member_exists(iface, name):
            return Resolution(iface, lookup_package(iface, ctx))

    for imp in ctx.imports:
        if imp.endswith("." + name):
            owner = imp[: imp.rindex(".")]
            return Resolution(*split_qualified(owner))
    return None


def resolve_call(call: CallNode, ctx: TypeContext, method: Optional[MethodModel] = None) -> Resolution:
    if call.scope:
        resolved = _resolve_scoped(call.scope, ctx, method)
    else:
        resolved = _resolve_unscoped(call.name, ctx)
    if resolved is not None:
        return resolved

    factory_owner = KNOWN_FACTORIES.get(call.name)
    if factory_owner is not None:
        return Resolution(factory_owner, lookup_package(factory_owner, ctx))
    return UNRESOLVED


def is_persistence_operation(name: str) -> bool:
    return name in PERSISTENCE_OPERATIONS


def record_call(call: CallNode, ctx: TypeContext, method: MethodModel) -> CallEdge:
    """Resolve one call inside `method` and register any persistence operation it implies."""
    resolution = resolve_call(call, ctx, method)
    persistent = is_persistence_operation(call.name)
    if persistent:
        ctx.persistence_operations.add(
            PersistenceOperation(
                operation=call.name,
                method=method.name,
                line=call.line,
                details=call.text or call.name,
            )
        )
    if resolution is UNRESOLVED:
        logger.debug("Unresolved call %s in %s.%s", call.name, ctx.type_name, method.name)
    return CallEdge(
        name=call.name,
        scope=call.scope or SELF_SCOPE,
        from_class=resolution.from_class,
        from_package=resolution.from_package,
        line=call.line,
        is_persistence=persistent,
    )
