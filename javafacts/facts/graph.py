import networkx as nx  # type: ignore
from typing import Any, Dict, Iterable, Optional

from javafacts.facts.model import UNKNOWN_CLASS


class CallGraph:
    """
    Typed multi-graph view over assembled documents.
    Nodes: type, method, external
    Edges: HAS_METHOD, NESTS, INHERITS, IMPLEMENTS, CALLS
    """

    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()
        self._by_simple_name: Dict[str, str] = {}

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str, **attrs: Any) -> None:
        self.g.add_edge(src, dst, etype=etype, **attrs)

    # ---------------- Ids ----------------

    @staticmethod
    def type_id(package: str, name: str) -> str:
        return f"type:{package}.{name}" if package else f"type:{name}"

    @staticmethod
    def method_id(type_id: str, method: str) -> str:
        return "method:" + type_id[len("type:"):] + "." + method

    def resolve_type(self, name: str, package: Optional[str] = None) -> Optional[str]:
        if package:
            candidate = self.type_id(package, name)
            if candidate in self.g:
                return candidate
        return self._by_simple_name.get(name)

    # ---------------- Loading ----------------

    def _add_type(self, doc: Dict[str, Any], parent: Optional[str] = None) -> None:
        tid = self.type_id(doc["packageName"], doc["className"])
        self.add_node(tid, "type", {
            "name": doc["className"],
            "package": doc["packageName"],
            "structType": doc["structType"],
            "file": doc["FilePath"],
        })
        self._by_simple_name.setdefault(doc["className"], tid)
        if parent is not None:
            self.add_edge(parent, tid, "NESTS")

        for m in doc["methodList"]:
            mid = self.method_id(tid, m["MethodName"])
            self.add_node(mid, "method", {"name": m["MethodName"], "returnType": m["ReturnType"]})
            self.add_edge(tid, mid, "HAS_METHOD")

        for inner in doc["innerClassList"]:
            self._add_type(inner, tid)

    def _link_type(self, doc: Dict[str, Any]) -> None:
        tid = self.type_id(doc["packageName"], doc["className"])
        if "extend" in doc:
            self.add_edge(tid, self._target(doc["extend"]), "INHERITS")
        for iface in doc.get("implementList", []):
            self.add_edge(tid, self._target(iface), "IMPLEMENTS")

        for m in doc["methodList"]:
            mid = self.method_id(tid, m["MethodName"])
            for call in m["Details"]["MethodCalls"]:
                if call["FromClass"] == UNKNOWN_CLASS:
                    continue
                owner = self.resolve_type(call["FromClass"], call["FromPackage"])
                if owner is None:
                    dst = self._target(call["FromClass"])
                else:
                    callee = self.method_id(owner, call["MethodName"])
                    dst = callee if callee in self.g else owner
                self.add_edge(mid, dst, "CALLS", name=call["MethodName"], line=call["Line"])

        for inner in doc["innerClassList"]:
            self._link_type(inner)

    def _target(self, name: str) -> str:
        tid = self.resolve_type(name)
        if tid is not None:
            return tid
        ext = f"external:{name}"
        if ext not in self.g:
            self.add_node(ext, "external", {"name": name})
        return ext

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            payload = data.get("payload")
            attrs = dict(payload) if isinstance(payload, dict) else {}
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": attrs,
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edge = {"src": src, "dst": dst, "type": data.get("etype")}
            edge.update({k: v for k, v in data.items() if k != "etype"})
            edges.append(edge)

        return {"nodes": nodes, "edges": edges}


def build_call_graph(documents: Iterable[Dict[str, Any]]) -> CallGraph:
    """Two passes: register every type and method, then add relation edges."""
    docs = list(documents)
    graph = CallGraph()
    for doc in docs:
        graph._add_type(doc)
    for doc in docs:
        graph._link_type(doc)
    return graph
