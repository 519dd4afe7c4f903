from javafacts.extract.context import FileContext
from javafacts.extract.declarations import extract_type
from javafacts.facts.document import assemble
from javafacts.syntax import (
    AnnotationNode,
    BlockNode,
    CallNode,
    ConstructorNode,
    CreationNode,
    FieldNode,
    MethodNode,
    ParameterNode,
    Span,
    TypeDeclNode,
    TypeKind,
)


def test_record_kind_from_hand_built_tree():
    node = TypeDeclNode(
        name="Point",
        type_kind=TypeKind.RECORD,
        access="public",
        implements=["Comparable", "Serializable", "Comparable"],
        members=[
            MethodNode(
                name="norm",
                return_type="double",
                access="public",
                body=[CallNode(name="sqrt", scope="Math", span=Span(4, 4), text="Math.sqrt(x * x + y * y)")],
                span=Span(3, 5),
                text="public double norm() {...}",
            ),
        ],
        span=Span(1, 6),
        text="public record Point(int x, int y) {...}",
    )
    file = FileContext(file_path="geo/Point.java", package="geo", imports=())

    model = extract_type(node, file)

    assert model.kind == "Record"
    assert model.interfaces == ("Comparable", "Serializable")
    assert model.parent_type == "Comparable"
    [method] = model.methods
    assert (method.start_line, method.end_line) == (3, 5)
    [edge] = method.calls
    assert (edge.scope, edge.from_class, edge.line) == ("Math", "Unknown", 4)


def test_fields_are_registered_before_methods_are_resolved():
    # the field is declared after the method that uses it
    node = TypeDeclNode(
        name="Late",
        members=[
            MethodNode(name="run", body=[CallNode(name="send", scope="client", span=Span(3, 3))]),
            FieldNode(type_name="HttpClient", variables=["client"], span=Span(5, 5)),
        ],
    )
    file = FileContext(file_path="Late.java", imports=("java.net.http.HttpClient",))

    [edge] = extract_type(node, file).methods[0].calls

    assert (edge.from_class, edge.from_package) == ("HttpClient", "java.net.http")


def test_unscoped_call_to_later_method_resolves_to_own_type():
    node = TypeDeclNode(
        name="Job",
        members=[
            MethodNode(name="run", body=[CallNode(name="step", span=Span(2, 2))]),
            MethodNode(name="step"),
        ],
    )
    model = extract_type(node, FileContext(file_path="Job.java", package="jobs"))
    [edge] = model.methods[0].calls
    assert (edge.from_class, edge.from_package) == ("Job", "jobs")


def test_object_creations_come_from_every_member_kind_but_not_nested_types():
    inner = TypeDeclNode(
        name="Inner",
        members=[MethodNode(name="g", body=[CreationNode(type_name="OnlyInner")])],
    )
    node = TypeDeclNode(
        name="Outer",
        members=[
            FieldNode(type_name="List", variables=["items"], initializers=[CreationNode(type_name="ArrayList")]),
            ConstructorNode(name="Outer", body=[CreationNode(type_name="Lock")]),
            BlockNode(items=[CreationNode(type_name="Timer")]),
            MethodNode(name="f", body=[BlockNode(items=[CreationNode(type_name="StringBuilder")])]),
            inner,
        ],
    )
    model = extract_type(node, FileContext(file_path="Outer.java"))

    assert model.object_creations == {"ArrayList", "Lock", "Timer", "StringBuilder"}
    assert [m.name for m in model.methods] == ["f"]
    [nested] = model.nested
    assert nested.name == "Inner"
    assert nested.object_creations == {"OnlyInner"}
    assert nested.file_path == "Outer.java"


def test_persistence_field_annotations_synthesize_operations():
    node = TypeDeclNode(
        name="Repo",
        members=[
            FieldNode(
                type_name="EntityManager",
                variables=["em", "backup"],
                annotations=[AnnotationNode(name="PersistenceContext", span=Span(3, 3), text="@PersistenceContext")],
                span=Span(4, 4),
            ),
            FieldNode(
                type_name="String",
                variables=["sql"],
                annotations=[AnnotationNode(name="Value", value='"${q}"', text='@Value("${q}")')],
            ),
        ],
    )
    model = extract_type(node, FileContext(file_path="Repo.java"))

    ops = sorted((op.operation, op.method, op.line, op.details) for op in model.persistence_operations)
    assert ops == [
        ("PersistenceContext", "backup", 3, "@PersistenceContext"),
        ("PersistenceContext", "em", 3, "@PersistenceContext"),
    ]
    assert {a.text for a in model.field_annotations} == {"@PersistenceContext", '@Value("${q}")'}
    assert [f.name for f in model.fields] == ["em", "backup", "sql"]


def test_entry_point_with_varargs():
    main = MethodNode(
        name="main",
        modifiers=("public", "static"),
        parameters=[ParameterNode(name="args", type_name="String", varargs=True)],
    )
    doc = assemble(extract_type(TypeDeclNode(name="App", members=[main]), FileContext(file_path="App.java")))

    details = doc["methodList"][0]["Details"]
    assert details["methodParameters"] == {}
    assert details["EntryPointArguments"] == ["String... args"]


def test_non_static_main_is_an_ordinary_method():
    main = MethodNode(
        name="main",
        parameters=[ParameterNode(name="args", type_name="String[]")],
    )
    doc = assemble(extract_type(TypeDeclNode(name="App", members=[main]), FileContext(file_path="App.java")))

    details = doc["methodList"][0]["Details"]
    assert details["methodParameters"] == {"args": "String[]"}
    assert "EntryPointArguments" not in details


def test_positionless_nodes_report_unknown_lines():
    # a tree producer without positions leaves every span at its default
    query = MethodNode(name="load", body=[CallNode(name="executeQuery", text="st.executeQuery(sql)")])
    doc = assemble(extract_type(TypeDeclNode(name="Dao", members=[query]), FileContext(file_path="Dao.java")))

    details = doc["methodList"][0]["Details"]
    assert (details["StartLine"], details["EndLine"]) == (-1, -1)
    [call] = details["MethodCalls"]
    assert call["MethodName"] == "executeQuery"
    assert call["Line"] == -1
    [op] = doc["DatabaseOperations"]
    assert (op["Operation"], op["Method"], op["Line"]) == ("executeQuery", "load", -1)
