import json

import pytest

from javafacts.errors import OutputWriteError, SourceParseError
from javafacts.project import DocumentCollector, ProjectParser
from javafacts.facts.model import ExtractionResult


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    write(tmp_path / "src" / "com" / "acme" / "A.java", "package com.acme;\npublic class A { void f() {} }\n")
    write(tmp_path / "src" / "com" / "acme" / "B.java", "package com.acme;\nclass B {}\nclass C {}\n")
    write(tmp_path / "src" / "Broken.java", "public class Broken { void f( }\n")
    write(tmp_path / "target" / "Generated.java", "class Generated {}\n")
    write(tmp_path / ".git" / "Hidden.java", "class Hidden {}\n")
    write(tmp_path / "README.md", "not java\n")
    return tmp_path


def test_discovery_skips_build_and_vcs_dirs(project):
    files = ProjectParser(project).discover_files()
    assert [f.relative_to(project).as_posix() for f in files] == [
        "src/Broken.java",
        "src/com/acme/A.java",
        "src/com/acme/B.java",
    ]


def test_bad_file_is_skipped_and_reported(project):
    parser = ProjectParser(project, max_workers=1)
    docs = parser.parse()

    assert sorted(d["className"] for d in docs) == ["A", "B", "C"]
    assert {d["FilePath"] for d in docs} == {"src/com/acme/A.java", "src/com/acme/B.java"}
    [error] = parser.errors
    assert error["file"] == "src/Broken.java"
    assert "Java syntax error" in error["error"]


def test_undecodable_file_is_skipped(tmp_path):
    (tmp_path / "Latin.java").write_bytes(b"class Latin { String s = \"\xe9\xff\"; }")
    parser = ProjectParser(tmp_path, max_workers=1)

    assert parser.parse() == []
    assert parser.errors[0]["file"] == "Latin.java"


def test_parallel_pass_keeps_file_documents_together(tmp_path):
    for i in range(12):
        write(
            tmp_path / f"pkg{i}" / f"F{i}.java",
            f"package pkg{i};\nclass First{i} {{}}\nclass Second{i} {{}}\nclass Third{i} {{}}\n",
        )
    parser = ProjectParser(tmp_path, max_workers=4)
    docs = parser.parse()

    assert len(docs) == 36
    for start in range(0, 36, 3):
        batch = docs[start:start + 3]
        assert len({d["FilePath"] for d in batch}) == 1
        assert [d["className"].rstrip("0123456789") for d in batch] == ["First", "Second", "Third"]


def test_single_file_root(tmp_path):
    path = write(tmp_path / "Solo.java", "class Solo {}\n")
    docs = ProjectParser(path).parse()
    assert [(d["className"], d["FilePath"]) for d in docs] == [("Solo", "Solo.java")]


def test_write_output(project, tmp_path):
    parser = ProjectParser(project, max_workers=1)
    parser.parse()
    out = parser.write_output(tmp_path / "out" / "facts.json")

    data = json.loads(out.read_text(encoding="utf-8"))
    assert sorted(d["className"] for d in data) == ["A", "B", "C"]


def test_write_output_failure_raises(tmp_path):
    blocker = write(tmp_path / "blocker", "a file, not a directory")
    parser = ProjectParser(tmp_path)

    with pytest.raises(OutputWriteError):
        parser.write_output(blocker / "facts.json", [{"className": "A"}])


def test_collector_separates_errors():
    collector = DocumentCollector()
    collector.add(ExtractionResult(file_path="A.java", documents=[{"className": "A"}]))
    collector.add(ExtractionResult(file_path="B.java", error="boom"))

    assert collector.documents == [{"className": "A"}]
    assert collector.errors == [{"file": "B.java", "error": "boom"}]


def test_long_concatenation_does_not_abort_the_batch(tmp_path):
    literals = " + ".join(['"x"'] * 400)
    write(tmp_path / "Big.java", f"class Big {{\n    String s() {{\n        return {literals};\n    }}\n}}\n")
    write(tmp_path / "Ok.java", "class Ok { void f() { g(); } void g() {} }\n")
    parser = ProjectParser(tmp_path, max_workers=1)
    docs = parser.parse()

    assert sorted(d["className"] for d in docs) == ["Big", "Ok"]
    assert parser.errors == []
    big = next(d for d in docs if d["className"] == "Big")
    assert big["methodList"][0]["Details"]["EndLine"] == 4


def test_unexpected_failure_is_isolated_to_its_file(tmp_path, monkeypatch):
    write(tmp_path / "Bad.java", "class Bad {}\n")
    write(tmp_path / "Good.java", "class Good {}\n")
    parser = ProjectParser(tmp_path, max_workers=1)
    extract = parser.adapter.extract_types

    def failing(code, file_path=""):
        if file_path == "Bad.java":
            raise RuntimeError("lowering blew up")
        return extract(code, file_path=file_path)

    monkeypatch.setattr(parser.adapter, "extract_types", failing)
    docs = parser.parse()

    assert [d["className"] for d in docs] == ["Good"]
    assert parser.errors == [{"file": "Bad.java", "error": "RuntimeError: lowering blew up"}]


def test_recursion_error_becomes_source_parse_error(adapter, monkeypatch):
    def too_deep(unit, file_path="", code=""):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr("javafacts.extract.declarations.extract_compilation_unit", too_deep)

    with pytest.raises(SourceParseError, match="nests too deeply"):
        adapter.extract_types("class A {}\n", file_path="A.java")
