import json

from typer.testing import CliRunner

from topicgraph.cli import app
from topicgraph.engine import GraphEngine
from topicgraph.migrate import LATEST_VERSION

runner = CliRunner()


def _write(tmp_path, document, name="topic.json"):
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


def _sample_document():
    engine = GraphEngine()
    engine.add_node("0", "child", "criterion")
    engine.add_node("0", "child", "solution")
    return engine.to_persisted()


def _v0_document():
    return {
        "diagrams": {
            "root": {
                "nodes": [
                    {"id": "0", "type": "Problem", "data": {"label": "Cars are slow"}},
                    {"id": "1", "type": "Solution", "data": {"label": "Build trains"}},
                ],
                "edges": [{"id": "0", "source": "0", "target": "1"}],
                "direction": "TB",
            }
        },
    }


def test_validate_reports_counts(tmp_path):
    result = runner.invoke(app, ["validate", _write(tmp_path, _sample_document())])
    assert result.exit_code == 0
    report = json.loads(result.stdout)
    assert report == {"valid": True, "version": LATEST_VERSION, "diagrams": 1, "nodes": 3, "edges": 3}


def test_validate_rejects_broken_document(tmp_path):
    document = _sample_document()
    document["diagrams"]["topicDiagram"]["nodes"][0]["type"] = "widget"
    result = runner.invoke(app, ["validate", _write(tmp_path, document)])
    assert result.exit_code == 1
    assert '"valid": false' in result.stdout


def test_missing_file_fails(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])
    assert result.exit_code == 1


def test_migrate_writes_output_file(tmp_path):
    source = _write(tmp_path, _v0_document(), "old.json")
    target = tmp_path / "out" / "new.json"
    result = runner.invoke(app, ["migrate", source, "--output", str(target)])
    assert result.exit_code == 0
    assert f"Wrote version {LATEST_VERSION}" in result.stdout

    migrated = json.loads(target.read_text(encoding="utf-8"))
    assert migrated["version"] == LATEST_VERSION
    assert migrated["diagrams"]["topicDiagram"]["edges"][0]["label"] == "solves"


def test_layout_prints_positions(tmp_path):
    result = runner.invoke(app, ["layout", _write(tmp_path, _sample_document())])
    assert result.exit_code == 0
    positions = json.loads(result.stdout)
    assert set(positions) == {"0", "1", "2"}
    assert positions["0"]["y"] < positions["2"]["y"]


def test_layout_unknown_diagram(tmp_path):
    result = runner.invoke(app, ["layout", _write(tmp_path, _sample_document()), "--diagram", "node-9"])
    assert result.exit_code == 1


def test_table_prints_rows(tmp_path):
    result = runner.invoke(app, ["table", _write(tmp_path, _sample_document()), "0"])
    assert result.exit_code == 0
    table = json.loads(result.stdout)
    assert table["criteria"] == ["1"]
    assert table["solutions"] == [{"id": "2", "label": "new node"}]
    assert table["rows"][0]["cells"]["2"] is not None
    assert table["rows"][0]["criterion"] == "new node"


def test_table_unknown_problem(tmp_path):
    result = runner.invoke(app, ["table", _write(tmp_path, _sample_document()), "99"])
    assert result.exit_code == 1
