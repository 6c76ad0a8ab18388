"""Tests exporting a real SQLite database through SQLAlchemy."""

import json
import logging
import os
import stat

import pytest
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError

from jcatalog_exporter.config import ExportOptions
from jcatalog_exporter.core import CatalogBuilder, CatalogExporter, write_document
from jcatalog_exporter.exceptions import ConnectionFailure, MetadataQueryFailure, OutputWriteFailure
from jcatalog_exporter.services import borrowed_metadata_session, open_metadata_session

from conftest import FakeMetadataSource, id_column


def tables_by_name(schema):
    return {table["name"]: table for table in schema["tables"]}


def test_export_sample_database(sample_db_url, tmp_path):
    output_path = str(tmp_path / "out.jcatalog")
    exporter = CatalogExporter(ExportOptions(output_path=output_path))

    result = exporter.export_url(sample_db_url)

    assert result.output_path == output_path
    assert result.message == f"Successfully exported metadata to: {output_path}"
    assert result.summary == {"schemas": 1, "tables": 3, "associations": 1}

    with open(output_path, encoding="utf-8") as f:
        data = json.load(f)

    catalog = data["connection"]["catalogs"][0]
    assert catalog["name"] == "default"
    assert [s["name"] for s in catalog["schemas"]] == ["main"]

    schema = catalog["schemas"][0]
    tables = tables_by_name(schema)
    assert set(tables) == {"customer", "order", "order_line"}

    customer = {c["name"]: c["metadata"] for c in tables["customer"]["columns"]}
    assert list(customer) == ["id", "name", "email"]
    assert customer["name"] == {"type": "VARCHAR", "size": 200, "nullable": False}
    assert customer["email"]["nullable"] is True
    assert customer["id"]["type"] == "INTEGER"
    assert customer["id"]["size"] == 10
    assert tables["customer"]["primarykey"] == {"columns": [{"column": "id", "position": "1"}]}

    order = tables["order"]
    assert {c["name"]: c["metadata"] for c in order["columns"]}["total"]["default"] == "0"
    assert order["foreignkeys"] == [{
        "name": "FK_customer_id",
        "referencedTable": "customer",
        "referencedSchema": "main",
        "columns": [{"column": "customer_id", "referencedColumn": "id", "position": "1"}],
    }]

    order_line = tables["order_line"]
    assert order_line["primarykey"]["columns"] == [
        {"column": "order_id", "position": "1"},
        {"column": "line_no", "position": "2"},
    ]
    assert order_line["foreignkeys"][0]["referencedTable"] == "order"

    association, = schema["associations"]
    assert association["type"] == "many-to-many"
    assert association["junctionTable"] == "mod$customer_order"
    assert association["name"] == "Customer_Order"
    assert {association["entity1"], association["entity2"]} == {"customer", "order"}


def test_output_is_pretty_printed_and_stable(sample_db_url, tmp_path):
    first = tmp_path / "first.jcatalog"
    second = tmp_path / "second.jcatalog"

    CatalogExporter(ExportOptions(output_path=str(first))).export_url(sample_db_url)
    CatalogExporter(ExportOptions(output_path=str(second))).export_url(sample_db_url)

    content = first.read_bytes()
    assert content == second.read_bytes()
    assert content.startswith(b'{\n    "connection": {\n        "catalogs": [')


def test_include_system_tables(sample_db_url, tmp_path):
    options = ExportOptions(output_path=str(tmp_path / "all.jcatalog"), include_system_tables=True)

    with open_metadata_session(sample_db_url) as source:
        document = CatalogExporter(options).build(source)

    names = [t.name for t in document.catalog.schemas[0].tables]
    assert "system$user" in names
    assert "mxsequence" in names


def test_borrowed_connection_stays_open(sqlite_engine, tmp_path):
    options = ExportOptions(output_path=str(tmp_path / "borrowed.jcatalog"))

    with sqlite_engine.connect() as connection:
        result = CatalogExporter(options).export_connection(connection)
        assert not connection.closed

        with borrowed_metadata_session(connection) as source:
            assert [t.name for t in source.get_tables("main")][0] == "customer"

    assert result.summary["tables"] == 3


def test_connection_failure():
    with pytest.raises(ConnectionFailure):
        with open_metadata_session("nosuchdialect://localhost/db"):
            pass


def test_write_failure_reports_output_error(sample_db_url, tmp_path):
    options = ExportOptions(output_path=str(tmp_path / "missing" / "out.jcatalog"))

    with pytest.raises(OutputWriteFailure) as exc_info:
        CatalogExporter(options).export_url(sample_db_url)

    assert isinstance(exc_info.value.__cause__, OSError)


def test_failed_export_leaves_existing_output_untouched(tmp_path):
    target = tmp_path / "existing.jcatalog"
    target.write_text("previous export", encoding="utf-8")

    source = FakeMetadataSource()
    source.add_table("public", "customer", columns=[id_column()])
    source.failures[("public", "customer")] = OperationalError("SELECT", {}, Exception("boom"))
    options = ExportOptions(output_path=str(target), skip_failing_tables=False)

    with pytest.raises(MetadataQueryFailure):
        CatalogExporter(options).export(source)

    assert target.read_text(encoding="utf-8") == "previous export"
    assert [p.name for p in tmp_path.iterdir()] == ["existing.jcatalog"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_output_file_honors_umask(shop_source, tmp_path):
    document = CatalogBuilder(shop_source).build()
    output_path = tmp_path / "shared.jcatalog"

    previous = os.umask(0o022)
    try:
        write_document(document, str(output_path))
    finally:
        os.umask(previous)

    assert stat.S_IMODE(output_path.stat().st_mode) == 0o644


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_output_file_keeps_existing_mode(shop_source, tmp_path):
    output_path = tmp_path / "restricted.jcatalog"
    output_path.write_text("{}", encoding="utf-8")
    os.chmod(output_path, 0o640)

    write_document(CatalogBuilder(shop_source).build(), str(output_path))

    assert stat.S_IMODE(output_path.stat().st_mode) == 0o640
    assert output_path.read_text(encoding="utf-8").startswith('{\n    "connection"')


def test_close_failure_does_not_fail_export(sample_db_url, tmp_path, monkeypatch, caplog):
    def failing_close(self):
        raise OperationalError("close", {}, Exception("connection reset"))
    monkeypatch.setattr(Connection, "close", failing_close)
    output_path = tmp_path / "out.jcatalog"

    with caplog.at_level(logging.WARNING):
        result = CatalogExporter(ExportOptions(output_path=str(output_path))).export_url(sample_db_url)

    assert result.summary["tables"] == 3
    assert output_path.exists()
    assert "Failed to close connection" in caplog.text


def test_owned_connection_closed_when_body_raises(sample_db_url):
    with pytest.raises(RuntimeError, match="interrupted"):
        with open_metadata_session(sample_db_url) as source:
            connection = source.connection
            assert not connection.closed
            raise RuntimeError("interrupted")

    assert connection.closed
