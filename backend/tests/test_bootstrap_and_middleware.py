from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from medsched.core.middleware import RequestSizeLimitMiddleware
from medsched.db.bootstrap import REQUIRED_COLUMNS, ensure_runtime_schema_compatibility


def test_bootstrap_creates_every_required_table():
    engine = create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    ensure_runtime_schema_compatibility(engine)

    tables = set(inspect(engine).get_table_names())
    assert set(REQUIRED_COLUMNS) <= tables


def test_bootstrap_adds_missing_counter_columns():
    engine = create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE lecturers (id VARCHAR(36) PRIMARY KEY, name VARCHAR(200) NOT NULL, "
                "employee_number VARCHAR(50), expertise JSON NOT NULL, created_at DATETIME, updated_at DATETIME)"
            )
        )

    ensure_runtime_schema_compatibility(engine)

    columns = {item["name"] for item in inspect(engine).get_columns("lecturers")}
    assert {"pbl_assignment_count", "csr_assignment_count"} <= columns


def test_request_size_limit():
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=64)

    @app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    with TestClient(app) as client:
        assert client.post("/echo", json={"ok": True}).status_code == 200
        response = client.post("/echo", json={"rows": ["x" * 100]})

    assert response.status_code == 413
    assert "Ukuran data terlalu besar" in response.json()["message"]
