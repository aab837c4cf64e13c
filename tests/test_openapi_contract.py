import json
from pathlib import Path

from app.main import app


def test_openapi_paths_snapshot():
    snapshot_path = Path(__file__).parent / "snapshots" / "openapi_paths_snapshot.json"
    expected_paths = json.loads(snapshot_path.read_text(encoding="utf-8"))
    actual_paths = sorted(app.openapi()["paths"].keys())
    assert actual_paths == expected_paths


def test_openapi_documents_error_envelope_for_stock_mutations():
    schema = app.openapi()
    remove_stock = schema["paths"]["/inventory/remove-stock"]["post"]
    assert {"400", "404", "409", "422"} <= set(remove_stock["responses"].keys())
    assert "ErrorOut" in schema["components"]["schemas"]
