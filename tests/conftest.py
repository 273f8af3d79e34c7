from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from batchrec.db.base import Base
from batchrec.db.session import get_db, make_engine
from batchrec.main import app

engine = make_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def report_payload(**overrides) -> dict:
    payload = {
        "product_name": "SMS Fabric 45 GSM",
        "report_no": "TR-001",
        "performance_level": "LEVEL 3",
        "batch_no": "L-2291",
        "supplier_id": None,
        "batch_size": "5000 m",
        "invoice_no": "INV-77",
        "invoice_date": "2025-08-01",
        "mfg_date": "2025-07-01",
        "exp_date": "2027-06-30",
        "sample_qty": "2 m",
        "sample_date": "2025-08-02",
        "release_date": "2025-08-04",
        "fabric_composition": "100% Polypropylene",
        "result": "Comply",
        "tested_by": "Monu",
        "reviewed_by": "Jyoti",
    }
    payload.update(overrides)
    return payload


def bmr_payload(spec_id: int, **overrides) -> dict:
    payload = {
        "bmr_type": "standard",
        "product_type": "Gown",
        "product_name": "Surgical Gown L",
        "product_code": "SG-L",
        "batch_no": "B-001",
        "batch_size": "500 Pcs",
        "type_of_packing": "Single pouch",
        "raw_material_for_specification": spec_id,
        "raw_materials": [{"sNo": "1", "name": "SMS Fabric", "unit": "m", "requiredQty": "900"}],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def supplier_id(client) -> int:
    res = client.post("/suppliers", json={"name": "Acme Nonwovens"})
    assert res.status_code == 200, res.text
    return res.json()["id"]


@pytest.fixture
def spec_id(client, supplier_id) -> int:
    res = client.post("/rm-test-reports", json=report_payload(supplier_id=supplier_id))
    assert res.status_code == 200, res.text
    return res.json()["id"]
