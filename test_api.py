# Di dalam file: test_api.py

from fastapi.testclient import TestClient

import main
from models import JurisdictionMode

client = TestClient(main.app)


def test_sapaan():
    response = client.get("/")
    assert response.status_code == 200
    assert "Kalkulator Faraidh" in response.json()["message"]


def test_daftar_ahli_waris():
    response = client.get("/heirs/")
    assert response.status_code == 200
    codes = {item["code"]: item for item in response.json()}
    assert codes["SUAMI"]["gender"] == "L"
    assert codes["IBU"]["label"] == "Ibu"
    assert len(codes) == 26


def test_harta_bersih():
    response = client.post("/calculate/net-estate/", json={"gross_assets": 900, "bequest": 600})
    assert response.status_code == 200
    assert response.json()["net_estate"] == 600


def test_hitung_skenario_istri_anak():
    payload = {
        "estate": {"gross_assets": 120_000_000},
        "heirs": [
            {"id": "w", "name": "Istri", "category": "ISTRI"},
            {"id": "s", "name": "Anak Laki-laki", "category": "ANAK_LAKI"},
            {"id": "d1", "name": "Anak Perempuan 1", "category": "ANAK_PEREMPUAN"},
            {"id": "d2", "name": "Anak Perempuan 2", "category": "ANAK_PEREMPUAN"},
        ],
        "deceased_gender": "L",
    }
    response = client.post("/calculate/", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Adil"
    shares = {h["heir_id"]: h for h in data["per_heir"]}
    assert shares["w"]["final_fraction"] == "1/8"
    assert shares["s"]["final_amount"] == 52_500_000
    assert shares["d2"]["final_amount"] == 26_250_000
    assert data["reconciliation"]["balance_state"] == "SISA"


def test_input_kontradiktif_400():
    payload = {
        "estate": {"gross_assets": 1_000},
        "heirs": [{"id": "h", "name": "Suami", "category": "SUAMI"}],
        "deceased_gender": "L",
    }
    response = client.post("/calculate/", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"]["category"] == "SUAMI"


def test_mode_bawaan_dari_pengaturan(monkeypatch):
    monkeypatch.setattr(main.settings, "default_jurisdiction_mode", JurisdictionMode.STATUTORY)
    payload = {
        "estate": {"gross_assets": 900},
        "heirs": [
            {"id": "s", "name": "Anak", "category": "ANAK_LAKI"},
            {"id": "a", "name": "Anak Angkat", "category": "ANAK_ANGKAT"},
        ],
        "deceased_gender": "L",
    }
    data = client.post("/calculate/", json=payload).json()
    shares = {h["heir_id"]: h["final_amount"] for h in data["per_heir"]}
    assert shares == {"s": 600, "a": 300}
