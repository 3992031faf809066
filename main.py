# Di dalam file: main.py

import logging
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import calculator
import schemas
from app.math.net_estate import calculate_net_estate
from config import settings
from errors import ValidationError
from models import KINSHIP_CATALOG

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Kalkulator Faraidh",
    description="API untuk perhitungan waris Islam (fiqh klasik Syafi'i & Kompilasi Hukum Islam)."
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    """
    Endpoint utama untuk menyapa pengguna.
    """
    return {"message": "Selamat datang di Kalkulator Faraidh"}


@app.get("/heirs/", response_model=List[schemas.KinshipCategoryInfo])
def read_heirs():
    """
    Endpoint untuk membaca daftar semua kategori ahli waris.
    """
    return [
        schemas.KinshipCategoryInfo(code=code, label=info.label, name_ar=info.name_ar, gender=info.gender)
        for code, info in KINSHIP_CATALOG.items()
    ]


@app.post("/calculate/net-estate/", response_model=schemas.NetEstateResult)
def run_net_estate(estate: schemas.EstateInputs):
    """Menghitung harta bersih (setelah tajhiz, hutang, wasiat & gono-gini)."""
    return calculate_net_estate(estate)


@app.post("/calculate/", response_model=schemas.DistributionResult)
def run_calculation(calculation_data: schemas.CalculationInput):
    """
    Endpoint utama untuk menjalankan perhitungan Faraidh.
    """
    mode = calculation_data.jurisdiction_mode
    if mode is None and "jurisdiction_mode" not in calculation_data.estate.model_fields_set:
        mode = settings.default_jurisdiction_mode
    try:
        return calculator.compute_distribution(
            calculation_data.estate,
            calculation_data.heirs,
            calculation_data.deceased_gender,
            mode,
        )
    except ValidationError as exc:
        logger.info("Input ahli waris ditolak: %s", exc)
        detail = {"message": exc.reason}
        if exc.category is not None:
            detail["category"] = exc.category.value
        raise HTTPException(status_code=400, detail=detail)
