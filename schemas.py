# Di dalam file: schemas.py

from __future__ import annotations
from fractions import Fraction
from typing import Annotated, Any, List, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    WithJsonSchema,
)

from models import (
    BalanceState,
    DistributionStatus,
    Gender,
    JurisdictionMode,
    JuristicStatus,
    KinshipCategory,
)


# --- Pecahan eksak ---
def fraction_label(value: Fraction) -> str:
    """Fraction(1, 6) -> "1/6", Fraction(1) -> "1", Fraction(0) -> "0"."""
    if value.denominator == 1:
        return str(value.numerator)
    return f"{value.numerator}/{value.denominator}"


def _to_fraction(value: Any) -> Fraction:
    if isinstance(value, Fraction):
        return value
    if isinstance(value, bool):
        raise ValueError("Pecahan tidak boleh bertipe boolean")
    if isinstance(value, (int, str)):
        return Fraction(value)
    if isinstance(value, float):
        return Fraction(str(value))
    raise ValueError(f"Tidak dapat membaca pecahan dari {value!r}")


FractionValue = Annotated[
    Fraction,
    PlainValidator(_to_fraction),
    PlainSerializer(fraction_label, return_type=str),
    WithJsonSchema({"type": "string", "examples": ["1/6", "2/3"]}),
]


# --- Skema Ahli Waris ---
class IndividualHeir(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    category: KinshipCategory
    model_config = ConfigDict(frozen=True)


class KinshipCategoryInfo(BaseModel):
    code: KinshipCategory
    label: str         # Nama tampilan
    name_ar: str       # Nama dalam Bahasa Arab
    gender: Gender


# --- Skema Harta ---
class EstateInputs(BaseModel):
    gross_assets: int              # Total harta (satuan mata uang terkecil)
    funeral_cost: int = 0          # Biaya tajhiz
    debt: int = 0                  # Hutang
    bequest: int = 0               # Wasiat yang diminta
    joint_property_amount: int = 0 # Harta bersama (gono-gini), bagian dari gross_assets
    jurisdiction_mode: JurisdictionMode = JurisdictionMode.CLASSICAL


class NetEstateResult(BaseModel):
    net_estate: int
    spouse_joint_share: int = 0    # Separuh gono-gini milik pasangan (KHI)
    bequest_applied: int = 0
    note: List[str] = []


# --- Skema Perantara (hasil mesin furudh & hijab) ---
class ShareRecord(BaseModel):
    heir_id: str
    name: str
    category: KinshipCategory
    fraction_value: FractionValue = Fraction(0)   # pecahan dasar (milik golongan bila share_group diisi)
    fraction_label: str                           # misal "1/6", "2/3", "Asabah", "Mahjub"
    juristic_status: JuristicStatus
    note: str                                     # alasan (dalil) penetapan bagian
    takes_residue: bool = False                   # ikut menerima sisa ('ashabah)
    residue_weight: FractionValue = Fraction(0)   # bobot 2:1 dalam pembagian sisa
    share_group: Optional[str] = None             # pecahan milik golongan, dibagi rata per kepala
    substitute: bool = False                      # ahli waris pengganti (KHI)
    is_spouse: bool = False


# --- Skema Output ---
class HeirDistribution(BaseModel):
    heir_id: str
    name: str
    category: KinshipCategory
    final_fraction: FractionValue
    final_label: str
    final_amount: int
    juristic_status: JuristicStatus
    note: str


class Reconciliation(BaseModel):
    fixed_shares_total: int        # Total jatah Ashabul Furud sebelum penyesuaian
    residual: int                  # total_estate - fixed_shares_total
    balance_state: BalanceState
    unclaimed: int = 0             # Sisa tanpa penerima (kembali ke Baitul Mal)


class DistributionResult(BaseModel):
    total_estate: int
    status: DistributionStatus
    per_heir: List[HeirDistribution]
    narrative: List[str]
    reconciliation: Reconciliation
    ashl_awal: int = 1             # Asal Masalah sebelum 'Aul/Radd
    ashl_akhir: int = 1            # Asal Masalah setelah penyesuaian (tashih)
    net_estate_detail: Optional[NetEstateResult] = None


# --- Skema untuk Asal Masalah ---
class ComparisonItem(BaseModel):
    a: int                   # penyebut pecahan pertama
    b: int                   # penyebut pecahan kedua
    relation: str            # mumatsalah, mudakholah, muwafaqoh, mubayanah
    lcm: Optional[int] = None


class AshlInfo(BaseModel):
    ashl: int
    comparisons: List[ComparisonItem]


# --- Skema Input API ---
class CalculationInput(BaseModel):
    estate: EstateInputs
    heirs: List[IndividualHeir]
    deceased_gender: Gender
    jurisdiction_mode: Optional[JurisdictionMode] = None
