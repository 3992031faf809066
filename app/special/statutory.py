# app/special/statutory.py
"""
Tambahan khusus Kompilasi Hukum Islam (KHI):
  - Wasiat wajibah untuk anak angkat (Pasal 209), paling banyak 1/3 harta,
    dikeluarkan sebelum pembagian faraidh.
  - Ahli waris pengganti (Pasal 185): cucu dari anak laki-laki yang telah wafat
    menempati kedudukan orang tuanya bersama anak-anak pewaris yang masih hidup.
"""
from fractions import Fraction
from typing import List, Mapping, Tuple

from models import JurisdictionMode, JuristicStatus, KinshipCategory as K
from schemas import IndividualHeir, ShareRecord

MANDATORY_BEQUEST_CAP = Fraction(1, 3)
BEQUEST_GROUP = "WASIAT_WAJIBAH"

# bobot Anak Laki-laki yang digantikan
SON_WEIGHT = Fraction(2)


def mandatory_bequest_records(adopted: List[IndividualHeir], net_estate: int) -> List[ShareRecord]:
    # Seluruh anak angkat berbagi satu wasiat wajibah 1/3, dibagi rata
    amount = MANDATORY_BEQUEST_CAP * net_estate
    note = (
        f"Wasiat wajibah anak angkat maksimal 1/3 harta (≈ {int(amount)}), "
        "dikeluarkan sebelum pembagian faraidh."
    )
    if len(adopted) > 1:
        note += f" Dibagi rata untuk {len(adopted)} anak angkat."
    return [
        ShareRecord(
            heir_id=h.id,
            name=h.name,
            category=h.category,
            fraction_value=MANDATORY_BEQUEST_CAP,
            fraction_label="1/3 (Wasiat Wajibah)",
            juristic_status=JuristicStatus.MANDATORY_BEQUEST,
            note=note,
            share_group=BEQUEST_GROUP,
        )
        for h in adopted
    ]


def uses_substitution(counts: Mapping[K, int], mode: JurisdictionMode) -> bool:
    """Cucu dari anak laki-laki menjadi pengganti bila ada anak pewaris yang masih hidup."""
    if mode != JurisdictionMode.STATUTORY:
        return False
    has_child = counts.get(K.SON, 0) > 0 or counts.get(K.DAUGHTER, 0) > 0
    has_grandchild = counts.get(K.SON_OF_SON, 0) > 0 or counts.get(K.DAUGHTER_OF_SON, 0) > 0
    return has_child and has_grandchild


def substitute_weights(grandsons: int, granddaughters: int) -> Tuple[Fraction, Fraction]:
    """
    Semua cucu pengganti bersama-sama menempati satu Anak Laki-laki (bobot 2),
    lalu bobot itu dibagi di antara mereka 2:1.
    Return (bobot per cucu laki-laki, bobot per cucu perempuan).
    """
    parts = 2 * grandsons + granddaughters
    if parts == 0:
        return Fraction(0), Fraction(0)
    unit = SON_WEIGHT / parts
    return 2 * unit, unit
