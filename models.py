# Di dalam file: models.py

from __future__ import annotations
from enum import Enum
from typing import Dict, NamedTuple


class KinshipCategory(str, Enum):
    """Katalog tertutup kategori kerabat (ahli waris) yang dikenali mesin."""

    SON = "ANAK_LAKI"
    DAUGHTER = "ANAK_PEREMPUAN"
    SON_OF_SON = "CUCU_LAKI_DARI_ANAK_LAKI"
    DAUGHTER_OF_SON = "CUCU_PEREMPUAN_DARI_ANAK_LAKI"
    SON_OF_DAUGHTER = "CUCU_LAKI_DARI_ANAK_PEREMPUAN"
    DAUGHTER_OF_DAUGHTER = "CUCU_PEREMPUAN_DARI_ANAK_PEREMPUAN"
    FATHER = "AYAH"
    MOTHER = "IBU"
    PATERNAL_GRANDFATHER = "KAKEK_DARI_AYAH"
    MATERNAL_GRANDMOTHER = "NENEK_DARI_IBU"
    PATERNAL_GRANDMOTHER = "NENEK_DARI_AYAH"
    HUSBAND = "SUAMI"
    WIFE = "ISTRI"
    FULL_BROTHER = "SAUDARA_LAKI_KANDUNG"
    FULL_SISTER = "SAUDARA_PEREMPUAN_KANDUNG"
    PATERNAL_BROTHER = "SAUDARA_LAKI_SEBAPAK"
    PATERNAL_SISTER = "SAUDARA_PEREMPUAN_SEBAPAK"
    MATERNAL_BROTHER = "SAUDARA_LAKI_SEIBU"
    MATERNAL_SISTER = "SAUDARA_PEREMPUAN_SEIBU"
    FULL_NEPHEW = "ANAK_LAKI_SAUDARA_LAKI_KANDUNG"
    PATERNAL_NEPHEW = "ANAK_LAKI_SAUDARA_LAKI_SEBAPAK"
    FULL_UNCLE = "PAMAN_KANDUNG"
    PATERNAL_UNCLE = "PAMAN_SEBAPAK"
    FULL_COUSIN = "ANAK_PAMAN_KANDUNG"
    PATERNAL_COUSIN = "ANAK_PAMAN_SEBAPAK"
    ADOPTED_CHILD = "ANAK_ANGKAT"

    @property
    def label(self) -> str:
        return KINSHIP_CATALOG[self].label

    @property
    def name_ar(self) -> str:
        return KINSHIP_CATALOG[self].name_ar


class Gender(str, Enum):
    MALE = "L"
    FEMALE = "P"


class JurisdictionMode(str, Enum):
    CLASSICAL = "SYAFII"   # Fiqh Mawaris mazhab Syafi'i
    STATUTORY = "KHI"      # Kompilasi Hukum Islam


class JuristicStatus(str, Enum):
    FIXED_SHARE = "Ashabul Furud"
    PRIMARY_RESIDUE = "Ashabah bin Nafs"
    RESIDUE_WITH_MALE = "Ashabah bil Ghair"
    RESIDUE_WITH_DAUGHTER = "Ashabah ma'al Ghair"
    BLOCKED = "Mahjub"
    DISTANT_KIN = "Dzawil Arham"
    MANDATORY_BEQUEST = "Wasiat Wajibah"


class DistributionStatus(str, Enum):
    BALANCED = "Adil"
    DEFICIT = "Aul"
    SURPLUS = "Radd"


class BalanceState(str, Enum):
    EXACT = "PAS"
    SURPLUS = "SISA"
    DEFICIT = "KURANG"


# --- Katalog kerabat ---
class KinshipInfo(NamedTuple):
    label: str            # Nama tampilan (Bahasa Indonesia)
    name_ar: str          # Nama dalam Bahasa Arab
    gender: Gender
    singleton: bool = False   # paling banyak satu orang per kasus


_L, _P = Gender.MALE, Gender.FEMALE
K = KinshipCategory

KINSHIP_CATALOG: Dict[KinshipCategory, KinshipInfo] = {
    K.SON: KinshipInfo("Anak Laki-laki", "ابن", _L),
    K.DAUGHTER: KinshipInfo("Anak Perempuan", "بنت", _P),
    K.SON_OF_SON: KinshipInfo("Cucu Laki-laki (dari Anak Lk)", "ابن ابن", _L),
    K.DAUGHTER_OF_SON: KinshipInfo("Cucu Perempuan (dari Anak Lk)", "بنت ابن", _P),
    K.SON_OF_DAUGHTER: KinshipInfo("Cucu Laki-laki (dari Anak Pr)", "ابن بنت", _L),
    K.DAUGHTER_OF_DAUGHTER: KinshipInfo("Cucu Perempuan (dari Anak Pr)", "بنت بنت", _P),
    K.FATHER: KinshipInfo("Ayah", "أب", _L, singleton=True),
    K.MOTHER: KinshipInfo("Ibu", "أم", _P, singleton=True),
    K.PATERNAL_GRANDFATHER: KinshipInfo("Kakek (Ayah dari Ayah)", "جد", _L, singleton=True),
    K.MATERNAL_GRANDMOTHER: KinshipInfo("Nenek (Ibu dari Ibu)", "جدة من الأم", _P, singleton=True),
    K.PATERNAL_GRANDMOTHER: KinshipInfo("Nenek (Ibu dari Ayah)", "جدة من الأب", _P, singleton=True),
    K.HUSBAND: KinshipInfo("Suami", "زوج", _L, singleton=True),
    K.WIFE: KinshipInfo("Istri", "زوجة", _P),
    K.FULL_BROTHER: KinshipInfo("Sdr Laki-laki Kandung", "أخ لأبوين", _L),
    K.FULL_SISTER: KinshipInfo("Sdr Perempuan Kandung", "أخت لأبوين", _P),
    K.PATERNAL_BROTHER: KinshipInfo("Sdr Laki-laki Sebapak", "أخ لأب", _L),
    K.PATERNAL_SISTER: KinshipInfo("Sdr Perempuan Sebapak", "أخت لأب", _P),
    K.MATERNAL_BROTHER: KinshipInfo("Sdr Laki-laki Seibu", "أخ لأم", _L),
    K.MATERNAL_SISTER: KinshipInfo("Sdr Perempuan Seibu", "أخت لأم", _P),
    K.FULL_NEPHEW: KinshipInfo("Anak Lk dari Sdr Lk Kandung", "ابن أخ لأبوين", _L),
    K.PATERNAL_NEPHEW: KinshipInfo("Anak Lk dari Sdr Lk Sebapak", "ابن أخ لأب", _L),
    K.FULL_UNCLE: KinshipInfo("Paman (Sdr Lk Ayah Kandung)", "عم لأبوين", _L),
    K.PATERNAL_UNCLE: KinshipInfo("Paman (Sdr Lk Ayah Sebapak)", "عم لأب", _L),
    K.FULL_COUSIN: KinshipInfo("Anak Paman Kandung", "ابن عم لأبوين", _L),
    K.PATERNAL_COUSIN: KinshipInfo("Anak Paman Sebapak", "ابن عم لأب", _L),
    K.ADOPTED_CHILD: KinshipInfo("Anak Angkat (Wasiat Wajibah)", "ابن بالتبني", _L),
}

SPOUSES = frozenset({K.HUSBAND, K.WIFE})
MAX_WIVES = 4

# Kelompok yang dipakai berulang oleh mesin hijab
DESCENDANTS = frozenset({K.SON, K.DAUGHTER, K.SON_OF_SON, K.DAUGHTER_OF_SON})
MALE_DESCENDANTS = frozenset({K.SON, K.SON_OF_SON})
SIBLINGS = frozenset({
    K.FULL_BROTHER, K.FULL_SISTER,
    K.PATERNAL_BROTHER, K.PATERNAL_SISTER,
    K.MATERNAL_BROTHER, K.MATERNAL_SISTER,
})
DISTANT_KIN = frozenset({K.SON_OF_DAUGHTER, K.DAUGHTER_OF_DAUGHTER})

# Urutan 'ashabah nasab setelah saudara (keponakan → paman → sepupu)
COLLATERAL_ORDER = (
    K.FULL_NEPHEW, K.PATERNAL_NEPHEW,
    K.FULL_UNCLE, K.PATERNAL_UNCLE,
    K.FULL_COUSIN, K.PATERNAL_COUSIN,
)
