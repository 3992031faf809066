# app/rules/validation.py

from __future__ import annotations
from collections import Counter
from typing import List

from errors import ValidationError
from models import KINSHIP_CATALOG, MAX_WIVES, Gender, KinshipCategory
from schemas import IndividualHeir


def validate_heirs(heirs: List[IndividualHeir], deceased_gender: Gender) -> None:
    """
    Tolak input hubungan kerabat yang kontradiktif sebelum perhitungan:
      - id ahli waris ganda
      - Suami untuk pewaris laki-laki / Istri untuk pewaris perempuan
      - ahli waris tunggal (Ayah, Ibu, Kakek, Nenek, Suami) lebih dari satu
      - Istri lebih dari empat
    """
    ids = Counter(h.id for h in heirs)
    duplicated = [i for i, n in ids.items() if n > 1]
    if duplicated:
        dup_heir = next(h for h in heirs if h.id == duplicated[0])
        raise ValidationError(f"id ahli waris '{duplicated[0]}' dipakai lebih dari sekali", dup_heir.category)

    counts = Counter(h.category for h in heirs)

    if deceased_gender == Gender.MALE and counts[KinshipCategory.HUSBAND]:
        raise ValidationError("pewaris laki-laki tidak mungkin meninggalkan Suami", KinshipCategory.HUSBAND)
    if deceased_gender == Gender.FEMALE and counts[KinshipCategory.WIFE]:
        raise ValidationError("pewaris perempuan tidak mungkin meninggalkan Istri", KinshipCategory.WIFE)

    for category, n in counts.items():
        if KINSHIP_CATALOG[category].singleton and n > 1:
            raise ValidationError(
                f"{category.label} hanya boleh satu orang, diterima {n}", category
            )

    if counts[KinshipCategory.WIFE] > MAX_WIVES:
        raise ValidationError(
            f"Istri paling banyak {MAX_WIVES} orang, diterima {counts[KinshipCategory.WIFE]}",
            KinshipCategory.WIFE,
        )
