# app/special/umariyyatain.py
from fractions import Fraction
from typing import Mapping

from models import DESCENDANTS, SIBLINGS, KinshipCategory as K


def is_umariyyatain(counts: Mapping[K, int]) -> bool:
    """
    Gharrawain / 'Umariyyatain: Suami atau Istri bersama Ayah dan Ibu,
    tanpa keturunan dan tanpa ≥2 saudara.
    """
    has_spouse = counts.get(K.HUSBAND, 0) > 0 or counts.get(K.WIFE, 0) > 0
    has_parents = counts.get(K.FATHER, 0) > 0 and counts.get(K.MOTHER, 0) > 0
    has_descendant = any(counts.get(c, 0) > 0 for c in DESCENDANTS)
    siblings = sum(counts.get(c, 0) for c in SIBLINGS)
    return has_spouse and has_parents and not has_descendant and siblings < 2


def mother_share(spouse_fraction: Fraction) -> Fraction:
    """Ibu mendapat 1/3 dari sisa setelah bagian Suami/Istri (bukan 1/3 seluruh harta)."""
    return (1 - spouse_fraction) / 3
