# app/math/ashl.py

import math
from fractions import Fraction
from typing import Iterable, List

from schemas import AshlInfo, ComparisonItem


def bandingkan(a: int, b: int) -> ComparisonItem:
    """
    Bandingkan dua penyebut furudh untuk menentukan:
    - Mumatsalah (sama)
    - Mudakholah (salah satu masuk ke lainnya)
    - Muwafaqoh (ada faktor persekutuan)
    - Mubayanah (berbeda total)
    """
    if a == b:
        relation = "Mumatsalah"
    elif a % b == 0 or b % a == 0:
        relation = "Mudakholah"
    elif math.gcd(a, b) > 1:
        relation = "Muwafaqoh"
    else:
        relation = "Mubayanah"

    return ComparisonItem(a=a, b=b, relation=relation, lcm=math.lcm(a, b))


def compute_ashl(fractions: Iterable[Fraction]) -> AshlInfo:
    """
    Menentukan Asal Mas'alah (KPK seluruh penyebut) dari daftar pecahan.
    Pecahan nol diabaikan; tanpa pecahan sama sekali, AM = 1.
    Perbandingan hanya dicatat untuk penyebut yang berbeda.
    """
    denominators: List[int] = sorted({f.denominator for f in fractions if f > 0})
    if not denominators:
        return AshlInfo(ashl=1, comparisons=[])

    comparisons: List[ComparisonItem] = []
    for i in range(len(denominators)):
        for j in range(i + 1, len(denominators)):
            comparisons.append(bandingkan(denominators[i], denominators[j]))

    return AshlInfo(ashl=math.lcm(*denominators), comparisons=comparisons)
