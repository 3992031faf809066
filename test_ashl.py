# Di dalam file: test_ashl.py

from fractions import Fraction

import pytest

from app.math.ashl import bandingkan, compute_ashl
from calculator import compute_distribution
from models import Gender, KinshipCategory as K
from schemas import EstateInputs, IndividualHeir


def run_tashih_test(heirs_input, expected_am_awal, expected_am_akhir, expected_fractions):
    """Fungsi pembantu khusus untuk tes tashih (AM akhir setelah pembagian per kepala)."""
    heirs = [
        IndividualHeir(id=f"{c.value}-{i}", name=c.label, category=c)
        for c, n in heirs_input
        for i in range(1, n + 1)
    ]
    result = compute_distribution(EstateInputs(gross_assets=3_600), heirs, Gender.MALE)

    assert result.ashl_awal == expected_am_awal
    assert result.ashl_akhir == expected_am_akhir
    for heir_id, fraction in expected_fractions.items():
        share = next(h for h in result.per_heir if h.heir_id == heir_id)
        assert share.final_fraction == Fraction(fraction)


# Kasus 1: 1 Kelompok, Hubungan Muwafaqoh
def test_tashih_satu_kelompok_muwafaqoh():
    # Ibu 1/3, 6 Paman berbagi 2/3 -> 1/9 per orang. AM 3 -> 9.
    run_tashih_test(
        heirs_input=[(K.MOTHER, 1), (K.FULL_UNCLE, 6)],
        expected_am_awal=3,
        expected_am_akhir=9,
        expected_fractions={"IBU-1": "1/3", "PAMAN_KANDUNG-6": "1/9"},
    )


# Kasus 2: 1 Kelompok, Hubungan Mubayanah
def test_tashih_satu_kelompok_mubayanah():
    # Ibu 1/3, 5 Paman berbagi 2/3 -> 2/15 per orang. AM 3 -> 15.
    run_tashih_test(
        heirs_input=[(K.MOTHER, 1), (K.FULL_UNCLE, 5)],
        expected_am_awal=3,
        expected_am_akhir=15,
        expected_fractions={"IBU-1": "1/3", "PAMAN_KANDUNG-1": "2/15"},
    )


# Kasus 3: >1 Kelompok
def test_tashih_multi_kelompok():
    # Istri 1/4, 2 Nenek berbagi 1/6, 3 Paman berbagi sisa 7/12. AM 12 -> 36.
    run_tashih_test(
        heirs_input=[(K.WIFE, 1), (K.MATERNAL_GRANDMOTHER, 1), (K.PATERNAL_GRANDMOTHER, 1), (K.FULL_UNCLE, 3)],
        expected_am_awal=12,
        expected_am_akhir=36,
        expected_fractions={"ISTRI-1": "1/4", "NENEK_DARI_IBU-1": "1/12", "PAMAN_KANDUNG-3": "7/36"},
    )


@pytest.mark.parametrize("a, b, relation, lcm", [
    (6, 6, "Mumatsalah", 6),
    (3, 6, "Mudakholah", 6),
    (4, 6, "Muwafaqoh", 12),
    (3, 8, "Mubayanah", 24),
])
def test_bandingkan_penyebut(a, b, relation, lcm):
    item = bandingkan(a, b)
    assert item.relation == relation
    assert item.lcm == lcm


def test_compute_ashl_abaikan_nol():
    info = compute_ashl([Fraction(0), Fraction(1, 8), Fraction(2, 3)])
    assert info.ashl == 24
    assert [(c.a, c.b) for c in info.comparisons] == [(3, 8)]


def test_compute_ashl_kosong():
    assert compute_ashl([]).ashl == 1
