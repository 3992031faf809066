# Di dalam file: test_engine.py
"""Tes mesin furudh & hijab (ShareRecord mentah, sebelum 'Aul/Radd) dan validasi input."""

from fractions import Fraction

import pytest

from app.rules.engine import determine_shares
from app.special.statutory import substitute_weights
from app.special.umariyyatain import is_umariyyatain, mother_share
from errors import FaraidError, ValidationError
from models import Gender, JurisdictionMode, JuristicStatus, KinshipCategory as K
from schemas import IndividualHeir

L, P = Gender.MALE, Gender.FEMALE
SYAFII, KHI = JurisdictionMode.CLASSICAL, JurisdictionMode.STATUTORY


def heir(category, n=1):
    return IndividualHeir(id=f"{category.value}-{n}", name=f"{category.label} {n}", category=category)


def records_of(heirs, gender=L, mode=SYAFII):
    return {r.heir_id: r for r in determine_shares(heirs, 1_000, gender, mode)}


class TestFurudhMentah:

    def test_dua_anak_perempuan_pecahan_golongan(self):
        recs = records_of([heir(K.DAUGHTER, 1), heir(K.DAUGHTER, 2)])
        for r in recs.values():
            assert r.fraction_value == Fraction(2, 3)
            assert r.share_group == K.DAUGHTER.value
            assert r.fraction_label == "2/3 (Berserikat)"

    def test_suami_tanpa_dan_dengan_keturunan(self):
        assert records_of([heir(K.HUSBAND)], P)["SUAMI-1"].fraction_value == Fraction(1, 2)
        recs = records_of([heir(K.HUSBAND), heir(K.DAUGHTER_OF_SON)], P)
        assert recs["SUAMI-1"].fraction_value == Fraction(1, 4)
        assert recs["SUAMI-1"].is_spouse

    def test_ayah_dengan_anak_laki_hanya_seperenam(self):
        recs = records_of([heir(K.FATHER), heir(K.SON)])
        assert recs["AYAH-1"].fraction_value == Fraction(1, 6)
        assert not recs["AYAH-1"].takes_residue
        assert recs["ANAK_LAKI-1"].takes_residue

    def test_ayah_dengan_cucu_laki_hanya_seperenam(self):
        recs = records_of([heir(K.FATHER), heir(K.SON_OF_SON)])
        assert recs["AYAH-1"].fraction_value == Fraction(1, 6)
        assert recs["AYAH-1"].juristic_status == JuristicStatus.FIXED_SHARE
        assert recs["CUCU_LAKI_DARI_ANAK_LAKI-1"].takes_residue

    def test_ayah_dengan_anak_perempuan_seperenam_plus_sisa(self):
        recs = records_of([heir(K.FATHER), heir(K.DAUGHTER)])
        father = recs["AYAH-1"]
        assert father.fraction_value == Fraction(1, 6)
        assert father.fraction_label == "1/6 + Sisa"
        assert father.juristic_status == JuristicStatus.PRIMARY_RESIDUE

    def test_kakek_menggantikan_ayah(self):
        recs = records_of([heir(K.PATERNAL_GRANDFATHER), heir(K.SON)])
        assert recs["KAKEK_DARI_AYAH-1"].fraction_value == Fraction(1, 6)

    def test_ibu_seperenam_karena_dua_saudara_seibu(self):
        recs = records_of([heir(K.MOTHER), heir(K.MATERNAL_BROTHER, 1), heir(K.MATERNAL_SISTER, 1)])
        assert recs["IBU-1"].fraction_value == Fraction(1, 6)
        assert recs["SAUDARA_LAKI_SEIBU-1"].share_group == "SAUDARA_SEIBU"

    def test_nenek_dari_ayah_terhalang_ayah(self):
        recs = records_of([heir(K.FATHER), heir(K.PATERNAL_GRANDMOTHER), heir(K.MATERNAL_GRANDMOTHER)])
        assert recs["NENEK_DARI_AYAH-1"].juristic_status == JuristicStatus.BLOCKED
        assert recs["NENEK_DARI_IBU-1"].fraction_value == Fraction(1, 6)
        assert recs["NENEK_DARI_IBU-1"].share_group is None

    def test_cucu_perempuan_terhalang_dua_anak_perempuan(self):
        recs = records_of([heir(K.DAUGHTER, 1), heir(K.DAUGHTER, 2), heir(K.DAUGHTER_OF_SON)])
        assert recs["CUCU_PEREMPUAN_DARI_ANAK_LAKI-1"].juristic_status == JuristicStatus.BLOCKED

    def test_cucu_perempuan_asabah_bersama_cucu_laki(self):
        recs = records_of([heir(K.SON_OF_SON), heir(K.DAUGHTER_OF_SON)])
        assert recs["CUCU_LAKI_DARI_ANAK_LAKI-1"].residue_weight == 2
        assert recs["CUCU_PEREMPUAN_DARI_ANAK_LAKI-1"].juristic_status == JuristicStatus.RESIDUE_WITH_MALE
        assert recs["CUCU_PEREMPUAN_DARI_ANAK_LAKI-1"].residue_weight == 1

    def test_saudari_sebapak_takmilah(self):
        recs = records_of([heir(K.FULL_SISTER), heir(K.PATERNAL_SISTER)])
        assert recs["SAUDARA_PEREMPUAN_KANDUNG-1"].fraction_value == Fraction(1, 2)
        assert recs["SAUDARA_PEREMPUAN_SEBAPAK-1"].fraction_value == Fraction(1, 6)
        assert recs["SAUDARA_PEREMPUAN_SEBAPAK-1"].fraction_label == "1/6 (Takmilah)"

    def test_saudara_sebapak_terhalang_saudara_kandung(self):
        recs = records_of([heir(K.FULL_BROTHER), heir(K.PATERNAL_BROTHER)])
        assert recs["SAUDARA_LAKI_SEBAPAK-1"].juristic_status == JuristicStatus.BLOCKED

    def test_keponakan_terhalang_saudara(self):
        recs = records_of([heir(K.PATERNAL_BROTHER), heir(K.FULL_NEPHEW)])
        assert recs["ANAK_LAKI_SAUDARA_LAKI_KANDUNG-1"].juristic_status == JuristicStatus.BLOCKED

    def test_urutan_output_mengikuti_input(self):
        heirs = [heir(K.FULL_SISTER), heir(K.WIFE), heir(K.SON), heir(K.MOTHER)]
        assert [r.heir_id for r in determine_shares(heirs, 0, L, SYAFII)] == [h.id for h in heirs]


class TestKHIEngine:

    def test_cucu_pengganti_diberi_tanda(self):
        recs = records_of([heir(K.SON), heir(K.SON_OF_SON), heir(K.DAUGHTER_OF_SON)], mode=KHI)
        grandson = recs["CUCU_LAKI_DARI_ANAK_LAKI-1"]
        assert grandson.substitute
        assert grandson.fraction_label == "Asabah (Pengganti)"
        assert grandson.residue_weight == Fraction(4, 3)

    def test_pengganti_menghalangi_saudara(self):
        recs = records_of([heir(K.DAUGHTER), heir(K.DAUGHTER_OF_SON), heir(K.FULL_SISTER)], mode=KHI)
        assert recs["SAUDARA_PEREMPUAN_KANDUNG-1"].juristic_status == JuristicStatus.BLOCKED

    def test_tanpa_anak_hidup_tidak_ada_penggantian(self):
        recs = records_of([heir(K.SON_OF_SON)], mode=KHI)
        assert not recs["CUCU_LAKI_DARI_ANAK_LAKI-1"].substitute

    def test_dua_anak_angkat_berbagi_wasiat(self):
        recs = records_of([heir(K.ADOPTED_CHILD, 1), heir(K.ADOPTED_CHILD, 2)], mode=KHI)
        for r in recs.values():
            assert r.juristic_status == JuristicStatus.MANDATORY_BEQUEST
            assert r.share_group == "WASIAT_WAJIBAH"

    @pytest.mark.parametrize("grandsons, granddaughters, expected", [
        (1, 0, (Fraction(2), Fraction(0))),
        (1, 1, (Fraction(4, 3), Fraction(2, 3))),
        (0, 2, (Fraction(2), Fraction(1))),
        (0, 0, (Fraction(0), Fraction(0))),
    ])
    def test_bobot_pengganti(self, grandsons, granddaughters, expected):
        assert substitute_weights(grandsons, granddaughters) == expected


class TestUmariyyatain:

    def test_syarat(self):
        assert is_umariyyatain({K.WIFE: 2, K.FATHER: 1, K.MOTHER: 1})
        assert not is_umariyyatain({K.WIFE: 1, K.FATHER: 1, K.MOTHER: 1, K.FULL_BROTHER: 2})
        assert not is_umariyyatain({K.FATHER: 1, K.MOTHER: 1})

    def test_bagian_ibu(self):
        assert mother_share(Fraction(1, 2)) == Fraction(1, 6)
        assert mother_share(Fraction(1, 4)) == Fraction(1, 4)


class TestValidasi:

    def test_suami_untuk_pewaris_laki_laki(self):
        with pytest.raises(ValidationError) as exc:
            determine_shares([heir(K.HUSBAND)], 100, L, SYAFII)
        assert exc.value.category == K.HUSBAND

    def test_istri_untuk_pewaris_perempuan(self):
        with pytest.raises(ValidationError) as exc:
            determine_shares([heir(K.WIFE)], 100, P, SYAFII)
        assert exc.value.category == K.WIFE

    def test_dua_ayah(self):
        with pytest.raises(ValidationError) as exc:
            determine_shares([heir(K.FATHER, 1), heir(K.FATHER, 2)], 100, L, SYAFII)
        assert exc.value.category == K.FATHER

    def test_lima_istri(self):
        with pytest.raises(ValidationError):
            determine_shares([heir(K.WIFE, i) for i in range(1, 6)], 100, L, SYAFII)

    def test_id_ganda(self):
        twins = [IndividualHeir(id="a", name="A", category=K.SON), IndividualHeir(id="a", name="B", category=K.SON)]
        with pytest.raises(ValidationError):
            determine_shares(twins, 100, L, SYAFII)

    def test_hierarki_exception(self):
        err = ValidationError("contoh", K.MOTHER)
        assert isinstance(err, FaraidError)
        assert isinstance(err, ValueError)
        assert str(err) == "IBU: contoh"
