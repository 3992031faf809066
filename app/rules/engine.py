# app/rules/engine.py

from __future__ import annotations
import logging
from collections import Counter, defaultdict
from fractions import Fraction
from typing import Callable, Dict, List, Optional, Tuple

from app.rules.validation import validate_heirs
from app.special import statutory
from app.special.umariyyatain import is_umariyyatain, mother_share
from models import (
    COLLATERAL_ORDER,
    DESCENDANTS,
    DISTANT_KIN,
    MALE_DESCENDANTS,
    SIBLINGS,
    SPOUSES,
    Gender,
    JurisdictionMode,
    JuristicStatus,
    KinshipCategory as K,
)
from schemas import IndividualHeir, ShareRecord, fraction_label

logger = logging.getLogger(__name__)

ASABAH = "Asabah"
MAHJUB = "Mahjub"

MALE_WEIGHT = Fraction(2)
FEMALE_WEIGHT = Fraction(1)


# =========================
# Arena ahli waris (dirujuk lewat id yang stabil)
# =========================
class _Arena:
    def __init__(self, heirs: List[IndividualHeir], deceased_gender: Gender,
                 mode: JurisdictionMode, net_estate: int):
        self.heirs = heirs
        self.deceased_gender = deceased_gender
        self.mode = mode
        self.net_estate = net_estate
        self.by_category: Dict[K, List[IndividualHeir]] = defaultdict(list)
        for h in heirs:
            self.by_category[h.category].append(h)
        self.counts = Counter({c: len(hs) for c, hs in self.by_category.items()})
        self.records: Dict[str, ShareRecord] = {}
        self.substitution = statutory.uses_substitution(self.counts, mode)
        # label 'ashabah ma'al ghair (saudari) yang menghalangi kerabat di bawahnya
        self.residuary_sister: Optional[K] = None

    def q(self, category: K) -> int:
        return self.counts.get(category, 0)

    def has(self, *categories: K) -> bool:
        return any(self.q(c) > 0 for c in categories)

    def pending(self, category: K) -> List[IndividualHeir]:
        return [h for h in self.by_category.get(category, []) if h.id not in self.records]

    @property
    def has_descendant(self) -> bool:
        return self.has(*DESCENDANTS)

    @property
    def has_female_descendant(self) -> bool:
        return self.has(K.DAUGHTER, K.DAUGHTER_OF_SON)


# =========================
# Helper pencatatan
# =========================
def _put(arena: _Arena, heir: IndividualHeir, **fields) -> None:
    arena.records[heir.id] = ShareRecord(
        heir_id=heir.id,
        name=heir.name,
        category=heir.category,
        is_spouse=heir.category in SPOUSES,
        **fields,
    )


def _fard(arena: _Arena, category: K, fraction: Fraction, reason: str,
          label: Optional[str] = None, group: Optional[str] = None,
          status: JuristicStatus = JuristicStatus.FIXED_SHARE) -> None:
    """Bagian pasti. Bila `group` diisi, pecahan milik golongan dan dibagi rata per kepala."""
    members = arena.pending(category)
    if not members:
        return
    if group is None and len(members) > 1:
        group = category.value
    for h in members:
        _put(arena, h,
             fraction_value=fraction,
             fraction_label=label or fraction_label(fraction),
             juristic_status=status,
             note=reason,
             share_group=group)
    logger.debug("Furudh %s x%d = %s", category.value, len(members), fraction)


def _asabah(arena: _Arena, category: K, status: JuristicStatus, reason: str,
            weight: Fraction, substitute: bool = False) -> None:
    members = arena.pending(category)
    for h in members:
        _put(arena, h,
             fraction_label=ASABAH if not substitute else f"{ASABAH} (Pengganti)",
             juristic_status=status,
             note=reason,
             takes_residue=True,
             residue_weight=weight,
             substitute=substitute)
    if members:
        logger.debug("Ashabah %s x%d bobot %s", category.value, len(members), weight)


def _block(arena: _Arena, category: K, blocker: str, reason: Optional[str] = None) -> None:
    members = arena.pending(category)
    for h in members:
        _put(arena, h,
             fraction_label=MAHJUB,
             juristic_status=JuristicStatus.BLOCKED,
             note=reason or f"Terhalang (Mahjub) oleh {blocker}.")
    if members:
        logger.debug("Mahjub %s oleh %s", category.value, blocker)


def _male_line_blocker(arena: _Arena) -> Optional[str]:
    """Anak lk / cucu lk / ayah / kakek: penghalang saudara kandung & sebapak."""
    if arena.has(K.SON):
        return K.SON.label
    if arena.substitution:
        return "Ahli Waris Pengganti Anak Laki-laki"
    for c in (K.SON_OF_SON, K.FATHER, K.PATERNAL_GRANDFATHER):
        if arena.has(c):
            return c.label
    return None


# =========================
# Aturan berurutan (predikat → penetapan)
# =========================
def _rule_adopted_child(arena: _Arena) -> None:
    adopted = arena.pending(K.ADOPTED_CHILD)
    if not adopted:
        return
    if arena.mode == JurisdictionMode.STATUTORY:
        for rec in statutory.mandatory_bequest_records(adopted, arena.net_estate):
            arena.records[rec.heir_id] = rec
        logger.debug("Wasiat wajibah untuk %d anak angkat", len(adopted))
    else:
        for h in adopted:
            _put(arena, h,
                 fraction_label="0 (Bukan Ahli Waris)",
                 juristic_status=JuristicStatus.DISTANT_KIN,
                 note="Anak angkat bukan ahli waris menurut fiqh Syafi'i (tanpa wasiat wajibah).")


def _rule_spouse(arena: _Arena) -> None:
    if arena.has(K.HUSBAND):
        if arena.has_descendant:
            _fard(arena, K.HUSBAND, Fraction(1, 4), "Suami mendapat 1/4 karena pewaris punya keturunan.")
        else:
            _fard(arena, K.HUSBAND, Fraction(1, 2), "Suami mendapat 1/2 karena pewaris tidak punya keturunan.")
    if arena.has(K.WIFE):
        reason_many = f" Dibagi rata untuk {arena.q(K.WIFE)} istri." if arena.q(K.WIFE) > 1 else ""
        if arena.has_descendant:
            _fard(arena, K.WIFE, Fraction(1, 8), "Istri mendapat 1/8 karena pewaris punya keturunan." + reason_many)
        else:
            _fard(arena, K.WIFE, Fraction(1, 4), "Istri mendapat 1/4 karena pewaris tidak punya keturunan." + reason_many)


def _ascendant_share(arena: _Arena, category: K) -> None:
    """Ayah (atau Kakek bila Ayah tiada): 1/6, 1/6 + sisa, atau 'ashabah murni."""
    label = category.label
    if arena.has(*MALE_DESCENDANTS):
        _fard(arena, category, Fraction(1, 6), f"{label} mendapat 1/6 karena ada keturunan laki-laki.")
    elif arena.has_female_descendant:
        _fard(arena, category, Fraction(1, 6),
              f"{label} mendapat 1/6 + sisa (Asabah) karena hanya ada keturunan perempuan.",
              label="1/6 + Sisa", status=JuristicStatus.PRIMARY_RESIDUE)
    else:
        _asabah(arena, category, JuristicStatus.PRIMARY_RESIDUE,
                f"{label} menjadi Asabah (penerima sisa) karena pewaris tidak punya keturunan.",
                MALE_WEIGHT)


def _rule_father(arena: _Arena) -> None:
    if arena.has(K.FATHER):
        _ascendant_share(arena, K.FATHER)


def _rule_grandfather(arena: _Arena) -> None:
    if arena.has(K.FATHER):
        _block(arena, K.PATERNAL_GRANDFATHER, K.FATHER.label)
    elif arena.has(K.PATERNAL_GRANDFATHER):
        _ascendant_share(arena, K.PATERNAL_GRANDFATHER)


def _rule_mother(arena: _Arena) -> None:
    if not arena.has(K.MOTHER):
        return
    siblings = sum(arena.q(c) for c in SIBLINGS)
    if arena.has_descendant:
        _fard(arena, K.MOTHER, Fraction(1, 6), "Ibu mendapat 1/6 karena pewaris punya keturunan.")
    elif siblings >= 2:
        _fard(arena, K.MOTHER, Fraction(1, 6),
              f"Ibu mendapat 1/6 karena ada {siblings} saudara (≥2, dihitung walau terhalang).")
    elif is_umariyyatain(arena.counts):
        spouse_category = K.HUSBAND if arena.has(K.HUSBAND) else K.WIFE
        spouse_fraction = arena.records[arena.by_category[spouse_category][0].id].fraction_value
        _fard(arena, K.MOTHER, mother_share(spouse_fraction),
              f"'Umariyyatain: Ibu mendapat 1/3 dari sisa setelah bagian {spouse_category.label} "
              "karena bersama Ayah tanpa keturunan.",
              label="1/3 Sisa")
    else:
        _fard(arena, K.MOTHER, Fraction(1, 3), "Ibu mendapat 1/3 karena tanpa keturunan & <2 saudara.")


def _rule_grandmothers(arena: _Arena) -> None:
    if arena.has(K.MOTHER):
        _block(arena, K.MATERNAL_GRANDMOTHER, K.MOTHER.label)
        _block(arena, K.PATERNAL_GRANDMOTHER, K.MOTHER.label)
        return
    if arena.has(K.FATHER):
        _block(arena, K.PATERNAL_GRANDMOTHER, K.FATHER.label)

    eligible = [c for c in (K.MATERNAL_GRANDMOTHER, K.PATERNAL_GRANDMOTHER) if arena.pending(c)]
    if len(eligible) == 2:
        for c in eligible:
            _fard(arena, c, Fraction(1, 6),
                  "Dua nenek berserikat dalam 1/6, dibagi rata karena Ibu tiada.",
                  label="1/6 (Berserikat)", group="NENEK")
    elif eligible:
        _fard(arena, eligible[0], Fraction(1, 6), f"{eligible[0].label} mendapat 1/6 karena Ibu tiada.")


def _rule_children(arena: _Arena) -> None:
    n_daughters = arena.q(K.DAUGHTER)
    if arena.has(K.SON):
        note = "bersama Anak Perempuan (2:1)" if n_daughters else "sebagai kerabat laki-laki terdekat"
        _asabah(arena, K.SON, JuristicStatus.PRIMARY_RESIDUE,
                f"Anak laki-laki menjadi Asabah bin Nafs {note}.", MALE_WEIGHT)
        _asabah(arena, K.DAUGHTER, JuristicStatus.RESIDUE_WITH_MALE,
                "Anak perempuan menjadi Asabah bil Ghair bersama Anak Laki-laki (2:1).", FEMALE_WEIGHT)
    elif n_daughters and arena.substitution:
        _asabah(arena, K.DAUGHTER, JuristicStatus.RESIDUE_WITH_MALE,
                "Anak perempuan menjadi Asabah bil Ghair bersama ahli waris pengganti Anak Laki-laki (2:1).",
                FEMALE_WEIGHT)
    elif n_daughters == 1:
        _fard(arena, K.DAUGHTER, Fraction(1, 2), "Anak perempuan tunggal mendapat 1/2 karena tanpa Anak Laki-laki.")
    elif n_daughters >= 2:
        _fard(arena, K.DAUGHTER, Fraction(2, 3),
              f"{n_daughters} anak perempuan mendapat 2/3 bersama (berserikat), dibagi rata.",
              label="2/3 (Berserikat)")


def _rule_grandchildren(arena: _Arena) -> None:
    if arena.substitution:
        w_male, w_female = statutory.substitute_weights(arena.q(K.SON_OF_SON), arena.q(K.DAUGHTER_OF_SON))
        _asabah(arena, K.SON_OF_SON, JuristicStatus.PRIMARY_RESIDUE,
                "Ahli waris pengganti: menggantikan Anak Laki-laki yang telah wafat (KHI Pasal 185).",
                w_male, substitute=True)
        _asabah(arena, K.DAUGHTER_OF_SON, JuristicStatus.RESIDUE_WITH_MALE,
                "Ahli waris pengganti: menggantikan Anak Laki-laki yang telah wafat (KHI Pasal 185).",
                w_female, substitute=True)
        return

    if arena.has(K.SON):
        _block(arena, K.SON_OF_SON, K.SON.label)
        _block(arena, K.DAUGHTER_OF_SON, K.SON.label)
        return

    if arena.has(K.SON_OF_SON):
        _asabah(arena, K.SON_OF_SON, JuristicStatus.PRIMARY_RESIDUE,
                "Cucu laki-laki menjadi Asabah menggantikan posisi Anak Laki-laki.", MALE_WEIGHT)
        _asabah(arena, K.DAUGHTER_OF_SON, JuristicStatus.RESIDUE_WITH_MALE,
                "Cucu perempuan menjadi Asabah bil Ghair bersama Cucu Laki-laki (2:1).", FEMALE_WEIGHT)
        return

    n = arena.q(K.DAUGHTER_OF_SON)
    n_daughters = arena.q(K.DAUGHTER)
    if not n:
        return
    if n_daughters >= 2:
        _block(arena, K.DAUGHTER_OF_SON, "", "Terhalang karena bagian 2/3 sudah habis oleh ≥2 Anak Perempuan.")
    elif n_daughters == 1:
        _fard(arena, K.DAUGHTER_OF_SON, Fraction(1, 6),
              "Cucu perempuan mendapat 1/6 sebagai pelengkap 2/3 (takmilah) bersama Anak Perempuan.",
              label="1/6 (Takmilah)")
    elif n == 1:
        _fard(arena, K.DAUGHTER_OF_SON, Fraction(1, 2), "Cucu perempuan tunggal mendapat 1/2 karena tidak ada Anak.")
    else:
        _fard(arena, K.DAUGHTER_OF_SON, Fraction(2, 3),
              f"{n} cucu perempuan mendapat 2/3 bersama karena tidak ada Anak.", label="2/3 (Berserikat)")


def _sisters_share(arena: _Arena, category: K, brother: K) -> None:
    """Saudari kandung/sebapak tanpa saudara laki-laki sederajat."""
    n = arena.q(category)
    if arena.has_female_descendant:
        _asabah(arena, category, JuristicStatus.RESIDUE_WITH_DAUGHTER,
                f"{category.label} menjadi Asabah ma'al Ghair bersama Anak/Cucu Perempuan.", FEMALE_WEIGHT)
        arena.residuary_sister = category
    elif n == 1:
        _fard(arena, category, Fraction(1, 2),
              f"{category.label} tunggal mendapat 1/2 (kalalah) tanpa {brother.label}.")
    elif n >= 2:
        _fard(arena, category, Fraction(2, 3),
              f"{n} {category.label} mendapat 2/3 bersama (kalalah), dibagi rata.",
              label="2/3 (Berserikat)")


def _rule_full_siblings(arena: _Arena) -> None:
    if not arena.has(K.FULL_BROTHER, K.FULL_SISTER):
        return
    blocker = _male_line_blocker(arena)
    if blocker:
        _block(arena, K.FULL_BROTHER, blocker)
        _block(arena, K.FULL_SISTER, blocker)
        return
    if arena.has(K.FULL_BROTHER):
        _asabah(arena, K.FULL_BROTHER, JuristicStatus.PRIMARY_RESIDUE,
                "Saudara laki-laki kandung menjadi Asabah karena tidak ada Anak/Ayah (kalalah).", MALE_WEIGHT)
        _asabah(arena, K.FULL_SISTER, JuristicStatus.RESIDUE_WITH_MALE,
                "Saudari kandung menjadi Asabah bil Ghair bersama Saudara Laki-laki Kandung (2:1).", FEMALE_WEIGHT)
    else:
        _sisters_share(arena, K.FULL_SISTER, K.FULL_BROTHER)


def _rule_paternal_siblings(arena: _Arena) -> None:
    if not arena.has(K.PATERNAL_BROTHER, K.PATERNAL_SISTER):
        return
    blocker = _male_line_blocker(arena)
    if blocker is None and arena.has(K.FULL_BROTHER):
        blocker = K.FULL_BROTHER.label
    if blocker is None and arena.residuary_sister == K.FULL_SISTER:
        blocker = f"{K.FULL_SISTER.label} (Asabah ma'al Ghair)"
    if blocker:
        _block(arena, K.PATERNAL_BROTHER, blocker)
        _block(arena, K.PATERNAL_SISTER, blocker)
        return

    if arena.has(K.PATERNAL_BROTHER):
        _asabah(arena, K.PATERNAL_BROTHER, JuristicStatus.PRIMARY_RESIDUE,
                "Saudara laki-laki sebapak menjadi Asabah karena tidak ada Anak/Ayah/Saudara Kandung.", MALE_WEIGHT)
        _asabah(arena, K.PATERNAL_SISTER, JuristicStatus.RESIDUE_WITH_MALE,
                "Saudari sebapak menjadi Asabah bil Ghair bersama Saudara Laki-laki Sebapak (2:1).", FEMALE_WEIGHT)
        return

    n_full = arena.q(K.FULL_SISTER)
    if n_full >= 2:
        _block(arena, K.PATERNAL_SISTER, "",
               "Terhalang karena bagian 2/3 sudah habis oleh ≥2 Saudari Kandung.")
    elif n_full == 1:
        _fard(arena, K.PATERNAL_SISTER, Fraction(1, 6),
              "Saudari sebapak mendapat 1/6 sebagai pelengkap 2/3 (takmilah) bersama Saudari Kandung.",
              label="1/6 (Takmilah)")
    else:
        _sisters_share(arena, K.PATERNAL_SISTER, K.PATERNAL_BROTHER)


def _rule_maternal_siblings(arena: _Arena) -> None:
    members = (K.MATERNAL_BROTHER, K.MATERNAL_SISTER)
    total = sum(arena.q(c) for c in members)
    if not total:
        return
    blocker = None
    if arena.has_descendant:
        blocker = "keturunan pewaris (Anak/Cucu)"
    elif arena.has(K.FATHER):
        blocker = K.FATHER.label
    elif arena.has(K.PATERNAL_GRANDFATHER):
        blocker = K.PATERNAL_GRANDFATHER.label
    if blocker:
        for c in members:
            _block(arena, c, blocker)
        return

    if total == 1:
        c = K.MATERNAL_BROTHER if arena.has(K.MATERNAL_BROTHER) else K.MATERNAL_SISTER
        _fard(arena, c, Fraction(1, 6), "Saudara seibu tunggal mendapat 1/6 (kalalah mufrad).")
    else:
        for c in members:
            _fard(arena, c, Fraction(1, 3),
                  f"{total} saudara seibu berserikat dalam 1/3, dibagi rata lintas gender.",
                  label="1/3 (Berserikat)", group="SAUDARA_SEIBU")


def _nearer_residuary(arena: _Arena) -> Optional[str]:
    blocker = _male_line_blocker(arena)
    if blocker:
        return blocker
    if arena.has(K.FULL_BROTHER):
        return K.FULL_BROTHER.label
    if arena.residuary_sister is not None:
        return f"{arena.residuary_sister.label} (Asabah ma'al Ghair)"
    if arena.has(K.PATERNAL_BROTHER):
        return K.PATERNAL_BROTHER.label
    return None


def _rule_collaterals(arena: _Arena) -> None:
    """'Ashabah bertingkat: keponakan → paman → sepupu; hanya kelas terdekat yang mewarisi."""
    blocker = _nearer_residuary(arena)
    for category in COLLATERAL_ORDER:
        if not arena.has(category):
            continue
        if blocker:
            _block(arena, category, blocker)
            continue
        _asabah(arena, category, JuristicStatus.PRIMARY_RESIDUE,
                f"{category.label} menjadi Asabah karena tidak ada 'ashabah yang lebih dekat.", MALE_WEIGHT)
        blocker = category.label


def _rule_unmatched(arena: _Arena) -> None:
    for h in arena.heirs:
        if h.id in arena.records:
            continue
        if h.category in DISTANT_KIN:
            note = ("Termasuk Dzawil Arham (kerabat jauh) karena jalur nasab melalui perempuan; "
                    "tidak mendapat bagian dalam perhitungan ini.")
        else:
            note = "Tidak mendapat bagian menurut kaidah yang dimodelkan."
        _put(arena, h,
             fraction_label="0 (Dzawil Arham)",
             juristic_status=JuristicStatus.DISTANT_KIN,
             note=note)


RULES: Tuple[Callable[[_Arena], None], ...] = (
    _rule_adopted_child,
    _rule_spouse,
    _rule_father,
    _rule_grandfather,
    _rule_mother,
    _rule_grandmothers,
    _rule_children,
    _rule_grandchildren,
    _rule_full_siblings,
    _rule_paternal_siblings,
    _rule_maternal_siblings,
    _rule_collaterals,
    _rule_unmatched,
)


# =========================
# Mesin penentu furūḍ & hijab
# =========================
def determine_shares(heirs: List[IndividualHeir], net_estate: int,
                     deceased_gender: Gender,
                     jurisdiction_mode: JurisdictionMode) -> List[ShareRecord]:
    """
    Menghasilkan satu ShareRecord per ahli waris (urutan sama dengan input).
    Catatan:
      - Furūḍ jama'i (2/3, 1/3 seibu, 1/6 dua nenek, 1/4 atau 1/8 beberapa istri) disimpan
        sebagai pecahan golongan + `share_group`; pembagian per kepala dilakukan di calculator.py.
      - 'Aul, Radd dan pembagian sisa ditangani di calculator.py.
    """
    validate_heirs(heirs, deceased_gender)
    arena = _Arena(heirs, deceased_gender, jurisdiction_mode, net_estate)
    for rule in RULES:
        rule(arena)
    return [arena.records[h.id] for h in heirs]
