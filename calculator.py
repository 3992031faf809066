# calculator.py

from __future__ import annotations
import logging
from collections import Counter
from fractions import Fraction
from typing import Dict, List, Optional

from app.math.ashl import compute_ashl
from app.math.net_estate import calculate_net_estate
from app.rules.engine import determine_shares
from errors import InvariantViolation
from models import (
    BalanceState,
    DistributionStatus,
    Gender,
    JurisdictionMode,
    JuristicStatus,
    KinshipCategory,
)
from schemas import (
    DistributionResult,
    EstateInputs,
    HeirDistribution,
    IndividualHeir,
    NetEstateResult,
    Reconciliation,
    ShareRecord,
    fraction_label,
)

logger = logging.getLogger(__name__)

ONE = Fraction(1)
ZERO = Fraction(0)


# --------------------------
# Helper umum
# --------------------------
def _normalize_collective(records: List[ShareRecord], notes: List[str]) -> Dict[str, Fraction]:
    """Pecahan golongan (share_group) dibagi rata per kepala."""
    sizes = Counter(r.share_group for r in records if r.share_group and r.fraction_value > 0)
    base: Dict[str, Fraction] = {}
    announced = set()
    for r in records:
        n = sizes.get(r.share_group, 0) if r.share_group else 0
        if n > 1:
            base[r.heir_id] = r.fraction_value / n
            if r.share_group not in announced:
                announced.add(r.share_group)
                notes.append(
                    f"Terdapat {n} orang dalam golongan {r.fraction_label} ({r.share_group}). "
                    f"Bagian {fraction_label(r.fraction_value)} dibagi rata: "
                    f"{fraction_label(r.fraction_value / n)} per orang."
                )
        else:
            base[r.heir_id] = r.fraction_value
    return base


def _male_ascendant_with_fard(fixed: List[ShareRecord]) -> Optional[ShareRecord]:
    for category in (KinshipCategory.FATHER, KinshipCategory.PATERNAL_GRANDFATHER):
        for r in fixed:
            if r.category == category:
                return r
    return None


def _balance_state(residual: int) -> BalanceState:
    if residual == 0:
        return BalanceState.EXACT
    return BalanceState.SURPLUS if residual > 0 else BalanceState.DEFICIT


def _empty_result(net_estate: int, notes: List[str]) -> DistributionResult:
    notes.append("Tidak ada ahli waris yang berhak; harta belum dapat dibagikan.")
    return DistributionResult(
        total_estate=net_estate,
        status=DistributionStatus.BALANCED,
        per_heir=[],
        narrative=notes,
        reconciliation=Reconciliation(
            fixed_shares_total=0,
            residual=net_estate,
            balance_state=_balance_state(net_estate),
            unclaimed=net_estate,
        ),
    )


# ============================================================
#                    RESOLVER DISTRIBUSI
# ============================================================
def resolve_distribution(records: List[ShareRecord], net_estate: int,
                         narrative: Optional[List[str]] = None) -> DistributionResult:
    """
    Dari ShareRecord hasil mesin furudh & hijab ke DistributionResult:
    normalisasi golongan → agregasi → Adil / 'Aul / Radd → koreksi pembulatan.
    Status juristik diambil apa adanya dari ShareRecord.
    """
    notes: List[str] = narrative if narrative is not None else []
    notes.append(f"Total harta waris bersih: {net_estate}.")

    if not records:
        return _empty_result(net_estate, notes)

    # 1) Normalisasi golongan
    base = _normalize_collective(records, notes)

    # 0) Wasiat wajibah dikeluarkan lebih dulu
    bequest = [r for r in records if r.juristic_status == JuristicStatus.MANDATORY_BEQUEST]
    faraid = [r for r in records if r.juristic_status != JuristicStatus.MANDATORY_BEQUEST]
    bequest_fraction = sum((base[r.heir_id] for r in bequest), ZERO)
    if bequest_fraction > Fraction(1, 3):
        raise InvariantViolation(f"Wasiat wajibah {bequest_fraction} melebihi 1/3 harta")
    faraid_scale = ONE - bequest_fraction
    if bequest:
        notes.append(
            f"Wasiat wajibah anak angkat {fraction_label(bequest_fraction)} dikeluarkan lebih dulu; "
            f"sisa {fraction_label(faraid_scale)} harta dibagi secara faraidh."
        )

    # 2) Agregasi furudh & 'ashabah
    fixed = [r for r in faraid if not r.takes_residue and base[r.heir_id] > 0]
    residue = [r for r in faraid if r.takes_residue]
    total = sum((base[r.heir_id] for r in fixed), ZERO)

    ashl_info = compute_ashl(r.fraction_value for r in fixed)
    ashl_awal = ashl_info.ashl
    if ashl_info.comparisons:
        detail = "; ".join(f"{c.a} & {c.b} = {c.relation}" for c in ashl_info.comparisons)
        notes.append(f"Menentukan Asal Mas'alah: {ashl_awal} ({detail}).")
    else:
        notes.append(f"Menentukan Asal Mas'alah: {ashl_awal}.")
    notes.append(f"Total bagian Ashabul Furud: {fraction_label(total)}.")

    share: Dict[str, Fraction] = {r.heir_id: ZERO for r in faraid}
    adjustment: Dict[str, str] = {}
    unclaimed_fraction = ZERO

    if residue and total <= 1:
        # 3) Sisa untuk 'ashabah sesuai bobot
        status = DistributionStatus.BALANCED
        remainder = ONE - total
        for r in fixed:
            share[r.heir_id] = base[r.heir_id]
        weights = sum((r.residue_weight for r in residue), ZERO)
        if remainder == 0:
            notes.append("Bagian Ashabul Furud sudah menghabiskan harta; Asabah tidak mendapat sisa.")
            for r in residue:
                adjustment[r.heir_id] = "Tidak kebagian sisa"
        else:
            names = ", ".join(sorted({r.category.label for r in residue}))
            notes.append(
                f"Sisa {fraction_label(remainder)} untuk Asabah ({names}) "
                f"dibagi menurut bobot (laki-laki 2 : perempuan 1), total bobot {fraction_label(weights)}."
            )
            for r in residue:
                share[r.heir_id] = remainder * r.residue_weight / weights
                adjustment[r.heir_id] = "Asabah (Sisa)"
    elif total > 1:
        # 4) & 6) 'Aul
        status = DistributionStatus.DEFICIT
        if residue:
            notes.append(
                f"Total bagian Ashabul Furud ({fraction_label(total)}) melebihi 1, "
                "Asabah tidak mendapatkan sisa. Berlaku 'Aul."
            )
            for r in residue:
                adjustment[r.heir_id] = "Tidak kebagian ('Aul)"
        else:
            notes.append(f"Total bagian ({fraction_label(total)}) melebihi 1. Berlaku 'Aul (Defisit).")
        aul_ashl = total * ashl_awal
        if aul_ashl.denominator == 1:
            notes.append(f"Asal Mas'alah naik dari {ashl_awal} menjadi {aul_ashl.numerator}.")
        notes.append(f"Setiap bagian dibagi {fraction_label(total)} (dikali {fraction_label(1 / total)}).")
        for r in fixed:
            share[r.heir_id] = base[r.heir_id] / total
            adjustment[r.heir_id] = "Terkena 'Aul"
    elif total == 1:
        # 5) Pas
        status = DistributionStatus.BALANCED
        notes.append("Total bagian pas (1). Pembagian Normal.")
        for r in fixed:
            share[r.heir_id] = base[r.heir_id]
    else:
        remainder = ONE - total
        for r in fixed:
            share[r.heir_id] = base[r.heir_id]
        ascendant = _male_ascendant_with_fard(fixed)
        if ascendant is not None:
            # 7) Ayah/Kakek mengambil seluruh sisa
            status = DistributionStatus.BALANCED
            notes.append(
                f"Total bagian Ashabul Furud ({fraction_label(total)}) kurang dari 1. "
                f"Karena ada {ascendant.category.label}, ia mengambil seluruh sisa "
                f"{fraction_label(remainder)} (ta'shib) di samping bagian pastinya."
            )
            share[ascendant.heir_id] += remainder
            adjustment[ascendant.heir_id] = "Mendapat Sisa (Asabah)"
        else:
            # 8) Radd
            status = DistributionStatus.SURPLUS
            spouses = [r for r in fixed if r.is_spouse]
            blood = [r for r in fixed if not r.is_spouse]
            notes.append(
                f"Total bagian ({fraction_label(total)}) kurang dari 1 dan tidak ada Asabah/Ayah. "
                "Berlaku Radd (Surplus)."
            )
            if blood:
                if spouses:
                    notes.append("Pasangan (Suami/Istri) tidak menerima Radd. Bagiannya TETAP.")
                    for r in spouses:
                        adjustment[r.heir_id] = "Tetap (Tidak Radd)"
                pool = ONE - sum((base[r.heir_id] for r in spouses), ZERO)
                blood_total = sum((base[r.heir_id] for r in blood), ZERO)
                notes.append(
                    f"Sisa {fraction_label(remainder)} dikembalikan kepada ahli waris nasab "
                    f"sebanding dengan bagian aslinya (dikali {fraction_label(pool / blood_total)})."
                )
                for r in blood:
                    share[r.heir_id] = base[r.heir_id] / blood_total * pool
                    adjustment[r.heir_id] = "Mendapat Radd"
            elif spouses:
                # tanpa ahli waris nasab, sisa dikembalikan kepada pasangan
                spouse_total = sum((base[r.heir_id] for r in spouses), ZERO)
                notes.append(
                    f"Tidak ada ahli waris nasab penerima Radd; sisa {fraction_label(remainder)} "
                    "dikembalikan kepada pasangan (Suami/Istri)."
                )
                for r in spouses:
                    share[r.heir_id] = base[r.heir_id] / spouse_total
                    adjustment[r.heir_id] = "Mendapat Radd (Pasangan)"
            else:
                unclaimed_fraction = remainder
                notes.append(
                    "Tidak ada ahli waris yang berhak atas bagian; seluruh harta faraidh "
                    "diserahkan ke Baitul Mal."
                )

    # Skala faraidh bila ada wasiat wajibah
    final: Dict[str, Fraction] = {r.heir_id: base[r.heir_id] for r in bequest}
    for r in faraid:
        final[r.heir_id] = share[r.heir_id] * faraid_scale
    unclaimed_fraction *= faraid_scale

    if sum(final.values(), ZERO) + unclaimed_fraction != ONE:
        raise InvariantViolation(
            f"Jumlah pecahan akhir {sum(final.values(), ZERO) + unclaimed_fraction} tidak sama dengan 1"
        )

    # 9) Nominal + koreksi pembulatan
    amounts: Dict[str, int] = {r.heir_id: round(final[r.heir_id] * net_estate) for r in records}
    unclaimed = round(unclaimed_fraction * net_estate)
    paid = [r for r in records if final[r.heir_id] > 0]
    residual = net_estate - sum(amounts.values()) - unclaimed
    if residual:
        if abs(residual) > len(paid) + 1:
            raise InvariantViolation(f"Selisih pembulatan {residual} terlalu besar")
        if paid:
            # selisih negatif hanya dibebankan pada nominal yang cukup menampungnya
            able = [r for r in paid if amounts[r.heir_id] + residual >= 0]
            if able:
                last = able[-1]
            else:
                last = max(paid, key=lambda r: amounts[r.heir_id])
            amounts[last.heir_id] += residual
            notes.append(f"Koreksi pembulatan {residual} diberikan kepada {last.name}.")
        else:
            unclaimed += residual
    if sum(amounts.values()) + unclaimed != net_estate or any(a < 0 for a in amounts.values()):
        raise InvariantViolation("Jumlah nominal akhir tidak sama dengan total harta")

    # 10) Rekonsiliasi (neraca)
    fixed_shares_total = round((bequest_fraction + total * faraid_scale) * net_estate)
    reconciliation = Reconciliation(
        fixed_shares_total=fixed_shares_total,
        residual=net_estate - fixed_shares_total,
        balance_state=_balance_state(net_estate - fixed_shares_total),
        unclaimed=unclaimed,
    )
    notes.append(
        f"Neraca: jatah Ashabul Furud {fixed_shares_total}, selisih {reconciliation.residual} "
        f"({reconciliation.balance_state.value}); total dibagikan {sum(amounts.values())}"
        + (f", Baitul Mal {unclaimed}." if unclaimed else ".")
    )

    # 11) Hasil per ahli waris (urutan input)
    per_heir: List[HeirDistribution] = []
    for r in records:
        f = final[r.heir_id]
        if r.juristic_status == JuristicStatus.BLOCKED or (f == r.fraction_value and r.heir_id not in adjustment):
            label = r.fraction_label
        else:
            label = fraction_label(f)
        note = r.note
        if r.heir_id in adjustment:
            note = f"{note} [{adjustment[r.heir_id]}]"
        per_heir.append(
            HeirDistribution(
                heir_id=r.heir_id,
                name=r.name,
                category=r.category,
                final_fraction=f,
                final_label=label,
                final_amount=amounts[r.heir_id],
                juristic_status=r.juristic_status,
                note=note,
            )
        )

    ashl_akhir = compute_ashl(final.values()).ashl
    logger.info("Distribusi selesai: status=%s ahli_waris=%d AM %s→%s",
                status.value, len(records), ashl_awal, ashl_akhir)

    return DistributionResult(
        total_estate=net_estate,
        status=status,
        per_heir=per_heir,
        narrative=notes,
        reconciliation=reconciliation,
        ashl_awal=ashl_awal,
        ashl_akhir=ashl_akhir,
    )


# ============================================================
#                    FUNGSI UTAMA
# ============================================================
def compute_distribution(estate_inputs: EstateInputs, heirs: List[IndividualHeir],
                         deceased_gender: Gender,
                         jurisdiction_mode: Optional[JurisdictionMode] = None) -> DistributionResult:
    """
    Harta → harta bersih → furudh & hijab → 'Aul/Radd → nominal.
    `jurisdiction_mode` bila diberikan menggantikan mode di `estate_inputs`.
    """
    mode = jurisdiction_mode or estate_inputs.jurisdiction_mode
    if mode != estate_inputs.jurisdiction_mode:
        estate_inputs = estate_inputs.model_copy(update={"jurisdiction_mode": mode})

    net: NetEstateResult = calculate_net_estate(estate_inputs)
    records = determine_shares(heirs, net.net_estate, deceased_gender, mode)

    narrative: List[str] = []
    result = resolve_distribution(records, net.net_estate, narrative)
    if net.note:
        # catatan harta diletakkan tepat setelah baris total harta
        result.narrative[1:1] = [f"Catatan harta: {n}" for n in net.note]
    result.net_estate_detail = net
    return result
