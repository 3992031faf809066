# app/math/net_estate.py

from __future__ import annotations
import logging
from typing import List

from models import JurisdictionMode
from schemas import EstateInputs, NetEstateResult

logger = logging.getLogger(__name__)


def _clamp(value: int, field: str, notes: List[str]) -> int:
    if value < 0:
        notes.append(f"{field} bernilai negatif ({value}); dianggap 0.")
        logger.warning("Nilai negatif pada %s (%s) dijepit ke 0", field, value)
        return 0
    return value


def calculate_net_estate(inputs: EstateInputs) -> NetEstateResult:
    """
    Menghitung harta waris bersih:
    1. (KHI) keluarkan separuh harta bersama (gono-gini) milik pasangan yang hidup
    2. kurangi biaya tajhiz dan hutang (minimal 0)
    3. batasi wasiat maksimal 1/3 dari sisa langkah 2
    4. harta bersih = sisa - wasiat
    Tidak pernah melempar exception untuk angka; semua penjepitan dicatat di `note`.
    """
    notes: List[str] = []

    gross = _clamp(inputs.gross_assets, "Total harta", notes)
    funeral = _clamp(inputs.funeral_cost, "Biaya tajhiz", notes)
    debt = _clamp(inputs.debt, "Hutang", notes)
    bequest = _clamp(inputs.bequest, "Wasiat", notes)
    joint = _clamp(inputs.joint_property_amount, "Harta bersama", notes)

    if joint > gross:
        notes.append(f"Harta bersama ({joint}) melebihi total harta; dibatasi menjadi {gross}.")
        logger.warning("Harta bersama %s > total harta %s", joint, gross)
        joint = gross

    # 1) Gono-gini (hanya KHI)
    spouse_joint_share = 0
    assets = gross
    if joint > 0:
        if inputs.jurisdiction_mode == JurisdictionMode.STATUTORY:
            spouse_joint_share = joint // 2
            assets -= spouse_joint_share
        else:
            notes.append("Harta bersama tidak dipisahkan pada mode Syafi'i.")

    # 2) Tajhiz & hutang
    remaining = assets - funeral - debt
    if remaining < 0:
        notes.append("Biaya tajhiz dan hutang melebihi harta; harta dianggap habis (0).")
        logger.warning("Harta habis oleh tajhiz/hutang (kurang %s)", -remaining)
        remaining = 0

    # 3) Batas wasiat 1/3
    max_bequest = remaining // 3
    bequest_applied = bequest
    if bequest > max_bequest:
        bequest_applied = max_bequest
        notes.append("Wasiat dipotong menjadi 1/3 (Maksimal Syariat)")

    # 4) Harta bersih
    net_estate = max(remaining - bequest_applied, 0)
    logger.debug(
        "Harta bersih: gross=%s gono_gini=%s tajhiz=%s hutang=%s wasiat=%s -> %s",
        gross, spouse_joint_share, funeral, debt, bequest_applied, net_estate,
    )

    return NetEstateResult(
        net_estate=net_estate,
        spouse_joint_share=spouse_joint_share,
        bequest_applied=bequest_applied,
        note=notes,
    )
