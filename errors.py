# Di dalam file: errors.py

from typing import Optional

from models import KinshipCategory


class FaraidError(Exception):
    """Kesalahan dasar mesin faraidh."""


class ValidationError(FaraidError, ValueError):
    """
    Input ahli waris saling bertentangan (misal Suami untuk pewaris laki-laki,
    atau dua Ayah). Perhitungan tidak boleh dilanjutkan.
    """

    def __init__(self, reason: str, category: Optional[KinshipCategory] = None):
        self.reason = reason
        self.category = category
        if category is not None:
            super().__init__(f"{category.value}: {reason}")
        else:
            super().__init__(reason)


class InvariantViolation(FaraidError, AssertionError):
    """Jumlah akhir tidak seimbang: cacat pada resolver, bukan kesalahan input."""
