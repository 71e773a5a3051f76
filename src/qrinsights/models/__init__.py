"""Domain models package."""

from qrinsights.models.batch import Batch
from qrinsights.models.brand import Brand
from qrinsights.models.qr_code import QRCode
from qrinsights.models.state import State

__all__ = [
    "Batch",
    "Brand",
    "QRCode",
    "State",
]
