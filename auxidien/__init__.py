"""auxidien - volatility-aware precious-metal index.

Turns gold, silver, platinum and palladium spot prices into a bounded,
smoothly adapting weight vector and a per-gram index value, and
publishes it to an authoritative record that enforces rate and
magnitude limits on every update.
"""

__version__ = "0.1.0"

from auxidien.core.models import BASKET, Metal
from auxidien.core.processing import ProcessorState, RegimeClassifier, WeightEngine, compute_index
from auxidien.core.record import PriceRecord, Role, UpdateResult

__all__ = [
    "BASKET",
    "Metal",
    "PriceRecord",
    "ProcessorState",
    "RegimeClassifier",
    "Role",
    "UpdateResult",
    "WeightEngine",
    "__version__",
    "compute_index",
]
