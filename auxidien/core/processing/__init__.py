"""Signal processing: history, volatility, regime, weights and index value."""

from .history import DEFAULT_CAPACITY, AssetSeries, HistoryStore
from .index import compute_index, contributions
from .regime import (
    REGIME_POLICIES,
    Regime,
    RegimeClassifier,
    RegimePolicy,
    RegimeReading,
    policy_consistent_with,
)
from .state import ProcessorState
from .volatility import DEFAULT_VOLATILITIES, VolatilityEstimator, log_returns, periods_per_year
from .weights import (
    DEFAULT_BOUNDS,
    DEFAULT_LAMBDA,
    INITIAL_WEIGHTS,
    WeightBounds,
    WeightEngine,
    weights_sum,
)

__all__ = [
    "AssetSeries",
    "DEFAULT_BOUNDS",
    "DEFAULT_CAPACITY",
    "DEFAULT_LAMBDA",
    "DEFAULT_VOLATILITIES",
    "HistoryStore",
    "INITIAL_WEIGHTS",
    "ProcessorState",
    "REGIME_POLICIES",
    "Regime",
    "RegimeClassifier",
    "RegimePolicy",
    "RegimeReading",
    "VolatilityEstimator",
    "WeightBounds",
    "WeightEngine",
    "compute_index",
    "contributions",
    "log_returns",
    "periods_per_year",
    "policy_consistent_with",
    "weights_sum",
]
