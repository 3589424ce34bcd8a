"""Offline weight computation."""

from __future__ import annotations

import typer

from auxidien.core.models import BASKET
from auxidien.core.processing import (
    DEFAULT_LAMBDA,
    DEFAULT_VOLATILITIES,
    RegimeClassifier,
    WeightEngine,
    weights_sum,
)

from .constants import VALIDATION_EXIT_CODE
from .utils import emit_error, emit_json, metal_keys, parse_metal_values


def register(app: typer.Typer) -> None:
    app.command("weights")(weights_command)


def weights_command(
    vol: list[str] | None = typer.Option(
        None,
        "--vol",
        help="Annualized volatility as METAL=VALUE; repeatable. Missing metals use their defaults.",
    ),
    current: list[str] | None = typer.Option(
        None,
        "--current",
        help="Current weight as METAL=VALUE; repeatable. Defaults to the seed weights.",
    ),
    steps: int = typer.Option(0, "--steps", min=0, help="Apply this many smoothing steps toward the target."),
    lambda_: float = typer.Option(DEFAULT_LAMBDA, "--lambda", min=0.0, max=1.0, help="Smoothing factor."),
) -> None:
    """Compute target weights (and optionally smoothed weights) from volatilities."""

    volatilities = {**DEFAULT_VOLATILITIES, **parse_metal_values(vol, "--vol")}
    volatilities = {metal: volatilities[metal] for metal in BASKET}
    try:
        engine = WeightEngine(lambda_=lambda_)
        target = engine.target_weights(volatilities)
    except ValueError as error:
        emit_error(str(error), "VALIDATION_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

    weights = engine.initial_weights()
    weights.update(parse_metal_values(current, "--current"))
    for _ in range(steps):
        weights = engine.smooth(weights, target)

    reading = RegimeClassifier().read(volatilities)
    payload: dict[str, object] = {
        "volatilities": metal_keys(volatilities),
        "regime": reading.regime.value,
        "daily_volatility": round(reading.daily, 6),
        "target": metal_keys(target),
        "target_sum": round(weights_sum(target), 12),
        "overshoot": metal_keys(engine.overshoot(target)),
        "max_overshoot_bound": metal_keys(engine.max_overshoot_bound()),
    }
    if steps:
        payload["steps"] = steps
        payload["weights"] = metal_keys(weights)
    emit_json(payload)


__all__ = ["register", "weights_command"]
