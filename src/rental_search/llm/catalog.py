"""Catalog of recognised chat-completion models."""

import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ModelProfile(BaseModel):
    id: str
    name: str
    description: str
    max_tokens: int
    temperature: float
    cost_per_1k_tokens: float


AVAILABLE_MODELS: list[ModelProfile] = [
    ModelProfile(
        id="gpt-4o",
        name="GPT-4o",
        description="Latest multimodal flagship model",
        max_tokens=4096,
        temperature=0.7,
        cost_per_1k_tokens=0.005,
    ),
    ModelProfile(
        id="gpt-4o-mini",
        name="GPT-4o Mini",
        description="Lightweight GPT-4o, best price/performance",
        max_tokens=4096,
        temperature=0.7,
        cost_per_1k_tokens=0.00015,
    ),
    ModelProfile(
        id="gpt-4-turbo",
        name="GPT-4 Turbo",
        description="Optimised GPT-4 balancing quality and cost",
        max_tokens=4096,
        temperature=0.7,
        cost_per_1k_tokens=0.01,
    ),
    ModelProfile(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Classic model, lowest cost",
        max_tokens=4096,
        temperature=0.7,
        cost_per_1k_tokens=0.0005,
    ),
]

DEFAULT_MODEL = "gpt-4o"

_BY_ID: dict[str, ModelProfile] = {m.id: m for m in AVAILABLE_MODELS}


def get_model_config(model_id: str | None, default: str = DEFAULT_MODEL) -> ModelProfile:
    """Return the catalog entry for ``model_id``.

    Unrecognised or missing ids fall back to ``default`` (and to DEFAULT_MODEL
    if ``default`` itself is unknown).
    """
    if model_id and model_id in _BY_ID:
        return _BY_ID[model_id]
    if model_id:
        logger.warning("Unknown model %r, falling back to %s", model_id, default)
    return _BY_ID.get(default, _BY_ID[DEFAULT_MODEL])


def estimate_cost(model_id: str | None, input_tokens: int, output_tokens: int) -> float:
    """Estimated USD cost of a completion."""
    model = get_model_config(model_id)
    return (input_tokens + output_tokens) / 1000 * model.cost_per_1k_tokens
