"""In-memory registry of generative model invokers.

Each task of the contract layer is served by one callable bound under a key.
An invoker takes ``(system, user)`` and returns the decoded JSON reply.
"""
from typing import Any, Callable, Dict

ModelInvoker = Callable[[str, Dict[str, Any]], Any]

_REGISTRY: Dict[str, ModelInvoker] = {}


def bind_model(key: str, fn: ModelInvoker) -> None:
    """Bind a callable implementation to a registry key."""
    _REGISTRY[key] = fn


def get_model(key: str) -> ModelInvoker:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


def clear_models() -> None:
    """Drop every binding; used when rebinding from a fresh config."""
    _REGISTRY.clear()


QUESTION_KEY = "models.question_generator"
EVALUATION_KEY = "models.answer_evaluator"
TONE_KEY = "models.tone_analyzer"

MODEL_KEYS = (QUESTION_KEY, EVALUATION_KEY, TONE_KEY)
