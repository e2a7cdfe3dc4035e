"""模型能力表：按模型名称声明支持的操作，在构造时校验。

Model capability table.

Maps each known model identifier to the set of operations it supports.
Requests are checked against this table when they are built; models
missing from the table are let through so new server-side models work
without a library release.
"""

from __future__ import annotations

from enum import Enum

from zai_lib_python.errors import ValidationError
from zai_lib_python.telemetry import get_logger

logger = get_logger(__name__)


class Capability(str, Enum):
    """Operations a model may support."""

    CHAT = "chat"
    THINKING = "thinking"
    TOOL_STREAM = "tool_stream"
    VISION = "vision"
    VIDEO = "video"
    AUDIO = "audio"
    REALTIME = "realtime"


_TEXT_THINKING = frozenset({Capability.CHAT, Capability.THINKING})

MODEL_CAPABILITIES: dict[str, frozenset[Capability]] = {
    "glm-4.7": _TEXT_THINKING | {Capability.TOOL_STREAM},
    "glm-4.6": _TEXT_THINKING | {Capability.TOOL_STREAM},
    "glm-4.5": _TEXT_THINKING,
    "glm-4.5-flash": _TEXT_THINKING,
    "glm-4.5-air": _TEXT_THINKING,
    "glm-4.5-x": _TEXT_THINKING,
    "glm-4.5-airx": _TEXT_THINKING,
    "glm-4.5v": frozenset({Capability.CHAT, Capability.VISION, Capability.VIDEO}),
    "glm-4-voice": frozenset({Capability.CHAT, Capability.AUDIO}),
    "glm-realtime": frozenset({Capability.REALTIME, Capability.AUDIO, Capability.VIDEO}),
    "glm-realtime-flash": frozenset({Capability.REALTIME, Capability.AUDIO, Capability.VIDEO}),
    "glm-realtime-air": frozenset({Capability.REALTIME, Capability.AUDIO}),
}

# Content part type -> capability it needs
_CONTENT_CAPABILITY: dict[str, Capability] = {
    "image_url": Capability.VISION,
    "file_url": Capability.VISION,
    "video_url": Capability.VIDEO,
    "input_audio": Capability.AUDIO,
}


def capabilities_of(model: str) -> frozenset[Capability] | None:
    """Return the capabilities of a model, or None if it is not in the table."""
    return MODEL_CAPABILITIES.get(model.lower())


def supports(model: str, capability: Capability) -> bool:
    """Check a capability; unknown models are assumed to support it."""
    caps = capabilities_of(model)
    return caps is None or capability in caps


def require_capability(model: str, capability: Capability, *, field: str | None = None) -> None:
    """Raise if a known model lacks ``capability``.

    Raises:
        ValidationError: If the model is known and does not support it
    """
    caps = capabilities_of(model)
    if caps is None:
        logger.debug("Model not in capability table, skipping check", model=model, capability=capability.value)
        return
    if capability not in caps:
        raise ValidationError(
            f"Model '{model}' does not support {capability.value}",
            field=field,
            expected=capability.value,
            actual=sorted(c.value for c in caps),
        )


def capability_for_content(part_type: str) -> Capability | None:
    """Capability needed to send a content part of the given type."""
    return _CONTENT_CAPABILITY.get(part_type)
