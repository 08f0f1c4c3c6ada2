# wobj/animation.py
"""
Keyframe reduction.

An interior key is dropped when interpolating between the last retained
key and the next raw key reproduces it within `epsilon` per component.
Playback re-derives dropped keys with the same interpolation (lerp for
vectors, slerp for rotations). First and last keys are always retained.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, TypeVar

from wobj.math import lerp_vec, slerp_quat
from wobj.scene.flatten import FlattenedScene
from wobj.scene.types import Animation, QuatKey, VectorKey
from wobj.types import Vector3

logger = logging.getLogger(__name__)

KEY_EPSILON = 1e-5

K = TypeVar("K", VectorKey, QuatKey)


@dataclass
class AnimationChannel:
    node_index: int
    position_keys: List[VectorKey] = field(default_factory=list)
    rotation_keys: List[QuatKey] = field(default_factory=list)
    scaling_keys: List[VectorKey] = field(default_factory=list)


@dataclass
class CompressedAnimation:
    name: str
    duration: float
    channels: List[AnimationChannel] = field(default_factory=list)


def equals_fuzzy(a, b, epsilon: float) -> bool:
    return all(abs(x - y) < epsilon for x, y in zip(a, b))


def _reduce_keys(
    keys: Sequence[K],
    interpolate: Callable,
    epsilon: float,
) -> List[K]:
    kept: List[K] = []
    last = len(keys) - 1

    for i, key in enumerate(keys):
        if 0 < i < last:
            prev = kept[-1]
            nxt = keys[i + 1]
            span = nxt.time - prev.time
            factor = (key.time - prev.time) / span if span else 0.0
            predicted = interpolate(prev.value, nxt.value, factor)
            if equals_fuzzy(predicted, key.value, epsilon):
                continue
        kept.append(key)

    return kept


def compress_vector_keys(
    keys: Sequence[VectorKey], epsilon: float = KEY_EPSILON
) -> List[VectorKey]:
    return _reduce_keys(keys, lerp_vec, epsilon)


def compress_rotation_keys(
    keys: Sequence[QuatKey], epsilon: float = KEY_EPSILON
) -> List[QuatKey]:
    return _reduce_keys(keys, slerp_quat, epsilon)


def fixed_scale_keys() -> List[VectorKey]:
    return [VectorKey(0.0, Vector3.one())]


def compress_animation(
    animation: Animation,
    skeleton: FlattenedScene,
    epsilon: float = KEY_EPSILON,
    no_scale: bool = False,
) -> CompressedAnimation:
    """Resolve each channel to a node index and reduce its three tracks."""
    out = CompressedAnimation(name=animation.name, duration=animation.duration)

    for channel in animation.channels:
        node_index = skeleton.index_of(channel.node_name)
        if node_index is None:
            logger.warning(
                "Animation %s: no skeleton node named %s, channel dropped",
                animation.name,
                channel.node_name,
            )
            continue

        scaling = (
            fixed_scale_keys()
            if no_scale
            else compress_vector_keys(channel.scaling_keys, epsilon)
        )
        out.channels.append(
            AnimationChannel(
                node_index=node_index,
                position_keys=compress_vector_keys(channel.position_keys, epsilon),
                rotation_keys=compress_rotation_keys(channel.rotation_keys, epsilon),
                scaling_keys=scaling,
            )
        )

    before = sum(
        len(c.position_keys) + len(c.rotation_keys) + len(c.scaling_keys)
        for c in animation.channels
    )
    after = sum(
        len(c.position_keys) + len(c.rotation_keys) + len(c.scaling_keys)
        for c in out.channels
    )
    logger.info(
        "Animation: %s, %d channel(s), %d -> %d keys",
        animation.name,
        len(out.channels),
        before,
        after,
    )
    return out
