"""PCM rendering for letter tones.

A tone is a triangle wave with a linear 50 ms attack up to the requested
volume and a linear release back to silence at 500 ms. The source sits on a
unit circle around the listener at ``(cos a, 0, sin a)``: +x is the right
ear, +z is behind the head. Distance attenuation follows the inverse law.
The head-related part is approximated with an equal-power level difference,
a Woodworth time difference and a small rear-hemisphere cut, since the mixer
only gives us two plain channels.
"""

from __future__ import annotations

import math
from array import array
from dataclasses import dataclass

TONE_DURATION_MS = 500
ATTACK_MS = 50

HEAD_RADIUS_M = 0.0875
SPEED_OF_SOUND_M_S = 343.0
REAR_ATTENUATION = 0.85

_AMP = 32767


@dataclass(frozen=True, slots=True)
class StereoCues:
    left_gain: float
    right_gain: float
    left_delay_s: float
    right_delay_s: float


def source_position(azimuth_rad: float) -> tuple[float, float, float]:
    return (math.cos(azimuth_rad), 0.0, math.sin(azimuth_rad))


def inverse_distance_gain(distance: float, *, ref_distance: float = 1.0, rolloff: float = 1.0) -> float:
    d = max(distance, ref_distance)
    return ref_distance / (ref_distance + rolloff * (d - ref_distance))


def envelope_gain(t_s: float, *, volume: float, attack_s: float, total_s: float) -> float:
    if t_s <= 0.0 or t_s >= total_s:
        return 0.0
    if t_s < attack_s:
        return volume * (t_s / attack_s)
    return volume * (total_s - t_s) / (total_s - attack_s)


def triangle(phase: float) -> float:
    """Unit triangle wave; ``phase`` in cycles."""

    frac = phase - math.floor(phase)
    return 1.0 - 4.0 * abs(frac - 0.5)


def stereo_cues(azimuth_rad: float) -> StereoCues:
    x, _, z = source_position(azimuth_rad)
    distance = math.hypot(x, z)
    gain = inverse_distance_gain(distance)
    if z > 0.0:
        gain *= 1.0 - (1.0 - REAR_ATTENUATION) * z

    # Equal-power pan on the lateral component.
    pan = max(-1.0, min(1.0, x / distance if distance > 0.0 else 0.0))
    angle = (pan + 1.0) * math.pi / 4.0
    left = math.cos(angle) * gain
    right = math.sin(angle) * gain

    lateral = math.asin(pan)
    itd = (HEAD_RADIUS_M / SPEED_OF_SOUND_M_S) * (abs(lateral) + math.sin(abs(lateral)))
    if lateral >= 0.0:
        return StereoCues(left_gain=left, right_gain=right, left_delay_s=itd, right_delay_s=0.0)
    return StereoCues(left_gain=left, right_gain=right, left_delay_s=0.0, right_delay_s=itd)


def render_tone_pcm(
    *,
    frequency_hz: float,
    volume_gain: float,
    azimuth_rad: float,
    sample_rate: int,
    duration_ms: int = TONE_DURATION_MS,
    attack_ms: int = ATTACK_MS,
) -> array[int]:
    """Interleaved signed 16-bit stereo samples (L, R, L, R, ...)."""

    if sample_rate <= 0:
        raise ValueError("sample_rate must be > 0")
    if duration_ms <= 0:
        raise ValueError("duration_ms must be > 0")
    if not (0 < attack_ms < duration_ms):
        raise ValueError("attack_ms must be in (0, duration_ms)")

    volume = max(0.0, min(1.0, float(volume_gain)))
    total_s = duration_ms / 1000.0
    attack_s = attack_ms / 1000.0
    cues = stereo_cues(azimuth_rad)
    sample_count = max(1, int(sample_rate * total_s))

    def ear(t_s: float, delay_s: float, gain: float) -> int:
        t = t_s - delay_s
        env = envelope_gain(t, volume=volume, attack_s=attack_s, total_s=total_s)
        sample = triangle(frequency_hz * t) * env * gain
        return int(max(-1.0, min(1.0, sample)) * _AMP)

    out = array("h")
    for idx in range(sample_count):
        t_s = idx / float(sample_rate)
        out.append(ear(t_s, cues.left_delay_s, cues.left_gain))
        out.append(ear(t_s, cues.right_delay_s, cues.right_gain))
    return out
