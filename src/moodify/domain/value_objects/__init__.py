"""Domain value objects: the closed emotion vocabulary and its musical mapping."""

from dataclasses import dataclass
from enum import Enum


class Emotion(str, Enum):
    """Emotion labels produced by the client-side face classifier."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    SURPRISED = "surprised"
    NEUTRAL = "neutral"
    FEAR = "fear"
    DISGUST = "disgust"


POSITIVE_EMOTIONS = frozenset({Emotion.HAPPY, Emotion.SURPRISED})
NEGATIVE_EMOTIONS = frozenset({Emotion.SAD, Emotion.ANGRY, Emotion.FEAR, Emotion.DISGUST})


@dataclass(frozen=True)
class AudioFeatureTarget:
    """Target audio features passed to the provider as tuning hints.

    valence: 0.0 = sad/angry, 1.0 = happy/euphoric
    energy: 0.0 = calm, 1.0 = intense
    """

    valence: float
    energy: float
    danceability: float = 0.5
    tempo: int | None = None


# Hey future me - Spotify only accepts genres from its seed list, and at most 5 seeds
# per request. The provider slices to 5, so order here matters (most typical first).
EMOTION_GENRES: dict[Emotion, tuple[str, ...]] = {
    Emotion.HAPPY: ("pop", "dance", "funk", "disco", "happy", "upbeat"),
    Emotion.SAD: ("acoustic", "indie", "sad", "melancholy", "blues", "folk"),
    Emotion.ANGRY: ("rock", "metal", "punk", "hard-rock", "aggressive"),
    Emotion.SURPRISED: ("electronic", "experimental", "ambient", "psychedelic"),
    Emotion.NEUTRAL: ("indie-pop", "alternative", "chill", "lo-fi"),
    Emotion.FEAR: ("dark-ambient", "gothic", "industrial", "dark"),
    Emotion.DISGUST: ("grunge", "alternative-rock", "noise", "experimental"),
}

EMOTION_AUDIO_FEATURES: dict[Emotion, AudioFeatureTarget] = {
    Emotion.HAPPY: AudioFeatureTarget(valence=0.8, energy=0.7, danceability=0.8, tempo=120),
    Emotion.SAD: AudioFeatureTarget(valence=0.2, energy=0.3, danceability=0.3, tempo=80),
    Emotion.ANGRY: AudioFeatureTarget(valence=0.3, energy=0.9, danceability=0.5, tempo=140),
    Emotion.SURPRISED: AudioFeatureTarget(valence=0.6, energy=0.6, danceability=0.6, tempo=110),
    Emotion.NEUTRAL: AudioFeatureTarget(valence=0.5, energy=0.5, danceability=0.5, tempo=100),
    Emotion.FEAR: AudioFeatureTarget(valence=0.2, energy=0.4, danceability=0.2, tempo=90),
    Emotion.DISGUST: AudioFeatureTarget(valence=0.3, energy=0.6, danceability=0.3, tempo=95),
}


def genres_for(emotion: Emotion) -> tuple[str, ...]:
    """Seed genres for an emotion."""
    return EMOTION_GENRES.get(emotion, EMOTION_GENRES[Emotion.NEUTRAL])


def audio_features_for(emotion: Emotion) -> AudioFeatureTarget:
    """Target audio features for an emotion."""
    return EMOTION_AUDIO_FEATURES.get(emotion, EMOTION_AUDIO_FEATURES[Emotion.NEUTRAL])


__all__ = [
    "AudioFeatureTarget",
    "EMOTION_AUDIO_FEATURES",
    "EMOTION_GENRES",
    "Emotion",
    "NEGATIVE_EMOTIONS",
    "POSITIVE_EMOTIONS",
    "audio_features_for",
    "genres_for",
]
