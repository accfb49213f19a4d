"""Letter grades and score clamping shared by both engines."""
from core.config_loader import GradeScale

_DEFAULT_SCALE = GradeScale()


def clamp_score(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def assign_grade(score: float, scale: GradeScale = _DEFAULT_SCALE) -> str:
    """Map a 0-100 score to a letter grade. Boundary ties favor the higher grade."""
    for band in scale.bands:
        if score >= band.min_score:
            return band.grade
    return scale.fallback
