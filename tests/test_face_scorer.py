# tests/test_face_scorer.py
import numpy as np
import pytest

from cashier.core.errors import RecognitionError
from cashier.services.face_scorer import SmileScorer


@pytest.fixture
def blank():
    return np.zeros((240, 320, 3), dtype=np.uint8)


def test_no_face_scores_none(blank):
    scorer = SmileScorer(window=3)
    scorer.history.extend([1.0, 1.0])
    assert scorer.score(blank) is None
    assert len(scorer.history) == 0


def test_extract_face_without_face_raises(blank):
    with pytest.raises(RecognitionError, match="No face detected."):
        SmileScorer().extract_face(blank)
