"""
Unit Tests: fuse_modalities() Dynamic Weighting and Classification

Tests the fusion algorithm across every combination of present modalities.

Weights by active modalities:
    1 active            -> 1.0
    text + audio        -> 0.6 / 0.4
    text + facial       -> 0.6 / 0.4
    audio + facial      -> 0.55 / 0.45
    text + audio + facial -> 0.50 / 0.25 / 0.25

Run with: pytest testing/test_fusion_logic.py -v
"""

import asyncio
import itertools
import math
import pytest
import sys
import os

from pydantic import ValidationError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis.models import (
    EXPRESSION_NAMES,
    AudioEmotions,
    AudioIndicators,
    ImageIndicators,
    SentimentResult,
    TextEmotions,
    TextIndicators,
)
from analysis.audio_analyzer import analyze_audio
from analysis.text_analyzer import analyze_text
from fusion.fusion_logic import (
    AUDIO,
    FACIAL,
    TEXT,
    build_weight_table,
    classify_risk,
    compute_audio_risk,
    compute_facial_risk,
    compute_text_risk,
    fuse_modalities,
)
from utils.scoring import clamp01


# =============================================================================
# Test Fixtures & Helpers
# =============================================================================

def make_text(stress=0.5, depression=0.5, anxiety=0.5, label="NEGATIVE", score=0.5, risk_indicators=None) -> TextIndicators:
    """Helper to create TextIndicators with minimal boilerplate."""
    return TextIndicators(
        sentiment=SentimentResult(label=label, score=score),
        emotions=TextEmotions(stress=stress, depression=depression, anxiety=anxiety, positivity=0.2),
        keywords=[],
        risk_indicators=risk_indicators or []
    )


def make_audio(calm=0.5, stressed=0.5, sad=0.5, anxious=0.5) -> AudioIndicators:
    return AudioIndicators(
        energy=0.5,
        pitch=0.5,
        tempo=0.5,
        emotions=AudioEmotions(calm=calm, stressed=stressed, sad=sad, anxious=anxious)
    )


def make_image(sad: float = 1.0) -> ImageIndicators:
    """Distribution split between sad and neutral: facialRisk = 0.3*sad + 0.15."""
    values = {name: 0.0 for name in EXPRESSION_NAMES}
    values.update({"sad": sad, "neutral": 1.0 - sad})
    return ImageIndicators(expressions=values)


# =============================================================================
# Test Suite: Per-Modality Risk
# =============================================================================

class TestModalityRisk:
    """Per-modality risk formulas."""

    def test_text_risk_negative_sentiment(self):
        """
        stress=dep=anx=0.5, NEGATIVE@0.5
        0.5*0.3 + 0.5*0.3 + 0.5*0.2 + 0.5*0.2 = 0.5
        """
        assert compute_text_risk(make_text()) == pytest.approx(0.5)

    def test_text_risk_non_negative_sentiment_is_halved(self):
        """
        POSITIVE@0.2 -> negScore = (1 - 0.2) * 0.5 = 0.4
        0.15 + 0.15 + 0.1 + 0.4*0.2 = 0.48
        """
        text = make_text(label="POSITIVE", score=0.2)
        assert compute_text_risk(text) == pytest.approx(0.48)

    def test_text_risk_keyword_boost(self):
        """Two indicators add 2 * 0.15 to 0.5."""
        text = make_text(risk_indicators=['MEDIUM: "alone"', 'LOW: "tired"'])
        assert compute_text_risk(text) == pytest.approx(0.8)

    def test_text_risk_keyword_boost_capped(self):
        text = make_text(risk_indicators=['LOW: "sad"'] * 6)
        assert compute_text_risk(text) == pytest.approx(1.0)

    def test_audio_risk(self):
        """
        0.5*0.35 + 0.5*0.30 + 0.5*0.25 + (1-0.5)*0.10 = 0.5
        """
        assert compute_audio_risk(make_audio()) == pytest.approx(0.5)

    def test_audio_risk_silence_table(self):
        """
        Low energy / low pitch row: calm=0.7, stressed=0.2, sad=0.6, anxious=0.2
        0.07 + 0.18 + 0.05 + 0.03 = 0.33
        """
        audio = make_audio(calm=0.7, stressed=0.2, sad=0.6, anxious=0.2)
        assert compute_audio_risk(audio) == pytest.approx(0.33)

    def test_facial_risk(self):
        """
        sad=0.4, fearful=0.2, happy=0.1, others 0
        0.4*0.3 + 0.2*0.25 + (1-0.1)*0.15 = 0.12 + 0.05 + 0.135 = 0.305
        """
        image = ImageIndicators(expressions={
            "neutral": 0.3, "happy": 0.1, "sad": 0.4, "angry": 0.0,
            "fearful": 0.2, "disgusted": 0.0, "surprised": 0.0
        })
        assert compute_facial_risk(image) == pytest.approx(0.305)

    def test_facial_risk_all_sad_is_maximum(self):
        """sad=1: 0.3 + (1-0)*0.15 = 0.45, the highest a distribution can reach."""
        assert compute_facial_risk(make_image(sad=1.0)) == pytest.approx(0.45)
        assert compute_facial_risk(make_image(sad=0.0)) == pytest.approx(0.15)


# =============================================================================
# Test Suite: Weights by Active Modalities
# =============================================================================

EXPECTED_WEIGHTS = {
    (True, False, False): (1.0, 0.0, 0.0),
    (False, True, False): (0.0, 1.0, 0.0),
    (False, False, True): (0.0, 0.0, 1.0),
    (True, True, False): (0.6, 0.4, 0.0),
    (True, False, True): (0.6, 0.0, 0.4),
    (False, True, True): (0.0, 0.55, 0.45),
    (True, True, True): (0.50, 0.25, 0.25),
}


class TestDynamicWeights:
    """Weight rows are picked by which modalities are present."""

    @pytest.mark.parametrize("presence", list(EXPECTED_WEIGHTS.keys()))
    def test_weight_row_for_each_combination(self, presence):
        has_text, has_audio, has_image = presence
        result = fuse_modalities(
            text=make_text() if has_text else None,
            audio=make_audio() if has_audio else None,
            image=make_image() if has_image else None
        )

        expected = EXPECTED_WEIGHTS[presence]
        weights = result.weights
        assert (weights.text, weights.audio, weights.facial) == pytest.approx(expected)
        assert weights.text + weights.audio + weights.facial == pytest.approx(1.0)

        active = result.active_modalities
        assert (active.text, active.audio, active.facial) == presence

    @pytest.mark.parametrize("presence", list(EXPECTED_WEIGHTS.keys()))
    def test_absent_modalities_have_zero_breakdown(self, presence):
        has_text, has_audio, has_image = presence
        result = fuse_modalities(
            text=make_text() if has_text else None,
            audio=make_audio() if has_audio else None,
            image=make_image() if has_image else None
        )

        for name, present in zip(("text", "audio", "facial"), presence):
            if not present:
                assert getattr(result.breakdown, name) == 0.0
                assert getattr(result.weights, name) == 0.0

    @pytest.mark.parametrize("count,expected", [(1, 0.65), (2, 0.80), (3, 0.92)])
    def test_confidence_by_modality_count(self, count, expected):
        modalities = [make_text(), make_audio(), make_image()]
        present = modalities[:count] + [None] * (3 - count)
        result = fuse_modalities(text=present[0], audio=present[1], image=present[2])
        assert result.confidence == pytest.approx(expected)

    def test_custom_weight_table(self):
        table = build_weight_table({"text+audio": {"text": 0.5, "audio": 0.5}})
        result = fuse_modalities(text=make_text(), audio=make_audio(calm=1.0, stressed=0, sad=0, anxious=0), weight_table=table)
        assert result.weights.text == pytest.approx(0.5)
        assert result.overall_risk == pytest.approx(0.25)

    def test_weight_table_skips_unknown_modality(self):
        table = build_weight_table({"text+video": {"text": 0.5, "video": 0.5}, "audio": {"audio": 1.0}})
        assert list(table.keys()) == [2]

    def test_weight_row_renormalized(self):
        """text+audio 0.3/0.3 -> 0.5/0.5."""
        table = build_weight_table({"text+audio": {"text": 0.3, "audio": 0.3}})
        assert table[TEXT | AUDIO] == pytest.approx((0.5, 0.5, 0.0))

    def test_weight_row_missing_active_modality_skipped(self):
        """
        text+facial given weights for text and audio: facial has no weight, so
        the row is dropped and fusion splits equally over text and facial.
        """
        table = build_weight_table({"text+facial": {"text": 0.5, "audio": 0.5}})
        assert TEXT | FACIAL not in table

        result = fuse_modalities(text=make_text(), image=make_image(), weight_table=table)
        assert (result.weights.text, result.weights.audio, result.weights.facial) == pytest.approx((0.5, 0.0, 0.5))

    def test_weights_for_inactive_modalities_ignored(self):
        table = build_weight_table({"text+facial": {"text": 0.6, "audio": 0.3, "facial": 0.4}})
        assert table[TEXT | FACIAL] == pytest.approx((0.6, 0.0, 0.4))

    def test_zero_weight_row_skipped(self):
        assert build_weight_table({"audio": {"audio": 0.0}}) == {}

    @pytest.mark.parametrize("row", [
        {"text": 0.7, "audio": 0.7},
        {"text": 2.0, "audio": 0.5},
        {"text": 0.1, "audio": 0.05},
    ])
    def test_built_rows_always_sum_to_one(self, row):
        weights = build_weight_table({"text+audio": row})[TEXT | AUDIO]
        assert sum(weights) == pytest.approx(1.0)

    def test_missing_weight_row_splits_equally(self):
        table = build_weight_table({"text": {"text": 1.0}})
        result = fuse_modalities(audio=make_audio(), image=make_image(), weight_table=table)
        assert result.weights.audio == pytest.approx(0.5)
        assert result.weights.facial == pytest.approx(0.5)


# =============================================================================
# Test Suite: Classification
# =============================================================================

class TestClassification:

    @pytest.mark.parametrize("score,expected", [
        (0.0, "low"),
        (0.3499, "low"),
        (0.35, "moderate"),
        (0.5999, "moderate"),
        (0.6, "high"),
        (0.7999, "high"),
        (0.8, "critical"),
        (1.0, "critical"),
    ])
    def test_thresholds(self, score, expected):
        assert classify_risk(score) == expected

    def test_high_keyword_forces_critical(self):
        assert classify_risk(0.05, high_risk_keywords=True) == "critical"

    def test_medium_keyword_does_not_force_critical(self):
        text = make_text(stress=0.0, depression=0.0, anxiety=0.0, label="POSITIVE", score=1.0,
                         risk_indicators=['MEDIUM: "alone"'])
        result = fuse_modalities(text=text)
        assert result.overall_risk == pytest.approx(0.15)
        assert result.risk_level == "low"


# =============================================================================
# Test Suite: Scenarios
# =============================================================================

class TestScenarios:

    def test_no_modalities_returns_none(self):
        """Nothing analyzed -> no assessment."""
        assert fuse_modalities(None, None, None) is None

    def test_end_it_all_is_critical(self):
        """
        "I want to end it all", no classifier (NEUTRAL@0.5):
            riskLevel = 3, negativity = 0.5
            stress = 0.5, depression = 0.535, anxiety = 0.39
            textRisk = 0.15 + 0.1605 + 0.078 + 0.25*0.2 = 0.4385, +0.15 = 0.5885
        Score alone is moderate; the HIGH keyword forces critical.
        """
        text = asyncio.run(analyze_text("I want to end it all"))
        result = fuse_modalities(text=text)

        assert any(indicator.startswith("HIGH") for indicator in text.risk_indicators)
        assert result.overall_risk == pytest.approx(0.5885)
        assert result.risk_level == "critical"

    def test_audio_only_silence(self):
        audio = analyze_audio([0.0] * 2048)
        result = fuse_modalities(audio=audio)

        assert audio.energy == pytest.approx(0.0)
        assert audio.pitch == pytest.approx(0.0)
        assert result.overall_risk == pytest.approx(0.33)
        assert result.risk_level == "low"
        assert result.confidence == pytest.approx(0.65)

    def test_three_modalities_equal_risk(self):
        """
        All three at 0.45 (facial cannot exceed 0.45 for a valid distribution):
            text:   stress=dep=anx=0.45, NEGATIVE@0.45 -> 0.45
            audio:  stressed=sad=anxious=0.45, calm=0.55 -> 0.9*0.45 + 0.1*0.45 = 0.45
            facial: sad=1.0 -> 0.45
        0.45*0.5 + 0.45*0.25 + 0.45*0.25 = 0.45 -> moderate
        """
        result = fuse_modalities(
            text=make_text(stress=0.45, depression=0.45, anxiety=0.45, score=0.45),
            audio=make_audio(calm=0.55, stressed=0.45, sad=0.45, anxious=0.45),
            image=make_image(sad=1.0)
        )

        assert result.breakdown.text == pytest.approx(0.45)
        assert result.breakdown.audio == pytest.approx(0.45)
        assert result.breakdown.facial == pytest.approx(0.45)
        assert result.overall_risk == pytest.approx(0.45)
        assert result.risk_level == "moderate"
        assert result.confidence == pytest.approx(0.92)

    def test_text_and_audio(self):
        """
        textRisk = 1*0.3 + 1*0.3 + 1*0.2 + 0*0.2 = 0.8   (POSITIVE@1.0 -> negScore 0)
        audioRisk = 0.8*0.25 + (1-1)*0.1 = 0.2
        overall = 0.8*0.6 + 0.2*0.4 = 0.56 -> moderate
        """
        text = make_text(stress=1.0, depression=1.0, anxiety=1.0, label="POSITIVE", score=1.0)
        audio = make_audio(calm=1.0, stressed=0.0, sad=0.0, anxious=0.8)
        result = fuse_modalities(text=text, audio=audio)

        assert result.breakdown.text == pytest.approx(0.8)
        assert result.breakdown.audio == pytest.approx(0.2)
        assert result.overall_risk == pytest.approx(0.56)
        assert result.risk_level == "moderate"
        assert result.confidence == pytest.approx(0.80)


# =============================================================================
# Test Suite: Properties
# =============================================================================

class TestProperties:

    def test_monotonic_in_each_modality(self):
        """Raising one modality's inputs never lowers the overall risk."""
        steps = [0.0, 0.25, 0.5, 0.75, 1.0]
        previous = -1.0
        for value in steps:
            result = fuse_modalities(text=make_text(), audio=make_audio(stressed=value, sad=value, anxious=value), image=make_image())
            assert result.overall_risk >= previous
            previous = result.overall_risk

        previous = -1.0
        for value in steps:
            result = fuse_modalities(text=make_text(stress=value, depression=value, anxiety=value), audio=make_audio())
            assert result.overall_risk >= previous
            previous = result.overall_risk

    def test_idempotent(self):
        text, audio, image = make_text(), make_audio(), make_image()
        assert fuse_modalities(text, audio, image) == fuse_modalities(text, audio, image)

    def test_overall_risk_in_range(self):
        for stress, calm, sad in itertools.product([0.0, 0.5, 1.0], repeat=3):
            result = fuse_modalities(
                text=make_text(stress=stress, risk_indicators=['LOW: "sad"'] * 4),
                audio=make_audio(calm=calm),
                image=make_image(sad=sad)
            )
            assert 0.0 <= result.overall_risk <= 1.0

    def test_result_is_immutable(self):
        result = fuse_modalities(text=make_text())
        with pytest.raises(Exception):
            result.overall_risk = 0.9

    def test_out_of_range_indicator_rejected(self):
        with pytest.raises(ValidationError):
            make_text(stress=1.5)


class TestClamp:

    @pytest.mark.parametrize("value,expected", [
        (0.5, 0.5),
        (-0.2, 0.0),
        (1.7, 1.0),
        (math.nan, 0.0),
        (math.inf, 0.0),
        (None, 0.0),
        ("abc", 0.0),
    ])
    def test_clamp01(self, value, expected):
        assert clamp01(value) == expected
