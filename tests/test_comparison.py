"""
Tests for the layout comparison engine.
"""

import logging

import pytest
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dataclasses import replace

from layout_intel.comparison.engine import (
    ALL_CHECK_TYPES,
    CheckType,
    ComparisonEngine,
    compare_layouts,
    relative_deviation,
    score_deviations,
)
from layout_intel.layout.metrics import (
    Frame,
    LayoutMetrics,
    Margins,
    Style,
    TextAlignment,
    TextRegion,
    TextSegment,
    VisualAttributes,
    metrics_from_frames,
)


def attributes(**overrides):
    values = dict(
        font_family='Helvetica',
        font_style='Regular',
        font_size=12,
        leading=14.4,
        alignment=TextAlignment.LEFT,
        first_line_indent=0,
        left_indent=0,
    )
    values.update(overrides)
    return VisualAttributes(**values)


def region(frame_index, *segments):
    return TextRegion(
        frame_index=frame_index,
        regions=tuple(TextSegment('Lorem ipsum', seg) for seg in segments),
    )


def snapshot(**overrides):
    values = dict(
        frames=(Frame(x=0, y=0, width=100, height=50, has_text=True, content_length=40),),
        margins=Margins(top=100, left=36, bottom=36, right=36),
        columns=1,
        styles=(Style('Body', 12, 'Helvetica'), Style('Heading', 24, 'Helvetica')),
        text_regions=(region(0, attributes()),),
    )
    values.update(overrides)
    return LayoutMetrics(**values)


class TestRelativeDeviation:

    def test_ratio(self):
        assert relative_deviation(100, 104) == pytest.approx(0.04)

    def test_zero_expected(self):
        assert relative_deviation(0, 6) == 1.0
        assert relative_deviation(0, 0) == 0.0

    def test_negative_expected(self):
        assert relative_deviation(-10, -11) == pytest.approx(0.1)

    def test_score_floor(self):
        assert score_deviations([]) == 100


class TestComparisonEngine:

    def setup_method(self):
        self.engine = ComparisonEngine()
        self.reference = snapshot()

    def test_reflexive(self):
        result = self.engine.compare(self.reference, self.reference, 0.05, ALL_CHECK_TYPES)
        assert result.match
        assert result.score == 100
        assert result.deviations == ()

    def test_zero_expected_x(self):
        reference = metrics_from_frames([Frame(0, 0, 100, 50)])
        current = metrics_from_frames([Frame(6, 0, 100, 50)])
        result = self.engine.compare(reference, current, 0.05, ['frames'])
        assert not result.match
        assert len(result.deviations) == 1
        deviation = result.deviations[0]
        assert (deviation.type, deviation.field) == ('frame', 'frame[0].x')
        assert (deviation.expected, deviation.actual) == (0, 6)
        assert deviation.deviation == 100
        assert result.score == 0

    def test_margin_within_tolerance(self):
        current = snapshot(margins=Margins(top=104, left=36, bottom=36, right=36))
        result = self.engine.compare(self.reference, current, 0.05, ['margins'])
        assert result.match
        assert result.deviations == ()

    def test_tolerance_is_inclusive(self):
        current = snapshot(margins=Margins(top=105, left=36, bottom=36, right=36))
        assert self.engine.compare(self.reference, current, 0.05, ['margins']).match

    def test_margin_outside_tolerance(self):
        current = snapshot(margins=Margins(top=110, left=36, bottom=36, right=36))
        result = self.engine.compare(self.reference, current, 0.05, ['margins'])
        assert [(d.type, d.field, d.deviation) for d in result.deviations] == [('margins', 'top', 10)]
        assert result.score == 90

    def test_score_is_mean(self):
        current = snapshot(margins=Margins(top=110, left=43.2, bottom=36, right=36))
        result = self.engine.compare(self.reference, current, 0.05, ['margins'])
        assert [d.deviation for d in result.deviations] == [10, 20]
        assert result.score == 85

    def test_score_floored_at_zero(self):
        current = metrics_from_frames([Frame(0, 0, 300, 50)])
        reference = metrics_from_frames([Frame(0, 0, 100, 50)])
        result = self.engine.compare(reference, current, 0.05, ['frames'])
        assert result.deviations[0].deviation == 200
        assert result.score == 0

    def test_frame_count_mismatch_short_circuits(self):
        current = metrics_from_frames([Frame(50, 50, 10, 10), Frame(0, 0, 100, 50)])
        result = self.engine.compare(self.reference, current, 0.05, ['frames'])
        assert len(result.deviations) == 1
        deviation = result.deviations[0]
        assert (deviation.type, deviation.field) == ('frames', 'count')
        assert (deviation.expected, deviation.actual, deviation.deviation) == (1, 2, 100)

    def test_missing_style(self):
        current = snapshot(styles=(Style('Body', 12, 'Helvetica'),))
        result = self.engine.compare(self.reference, current, 0.05, ['styles'])
        assert len(result.deviations) == 1
        deviation = result.deviations[0]
        assert (deviation.type, deviation.field) == ('style', 'missing')
        assert (deviation.expected, deviation.actual) == ('Heading', 'not found')

    def test_style_font_size(self):
        current = snapshot(styles=(Style('Body', 14, 'Helvetica'), Style('Heading', 24, 'Helvetica')))
        result = self.engine.compare(self.reference, current, 0.05, ['styles'])
        assert [(d.field, d.deviation) for d in result.deviations] == [('Body.fontSize', 17)]
        assert result.score == 83

    def test_extra_current_style_ignored(self):
        styles = self.reference.styles + (Style('Caption', 8, 'Helvetica'),)
        result = self.engine.compare(self.reference, snapshot(styles=styles), 0.05, ['styles'])
        assert result.match

    def test_font_fallback_accepted(self):
        current = snapshot(text_regions=(region(0, attributes(font_family='Arial')),))
        result = self.engine.compare(
            self.reference, current, 0.05, ['textRegions'],
            font_fallbacks={'Helvetica': ['Arial', 'Helvetica Neue']},
        )
        assert result.match

    def test_font_without_fallback(self):
        current = snapshot(text_regions=(region(0, attributes(font_family='Arial')),))
        result = self.engine.compare(self.reference, current, 0.05, ['textRegions'])
        assert [(d.field, d.expected, d.actual) for d in result.deviations] == [
            ('frame[0].region[0].fontFamily', 'Helvetica', 'Arial'),
        ]

    def test_engine_default_fallbacks(self):
        engine = ComparisonEngine(font_fallbacks={'Helvetica': ['Arial']})
        current = snapshot(text_regions=(region(0, attributes(font_family='Arial')),))
        assert engine.compare(self.reference, current, check_types=['textRegions']).match

    def test_missing_region(self):
        current = snapshot(text_regions=(region(3, attributes()),))
        result = self.engine.compare(self.reference, current, 0.05, ['textRegions'])
        deviation = result.deviations[0]
        assert (deviation.type, deviation.field) == ('textRegion', 'frame[0]')
        assert (deviation.expected, deviation.actual) == ('1 regions', 'no regions found')
        assert deviation.deviation == 100

    def test_region_count(self):
        reference = snapshot(text_regions=(region(0, attributes(), attributes(font_size=24)),))
        current = snapshot(text_regions=(region(0, attributes()),))
        result = self.engine.compare(reference, current, 0.05, ['textRegions'])
        assert [(d.field, d.deviation) for d in result.deviations] == [('frame[0].regionCount', 50)]

    def test_segment_attributes(self):
        current = snapshot(text_regions=(region(0, attributes(
            leading=18,
            alignment=TextAlignment.JUSTIFY,
            first_line_indent=12,
        )),))
        result = self.engine.compare(self.reference, current, 0.05, ['textRegions'])
        fields = [d.field for d in result.deviations]
        assert fields == [
            'frame[0].region[0].leading',
            'frame[0].region[0].alignment',
            'frame[0].region[0].firstLineIndent',
        ]
        alignment = result.deviations[1]
        assert (alignment.expected, alignment.actual, alignment.deviation) == ('left', 'justify', 100)

    def test_missing_category_degrades(self):
        reference = snapshot(margins=None, styles=None, text_regions=None)
        current = snapshot(margins=Margins(0, 0, 0, 0), styles=(), text_regions=())
        result = self.engine.compare(reference, current, 0.05, ALL_CHECK_TYPES)
        assert result.match

    def test_frames_missing_from_reference(self):
        reference = LayoutMetrics(margins=Margins(100, 36, 36, 36))
        result = self.engine.compare(reference, self.reference, 0.05, ['frames', 'margins'])
        assert result.match

    def test_unchecked_categories_ignored(self):
        current = snapshot(margins=Margins(top=500, left=36, bottom=36, right=36))
        assert self.engine.compare(self.reference, current, 0.05, ['frames']).match

    def test_default_check_types(self):
        current = snapshot(text_regions=(region(0, attributes(font_size=40)),))
        result = self.engine.compare(self.reference, current)
        assert result.match
        assert result.check_types == (CheckType.FRAMES, CheckType.MARGINS, CheckType.STYLES)

    def test_idempotent(self):
        current = snapshot(margins=Margins(top=130, left=36, bottom=36, right=36))
        first = self.engine.compare(self.reference, current, 0.05, ALL_CHECK_TYPES)
        second = self.engine.compare(self.reference, current, 0.05, ALL_CHECK_TYPES)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_negative_tolerance_treated_as_zero(self):
        result = self.engine.compare(self.reference, self.reference, -1, ['frames'])
        assert result.match
        assert result.tolerance == 0.0

    def test_unknown_check_type(self):
        with pytest.raises(ValueError):
            self.engine.compare(self.reference, self.reference, 0.05, ['colors'])

    def test_round_trip_through_json_shape(self):
        restored = LayoutMetrics.from_dict(self.reference.to_dict())
        result = compare_layouts(self.reference, restored, check_types=ALL_CHECK_TYPES)
        assert result.match

    def test_failure_logged_as_warning(self, caplog):
        current = snapshot(margins=Margins(top=200, left=36, bottom=36, right=36))
        with caplog.at_level(logging.INFO, logger='layout_intel.comparison.engine'):
            self.engine.compare(self.reference, current, 0.05, ['margins'])
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.patches[0]['path'] == '/comparison/latest'
        assert record.patches[0]['value']['match'] is False

    def test_pass_logged_as_info(self, caplog):
        with caplog.at_level(logging.INFO, logger='layout_intel.comparison.engine'):
            self.engine.compare(self.reference, self.reference)
        assert caplog.records[-1].levelno == logging.INFO


class TestCheckType:

    def test_parse_variants(self):
        assert CheckType.parse('textRegions') == CheckType.TEXT_REGIONS
        assert CheckType.parse('text_regions') == CheckType.TEXT_REGIONS
        assert CheckType.parse('Frames') == CheckType.FRAMES

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            CheckType.parse('bleed')


class TestLayoutMetricsModel:

    def test_from_camel_case(self):
        metrics = LayoutMetrics.from_dict({
            'frames': [{'x': 10, 'y': 20, 'width': 100, 'height': 50, 'hasText': True}],
            'margins': {'top': 36, 'left': 36, 'bottom': 36, 'right': 36},
            'columns': 2,
            'textRegions': [{
                'frameIndex': 0,
                'regions': [{
                    'textSnippet': 'Hello',
                    'visualAttributes': {
                        'fontFamily': 'Minion Pro',
                        'fontStyle': 'Italic',
                        'fontSize': 11,
                        'leading': 13,
                        'alignment': 'LEFT_ALIGN',
                        'firstLineIndent': 12,
                    },
                }],
            }],
        })
        assert metrics.columns == 2
        assert metrics.styles is None
        segment = metrics.region_for_frame(0).regions[0]
        assert segment.visual_attributes.alignment == TextAlignment.LEFT
        assert segment.visual_attributes.first_line_indent == 12

    def test_zero_columns_kept(self):
        assert LayoutMetrics.from_dict({'columns': 0}).columns == 0
        assert LayoutMetrics.from_dict({}).columns == 1

    def test_non_numeric_rejected(self):
        with pytest.raises(ValueError):
            Frame.from_dict({'x': 'left', 'y': 0, 'width': 1, 'height': 1})

    def test_unknown_alignment_rejected(self):
        with pytest.raises(ValueError):
            TextAlignment.parse('diagonal')

    def test_replace_keeps_snapshot_immutable(self):
        reference = snapshot()
        changed = replace(reference, columns=3)
        assert reference.columns == 1
        assert changed.columns == 3
