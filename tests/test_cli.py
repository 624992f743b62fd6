"""
Tests for the layout-intel command line interface.
"""

import json
import logging

import pytest
from pathlib import Path
import sys

from click.testing import CliRunner
from loguru import logger

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from layout_intel.cli import InterceptHandler, main


FACTS = {
    'documentOpen': True,
    'documentName': 'annual-report.indd',
    'pages': [
        {'number': 1, 'name': '1', 'width': 612, 'height': 792,
         'margins': {'top': 36, 'left': 36, 'bottom': 36, 'right': 36}},
        {'number': 2, 'name': '2', 'width': 612, 'height': 792,
         'margins': {'top': 36, 'left': 36, 'bottom': 36, 'right': 36}},
    ],
    'textFrames': [
        {'index': 0, 'pageNumber': 1, 'bounds': [36, 36, 400, 576],
         'contentLength': 500, 'hasNext': True},
        {'index': 1, 'pageNumber': 2, 'bounds': [36, 36, 756, 576],
         'contentLength': 300, 'hasPrevious': True},
    ],
    'textContent': 'Annual report 2024',
}

METRICS = {
    'frames': [
        {'x': 36, 'y': 36, 'width': 540, 'height': 364, 'hasText': True, 'contentLength': 500},
    ],
    'margins': {'top': 36, 'left': 36, 'bottom': 36, 'right': 36},
    'columns': 2,
    'styles': [{'name': 'Body', 'fontSize': 10, 'fontFamily': 'Minion Pro'}],
}


class TestCli:

    def setup_method(self):
        self.runner = CliRunner()

    def teardown_method(self):
        logger.remove()
        root = logging.getLogger()
        for handler in list(root.handlers):
            if isinstance(handler, InterceptHandler):
                root.removeHandler(handler)

    def write(self, tmp_path, name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding='utf-8')
        return str(path)

    def test_analyze_json(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        result = self.runner.invoke(main, ['analyze', facts, '--json'])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data['isValid'] is True
        assert data['documentType'] == 'report'
        assert data['issues'] == []

    def test_analyze_text(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        result = self.runner.invoke(main, ['analyze', facts])
        assert result.exit_code == 0, result.output
        assert 'Type: report' in result.output
        assert 'No issues found.' in result.output
        assert 'Frame Distribution' in result.output

    def test_analyze_output_reads_back(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        first = self.runner.invoke(main, ['analyze', facts, '--json'])
        state = self.write(tmp_path, 'state.json', json.loads(first.output))

        second = self.runner.invoke(main, ['analyze', state, '--json'])
        assert second.exit_code == 0, second.output
        data = json.loads(second.output)
        assert len(data['pageInfo']) == 2
        assert data['documentType'] == 'report'

    def test_classify(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        result = self.runner.invoke(main, ['classify', facts])
        assert result.exit_code == 0
        assert result.output.strip() == 'report'

    def test_check_passes(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        result = self.runner.invoke(main, ['check', facts])
        assert result.exit_code == 0
        assert 'Can proceed' in result.output

    def test_check_blocked(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', dict(FACTS, hasOversetText=True))
        result = self.runner.invoke(main, ['check', facts])
        assert result.exit_code == 1
        assert 'Blocked' in result.output

    def test_ready(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        result = self.runner.invoke(main, ['ready', 'thread_text_frames', facts, '--json'])
        assert result.exit_code == 0
        assert json.loads(result.output)['ready'] is True

    def test_ready_blocked(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', dict(FACTS, hasOversetText=True))
        result = self.runner.invoke(main, ['ready', 'add_text', facts])
        assert result.exit_code == 1
        assert 'Existing overset text must be resolved first' in result.output

    def test_compare_match(self, tmp_path):
        reference = self.write(tmp_path, 'reference.json', METRICS)
        current = self.write(tmp_path, 'current.json', METRICS)
        result = self.runner.invoke(main, ['compare', reference, current, '--json'])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['match'] is True
        assert data['score'] == 100

    def test_compare_mismatch(self, tmp_path):
        moved = dict(METRICS, margins={'top': 72, 'left': 36, 'bottom': 36, 'right': 36})
        reference = self.write(tmp_path, 'reference.json', METRICS)
        current = self.write(tmp_path, 'current.json', moved)
        result = self.runner.invoke(main, ['compare', reference, current, '--check', 'margins'])
        assert result.exit_code == 1
        assert 'FAIL' in result.output
        assert 'margins - top' in result.output

    def test_compare_tolerance_option(self, tmp_path):
        moved = dict(METRICS, margins={'top': 40, 'left': 36, 'bottom': 36, 'right': 36})
        reference = self.write(tmp_path, 'reference.json', METRICS)
        current = self.write(tmp_path, 'current.json', moved)
        result = self.runner.invoke(main, ['compare', reference, current, '--tolerance', '0.2'])
        assert result.exit_code == 0

    def test_compare_with_config(self, tmp_path):
        config = tmp_path / 'layout.yaml'
        config.write_text("settings:\n  tolerance: 0.5\n", encoding='utf-8')
        moved = dict(METRICS, margins={'top': 50, 'left': 36, 'bottom': 36, 'right': 36})
        reference = self.write(tmp_path, 'reference.json', METRICS)
        current = self.write(tmp_path, 'current.json', moved)
        result = self.runner.invoke(main, ['--config', str(config), 'compare', reference, current])
        assert result.exit_code == 0

    def test_metrics(self, tmp_path):
        metrics = self.write(tmp_path, 'metrics.json', METRICS)
        result = self.runner.invoke(main, ['metrics', metrics])
        assert result.exit_code == 0
        assert 'Columns: 2' in result.output
        assert 'Body: 10pt, Minion Pro' in result.output

    def test_invalid_facts_file(self, tmp_path):
        path = tmp_path / 'facts.json'
        path.write_text('[]', encoding='utf-8')
        result = self.runner.invoke(main, ['analyze', str(path)])
        assert result.exit_code == 1
        assert 'Error' in result.output

    def test_missing_file(self, tmp_path):
        result = self.runner.invoke(main, ['analyze', str(tmp_path / 'missing.json')])
        assert result.exit_code == 2

    def test_log_file(self, tmp_path):
        facts = self.write(tmp_path, 'facts.json', FACTS)
        log_file = tmp_path / 'run.log'
        result = self.runner.invoke(main, ['--log-file', str(log_file), 'analyze', facts, '--json'])
        assert result.exit_code == 0
        logger.remove()
        assert 'Document state' in log_file.read_text(encoding='utf-8')
