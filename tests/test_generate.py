"""
Tests for the command-line entry point.
"""

import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dungen import generate
from dungen.config import GenerationConfig
from dungen.core.errors import DungenError
from dungen.generate import generate_dungeon, main


def _json_blocks(text):
    """Parse the pretty-printed JSON documents from CLI output."""
    decoder = json.JSONDecoder()
    blocks, index = [], 0
    while True:
        start = text.find('{', index)
        if start == -1:
            return blocks
        obj, end = decoder.raw_decode(text, start)
        blocks.append(obj)
        index = end


class TestGenerateDungeon:
    def test_seed_determines_result(self):
        first = generate_dungeon(GenerationConfig(max_steps=15, seed='cli'))
        second = generate_dungeon(GenerationConfig(max_steps=15, seed='cli'))
        assert first.to_dict() == second.to_dict()

    def test_zero_steps_returns_seed_graph(self):
        graph = generate_dungeon(GenerationConfig(max_steps=0, seed='x'))
        assert set(graph.nodes) == {'start', 'goal'}
        assert list(graph.edges) == ['edge_1']


class TestMain:
    def test_dump_and_metrics(self, capsys, monkeypatch):
        monkeypatch.delenv('DUNGEN_LLM_BACKEND', raising=False)
        assert main(['--seed', 'abc', '--steps', '5', '--dump', '--metrics']) == 0

        out = capsys.readouterr().out
        assert out.startswith("Using seed: abc (run with --seed abc to reproduce)")
        dumped, metrics = _json_blocks(out)
        assert set(dumped) == {'nodes', 'edges'}
        assert 'start' in dumped['nodes'] and 'goal' in dumped['nodes']
        assert metrics['num_nodes'] == len(dumped['nodes'])
        assert metrics['critical_path_length'] is not None

    def test_random_seed_is_printed(self, capsys):
        assert main(['--steps', '0', '--llm', 'none']) == 0
        first_line = capsys.readouterr().out.splitlines()[0]
        assert first_line.startswith("Using seed: ")

    def test_dot_output(self, tmp_path, capsys):
        dot_path = tmp_path / 'dungeon.dot'
        assert main(['--seed', 'dot', '--steps', '0', '--llm', 'none', '--dot', str(dot_path)]) == 0
        text = dot_path.read_text(encoding='utf-8')
        assert text.startswith('digraph G {')
        assert '"start" -> "goal" [label="path"];' in text

    def test_render_failure_exit_code(self, monkeypatch, tmp_path, capsys):
        def failing_render(dot_text, output_path):
            raise DungenError("Graphviz rendering failed: dot not found")

        monkeypatch.setattr(generate, 'render_dot', failing_render)
        code = main(['--seed', 'r', '--steps', '1', '--llm', 'none', '--render', str(tmp_path / 'x.pdf')])
        assert code == 1
