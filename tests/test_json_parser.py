"""Tests for JSON helper utilities."""

from jd_tailor.utils.json_parser import (
    find_fenced_blocks,
    looks_like_json,
    parse_json,
    parse_json_lenient,
    repair_json,
    strip_code_fences,
)


class TestFindFencedBlocks:
    def test_json_tagged_block(self):
        text = 'Here is the result:\n```json\n{"name": "test"}\n```\nDone.'
        assert find_fenced_blocks(text) == ['{"name": "test"}']

    def test_untagged_block(self):
        assert find_fenced_blocks('```\n{"key": "value"}\n```') == ['{"key": "value"}']

    def test_no_block(self):
        assert find_fenced_blocks('{"key": "value"}') == []

    def test_all_blocks_in_order(self):
        text = '```json\n{"a": 1}\n```\nand\n```json\n{"b": 2}\n```'
        assert find_fenced_blocks(text) == ['{"a": 1}', '{"b": 2}']

class TestParseJson:
    def test_direct_json(self):
        assert parse_json('{"name": "test"}') == {"name": "test"}

    def test_embedded_json(self):
        text = 'The analysis is: {"score": 90, "pass": true} as shown above.'
        assert parse_json(text) == {"score": 90, "pass": True}

    def test_embedded_array(self):
        assert parse_json('Skills: ["Python", "SQL"] - done') == ["Python", "SQL"]

    def test_invalid_returns_none(self):
        assert parse_json("no json here at all") is None

    def test_empty_returns_none(self):
        assert parse_json("") is None


class TestRepairJson:
    def test_single_quotes(self):
        assert repair_json("{'summary': 'Led teams'}") == '{"summary": "Led teams"}'

    def test_trailing_commas(self):
        assert repair_json('{"a": [1, 2,], }') == '{"a": [1, 2]}'

    def test_apostrophe_inside_double_quotes_untouched(self):
        text = '{"summary": "I\'m a builder"}'
        assert repair_json(text) == text

    def test_lenient_parse_uses_repair(self):
        assert parse_json_lenient("{'skills': ['Python', 'Go',],}") == {"skills": ["Python", "Go"]}


class TestLooksLikeJson:
    def test_object(self):
        assert looks_like_json('{"a":1}')

    def test_array(self):
        assert looks_like_json('["a", "b"]')

    def test_prose(self):
        assert not looks_like_json("Led a team of five engineers")

    def test_braced_prose(self):
        assert not looks_like_json("{not json}")


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
