import json

from app.utils.content_stats import calculate_stats, extract_text, parse_document
from conftest import doc


class TestExtractText:

    def test_each_text_node_followed_by_space(self):
        assert extract_text(doc('Hello', 'World')) == 'Hello World '

    def test_nested_marks_and_non_text_nodes(self):
        document = {
            'type': 'doc',
            'content': [
                {'type': 'heading', 'attrs': {'level': 2}, 'content': [{'type': 'text', 'text': 'Title'}]},
                {'type': 'image', 'attrs': {'src': 'x.png'}},
                {'type': 'bulletList', 'content': [
                    {'type': 'listItem', 'content': [
                        {'type': 'paragraph', 'content': [
                            {'type': 'text', 'text': 'bold', 'marks': [{'type': 'bold'}]},
                        ]},
                    ]},
                ]},
            ],
        }
        assert extract_text(document) == 'Title bold '


class TestParseDocument:

    def test_accepts_string_and_dict(self):
        assert parse_document('{"type": "doc"}') == {'type': 'doc'}
        assert parse_document({'type': 'doc'}) == {'type': 'doc'}

    def test_invalid_json_returns_none(self):
        assert parse_document('{not json') is None
        assert parse_document('') is None


class TestCalculateStats:

    def test_counts_words_and_characters(self):
        stats = calculate_stats(json.dumps(doc('Hello', 'World')))
        assert stats.word_count == 2
        assert stats.character_count == len('Hello World ')
        assert stats.reading_time == 1

    def test_empty_document_reads_in_one_minute(self):
        stats = calculate_stats('{"type":"doc","content":[]}')
        assert stats == (0, 0, 1)

    def test_reading_time_rounds_up(self):
        stats = calculate_stats(doc(' '.join(['word'] * 201)))
        assert stats.word_count == 201
        assert stats.reading_time == 2

    def test_custom_reading_speed(self):
        stats = calculate_stats(doc(' '.join(['word'] * 100)), words_per_minute=50)
        assert stats.reading_time == 2

    def test_unparseable_content_counts_as_empty(self):
        assert calculate_stats('garbage') == (0, 0, 1)
