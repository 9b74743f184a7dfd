from podcontext.models.transcript import Segment, SpeakerBlock
from podcontext.parsers.speakers import group_sections, is_speaker_title
from podcontext.services.render import (
    format_timestamp, list_speakers, render_segments, render_speaker_blocks,
)


def title(text):
    return {"title": {"title": text}}


def sentence(text):
    return {"text": {"sentence": {"text": text}}}


def as_pairs(blocks):
    return [(b.speaker_label, b.sentences) for b in blocks]


def test_groups_and_flushes_trailing_block():
    sections = [title("Speaker 1"), sentence("Hi"), title("Speaker 2"), sentence("Hey"), sentence("there")]
    assert as_pairs(group_sections(sections)) == [("Speaker 1", ["Hi"]), ("Speaker 2", ["Hey", "there"])]


def test_proper_name_titles_start_blocks():
    sections = [title("John Smith"), sentence(" Hello. "), title("Chapter one"), sentence("Still John.")]
    assert as_pairs(group_sections(sections)) == [("John Smith", ["Hello.", "Still John."])]


def test_is_speaker_title():
    assert is_speaker_title("Speaker 3")
    assert is_speaker_title("Jane Doe")
    assert not is_speaker_title("Introduction")
    assert not is_speaker_title("jane doe")
    assert not is_speaker_title("")


def test_ignores_sections_without_title_or_sentence():
    sections = [{}, {"text": {}}, title("Speaker 1"), {"text": {"sentence": {"text": "   "}}}, sentence("ok"), "junk"]
    assert as_pairs(group_sections(sections)) == [("Speaker 1", ["ok"])]


def test_title_and_sentence_in_one_section():
    sections = [{"title": {"title": "Speaker 1"}, "text": {"sentence": {"text": "Both"}}}]
    assert as_pairs(group_sections(sections)) == [("Speaker 1", ["Both"])]


def test_speaker_without_sentences_is_dropped():
    sections = [title("Speaker 1"), title("Speaker 2"), sentence("only two")]
    assert as_pairs(group_sections(sections)) == [("Speaker 2", ["only two"])]


def test_sentences_before_first_speaker_are_dropped():
    sections = [sentence("Cold open"), title("Speaker 1"), sentence("Welcome")]
    assert as_pairs(group_sections(sections)) == [("Speaker 1", ["Welcome"])]


def test_non_string_title_does_not_qualify():
    sections = [title("Speaker 1"), sentence("Hi"), title(5), sentence("still one"), {"title": {"title": None}}]
    assert as_pairs(group_sections(sections)) == [("Speaker 1", ["Hi", "still one"])]


def test_empty_input():
    assert group_sections([]) == []


def test_render_applies_speaker_map_only_at_render_time():
    blocks = [
        SpeakerBlock(speaker_label="Speaker 1", sentences=["Hi", "all"]),
        SpeakerBlock(speaker_label="Speaker 2", sentences=["Hey"]),
    ]
    text = render_speaker_blocks(blocks, {"Speaker 1": "Alice", "Speaker 3": "Nobody"})
    assert text == "Alice: Hi all\n\nSpeaker 2: Hey"
    assert blocks[0].speaker_label == "Speaker 1"


def test_list_speakers_sorted_unique():
    blocks = [
        SpeakerBlock(speaker_label="Speaker 2", sentences=["a"]),
        SpeakerBlock(speaker_label="Speaker 1", sentences=["b"]),
        SpeakerBlock(speaker_label="Speaker 2", sentences=["c"]),
        SpeakerBlock(speaker_label="", sentences=["d"]),
    ]
    assert list_speakers(blocks) == ["Speaker 1", "Speaker 2"]


def test_render_segments():
    segments = [Segment(start_ms=0, end_ms=900, text="start"), Segment(start_ms=65_400, end_ms=66_000, text="later")]
    assert render_segments(segments) == "[0:00] start\n[1:05] later"
    assert render_segments(segments, timestamps=False) == "start\nlater"
    assert format_timestamp(3_725_000) == "1:02:05"
