import pytest
from podcontext.core.errors import MalformedResponse
from podcontext.parsers.captions import (
    events_to_segments, parse_json3, parse_transcript_envelope, parse_xml_captions,
    parse_xml_p, parse_xml_text, sniff_and_parse,
)
from conftest import envelope, json3_body


def test_json3_keeps_every_event_in_order():
    body = json3_body((0, 1000, "one"), (1000, 1500, "two"), (2500, 500, "three"))
    segments = events_to_segments(parse_json3(body))
    assert [s.text for s in segments] == ["one", "two", "three"]
    assert [(s.start_ms, s.end_ms) for s in segments] == [(0, 1000), (1000, 2500), (2500, 3000)]


def test_json3_concatenates_and_trims_segments():
    body = {"events": [
        {"tStartMs": 10, "dDurationMs": 20, "segs": [{"utf8": " Hello"}, {"utf8": " world "}]},
        {"tStartMs": 30, "dDurationMs": 5, "segs": [{"utf8": "\n"}]},
        {"tStartMs": 40},
    ]}
    events = parse_json3(body)
    assert len(events) == 1
    assert events[0].text == "Hello world"


def test_json3_missing_duration_defaults_to_zero():
    events = parse_json3('{"events": [{"tStartMs": 500, "segs": [{"utf8": "x"}]}]}')
    assert events[0].duration_ms == 0
    assert events_to_segments(events)[0].end_ms == 500


def test_json3_rejects_non_json():
    with pytest.raises(ValueError):
        parse_json3("<transcript/>")


def test_xml_p_dialect():
    segments = events_to_segments(parse_xml_p('<timedtext><body><p t="1000" d="2000">Hello</p></body></timedtext>'))
    assert len(segments) == 1
    assert segments[0].model_dump() == {"start_ms": 1000, "end_ms": 3000, "text": "Hello"}


def test_xml_p_decodes_entities_and_strips_tags():
    xml = '<p t="0" d="10"><s ac="1">Tom</s> &amp; &lt;Jerry&gt; said &quot;hi&quot; &#39;there&#39;\nagain</p>'
    assert parse_xml_p(xml)[0].text == 'Tom & <Jerry> said "hi" \'there\' again'


def test_xml_p_drops_empty_bodies():
    assert parse_xml_p('<p t="0" d="10"><s></s></p><p t="5" d="1">  </p>') == []


def test_xml_text_dialect_converts_seconds():
    segments = events_to_segments(parse_xml_text('<transcript><text start="1.5" dur="2.0">Hi</text></transcript>'))
    assert segments[0].model_dump() == {"start_ms": 1500, "end_ms": 3500, "text": "Hi"}


def test_xml_text_missing_duration_defaults_to_three_seconds():
    segments = events_to_segments(parse_xml_text('<text start="1.5">Hi</text>'))
    assert segments[0].end_ms == 1500 + 3000


def test_xml_text_rounds_to_nearest_ms():
    assert parse_xml_text('<text start="2.0004" dur="0.0006">a</text>')[0].start_ms == 2000
    assert parse_xml_text('<text start="2.0006" dur="1">a</text>')[0].start_ms == 2001


def test_double_encoded_entities_decode_fully():
    assert parse_xml_p('<p t="0" d="10">it&amp;#39;s</p>')[0].text == "it's"
    assert parse_xml_captions('<text start="1" dur="1">it&amp;#39;s</text>')[0].text == "it's"
    assert parse_xml_p('<p t="0" d="10">a &amp;amp; b</p>')[0].text == "a & b"


@pytest.mark.parametrize("start", ["inf", "-1", "1e3", "nan", "1" * 400])
def test_xml_text_skips_cue_with_bad_start(start):
    xml = f'<text start="{start}">bad</text><text start="1" dur="1">ok</text>'
    assert [e.text for e in parse_xml_text(xml)] == ["ok"]


def test_json3_skips_event_with_bad_timing():
    body = {"events": [
        {"tStartMs": -5, "segs": [{"utf8": "negative"}]},
        {"tStartMs": "soon", "segs": [{"utf8": "word"}]},
        {"tStartMs": 10, "dDurationMs": 5, "segs": [{"utf8": "ok"}]},
    ]}
    assert [e.text for e in parse_json3(body)] == ["ok"]


def test_xml_falls_back_to_text_dialect_only_when_p_is_empty():
    mixed = '<p t="100" d="100">para</p><text start="9" dur="1">legacy</text>'
    assert [e.text for e in parse_xml_captions(mixed)] == ["para"]
    legacy = '<transcript><text start="9" dur="1">legacy</text></transcript>'
    assert [e.start_ms for e in parse_xml_captions(legacy)] == [9000]


def test_sniff_routes_by_first_character():
    assert sniff_and_parse("  \n" + json3_body((1, 2, "j")))[0].text == "j"
    assert sniff_and_parse('\n<p t="1" d="2">x</p>')[0].text == "x"
    assert sniff_and_parse("WEBVTT\n\n00:00.000 --> 00:01.000\nnope") == []


def test_envelope_to_segments():
    segments = parse_transcript_envelope(envelope((0, 1200, "first"), (1200, 2400, "second")))
    assert [(s.start_ms, s.end_ms, s.text) for s in segments] == [(0, 1200, "first"), (1200, 2400, "second")]


def test_envelope_skips_section_headers():
    data = envelope((0, 1000, "kept"))
    initial = data["actions"][0]["updateEngagementPanelAction"]["content"]["transcriptRenderer"]["content"][
        "transcriptSearchPanelRenderer"]["body"]["transcriptSegmentListRenderer"]["initialSegments"]
    initial.insert(0, {"transcriptSectionHeaderRenderer": {"snippet": {"simpleText": "Intro"}}})
    assert [s.text for s in parse_transcript_envelope(data)] == ["kept"]


@pytest.mark.parametrize("data", [
    {},
    {"actions": []},
    {"actions": [{"updateEngagementPanelAction": {"content": {}}}]},
    ["not", "a", "dict"],
])
def test_envelope_malformed(data):
    with pytest.raises(MalformedResponse):
        parse_transcript_envelope(data)


def test_envelope_bad_timing_is_malformed():
    data = envelope((0, 10, "x"))
    seg = data["actions"][0]["updateEngagementPanelAction"]["content"]["transcriptRenderer"]["content"][
        "transcriptSearchPanelRenderer"]["body"]["transcriptSegmentListRenderer"]["initialSegments"][0]
    seg["transcriptSegmentRenderer"]["startMs"] = "soon"
    with pytest.raises(MalformedResponse):
        parse_transcript_envelope(data)
