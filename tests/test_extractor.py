"""Tests for voice id extraction from article HTML."""

from core.extractor import extract_voice_ids

ARTICLE = """
<html><body>
<mpvoice voice_encode_fileid="AA" name="first"></mpvoice>
<p>text</p>
<mpvoice class="x" voice_encode_fileid="BB"></mpvoice>
</body></html>
"""


def test_extracts_in_order():
    assert extract_voice_ids(ARTICLE) == ["AA", "BB"]


def test_no_matches_is_empty():
    assert extract_voice_ids("<html><body>nothing here</body></html>") == []


def test_empty_input():
    assert extract_voice_ids("") == []


def test_duplicates_are_kept():
    text = 'voice_encode_fileid="AA" voice_encode_fileid="BB" voice_encode_fileid="AA"'
    assert extract_voice_ids(text) == ["AA", "BB", "AA"]


def test_accepts_bytes():
    assert extract_voice_ids(ARTICLE.encode("utf-8")) == ["AA", "BB"]


def test_values_stop_at_first_quote():
    assert extract_voice_ids('voice_encode_fileid="MzA5_x==" data="y"') == ["MzA5_x=="]


def test_idempotent():
    assert extract_voice_ids(ARTICLE) == extract_voice_ids(ARTICLE)
