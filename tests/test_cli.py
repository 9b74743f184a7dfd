import pytest
from podcontext import cli
from podcontext.core.errors import AuthenticationFailed, NoTranscriptAvailable
from podcontext.models.content import ContentRef
from podcontext.models.credentials import SpotifyCredentials, YouTubeCredentials


def test_parse_speaker_map():
    assert cli.parse_speaker_map(["Speaker 1=Alice", "Speaker 2="]) == {"Speaker 1": "Alice", "Speaker 2": "Speaker 2"}
    assert cli.parse_speaker_map(None) == {}
    with pytest.raises(ValueError):
        cli.parse_speaker_map(["no separator"])


def test_credentials_from_settings(monkeypatch):
    monkeypatch.setattr(cli.settings, "SPOTIFY_AUTHORIZATION", "Bearer x")
    monkeypatch.setattr(cli.settings, "SPOTIFY_CLIENT_TOKEN", "ct")
    monkeypatch.setattr(cli.settings, "YOUTUBE_COOKIES", "SID=1; HSID=2")
    monkeypatch.setattr(cli.settings, "YOUTUBE_TRANSCRIPT_PARAMS", "params")

    spotify = cli.credentials_from_settings(ContentRef(platform="spotify", content_id="e"))
    assert isinstance(spotify, SpotifyCredentials) and spotify.is_complete()

    youtube = cli.credentials_from_settings(ContentRef(platform="youtube", content_id="v"))
    assert isinstance(youtube, YouTubeCredentials)
    assert youtube.cookies == {"SID": "1", "HSID": "2"}
    assert youtube.continuation_params == "params"


def test_describe_error_distinguishes_causes():
    assert "No transcript" in cli.describe_error(NoTranscriptAvailable("none"))
    assert "Not authorized" in cli.describe_error(AuthenticationFailed("denied"))
