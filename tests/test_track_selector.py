from pipeline.models import AudioTrackCandidate
from pipeline.track_selector import select_track


def track(fid, **kwargs):
    kwargs.setdefault("has_audio_only", True)
    return AudioTrackCandidate(format_id=fid, **kwargs)


def test_empty_list_returns_none():
    assert select_track([]) is None


def test_non_audio_only_candidates_are_ignored():
    assert select_track([track("v", has_audio_only=False, is_default_track=True)]) is None


def test_original_english_default_wins_over_plain_default():
    tracks = [
        track("dub", language="de", is_default_track=True, display_name="German (default)"),
        track("orig", language="en", is_default_track=True, display_name="English original (default)"),
    ]
    assert select_track(tracks).format_id == "orig"


def test_original_english_needs_default_flag():
    tracks = [
        track("orig", language="en", display_name="English original"),
        track("dub", language="fr", is_default_track=True, display_name="French"),
    ]
    assert select_track(tracks).format_id == "dub"


def test_english_by_language_code():
    tracks = [
        track("es", language="es", bitrate=160),
        track("en", language="eng", bitrate=48),
    ]
    assert select_track(tracks).format_id == "en"


def test_english_by_display_name():
    tracks = [
        track("es", language="es"),
        track("en", language="xx", display_name="English (United States)"),
    ]
    assert select_track(tracks).format_id == "en"


def test_track_without_language_before_bitrate():
    tracks = [
        track("es", language="es", bitrate=256),
        track("plain", bitrate=64),
    ]
    assert select_track(tracks).format_id == "plain"


def test_highest_bitrate_fallback_treats_missing_as_zero():
    tracks = [
        track("a", language="es"),
        track("b", language="fr", bitrate=129.5),
        track("c", language="de", bitrate=70),
    ]
    assert select_track(tracks).format_id == "b"


def test_first_match_within_a_rule_keeps_input_order():
    tracks = [
        track("first", language="es", is_default_track=True),
        track("second", language="en", is_default_track=True),
    ]
    assert select_track(tracks).format_id == "first"


def test_never_skips_to_a_later_rule():
    english = track("en", language="en", bitrate=32)
    tracks = [track("nolang", bitrate=320), english, track("hi", language="hi", bitrate=500)]
    assert select_track(tracks) is english
