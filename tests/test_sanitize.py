from app.utils.sanitize import (
    escape_sql_like,
    sanitize_email,
    sanitize_phone,
    sanitize_search_query,
    sanitize_text,
    sanitize_url,
)


def test_sanitize_text_strips_tags_and_spaces():
    assert sanitize_text("  <b>Campo 1</b> ") == "Campo 1"
    assert sanitize_text("<script>alert(1)</script>ok") == "alert(1)ok"
    assert sanitize_text(None) is None


def test_escape_sql_like():
    assert escape_sql_like("100%_a\\b") == "100\\%\\_a\\\\b"


def test_sanitize_search_query_collapses_spaces_and_escapes():
    assert sanitize_search_query("  mario   <i>rossi</i> ") == "mario rossi"
    assert sanitize_search_query("50%") == "50\\%"


def test_sanitize_email_and_phone():
    assert sanitize_email("  Mario.Rossi@Example.COM ") == "mario.rossi@example.com"
    assert sanitize_phone("+39 333-123 4567") == "+393331234567"


def test_sanitize_url_only_http():
    assert sanitize_url("https://gst-tennis.it/video") == "https://gst-tennis.it/video"
    assert sanitize_url("javascript:alert(1)") is None
    assert sanitize_url("ftp://example.com/file") is None
    assert sanitize_url("") is None
