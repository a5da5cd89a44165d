from orgsite.html_utils import escape_html, join_root_url


def test_escape_html():
    assert escape_html('<a href="x">Tom & Jerry</a>') == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;"
    )


def test_join_root_url():
    assert join_root_url("https://example.com/", "/posts/a.html") == "https://example.com/posts/a.html"
    assert join_root_url("https://example.com", "feed.xml") == "https://example.com/feed.xml"
    assert join_root_url("", "feed.xml") == "feed.xml"
