"""Tests for hls_relay.rewriter — playlist URI rewriting."""

from urllib.parse import quote

import pytest

from hls_relay.rewriter import (
    PROXY_PATH,
    is_proxied,
    proxy_uri,
    resolve_uri,
    rewrite_line,
    rewrite_playlist,
)

BASE = "https://cdn.example/path/index.m3u8"


def proxied(absolute: str) -> str:
    return f"{PROXY_PATH}?url={quote(absolute, safe='')}"


MASTER_PLAYLIST = (
    "#EXTM3U\n"
    '#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="aud",NAME="en",URI="audio/en.m3u8"\n'
    '#EXT-X-STREAM-INF:BANDWIDTH=1280000,AUDIO="aud"\n'
    "low/index.m3u8\n"
    "#EXT-X-STREAM-INF:BANDWIDTH=2560000\n"
    "https://other.example/hi/index.m3u8\n"
    '#EXT-X-I-FRAME-STREAM-INF:BANDWIDTH=86000,URI="iframes.m3u8"\n'
)

MEDIA_PLAYLIST = (
    "#EXTM3U\n"
    "#EXT-X-VERSION:7\n"
    "#EXT-X-TARGETDURATION:4\n"
    '#EXT-X-MAP:URI="init.mp4"\n'
    '#EXT-X-KEY:METHOD=AES-128,URI="/keys/k1.bin",IV=0x1\n'
    "#EXTINF:4.0,\n"
    "seg0.ts\n"
    "\n"
    "#EXTINF:4.0,\n"
    "../shared/seg1.ts?token=a&b=c\n"
    "#EXT-X-ENDLIST\n"
)


class TestRewriteCorrectness:
    """Each kind of reference resolves to the right absolute URL."""

    def test_bare_segment_line(self):
        out = rewrite_playlist("#EXTM3U\n#EXT-X-VERSION:3\nseg0.ts\n", BASE)
        lines = out.split("\n")
        assert lines[0] == "#EXTM3U"
        assert lines[1] == "#EXT-X-VERSION:3"
        assert lines[2] == proxied("https://cdn.example/path/seg0.ts")
        assert lines[3] == ""

    def test_absolute_reference_kept_as_is(self):
        out = rewrite_line("https://other.example/a/b.ts", BASE)
        assert out == proxied("https://other.example/a/b.ts")

    def test_root_relative_reference(self):
        assert rewrite_line("/abs/seg.ts", BASE) == proxied("https://cdn.example/abs/seg.ts")

    def test_parent_relative_reference(self):
        assert rewrite_line("../up.ts", BASE) == proxied("https://cdn.example/up.ts")

    def test_query_string_is_encoded(self):
        out = rewrite_line("seg.ts?token=a&b=c", BASE)
        assert out == proxied("https://cdn.example/path/seg.ts?token=a&b=c")
        assert "&" not in out

    def test_protocol_relative_reference(self):
        assert rewrite_line("//edge.example/s.ts", BASE) == proxied("https://edge.example/s.ts")

    def test_surrounding_whitespace_is_ignored(self):
        assert rewrite_line("  seg0.ts  ", BASE) == proxied("https://cdn.example/path/seg0.ts")

    def test_custom_proxy_path(self):
        out = rewrite_line("seg0.ts", BASE, proxy_path="/p")
        assert out == "/p?url=" + quote("https://cdn.example/path/seg0.ts", safe="")


class TestDirectives:
    """Directive lines keep their text except for URI attributes."""

    def test_plain_directive_unchanged(self):
        assert rewrite_line("#EXTINF:4.0,title", BASE) == "#EXTINF:4.0,title"

    def test_key_uri_attribute_rewritten(self):
        line = '#EXT-X-KEY:METHOD=AES-128,URI="key.bin",IV=0x1'
        expected = f'#EXT-X-KEY:METHOD=AES-128,URI="{proxied("https://cdn.example/path/key.bin")}",IV=0x1'
        assert rewrite_line(line, BASE) == expected

    def test_map_uri_attribute_rewritten(self):
        out = rewrite_line('#EXT-X-MAP:URI="init.mp4",BYTERANGE="720@0"', BASE)
        assert out.startswith(f'#EXT-X-MAP:URI="{proxied("https://cdn.example/path/init.mp4")}"')
        assert out.endswith(',BYTERANGE="720@0"')

    def test_non_http_key_uri_left_alone(self):
        line = '#EXT-X-KEY:METHOD=SAMPLE-AES,URI="skd://key-id",KEYFORMAT="com.apple.streamingkeydelivery"'
        assert rewrite_line(line, BASE) == line

    def test_data_uri_left_alone(self):
        line = '#EXT-X-KEY:METHOD=AES-128,URI="data:text/plain;base64,AAAA"'
        assert rewrite_line(line, BASE) == line

    def test_empty_uri_attribute_left_alone(self):
        line = '#EXT-X-KEY:METHOD=NONE,URI=""'
        assert rewrite_line(line, BASE) == line

    def test_master_playlist(self):
        out = rewrite_playlist(MASTER_PLAYLIST, BASE).split("\n")
        assert f'URI="{proxied("https://cdn.example/path/audio/en.m3u8")}"' in out[1]
        assert out[2] == '#EXT-X-STREAM-INF:BANDWIDTH=1280000,AUDIO="aud"'
        assert out[3] == proxied("https://cdn.example/path/low/index.m3u8")
        assert out[5] == proxied("https://other.example/hi/index.m3u8")
        assert f'URI="{proxied("https://cdn.example/path/iframes.m3u8")}"' in out[6]


class TestStructurePreserved:
    """Line order, blank lines and terminators survive rewriting."""

    def test_line_count_and_order(self):
        out = rewrite_playlist(MEDIA_PLAYLIST, BASE)
        before = MEDIA_PLAYLIST.split("\n")
        after = out.split("\n")
        assert len(before) == len(after)
        for original, rewritten in zip(before, after):
            if original.startswith("#EXT-X-MAP") or original.startswith("#EXT-X-KEY"):
                continue
            if original.startswith("#") or not original:
                assert original == rewritten

    def test_crlf_terminators_preserved(self):
        text = "#EXTM3U\r\n#EXTINF:4.0,\r\nseg0.ts\r\n"
        out = rewrite_playlist(text, BASE)
        assert out == f"#EXTM3U\r\n#EXTINF:4.0,\r\n{proxied('https://cdn.example/path/seg0.ts')}\r\n"

    def test_missing_final_newline_preserved(self):
        out = rewrite_playlist("#EXTM3U\nseg0.ts", BASE)
        assert out == f"#EXTM3U\n{proxied('https://cdn.example/path/seg0.ts')}"

    def test_whitespace_only_line_preserved(self):
        out = rewrite_playlist("#EXTM3U\n   \nseg0.ts\n", BASE)
        assert out.split("\n")[1] == "   "

    def test_playlist_without_uris_is_untouched(self):
        text = "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-ENDLIST\n"
        assert rewrite_playlist(text, BASE) == text

    def test_empty_document(self):
        assert rewrite_playlist("", BASE) == ""


class TestIdempotence:
    """Rewriting a rewritten playlist changes nothing."""

    @pytest.mark.parametrize("playlist", [MASTER_PLAYLIST, MEDIA_PLAYLIST, "#EXTM3U\r\nseg.ts"])
    def test_rewrite_twice(self, playlist):
        once = rewrite_playlist(playlist, BASE)
        assert rewrite_playlist(once, BASE) == once

    def test_rewrite_with_other_base_does_not_double_wrap(self):
        once = rewrite_playlist(MEDIA_PLAYLIST, BASE)
        assert rewrite_playlist(once, "https://elsewhere.example/x/y.m3u8") == once

    def test_is_proxied(self):
        assert is_proxied(proxy_uri("https://cdn.example/a.ts"))
        assert not is_proxied("https://cdn.example/a.ts")
        assert not is_proxied(f"{PROXY_PATH}-other?url=x")


class TestHelpers:
    def test_resolve_uri(self):
        assert resolve_uri("a/b.ts", BASE) == "https://cdn.example/path/a/b.ts"
        assert resolve_uri("https://x.example/c.ts", BASE) == "https://x.example/c.ts"

    def test_proxy_uri_encodes_everything(self):
        assert proxy_uri("https://a.example/b?c=d") == (
            f"{PROXY_PATH}?url=https%3A%2F%2Fa.example%2Fb%3Fc%3Dd"
        )
