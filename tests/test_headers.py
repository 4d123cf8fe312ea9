from proxy.headers import HeaderMultiMap, build_outbound_headers


def test_multimap_is_case_insensitive_and_ordered():
    headers = HeaderMultiMap([("Set-Cookie", "a=1"), ("X-Other", "v"), ("set-cookie", "b=2")])
    assert headers.getlist("SET-COOKIE") == ["a=1", "b=2"]
    assert headers.get("x-other") == "v"
    assert "Set-Cookie" in headers
    assert "Location" not in headers
    assert headers.get("Location") is None
    assert len(headers) == 3
    assert list(headers.items()) == [("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("X-Other", "v")]


def test_outbound_headers_allow_list():
    upstream = HeaderMultiMap([
        ("Server", "nginx/1.25"),
        ("Content-Type", "text/html; charset=utf-8"),
        ("Cache-Control", "max-age=3600"),
        ("Content-Language", "en"),
        ("X-Powered-By", "PHP/8"),
        ("Set-Cookie", "a=1; Path=/"),
        ("Set-Cookie", "b=2; HttpOnly"),
        ("Set-Cookie", "c=3"),
    ])
    assert build_outbound_headers(upstream) == [
        ("Content-Type", "text/html; charset=utf-8"),
        ("Cache-Control", "no-store"),
        ("Content-Language", "en"),
        ("Set-Cookie", "a=1; Path=/"),
        ("Set-Cookie", "b=2; HttpOnly"),
        ("Set-Cookie", "c=3"),
    ]


def test_cache_control_added_even_without_upstream_headers():
    assert build_outbound_headers(HeaderMultiMap()) == [("Cache-Control", "no-store")]
