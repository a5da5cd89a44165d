import panflute as pf
import pytest

from orgsite.model import Model
from orgsite.routes import (
    BlogPostRoute,
    CVRoute,
    FeedRoute,
    HtmlRoute,
    IndexRoute,
    MissingDocumentError,
    RouteDecodeError,
    RouteResolver,
    StaticPath,
    TagsRoute,
    all_routes,
    decode_route,
    encode_route,
)


def model_with(*post_ids):
    model = Model.empty()
    for post_id in post_ids:
        model = model.insert(post_id, pf.Doc(pf.Para(pf.Str(post_id))))
    return model


FIXED_ROUTES = [
    (HtmlRoute(IndexRoute()), "index.html"),
    (HtmlRoute(TagsRoute()), "tags.html"),
    (HtmlRoute(CVRoute()), "cv.html"),
    (FeedRoute(), "feed.xml"),
]


@pytest.mark.parametrize("route,path", FIXED_ROUTES)
def test_fixed_routes_encode(route, path):
    assert encode_route(route, Model.empty()) == path


@pytest.mark.parametrize("route,path", FIXED_ROUTES)
def test_fixed_routes_round_trip_for_any_model(route, path):
    for model in (Model.empty(), model_with("posts/a.org")):
        assert decode_route(encode_route(route, model), model) == route


def test_static_path_encodes_unchanged():
    assert encode_route(StaticPath("content/images/a.png"), Model.empty()) == "content/images/a.png"


def test_blog_post_encodes_with_html_extension():
    model = model_with("posts/hello.org")
    route = HtmlRoute(BlogPostRoute("posts/hello.org"))
    assert encode_route(route, model) == "posts/hello.html"


def test_blog_post_round_trip():
    model = model_with("posts/hello.org", "about.org")
    for post_id in model.keys():
        route = HtmlRoute(BlogPostRoute(post_id))
        assert decode_route(encode_route(route, model), model) == route


def test_blog_post_without_document_fails_to_encode():
    route = HtmlRoute(BlogPostRoute("posts/missing.org"))
    with pytest.raises(MissingDocumentError) as excinfo:
        encode_route(route, model_with("posts/other.org"))
    assert excinfo.value.post_id == "posts/missing.org"


def test_encode_rejects_non_routes():
    with pytest.raises(TypeError):
        encode_route("index.html", Model.empty())


def test_decode_static_prefixes():
    model = model_with("posts/a.org")
    assets = decode_route("assets/logo.png", model)
    images = decode_route("images/logo.png", Model.empty())
    assert assets == StaticPath("content/assets/logo.png")
    assert images == StaticPath("content/images/logo.png")
    assert decode_route("assets/logo.png", Model.empty()) == assets
    assert decode_route("images/logo.png", model) == images


def test_decode_does_not_consult_model():
    assert decode_route("posts/new.html", Model.empty()) == HtmlRoute(
        BlogPostRoute("posts/new.org")
    )


def test_decode_requires_html_suffix():
    with pytest.raises(RouteDecodeError) as excinfo:
        decode_route("posts/hello.txt", Model.empty())
    assert excinfo.value.path == "posts/hello.txt"
    with pytest.raises(ValueError):
        decode_route("style.css", Model.empty())


def test_decode_empty_path_is_index():
    route = decode_route("", Model.empty())
    assert route == HtmlRoute(IndexRoute())
    assert encode_route(route, Model.empty()) == "index.html"


def test_index_path_is_not_a_post():
    assert decode_route("index.html", model_with("index.org")) == HtmlRoute(IndexRoute())


def test_all_routes_order():
    model = model_with("posts/b.org", "posts/a.org")
    assert all_routes(model) == [
        StaticPath("content/assets"),
        StaticPath("content/images"),
        HtmlRoute(IndexRoute()),
        HtmlRoute(CVRoute()),
        HtmlRoute(TagsRoute()),
        HtmlRoute(BlogPostRoute("posts/a.org")),
        HtmlRoute(BlogPostRoute("posts/b.org")),
    ]


def test_all_routes_lists_each_post_once():
    ids = ["a.org", "posts/b.org", "posts/2020/c.org"]
    routes = all_routes(model_with(*ids))
    for post_id in ids:
        assert routes.count(HtmlRoute(BlogPostRoute(post_id))) == 1


def test_every_enumerated_route_encodes():
    model = model_with("posts/a.org", "b.org")
    paths = [encode_route(route, model) for route in all_routes(model)]
    assert "posts/a.html" in paths
    assert "b.html" in paths
    assert len(paths) == len(set(paths))


def test_custom_resolver_layout():
    resolver = RouteResolver(content_root="site", source_ext=".md", static_dirs=["static"])
    model = Model.empty().insert("notes/x.md", pf.Doc())
    assert resolver.decode("static/app.js", model) == StaticPath("site/static/app.js")
    assert resolver.decode("notes/x.html", model) == HtmlRoute(BlogPostRoute("notes/x.md"))
    assert resolver.encode(HtmlRoute(BlogPostRoute("notes/x.md")), model) == "notes/x.html"
    assert resolver.all_routes(model)[0] == StaticPath("site/static")
    # "assets/" is not a static directory for this layout
    with pytest.raises(RouteDecodeError):
        resolver.decode("assets/a.png", model)
