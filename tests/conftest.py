import panflute as pf
import pypandoc
import pytest


@pytest.fixture
def requires_pandoc():
    """Skip the test when the pandoc executable cannot be found."""
    try:
        return pypandoc.get_pandoc_version()
    except OSError:
        pytest.skip("pandoc executable not available")


@pytest.fixture
def hello_doc():
    """Document with one level-1 heading "Hello" and one image "img/a.png"."""
    return pf.Doc(
        pf.Header(pf.Str("Hello"), level=1, identifier="hello"),
        pf.Para(pf.Str("Some"), pf.Space(), pf.Str("text.")),
        pf.Para(pf.Image(pf.Str("A"), url="img/a.png")),
    )
