from io import BytesIO, StringIO

import httpx
import pytest
from pytest_httpx import IteratorStream

from _xlex.plugins import plugin_manager
from _xlex.plugins.core_loaders import buffer_loader, path_loader, text_loader
from _xlex.plugins.web_loader import web_loader
from xlex import BlockingLexer, ElementEnd, ElementStart, Text
from xlex.exceptions import FailedSourceLoading

from tests.conftest import LINKS_FILE
from tests.utils import chdir


LINKS_CONTENTS = LINKS_FILE.read_bytes()


def test_buffer_loader():
    lexer = BlockingLexer()
    with LINKS_FILE.open("rb") as f:
        lexer.run_synchronous(f)
    assert lexer.text("Reading list") is not None

    lexer = BlockingLexer()
    lexer.run_synchronous(BytesIO(b"<root>bytes</root>"))
    assert list(lexer) == [ElementStart("root"), Text("bytes"), ElementEnd("root")]


def test_failed_loading():
    lexer = BlockingLexer()
    with pytest.raises(FailedSourceLoading) as exc_info:
        lexer.run_synchronous(StringIO("<root/>"))
    assert exc_info.value.excuses[buffer_loader] == (
        "The input value is no binary buffer object."
    )
    assert text_loader in exc_info.value.excuses

    with pytest.raises(FailedSourceLoading):
        lexer.next()


def test_loader_order():
    loaders = plugin_manager.loaders
    assert loaders.index(path_loader) < loaders.index(buffer_loader)
    assert loaders.index(web_loader) < loaders.index(text_loader)


def test_path_loader():
    lexer = BlockingLexer()
    lexer.run_synchronous(LINKS_FILE)
    assert lexer.start("title") is not None

    with chdir(LINKS_FILE.parent):
        lexer = BlockingLexer()
        lexer.run_synchronous(LINKS_FILE.relative_to(LINKS_FILE.parent))
    assert lexer.start("title") is not None


def test_register_loader():
    calls = []

    @plugin_manager.register_loader(before=text_loader)
    def upper_loader(data, config):
        calls.append(data)
        if isinstance(data, str) and data.startswith("upper:"):
            return text_loader(data[6:].upper(), config)
        return "The input value is not prefixed with 'upper:'."

    try:
        lexer = BlockingLexer()
        lexer.run_synchronous("upper:<root>shout</root>")
        assert list(lexer) == [
            ElementStart("ROOT"),
            Text("SHOUT"),
            ElementEnd("ROOT"),
        ]
        assert calls == ["upper:<root>shout</root>"]
    finally:
        plugin_manager.loaders.remove(upper_loader)


def test_text_loader():
    lexer = BlockingLexer()
    lexer.run_synchronous(b"<?xml version='1.0' encoding='utf-8'?><root>b</root>")
    assert lexer.text("b") is not None


def test_web_loader(httpx_mock):
    httpx_mock.add_response(
        stream=IteratorStream(
            LINKS_CONTENTS[i : i + 64] for i in range(0, len(LINKS_CONTENTS), 64)
        )
    )
    lexer = BlockingLexer()
    lexer.run_synchronous("https://xlex.example/links.xml")
    assert lexer.start("a", "rel", "next") is not None
    assert lexer.current_attribute("xl:href") == "https://xlex.example/more"


def test_web_loader_error_status(httpx_mock):
    httpx_mock.add_response(status_code=404)
    lexer = BlockingLexer()
    lexer.run_asynchronous("http://xlex.example/missing.xml")
    with pytest.raises(httpx.HTTPStatusError, match="404"):
        lexer.next()
