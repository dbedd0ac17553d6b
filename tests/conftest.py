from pathlib import Path

import pytest

# keep this before imports from xlex!
from tests import plugins

from xlex import BlockingLexer, ParserOptions


CONTRIBUTED_PARSERS = ("lxml", "expat")
FILES_PATH = Path(__file__).parent / "files"
LINKS_FILE = FILES_PATH / "links.xml"


@pytest.fixture(autouse=True)
def _close_gate():
    plugins.GATE.clear()
    yield
    # let a parser that is still waiting finish
    plugins.GATE.set()


@pytest.fixture
def files_path():
    return FILES_PATH


@pytest.fixture
def lex():
    def digest(source, parser: str = "lxml") -> BlockingLexer:
        lexer = BlockingLexer()
        lexer.run_synchronous(
            source, parser_options=ParserOptions(preferred_parsers=parser)
        )
        return lexer

    return digest


@pytest.fixture
def links_file():
    return LINKS_FILE
