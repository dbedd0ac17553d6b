import gc

import pytest


PARAGRAPHS = 5_000
DOCUMENT = (
    "<book>"
    + "".join(
        f'<p n="{i}">Lorem ipsum <hi rend="italic">dolor</hi> sit amet.</p>'
        for i in range(PARAGRAPHS)
    )
    + "</book>"
).encode()


@pytest.fixture(autouse=True)
def _collect_garbage():
    gc.collect()
    gc.collect()
