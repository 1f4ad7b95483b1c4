"""
Shared fixtures: small USX bundles on disk and in memory, a loaded cache and
a Flask test client. Nothing here touches the network.
"""
import io
import struct
import sys
import zipfile
from pathlib import Path

import pytest
import requests

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import Verse, Chapter, Book, Translation


METADATA_XML = """<?xml version="1.0" encoding="utf-8"?>
<DBLMetadata type="text" typeVersion="2.0">
  <identification>
    <name>King James Atualizada</name>
    <abbreviation>KJA</abbreviation>
  </identification>
  <names>
    <name id="book-gen"><abbr>Gn</abbr><short>Gênesis</short><long>Livro de Gênesis</long></name>
    <name id="book-jhn"><abbr>Jo</abbr><short>João</short><long>Evangelho de João</long></name>
  </names>
  <publications>
    <publication default="true">
      <structure>
        <content name="book-gen" role="GEN" src="release/USX_1/GEN.usx"/>
        <content name="book-jhn" role="JHN" src="release/USX_1/JHN.usx"/>
      </structure>
    </publication>
  </publications>
</DBLMetadata>
"""

GEN_USX = """<?xml version="1.0" encoding="utf-8"?>
<usx version="3.0">
  <book code="GEN" style="id">Gênesis</book>
  <para style="h">Gênesis</para>
  <para style="mt1">Gênesis</para>
  <chapter number="1" style="c" sid="GEN 1"/>
  <para style="s1">A criação</para>
  <para style="p"><verse number="1" style="v" sid="GEN 1:1"/>No princípio criou Deus os céus e a terra.<verse eid="GEN 1:1"/>
  <verse number="2" style="v" sid="GEN 1:2"/>A terra era sem forma e vazia.<note caller="+" style="f"><char style="ft">Ou: deserta</char></note> E o Espírito de Deus pairava sobre as águas.<verse eid="GEN 1:2"/></para>
  <chapter eid="GEN 1"/>
  <chapter number="2" style="c" sid="GEN 2"/>
  <para style="p"><verse number="1" style="v" sid="GEN 2:1"/>Assim foram concluídos os céus e a terra.<verse eid="GEN 2:1"/></para>
  <chapter eid="GEN 2"/>
</usx>
"""

JHN_USX = """<?xml version="1.0" encoding="utf-8"?>
<usx version="2.0">
  <book code="JHN" style="id">João</book>
  <para style="h">João</para>
  <chapter number="3" style="c"/>
  <para style="p"><verse number="15" style="v"/>para que todo o que nele crê tenha a vida eterna.</para>
  <para style="s1">O amor de Deus</para>
  <para style="p"><verse number="16" style="v"/>Porque Deus mostrou seu amor ao mundo e deu o seu Filho Unigênito.
  <verse number="17" style="v"/>Pois Deus enviou o seu Filho ao mundo, não para condenar o mundo. Amor é vida.</para>
</usx>
"""

DEFAULT_BOOKS = {'GEN.usx': GEN_USX, 'JHN.usx': JHN_USX}


def write_bundle(root, identifier, subdir='bible', books=None, metadata=METADATA_XML):
    """Write <root>/<identifier>/<subdir>/metadata.xml plus USX files; return the bundle dir."""
    bundle_dir = Path(root) / identifier / subdir
    usx_dir = bundle_dir / 'release' / 'USX_1'
    usx_dir.mkdir(parents=True, exist_ok=True)
    (bundle_dir / 'metadata.xml').write_text(metadata, encoding='utf-8')
    for name, content in (DEFAULT_BOOKS if books is None else books).items():
        (usx_dir / name).write_text(content, encoding='utf-8')
    return bundle_dir


def make_archive(wrapper='KJA-main', books=None, metadata=METADATA_XML, compression=zipfile.ZIP_STORED):
    """Zip a bundle in memory, wrapped in one extra folder like a repository download."""
    buffer = io.BytesIO()
    prefix = f"{wrapper}/" if wrapper else ''
    with zipfile.ZipFile(buffer, 'w', compression=compression) as archive:
        archive.writestr(f"{prefix}README.md", "not part of the bundle")
        archive.writestr(f"{prefix}metadata.xml", metadata)
        for name, content in (DEFAULT_BOOKS if books is None else books).items():
            archive.writestr(f"{prefix}release/USX_1/{name}", content)
    return buffer.getvalue()


def corrupt_archive(data, suffix='.usx'):
    """Overwrite the compressed bytes of the first member ending in ``suffix``.

    The zip directory stays intact, so the archive opens but reading that
    member fails (0xff starts a deflate block of the reserved type).
    """
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        info = next(i for i in archive.infolist() if i.filename.endswith(suffix))

    raw = bytearray(data)
    name_length, extra_length = struct.unpack('<HH', raw[info.header_offset + 26:info.header_offset + 30])
    start = info.header_offset + 30 + name_length + extra_length
    raw[start:start + info.compress_size] = b'\xff' * info.compress_size
    return bytes(raw)


class FakeResponse:
    def __init__(self, status_code=200, content=b''):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; maps URL to a response or an exception."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        outcome = self.responses.get(url, FakeResponse(404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def assets_dir(tmp_path):
    root = tmp_path / 'assets'
    write_bundle(root, 'KJA')
    return root


@pytest.fixture
def sample_translation():
    return Translation(
        identifier='KJA',
        name='King James Atualizada',
        abbreviation='KJA',
        books=[
            Book(id='GEN', name='Gênesis', chapters=[
                Chapter(number=1, verses=[
                    Verse(number=1, text='No princípio criou Deus os céus e a terra.'),
                    Verse(number=2, text='A terra era sem forma e vazia.'),
                ]),
                Chapter(number=2, verses=[
                    Verse(number=1, text='Assim foram concluídos os céus e a terra.'),
                ]),
            ]),
            Book(id='JHN', name='João', chapters=[
                Chapter(number=3, verses=[
                    Verse(number=16, text='Porque Deus mostrou seu amor ao mundo.'),
                    Verse(number=17, text='Amor é vida.'),
                ]),
            ]),
        ]
    )


@pytest.fixture
def cache(sample_translation):
    from utils.cache import TranslationCache
    return TranslationCache({'KJA': sample_translation})


@pytest.fixture
def app(cache):
    from app import create_app
    flask_app = create_app(cache)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
