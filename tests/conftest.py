"""
Pytest configuration for jieba-native tests.

Provides a stand-in for the native binding (plain Python classes with the
binding's method names) and a factory for gzip-compressed tarballs.
"""

import io
import tarfile
from types import ModuleType

import pytest

from jieba_native import loader


class FakeJieba:
    """Splits on whitespace; enough to observe forwarding."""

    def __init__(self, dict_data=None):
        self.dict_data = dict_data
        self.loaded = []

    @classmethod
    def with_dict(cls, data):
        return cls(data)

    def load_dict(self, data):
        self.loaded.append(data)

    def cut(self, text, hmm=None):
        return text.split()

    def cut_all(self, text):
        return [c for c in text if not c.isspace()]

    def cut_for_search(self, text, hmm=None):
        return text.split()

    def tag(self, text, hmm=None):
        return [{"word": w, "tag": "n"} for w in text.split()]


class FakeTfIdf:
    """Weights each word by its length, in input order (unsorted, untruncated)."""

    def __init__(self, idf_data=None):
        self.idf_data = idf_data
        self.loaded = []

    @classmethod
    def with_dict(cls, data):
        return cls(data)

    def load_dict(self, data):
        self.loaded.append(data)

    def extract_keywords(self, jieba, text, top_k, allowed_pos):
        return [{"keyword": w, "weight": float(len(w))} for w in jieba.cut(text)]


@pytest.fixture
def fake_native_module() -> ModuleType:
    module = ModuleType("jieba_native._binding")
    module.Jieba = FakeJieba
    module.TfIdf = FakeTfIdf
    return module


@pytest.fixture
def make_tarball():
    """Build gzip-compressed tar bytes from a {member name: content} mapping."""

    def _make(files: dict[str, bytes]) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tar:
            for name, data in files.items():
                info = tarfile.TarInfo(name)
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        return buf.getvalue()

    return _make


@pytest.fixture(autouse=True)
def _reset_binding_cache():
    loader.clear_cache()
    yield
    loader.clear_cache()
