"""Tests for BinaryLoader, NativeBinding and Segmenter."""

import sys
from pathlib import Path
from types import ModuleType
from unittest.mock import MagicMock

import pytest

from jieba_native.exceptions import ErrorKind
from jieba_native.exceptions import LoadError
from jieba_native.loader import ALREADY_LOADED
from jieba_native.loader import BINDING_MODULE_NAME
from jieba_native.loader import BinaryLoader
from jieba_native.loader import NativeBinding
from jieba_native.loader import Segmenter
from jieba_native.models import Keyword
from jieba_native.models import TaggedWord


def _raising(message: str):
    def _import(name: str, path: Path) -> ModuleType:
        raise ImportError(message)

    return _import


class TestBinaryLoader:
    def test_loads_module(self, tmp_path: Path, fake_native_module) -> None:
        import_func = MagicMock(return_value=fake_native_module)
        path = tmp_path / "jieba.linux-x64-gnu.node"

        binding = BinaryLoader(import_func=import_func).load(path)

        assert binding.module is fake_native_module
        assert binding.path == path
        import_func.assert_called_once_with(BINDING_MODULE_NAME, path)

    def test_loads_at_most_once(self, tmp_path: Path, fake_native_module) -> None:
        import_func = MagicMock(return_value=fake_native_module)
        path = tmp_path / "jieba.linux-x64-gnu.node"

        first = BinaryLoader(import_func=import_func).load(path)
        second = BinaryLoader(import_func=import_func).load(path)

        assert first is second
        import_func.assert_called_once()

    def test_already_loaded_is_success(self, tmp_path: Path, fake_native_module, monkeypatch) -> None:
        monkeypatch.setitem(sys.modules, BINDING_MODULE_NAME, fake_native_module)

        binding = BinaryLoader(import_func=_raising(ALREADY_LOADED)).load(tmp_path / "x.node")

        assert binding.module is fake_native_module

    @pytest.mark.parametrize("message", ["Already loaded", "already loaded.", "module already loaded", " already loaded"])
    def test_near_miss_messages_fail(self, tmp_path: Path, fake_native_module, monkeypatch, message) -> None:
        """Only the exact sentinel text is tolerated."""
        monkeypatch.setitem(sys.modules, BINDING_MODULE_NAME, fake_native_module)

        with pytest.raises(LoadError) as exc_info:
            BinaryLoader(import_func=_raising(message)).load(tmp_path / "x.node")

        assert exc_info.value.kind is ErrorKind.LOAD

    def test_already_loaded_without_registered_module_fails(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delitem(sys.modules, BINDING_MODULE_NAME, raising=False)

        with pytest.raises(LoadError):
            BinaryLoader(import_func=_raising(ALREADY_LOADED)).load(tmp_path / "x.node")

    def test_other_failure_is_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError) as exc_info:
            BinaryLoader(import_func=_raising("undefined symbol: PyInit__binding")).load(tmp_path / "x.node")

        assert isinstance(exc_info.value.__cause__, ImportError)

    def test_node_addon_failure_names_the_cause(self, tmp_path: Path) -> None:
        message = "dynamic module does not define module export function (PyInit__binding)"

        with pytest.raises(LoadError, match="not a CPython extension"):
            BinaryLoader(import_func=_raising(message)).load(tmp_path / "jieba.linux-x64-gnu.node")

    def test_real_import_of_non_extension_fails(self, tmp_path: Path) -> None:
        path = tmp_path / "jieba.linux-x64-gnu.node"
        path.write_bytes(b"not a shared object")

        with pytest.raises(LoadError):
            BinaryLoader().load(path)


class TestNativeBinding:
    def test_activate_with_default_dictionaries(self, tmp_path: Path, fake_native_module) -> None:
        segmenter = NativeBinding(fake_native_module, tmp_path / "x.node").activate()

        assert segmenter.jieba.dict_data is None
        assert segmenter.tfidf.idf_data is None

    def test_activate_with_dictionaries(self, tmp_path: Path, fake_native_module) -> None:
        segmenter = NativeBinding(fake_native_module, tmp_path / "x.node").activate(b"dict", b"idf")

        assert segmenter.jieba.dict_data == b"dict"
        assert segmenter.tfidf.idf_data == b"idf"

    def test_activate_missing_classes(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="failed to activate"):
            NativeBinding(ModuleType("empty"), tmp_path / "x.node").activate()


class TestSegmenter:
    @pytest.fixture
    def segmenter(self, tmp_path: Path, fake_native_module) -> Segmenter:
        return NativeBinding(fake_native_module, tmp_path / "x.node").activate()

    def test_cut(self, segmenter: Segmenter) -> None:
        assert segmenter.cut("我 来到 北京 清华大学") == ["我", "来到", "北京", "清华大学"]
        assert segmenter.cut_for_search("清华 大学", hmm=True) == ["清华", "大学"]

    def test_cut_all(self, segmenter: Segmenter) -> None:
        assert segmenter.cut_all("北京 大学") == ["北", "京", "大", "学"]

    def test_tag(self, segmenter: Segmenter) -> None:
        assert segmenter.tag("北京 大学") == [TaggedWord("北京", "n"), TaggedWord("大学", "n")]

    def test_extract_keywords_sorted_and_bounded(self, segmenter: Segmenter) -> None:
        text = "a bbbb cc ddddd eee f"

        keywords = segmenter.extract_keywords(text, 3)

        assert keywords == [Keyword("ddddd", 5.0), Keyword("bbbb", 4.0), Keyword("eee", 3.0)]

    @pytest.mark.parametrize("top_n", [0, 1, 2, 6, 50])
    def test_extract_keywords_properties(self, segmenter: Segmenter, top_n: int) -> None:
        keywords = segmenter.extract_keywords("a bbbb cc ddddd eee f", top_n)

        assert len(keywords) <= top_n
        weights = [k.weight for k in keywords]
        assert all(a >= b for a, b in zip(weights, weights[1:]))

    def test_load_dictionaries(self, segmenter: Segmenter) -> None:
        segmenter.load_dict(b"custom 3 n")
        segmenter.load_tfidf_dict(b"custom 9.0")

        assert segmenter.jieba.loaded == [b"custom 3 n"]
        assert segmenter.tfidf.loaded == [b"custom 9.0"]


class TestModels:
    def test_from_objects(self) -> None:
        item = MagicMock(word="北京", tag="ns")
        assert TaggedWord.from_native(item) == TaggedWord("北京", "ns")

        item = MagicMock(keyword="北京", weight=1)
        assert Keyword.from_native(item) == Keyword("北京", 1.0)
