"""Binary loader: import the unpacked native module exactly once.

The artifact must be a CPython extension module built as ``_binding`` (init
symbol ``PyInit__binding``) exposing ``Jieba`` and ``TfIdf`` classes. It is
imported from its fixed path under :data:`BINDING_MODULE_NAME`. Node-API
addons, such as the ones published under ``@node-rs`` on the npm registry,
do not satisfy this and fail with :class:`LoadError`. Bindings are cached per
path for the life of the process; there is no unload.
"""

from __future__ import annotations

import importlib.machinery
import importlib.util
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any

from jieba_native.exceptions import LoadError
from jieba_native.models import Keyword
from jieba_native.models import TaggedWord

BINDING_MODULE_NAME = "jieba_native._binding"
ALREADY_LOADED = "already loaded"
MISSING_INIT = "does not define module export function"

ImportFunc = Callable[[str, Path], ModuleType]

_loaded: dict[Path, NativeBinding] = {}


def import_extension(name: str, path: Path) -> ModuleType:
    """Import a compiled extension from an explicit file path."""
    loader = importlib.machinery.ExtensionFileLoader(name, str(path))
    spec = importlib.util.spec_from_file_location(name, path, loader=loader)
    if spec is None:
        raise ImportError(f"cannot build an import spec for {path}")
    module = importlib.util.module_from_spec(spec)
    loader.exec_module(module)
    sys.modules[name] = module
    return module


@dataclass(frozen=True)
class Segmenter:
    """Activated segmentation entry points.

    Holds the native segmenter and TF-IDF extractor created by
    :meth:`NativeBinding.activate` and forwards calls to them.
    """

    jieba: Any
    tfidf: Any

    def load_dict(self, data: bytes) -> None:
        self.jieba.load_dict(data)

    def cut(self, text: str | bytes, hmm: bool | None = None) -> list[str]:
        return list(self.jieba.cut(text, hmm))

    def cut_all(self, text: str | bytes) -> list[str]:
        return list(self.jieba.cut_all(text))

    def cut_for_search(self, text: str | bytes, hmm: bool | None = None) -> list[str]:
        return list(self.jieba.cut_for_search(text, hmm))

    def tag(self, text: str | bytes, hmm: bool | None = None) -> list[TaggedWord]:
        return [TaggedWord.from_native(item) for item in self.jieba.tag(text, hmm)]

    def extract_keywords(
        self, text: str, top_n: int, allowed_pos: list[str] | None = None
    ) -> list[Keyword]:
        """Top ``top_n`` keywords, heaviest first."""
        if top_n <= 0:
            return []
        raw = self.tfidf.extract_keywords(self.jieba, text, top_n, allowed_pos)
        keywords = sorted(
            (Keyword.from_native(item) for item in raw),
            key=lambda k: k.weight,
            reverse=True,
        )
        return keywords[:top_n]

    def load_tfidf_dict(self, data: bytes) -> None:
        self.tfidf.load_dict(data)


@dataclass(frozen=True)
class NativeBinding:
    """The loaded native module and where it came from."""

    module: ModuleType
    path: Path

    def activate(self, dict_data: bytes | None = None, idf_data: bytes | None = None) -> Segmenter:
        """Create the segmenter and TF-IDF objects.

        Without dictionary data the library's built-in dictionaries are used.

        Raises:
            LoadError: If the module lacks the expected classes or their
                constructors fail.
        """
        try:
            jieba_cls = self.module.Jieba
            tfidf_cls = self.module.TfIdf
            jieba = jieba_cls.with_dict(dict_data) if dict_data is not None else jieba_cls()
            tfidf = tfidf_cls.with_dict(idf_data) if idf_data is not None else tfidf_cls()
        except Exception as e:
            raise LoadError(f"Native module {self.path} failed to activate: {e}") from e
        return Segmenter(jieba=jieba, tfidf=tfidf)


class BinaryLoader:
    """Loads the native artifact and publishes it as a :class:`NativeBinding`."""

    def __init__(
        self,
        import_func: ImportFunc = import_extension,
        module_name: str = BINDING_MODULE_NAME,
        logger: logging.Logger | None = None,
    ) -> None:
        self._import = import_func
        self.module_name = module_name
        self._logger = logger or logging.getLogger(__name__)

    def load(self, module_path: Path) -> NativeBinding:
        """Load ``module_path`` once; later calls return the cached binding.

        An import failure whose message is exactly ``already loaded`` counts
        as success when the module is registered under :attr:`module_name`.

        Raises:
            LoadError: For any other import failure.
        """
        key = module_path.resolve()
        cached = _loaded.get(key)
        if cached is not None:
            self._logger.debug(f"Native module {module_path} already bound")
            return cached

        try:
            module = self._import(self.module_name, module_path)
        except Exception as e:
            module = sys.modules.get(self.module_name) if str(e) == ALREADY_LOADED else None
            if module is None:
                reason = f"Cannot load {module_path}: {e}"
                if MISSING_INIT in str(e):
                    reason += " (not a CPython extension; configure a registry that publishes CPython builds of _binding)"
                self._logger.error(f"Failed to load native binding {module_path}: {e}")
                raise LoadError(reason) from e
            self._logger.debug(f"Native module {module_path} reported already loaded")

        binding = NativeBinding(module=module, path=module_path)
        _loaded[key] = binding
        return binding


def clear_cache() -> None:
    """Forget every binding. For tests; a loaded extension cannot be unloaded."""
    _loaded.clear()
