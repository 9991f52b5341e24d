"""Edit sessions for data files.

A session owns everything one editing pass over a data file needs: the
document as loaded, the descriptors rendered from it and one rich-text
widget per markdown field.  It starts when the file is opened and ends
when it is saved or abandoned; nothing is shared between sessions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, Protocol

from .documents import DataFile
from .errors import ValidationFailure
from .fields import FieldDescriptor, FieldKind, collapse, collect_edits, expand
from .paths import FieldPath, ambiguous_keys, join_path
from .store import DocumentStore

logger = logging.getLogger(__name__)


class EditorWidget(Protocol):
    def set_content(self, text: str) -> None: ...

    def get_content(self) -> str: ...

    def destroy(self) -> None: ...


WidgetFactory = Callable[[str], EditorWidget]


class WidgetPool:
    """At most one live widget per field key."""

    def __init__(self, factory: WidgetFactory) -> None:
        self._factory = factory
        self._widgets: dict[str, EditorWidget] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._widgets

    def __len__(self) -> int:
        return len(self._widgets)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._widgets))

    def __enter__(self) -> "WidgetPool":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.release_all()

    def acquire(self, key: str, content: str) -> EditorWidget:
        widget = self._widgets.get(key)
        if widget is None:
            widget = self._factory(key)
            self._widgets[key] = widget
        widget.set_content(content)
        return widget

    def get(self, key: str) -> EditorWidget | None:
        return self._widgets.get(key)

    def release_all(self) -> None:
        widgets, self._widgets = self._widgets, {}
        for widget in widgets.values():
            widget.destroy()


class EditSession:
    def __init__(
        self,
        store: DocumentStore,
        data_file: DataFile,
        *,
        widget_factory: WidgetFactory | None = None,
    ) -> None:
        self.store = store
        self.data_file = data_file
        self.widgets = WidgetPool(widget_factory) if widget_factory else None
        self._fields: list[FieldDescriptor] = []
        self.closed = False

    @classmethod
    def open(
        cls,
        store: DocumentStore,
        rel: str,
        *,
        widget_factory: WidgetFactory | None = None,
    ) -> "EditSession":
        raw = store.read(rel)
        data_file = DataFile.from_text(rel, raw)
        session = cls(store, data_file, widget_factory=widget_factory)
        for path in ambiguous_keys(data_file.document):
            logger.warning(
                "%s: key %r contains '.' and cannot be addressed by a dotted path",
                rel,
                path[-1],
            )
        return session

    @property
    def path(self) -> str:
        return self.data_file.path

    @property
    def document(self) -> Any:
        return self.data_file.document

    def _check_open(self) -> None:
        if self.closed:
            raise ValidationFailure("This edit session is closed.", path=self.path)

    def fields(self) -> list[FieldDescriptor]:
        """Descriptors for the loaded document; widgets are rebuilt with them."""
        self._check_open()
        self._fields = expand(self.document)
        if self.widgets is not None:
            self.widgets.release_all()
            for field in self._fields:
                if field.kind is FieldKind.MARKDOWN and field.is_leaf:
                    value = field.value
                    self.widgets.acquire(field.key, "" if value is None else str(value))
        return list(self._fields)

    def ambiguous(self) -> list[str]:
        return [join_path(path) for path in ambiguous_keys(self.document)]

    def collect(self, submitted: Mapping[str, Any] | None = None) -> dict[FieldPath, Any]:
        """Edits from submitted inputs plus the content of every widget."""
        self._check_open()
        fields = self._fields or expand(self.document)
        edits = collect_edits(fields, submitted or {})
        if self.widgets is not None:
            for field in fields:
                widget = self.widgets.get(field.key)
                if widget is not None:
                    edits[field.path] = widget.get_content()
        return edits

    def result(self, edits: Mapping[Any, Any]) -> Any:
        self._check_open()
        return collapse(self.document, edits)

    def save(self, edits: Mapping[Any, Any]) -> Any:
        """Write the edited document and end the session."""
        document = self.result(edits)
        self.store.write(self.path, DataFile(self.path, document).render())
        self.data_file = DataFile(self.path, document)
        self.close()
        return document

    def close(self) -> None:
        if self.widgets is not None:
            self.widgets.release_all()
        self.closed = True

    def __enter__(self) -> "EditSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
