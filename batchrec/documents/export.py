from __future__ import annotations

import logging
from typing import Callable

from batchrec.documents.layout import Document, to_pdf_bytes
from batchrec.forms.notifier import Notifier

logger = logging.getLogger(__name__)

Sink = Callable[[str, bytes], None]


class DocumentExporter:
    """Renders a document to PDF and hands it to ``sink`` (filename, bytes).

    ``generating`` is true only while a render is in progress.
    """

    def __init__(self, notifier: Notifier, sink: Sink):
        self.notifier = notifier
        self.sink = sink
        self.generating = False

    def export(self, render: Callable[..., Document], *args, filename: str | None = None, **kwargs) -> bool:
        self.generating = True
        try:
            document = render(*args, **kwargs)
            data = to_pdf_bytes(document)
            name = filename or document.filename
        except Exception as e:
            logger.exception("document export failed")
            self.notifier.error(f"Failed to generate PDF: {e}")
            return False
        finally:
            self.generating = False
        self.sink(name, data)
        self.notifier.success(f"{name} downloaded")
        return True


def print_when_ready(document: Document, on_ready: Callable[[bytes], None]) -> bytes:
    """Build the PDF, then invoke ``on_ready`` with it."""
    data = to_pdf_bytes(document)
    on_ready(data)
    return data
