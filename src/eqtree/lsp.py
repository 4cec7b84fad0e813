"""Minimal LSP server for equation files: diagnostics only.

Every non-blank line of a document is parsed as a separate equation.
"""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from eqtree import __version__
from eqtree.errors import EquationError
from eqtree.parser import parse

server = LanguageServer(
    "eqtree-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def diagnose(source: str) -> list[Diagnostic]:
    """Parse each line of *source* and return one diagnostic per failing line."""
    diagnostics: list[Diagnostic] = []

    for line, text in enumerate(source.splitlines()):
        if not text.strip():
            continue
        try:
            parse(text)
        except EquationError as exc:
            start = min(exc.span.start, len(text))
            end = max(start + 1, min(exc.span.end, len(text)))
            diagnostics.append(
                Diagnostic(
                    range=Range(
                        start=Position(line=line, character=start),
                        end=Position(line=line, character=end),
                    ),
                    message=exc.message,
                    severity=DiagnosticSeverity.Error,
                    source="eqtree",
                    code=type(exc).__name__,
                )
            )

    return diagnostics


def _validate(ls: LanguageServer, uri: str) -> None:
    """Run the pipeline over the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnose(doc.source))
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
