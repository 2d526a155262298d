"""Template rendering and PDF rasterization ports with their adapters.

``JinjaStatementRenderer`` compiles the statement template once, when it
is constructed, so a broken template fails the run before any tenant is
touched. ``WeasyPrintRasterizer`` lays the rendered HTML out on A4 pages
in a worker thread.
"""

from __future__ import annotations

import asyncio
import typing as typ

import jinja2

from chronodesk.errors import ConfigurationError, RasterizeError, RenderError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

A4_PAGE_CSS = "@page { size: A4; }"


@typ.runtime_checkable
class StatementRenderer(typ.Protocol):
    """Port turning a statement context into HTML markup."""

    def render(self, context: cabc.Mapping[str, object]) -> str:
        """Return the markup for ``context``.

        Raises
        ------
        RenderError
            If the template cannot be rendered with ``context``.

        """
        ...


@typ.runtime_checkable
class PdfRasterizer(typ.Protocol):
    """Port turning HTML markup into PDF bytes."""

    async def rasterize(self, markup: str) -> bytes:
        """Return an A4 PDF of ``markup`` with backgrounds printed.

        Raises
        ------
        RasterizeError
            If the markup cannot be laid out or written.

        """
        ...


class JinjaStatementRenderer:
    """Render statements with a Jinja2 template.

    Autoescaping is enabled, so context values are escaped unless they are
    ``markupsafe.Markup``; undefined variables raise instead of rendering
    as empty text.

    Parameters
    ----------
    template_source
        Template text, usually :attr:`StatementAssets.template_source`.

    Raises
    ------
    ConfigurationError
        If the template does not parse.

    """

    def __init__(self, template_source: str) -> None:
        """Compile ``template_source``."""
        environment = jinja2.Environment(
            autoescape=True,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )
        try:
            self._template = environment.from_string(template_source)
        except jinja2.TemplateSyntaxError as exc:
            msg = f"statement template is invalid (line {exc.lineno}): {exc.message}"
            raise ConfigurationError(msg) from exc

    def render(self, context: cabc.Mapping[str, object]) -> str:
        """Render the template with ``context``."""
        try:
            return self._template.render(context)
        except jinja2.TemplateError as exc:
            msg = f"statement template could not be rendered: {exc}"
            raise RenderError(msg) from exc


class WeasyPrintRasterizer:
    """Rasterize HTML into A4 PDFs with WeasyPrint.

    WeasyPrint fetches every referenced resource synchronously before
    layout, so the document is complete when it is written. Embedded
    data URIs (the logo) need no network access.
    """

    def __init__(self, *, base_url: str | None = None) -> None:
        """Configure the base URL used to resolve relative resources."""
        self._base_url = base_url

    def _rasterize_sync(self, markup: str) -> bytes:
        from weasyprint import CSS, HTML

        document = HTML(string=markup, base_url=self._base_url)
        pdf = document.write_pdf(stylesheets=[CSS(string=A4_PAGE_CSS)])
        if pdf is None:  # pragma: no cover - write_pdf returns bytes without target
            msg = "WeasyPrint produced no output"
            raise RasterizeError(msg)
        return pdf

    async def rasterize(self, markup: str) -> bytes:
        """Lay out ``markup`` in a worker thread and return the PDF bytes."""
        try:
            return await asyncio.to_thread(self._rasterize_sync, markup)
        except RasterizeError:
            raise
        except Exception as exc:
            msg = f"PDF rasterization failed: {exc}"
            raise RasterizeError(msg) from exc


__all__ = [
    "A4_PAGE_CSS",
    "JinjaStatementRenderer",
    "PdfRasterizer",
    "StatementRenderer",
    "WeasyPrintRasterizer",
]
