"""Monthly time-tracking statements for tenant companies.

chronodesk renders one PDF statement per worker and tenant, uploads it to
object storage, and keeps each tenant's dispatch cycle contiguous across
runs. See :mod:`chronodesk.statements` for the pipeline and
:mod:`chronodesk.cli` for the command-line entry point.
"""

from __future__ import annotations

__version__ = "0.1.0"
