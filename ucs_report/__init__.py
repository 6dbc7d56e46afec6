"""
UCS domain report collector package.

This package hosts the management-API adapters, the normalization layer that
reshapes raw UCS Manager object dumps into domain reports, and the concurrent
collection orchestrator. The ``ucs-report`` command (:mod:`ucs_report.cli`)
is the entry point.
"""

from .__version__ import __report_model_version__, __version__

__all__ = ["__version__", "__report_model_version__"]
