"""Pure chart-configuration package for chartBuilder.

This package holds the line-chart configuration model and the deterministic
operations over it (dataset CRUD, chart-type transforms, color conversion and
the portable import/export document). It must not import Django or perform any
I/O.
"""

from .model import ChartModel, Dataset, ViewState, default_model

__all__ = ["ChartModel", "Dataset", "ViewState", "default_model"]
