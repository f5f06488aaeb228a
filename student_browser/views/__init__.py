from .scatter_view import ScatterView
from .parallel_view import ParallelCoordinatesView
from .pca_view import PCAView
from .bar_view import BarChartView
from .box_view import BoxPlotView
from .histogram_view import HistogramView

__all__ = ["ScatterView", "ParallelCoordinatesView", "PCAView", "BarChartView", "BoxPlotView", "HistogramView"]
