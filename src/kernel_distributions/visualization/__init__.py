"""
===============================================================================
KERNEL DISTRIBUTIONS - Visualization
===============================================================================
Diagnostic plots of perturbed orientations.

Modules:
    plot_utils -- PlotStyle, tangent-space scatter and angle histograms
===============================================================================
"""

from kernel_distributions.visualization.plot_utils import (
    PlotStyle, covariance_ellipse, plot_angle_histogram, plot_tangent_scatter,
)
