"""
Plotting Utilities for Rotation Perturbations
Diagnostic plots of tangent-space samples and their covariance using
matplotlib. Consistent styling, pairwise scatter plots with covariance
ellipses, rotation-angle histograms.
"""

import os

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving
import matplotlib.pyplot as plt
from matplotlib.patches import Ellipse

from kernel_distributions.core.constants import RAD2DEG


# ---------------------------------------------------------------------------
# PlotStyle -- shared styling helpers
# ---------------------------------------------------------------------------

class PlotStyle:
    """Centralised styling and figure management for all project plots."""

    # Colorblind-friendly palette
    COLORS = {
        'primary': '#2E86AB',      # Steel blue
        'secondary': '#A23B72',    # Magenta
        'accent': '#F18F01',       # Orange
        'neutral': '#546E7A',      # Blue grey
    }

    PALETTE = ['#2E86AB', '#F18F01', '#2E7D32', '#C73E1D', '#7B1FA2', '#00838F']

    AXIS_LABELS = ('x', 'y', 'z')

    @staticmethod
    def setup_style():
        """Set matplotlib rcParams for publication-quality figures."""
        plt.rcParams.update({
            'font.family': 'sans-serif',
            'font.size': 11,
            'axes.labelsize': 12,
            'axes.titlesize': 13,
            'axes.titleweight': 'bold',
            'figure.dpi': 100,
            'figure.facecolor': 'white',
            'savefig.dpi': 200,
            'savefig.bbox': 'tight',
            'axes.grid': True,
            'axes.axisbelow': True,
            'axes.spines.top': False,
            'axes.spines.right': False,
            'axes.prop_cycle': plt.cycler(color=PlotStyle.PALETTE),
            'grid.color': '#E0E0E0',
            'grid.linewidth': 0.5,
        })

    @staticmethod
    def create_figure(nrows=1, ncols=1, figsize=None):
        """Return (fig, axes) with a tight layout.

        Parameters
        ----------
        nrows, ncols : int
            Subplot grid dimensions.
        figsize : tuple or None
            Figure size in inches.  If *None*, use rcParams default.
        """
        return plt.subplots(nrows, ncols, figsize=figsize, layout='tight')

    @staticmethod
    def save_figure(fig, filepath, dpi=200):
        """Save *fig* to *filepath*, creating directories as needed."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filepath, dpi=dpi, facecolor='white', edgecolor='none')
        plt.close(fig)


def covariance_ellipse(covariance_2d, n_sigma=2.0, **kwargs):
    """Ellipse patch centred at the origin covering *n_sigma* of a 2x2 covariance."""
    eigenvalues, eigenvectors = np.linalg.eigh(np.asarray(covariance_2d, dtype=np.float64))
    eigenvalues = np.clip(eigenvalues, 0.0, None)
    angle = np.degrees(np.arctan2(eigenvectors[1, -1], eigenvectors[0, -1]))
    width, height = 2.0 * n_sigma * np.sqrt(eigenvalues[::-1])
    return Ellipse((0.0, 0.0), width, height, angle=angle, fill=False, **kwargs)


# ---------------------------------------------------------------------------
# Standalone plotting functions
# ---------------------------------------------------------------------------

def plot_tangent_scatter(diffs, covariance, title, filepath, n_sigma=2.0):
    """Pairwise scatter of tangent-space deviations with covariance ellipses.

    Parameters
    ----------
    diffs : ndarray (N, 3)
        Rotation vectors of the samples relative to their mean (rad).
    covariance : ndarray (3, 3)
        Tangent-space covariance (rad^2).
    title : str
    filepath : str

    Returns
    -------
    str
        The path the figure was written to.
    """
    diffs = np.asarray(diffs, dtype=np.float64) * RAD2DEG
    covariance = np.asarray(covariance, dtype=np.float64) * RAD2DEG ** 2

    PlotStyle.setup_style()
    fig, axes = PlotStyle.create_figure(1, 3, figsize=(15, 5))
    labels = PlotStyle.AXIS_LABELS

    for ax, (i, j) in zip(axes, [(0, 1), (0, 2), (1, 2)]):
        ax.scatter(diffs[:, i], diffs[:, j], s=6, alpha=0.5,
                   color=PlotStyle.COLORS['primary'], label='samples')
        ax.add_patch(covariance_ellipse(
            covariance[np.ix_([i, j], [i, j])], n_sigma=n_sigma,
            edgecolor=PlotStyle.COLORS['accent'], linewidth=2.0,
            label=f'{n_sigma:g}-sigma'))
        ax.set_xlabel(f'theta_{labels[i]} (deg)')
        ax.set_ylabel(f'theta_{labels[j]} (deg)')
        ax.set_aspect('equal', adjustable='datalim')
        ax.legend(loc='upper right')

    fig.suptitle(title)
    PlotStyle.save_figure(fig, filepath)
    return filepath


def plot_angle_histogram(diffs, title, filepath, bins=40):
    """Histogram of the rotation angle |theta| of each deviation (deg)."""
    angles = np.linalg.norm(np.asarray(diffs, dtype=np.float64), axis=1) * RAD2DEG

    PlotStyle.setup_style()
    fig, ax = PlotStyle.create_figure(figsize=(8, 5))
    ax.hist(angles, bins=bins, color=PlotStyle.COLORS['secondary'], alpha=0.8)
    ax.set_xlabel('Rotation angle from mean (deg)')
    ax.set_ylabel('Samples')
    ax.set_title(title)
    PlotStyle.save_figure(fig, filepath)
    return filepath
