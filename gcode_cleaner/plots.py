"""Figures for a cleaning run: toolpath overlay and decision log summary."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .collinear import MAX_LINE_ERROR, STRAIGHT_LINE

def plot_toolpath_overlay(points: np.ndarray, kept_idx: np.ndarray, out_dir: Path) -> Path:
    """XY view of the original path, the cleaned path and the removed points."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    removed = np.setdiff1d(np.arange(len(points)), kept_idx)
    kept = points[kept_idx] if len(kept_idx) else np.zeros((0, points.shape[1]))

    fig, ax = plt.subplots(figsize=(10, 8))
    if len(points):
        ax.plot(points[:, 0], points[:, 1], color='gray', linewidth=2.5, alpha=0.4,
                label=f'Original ({len(points)} moves)')
    if len(kept):
        ax.plot(kept[:, 0], kept[:, 1], color='blue', linewidth=0.8,
                marker='o', markersize=2, label=f'Cleaned ({len(kept)} moves)')
    if len(removed):
        ax.scatter(points[removed, 0], points[removed, 1], c='red', s=12, marker='x',
                   linewidths=1.0, label=f'Removed ({len(removed)})', zorder=3)
    ax.set_xlabel('X (mm)')
    ax.set_ylabel('Y (mm)')
    ax.set_title('Toolpath before/after cleaning')
    ax.set_aspect('equal', adjustable='datalim')
    ax.grid(True, alpha=0.3)
    ax.legend()
    plt.tight_layout()

    path = out_dir / "toolpath_overlay.png"
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path

def plot_decision_log(csv_path: Path, out_dir: Path) -> Path:
    """Counts per removal reason and the error histogram of straight-line removals."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    df = pd.read_csv(csv_path)
    df["error"] = pd.to_numeric(df["error"], errors="coerce")
    counts = df["kind"].value_counts()
    errors = df.loc[df["kind"] == STRAIGHT_LINE, "error"].dropna()

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    ax1.bar(counts.index.astype(str), counts.values, color='steelblue', edgecolor='black')
    ax1.set_xlabel('Reason')
    ax1.set_ylabel('Removed moves')
    ax1.set_title(f'Removed moves by reason ({len(df)} total)')
    ax1.grid(True, alpha=0.3, axis='y')

    if len(errors):
        ax2.hist(errors.values, bins=20, range=(0.0, MAX_LINE_ERROR),
                 color='green', alpha=0.7, edgecolor='black')
    ax2.axvline(MAX_LINE_ERROR, linestyle='--', color='red', label='max error')
    ax2.set_xlabel('Distance from straight line')
    ax2.set_ylabel('Count')
    ax2.set_title('Straight-line removals')
    ax2.legend()
    plt.tight_layout()

    path = out_dir / "decision_log.png"
    plt.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path
