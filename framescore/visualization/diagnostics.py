"""
Diagnostic visualization for analysis sessions.
Plots proportion and score trends of a run and saliency maps with their
focal point and golden-ratio power points.
"""

import os
import numpy as np
import matplotlib.pyplot as plt
from typing import Dict, List, Sequence
from pathlib import Path

from ..config import get_config
from ..pipeline import FrameResult
from ..scoring.golden_ratio import FocalPoint, power_points


class SessionVisualizer:
    """Create diagnostic plots for analysed frames."""

    def __init__(self, config=None, output_dir: str = "logs/plots"):
        """Initialize visualizer."""
        self.config = config or get_config()
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        plt.style.use('default')
        plt.rcParams['figure.dpi'] = self.config.get('visualization.dpi', 150)

    def _save(self, fig, title: str) -> str:
        output_path = self.output_dir / f"{title.lower().replace(' ', '_')}.png"
        fig.savefig(output_path, dpi=self.config.get('visualization.dpi', 150), bbox_inches='tight')
        plt.close(fig)
        return str(output_path)

    def plot_session(self, results: Sequence[FrameResult], title: str = "Session Analysis") -> str:
        """Plot stabilized proportions, composition score and golden-ratio score over time."""
        if not results:
            return ""

        fig, axes = plt.subplots(3, 1, figsize=(12, 12), sharex=True)
        fig.suptitle(title, fontsize=16)

        times = np.array([r.timestamp for r in results]) / 1000.0
        pcts = np.array([r.proportions.percentages for r in results])
        target = self.config.target_triplet

        # Stabilized proportions per slot
        for slot, style in enumerate(['b-', 'g-', 'r-']):
            axes[0].plot(times, pcts[:, slot], style, linewidth=2, label=f'Slot {slot + 1}')
            axes[0].axhline(y=target[slot], color=style[0], linestyle='--', alpha=0.4)
        axes[0].set_title('Stabilized Proportions')
        axes[0].set_ylabel('%')
        axes[0].grid(True, alpha=0.3)
        axes[0].legend()

        # Composition score, scene cuts marked
        scores = [r.composition.score for r in results]
        axes[1].plot(times, scores, 'k-', linewidth=2)
        for r in results:
            if r.scene_cut:
                axes[1].axvline(x=r.timestamp / 1000.0, color='orange', alpha=0.5)
        axes[1].axhline(y=self.config.get('composition.pass_score', 85), color='g', linestyle='--', alpha=0.5)
        axes[1].axhline(y=self.config.get('composition.fail_score', 60), color='r', linestyle='--', alpha=0.5)
        axes[1].set_title('Composition Score')
        axes[1].set_ylim(0, 105)
        axes[1].grid(True, alpha=0.3)

        # Golden-ratio score
        focal = [(r.timestamp / 1000.0, r.focal_point.score) for r in results if r.focal_point]
        if focal:
            ft, fs = zip(*focal)
            axes[2].plot(ft, fs, 'm-', linewidth=2)
        axes[2].set_title('Golden-Ratio Score')
        axes[2].set_xlabel('Time (s)')
        axes[2].set_ylim(0, 105)
        axes[2].grid(True, alpha=0.3)

        plt.tight_layout()
        return self._save(fig, title)

    def plot_saliency(self, saliency: np.ndarray, focal: FocalPoint,
                      title: str = "Saliency Map") -> str:
        """Show a saliency map with the focal centroid and the four power points."""
        height, width = saliency.shape
        fig, ax = plt.subplots(figsize=(10, 10 * height / max(width, 1)))

        ax.imshow(saliency, cmap='inferno')
        for corner, px, py in power_points(width, height):
            ax.plot(px, py, 'wo', markersize=6)
            ax.annotate(corner, (px, py), color='white', xytext=(4, 4), textcoords='offset points')
        ax.plot(focal.x, focal.y, 'o', color='#00FFB4', markersize=10, markeredgecolor='black')
        ax.set_title(f"{title} (score {focal.score}, {focal.nearest_corner or 'none'})")
        ax.axis('off')

        return self._save(fig, title)

    def create_summary_report(self, summary: Dict, output_file: str = "logs/summary.txt") -> str:
        """Write a text summary of analysed clips."""
        lines = []
        lines.append("=" * 60)
        lines.append("FRAMESCORE SESSION SUMMARY")
        lines.append("=" * 60)
        lines.append("")
        lines.append(f"Generated: {np.datetime64('now')}")
        lines.append(f"Target split: {' / '.join(str(t) for t in self.config.target_triplet)}")
        lines.append("")

        for clip_name, clip in summary.items():
            lines.append(f"Video: {clip_name}")
            if 'error' in clip:
                lines.append(f"  Error: {clip['error']}")
            else:
                lines.append(f"  Frames analysed: {clip.get('frames', 0)}")
                lines.append(f"  Frames skipped: {clip.get('skipped', 0)}")
                lines.append(f"  Scene cuts: {clip.get('scene_cuts', 0)}")
                lines.append(f"  Mean score: {clip.get('mean_score', 0):.1f}")
                lines.append(f"  Mean golden-ratio score: {clip.get('mean_focal_score', 0):.1f}")
            lines.append("")

        lines.append("=" * 60)

        os.makedirs(os.path.dirname(output_file) or '.', exist_ok=True)
        with open(output_file, 'w') as f:
            f.write('\n'.join(lines))

        return output_file


def summarize(results: List[FrameResult], skipped: int = 0) -> Dict:
    """Aggregate per-frame results of one clip."""
    if not results:
        return {'frames': 0, 'skipped': skipped, 'scene_cuts': 0,
                'mean_score': 0.0, 'mean_focal_score': 0.0}

    focal_scores = [r.focal_point.score for r in results if r.focal_point]
    return {
        'frames': len(results),
        'skipped': skipped,
        'scene_cuts': sum(1 for r in results if r.scene_cut),
        'mean_score': float(np.mean([r.composition.score for r in results])),
        'mean_focal_score': float(np.mean(focal_scores)) if focal_scores else 0.0,
        'final_split': results[-1].composition.actual,
    }
