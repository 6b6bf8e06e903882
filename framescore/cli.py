"""
Command-line interface for FrameScore.
Provides analyze and theme commands for video files and still images.
"""

import sys
import json
import logging
import argparse
import time
from pathlib import Path
from typing import List

from .io.video import FrameReader, load_image, image_size
from .io.frames import ASPECT_RATIOS, crop_frame
from .analysis.palette import derive_theme, theme_size, build_palette, palette_export_text
from .pipeline import FrameAnalyzer, SaturationCutoff
from .visualization.diagnostics import SessionVisualizer, summarize
from .config import get_config, reload_config

VIDEO_EXTENSIONS = ['.mp4', '.mov', '.avi', '.mkv', '.webm']


class FrameScoreCLI:
    """Command-line interface for FrameScore."""

    def __init__(self):
        """Initialize CLI."""
        self.config = None

    def run(self, args=None):
        """Run CLI with provided arguments."""
        parser = argparse.ArgumentParser(
            description="FrameScore - 60/30/10 color proportion and golden-ratio composition analysis"
        )
        parser.add_argument('--config', '-c', help='Configuration YAML file')
        parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Analyze command
        analyze_parser = subparsers.add_parser('analyze', help='Analyze color proportions and composition of videos')
        analyze_parser.add_argument('--input', '-i', required=True, help='Video file or directory with videos')
        analyze_parser.add_argument('--output', '-o', default='logs', help='Output directory for reports')
        analyze_parser.add_argument('--every', type=int, default=1, help='Analyze every Nth frame')
        analyze_parser.add_argument('--sat-cutoff', type=float, help='Minimum saturation (0..0.99)')
        analyze_parser.add_argument('--include-neutrals', action='store_true', help='Include low-saturation pixels')
        analyze_parser.add_argument('--aspect', choices=list(ASPECT_RATIOS), help='Crop analysis to an aspect ratio')
        analyze_parser.add_argument('--no-hud', action='store_true', help='Skip golden-ratio scoring')
        analyze_parser.add_argument('--json', action='store_true', help='Write per-frame results as JSON')
        analyze_parser.add_argument('--plot', action='store_true', help='Generate diagnostic plots')

        # Theme command
        theme_parser = subparsers.add_parser('theme', help='Derive theme colors from an image')
        theme_parser.add_argument('--image', '-i', required=True, help='Reference image')

        parsed_args = parser.parse_args(args)

        if not parsed_args.command:
            parser.print_help()
            return 0

        self.config = reload_config(parsed_args.config) if parsed_args.config else get_config()
        level = 'DEBUG' if parsed_args.verbose else self.config.get('logging.level', 'INFO')
        logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO),
                            format='%(asctime)s %(levelname)s %(name)s: %(message)s')

        if parsed_args.command == 'analyze':
            return self._run_analyze(parsed_args)
        elif parsed_args.command == 'theme':
            return self._run_theme(parsed_args)
        return 0

    def _find_videos(self, input_path: Path) -> List[Path]:
        if input_path.is_file():
            return [input_path]

        video_files = []
        for ext in VIDEO_EXTENSIONS:
            video_files.extend(sorted(input_path.glob(f'**/*{ext}')))
        return video_files

    def _run_analyze(self, args) -> int:
        """Run per-frame analysis over every input video."""
        print("🎨 FrameScore Analysis")
        print("=" * 30)

        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)

        video_files = self._find_videos(Path(args.input))
        if not video_files:
            print(f"❌ No video files found in {args.input}")
            return 1

        cutoff = SaturationCutoff(
            args.sat_cutoff if args.sat_cutoff is not None else self.config.default_saturation_cutoff,
            args.include_neutrals or self.config.include_neutrals
        )

        reader = FrameReader(self.config)
        visualizer = SessionVisualizer(self.config, output_dir=str(output_dir / 'plots')) if args.plot else None
        summary = {}

        for video_path in video_files:
            print(f"\n📹 Analyzing: {video_path.name}")
            start_time = time.time()

            info = reader.get_video_info(str(video_path))
            if info:
                print(f"  {info['width']}x{info['height']} @ {info['fps']:.2f} fps, {info['duration']:.1f}s")

            analyzer = FrameAnalyzer(self.config, composition_hud=not args.no_hud,
                                     aspect_ratio=args.aspect, update_mode='frame')
            results, skipped, last_frame = [], 0, None

            try:
                for timestamp, rgba in reader.iter_frames(str(video_path), every=max(1, args.every)):
                    result = analyzer.analyze(rgba, timestamp, cutoff)
                    if result is None:
                        skipped += 1
                        continue
                    results.append(result)
                    last_frame = rgba
            except Exception as e:
                print(f"  ❌ Error analyzing {video_path.name}: {e}")
                summary[video_path.name] = {'error': str(e)}
                continue

            clip = summarize(results, skipped)
            summary[video_path.name] = clip

            print(f"  Frames: {clip['frames']} analysed, {clip['skipped']} skipped")
            print(f"  Scene cuts: {clip['scene_cuts']}")
            print(f"  Mean 60/30/10 score: {clip['mean_score']:.1f}")
            if not args.no_hud:
                print(f"  Mean golden-ratio score: {clip['mean_focal_score']:.1f}")
            if results:
                print("  Final palette:")
                for line in palette_export_text(results[-1].palette).splitlines():
                    print(f"    {line}")
            print(f"  Time: {time.time() - start_time:.2f}s")

            if args.json:
                json_path = output_dir / f"{video_path.stem}_frames.json"
                with open(json_path, 'w') as f:
                    json.dump([self._result_to_dict(r) for r in results], f, indent=2)
                print(f"  Saved: {json_path}")

            if visualizer and results:
                visualizer.plot_session(results, f"Session - {video_path.stem}")
                if results[-1].focal_point is not None:
                    region = crop_frame(last_frame, analyzer.aspect_ratio)
                    visualizer.plot_saliency(analyzer.saliency.compute_map(region),
                                             results[-1].focal_point, f"Saliency - {video_path.stem}")

        if visualizer:
            report = visualizer.create_summary_report(summary, str(output_dir / 'summary.txt'))
            print(f"\n📋 Summary report: {report}")

        print("\n🔍 Analysis complete!")
        return 0

    def _run_theme(self, args) -> int:
        """Derive a theme from a still image."""
        width, height = image_size(args.image)
        rgba = load_image(args.image, theme_size(width, height))

        theme = derive_theme(rgba, self.config)
        if theme is None:
            print(f"❌ No usable pixels in {args.image}")
            return 1

        print("🎨 Derived theme")
        for role, hex_color in theme.as_dict().items():
            print(f"  {role:<10} {hex_color}")

        palette = build_palette(bytes.fromhex(h[1:]) for h in theme.as_dict().values())
        print("\n" + palette_export_text(palette))
        return 0

    @staticmethod
    def _result_to_dict(result) -> dict:
        data = {
            'timestamp_ms': result.timestamp,
            'scene_cut': result.scene_cut,
            'score': result.composition.score,
            'tag': result.composition.tag,
            'actual': result.composition.actual,
            'segments': [
                {'pct': round(s.displayed_pct, 2), 'hex': entry.hex}
                for s, entry in zip(result.proportions, result.palette)
            ],
        }
        if result.focal_point is not None:
            fp = result.focal_point
            data['focal_point'] = {'x': round(fp.x, 2), 'y': round(fp.y, 2),
                                   'score': fp.score, 'corner': fp.nearest_corner}
        return data


def main():
    """Main entry point."""
    cli = FrameScoreCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
