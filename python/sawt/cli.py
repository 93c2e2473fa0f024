"""Command-line interface for Sawt."""
import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from .errors import SawtError
from .pipeline import AudioTrustAnalyzer, error_response
from .report import dumps_report
from .features import FeatureExtractor


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def _run_analysis(body, content_type):
    analyzer = AudioTrustAnalyzer()
    try:
        return await analyzer.analyze(body, content_type)
    finally:
        await analyzer.close()


def _build_request(args):
    """Turn CLI arguments into a pipeline request body and content type."""
    if args.url:
        return {"url": args.url, "mimetype": args.mime}, None

    if args.file is None:
        print("Error: a file or --url is required", file=sys.stderr)
        sys.exit(1)

    content_path = Path(args.file)
    if not content_path.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        sys.exit(1)

    if args.blob:
        return {
            "blob": content_path.read_text(),
            "filename": content_path.name,
            "mimetype": args.mime,
        }, None

    content_type = args.mime or mimetypes.guess_type(content_path.name)[0]
    return content_path.read_bytes(), content_type


def analyze_command(args):
    """Analyze an artifact command."""
    _configure_logging(getattr(args, "verbose", False))
    body, content_type = _build_request(args)

    try:
        report = asyncio.run(_run_analysis(body, content_type))
    except SawtError as e:
        status, error_body = error_response(e)
        if args.json:
            print(json.dumps(error_body, indent=2))
        else:
            detail = f" ({error_body['detail']})" if "detail" in error_body else ""
            print(f"Error [{status}]: {error_body['error']}{detail}", file=sys.stderr)
        sys.exit(1)

    score = report.trust_score
    if args.json:
        print(dumps_report(report))
    else:
        features = report.features
        print(f"\n{'='*60}")
        print("  Audio Trust Report")
        print(f"{'='*60}\n")
        if report.metadata.filename:
            print(f"File: {report.metadata.filename}")
        print(f"SHA-256: {report.metadata.sha256}")
        print(f"Type: {report.metadata.mime_type} ({features.format_guess.value}, {report.metadata.size} bytes)")
        if features.duration_seconds is not None:
            print(f"Duration: {features.duration_seconds}s @ {features.sample_rate} Hz, {features.channels} ch")
        print(f"\nComposite risk: {score.composite * 100:.1f}%")
        print(f"Verdict: {'LIKELY SYNTHETIC' if score.likely_synthetic else 'NO STRONG SIGNAL'}")
        print(f"Dominant signal: {score.method.value}")

        print("\nBreakdown:")
        for name, value in score.breakdown.items():
            print(f"  • {name}: {value:.4f}")

        if report.external_signals:
            print("\nExternal classifiers:")
            for signal in report.external_signals:
                icon = "✓" if signal.succeeded else "✗"
                result = f"{signal.score:.3f}" if signal.succeeded else signal.error
                print(f"  {icon} {signal.source_name}: {result} ({signal.latency_ms:.0f}ms)")

        print(f"\n{'='*60}\n")

    sys.exit(1 if score.likely_synthetic else 0)


def features_command(args):
    """Offline feature extraction command."""
    _configure_logging(getattr(args, "verbose", False))

    content_path = Path(args.file)
    if not content_path.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        sys.exit(1)

    features = FeatureExtractor().extract(content_path.read_bytes())

    if args.json:
        print(json.dumps(features.to_dict(), indent=2))
    else:
        for key, value in features.to_dict().items():
            print(f"{key}: {value}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="sawt",
        description="CLI tool for audio trust analysis"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Score an audio artifact")
    analyze_parser.add_argument("file", nargs="?", help="Audio file to analyze")
    analyze_parser.add_argument("-u", "--url", help="Fetch the artifact from a URL instead")
    analyze_parser.add_argument("-b", "--blob", action="store_true", help="FILE contains base64 text")
    analyze_parser.add_argument("-m", "--mime", help="Declared mime type")
    analyze_parser.add_argument("-j", "--json", action="store_true", help="Output as JSON")
    analyze_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    analyze_parser.set_defaults(func=analyze_command)

    # Features command
    features_parser = subparsers.add_parser("features", help="Show offline heuristics only")
    features_parser.add_argument("file", help="Audio file to inspect")
    features_parser.add_argument("-j", "--json", action="store_true", help="Output as JSON")
    features_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    features_parser.set_defaults(func=features_command)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
