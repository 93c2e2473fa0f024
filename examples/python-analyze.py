import asyncio
import json
import sys
from pathlib import Path

from sawt import AudioTrustAnalyzer
from sawt.report import dumps_report


async def main():
    print("--- Audio Trust Analysis (Python) ---")

    base_dir = Path(__file__).parent.parent
    audio_path = base_dir / "test-data" / "audio" / "gapped-tts.wav"

    if not audio_path.exists():
        print("Test data not found! Run scripts/generate-test-data.py first.")
        print(f"Audio: {audio_path}")
        sys.exit(1)

    audio = audio_path.read_bytes()
    print(f"Analyzing: {audio_path.name} ({len(audio)} bytes)")

    # Offline heuristics first, no network involved
    analyzer = AudioTrustAnalyzer()
    features = analyzer.extract_features(audio)
    print("\n[Signal Heuristics]")
    print(json.dumps(features.to_dict(), indent=2))

    # Full pipeline, using whatever upstreams the environment configures
    try:
        report = await analyzer.analyze(audio, "audio/wav")
    finally:
        await analyzer.close()

    print("\n[Trust Report]")
    print(dumps_report(report))


if __name__ == "__main__":
    asyncio.run(main())
