"""Translate text through the relay backend from the command line.

Run: `python translate_cli.py "Hello there" --to fr es --glossary '{"OpenAI":"OpenAI"}'`
"""
import argparse
import asyncio
import json
import sys

from services.translate_client import TranslateClient, TranslateClientError
from utils.config import get_settings


async def main(args: argparse.Namespace) -> int:
    client = TranslateClient(args.backend or get_settings().backend_url)
    try:
        result = await client.translate(
            args.text,
            args.to,
            formality=args.formality,
            glossary=args.glossary,
            source_lang=args.source,
        )
    except TranslateClientError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Multi-language translator client.")
    parser.add_argument("text", help="Text to translate")
    parser.add_argument("--to", nargs="+", default=["fr", "es", "de"], help="Target ISO codes")
    parser.add_argument("--formality", choices=("formal", "neutral", "casual"), default="neutral")
    parser.add_argument("--glossary", default=None, help="JSON object of forced term mappings")
    parser.add_argument("--source", default=None, help="Source language (default: auto)")
    parser.add_argument("--backend", default=None, help="Relay base URL (default: BACKEND_URL)")
    sys.exit(asyncio.run(main(parser.parse_args())))
