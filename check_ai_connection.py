"""
Script to check connectivity to the Gemini API.
Shows which HTTP transport was bound and runs one short test request.
Exit code 0 when connected, 1 otherwise.
"""
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from resume_optimizer.config import settings
from resume_optimizer.services.completion_client import CompletionClient
from resume_optimizer.services.http_transport import TransportProvider
from resume_optimizer.utils.logging import setup_logging


async def check(transport: str) -> bool:
    provider = TransportProvider(transport)
    client = CompletionClient.from_settings(provider, settings)
    try:
        result = await client.check_connection()
        print(f"Transport: {json.dumps(provider.describe())}")
        print(f"Result:    {json.dumps(result)}")
        return bool(result.get("connected"))
    finally:
        await provider.aclose()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Check Gemini API connectivity")
    parser.add_argument(
        "--transport",
        type=str,
        default=settings.http_transport,
        choices=["auto", "httpx", "requests", "socket"],
        help="Preferred HTTP transport (default: HTTP_TRANSPORT setting)"
    )
    args = parser.parse_args()

    setup_logging()
    print("=" * 80)
    print(f"🔍 Testing Gemini API connection (model: {settings.gemini_model})")
    print("=" * 80)
    connected = asyncio.run(check(args.transport))
    print("✅ Connected" if connected else "❌ Not connected")
    sys.exit(0 if connected else 1)
