import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

import httpx

from security_search_mcp.source.client import FileDocumentSource, HttpDocumentSource


async def main():
    server_url = os.environ.get("SEARCH_SERVER_URL", "http://localhost:3000").rstrip("/")
    location = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("METADATA_LOCATION")
    if not location:
        print("Usage: load_metadata.py <path-or-url to search_metadata.json>")
        sys.exit(1)

    # 1. Read and validate the metadata locally
    if location.startswith(("http://", "https://")):
        source = HttpDocumentSource(url=location, timeout=120)
    else:
        source = FileDocumentSource(location)

    print(f"Reading metadata from {location}...")
    snapshot = await source.fetch_documents()
    print(f"Parsed {len(snapshot)} articles (generated {snapshot.generated_at}).")

    payload = {
        "generated_at": snapshot.generated_at,
        "last_update": snapshot.last_update,
        "total_articles": snapshot.total_articles,
        "articles": [doc.to_dict() for doc in snapshot.documents],
    }

    # 2. Push it to the running server
    print(f"Pushing to {server_url}/load-data...")
    async with httpx.AsyncClient(timeout=120) as client:
        resp = await client.post(f"{server_url}/load-data", json=payload)

    if resp.status_code != 200:
        print(f"Load failed ({resp.status_code}): {resp.text}")
        sys.exit(1)

    print(f"Done! Server now holds {resp.json()['articles']} articles.")

if __name__ == "__main__":
    asyncio.run(main())
