import asyncio
import json
import os
import sys

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "backend")))

from app.services.audit_runner import AuditRunner

async def main(url: str):
    print(f"Running audit for {url}...")
    
    runner = AuditRunner()
    result = await runner.run(url, job_id="debug-job-123")
    
    print(f"Status: {result.status}")
    if result.error:
        print(f"Error: {result.error}")
        return
    
    print(f"Manifest: {result.manifest_url or 'none linked'}")
    print(result.title)
    print(json.dumps(result.product.to_report(), indent=2))

if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "https://web.dev/"))
