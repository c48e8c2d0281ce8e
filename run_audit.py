import httpx
import json
import time
import sys

API_BASE = "http://localhost:8000/api/v1"
DEFAULT_URL = "https://web.dev/"

def run_audit(target_url: str):
    print(f"Starting installability audit for {target_url}...")
    try:
        resp = httpx.post(f"{API_BASE}/audit", json={"url": target_url}, timeout=30.0)
        resp.raise_for_status()
        job_id = resp.json()["job_id"]
        print(f"Audit started. Job ID: {job_id}")

        # Poll
        while True:
            status_resp = httpx.get(f"{API_BASE}/audit/{job_id}", timeout=10.0)
            status_resp.raise_for_status()
            job_data = status_resp.json()
            status = job_data["status"]
            print(f"Status: {status}")

            if status == "completed":
                break
            elif status == "failed":
                print(f"Audit failed: {job_data.get('error')}")
                return
            
            time.sleep(1)

        report = job_data["report"]
        print(job_data["title"])
        if not report["rawValue"]:
            print(report["explanation"])
        print(json.dumps(report["details"], indent=2))

    except httpx.HTTPError as e:
        print(f"Error: {e}")

if __name__ == "__main__":
    run_audit(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL)
