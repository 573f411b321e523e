import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"

def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False

def start_server(env=None):
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "tracker.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
    )

def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()

def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(env={**os.environ, "DB_ECHO": "True"})  # Enable echo to see SQL
    
    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Register Parcel
        print("\n--- [Step 2] Registering Parcel (Persistence Test) ---")
        resp = httpx.post(
            f"{BASE_URL}{API_PREFIX}/parcels",
            json={"client": 1000, "address": "persistence street 1"},
        )
        if resp.status_code != 201:
            print(f"❌ Registration Failed: {resp.status_code} {resp.text}")
            raise Exception("Registration failed")
        parcel = resp.json()
        print("✅ Parcel Registered Successfully")
        print(parcel)

        # 3. Send it, so the address is locked
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/parcels/{parcel['number']}/advance")
        if resp.status_code != 200 or resp.json()["status"] != "sent":
            raise Exception(f"Advance failed: {resp.status_code} {resp.text}")
        print("✅ Parcel Sent")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)
    
    time.sleep(2) # Wait for port release

    # 4. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        # 5. Read back
        print("\n--- [Step 5] Reading Parcel (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/parcels/{parcel['number']}")
        if resp.status_code != 200 or resp.json()["status"] != "sent":
            print(f"❌ Read Failed (Persistence Issue?): {resp.status_code} {resp.text}")
            raise Exception("Parcel lost after restart")
        print("✅ Parcel Persisted")
        print(resp.json())

        # 6. Status gate survives restart
        print("\n--- [Step 6] Verifying Address Lock ---")
        resp = httpx.patch(
            f"{BASE_URL}{API_PREFIX}/parcels/{parcel['number']}/address",
            json={"address": "somewhere else"},
        )
        if resp.status_code == 409:
            print("✅ Address change refused for sent parcel")
        else:
            print(f"❌ Address change not refused: {resp.status_code} {resp.text}")

    finally:
        print("\n--- [Step 7] Stopping Server ---")
        stop_server(proc2)

if __name__ == "__main__":
    run_verification()
