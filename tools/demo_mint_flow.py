import json, os, sys
import requests
from fairgate.signatures import generate_wallet, sign_message

BASE = os.getenv("FAIRGATE_URL", "http://127.0.0.1:8000")

wallet, seed = generate_wallet()
if len(sys.argv) == 3:
    wallet, seed = sys.argv[1], sys.argv[2]
print("Wallet:", wallet)

challenge = requests.post(BASE + "/api/challenge", json={"wallet": wallet}, timeout=10).json()
print("Challenge message:\n" + challenge["message"])

signature = sign_message(seed, challenge["message"].encode("utf-8"))

resp = requests.post(BASE + "/api/permit", json={
    "wallet": wallet,
    "challenge_token": challenge["token"],
    "signature": signature,
}, timeout=30)
print("Permit:", resp.status_code, json.dumps(resp.json(), indent=2))
if resp.status_code != 200:
    raise SystemExit(1)

mint = requests.post(BASE + "/api/mint", json={"permit": resp.json()["permit"]}, timeout=10)
print("Mint:", mint.status_code, mint.text)
