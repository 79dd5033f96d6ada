"""Manual smoke run against a local server (uvicorn src.main:app --port 8000).

Prints every response; nothing is asserted. ADMIN_TOKEN must be an operator
token, e.g. from src.dg_gateway.auth.jwt_handler.create_admin_token("ops").
WALLET / MARKET_ID should point at something that exists on the configured
cluster for the sync section to show real data.
"""
import json
import os
import urllib.error
import urllib.request

BASE = os.environ.get("API_BASE", "http://localhost:8000/api/v1")
ADMIN_TOKEN = os.environ.get("ADMIN_TOKEN", "")
WALLET = os.environ.get("WALLET", "11111111111111111111111111111111")
MARKET_ID = os.environ.get("MARKET_ID", "0")


def request(method, path, body=None, token=None, params=None):
    url = f"{BASE}{path}"
    if params:
        url += "?" + "&".join(f"{k}={v}" for k, v in params.items())
    data = json.dumps(body).encode() if body is not None else None
    req = urllib.request.Request(
        url, data=data, method=method, headers={"Content-Type": "application/json"}
    )
    if token:
        req.add_header("Authorization", f"Bearer {token}")
    try:
        with urllib.request.urlopen(req) as r:
            return json.loads(r.read())
    except urllib.error.HTTPError as e:
        return json.loads(e.read())


def post(path, body=None, token=None):
    return request("POST", path, body if body is not None else {}, token)


def get(path, token=None, params=None):
    return request("GET", path, token=token, params=params)


def section(title):
    print(f"\n{'='*60}")
    print(f"### {title} ###")
    print('='*60)


def label(name):
    print(f"\n--- {name} ---")


def out(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ── S1 Sync ───────────────────────────────────────────────────
section("S1 — SYNC")

label("S1-1: Sync a position")
out(post("/sync", {"market_id": MARKET_ID, "wallet": WALLET}))

label("S1-2: Sync with a buy delta of 0.1 SOL")
out(post("/sync", {"market_id": MARKET_ID, "wallet": WALLET, "cost_basis_delta": 100_000_000}))

label("S1-3: Sync with a malformed wallet (expect 1001)")
out(post("/sync", {"market_id": MARKET_ID, "wallet": "not-a-wallet"}))

label("S1-4: Sync with a negative market id (expect 1002)")
out(post("/sync", {"market_id": -1, "wallet": WALLET}))

label("S1-5: Read the mirrored position")
out(get("/sync/position", params={"market_id": MARKET_ID, "wallet": WALLET}))

# ── S2 Settlement ─────────────────────────────────────────────
section("S2 — SETTLEMENT")

label("S2-1: Claim quote")
out(get(f"/settlement/markets/{MARKET_ID}/claims/{WALLET}"))

label("S2-2: Claim preflight")
out(post(f"/settlement/markets/{MARKET_ID}/claims/{WALLET}/preflight"))

label("S2-3: Creator payout")
out(get(f"/settlement/markets/{MARKET_ID}/creator"))

label("S2-4: Unknown market (expect 3001)")
out(get(f"/settlement/markets/999999999/claims/{WALLET}"))

# ── S3 Admin ──────────────────────────────────────────────────
section("S3 — ADMIN")

label("S3-1: Sweep without a token (expect 2001)")
out(post("/admin/resolution/sweep"))

label("S3-2: Sweep with an invalid token (expect 2001)")
out(post("/admin/resolution/sweep", token="invalid.token.here"))

if ADMIN_TOKEN:
    label("S3-3: Sync ledger config")
    out(post("/admin/ledger/config/sync", token=ADMIN_TOKEN))

    label("S3-4: Run a resolution sweep")
    out(post("/admin/resolution/sweep", token=ADMIN_TOKEN))

    label("S3-5: Resolution logs")
    out(get(f"/admin/markets/{MARKET_ID}/resolution-logs", token=ADMIN_TOKEN, params={"limit": 5}))
else:
    print("\nADMIN_TOKEN not set, skipping authenticated admin calls")

print("\n\n=== ALL SMOKE CALLS COMPLETE ===\n")
