"""
End-to-end smoke client for a running recipe service:
- Health + model availability
- Batch generation of the three persona recipes
- Recipe detail generation and lookup
- Feedback submission
- Streaming generation over the websocket

Requires:
  pip install requests websockets

Default base_url: http://127.0.0.1:8076
"""
import argparse
import asyncio
import json
import sys
import time
import uuid
from typing import Any, Dict, List
from urllib.parse import urlparse

import requests
import websockets


DEFAULT_INPUT: Dict[str, Any] = {
    "theme": "Spring vegetables",
    "cooking_time": "30min",
    "difficulty": "beginner",
    "special_requests": ["vegetarian"],
    "avoid_ingredients": "peanuts",
    "priority": "quick",
}


def _pp(title: str, obj: Any):
    print(f"\n===== {title} =====")
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _post(base_url: str, path: str, payload: Dict[str, Any], timeout: int = 300) -> requests.Response:
    url = f"{base_url.rstrip('/')}{path}"
    return requests.post(url, json=payload, timeout=timeout)


def _get(base_url: str, path: str, timeout: int = 30) -> requests.Response:
    url = f"{base_url.rstrip('/')}{path}"
    return requests.get(url, timeout=timeout)


def _ws_url_from_base(base_url: str) -> str:
    """
    http://127.0.0.1:8076 -> ws://127.0.0.1:8076
    https://x.y -> wss://x.y
    """
    p = urlparse(base_url)
    scheme = "wss" if p.scheme == "https" else "ws"
    netloc = p.netloc or p.path  # handle cases where only host:port is passed
    return f"{scheme}://{netloc}"


def test_health(base_url: str):
    r = _get(base_url, "/health")
    _pp("Health", {"status_code": r.status_code, "response": r.json()})
    r = _get(base_url, "/health/model")
    _pp("Model", {"status_code": r.status_code, "response": r.json()})


def test_generate(base_url: str, recipe_input: Dict[str, Any]) -> List[Dict[str, Any]]:
    print("\n############################")
    print("# TEST 1: GENERATE (batch)")
    print("############################")
    r = _post(base_url, "/v1/recipes/generate", recipe_input)
    body = r.json()
    _pp("Generate", {"status_code": r.status_code, "response": body})
    return body.get("data") or []


def test_detail(base_url: str, recipe: Dict[str, Any]) -> Dict[str, Any]:
    print("\n############################")
    print("# TEST 2: DETAIL + LOOKUP")
    print("############################")
    r = _post(base_url, "/v1/recipes/detail", {
        "recipe_id": recipe["id"],
        "title": recipe["title"],
        "persona": recipe["persona"],
    })
    _pp("Detail", {"status_code": r.status_code, "response": r.json()})

    # The write is asynchronous; give the queue a moment.
    time.sleep(1.0)
    r = _get(base_url, f"/v1/recipes/{recipe['id']}")
    _pp("Lookup", {"status_code": r.status_code, "response": r.json()})
    return r.json()


def test_feedback(base_url: str, recipe_id: str):
    print("\n############################")
    print("# TEST 3: FEEDBACK")
    print("############################")
    r = _post(base_url, "/v1/feedback", {
        "recipe_id": recipe_id,
        "reasons": ["tasty", "easy"],
        "comment": "Would cook again",
        "future_interest": "interested",
        "rating": 5,
    })
    _pp("Feedback", {"status_code": r.status_code, "response": r.json()})

    r = _post(base_url, "/v1/feedback", {"recipe_id": recipe_id, "reasons": [], "future_interest": "interested"})
    _pp("Feedback (invalid)", {"status_code": r.status_code, "response": r.json()})


async def test_stream(base_url: str, recipe_input: Dict[str, Any], *, timeout: int = 300) -> Dict[str, Any]:
    """
    Sends one generate-recipes message and listens until recipe-complete or recipe-error.
    """
    print("\n############################")
    print("# TEST 4: GENERATE (stream)")
    print("############################")
    uri = f"{_ws_url_from_base(base_url)}/v1/recipes/stream"
    request_id = f"req-{uuid.uuid4().hex[:8]}"
    completed: Dict[str, Any] = {}
    err = None

    async with websockets.connect(uri, ping_interval=None) as ws:
        await ws.send(json.dumps({"type": "generate-recipes", "request_id": request_id, "input": recipe_input}))
        start = time.time()
        while (time.time() - start) < timeout:
            data = json.loads(await ws.recv())
            typ = data.get("type")
            if typ == "recipe-chunk":
                chunk = data["chunk"]
                if chunk["status"] == "progress":
                    sys.stdout.write(f"\r{chunk['persona']:>8}: {chunk['progress']:5.1f}%")
                    sys.stdout.flush()
                elif chunk["status"] == "completed":
                    completed[chunk["persona"]] = chunk["recipe"]
                    print(f"\n[{chunk['persona']}] {chunk['recipe']['title']}")
                elif chunk["status"] == "error":
                    print(f"\n[{chunk['persona']}] failed")
            elif typ == "recipe-complete":
                break
            elif typ == "recipe-error":
                err = data.get("error")
                sys.stdout.write(f"\n[ERROR] {err}\n")
                break

    return {"ok": err is None, "error": err, "recipes": completed}


# ==============================
# main
# ==============================

def main():
    parser = argparse.ArgumentParser(description="Recipe service smoke test")
    parser.add_argument("--base-url", default="http://127.0.0.1:8076", help="API base URL")
    parser.add_argument("--theme", default=DEFAULT_INPUT["theme"])
    parser.add_argument("--skip-stream", action="store_true")
    args = parser.parse_args()

    recipe_input = dict(DEFAULT_INPUT, theme=args.theme)

    test_health(args.base_url)

    recipes = test_generate(args.base_url, recipe_input)
    if recipes:
        test_detail(args.base_url, recipes[0])
        test_feedback(args.base_url, recipes[0]["id"])

    if not args.skip_stream:
        res = asyncio.run(test_stream(args.base_url, recipe_input))
        _pp("Stream Result", {"ok": res["ok"], "error": res["error"], "personas": sorted(res["recipes"])})


if __name__ == "__main__":
    main()
